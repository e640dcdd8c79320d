"""Per-request workflow state and injected services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field

from baladocs.artifact.fetch import Fetcher
from baladocs.core.base import BaseState
from baladocs.core.workspace import Workspace, WorkspaceManager
from baladocs.runner.doc import DocRunner
from baladocs.toolchain.resolver import ToolchainResolver


class BuildState(BaseState):
    """State of one build, mutated as the graph advances.

    Closing the state releases the workspace, so running the graph
    inside `with state:` guarantees cleanup.
    """

    source: str = Field(description="Artifact URL")
    workspace: Workspace | None = Field(
        default=None,
        description="Set once the workspace is allocated",
    )
    toolchain_version: str | None = None
    toolchain_path: Path | None = None
    exit_code: int | None = None

    def details(self) -> dict:
        """Fields copied onto the BuildResult."""
        return {
            "toolchain_version": self.toolchain_version,
            "toolchain_path": self.toolchain_path,
            "exit_code": self.exit_code,
        }


@dataclass
class PipelineDeps:
    """Services the workflow nodes call."""

    workspaces: WorkspaceManager
    fetcher: Fetcher
    resolver: ToolchainResolver
    doc_runner: DocRunner
