"""Workflow nodes, one per pipeline step.

AllocateWorkspace -> FetchArtifact -> ReadVersion ->
ResolveToolchain -> RunDocBuild -> End

A step signals failure by raising a BaladocsError; the graph run
stops there and DocsPipeline turns the error into a BuildResult.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from baladocs.artifact.manifest import read_toolchain_version
from baladocs.core.errors import ToolchainNotFoundError
from baladocs.core.log import logger
from baladocs.core.result import BuildResult
from baladocs.workflow.state import BuildState, PipelineDeps

Ctx = GraphRunContext[BuildState, PipelineDeps]


@dataclass
class AllocateWorkspace(BaseNode[BuildState, PipelineDeps, BuildResult]):
    """Create the request's temporary directory."""

    async def run(self, ctx: Ctx) -> FetchArtifact:
        ctx.state.workspace = ctx.deps.workspaces.allocate()
        return FetchArtifact()


@dataclass
class FetchArtifact(BaseNode[BuildState, PipelineDeps, BuildResult]):
    """Download the bala into the workspace."""

    async def run(self, ctx: Ctx) -> ReadVersion:
        workspace = ctx.state.workspace
        with logger.span("Fetching bala", url=ctx.state.source):
            ctx.deps.fetcher.fetch(ctx.state.source, workspace.artifact_path)
        return ReadVersion()


@dataclass
class ReadVersion(BaseNode[BuildState, PipelineDeps, BuildResult]):
    """Read the toolchain version from the bala manifest."""

    async def run(self, ctx: Ctx) -> ResolveToolchain:
        version = read_toolchain_version(ctx.state.workspace.artifact_path)
        logger.info("Bala built with toolchain", version=version)
        ctx.state.toolchain_version = version
        return ResolveToolchain()


@dataclass
class ResolveToolchain(BaseNode[BuildState, PipelineDeps, BuildResult]):
    """Find an installed toolchain for the version."""

    async def run(self, ctx: Ctx) -> RunDocBuild:
        resolver = ctx.deps.resolver
        path = resolver.resolve(ctx.state.toolchain_version)
        if path is None:
            raise ToolchainNotFoundError(
                "unable to locate ballerina dist",
                version=ctx.state.toolchain_version,
                root=resolver.installations_root,
            )
        ctx.state.toolchain_path = path
        return RunDocBuild()


@dataclass
class RunDocBuild(BaseNode[BuildState, PipelineDeps, BuildResult]):
    """Run the toolchain's doc command against the bala."""

    async def run(self, ctx: Ctx) -> End[BuildResult]:
        workspace = ctx.state.workspace
        outcome = ctx.deps.doc_runner.run(
            ctx.state.toolchain_path,
            workspace.artifact_path,
            cwd=workspace.root,
        )
        ctx.state.exit_code = outcome.exit_code
        return End(BuildResult.ok(ctx.state.source, **ctx.state.details()))
