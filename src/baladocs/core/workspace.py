"""Per-request temporary workspaces.

A workspace is a uniquely named directory holding the downloaded
artifact and the toolchain output. It is released on every exit
path of a build, so nothing outlives the request.
"""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path

from pydantic import Field, PrivateAttr

from baladocs.core.base import BaseState
from baladocs.core.errors import WorkspaceError
from baladocs.core.log import logger


def release(*paths: Path) -> None:
    """Delete each existing path recursively, deepest entries first.

    Never raises. Every entry that cannot be removed is logged and
    skipped, so one stuck file does not stop the rest of the cleanup.
    """
    for path in paths:
        if not os.path.lexists(path):
            continue

        if path.is_dir() and not path.is_symlink():
            for dirpath, dirnames, filenames in os.walk(path, topdown=False):
                for name in filenames:
                    _remove(Path(dirpath) / name, os.unlink)
                for name in dirnames:
                    entry = Path(dirpath) / name
                    _remove(entry, os.unlink if entry.is_symlink() else os.rmdir)
            _remove(path, os.rmdir)
        else:
            _remove(path, os.unlink)


def _remove(path: Path, remover) -> None:
    try:
        remover(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warn(
            "Failed to delete workspace entry",
            path=str(path),
            error=str(e),
        )


class Workspace(BaseState):
    """Filesystem paths owned by one build request.

    Only root exists after allocation; the artifact file and the
    output directory are created by the steps that need them.
    """

    root: Path = Field(description="Unique per-request directory")
    artifact_path: Path = Field(description="Downloaded bala file")
    output_dir: Path = Field(description="Toolchain output directory")

    _released: bool = PrivateAttr(default=False)

    @property
    def released(self) -> bool:
        return self._released

    def paths(self) -> tuple[Path, ...]:
        """Paths to release, children before the root."""
        return (self.artifact_path, self.output_dir, self.root)

    def close(self) -> None:
        """Release every path once; later calls do nothing."""
        if self._released:
            return
        self._released = True
        logger.debug("Releasing workspace", root=str(self.root))
        release(*self.paths())


class WorkspaceManager:
    """Allocates workspaces under a parent directory."""

    def __init__(self, temp_root: Path | None = None, prefix: str = "bala-"):
        """
        Args:
            temp_root: Parent directory for workspaces; the system
                temporary directory when None
            prefix: Directory name prefix
        """
        self.temp_root = temp_root
        self.prefix = prefix

    def allocate(self) -> Workspace:
        """Create a new workspace directory.

        The name combines a monotonic nanosecond counter with the
        random suffix from mkdtemp, so requests started in the same
        instant still get distinct directories.

        Raises:
            WorkspaceError: If the directory cannot be created
        """
        stamp = time.monotonic_ns()
        try:
            if self.temp_root is not None:
                self.temp_root.mkdir(parents=True, exist_ok=True)
            root = Path(tempfile.mkdtemp(
                prefix=f"{self.prefix}{stamp}-",
                dir=self.temp_root,
            )).resolve()
        except OSError as e:
            raise WorkspaceError(
                f"unable to create workspace: {e}",
                path=self.temp_root or tempfile.gettempdir(),
            ) from e

        workspace = Workspace(
            root=root,
            artifact_path=root / f"{stamp}.bala",
            output_dir=root / "target",
        )
        logger.debug("Allocated workspace", root=str(root))
        return workspace
