"""Locate installed toolchains by version."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from baladocs.core.log import logger

# Characters that can continue a version string; a match bordered by
# one of these is part of a longer version (2201.4.1 in 2201.4.10).
_VERSION_CHAR = r"[0-9A-Za-z.]"


@dataclass(frozen=True)
class ToolchainInstallation:
    """An installation directory under the installations root."""

    name: str
    path: Path


class ToolchainResolver:
    """Finds the installation matching an artifact's toolchain version.

    Installations are the immediate subdirectories of
    installations_root; the root is only ever read.
    """

    def __init__(self, installations_root: Path):
        self.installations_root = Path(installations_root)

    def installations(self) -> list[ToolchainInstallation]:
        """Installed toolchains sorted by name; empty if the root is
        missing or unreadable."""
        try:
            entries = [
                entry for entry in self.installations_root.iterdir()
                if entry.is_dir()
            ]
        except OSError as e:
            logger.warn(
                "Cannot list toolchain installations",
                root=str(self.installations_root),
                error=str(e),
            )
            return []
        return sorted(
            (ToolchainInstallation(name=e.name, path=e) for e in entries),
            key=lambda inst: inst.name,
        )

    def resolve(self, version: str) -> Path | None:
        """Path of the installation whose name contains version.

        When several names contain it, an exact name wins, then a
        match not embedded in a longer version, then the
        lexicographically first name. Returns None when nothing
        matches.
        """
        if not version:
            return None

        bounded = re.compile(
            rf"(?<!{_VERSION_CHAR}){re.escape(version)}(?!{_VERSION_CHAR})"
        )
        candidates = [
            inst for inst in self.installations() if version in inst.name
        ]
        if not candidates:
            logger.debug(
                "No toolchain matches version",
                version=version,
                root=str(self.installations_root),
            )
            return None

        def rank(inst: ToolchainInstallation) -> tuple[int, str]:
            if inst.name == version:
                return (0, inst.name)
            if bounded.search(inst.name):
                return (1, inst.name)
            return (2, inst.name)

        chosen = min(candidates, key=rank)
        logger.debug(
            "Resolved toolchain",
            version=version,
            path=str(chosen.path),
            candidates=len(candidates),
        )
        return chosen.path
