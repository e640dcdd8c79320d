"""Toolchains command - list installed toolchains."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from baladocs.toolchain.resolver import ToolchainResolver

if TYPE_CHECKING:
    from baladocs.core.config import State


class ToolchainsCommand(BaseModel):
    """List toolchain installations under the configured root."""

    def run(self, state: State) -> int:
        root = state.config.toolchain.installations_root
        installations = ToolchainResolver(root).installations()
        if not installations:
            print(f"No toolchains installed under {root}")
            return 1
        for inst in installations:
            print(f"{inst.name}\t{inst.path}")
        return 0
