"""CLI command modules for baladocs."""

from baladocs.command.build import BuildCommand
from baladocs.command.toolchains import ToolchainsCommand

__all__ = ["BuildCommand", "ToolchainsCommand"]
