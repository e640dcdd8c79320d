#!/usr/bin/env python3
"""baladocs CLI - generate API docs for bala artifacts."""

import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from baladocs.command import BuildCommand, ToolchainsCommand
from baladocs.core.config import State


class CliState(State):
    """Generate documentation for Ballerina bala artifacts.

    A bala is downloaded into a temporary workspace, the toolchain
    version it was built with is read from its package.json, and the
    matching installed toolchain runs its doc command on it.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.toolchain.installations_root)
    2. Environment variables
       (BALADOCS_CONFIG__TOOLCHAIN__INSTALLATIONS_ROOT=/opt/dists)
    3. .env file
    4. --include files, ./baladocs.yaml, user config, package defaults
    """

    build: CliSubCommand[BuildCommand]
    toolchains: CliSubCommand[ToolchainsCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)
        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        self.config.setup_logging()
        with self.config:
            exit_code = subcommand.run(self)
        raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
