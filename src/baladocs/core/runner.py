"""Command execution using invoke."""

from __future__ import annotations

import shlex
from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from baladocs.core.log import logger


def quote_command(argv: list[str]) -> str:
    """Join argv into a shell-safe command string."""
    return ' '.join(shlex.quote(str(part)) for part in argv)


class Runner(Context):
    """invoke.Context with a single execute() entry point.

    Output is streamed to this process's stdout/stderr while the
    command runs, unless capture is requested.
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        env: dict[str, str] | None = None,
        capture: bool = False,
    ) -> Result:
        """Run command and wait for it to finish.

        Args:
            command: Shell command string
            cwd: Working directory
            timeout: Seconds before the command is killed
            env: Variables added to the inherited environment
            capture: Hide output instead of streaming it live

        Returns:
            invoke.Result; exited is -1 when the timeout fired.
            A non-zero exit status never raises.
        """
        kwargs = {
            "hide": capture,
            "warn": True,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if env:
            kwargs["env"] = env

        logger.trace("Executing command", command=command, cwd=str(cwd or ""))
        if cwd:
            # One Runner serves concurrent builds; Context.cd() is shared state.
            command = f"cd {shlex.quote(str(cwd))} && {command}"
        try:
            result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1

        return result
