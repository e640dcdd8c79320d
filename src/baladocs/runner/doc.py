"""Toolchain documentation runner."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from baladocs.core.errors import (
    ProcessExitError,
    ProcessStartError,
    ProcessTimeoutError,
)
from baladocs.core.log import logger
from baladocs.core.runner import Runner, quote_command


@dataclass(frozen=True)
class DocRunResult:
    """Outcome of one toolchain invocation."""

    command: list[str]
    exit_code: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class DocRunner:
    """Runs `<toolchain>/<binary> <subcommand> <artifact>`."""

    def __init__(
        self,
        binary: str = "bin/bal",
        subcommand: str = "doc",
        timeout: int | None = None,
        fail_on_nonzero_exit: bool = False,
        runner: Runner | None = None,
    ):
        self.binary = binary
        self.subcommand = subcommand
        self.timeout = timeout
        self.fail_on_nonzero_exit = fail_on_nonzero_exit
        self.runner = runner or Runner()

    def command(self, toolchain_path: Path, artifact_path: Path) -> list[str]:
        """argv for documenting artifact_path with toolchain_path."""
        return [
            str(toolchain_path.resolve() / self.binary),
            self.subcommand,
            str(artifact_path.resolve()),
        ]

    def run(
        self,
        toolchain_path: Path,
        artifact_path: Path,
        cwd: Path | None = None,
    ) -> DocRunResult:
        """Run the toolchain and wait for it to exit.

        Output goes straight to the console. The exit status is
        reported, not judged, unless fail_on_nonzero_exit is set.

        Raises:
            ProcessStartError: Binary missing, not executable, or the
                process could not be spawned
            ProcessTimeoutError: Timeout elapsed
            ProcessExitError: Non-zero exit with fail_on_nonzero_exit
        """
        argv = self.command(toolchain_path, artifact_path)
        binary = Path(argv[0])
        if not binary.is_file():
            raise ProcessStartError(
                "toolchain binary not found", path=binary
            )
        if not os.access(binary, os.X_OK):
            raise ProcessStartError(
                "toolchain binary is not executable", path=binary
            )

        logger.info("Running toolchain", command=argv, cwd=str(cwd or ""))
        try:
            result = self.runner.execute(
                quote_command(argv), cwd=cwd, timeout=self.timeout
            )
        except OSError as e:
            raise ProcessStartError(
                f"unable to start toolchain: {e}", path=binary
            ) from e

        if result.exited == -1 and self.timeout:
            raise ProcessTimeoutError(
                f"toolchain did not finish within {self.timeout}s",
                path=binary,
            )

        outcome = DocRunResult(command=argv, exit_code=result.exited)
        if not outcome.success:
            logger.warn(
                "Toolchain exited with non-zero status",
                exit_code=outcome.exit_code,
            )
            if self.fail_on_nonzero_exit:
                raise ProcessExitError(
                    f"toolchain exited with status {outcome.exit_code}",
                    path=binary,
                )
        return outcome
