"""Error taxonomy for the bala documentation pipeline.

Every failure raised by a pipeline step carries a FailureCategory
so the orchestrator can turn it into a single BuildResult without
inspecting exception types.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class FailureCategory(StrEnum):
    """Why a build request failed."""

    SOURCE_NOT_FOUND = "source_not_found"
    BUILD_INFRASTRUCTURE = "build_infrastructure"
    UNCLASSIFIED = "unclassified"


class BaladocsError(Exception):
    """Base error carrying a failure category and context."""

    category: FailureCategory
    context: dict[str, str]

    def __init__(
        self,
        message: str,
        *,
        category: FailureCategory = FailureCategory.UNCLASSIFIED,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = {
            k: str(v) for k, v in (context or {}).items() if v is not None
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class SourceNotFoundError(BaladocsError):
    """The locator is malformed or the artifact cannot be located.

    A client input problem; callers should not retry.
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(
            message,
            category=FailureCategory.SOURCE_NOT_FOUND,
            context=context,
        )


class BuildInfrastructureError(BaladocsError):
    """A service side failure while building the artifact."""

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(
            message,
            category=FailureCategory.BUILD_INFRASTRUCTURE,
            context=context,
        )


class WorkspaceError(BuildInfrastructureError):
    """Temporary workspace could not be allocated."""


class FetchError(BuildInfrastructureError):
    """Artifact was located but could not be transferred or stored."""


class ArchiveOpenError(BuildInfrastructureError):
    """Artifact is not a readable zip archive."""


class ManifestNotFoundError(BuildInfrastructureError):
    """Archive has no package.json entry."""


class ManifestParseError(BuildInfrastructureError):
    """package.json is not a JSON object."""


class ManifestFieldError(BuildInfrastructureError):
    """package.json lacks a usable ballerina_version."""


class ToolchainNotFoundError(BuildInfrastructureError):
    """No installed toolchain matches the artifact version."""


class ProcessStartError(BuildInfrastructureError):
    """The toolchain binary could not be started."""


class ProcessTimeoutError(BuildInfrastructureError):
    """The toolchain process exceeded its configured timeout."""


class ProcessExitError(BuildInfrastructureError):
    """The toolchain process exited non-zero (only when configured)."""


__all__ = [
    "FailureCategory",
    "BaladocsError",
    "SourceNotFoundError",
    "BuildInfrastructureError",
    "WorkspaceError",
    "FetchError",
    "ArchiveOpenError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "ManifestFieldError",
    "ToolchainNotFoundError",
    "ProcessStartError",
    "ProcessTimeoutError",
    "ProcessExitError",
]
