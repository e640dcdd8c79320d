"""Request and result value objects."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from baladocs.core.errors import BaladocsError, FailureCategory

SUPPORTED_SCHEMES = ("http", "https", "file")


def validate_source_url(source: str) -> str:
    """Return source stripped, or raise ValueError if it is not an
    absolute URL we can fetch."""
    source = source.strip()
    try:
        parts = urlsplit(source)
        parts.port  # noqa: B018 - raises on an invalid port
    except ValueError as e:
        raise ValueError(f"malformed URL: {e}") from e

    if not parts.scheme:
        raise ValueError("URL has no scheme")
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise ValueError(f"unsupported URL scheme '{parts.scheme}'")
    if parts.scheme.lower() == "file":
        if not parts.path:
            raise ValueError("file URL has no path")
    elif not parts.hostname:
        raise ValueError("URL has no host")
    return source


class BuildRequest(BaseModel):
    """One documentation build request."""

    source: str = Field(description="URL of the bala artifact")

    @field_validator("source")
    @classmethod
    def _check_source(cls, value: str) -> str:
        return validate_source_url(value)


class BuildResult(BaseModel):
    """Single outcome of a build request."""

    success: bool
    source: str
    payload: dict[str, Any] | None = None
    category: FailureCategory | None = None
    message: str | None = None
    exit_code: int | None = None
    toolchain_version: str | None = None
    toolchain_path: Path | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def ok(cls, source: str, **details: Any) -> BuildResult:
        return cls(
            success=True,
            source=source,
            payload={"apiDocJsons": []},
            **details,
        )

    @classmethod
    def failure(
        cls,
        source: str,
        error: BaseException,
        **details: Any,
    ) -> BuildResult:
        """Build a failure result from the exception that ended the run."""
        category = (
            error.category if isinstance(error, BaladocsError)
            else FailureCategory.UNCLASSIFIED
        )
        return cls(
            success=False,
            source=source,
            category=category,
            message=f"error occurred generating docs: {source}: {error}",
            **details,
        )

    def to_response(self) -> dict[str, Any]:
        """Body handed to the transport layer."""
        if self.success:
            return dict(self.payload or {})
        return {"message": self.message, "category": str(self.category)}
