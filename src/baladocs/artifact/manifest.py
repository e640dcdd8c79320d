"""Read the package manifest embedded in a bala archive."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from baladocs.core.errors import (
    ArchiveOpenError,
    ManifestFieldError,
    ManifestNotFoundError,
    ManifestParseError,
)

MANIFEST_ENTRY = "package.json"


def normalize_version(version: str) -> str:
    """Drop any pre-release or build suffix: 2201.4.1-rc1 -> 2201.4.1."""
    return version.split("-", 1)[0]


class ArtifactManifest(BaseModel):
    """The package.json record of a bala."""

    model_config = ConfigDict(extra="allow")

    ballerina_version: str = Field(min_length=1)
    organization: str | None = None
    name: str | None = None
    version: str | None = None
    platform: str | None = None

    @field_validator("ballerina_version")
    @classmethod
    def _has_release_part(cls, value: str) -> str:
        if not normalize_version(value).strip():
            raise ValueError("version has no release part")
        return value

    @property
    def toolchain_version(self) -> str:
        return normalize_version(self.ballerina_version)


def read_manifest(archive_path: Path) -> ArtifactManifest:
    """Parse the manifest of the bala at archive_path.

    Raises:
        ArchiveOpenError: Not a readable zip archive
        ManifestNotFoundError: No package.json entry
        ManifestParseError: package.json is not a JSON object
        ManifestFieldError: ballerina_version missing or not a string
    """
    try:
        with zipfile.ZipFile(archive_path) as archive:
            try:
                raw = archive.read(MANIFEST_ENTRY)
            except KeyError as e:
                raise ManifestNotFoundError(
                    f"bala has no {MANIFEST_ENTRY}", path=archive_path
                ) from e
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveOpenError(
            f"unable to open bala archive: {e}", path=archive_path
        ) from e

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestParseError(
            f"invalid {MANIFEST_ENTRY}: {e}", path=archive_path
        ) from e
    if not isinstance(data, dict):
        raise ManifestParseError(
            f"{MANIFEST_ENTRY} is not a JSON object", path=archive_path
        )

    try:
        return ArtifactManifest.model_validate(data)
    except ValidationError as e:
        raise ManifestFieldError(
            f"{MANIFEST_ENTRY} has no usable ballerina_version: "
            f"{e.errors()[0]['msg']}",
            path=archive_path,
        ) from e


def read_toolchain_version(archive_path: Path) -> str:
    """Toolchain version a bala was built with, without suffix."""
    return read_manifest(archive_path).toolchain_version
