"""Application configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from baladocs.core.base import BaseConfig
from baladocs.core.log import Logger
from baladocs.core.yaml_settings import YamlWithIncludesSettingsSource

# Modules available for template substitution in YAML files
# Usage: {platformdirs.user_state_dir}, {os.getcwd}, {Path.home}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}


class ToolchainConfig(BaseConfig):
    """Installed toolchains and how to invoke them."""

    installations_root: Path = Field(
        default=Path("/dists"),
        description=(
            "Directory whose immediate subdirectories are toolchain "
            "installations (e.g. /dists/ballerina-2201.4.1)"
        ),
    )
    binary: str = Field(
        default="bin/bal",
        description="Executable path relative to an installation",
    )
    subcommand: str = Field(
        default="doc",
        description="Toolchain subcommand that generates documentation",
    )
    timeout: int | None = Field(
        default=None,
        description="Seconds before the toolchain process is killed "
        "(unset waits forever)",
    )
    fail_on_nonzero_exit: bool = Field(
        default=False,
        description="Treat a non-zero toolchain exit status as a "
        "build failure",
    )


class FetchConfig(BaseConfig):
    """Artifact download settings."""

    timeout: float = Field(
        default=60.0,
        description="Network timeout in seconds",
    )
    follow_redirects: bool = Field(default=True)
    chunk_size: int = Field(
        default=64 * 1024,
        description="Bytes per streamed chunk",
    )


class WorkspaceConfig(BaseConfig):
    """Per-request temporary workspace settings."""

    temp_root: Path | None = Field(
        default=None,
        description="Parent of request workspaces (system temp dir "
        "when unset)",
    )
    prefix: str = Field(
        default="bala-",
        description="Workspace directory name prefix",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger | None = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)

    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "baladocs"
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )

    def setup_logging(self) -> None:
        """Install the global logger from this configuration."""
        from baladocs.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            level=self.logger.level,
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
        )

    def close(self):
        """Close the global logger, then the closeable children."""
        from baladocs.core.log import close_logger

        close_logger()
        super().close()


class State(BaseSettings):
    """Settings root: configuration loaded from every source.

    Sources, highest priority first: constructor arguments, CLI
    arguments (when parsed through CliApp), environment variables
    (BALADOCS_CONFIG__TOOLCHAIN__BINARY=...), .env, YAML files,
    secrets directory.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to merge over the defaults. "
            "Use --include on the CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BALADOCS_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Replace {config.*}, {os.*}, {platformdirs.*} templates."""
        self._substitute_recursive(self)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i, item in enumerate(obj):
                obj[i] = self._substitute_value(item)

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            substituted = self._substitute_string(value)
            return value if substituted == value else substituted
        if isinstance(value, Path):
            substituted = self._substitute_string(str(value))
            return value if substituted == str(value) else Path(substituted)
        if isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
        return value

    def _substitute_string(self, value: str) -> str:
        """Expand {dotted.path} references.

        Examples:
            "{platformdirs.user_state_dir}"
            -> "/home/user/.local/state/baladocs"
            "{config.toolchain.installations_root}/extra"
            -> "/dists/extra"
        """
        def replace_template(match):
            parts = match.group(1).split(".")
            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    obj = (
                        obj('baladocs', appauthor=False)
                        if obj.__module__.startswith('platformdirs')
                        else obj()
                    )
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z_]+(?:\.[a-z_]+)+)\}', replace_template, value)


__all__ = [
    "State",
    "Config",
    "ToolchainConfig",
    "FetchConfig",
    "WorkspaceConfig",
]
