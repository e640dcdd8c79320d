"""YAML configuration loading with include directive support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

from baladocs.core.log import logger

CONFIG_FILENAME = "baladocs.yaml"
DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"


def cli_includes(argv: list[str] | None = None) -> list[str]:
    """Collect values of every --include option in argv."""
    argv = sys.argv[1:] if argv is None else argv
    includes = []
    for i, arg in enumerate(argv):
        if arg == "--include" and i + 1 < len(argv):
            includes.append(argv[i + 1])
        elif arg.startswith("--include="):
            includes.append(arg.split("=", 1)[1])
    return includes


def deep_merge(base: dict, override: dict) -> dict:
    """Return base with override merged in; override wins."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source layering several files.

    Merge order, lowest priority first:
        package defaults < user config < project config < --include
    Any file may name further files under an include: key; those
    are loaded first and the including file overrides them.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file=None,
        search_paths: list[Path] | None = None,
    ):
        self.search_paths = (
            search_paths if search_paths is not None
            else self.default_search_paths()
        )
        includes = cli_includes()
        super().__init__(settings_cls, yaml_file or includes or None)

    @staticmethod
    def default_search_paths() -> list[Path]:
        return [
            DEFAULTS_FILE,
            Path(user_config_dir("baladocs", appauthor=False))
            / CONFIG_FILENAME,
            Path(CONFIG_FILENAME),
        ]

    def _read_files(self, files):
        result = {}
        paths = list(self.search_paths)
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            paths.extend(Path(f).expanduser() for f in files)

        for path in paths:
            if not path.is_file():
                logger.debug("Configuration file not found", file=str(path))
                continue
            result = deep_merge(result, self._load_file_recursive(path, set()))
        return result

    def _load_file_recursive(self, filepath: Path, visited: set[Path]) -> dict:
        """Load filepath, resolving include: directives depth first.

        Raises:
            ValueError: If an include cycle is found
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, str):
            includes = [includes]

        merged: dict = {}
        for inc in includes:
            inc_path = Path(inc).expanduser()
            if not inc_path.is_absolute():
                inc_path = filepath.parent / inc_path
            merged = deep_merge(
                merged, self._load_file_recursive(inc_path, visited.copy())
            )
        return deep_merge(merged, data)
