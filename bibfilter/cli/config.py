"""Settings for the CLI.

Settings are a flat YAML mapping. Recognized keys are ``query_config``,
``case_insensitive``, ``search_fields`` and ``export_dir``.
"""

import os
from pathlib import Path
from typing import Any

import yaml

PROJECT_FILES = (".bibfilter.yaml", "bibfilter.yaml")
TRUE_VALUES = ("1", "true", "yes")


class Config:
    """Settings file discovery and loading."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load settings from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """User settings first, then project files in the working directory."""
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        user = xdg_config_home / "bibfilter" / "config.yaml"
        return [user, *(Path(name) for name in PROJECT_FILES)]


def load_config(extra: Path | None = None) -> dict[str, Any]:
    """Load settings from files and environment variables.

    Later files win for conflicting keys; ``extra`` (the ``--config``
    option) is applied last, then environment overrides.
    """
    settings: dict[str, Any] = {}

    for path in Config.get_config_paths():
        if path.exists():
            settings.update(Config.from_file(path))

    if extra is not None:
        settings.update(Config.from_file(extra))

    if query_config := os.environ.get("BIBFILTER_QUERY_CONFIG"):
        settings["query_config"] = query_config
    if case_sensitive := os.environ.get("BIBFILTER_CASE_SENSITIVE"):
        settings["case_insensitive"] = case_sensitive.lower() not in TRUE_VALUES

    return settings
