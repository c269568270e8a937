"""Configuration loading from layered YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from solar_automation.config.schema import AppConfig

logger = logging.getLogger(__name__)

DEFAULTS_FILENAME = "config.defaults.yaml"
USER_FILENAME = "config.yaml"


class ConfigError(Exception):
    """Raised when the merged configuration fails validation."""


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, returning a new dict.

    Nested mappings are merged key by key; any other value in override
    replaces the one in base outright (lists are not concatenated).
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merge_dicts(current, value)
        else:
            result[key] = value
    return result


class ConfigManager:
    """Builds AppConfig from a defaults file overlaid with a user file.

    Either file may be missing; a missing file contributes nothing.
    """

    def __init__(
        self,
        defaults_path: Path | None = None,
        user_path: Path | None = None,
    ) -> None:
        self._defaults_path = defaults_path or Path(DEFAULTS_FILENAME)
        self._user_path = user_path or Path(USER_FILENAME)
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded. Call load() first.")
        return self._config

    @property
    def user_path(self) -> Path:
        return self._user_path

    def load(self) -> AppConfig:
        """Read both layers, merge, and validate."""
        merged = merge_dicts(
            self._read_yaml(self._defaults_path),
            self._read_yaml(self._user_path),
        )
        try:
            config = AppConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        self._config = config
        logger.info(
            "Configuration loaded (defaults=%s user=%s)",
            self._defaults_path, self._user_path,
        )
        return config

    def to_json(self) -> str:
        return self.config.model_dump_json(indent=2)

    def save_user_config(self, updates: dict[str, Any]) -> AppConfig:
        """Merge updates into the user file on disk and reload."""
        current = self._read_yaml(self._user_path)
        merged = merge_dicts(current, updates)
        self._user_path.write_text(
            yaml.safe_dump(merged, default_flow_style=False, sort_keys=False)
        )
        logger.info("User config updated: %s", ", ".join(sorted(updates)))
        return self.load()

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level is not a mapping", path)
            return {}
        return data
