"""Inverter type profiles and universal settings held in memory."""

from __future__ import annotations

import copy
import logging
from typing import Any

from solar_automation.config.schema import InverterConfig

logger = logging.getLogger(__name__)


class UnknownInverterType(KeyError):
    pass


class DuplicateInverterType(ValueError):
    pass


class InverterProfiles:
    """Known inverter types, the selected type, and universal settings.

    Seeded from configuration at startup; edits through the API are not
    written back to disk.
    """

    def __init__(self, config: InverterConfig) -> None:
        self._types: dict[str, dict[str, Any]] = copy.deepcopy(config.types)
        self._universal: dict[str, Any] = copy.deepcopy(config.universal)
        self._current_type = config.default_type
        self._current_settings: dict[str, Any] = dict(self._types.get(config.default_type, {}))
        if config.default_type not in self._types:
            logger.warning("Default inverter type %s has no profile", config.default_type)

    # ── Universal settings ──────────────────────────────

    @property
    def universal(self) -> dict[str, Any]:
        return dict(self._universal)

    def update_universal(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Merge updates into the universal settings and return the result."""
        self._universal.update(updates)
        return self.universal

    # ── Current selection ───────────────────────────────

    @property
    def current_type(self) -> str:
        return self._current_type

    @property
    def current_settings(self) -> dict[str, Any]:
        return dict(self._current_settings)

    def select(self, type_name: str, settings: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make type_name current, merging settings into its stored profile."""
        if type_name not in self._types:
            raise UnknownInverterType(type_name)
        merged = {**self._types[type_name], **(settings or {})}
        self._types[type_name] = merged
        self._current_type = type_name
        self._current_settings = dict(merged)
        logger.info("Inverter type set to %s", type_name)
        return self.current_settings

    # ── Type catalogue ──────────────────────────────────

    def type_names(self) -> list[str]:
        return list(self._types)

    def get_type(self, type_name: str) -> dict[str, Any]:
        if type_name not in self._types:
            raise UnknownInverterType(type_name)
        return dict(self._types[type_name])

    def add_type(self, type_name: str, settings: dict[str, Any]) -> None:
        if type_name in self._types:
            raise DuplicateInverterType(type_name)
        self._types[type_name] = dict(settings)
        logger.info("Inverter type %s added", type_name)

    def update_type(self, type_name: str, settings: dict[str, Any]) -> dict[str, Any]:
        if type_name not in self._types:
            raise UnknownInverterType(type_name)
        self._types[type_name] = {**self._types[type_name], **settings}
        return dict(self._types[type_name])

    def remove_type(self, type_name: str) -> None:
        if type_name not in self._types:
            raise UnknownInverterType(type_name)
        del self._types[type_name]
        logger.info("Inverter type %s removed", type_name)
