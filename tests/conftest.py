"""Shared test fixtures for Solar Automation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from solar_automation.automation.store import AutomationStore
from solar_automation.config.manager import ConfigManager
from solar_automation.config.schema import AppConfig
from solar_automation.control.command import CommandPublisher
from solar_automation.state.store import StateStore

PREFIX = "solar_assistant_DEYE"


class RecordingNotifier:
    """Notifier that keeps every event it is given."""

    def __init__(self) -> None:
        self.events: list = []

    def notify(self, event) -> int:
        self.events.append(event)
        return 1

    def of_type(self, type_name: str) -> list:
        return [e for e in self.events if e.type == type_name]


@pytest.fixture
def config() -> AppConfig:
    """Provide a default test configuration."""
    return AppConfig()


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Provide a config manager with test paths."""
    defaults = tmp_path / "config.defaults.yaml"
    defaults.write_text("mqtt:\n  enabled: false\n")
    user = tmp_path / "config.yaml"
    mgr = ConfigManager(defaults_path=defaults, user_path=user)
    mgr.load()
    return mgr


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def state(notifier: RecordingNotifier) -> StateStore:
    return StateStore(notifier=notifier)


@pytest.fixture
def automation() -> AutomationStore:
    return AutomationStore()


@pytest.fixture
def publish_fn() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def publisher(publish_fn: AsyncMock, notifier: RecordingNotifier) -> CommandPublisher:
    return CommandPublisher(publish_fn, notifier=notifier)

