"""Tests for the Server-Sent Events stream."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from solar_automation.dashboard.routes import sse
from solar_automation.notify.events import AutomationRuleTriggered
from solar_automation.notify.hub import NotificationHub
from solar_automation.state.ingestor import TelemetryIngestor
from solar_automation.state.store import StateStore


def _request(hub: NotificationHub, state_store: StateStore, disconnected: bool = False):
    app = SimpleNamespace(state=SimpleNamespace(hub=hub, state_store=state_store))
    return SimpleNamespace(app=app, is_disconnected=AsyncMock(return_value=disconnected))


def _strict_loads(frame: str) -> dict:
    """Decode one ``data:`` frame, rejecting tokens a browser JSON.parse would."""
    assert frame.startswith("data: ") and frame.endswith("\n\n")

    def reject(token: str):
        raise ValueError(f"non-JSON token {token}")

    return json.loads(frame[len("data: "):], parse_constant=reject)


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub()


@pytest.fixture
def store(hub: NotificationHub) -> StateStore:
    return StateStore(notifier=hub)


class TestEventStream:
    @pytest.mark.asyncio
    async def test_opens_with_state_then_streams_events(self, hub, store) -> None:
        response = await sse.event_stream(_request(hub, store))
        assert response.media_type == "text/event-stream"
        frames = response.body_iterator

        first = _strict_loads(await frames.__anext__())
        assert first["type"] == "stateUpdate"
        assert first["state"]["batterySOC"] == 0.0
        assert hub.observer_count == 1

        hub.notify(AutomationRuleTriggered(
            rule_name="Sell when sunny",
            actions=[{"key": "work_mode/set", "value": "Selling first"}],
        ))
        event = _strict_loads(await frames.__anext__())
        assert event == {
            "type": "automationRuleTriggered",
            "ruleName": "Sell when sunny",
            "actions": [{"key": "work_mode/set", "value": "Selling first"}],
        }

        await frames.aclose()
        assert hub.observer_count == 0

    @pytest.mark.asyncio
    async def test_disconnect_unsubscribes(self, hub, store) -> None:
        response = await sse.event_stream(_request(hub, store, disconnected=True))
        frames = [frame async for frame in response.body_iterator]

        assert len(frames) == 1
        assert hub.observer_count == 0

    @pytest.mark.asyncio
    async def test_keepalive_when_idle(self, hub, store, monkeypatch) -> None:
        monkeypatch.setattr(sse, "KEEPALIVE_SECONDS", 0.01)
        response = await sse.event_stream(_request(hub, store))
        frames = response.body_iterator

        await frames.__anext__()
        assert await frames.__anext__() == ": keepalive\n\n"
        await frames.aclose()

    @pytest.mark.asyncio
    async def test_overflowing_reading_stays_valid_json(self, hub, store) -> None:
        response = await sse.event_stream(_request(hub, store))
        frames = response.body_iterator
        await frames.__anext__()

        TelemetryIngestor(store).ingest("solar_assistant_DEYE/total/pv_power/state", b"1e999")
        update = _strict_loads(await frames.__anext__())

        assert update["state"]["solarPower"] is None
        assert update["state"]["total"]["pv_power"] is None
        await frames.aclose()
