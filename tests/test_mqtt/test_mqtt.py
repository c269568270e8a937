"""Tests for MQTT topics and the client wrapper."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from solar_automation.config.schema import MQTTConfig
from solar_automation.mqtt.client import MQTTClient
from solar_automation.mqtt.topics import (
    command_topic,
    inverter_topic,
    split_telemetry_topic,
    subscription_topic,
    universal_topic,
)


# ── Topics Tests ──────────────────────────────────────────────


class TestTopics:
    def test_subscription_wildcard(self) -> None:
        assert subscription_topic("solar_assistant_DEYE") == "solar_assistant_DEYE/#"

    def test_command_topic(self) -> None:
        assert command_topic("solar_assistant_DEYE", "inverter_1/work_mode/set") == (
            "solar_assistant_DEYE/inverter_1/work_mode/set"
        )

    def test_settings_topics(self) -> None:
        assert universal_topic("p", "gridChargeOn") == "p/universal/gridChargeOn"
        assert inverter_topic("p", "maxSellPower") == "p/inverter/maxSellPower"

    @pytest.mark.parametrize("topic,expected", [
        ("solar_assistant_DEYE/total/pv_power/state", ("total", "pv_power")),
        ("solar_assistant_DEYE/battery_1/state_of_charge/state", ("battery_1", "state_of_charge")),
        ("solar_assistant_DEYE/inverter_1/pv_voltage/1/state", ("inverter_1", "pv_voltage_1")),
        ("a/inverter_2/grid/power/ct/state", ("inverter_2", "grid_power_ct")),
        ("solar_assistant_DEYE/total/state", ("total", "")),
    ])
    def test_split_telemetry_topic(self, topic: str, expected: tuple[str, str]) -> None:
        assert split_telemetry_topic(topic) == expected

    @pytest.mark.parametrize("topic", ["", "a/b", "a//pv/state", "a//state"])
    def test_split_rejects_topics_without_device(self, topic: str) -> None:
        with pytest.raises(ValueError):
            split_telemetry_topic(topic)


# ── Client Tests ──────────────────────────────────────────────


def _message(topic: str, payload, matches: bool = True) -> MagicMock:
    message = MagicMock()
    message.topic.__str__.return_value = topic
    message.topic.matches.return_value = matches
    message.payload = payload
    return message


class TestClient:
    def test_starts_disconnected(self) -> None:
        client = MQTTClient(MQTTConfig())
        assert client.is_connected is False

    @pytest.mark.asyncio
    async def test_publish_when_offline_raises(self) -> None:
        client = MQTTClient(MQTTConfig())
        with pytest.raises(ConnectionError):
            await client.publish("p/x", "1")

    @pytest.mark.asyncio
    async def test_publish_uses_live_connection(self) -> None:
        client = MQTTClient(MQTTConfig())
        client._client = MagicMock()
        client._client.publish = AsyncMock()

        await client.publish("p/x", "1")
        client._client.publish.assert_awaited_once_with("p/x", "1", retain=False)

    @pytest.mark.asyncio
    async def test_dispatch_to_matching_filter(self) -> None:
        client = MQTTClient(MQTTConfig())
        callback = AsyncMock()
        client.subscribe("solar_assistant_DEYE/#", callback)

        await client._dispatch(_message("solar_assistant_DEYE/total/pv_power/state", b"3000"))
        callback.assert_awaited_once_with("solar_assistant_DEYE/total/pv_power/state", b"3000")

    @pytest.mark.asyncio
    async def test_dispatch_skips_non_matching(self) -> None:
        client = MQTTClient(MQTTConfig())
        callback = AsyncMock()
        client.subscribe("other/#", callback)

        await client._dispatch(_message("solar_assistant_DEYE/total/pv_power/state", b"1", matches=False))
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_dispatch_normalises_payload(self) -> None:
        client = MQTTClient(MQTTConfig())
        callback = AsyncMock()
        client.subscribe("#", callback)

        await client._dispatch(_message("p/total/x/state", 42))
        callback.assert_awaited_once_with("p/total/x/state", b"42")

    @pytest.mark.asyncio
    async def test_callback_error_is_contained(self) -> None:
        client = MQTTClient(MQTTConfig())
        client.subscribe("#", AsyncMock(side_effect=RuntimeError("bad handler")))
        # Should not raise
        await client._dispatch(_message("p/total/x/state", b"1"))
