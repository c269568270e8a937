"""Turns raw bus messages into State Store updates."""

from __future__ import annotations

import logging

from solar_automation.mqtt.topics import split_telemetry_topic
from solar_automation.state.store import StateStore
from solar_automation.state.values import parse_value

logger = logging.getLogger(__name__)


class TelemetryIngestor:
    """Parses (topic, payload) pairs and applies them to the store.

    A frame that cannot be parsed is logged and dropped; ingest never raises.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._received = 0
        self._dropped = 0

    @property
    def received(self) -> int:
        return self._received

    @property
    def dropped(self) -> int:
        return self._dropped

    def ingest(self, topic: str, payload: bytes | str) -> bool:
        """Apply one message. Returns False when the frame was dropped."""
        self._received += 1
        try:
            device_type, measurement = split_telemetry_topic(topic)
            text = payload.decode("utf-8") if isinstance(payload, bytes) else str(payload)
        except (ValueError, UnicodeDecodeError) as e:
            self._dropped += 1
            logger.warning("Dropping telemetry on %s: %s", topic, e)
            return False

        value = parse_value(text)
        logger.debug("Telemetry %s.%s = %r", device_type, measurement, value.to_json())
        self._store.apply(device_type, measurement, value)
        return True

    async def handle_message(self, topic: str, payload: bytes) -> None:
        """MQTT subscription callback."""
        self.ingest(topic, payload)
