"""Async MQTT client wrapper using aiomqtt."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import aiomqtt

from solar_automation.config.schema import MQTTConfig

logger = logging.getLogger(__name__)

# Type alias for message callback: (topic, payload) -> None
MessageCallback = Callable[[str, bytes], Coroutine[Any, Any, None]]


def _payload_bytes(payload: Any) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if payload is None:
        return b""
    return str(payload).encode()


class MQTTClient:
    """Long-lived MQTT connection with automatic reconnect.

    Subscriptions are topic filters (wildcards allowed) registered before
    run(); they are re-subscribed on every reconnect. Messages are handled
    one at a time, each callback running to completion before the next.
    """

    def __init__(self, config: MQTTConfig) -> None:
        self._config = config
        self._client: aiomqtt.Client | None = None
        self._subscriptions: dict[str, MessageCallback] = {}
        self._stop_event = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def subscribe(self, topic_filter: str, callback: MessageCallback) -> None:
        """Register a callback for every message matching topic_filter."""
        self._subscriptions[topic_filter] = callback

    async def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        """Publish once. Raises ConnectionError when offline, MqttError on failure."""
        client = self._client
        if client is None:
            raise ConnectionError("MQTT not connected")
        await client.publish(topic, payload, retain=retain)

    async def run(self) -> None:
        """Connect, subscribe and dispatch messages until stop() is called."""
        self._stop_event.clear()
        interval = self._config.reconnect_interval_seconds

        while not self._stop_event.is_set():
            try:
                await self._session()
            except aiomqtt.MqttError as e:
                logger.warning("MQTT connection lost: %s (retrying in %ds)", e, interval)
            finally:
                self._client = None

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        self._stop_event.set()

    async def _session(self) -> None:
        client = aiomqtt.Client(
            hostname=self._config.broker_host,
            port=self._config.broker_port,
            username=self._config.username or None,
            password=self._config.password or None,
        )
        async with client:
            self._client = client
            logger.info(
                "Connected to MQTT broker %s:%d",
                self._config.broker_host, self._config.broker_port,
            )
            for topic_filter in self._subscriptions:
                await client.subscribe(topic_filter)
                logger.info("Subscribed to %s", topic_filter)

            async for message in client.messages:
                await self._dispatch(message)
                if self._stop_event.is_set():
                    break

    async def _dispatch(self, message: aiomqtt.Message) -> None:
        topic = str(message.topic)
        payload = _payload_bytes(message.payload)
        for topic_filter, callback in self._subscriptions.items():
            if not message.topic.matches(topic_filter):
                continue
            try:
                await callback(topic, payload)
            except Exception:
                logger.exception("MQTT callback error for %s", topic)
