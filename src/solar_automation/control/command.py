"""Outbound command publishing with explicit results."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Coroutine

from solar_automation.notify.events import AutomationLog
from solar_automation.notify.hub import Notifier

logger = logging.getLogger(__name__)

# Async transport send: (topic, payload) -> None, raising on failure.
PublishFn = Callable[[str, str], Coroutine[Any, Any, None]]


class PublishError(Exception):
    """A value could not be turned into a publishable payload."""


@dataclass
class PublishResult:
    """Outcome of a single publish attempt."""

    topic: str
    success: bool
    payload: str | None = None
    message: str = ""


def serialize_value(value: Any) -> str:
    """Strings go out verbatim; everything else as JSON text."""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and math.isnan(value):
        raise PublishError("refusing to publish NaN")
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise PublishError(f"value is not JSON serialisable: {e}") from e


class CommandPublisher:
    """Sends (topic, value) commands to the bus, one attempt each.

    Failures are logged here and reported in the result; nothing is
    retried or raised to the caller. Successful publishes are echoed to
    observers as automationLog events.
    """

    def __init__(self, publish_fn: PublishFn, notifier: Notifier | None = None) -> None:
        self._publish = publish_fn
        self._notifier = notifier

    async def publish(self, topic: str, value: Any) -> PublishResult:
        try:
            payload = serialize_value(value)
        except PublishError as e:
            logger.warning("Skipping publish to %s: %s", topic, e)
            return PublishResult(topic=topic, success=False, message=str(e))

        try:
            await self._publish(topic, payload)
        except Exception as e:
            logger.error("Error publishing to %s: %s", topic, e)
            return PublishResult(topic=topic, success=False, payload=payload, message=str(e))

        logger.info("Published to %s: %s", topic, payload)
        if self._notifier is not None:
            self._notifier.notify(AutomationLog(message=f"Published to {topic}: {payload}"))
        return PublishResult(topic=topic, success=True, payload=payload)
