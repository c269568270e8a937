"""In-process fan-out of notification events to observers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from solar_automation.notify.events import Event

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that accepts notification events.

    Returns the number of observers the event was queued for.
    """

    def notify(self, event: Event) -> int:
        ...


class NotificationHub:
    """Queues every event for each subscribed observer.

    Delivery is best-effort: an observer whose queue is full misses the
    event, other observers are unaffected.
    """

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._observers: list[asyncio.Queue[dict[str, Any]]] = []

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._queue_size)
        self._observers.append(queue)
        logger.info("Observer connected (%d total)", len(self._observers))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        try:
            self._observers.remove(queue)
        except ValueError:
            return
        logger.info("Observer disconnected (%d total)", len(self._observers))

    def notify(self, event: Event) -> int:
        payload = event.to_dict()
        delivered = 0
        for queue in list(self._observers):
            try:
                queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Observer queue full, dropping %s event", event.type)
        return delivered
