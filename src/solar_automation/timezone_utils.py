"""Wall-clock helpers for schedule and rule evaluation."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_timezone(tz_name: str) -> tzinfo | None:
    """Resolve an IANA name; None means the host's local time.

    An unknown name is logged and also falls back to local time.
    """
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using host local time", tz_name)
        return None


def make_clock(tz_name: str = "") -> Callable[[], datetime]:
    """Return a zero-argument callable giving the current aware local time."""
    tz = resolve_timezone(tz_name)

    def _now() -> datetime:
        if tz is None:
            return datetime.now().astimezone()
        return datetime.now(tz)

    return _now
