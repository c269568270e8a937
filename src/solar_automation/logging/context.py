"""Log context enrichment utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def bind_context(**kwargs: object) -> None:
    """Bind key-value pairs to the current logging context (task-local)."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear the current logging context."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: object) -> Iterator[None]:
    """Bind keys for the duration of a block, then unbind exactly those keys."""
    bind_context(**kwargs)
    try:
        yield
    finally:
        unbind_context(*kwargs)
