"""In-memory collections of automation rules and scheduled settings."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Generic, Protocol, TypeVar

from solar_automation.automation.models import AutomationRule, ScheduledSetting

logger = logging.getLogger(__name__)


class RecordNotFound(KeyError):
    """No record with the requested id."""


class _Record(Protocol):
    id: str

    def to_dict(self) -> dict[str, Any]:
        ...


R = TypeVar("R", bound=_Record)


class RecordCollection(Generic[R]):
    """Ordered records keyed by an id assigned at creation.

    Ids never change: updates merge new fields over the stored record
    but always keep the original id.
    """

    def __init__(self, kind: str, factory: Callable[[dict[str, Any]], R]) -> None:
        self._kind = kind
        self._factory = factory
        self._records: list[R] = []

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[R]:
        """All records in insertion order."""
        return list(self._records)

    def get(self, record_id: str) -> R:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFound(f"{self._kind} {record_id} not found")

    def add(self, data: dict[str, Any]) -> R:
        record = self._factory({**data, "id": uuid.uuid4().hex})
        self._records.append(record)
        logger.info("Created %s %s", self._kind, record.id)
        return record

    def update(self, record_id: str, updates: dict[str, Any]) -> R:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                merged = {**record.to_dict(), **updates, "id": record.id}
                self._records[index] = self._factory(merged)
                logger.info("Updated %s %s", self._kind, record_id)
                return self._records[index]
        raise RecordNotFound(f"{self._kind} {record_id} not found")

    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False if it did not exist."""
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        removed = len(self._records) < before
        if removed:
            logger.info("Deleted %s %s", self._kind, record_id)
        return removed


class AutomationStore:
    """Owns the rule and schedule collections for the process lifetime."""

    def __init__(self) -> None:
        self.rules: RecordCollection[AutomationRule] = RecordCollection(
            "automation rule", AutomationRule.from_dict,
        )
        self.schedules: RecordCollection[ScheduledSetting] = RecordCollection(
            "scheduled setting", ScheduledSetting.from_dict,
        )
