"""Automation records: rules, conditions, actions and scheduled settings.

Records are immutable; the API replaces a record wholesale on update.
Field names on the wire are camelCase (``deviceType``), attributes are
snake_case. Record shape is not validated here: missing fields fall
back to empty defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Sunday-first, matching the weekday indices used by compare_day.
WEEKDAYS: tuple[str, ...] = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


class Operator(str, Enum):
    """Numeric comparison operators for rule conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"


@dataclass(frozen=True)
class Condition:
    device_type: str
    parameter: str
    operator: str
    value: Any  # number or numeric string; parsed when evaluated

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            device_type=data.get("deviceType", ""),
            parameter=data.get("parameter", ""),
            operator=data.get("operator", ""),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "deviceType": self.device_type,
            "parameter": self.parameter,
            "operator": self.operator,
            "value": self.value,
        }


@dataclass(frozen=True)
class Action:
    key: str
    value: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        return cls(key=data.get("key", ""), value=data.get("value"))

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class AutomationRule:
    """Publishes its actions on listed days whenever all conditions hold."""

    id: str
    name: str = ""
    conditions: tuple[Condition, ...] = ()
    actions: tuple[Action, ...] = ()
    days: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutomationRule:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            conditions=tuple(Condition.from_dict(c) for c in data.get("conditions") or ()),
            actions=tuple(Action.from_dict(a) for a in data.get("actions") or ()),
            days=tuple(data.get("days") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
            "days": list(self.days),
        }

    def runs_on(self, day: str) -> bool:
        return day in self.days


@dataclass(frozen=True)
class ScheduledSetting:
    """Publishes one key/value during a given weekday hour."""

    id: str
    key: str = ""
    value: Any = None
    day: str = ""
    hour: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduledSetting:
        return cls(
            id=str(data["id"]),
            key=data.get("key") or "",
            value=data.get("value"),
            day=data.get("day") or "",
            hour=data.get("hour"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "day": self.day,
            "hour": self.hour,
        }

    def due_at(self, day: str, hour: int) -> bool:
        return self.day == day and self.hour == hour


@dataclass(frozen=True)
class TickContext:
    """Wall-clock facts for one evaluation pass, shared by both engines."""

    now: datetime
    day: str = field(init=False)
    day_index: int = field(init=False)
    hour: int = field(init=False)

    def __post_init__(self) -> None:
        # datetime.weekday() is Monday=0; shift to Sunday=0.
        index = (self.now.weekday() + 1) % 7
        object.__setattr__(self, "day_index", index)
        object.__setattr__(self, "day", WEEKDAYS[index])
        object.__setattr__(self, "hour", self.now.hour)
