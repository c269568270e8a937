"""Notification events fanned out to connected observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass(frozen=True)
class StateUpdate:
    type: ClassVar[str] = "stateUpdate"

    state: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "state": self.state}


@dataclass(frozen=True)
class AutomationRuleTriggered:
    type: ClassVar[str] = "automationRuleTriggered"

    rule_name: str
    actions: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "ruleName": self.rule_name, "actions": self.actions}


@dataclass(frozen=True)
class ScheduledSettingApplied:
    type: ClassVar[str] = "scheduledSettingApplied"

    key: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "key": self.key, "value": self.value}


@dataclass(frozen=True)
class AutomationLog:
    type: ClassVar[str] = "automationLog"

    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message}


Event = StateUpdate | AutomationRuleTriggered | ScheduledSettingApplied | AutomationLog
