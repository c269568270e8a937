"""Schedule engine: applies settings due in the current weekday hour."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from solar_automation.automation.models import ScheduledSetting, TickContext
from solar_automation.automation.store import RecordCollection
from solar_automation.control.command import CommandPublisher, PublishResult
from solar_automation.mqtt.topics import command_topic
from solar_automation.notify.events import ScheduledSettingApplied
from solar_automation.notify.hub import Notifier

logger = logging.getLogger(__name__)


@dataclass
class ScheduleApplication:
    setting_id: str
    key: str
    result: PublishResult


class ScheduleEngine:
    """Publishes each setting whose day and hour equal the tick's.

    Matching is per hour, so a setting is re-applied on every tick that
    falls inside its hour.
    """

    def __init__(
        self,
        schedules: RecordCollection[ScheduledSetting],
        publisher: CommandPublisher,
        notifier: Notifier,
        topic_prefix: str,
    ) -> None:
        self._schedules = schedules
        self._publisher = publisher
        self._notifier = notifier
        self._prefix = topic_prefix

    async def evaluate(self, tick: TickContext) -> list[ScheduleApplication]:
        applied: list[ScheduleApplication] = []
        for setting in self._schedules.records():
            try:
                if not setting.due_at(tick.day, tick.hour):
                    continue
                applied.append(await self._apply(setting))
            except Exception:
                logger.exception("Scheduled setting %s failed to apply", setting.id)
        return applied

    async def _apply(self, setting: ScheduledSetting) -> ScheduleApplication:
        result = await self._publisher.publish(
            command_topic(self._prefix, setting.key), setting.value,
        )
        logger.info("Scheduled setting applied: %s=%r", setting.key, setting.value)
        self._notifier.notify(ScheduledSettingApplied(key=setting.key, value=setting.value))
        return ScheduleApplication(setting_id=setting.id, key=setting.key, result=result)
