"""Async evaluation loop driving the rule and schedule engines."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from solar_automation.automation.models import TickContext
from solar_automation.automation.rules import RuleEngine, RuleFiring
from solar_automation.automation.schedule import ScheduleApplication, ScheduleEngine
from solar_automation.config.schema import AutomationConfig
from solar_automation.logging.context import log_context
from solar_automation.timezone_utils import make_clock

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What a single evaluation pass did."""

    tick: TickContext
    rules_fired: list[RuleFiring] = field(default_factory=list)
    settings_applied: list[ScheduleApplication] = field(default_factory=list)


@dataclass
class LoopState:
    """Snapshot of the evaluation loop state."""

    tick_count: int = 0
    last_tick_at: datetime | None = None
    last_rules_fired: int = 0
    last_settings_applied: int = 0
    is_running: bool = False


class EvaluationLoop:
    """Runs rules then schedules back to back on a fixed interval.

    Both engines see the same TickContext, so a pass that straddles an
    hour or midnight boundary is judged against a single instant.
    """

    def __init__(
        self,
        config: AutomationConfig,
        rule_engine: RuleEngine,
        schedule_engine: ScheduleEngine,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._rule_engine = rule_engine
        self._schedule_engine = schedule_engine
        self._clock = clock or make_clock(config.timezone)
        self._state = LoopState()
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> LoopState:
        return self._state

    async def run(self) -> None:
        """Tick until stop() is called. The first tick happens after one interval."""
        self._state.is_running = True
        self._stop_event.clear()
        interval = self._config.evaluation_interval_seconds
        logger.info("Evaluation loop starting (interval: %ds)", interval)

        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                    break  # stop_event was set
                except asyncio.TimeoutError:
                    pass
                await self._tick()
        finally:
            self._state.is_running = False
            logger.info("Evaluation loop stopped after %d ticks", self._state.tick_count)

    def stop(self) -> None:
        """Signal the loop to stop."""
        self._stop_event.set()

    async def tick_once(self, now: datetime | None = None) -> TickReport:
        """Execute a single pass immediately, optionally at a given instant."""
        return await self._tick(now)

    async def _tick(self, now: datetime | None = None) -> TickReport:
        self._state.tick_count += 1
        tick = TickContext(now=now or self._clock())
        self._state.last_tick_at = tick.now
        report = TickReport(tick=tick)
        tick_start = time.monotonic()

        with log_context(tick=self._state.tick_count):
            try:
                report.rules_fired = await self._rule_engine.evaluate(tick)
            except Exception:
                logger.exception("Rule evaluation failed")
            try:
                report.settings_applied = await self._schedule_engine.evaluate(tick)
            except Exception:
                logger.exception("Schedule evaluation failed")

            self._state.last_rules_fired = len(report.rules_fired)
            self._state.last_settings_applied = len(report.settings_applied)
            elapsed_ms = int((time.monotonic() - tick_start) * 1000)
            log_fn = logger.info if report.rules_fired or report.settings_applied else logger.debug
            log_fn(
                "Tick %d: %s %02d:00 rules_fired=%d settings_applied=%d elapsed=%dms",
                self._state.tick_count, tick.day, tick.hour,
                len(report.rules_fired), len(report.settings_applied), elapsed_ms,
            )
        return report
