"""Rule engine: fires automation rules whose day and conditions match."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from solar_automation.automation.evaluator import evaluate_all
from solar_automation.automation.models import AutomationRule, TickContext
from solar_automation.automation.store import RecordCollection
from solar_automation.control.command import CommandPublisher, PublishResult
from solar_automation.mqtt.topics import command_topic
from solar_automation.notify.events import AutomationRuleTriggered
from solar_automation.notify.hub import Notifier
from solar_automation.state.store import StateStore

logger = logging.getLogger(__name__)


@dataclass
class RuleFiring:
    """One rule that matched during a tick and what it published."""

    rule_id: str
    rule_name: str
    results: list[PublishResult] = field(default_factory=list)


class RuleEngine:
    """Evaluates every rule once per tick, in stored order.

    Level-triggered: a rule keeps firing on every tick for as long as it
    matches. A rule that raises is logged and skipped; the others still run.
    """

    def __init__(
        self,
        rules: RecordCollection[AutomationRule],
        state: StateStore,
        publisher: CommandPublisher,
        notifier: Notifier,
        topic_prefix: str,
    ) -> None:
        self._rules = rules
        self._state = state
        self._publisher = publisher
        self._notifier = notifier
        self._prefix = topic_prefix

    async def evaluate(self, tick: TickContext) -> list[RuleFiring]:
        fired: list[RuleFiring] = []
        for rule in self._rules.records():
            try:
                if not self._matches(rule, tick):
                    continue
                fired.append(await self._fire(rule))
            except Exception:
                logger.exception("Rule %s (%s) failed to evaluate", rule.id, rule.name)
        return fired

    def _matches(self, rule: AutomationRule, tick: TickContext) -> bool:
        if not rule.runs_on(tick.day):
            return False
        return evaluate_all(rule.conditions, self._state)

    async def _fire(self, rule: AutomationRule) -> RuleFiring:
        logger.info("Rule triggered: %s (%d actions)", rule.name, len(rule.actions))
        firing = RuleFiring(rule_id=rule.id, rule_name=rule.name)
        for action in rule.actions:
            result = await self._publisher.publish(
                command_topic(self._prefix, action.key), action.value,
            )
            firing.results.append(result)

        self._notifier.notify(AutomationRuleTriggered(
            rule_name=rule.name,
            actions=[a.to_dict() for a in rule.actions],
        ))
        return firing
