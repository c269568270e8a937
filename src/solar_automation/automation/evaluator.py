"""Condition evaluation against the live state snapshot.

Rules only use numeric conditions today. compare_time and compare_day
back the time-of-day and day-of-week condition types and are kept
usable on their own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, time

from solar_automation.automation.models import WEEKDAYS, Condition, Operator
from solar_automation.state.store import StateStore
from solar_automation.state.values import TelemetryValue, parse_float

logger = logging.getLogger(__name__)

EQUALITY_EPSILON = 0.001

_DAY_INDEX = {name.lower(): index for index, name in enumerate(WEEKDAYS)}


def resolve_parameter(
    state: StateStore, device_type: str, parameter: str,
) -> TelemetryValue | None:
    """Find the value a condition refers to.

    Device-scoped readings win; otherwise the parameter is looked up as
    an aggregate scalar (e.g. ``batterySOC``).
    """
    value = state.get(device_type, parameter)
    if value is not None:
        return value
    return state.get_derived(parameter)


def compare_numeric(actual: float, operator: str, expected: float) -> bool:
    """Compare two numbers; equality is within EQUALITY_EPSILON."""
    try:
        op = Operator(operator)
    except ValueError:
        logger.warning("Unknown operator: %s", operator)
        return False

    if op is Operator.EQUALS:
        return abs(actual - expected) < EQUALITY_EPSILON
    if op is Operator.NOT_EQUALS:
        return abs(actual - expected) >= EQUALITY_EPSILON
    if op is Operator.GREATER_THAN:
        return actual > expected
    if op is Operator.LESS_THAN:
        return actual < expected
    if op is Operator.GREATER_THAN_OR_EQUAL:
        return actual >= expected
    return actual <= expected


def compare_time(actual: datetime | time, operator: str, expected: str) -> bool:
    """Compare a clock time against ``HH:MM`` at minute resolution.

    Operators: equals, notEquals, after, before.
    """
    try:
        hours, minutes = (int(part) for part in expected.split(":"))
    except (AttributeError, ValueError):
        logger.warning("Invalid time for comparison: %r", expected)
        return False

    actual_minutes = actual.hour * 60 + actual.minute
    expected_minutes = hours * 60 + minutes

    if operator == "equals":
        return actual_minutes == expected_minutes
    if operator == "notEquals":
        return actual_minutes != expected_minutes
    if operator == "after":
        return actual_minutes > expected_minutes
    if operator == "before":
        return actual_minutes < expected_minutes
    logger.warning("Unknown operator for time comparison: %s", operator)
    return False


def compare_day(actual_day: int, operator: str, expected_day: str) -> bool:
    """Compare a Sunday-first weekday index against a day name (any case)."""
    expected_index = _DAY_INDEX.get(str(expected_day).lower())
    if expected_index is None:
        logger.warning("Invalid day: %s", expected_day)
        return False

    if operator == "equals":
        return actual_day == expected_index
    if operator == "notEquals":
        return actual_day != expected_index
    logger.warning("Unknown operator for day comparison: %s", operator)
    return False


def evaluate(condition: Condition, state: StateStore) -> bool:
    """Check one numeric condition against the state."""
    value = resolve_parameter(state, condition.device_type, condition.parameter)
    if value is None:
        logger.warning("Unknown parameter: %s.%s", condition.device_type, condition.parameter)
        return False

    actual = value.as_float()
    if actual is None:
        logger.warning(
            "Non-numeric value for %s.%s: %r",
            condition.device_type, condition.parameter, value.to_json(),
        )
        return False

    expected = parse_float(condition.value)
    if expected is None:
        logger.warning(
            "Non-numeric threshold for %s.%s: %r",
            condition.device_type, condition.parameter, condition.value,
        )
        return False

    return compare_numeric(actual, condition.operator, expected)


def evaluate_all(conditions: Iterable[Condition], state: StateStore) -> bool:
    """AND over all conditions; an empty set is satisfied."""
    for condition in conditions:
        if not evaluate(condition, state):
            logger.debug("Condition not met: %s", condition)
            return False
    return True
