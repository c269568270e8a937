"""Telemetry value types.

A reading is either a number or, when the payload is not a numeric
literal, the raw text the device sent (e.g. "Selling first", "Discharging").
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Union

_NUMERIC_LITERAL = re.compile(
    r"""^[+-]?(?:
        (?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?
        |Infinity
    )$""",
    re.VERBOSE,
)


@dataclass(frozen=True)
class Numeric:
    value: float

    def as_float(self) -> float | None:
        return self.value

    def to_json(self) -> float | None:
        # JSON has no token for infinity
        return self.value if math.isfinite(self.value) else None


@dataclass(frozen=True)
class Text:
    value: str

    def as_float(self) -> float | None:
        return None

    def to_json(self) -> str:
        return self.value


TelemetryValue = Union[Numeric, Text]


def parse_float(raw: Any) -> float | None:
    """Parse a number or numeric literal, returning None when it is not one.

    Booleans and NaN are never numbers here.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not _NUMERIC_LITERAL.match(text):
            return None
        number = float(text)
    else:
        return None
    return None if math.isnan(number) else number


def parse_value(text: str) -> TelemetryValue:
    """Classify a payload string as Numeric or Text."""
    number = parse_float(text)
    if number is None:
        return Text(text)
    return Numeric(number)


def to_value(raw: Any) -> TelemetryValue:
    """Wrap an already-decoded value (number or string) as a TelemetryValue."""
    if isinstance(raw, (Numeric, Text)):
        return raw
    if isinstance(raw, str):
        return parse_value(raw)
    number = parse_float(raw)
    if number is None:
        return Text(str(raw))
    return Numeric(number)
