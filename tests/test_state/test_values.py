"""Tests for telemetry value parsing."""

from __future__ import annotations

import math

import pytest

from solar_automation.state.values import Numeric, Text, parse_float, parse_value, to_value


class TestParseValue:
    @pytest.mark.parametrize("payload,expected", [
        ("42", 42.0),
        ("-1500", -1500.0),
        ("3.14", 3.14),
        (" 12.5 ", 12.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("+7", 7.0),
    ])
    def test_numeric_payloads(self, payload: str, expected: float) -> None:
        assert parse_value(payload) == Numeric(expected)

    @pytest.mark.parametrize("payload", [
        "Selling first", "", "12abc", "nan", "1_000", "0x10", "true",
    ])
    def test_non_numeric_kept_verbatim(self, payload: str) -> None:
        assert parse_value(payload) == Text(payload)

    @pytest.mark.parametrize("payload", ["Infinity", "-Infinity", "1e999"])
    def test_infinity_is_numeric(self, payload: str) -> None:
        value = parse_value(payload)
        assert isinstance(value, Numeric)
        assert math.isinf(value.value)

    @pytest.mark.parametrize("payload", ["inf", "infinity", "INFINITY", "-inf"])
    def test_other_infinity_spellings_are_text(self, payload: str) -> None:
        assert parse_value(payload) == Text(payload)

    def test_non_finite_serialises_as_null(self) -> None:
        assert parse_value("1e999").to_json() is None
        assert parse_value("-Infinity").to_json() is None
        assert parse_value("12.5").to_json() == 12.5


class TestParseFloat:
    def test_accepts_numbers(self) -> None:
        assert parse_float(5) == 5.0
        assert parse_float(2.5) == 2.5
        assert parse_float("2000") == 2000.0

    def test_rejects_bool_none_and_nan(self) -> None:
        assert parse_float(True) is None
        assert parse_float(None) is None
        assert parse_float(float("nan")) is None


class TestToValue:
    def test_wraps_plain_values(self) -> None:
        assert to_value(123.4) == Numeric(123.4)
        assert to_value("Discharging") == Text("Discharging")
        assert to_value("55") == Numeric(55.0)

    def test_passes_through_wrapped(self) -> None:
        value = Text("x")
        assert to_value(value) is value

    def test_as_float(self) -> None:
        assert Numeric(1.5).as_float() == 1.5
        assert Text("1.5").as_float() is None
