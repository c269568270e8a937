"""Tests for the live state store."""

from __future__ import annotations

from datetime import datetime, timezone

from solar_automation.state.store import DERIVED_FIELDS, StateStore
from solar_automation.state.values import Numeric, Text


class TestApply:
    def test_creates_device_bucket(self, state: StateStore) -> None:
        state.apply("inverter_1", "pv_power", Numeric(1200.0))
        assert state.get("inverter_1", "pv_power") == Numeric(1200.0)
        assert "inverter_1" in state.devices

    def test_overwrites_existing_value(self, state: StateStore) -> None:
        state.apply("battery_1", "voltage", Numeric(51.0))
        state.apply("battery_1", "voltage", Numeric(52.5))
        assert state.get("battery_1", "voltage") == Numeric(52.5)

    def test_unknown_device_and_text_values_accepted(self, state: StateStore) -> None:
        state.apply("generator_7", "status", Text("Running"))
        assert state.get("generator_7", "status") == Text("Running")

    def test_total_mirrors_derived_scalar(self, state: StateStore) -> None:
        state.apply("total", "battery_power", Numeric(123.4))
        assert state.get("total", "battery_power") == Numeric(123.4)
        assert state.get_derived("batteryPower") == Numeric(123.4)

    def test_every_derived_mapping(self, state: StateStore) -> None:
        for i, (measurement, derived) in enumerate(DERIVED_FIELDS.items()):
            state.apply("total", measurement, Numeric(float(i + 1)))
            assert state.get_derived(derived) == Numeric(float(i + 1))

    def test_non_total_device_does_not_touch_derived(self, state: StateStore) -> None:
        state.apply("inverter_1", "pv_power", Numeric(999.0))
        assert state.get_derived("solarPower") == Numeric(0.0)

    def test_unmapped_total_measurement_only_stored(self, state: StateStore) -> None:
        state.apply("total", "battery_temperature", Numeric(30.0))
        assert state.get("total", "battery_temperature") == Numeric(30.0)
        assert state.get_derived("battery_temperature") is None

    def test_updates_time(self) -> None:
        instants = iter([
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 2, tzinfo=timezone.utc),
        ])
        store = StateStore(clock=lambda: next(instants))
        store.apply("total", "pv_power", Numeric(1.0))
        assert store.time == datetime(2024, 1, 2, tzinfo=timezone.utc)


class TestNotifications:
    def test_state_update_after_every_apply(self, state: StateStore, notifier) -> None:
        state.apply("total", "pv_power", Numeric(3000.0))
        state.apply("total", "load_power", Numeric(800.0))

        updates = notifier.of_type("stateUpdate")
        assert len(updates) == 2
        assert updates[-1].state["total"] == {"pv_power": 3000.0, "load_power": 800.0}
        assert updates[-1].state["solarPower"] == 3000.0

    def test_works_without_notifier(self) -> None:
        store = StateStore()
        store.apply("total", "pv_power", Numeric(1.0))
        assert store.get_derived("solarPower") == Numeric(1.0)


class TestSnapshot:
    def test_initial_snapshot(self, state: StateStore) -> None:
        snap = state.snapshot()
        assert snap["batteryPower"] == 0
        assert snap["batterySOC"] == 0
        assert "time" in snap

    def test_snapshot_unwraps_values(self, state: StateStore) -> None:
        state.apply("inverter_1", "work_mode", Text("Selling first"))
        state.apply("total", "battery_state_of_charge", Numeric(87.0))
        snap = state.snapshot()
        assert snap["inverter_1"]["work_mode"] == "Selling first"
        assert snap["batterySOC"] == 87.0

    def test_snapshot_is_a_copy(self, state: StateStore) -> None:
        state.apply("total", "pv_power", Numeric(1.0))
        snap = state.snapshot()
        snap["total"]["pv_power"] = 99
        assert state.get("total", "pv_power") == Numeric(1.0)
