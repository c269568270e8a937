"""Live snapshot of device telemetry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from solar_automation.notify.events import StateUpdate
from solar_automation.notify.hub import Notifier
from solar_automation.state.values import Numeric, TelemetryValue

logger = logging.getLogger(__name__)

TOTAL_DEVICE = "total"

# total.<measurement> -> derived scalar field name
DERIVED_FIELDS: dict[str, str] = {
    "battery_power": "batteryPower",
    "battery_state_of_charge": "batterySOC",
    "grid_power": "gridPower",
    "load_power": "loadPower",
    "pv_power": "solarPower",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StateStore:
    """Latest value per (device, measurement), plus aggregate scalars.

    The aggregate scalars (batteryPower, batterySOC, gridPower, loadPower,
    solarPower) start at 0 and afterwards only ever hold the last value
    written to the matching ``total`` measurement.

    Every apply() pushes the full snapshot to the notifier.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._notifier = notifier
        self._clock = clock
        self._devices: dict[str, dict[str, TelemetryValue]] = {}
        self._derived: dict[str, TelemetryValue] = {
            name: Numeric(0.0) for name in DERIVED_FIELDS.values()
        }
        self._time = clock()

    @property
    def time(self) -> datetime:
        """When the store was last written to."""
        return self._time

    @property
    def devices(self) -> list[str]:
        return list(self._devices)

    def apply(self, device_type: str, measurement: str, value: TelemetryValue) -> None:
        """Upsert one reading, creating the device bucket on first sight."""
        self._devices.setdefault(device_type, {})[measurement] = value
        self._time = self._clock()

        if device_type == TOTAL_DEVICE:
            derived_name = DERIVED_FIELDS.get(measurement)
            if derived_name is not None:
                self._derived[derived_name] = value

        if self._notifier is not None:
            self._notifier.notify(StateUpdate(state=self.snapshot()))

    def get(self, device_type: str, measurement: str) -> TelemetryValue | None:
        return self._devices.get(device_type, {}).get(measurement)

    def get_derived(self, name: str) -> TelemetryValue | None:
        return self._derived.get(name)

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready copy of the whole store."""
        snap: dict[str, Any] = {
            device: {name: value.to_json() for name, value in readings.items()}
            for device, readings in self._devices.items()
        }
        for name, value in self._derived.items():
            snap[name] = value.to_json()
        snap["time"] = self._time.isoformat()
        return snap
