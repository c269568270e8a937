"""Pydantic configuration models for all system settings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MQTTConfig(BaseModel):
    enabled: bool = True
    broker_host: str = "localhost"
    broker_port: int = 1883
    username: str = ""
    password: str = ""
    topic_prefix: str = "solar_assistant_DEYE"
    reconnect_interval_seconds: int = 5


class AutomationConfig(BaseModel):
    evaluation_interval_seconds: int = Field(60, ge=1)
    timezone: str = ""  # IANA name; empty = host local time


def _default_inverter_types() -> dict[str, dict[str, Any]]:
    return {
        "Deye": {
            "workMode": ["Selling first", "Zero Export to Load", "Selling first"],
            "solarExportWhenBatteryFull": True,
            "energyPattern": ["Load First", "Battery First"],
            "maxSellPower": 5000,
        },
        "MPP": {},
    }


def _default_universal() -> dict[str, Any]:
    return {
        "maxBatteryDischargePower": 500,
        "gridChargeOn": False,
        "generatorChargeOn": False,
        "dischargeVoltage": 48.0,
    }


class InverterConfig(BaseModel):
    """Startup values for inverter profiles and universal settings.

    Runtime edits made through the API live in memory only.
    """
    default_type: str = "Deye"
    types: dict[str, dict[str, Any]] = Field(default_factory=_default_inverter_types)
    universal: dict[str, Any] = Field(default_factory=_default_universal)


class DashboardConfig(BaseModel):
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    event_queue_size: int = Field(100, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file: str = ""


class AppConfig(BaseModel):
    """Root configuration model containing all system settings."""

    mqtt: MQTTConfig = MQTTConfig()
    automation: AutomationConfig = AutomationConfig()
    inverter: InverterConfig = InverterConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()
