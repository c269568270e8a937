"""MQTT topic construction and parsing."""

from __future__ import annotations


def subscription_topic(prefix: str) -> str:
    """Wildcard filter covering every telemetry topic under the prefix."""
    return f"{prefix}/#"


def command_topic(prefix: str, key: str) -> str:
    """Topic a rule action or scheduled setting is published to."""
    return f"{prefix}/{key}"


def universal_topic(prefix: str, key: str) -> str:
    return f"{prefix}/universal/{key}"


def inverter_topic(prefix: str, key: str) -> str:
    return f"{prefix}/inverter/{key}"


def split_telemetry_topic(topic: str) -> tuple[str, str]:
    """Split a telemetry topic into (device_type, measurement).

    ``<prefix>/<device>/<part>/.../<part>/<suffix>``: the first and last
    segments are routing noise, the middle parts are joined with ``_``.
    A topic with no middle part (``<prefix>/<device>/<suffix>``) yields
    an empty measurement name.

        >>> split_telemetry_topic("solar_assistant_DEYE/inverter_1/pv_voltage/1/state")
        ('inverter_1', 'pv_voltage_1')

    Raises:
        ValueError: if the topic has no device segment.
    """
    parts = topic.split("/")
    if len(parts) < 3:
        raise ValueError(f"telemetry topic too short: {topic!r}")
    device_type = parts[1]
    measurement = "_".join(parts[2:-1])
    if not device_type:
        raise ValueError(f"telemetry topic has empty device: {topic!r}")
    return device_type, measurement
