"""Solar Automation: telemetry-driven rule and schedule control for inverters."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("solar-automation")
except Exception:
    __version__ = "dev"
