"""Configuration management for Solar Automation."""

from solar_automation.config.schema import AppConfig
from solar_automation.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
