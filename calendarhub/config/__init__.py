"""Configuration management."""

from .settings import CalendarHubSettings, LoggingSettings, get_settings, reset_settings

__all__ = ["CalendarHubSettings", "LoggingSettings", "get_settings", "reset_settings"]
