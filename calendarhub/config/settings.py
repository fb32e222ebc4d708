"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..categories.colors import DEFAULT_PERSON_COLORS
from ..categories.filters import DEFAULT_EXCLUDE_PATTERNS
from ..ics.window import DEFAULT_TIMEZONE
from ..sources.models import FeedSourceConfig

ENV_PREFIX = "CALENDARHUB_"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(
        default="DEBUG",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="calendarhub", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Maximum number of log files to keep")
    include_function_names: bool = Field(
        default=True, description="Include function names and line numbers in file logs"
    )

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class CalendarHubSettings(BaseSettings):
    """Application settings with environment variable support.

    Precedence: explicit constructor arguments, then ``CALENDARHUB_*``
    environment variables (and ``.env``), then the YAML config file, then
    the defaults below.
    """

    # Private attributes
    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)
    _loaded_config_file: Optional[Path] = PrivateAttr(default=None)

    # Feeds
    sources: list[FeedSourceConfig] = Field(
        default_factory=list, description="Calendar feeds to aggregate"
    )

    # Application Configuration
    app_name: str = Field(default="CalendarHub", description="Application name")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="Display timezone")

    # Expansion
    window_months_back: int = Field(default=6, ge=0, description="Months of history to expand")
    window_months_ahead: int = Field(default=12, ge=1, description="Months of future to expand")
    max_occurrences_per_rule: int = Field(
        default=500, ge=1, description="Occurrences expanded per recurring event at most"
    )
    max_rule_iterations: int = Field(
        default=50_000, ge=1, description="Recurrence starts scanned per recurring event at most"
    )

    # Categorization
    person_colors: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PERSON_COLORS),
        description="Colors forced for titles naming a person",
    )
    filter_excluded_events: bool = Field(
        default=True, description="Drop placeholder events such as busy/free slots"
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Case-insensitive regular expressions of placeholder titles",
    )

    # Network and Retry Settings
    transport_strategies: list[str] = Field(
        default_factory=lambda: ["{url}"],
        description="URL templates tried in order; {url} and {encoded_url} are substituted",
    )
    request_timeout: int = Field(default=30, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, description="Maximum retry attempts per strategy")
    retry_backoff_factor: float = Field(default=1.5, description="Exponential backoff factor")

    # Cache
    cache_enabled: bool = Field(default=True, description="Write refreshed occurrences to the cache")

    # File Paths
    config_path: Optional[Path] = Field(default=None, description="Explicit YAML config file")
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "calendarhub")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "calendarhub")

    # Logging Configuration
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings, description="Logging settings"
    )

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        # Track which environment variables are set before calling parent
        env_vars_set = set()
        for key in os.environ:
            if key.upper().startswith(ENV_PREFIX):
                name = key[len(ENV_PREFIX) :].lower()
                env_vars_set.add(name.split("__", 1)[0])

        super().__init__(**kwargs)

        # Track which arguments were explicitly provided
        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        self._load_yaml_config()

    @field_validator("transport_strategies")
    @classmethod
    def validate_transport_strategies(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one transport strategy is required")
        for strategy in v:
            if "{url}" not in strategy and "{encoded_url}" not in strategy:
                raise ValueError(f"Transport strategy {strategy!r} must contain {{url}} or {{encoded_url}}")
        return v

    def _is_overridden(self, name: str) -> bool:
        return name in self._explicit_args or name in self._env_vars_set

    def _find_config_file(self) -> Optional[Path]:
        """Find config file: explicit path, then ./config, then the user config dir."""
        if self.config_path is not None:
            return self.config_path

        project_config = Path.cwd() / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load top-level settings from YAML data."""
        for name in type(self).model_fields:
            if name in ("logging", "config_path"):
                continue
            if name in config_data and not self._is_overridden(name):
                setattr(self, name, config_data[name])

    def _load_logging_config(self, config_data: dict) -> None:
        """Load logging configuration from YAML data."""
        logging_config = config_data.get("logging")
        if not isinstance(logging_config, dict) or self._is_overridden("logging"):
            return

        for setting in LoggingSettings.model_fields:
            if setting in logging_config:
                setattr(self.logging, setting, logging_config[setting])

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                return

            self._load_basic_settings(config_data)
            self._load_logging_config(config_data)
            self._loaded_config_file = config_file

        except (OSError, yaml.YAMLError) as e:
            # Don't fail if YAML loading fails, just continue with defaults/env vars
            logging.warning(f"Could not load YAML config from {config_file}: {e}")

    @property
    def loaded_config_file(self) -> Optional[Path]:
        """YAML file the settings were read from, if any."""
        return self._loaded_config_file

    @property
    def database_file(self) -> Path:
        """Path to SQLite database file."""
        return self.data_dir / "calendarhub_cache.db"

    @property
    def log_directory(self) -> Path:
        """Directory for log files."""
        if self.logging.file_directory:
            return Path(self.logging.file_directory).expanduser()
        return self.data_dir / "logs"


# Global settings management
_settings_instance: Optional[CalendarHubSettings] = None


def get_settings(**kwargs: Any) -> CalendarHubSettings:
    """Get the global settings instance, creating it lazily if needed.

    Args:
        **kwargs: Explicit settings used only when the instance is created

    Returns:
        CalendarHubSettings: The global settings instance
    """
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = CalendarHubSettings(**kwargs)
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
