"""Logging configuration and setup utilities."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from ..config.settings import CalendarHubSettings

# Custom log level between INFO(20) and DEBUG(10)
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_LOGGER_NAME = "calendarhub"
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "asyncio")


def verbose(self: logging.Logger, message: Any, *args: Any, **kwargs: Any) -> None:
    """Log ``message`` at the VERBOSE level.

    Example:
        >>> logger = logging.getLogger(__name__)
        >>> logger.verbose("Processing %d items", item_count)
    """
    if self.isEnabledFor(VERBOSE):
        self._log(VERBOSE, message, args, **kwargs)


# Add verbose method to all Logger instances
logging.Logger.verbose = verbose  # type: ignore[attr-defined]


def get_log_level(level_name: str) -> int:
    """Get numeric log level from string name, including custom VERBOSE level.

    Args:
        level_name: Log level name (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Numeric log level value

    Raises:
        AttributeError: If level name is not recognized
    """
    level_name = level_name.upper()
    if level_name == "VERBOSE":
        return VERBOSE
    level: int = getattr(logging, level_name)
    return level


class AutoColoredFormatter(logging.Formatter):
    """Formatter that auto-detects terminal color support."""

    # Color schemes for different terminal types
    COLORS = {
        "ERROR": {"truecolor": "\033[91m", "basic": "\033[31m", "none": ""},
        "INFO": {"truecolor": "\033[94m", "basic": "\033[34m", "none": ""},
        "VERBOSE": {"truecolor": "\033[92m", "basic": "\033[32m", "none": ""},
        "WARNING": {"truecolor": "\033[93m", "basic": "\033[33m", "none": ""},
        "DEBUG": {"truecolor": "\033[95m", "basic": "\033[35m", "none": ""},
        "CRITICAL": {"truecolor": "\033[91m\033[1m", "basic": "\033[31m\033[1m", "none": ""},
        "RESET": {"truecolor": "\033[0m", "basic": "\033[0m", "none": ""},
    }

    def __init__(self, *args: Any, enable_colors: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.enable_colors = enable_colors
        self.color_mode = self._detect_color_support() if enable_colors else "none"

    def _detect_color_support(self) -> str:
        """Auto-detect terminal color capabilities."""
        if not hasattr(sys.stderr, "isatty") or not sys.stderr.isatty():
            return "none"

        if "NO_COLOR" in os.environ:
            return "none"

        term = os.environ.get("TERM", "").lower()
        colorterm = os.environ.get("COLORTERM", "").lower()

        if term == "dumb":
            return "none"

        if colorterm in ("truecolor", "24bit") or "256color" in term:
            return "truecolor"

        if term and "color" in term:
            return "basic"

        return "none"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if supported."""
        formatted = super().format(record)

        if self.color_mode == "none":
            return formatted

        level_name = record.levelname
        if level_name in self.COLORS:
            color_start = self.COLORS[level_name][self.color_mode]
            color_end = self.COLORS["RESET"][self.color_mode]
            formatted = formatted.replace(level_name, f"{color_start}{level_name}{color_end}", 1)

        return formatted


class TimestampedFileHandler(logging.FileHandler):
    """Handler that creates one timestamped log file per run."""

    def __init__(
        self, log_dir: Union[str, Path], prefix: str = ROOT_LOGGER_NAME, max_files: int = 5
    ) -> None:
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.max_files = max_files

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log_path = self.log_dir / f"{prefix}_{timestamp}.log"

        self.log_dir.mkdir(parents=True, exist_ok=True)
        super().__init__(str(log_path), encoding="utf-8")

        self.cleanup_old_files()

    def cleanup_old_files(self) -> None:
        """Remove log files beyond max_files limit, keeping most recent."""
        log_files = list(self.log_dir.glob(f"{self.prefix}_*.log"))
        if len(log_files) <= self.max_files:
            return

        # Names embed the creation time, so they sort chronologically
        log_files.sort(reverse=True)
        for old_file in log_files[self.max_files :]:
            try:
                old_file.unlink()
            except OSError as e:
                sys.stderr.write(f"Could not remove old log file {old_file}: {e}\n")


def setup_logging(settings: "CalendarHubSettings") -> logging.Logger:
    """Configure the ``calendarhub`` logger from settings.

    Installs a colored console handler and, when enabled, a timestamped
    file handler. Third-party libraries are raised to ``third_party_level``.

    Args:
        settings: Application settings

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Allow all levels, handlers will filter

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if settings.logging.console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(get_log_level(settings.logging.console_level))
        console_handler.setFormatter(
            AutoColoredFormatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
                enable_colors=settings.logging.console_colors,
            )
        )
        logger.addHandler(console_handler)

    if settings.logging.file_enabled:
        file_handler = TimestampedFileHandler(
            log_dir=settings.log_directory,
            prefix=settings.logging.file_prefix,
            max_files=settings.logging.max_log_files,
        )
        file_handler.setLevel(get_log_level(settings.logging.file_level))

        if settings.logging.include_function_names:
            file_format = (
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            )
        else:
            file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_handler.setFormatter(logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S"))

        logger.addHandler(file_handler)
        logger.debug(f"Logging to file: {file_handler.baseFilename}")

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    third_party_level = get_log_level(settings.logging.third_party_level)
    for lib in THIRD_PARTY_LOGGERS:
        logging.getLogger(lib).setLevel(third_party_level)

    return logger


def apply_command_line_overrides(
    settings: "CalendarHubSettings", args: Any
) -> "CalendarHubSettings":
    """Apply command-line argument overrides to logging settings.

    Priority: Command-line > Environment > YAML > Defaults. Modifies
    ``settings`` in place and returns it.

    Args:
        settings: Current settings object to modify
        args: Parsed command-line arguments from argparse

    Returns:
        Settings object with command-line overrides applied
    """
    if getattr(args, "log_level", None):
        settings.logging.console_level = args.log_level
        settings.logging.file_level = args.log_level

    if getattr(args, "verbose", False):
        settings.logging.console_level = "VERBOSE"
        settings.logging.file_level = "VERBOSE"

    if getattr(args, "quiet", False):
        settings.logging.console_level = "ERROR"

    if getattr(args, "log_dir", None):
        settings.logging.file_enabled = True
        settings.logging.file_directory = str(args.log_dir)

    if getattr(args, "no_log_colors", False):
        settings.logging.console_colors = False

    return settings
