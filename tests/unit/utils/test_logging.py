"""Unit tests for logging setup utilities."""

import logging
from argparse import Namespace

import pytest

from calendarhub.utils.logging import (
    VERBOSE,
    AutoColoredFormatter,
    TimestampedFileHandler,
    apply_command_line_overrides,
    get_log_level,
    setup_logging,
)


@pytest.fixture
def reset_package_logger():
    yield
    logger = logging.getLogger("calendarhub")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class TestLogLevels:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("verbose", VERBOSE), ("DEBUG", logging.DEBUG), ("warning", logging.WARNING)],
    )
    def test_get_log_level(self, name, expected):
        assert get_log_level(name) == expected

    def test_unknown_level(self):
        with pytest.raises(AttributeError):
            get_log_level("LOUD")

    def test_logger_has_verbose_method(self, caplog):
        logger = logging.getLogger("calendarhub.tests")

        with caplog.at_level(VERBOSE, logger="calendarhub.tests"):
            logger.verbose("expanded %d occurrences", 3)

        assert caplog.records[0].levelname == "VERBOSE"
        assert caplog.records[0].getMessage() == "expanded 3 occurrences"


class TestAutoColoredFormatter:
    def test_no_colors_when_disabled(self):
        formatter = AutoColoredFormatter("%(levelname)s - %(message)s", enable_colors=False)
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, None)

        assert formatter.format(record) == "ERROR - failed"


class TestTimestampedFileHandler:
    def test_old_files_removed(self, tmp_path):
        for index in range(5):
            (tmp_path / f"calendarhub_20240101_00000{index}_000000.log").write_text("old")

        handler = TimestampedFileHandler(tmp_path, prefix="calendarhub", max_files=3)
        handler.close()

        remaining = sorted(path.name for path in tmp_path.glob("calendarhub_*.log"))
        assert len(remaining) == 3
        assert "calendarhub_20240101_000000_000000.log" not in remaining
        assert handler.baseFilename.endswith(remaining[-1])


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_console_handler_level(self, test_settings, reset_package_logger):
        test_settings.logging.console_level = "WARNING"

        logger = setup_logging(test_settings)

        assert logger.name == "calendarhub"
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_file_logging(self, test_settings, tmp_path, reset_package_logger):
        test_settings.logging.console_enabled = False
        test_settings.logging.file_enabled = True
        test_settings.logging.file_directory = str(tmp_path / "logs")

        logger = setup_logging(test_settings)
        logger.info("hello file")
        for handler in logger.handlers:
            handler.flush()

        log_files = list((tmp_path / "logs").glob("calendarhub_*.log"))
        assert len(log_files) == 1
        assert "hello file" in log_files[0].read_text(encoding="utf-8")

    def test_repeated_setup_replaces_handlers(self, test_settings, reset_package_logger):
        setup_logging(test_settings)
        logger = setup_logging(test_settings)

        assert len(logger.handlers) == 1

    def test_no_handlers_enabled(self, test_settings, reset_package_logger):
        test_settings.logging.console_enabled = False

        logger = setup_logging(test_settings)

        assert isinstance(logger.handlers[0], logging.NullHandler)


class TestCommandLineOverrides:
    def test_verbose_and_colors(self, test_settings):
        args = Namespace(log_level=None, verbose=True, quiet=False, log_dir=None, no_log_colors=True)

        apply_command_line_overrides(test_settings, args)

        assert test_settings.logging.console_level == "VERBOSE"
        assert test_settings.logging.console_colors is False

    def test_quiet_and_log_dir(self, test_settings, tmp_path):
        args = Namespace(log_level="DEBUG", verbose=False, quiet=True, log_dir=tmp_path, no_log_colors=False)

        apply_command_line_overrides(test_settings, args)

        assert test_settings.logging.console_level == "ERROR"
        assert test_settings.logging.file_level == "DEBUG"
        assert test_settings.logging.file_enabled is True
        assert test_settings.log_directory == tmp_path
