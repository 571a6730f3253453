"""Unit tests for logging configuration module."""

import logging
import tempfile
from unittest.mock import patch

import pytest

from jalanea_forge.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler():
    return next(
        (
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ),
        None,
    )


class TestSetupLogging:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("ERROR", logging.ERROR)],
    )
    def test_console_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert _console_handler().level == expected_level

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT)],
    )
    def test_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        assert _console_handler().formatter._fmt == expected_format

    def test_file_handler_when_enabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch("jalanea_forge.core.logging_config.LOG_FILE_DIR", tmpdir), patch(
                "jalanea_forge.core.logging_config.ENABLE_FILE_LOGGING", True
            ):
                setup_logging(log_level="ERROR", enable_file=True)

                file_handler = next(
                    (h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)), None
                )
                assert file_handler is not None
                assert file_handler.level == logging.DEBUG
                file_handler.close()
            setup_logging(enable_file=False)

    def test_module_levels_applied(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)

    def test_no_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1


def test_get_logger_returns_named_logger():
    assert get_logger("jalanea_forge.forge").name == "jalanea_forge.forge"
