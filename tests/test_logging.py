"""Tests for advisory_admin.logging (AdminLogging, level/format from config)."""

import logging
import sys

from advisory_admin.config import LoggingConfig
from advisory_admin.logging import (
    DEFAULT_FORMAT,
    DEFAULT_LEVEL,
    LEVELS,
    AdminLogging,
    _resolve_level,
)


class TestConstants:
    """Module constants and level mapping."""

    def test_levels_has_four_standard_levels(self) -> None:
        """LEVELS maps the four level names."""
        assert LEVELS == {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
        }

    def test_default_level_is_warning(self) -> None:
        """Progress goes to stdout, so INFO records are hidden by default."""
        assert DEFAULT_LEVEL == "WARNING"
        assert LoggingConfig().level == DEFAULT_LEVEL

    def test_default_format_contains_placeholders(self) -> None:
        """The default format shows level and message."""
        assert "%(levelname)s" in DEFAULT_FORMAT
        assert "%(message)s" in DEFAULT_FORMAT


class TestResolveLevel:
    """_resolve_level maps level names to logging constants."""

    def test_known_and_normalized(self) -> None:
        """Names are case- and whitespace-insensitive."""
        assert _resolve_level("DEBUG") == logging.DEBUG
        assert _resolve_level("error") == logging.ERROR
        assert _resolve_level("  WARNING\t") == logging.WARNING

    def test_unknown_level_returns_info(self) -> None:
        """Unknown names fall back to INFO."""
        assert _resolve_level("TRACE") == logging.INFO
        assert _resolve_level("") == logging.INFO


class TestAdminLogging:
    """AdminLogging applies LoggingConfig (level + format) to root logger."""

    def test_setup_sets_root_level_from_config(self) -> None:
        """setup() applies each configured level to the root logger."""
        for level_name, expected_num in LEVELS.items():
            AdminLogging(LoggingConfig(level=level_name, format="%(message)s")).setup()
            assert logging.root.level == expected_num

    def test_setup_applies_format_and_stderr(self) -> None:
        """setup() uses the configured format on a stderr handler."""
        custom = "%(levelname)s || %(message)s"
        AdminLogging(LoggingConfig(level="INFO", format=custom)).setup()
        handler = logging.root.handlers[0]
        assert handler.formatter is not None
        assert handler.formatter._fmt == custom
        assert handler.stream is sys.stderr

    def test_empty_format_uses_default(self) -> None:
        """An empty format falls back to DEFAULT_FORMAT."""
        AdminLogging(LoggingConfig(level="INFO", format="")).setup()
        assert logging.root.handlers[0].formatter._fmt == DEFAULT_FORMAT
