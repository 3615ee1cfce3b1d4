"""Tests for structured logging configuration."""

import logging

import structlog

from cli.logging_config import _redact_sensitive, setup_logging


class TestLoggingConfig:
    """Test structlog setup modes."""

    def test_console_mode(self):
        """Console mode configures without error."""
        setup_logging(json_mode=False, level="DEBUG")
        structlog.get_logger().info("test message", key="value")

    def test_level_filtering(self):
        """Log level filters lower messages."""
        setup_logging(json_mode=False, level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_processor_chain(self):
        setup_logging(json_mode=True, level="DEBUG")
        config = structlog.get_config()
        assert _redact_sensitive in config["processors"]

    def test_default_level_is_info(self):
        setup_logging()
        assert logging.getLogger().level == logging.INFO


class TestRedaction:
    def test_user_id_masked(self):
        event = _redact_sensitive(None, None, {"event": "x", "user": "user_1712345678901_abc123xyz"})
        assert event["user"] == "user_1712...REDACTED"

    def test_email_masked(self):
        event = _redact_sensitive(None, None, {"event": "mail a@b.com"})
        assert event["event"] == "mail REDACTED@email"

    def test_non_strings_untouched(self):
        event = _redact_sensitive(None, None, {"count": 3})
        assert event["count"] == 3
