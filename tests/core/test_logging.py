# tests/core/test_logging.py
"""Tests for structured logging configuration.

configure_logging() binds its handler to sys.stderr at call time, so each
test configures logging after capsys has swapped the stream in.
"""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from glosspipe.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON on stderr."""
        from glosspipe.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        log_line = captured.err.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from glosspipe.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_level_filters_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        from glosspipe.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        logger = get_logger("test")

        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_noisy_third_party_loggers_silenced(self) -> None:
        """Plugin-manager and settings loader chatter stays at WARNING in DEBUG mode."""
        from glosspipe.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        for name in ("dynaconf", "pluggy"):
            assert logging.getLogger(name).getEffectiveLevel() >= logging.WARNING

    def test_stdlib_loggers_emit_json_when_json_output_enabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Extensions using logging.getLogger(__name__) share the JSON format."""
        from glosspipe.core.logging import configure_logging

        configure_logging(json_output=True)

        logging.getLogger("test.stdlib.extension").info("message from stdlib logger")

        log_line = capsys.readouterr().err.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "message from stdlib logger"
        assert "timestamp" in data
