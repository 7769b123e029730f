"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from shellmate.config import Settings
from shellmate.logging import Loggers, bind_context, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults, bound context and root handlers after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_events_on_stderr(self, mock_context, capsys):
        """Test that JSON format writes one object per event to stderr."""
        configure_logging(Settings(log_level="info", log_format="json"))
        bind_context(mode="oneshot")

        structlog.get_logger("shellmate.test").info("turn_started", turn=1)

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "turn_started"
        assert event["level"] == "info"
        assert event["turn"] == 1
        assert event["mode"] == "oneshot"

    def test_level_filters_events(self, mock_context, capsys):
        """Test that events below the configured level are dropped."""
        configure_logging(Settings(log_level="warning", log_format="json"))
        logger = structlog.get_logger("shellmate.test")

        logger.info("not_shown")
        logger.warning("shown")

        lines = capsys.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["shown"]

    def test_console_format(self, mock_context, capsys):
        """Test that the console renderer produces plain text lines."""
        configure_logging(Settings(log_level="debug", log_format="console"))

        structlog.get_logger("shellmate.test").debug("command_classified", rule="none")

        err = capsys.readouterr().err
        assert "command_classified" in err
        assert not err.lstrip().startswith("{")

    def test_http_libraries_quiet(self, mock_context):
        """Test that httpx stays at WARNING even when debugging."""
        configure_logging(Settings(log_level="debug"))

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestLoggers:
    """Tests for the per-component logger factories."""

    @pytest.mark.parametrize(
        "factory", ["cli", "repl", "providers", "shellenv", "safety", "execution"]
    )
    def test_component_loggers(self, factory):
        """Test that every component factory returns a usable logger."""
        logger = getattr(Loggers, factory)()

        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")
