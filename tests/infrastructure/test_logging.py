"""Tests for centralized logging."""

import json
import logging
import sys
import pytest
from flightdeck.infrastructure.logging import (
    HumanFormatter,
    JSONFormatter,
    TransportLogger,
    configure_logging,
)


def make_record(message, level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="flightdeck",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    def test_default_level(self):
        configure_logging(level=logging.INFO)
        logger = logging.getLogger("flightdeck")
        assert logger.level == logging.INFO

    def test_debug_level(self):
        configure_logging(level=logging.DEBUG)
        assert logging.getLogger("flightdeck").level == logging.DEBUG

    def test_level_name(self):
        configure_logging(level="WARNING")
        assert logging.getLogger("flightdeck").level == logging.WARNING

    def test_json_format(self):
        configure_logging(level=logging.INFO, json_format=True)
        logger = logging.getLogger("flightdeck")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_human_format(self):
        configure_logging(level=logging.INFO, color=False)
        handler = logging.getLogger("flightdeck").handlers[0]
        assert isinstance(handler.formatter, HumanFormatter)
        assert handler.formatter.color is False

    def test_replaces_handlers(self):
        configure_logging(level=logging.INFO)
        configure_logging(level=logging.DEBUG)
        assert len(logging.getLogger("flightdeck").handlers) == 1


class TestJSONFormatter:
    def test_format_includes_host(self):
        output = JSONFormatter().format(make_record("ok", host="web1"))
        data = json.loads(output)
        assert data["message"] == "ok"
        assert data["host"] == "web1"
        assert data["level"] == "INFO"
        assert "timestamp" in data

    def test_format_with_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record("failed", level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestHumanFormatter:
    def test_plain_layout(self):
        formatter = HumanFormatter(color=False)
        record = make_record("ls -al", host="web1", marker="$")
        assert formatter.format(record) == "web1 $ ls -al"

    def test_message_without_host(self):
        formatter = HumanFormatter(color=False)
        assert formatter.format(make_record("Flight 1/2 launched...")) == (
            "Flight 1/2 launched..."
        )

    def test_color_wraps_message(self):
        formatter = HumanFormatter(color=True)
        output = formatter.format(make_record("failed (1)", logging.ERROR, marker="●"))
        assert "\033[31m" in output
        assert output.endswith("\033[0m")


class TestTransportLogger:
    @pytest.fixture
    def records(self, caplog):
        caplog.set_level(logging.DEBUG, logger="flightdeck")
        return caplog

    def test_categories_carry_host_and_marker(self, records):
        logger = TransportLogger("web1")
        logger.command("git pull")
        logger.stdout("Already up to date.")
        logger.success("ok")

        got = [(r.host, r.marker, r.getMessage()) for r in records.records]
        assert got == [
            ("web1", "$", "git pull"),
            ("web1", ">", "Already up to date."),
            ("web1", "●", "ok"),
        ]

    def test_levels(self, records):
        logger = TransportLogger("web1")
        logger.stdwarn("warned")
        logger.stderr("failed")
        logger.warn("failed safely (1)")
        logger.error("failed (1)")

        assert [r.levelno for r in records.records] == [
            logging.WARNING,
            logging.ERROR,
            logging.WARNING,
            logging.ERROR,
        ]

    def test_debug_is_gated(self, records):
        TransportLogger("web1").debug("hidden")
        TransportLogger("web1", debug=True).debug("shown")
        assert [r.getMessage() for r in records.records] == ["shown"]

    def test_user_messages_have_no_marker(self, records):
        TransportLogger("localhost").user("Deploying release 42")
        record = records.records[0]
        assert record.marker == ""
        assert record.host == "localhost"
