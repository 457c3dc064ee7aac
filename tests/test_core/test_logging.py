"""Tests for structlog setup — renderer choice and level filtering."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from consul_alerting.core.config import reset_settings
from consul_alerting.core.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    reset_settings()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_json_output(self) -> None:
        stream = io.StringIO()
        setup_logging(level="INFO", fmt="json", stream=stream)

        structlog.get_logger("consul_alerting.test").info("alert_received", node="n1")

        line = stream.getvalue().strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "alert_received"
        assert record["node"] == "n1"
        assert record["level"] == "info"
        assert record["logger"] == "consul_alerting.test"

    def test_level_filtering(self) -> None:
        stream = io.StringIO()
        setup_logging(level="WARNING", fmt="json", stream=stream)

        log = structlog.get_logger("consul_alerting.test")
        log.info("hidden")
        log.warning("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_console_renderer(self) -> None:
        stream = io.StringIO()
        setup_logging(level="DEBUG", fmt="console", stream=stream)

        structlog.get_logger("consul_alerting.test").debug("debug_line")

        assert "debug_line" in stream.getvalue()
        with pytest.raises(json.JSONDecodeError):
            json.loads(stream.getvalue().strip().splitlines()[-1])
