"""Tests for the console handler — level mapping, line splitting, panic/fatal."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from consul_alerting.core.config import ConsoleConfig
from consul_alerting.core.types import AlertState, HealthStatus
from consul_alerting.notify.channels import AlertHandler, ConsoleHandler
from consul_alerting.notify.exceptions import ConsolePanic


# ── Helpers ─────────────────────────────────────────────────────


def _alert(**kw: object) -> AlertState:
    defaults: dict[str, object] = {
        "node": "node-1",
        "service": "web",
        "tag": "v2",
        "status": HealthStatus.CRITICAL,
        "message": "web unhealthy",
        "details": "",
    }
    defaults.update(kw)
    return AlertState(**defaults)  # type: ignore[arg-type]


def _handler(level: str) -> tuple[ConsoleHandler, MagicMock]:
    log = MagicMock()
    return ConsoleHandler(ConsoleConfig(log_level=level), logger=log), log


def _emitted(method: MagicMock) -> list[str]:
    return [c.args[0] for c in method.call_args_list]


# ── ConsoleHandler ──────────────────────────────────────────────


class TestConsoleHandler:
    def test_is_alert_handler(self) -> None:
        handler, _ = _handler("info")
        assert isinstance(handler, AlertHandler)
        assert handler.name == "stdout"

    async def test_warn_emits_message_then_details(self) -> None:
        handler, log = _handler("warn")
        outcome = await handler.deliver("us-east", _alert(details="line1\nline2"))

        assert _emitted(log.warning) == ["web unhealthy", "line1", "line2"]
        log.info.assert_not_called()
        log.error.assert_not_called()
        assert outcome.succeeded is True
        assert outcome.attempts == 1

    async def test_no_details_emits_message_only(self) -> None:
        handler, log = _handler("info")
        await handler.deliver("dc1", _alert())
        assert _emitted(log.info) == ["web unhealthy"]

    @pytest.mark.parametrize(
        ("level", "method"),
        [
            ("error", "error"),
            ("warn", "warning"),
            ("warning", "warning"),
            ("info", "info"),
            ("debug", "debug"),
            ("INFO", "info"),
            ("Warning", "warning"),
        ],
    )
    async def test_level_mapping(self, level: str, method: str) -> None:
        handler, log = _handler(level)
        await handler.deliver("dc1", _alert(details="d"))
        assert _emitted(getattr(log, method)) == ["web unhealthy", "d"]

    async def test_context_attached(self) -> None:
        handler, log = _handler("info")
        await handler.deliver("us-east", _alert())
        kwargs = log.info.call_args.kwargs
        assert kwargs["datacenter"] == "us-east"
        assert kwargs["node"] == "node-1"
        assert kwargs["service"] == "web"

    async def test_unknown_level_emits_nothing(self) -> None:
        handler, log = _handler("loud")
        outcome = await handler.deliver("dc1", _alert(details="a\nb"))

        for method in ("critical", "error", "warning", "info", "debug"):
            getattr(log, method).assert_not_called()
        assert outcome.succeeded is False
        assert outcome.attempts == 0
        assert "loud" in outcome.errors[0]

    async def test_fatal_logs_then_exits(self) -> None:
        handler, log = _handler("fatal")
        with pytest.raises(SystemExit) as exc_info:
            await handler.deliver("dc1", _alert(details="why"))
        assert exc_info.value.code == 1
        assert _emitted(log.critical) == ["web unhealthy", "why"]

    async def test_panic_logs_then_raises(self) -> None:
        handler, log = _handler("panic")
        with pytest.raises(ConsolePanic):
            await handler.deliver("dc1", _alert())
        assert _emitted(log.critical) == ["web unhealthy"]

    def test_panic_not_an_exception(self) -> None:
        assert not issubclass(ConsolePanic, Exception)

    def test_lines(self) -> None:
        assert ConsoleHandler.lines(_alert(details="a\n\nb")) == ["web unhealthy", "a", "", "b"]

    async def test_close_is_noop(self) -> None:
        handler, _ = _handler("info")
        await handler.close()
