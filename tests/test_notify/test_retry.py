"""Tests for RetryPolicy — attempt counting, delays, logging."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from consul_alerting.notify.retry import RetryPolicy


class Flaky:
    """Fails the first *failures* calls, then returns "ok"."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"boom {self.calls}")
        return "ok"


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_retries == 0
        assert policy.max_attempts == 1
        assert policy.delay_for(1) == 5.0

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(delay_secs=-0.1)

    async def test_first_try_success(self) -> None:
        sleep = AsyncMock()
        op = Flaky(0)
        result = await RetryPolicy(max_retries=3, sleep=sleep).run(op, log=MagicMock())
        assert result.succeeded is True
        assert result.attempts == 1
        assert result.value == "ok"
        assert result.errors == []
        sleep.assert_not_awaited()

    async def test_success_after_failures(self) -> None:
        sleep = AsyncMock()
        op = Flaky(2)
        result = await RetryPolicy(max_retries=3, sleep=sleep).run(op, log=MagicMock())
        assert result.succeeded is True
        assert result.attempts == 3
        assert result.errors == ["boom 1", "boom 2"]
        assert sleep.await_count == 2

    async def test_exhausted(self) -> None:
        sleep = AsyncMock()
        op = Flaky(100)
        result = await RetryPolicy(max_retries=2, sleep=sleep).run(op, log=MagicMock())
        assert result.succeeded is False
        assert result.attempts == 3
        assert op.calls == 3
        assert result.value is None
        assert len(result.errors) == 3

    async def test_no_delay_after_final_failure(self) -> None:
        sleep = AsyncMock()
        await RetryPolicy(max_retries=2, delay_secs=5.0, sleep=sleep).run(
            Flaky(100), log=MagicMock()
        )
        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 5.0]

    @pytest.mark.parametrize(
        ("failures", "max_retries", "expected"),
        [(0, 0, 1), (1, 0, 1), (1, 1, 2), (3, 5, 4), (10, 2, 3)],
    )
    async def test_attempt_count(
        self, failures: int, max_retries: int, expected: int
    ) -> None:
        op = Flaky(failures)
        result = await RetryPolicy(max_retries=max_retries, sleep=AsyncMock()).run(
            op, log=MagicMock()
        )
        assert result.attempts == expected
        assert op.calls == expected

    async def test_each_failure_logged(self) -> None:
        log = MagicMock()
        await RetryPolicy(max_retries=1, sleep=AsyncMock()).run(
            Flaky(100), log=log, event="email_send", recipient="a@example.com"
        )
        events = [c.args[0] for c in log.error.call_args_list]
        assert events == ["email_send_failed", "email_send_failed", "email_send_retries_exhausted"]
        assert log.error.call_args_list[0].kwargs["recipient"] == "a@example.com"
        assert log.error.call_args_list[0].kwargs["attempt"] == 1
        log.info.assert_called_once()
        assert log.info.call_args.args[0] == "email_send_retrying"

    async def test_exception_without_message_recorded_by_type(self) -> None:
        async def op() -> None:
            raise TimeoutError()

        result = await RetryPolicy(sleep=AsyncMock()).run(op, log=MagicMock())
        assert result.errors == ["TimeoutError"]
