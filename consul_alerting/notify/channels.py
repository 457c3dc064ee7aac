"""Alert handler contract and the console (log sink) handler."""

from __future__ import annotations

import abc
import sys
from typing import Any

import structlog

from consul_alerting.core.config import ConsoleConfig
from consul_alerting.core.types import AlertState
from consul_alerting.notify.exceptions import ConsolePanic
from consul_alerting.notify.types import DeliveryOutcome

# Configured level → logger method. panic/fatal log at critical and then stop
# the process.
_CONSOLE_LEVELS: dict[str, str] = {
    "panic": "critical",
    "fatal": "critical",
    "error": "error",
    "warn": "warning",
    "warning": "warning",
    "info": "info",
    "debug": "debug",
}


class AlertHandler(abc.ABC):
    """Delivers alerts to one external endpoint (email, PagerDuty, etc).

    ``deliver`` must not raise for delivery failures: they are logged here
    and reported through the returned :class:`DeliveryOutcome`.
    """

    def __init__(self, name: str, logger: Any = None) -> None:
        self.name = name
        self._log = logger if logger is not None else structlog.get_logger(__name__)

    @abc.abstractmethod
    async def deliver(self, datacenter: str, alert: AlertState) -> DeliveryOutcome:
        """Send *alert* for *datacenter*."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ConsoleHandler(AlertHandler):
    """Writes the alert to the log at the configured severity.

    With ``panic`` or ``fatal`` every line is logged before the process is
    stopped, so the details are never lost behind the first line.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        name: str = "stdout",
        logger: Any = None,
    ) -> None:
        super().__init__(name, logger)
        self._level = config.log_level.strip().lower()

    @staticmethod
    def lines(alert: AlertState) -> list[str]:
        text = [alert.message]
        if alert.details:
            text.extend(alert.details.split("\n"))
        return text

    async def deliver(self, datacenter: str, alert: AlertState) -> DeliveryOutcome:
        method = _CONSOLE_LEVELS.get(self._level)
        if method is None:
            return DeliveryOutcome(
                channel=self.name,
                succeeded=False,
                attempts=0,
                errors=[f"unknown log level: {self._level!r}"],
            )

        emit = getattr(self._log, method)
        for line in self.lines(alert):
            emit(line, datacenter=datacenter, node=alert.node, service=alert.service)

        if self._level == "panic":
            raise ConsolePanic(alert.message)
        if self._level == "fatal":
            sys.exit(1)

        return DeliveryOutcome(channel=self.name, succeeded=True, attempts=1)
