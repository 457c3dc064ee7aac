"""Central alert dispatcher — fans each alert out to every handler."""

from __future__ import annotations

import asyncio

import structlog

from consul_alerting.core.types import AlertState
from consul_alerting.notify.channels import AlertHandler
from consul_alerting.notify.types import DeliveryOutcome, DispatchResult

logger = structlog.get_logger(__name__)


class AlertDispatcher:
    """Delivers each alert through every configured handler.

    - Handlers run in configuration order, one after another.
    - With ``concurrent=True`` they run as parallel tasks instead; outcomes
      are still reported in configuration order.
    - A handler that raises is logged and recorded as failed; the remaining
      handlers still run and nothing propagates to the caller.
    """

    def __init__(
        self,
        handlers: list[AlertHandler] | None = None,
        concurrent: bool = False,
    ) -> None:
        self._handlers: list[AlertHandler] = handlers or []
        self._concurrent = concurrent

    @property
    def handlers(self) -> list[AlertHandler]:
        return list(self._handlers)

    async def deliver(self, datacenter: str, alert: AlertState) -> DispatchResult:
        logger.info(
            "alert_received",
            datacenter=datacenter,
            node=alert.node,
            service=alert.service,
            tag=alert.tag,
            status=alert.status.value,
            handlers=len(self._handlers),
        )

        if self._concurrent:
            outcomes = await self._deliver_concurrently(datacenter, alert)
        else:
            outcomes = [
                await self._deliver_one(h, datacenter, alert) for h in self._handlers
            ]

        result = DispatchResult(datacenter=datacenter, outcomes=outcomes)
        if not result.all_succeeded:
            logger.warning(
                "alert_partially_delivered",
                datacenter=datacenter,
                node=alert.node,
                service=alert.service,
                failed=result.failed_channels,
            )
        return result

    async def _deliver_concurrently(
        self, datacenter: str, alert: AlertState
    ) -> list[DeliveryOutcome]:
        tasks = [
            asyncio.create_task(self._deliver_one(h, datacenter, alert))
            for h in self._handlers
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # Only ConsolePanic/SystemExit get here; stop the siblings first.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _deliver_one(
        self, handler: AlertHandler, datacenter: str, alert: AlertState
    ) -> DeliveryOutcome:
        try:
            return await handler.deliver(datacenter, alert)
        except Exception as exc:
            logger.exception(
                "handler_dispatch_error",
                handler=handler.name,
                handler_type=type(handler).__name__,
                message=alert.message,
            )
            return DeliveryOutcome(
                channel=handler.name,
                succeeded=False,
                errors=[str(exc) or type(exc).__name__],
            )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for handler in self._handlers:
            try:
                await handler.close()
            except Exception:
                logger.exception("handler_close_error", handler=handler.name)
