"""PagerDuty handler and a small async client for the generic Events API."""

from __future__ import annotations

from typing import Any

import aiohttp
import structlog
from pydantic import BaseModel, Field

from consul_alerting.core.config import PagerDutyConfig
from consul_alerting.core.types import AlertState, incident_key
from consul_alerting.notify.channels import AlertHandler
from consul_alerting.notify.exceptions import PagerDutyError
from consul_alerting.notify.retry import DEFAULT_RETRY_DELAY_SECS, RetryPolicy, Sleep
from consul_alerting.notify.types import DeliveryOutcome

EVENTS_URL = "https://events.pagerduty.com/generic/2010-04-15/create_event.json"
CLIENT_NAME = "consul-alerting"

# 403 is PagerDuty's rate-limit response on this API.
_RETRYABLE_STATUSES = frozenset({403, 429})


class PagerDutyResponse(BaseModel):
    """Parsed Events API reply. ``errors`` holds every reported sub-failure."""

    status: str = ""
    message: str = ""
    incident_key: str = ""
    http_status: int = 0
    attempts: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _parse_response(http_status: int, body: dict[str, Any]) -> PagerDutyResponse:
    errors = [str(e) for e in body.get("errors") or []]
    status = str(body.get("status") or "")
    message = str(body.get("message") or "")
    if http_status != 200 and not errors:
        errors = [message or f"HTTP {http_status}"]
    return PagerDutyResponse(
        status=status,
        message=message,
        incident_key=str(body.get("incident_key") or ""),
        http_status=http_status,
        errors=errors,
    )


class PagerDutyClient:
    """Async client for trigger/resolve events.

    Transport errors, rate limiting and 5xx replies are retried up to
    ``max_retry`` extra times; validation errors (other 4xx) are returned
    immediately in :attr:`PagerDutyResponse.errors`.
    """

    def __init__(
        self,
        service_key: str,
        *,
        max_retry: int = 0,
        retry_delay_secs: float = DEFAULT_RETRY_DELAY_SECS,
        sleep: Sleep | None = None,
        url: str = EVENTS_URL,
        timeout: float = 10.0,
        logger: Any = None,
    ) -> None:
        self._service_key = service_key
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._log = logger if logger is not None else structlog.get_logger(__name__)
        self._retry = RetryPolicy(
            max_retries=max_retry, delay_secs=retry_delay_secs, sleep=sleep
        )
        self._session: aiohttp.ClientSession | None = None

    @property
    def max_retry(self) -> int:
        return self._retry.max_retries

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def trigger(
        self,
        key: str,
        description: str,
        details: str = "",
        client: str = CLIENT_NAME,
        client_url: str = "",
    ) -> PagerDutyResponse:
        payload: dict[str, Any] = {
            "event_type": "trigger",
            "incident_key": key,
            "description": description,
            "details": details,
            "client": client,
        }
        if client_url:
            payload["client_url"] = client_url
        return await self._post_event(payload)

    async def resolve(
        self, key: str, description: str = "", details: str = ""
    ) -> PagerDutyResponse:
        return await self._post_event(
            {
                "event_type": "resolve",
                "incident_key": key,
                "description": description,
                "details": details,
            }
        )

    async def _post_event(self, payload: dict[str, Any]) -> PagerDutyResponse:
        body = {"service_key": self._service_key, **payload}

        async def _attempt() -> PagerDutyResponse:
            session = self._get_session()
            async with session.post(self._url, json=body) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = {"message": (await resp.text())[:200]}
                if not isinstance(data, dict):
                    data = {}
                if resp.status in _RETRYABLE_STATUSES or resp.status >= 500:
                    reason = data.get("message") or "unavailable"
                    raise PagerDutyError(f"HTTP {resp.status}: {reason}")
                return _parse_response(resp.status, data)

        result = await self._retry.run(
            _attempt,
            log=self._log,
            event="pagerduty_request",
            event_type=payload["event_type"],
            incident_key=payload["incident_key"],
        )
        if result.succeeded and result.value is not None:
            return result.value.model_copy(update={"attempts": result.attempts})
        return PagerDutyResponse(
            status="failed", attempts=result.attempts, errors=result.errors
        )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class PagerDutyHandler(AlertHandler):
    """Triggers an incident for unhealthy alerts and resolves it once passing."""

    def __init__(
        self,
        config: PagerDutyConfig,
        name: str = "pagerduty",
        *,
        client: PagerDutyClient | None = None,
        retry_delay_secs: float = DEFAULT_RETRY_DELAY_SECS,
        sleep: Sleep | None = None,
        logger: Any = None,
    ) -> None:
        super().__init__(name, logger)
        self._client = client or PagerDutyClient(
            config.service_key.get_secret_value(),
            max_retry=config.max_retries,
            retry_delay_secs=retry_delay_secs,
            sleep=sleep,
            logger=self._log,
        )

    async def deliver(self, datacenter: str, alert: AlertState) -> DeliveryOutcome:
        key = incident_key(datacenter, alert)

        if alert.is_passing:
            resp = await self._client.resolve(key, alert.message, alert.details)
        else:
            resp = await self._client.trigger(key, alert.message, alert.details)

        for err in resp.errors:
            self._log.error(
                "pagerduty_send_failed",
                error=err,
                details=alert.details,
                message=alert.message,
                incident_key=key,
            )

        if resp.ok:
            self._log.info(
                "pagerduty_event_sent",
                event_type="resolve" if alert.is_passing else "trigger",
                incident_key=key,
            )

        return DeliveryOutcome(
            channel=self.name,
            succeeded=resp.ok,
            attempts=resp.attempts,
            errors=list(resp.errors),
        )

    async def close(self) -> None:
        await self._client.close()
