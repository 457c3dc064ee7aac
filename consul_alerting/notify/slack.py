"""Slack handler — posts one attachment to an incoming webhook."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import aiohttp

from consul_alerting.core.config import SlackConfig
from consul_alerting.core.types import AlertState
from consul_alerting.notify.channels import AlertHandler
from consul_alerting.notify.exceptions import DeliveryError
from consul_alerting.notify.retry import DEFAULT_RETRY_DELAY_SECS, RetryPolicy, Sleep
from consul_alerting.notify.types import DeliveryOutcome

WEBHOOK_BASE_URL = "https://hooks.slack.com/services/"

SLACK_MESSAGE_FORMAT = "\n*{message}*\n{details}\n"

# Static branding carried on every attachment.
_ATTACHMENT_BRANDING: dict[str, str] = {
    "color": "good",
    "fallback": "",
    "author_name": "https://github.com/kyhavlov/consul-alerting",
    "author_subname": "github.com",
    "author_link": "https://github.com/kyhavlov",
    "author_icon": "https://avatars2.githubusercontent.com/u/4177697?s=400&v=4",
    "footer": "consul-alerting",
    "footer_icon": "https://platform.slack-edge.com/img/default_application_icon.png",
}


def format_slack_text(alert: AlertState) -> str:
    return SLACK_MESSAGE_FORMAT.format(message=alert.message, details=alert.details)


def build_slack_attachment(text: str, ts: int) -> dict[str, Any]:
    return {**_ATTACHMENT_BRANDING, "text": text, "ts": ts}


def webhook_url(api_token: str) -> str:
    """Accept either a full webhook URL or the path after ``/services/``."""
    token = api_token.strip()
    if token.startswith(("https://", "http://")):
        return token
    return WEBHOOK_BASE_URL + token.lstrip("/")


class SlackHandler(AlertHandler):
    """Delivers alerts to a single Slack incoming webhook, with retries."""

    def __init__(
        self,
        config: SlackConfig,
        name: str = "slack",
        *,
        retry_delay_secs: float = DEFAULT_RETRY_DELAY_SECS,
        sleep: Sleep | None = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 10.0,
        logger: Any = None,
    ) -> None:
        super().__init__(name, logger)
        self._url = webhook_url(config.api_token.get_secret_value())
        self._channel_name = config.channel_name
        self._clock = clock
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._retry = RetryPolicy(
            max_retries=config.max_retries,
            delay_secs=retry_delay_secs,
            sleep=sleep,
        )
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _post(self, payload: dict[str, Any]) -> None:
        session = self._get_session()
        async with session.post(self._url, json=payload) as resp:
            if resp.status != 200:
                body = await resp.text()
                raise DeliveryError(f"HTTP {resp.status}: {body[:200]}")

    async def deliver(self, datacenter: str, alert: AlertState) -> DeliveryOutcome:
        text = format_slack_text(alert)

        async def _attempt() -> None:
            attachment = build_slack_attachment(text, int(self._clock()))
            await self._post({"attachments": [attachment]})

        result = await self._retry.run(
            _attempt,
            log=self._log,
            event="slack_send",
            channel=self._channel_name,
        )
        if result.succeeded:
            self._log.info(
                "slack_sent", channel=self._channel_name, attempts=result.attempts
            )

        return DeliveryOutcome(
            channel=self.name,
            succeeded=result.succeeded,
            attempts=result.attempts,
            errors=result.errors,
        )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
