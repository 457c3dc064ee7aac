"""Email handler — direct delivery to each recipient's mail exchange."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Any

import aiosmtplib
import dns.asyncresolver
import dns.exception

from consul_alerting.core.config import EmailConfig
from consul_alerting.core.types import AlertState
from consul_alerting.notify.channels import AlertHandler
from consul_alerting.notify.exceptions import ResolutionError
from consul_alerting.notify.retry import DEFAULT_RETRY_DELAY_SECS, RetryPolicy, Sleep
from consul_alerting.notify.types import DeliveryOutcome

SENDER_ADDRESS = "consul-alerting@noreply.com"
SENDER_NAME = "Consul Alerting"
SMTP_PORT = 25
SMTP_TIMEOUT_SECS = 30.0

MxResolver = Callable[[str], Awaitable[str]]


async def lookup_mx(domain: str) -> str:
    """Return the preferred mail exchange host for *domain*.

    Raises:
        ResolutionError: No usable MX record could be found.
    """
    try:
        answer = await dns.asyncresolver.resolve(domain, "MX")
    except dns.exception.DNSException as exc:
        raise ResolutionError(f"MX lookup for {domain!r} failed: {exc}") from exc

    records = sorted(answer, key=lambda r: r.preference)
    if not records:
        raise ResolutionError(f"no MX records for {domain!r}")
    host = records[0].exchange.to_text(omit_final_dot=True)
    # RFC 7505 null MX: the domain accepts no mail.
    if not host or host == ".":
        raise ResolutionError(f"{domain!r} does not accept mail (null MX)")
    return host


def recipient_domain(recipient: str) -> str:
    _, sep, domain = recipient.rpartition("@")
    if not sep or not domain:
        raise ResolutionError(f"invalid recipient address: {recipient!r}")
    return domain


def subject_line(message: str) -> str:
    """Fold a possibly multi-line message into a single header-safe line."""
    return " ".join(part.strip() for part in message.splitlines() if part.strip())


def build_email(recipient: str, alert: AlertState) -> EmailMessage:
    """Compose the plain-text notification for one recipient."""
    msg = EmailMessage()
    msg["From"] = Address(display_name=SENDER_NAME, addr_spec=SENDER_ADDRESS)
    msg["To"] = recipient
    msg["Subject"] = subject_line(alert.message)
    msg.set_content(alert.details)
    return msg


class EmailHandler(AlertHandler):
    """Mails every configured recipient, isolating per-recipient failures."""

    def __init__(
        self,
        config: EmailConfig,
        name: str = "email",
        *,
        resolver: MxResolver | None = None,
        retry_delay_secs: float = DEFAULT_RETRY_DELAY_SECS,
        sleep: Sleep | None = None,
        logger: Any = None,
    ) -> None:
        super().__init__(name, logger)
        self._recipients = list(config.recipients)
        self._resolve = resolver or lookup_mx
        self._retry = RetryPolicy(
            max_retries=config.max_retries,
            delay_secs=retry_delay_secs,
            sleep=sleep,
        )

    async def deliver(self, datacenter: str, alert: AlertState) -> DeliveryOutcome:
        targets: dict[str, bool] = {}
        errors: list[str] = []
        attempts = 0

        for recipient in self._recipients:
            try:
                host = await self._resolve(recipient_domain(recipient))
            except Exception as exc:
                self._log.error(
                    "email_server_lookup_failed",
                    recipient=recipient,
                    error=str(exc),
                )
                targets[recipient] = False
                errors.append(str(exc))
                continue

            try:
                message = build_email(recipient, alert)
            except Exception as exc:
                self._log.error(
                    "email_compose_failed",
                    recipient=recipient,
                    error=str(exc),
                )
                targets[recipient] = False
                errors.append(str(exc))
                continue

            async def _send(host: str = host, message: EmailMessage = message) -> None:
                await aiosmtplib.send(
                    message,
                    hostname=host,
                    port=SMTP_PORT,
                    use_tls=False,
                    start_tls=False,
                    timeout=SMTP_TIMEOUT_SECS,
                )

            result = await self._retry.run(
                _send,
                log=self._log,
                event="email_send",
                recipient=recipient,
                mail_server=host,
            )
            attempts += result.attempts
            errors.extend(result.errors)
            targets[recipient] = result.succeeded
            if result.succeeded:
                self._log.info(
                    "email_sent",
                    recipient=recipient,
                    mail_server=host,
                    attempts=result.attempts,
                )

        return DeliveryOutcome(
            channel=self.name,
            succeeded=all(targets.values()),
            attempts=attempts,
            errors=errors,
            targets=targets,
        )
