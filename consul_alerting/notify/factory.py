"""Convenience factory for wiring handlers and the dispatcher from settings."""

from __future__ import annotations

from consul_alerting.core.config import Settings
from consul_alerting.notify.channels import AlertHandler, ConsoleHandler
from consul_alerting.notify.dispatcher import AlertDispatcher
from consul_alerting.notify.email import EmailHandler
from consul_alerting.notify.pagerduty import PagerDutyHandler
from consul_alerting.notify.retry import Sleep
from consul_alerting.notify.slack import SlackHandler


def create_handlers(settings: Settings, sleep: Sleep | None = None) -> list[AlertHandler]:
    """Instantiate every configured handler.

    Order is stdout, email, pagerduty, slack; within a variant, config order.
    """
    cfg = settings.handlers
    delay = settings.dispatch.retry_delay_secs
    handlers: list[AlertHandler] = []

    for name, console_cfg in cfg.stdout.items():
        handlers.append(ConsoleHandler(console_cfg, name=name))

    for name, email_cfg in cfg.email.items():
        handlers.append(
            EmailHandler(email_cfg, name=name, retry_delay_secs=delay, sleep=sleep)
        )

    for name, pd_cfg in cfg.pagerduty.items():
        handlers.append(
            PagerDutyHandler(pd_cfg, name=name, retry_delay_secs=delay, sleep=sleep)
        )

    for name, slack_cfg in cfg.slack.items():
        handlers.append(
            SlackHandler(slack_cfg, name=name, retry_delay_secs=delay, sleep=sleep)
        )

    return handlers


def create_dispatcher(settings: Settings, sleep: Sleep | None = None) -> AlertDispatcher:
    """Build a dispatcher holding every handler configured in *settings*."""
    return AlertDispatcher(
        handlers=create_handlers(settings, sleep=sleep),
        concurrent=settings.dispatch.concurrent,
    )
