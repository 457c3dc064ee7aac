"""Alert delivery — handler contract, channel handlers and fan-out dispatcher."""

from consul_alerting.notify.channels import AlertHandler, ConsoleHandler
from consul_alerting.notify.dispatcher import AlertDispatcher
from consul_alerting.notify.email import EmailHandler
from consul_alerting.notify.exceptions import (
    ConsolePanic,
    DeliveryError,
    NotificationError,
    PagerDutyError,
    ResolutionError,
)
from consul_alerting.notify.factory import create_dispatcher, create_handlers
from consul_alerting.notify.pagerduty import (
    PagerDutyClient,
    PagerDutyHandler,
    PagerDutyResponse,
)
from consul_alerting.notify.retry import RetryPolicy, RetryResult
from consul_alerting.notify.slack import SlackHandler
from consul_alerting.notify.types import DeliveryOutcome, DispatchResult

__all__ = [
    "AlertDispatcher",
    "AlertHandler",
    "ConsoleHandler",
    "ConsolePanic",
    "DeliveryError",
    "DeliveryOutcome",
    "DispatchResult",
    "EmailHandler",
    "NotificationError",
    "PagerDutyClient",
    "PagerDutyError",
    "PagerDutyHandler",
    "PagerDutyResponse",
    "ResolutionError",
    "RetryPolicy",
    "RetryResult",
    "SlackHandler",
    "create_dispatcher",
    "create_handlers",
]
