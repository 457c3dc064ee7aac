"""Core module — config, types, logging."""

from consul_alerting.core.config import (
    ConsoleConfig,
    DispatchConfig,
    EmailConfig,
    HandlersConfig,
    PagerDutyConfig,
    Settings,
    SlackConfig,
    get_settings,
    load_settings,
    reset_settings,
)
from consul_alerting.core.logging import setup_logging
from consul_alerting.core.types import AlertState, HealthStatus, incident_key

__all__ = [
    "AlertState",
    "ConsoleConfig",
    "DispatchConfig",
    "EmailConfig",
    "HandlersConfig",
    "HealthStatus",
    "PagerDutyConfig",
    "Settings",
    "SlackConfig",
    "get_settings",
    "incident_key",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
