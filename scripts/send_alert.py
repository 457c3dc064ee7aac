#!/usr/bin/env python3
"""Send one alert through every configured handler.

Handy for checking a deployment's channel configuration end to end.

Usage::

    # Trigger with default config
    python scripts/send_alert.py --node node-1 --service web --tag v2 \
        --status critical --message "web unhealthy"

    # Resolve it again
    python scripts/send_alert.py --node node-1 --service web --tag v2 \
        --status passing --message "web healthy"

    # Custom config file and log level
    python scripts/send_alert.py --config config/settings.yaml --log-level DEBUG ...
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from consul_alerting.core.config import load_settings
from consul_alerting.core.logging import setup_logging
from consul_alerting.core.types import AlertState, HealthStatus
from consul_alerting.notify.factory import create_dispatcher

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Deliver the alert described by *args*; 0 if every handler succeeded."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    alert = AlertState(
        node=args.node,
        service=args.service,
        tag=args.tag,
        status=args.status,
        message=args.message,
        details=args.details.replace("\\n", "\n"),
    )
    datacenter = args.datacenter or settings.datacenter

    dispatcher = create_dispatcher(settings)
    if not dispatcher.handlers:
        logger.warning("no_handlers_configured", config=args.config)

    try:
        result = await dispatcher.deliver(datacenter, alert)
    finally:
        await dispatcher.close()

    for outcome in result.outcomes:
        logger.info(
            "handler_outcome",
            handler=outcome.channel,
            succeeded=outcome.succeeded,
            attempts=outcome.attempts,
            errors=outcome.errors,
        )
    return 0 if result.all_succeeded else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send a single health alert through the configured handlers.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--datacenter",
        default=None,
        help="Datacenter name (default: from config)",
    )
    parser.add_argument("--node", required=True, help="Node the alert is about")
    parser.add_argument("--service", default="", help="Service name, empty for node alerts")
    parser.add_argument("--tag", default="", help="Service tag")
    parser.add_argument(
        "--status",
        default=HealthStatus.CRITICAL.value,
        choices=[s.value for s in HealthStatus],
        help="Health status (default: critical)",
    )
    parser.add_argument("--message", required=True, help="Short alert summary")
    parser.add_argument(
        "--details",
        default="",
        help="Alert details; a literal \\n starts a new line",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()
    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
