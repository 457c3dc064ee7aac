"""Exception hierarchy for alert delivery."""

from __future__ import annotations


class NotificationError(Exception):
    """Base exception for all delivery errors."""


class ResolutionError(NotificationError):
    """Could not determine where to deliver (e.g. MX lookup failed)."""


class DeliveryError(NotificationError):
    """A single delivery attempt failed."""


class PagerDutyError(DeliveryError):
    """PagerDuty rejected the event or could not be reached."""


class ConsolePanic(BaseException):
    """Raised by a console handler configured with the ``panic`` level.

    Derives from BaseException so the dispatcher's per-handler isolation
    does not swallow it.
    """
