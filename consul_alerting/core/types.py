"""Domain types for health alerts produced by the monitoring subsystem."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# Joins the parts of an incident key.
INCIDENT_KEY_SEPARATOR = "-"


class HealthStatus(StrEnum):
    """Consul health check states."""

    PASSING = "passing"
    WARNING = "warning"
    CRITICAL = "critical"
    MAINTENANCE = "maintenance"


class AlertState(BaseModel):
    """One health-state change for a service instance (or a whole node).

    ``service`` and ``tag`` are empty for node-level alerts.
    """

    model_config = ConfigDict(frozen=True)

    node: str
    service: str = ""
    tag: str = ""
    status: HealthStatus
    message: str
    details: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_passing(self) -> bool:
        return self.status == HealthStatus.PASSING


def incident_key(datacenter: str, alert: AlertState) -> str:
    """Return the key that correlates a trigger with its later resolve.

    Unique per datacenter and service/node, and stable across calls.
    """
    return INCIDENT_KEY_SEPARATOR.join(
        [datacenter, alert.service, alert.tag, alert.node]
    )
