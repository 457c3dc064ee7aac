"""Result types for the alert delivery subsystem."""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


class DeliveryOutcome(BaseModel):
    """What one handler did with one alert."""

    channel: str
    succeeded: bool
    attempts: int = 0
    errors: list[str] = Field(default_factory=list)
    # Per-target success, for handlers with more than one destination.
    targets: dict[str, bool] = Field(default_factory=dict)


class DispatchResult(BaseModel):
    """Outcomes of fanning one alert out to every configured handler."""

    datacenter: str
    outcomes: list[DeliveryOutcome] = Field(default_factory=list)
    timestamp: float = Field(default_factory=time.time)

    @property
    def all_succeeded(self) -> bool:
        return all(o.succeeded for o in self.outcomes)

    @property
    def failed_channels(self) -> list[str]:
        return [o.channel for o in self.outcomes if not o.succeeded]
