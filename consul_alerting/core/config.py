"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class HandlerConfig(BaseModel):
    """Base for per-handler options — immutable once loaded."""

    model_config = ConfigDict(frozen=True)


class ConsoleConfig(HandlerConfig):
    """Log-sink handler configuration."""

    log_level: str = "info"


class EmailConfig(HandlerConfig):
    """Email handler configuration (delivery straight to each recipient's MX)."""

    recipients: list[str] = Field(default_factory=list)
    max_retries: int = Field(default=0, ge=0)


class PagerDutyConfig(HandlerConfig):
    """PagerDuty handler configuration."""

    service_key: SecretStr = SecretStr("")
    max_retries: int = Field(default=0, ge=0)


class SlackConfig(HandlerConfig):
    """Slack incoming-webhook handler configuration."""

    api_token: SecretStr = SecretStr("")
    channel_name: str = ""
    max_retries: int = Field(default=0, ge=0)


class HandlersConfig(BaseModel):
    """Configured handlers, keyed by operator-chosen name per variant."""

    stdout: dict[str, ConsoleConfig] = Field(default_factory=dict)
    email: dict[str, EmailConfig] = Field(default_factory=dict)
    pagerduty: dict[str, PagerDutyConfig] = Field(default_factory=dict)
    slack: dict[str, SlackConfig] = Field(default_factory=dict)


class DispatchConfig(BaseModel):
    """Fan-out behaviour."""

    concurrent: bool = False
    retry_delay_secs: float = Field(default=5.0, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    datacenter: str = "dc1"
    handlers: HandlersConfig = HandlersConfig()
    dispatch: DispatchConfig = DispatchConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
