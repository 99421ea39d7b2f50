"""Configuration loading for webhook commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from webhook_sender.models import PluginConfig

DEFAULT_CONFIG_PATH = "config/webhooks.json"


class ConfigError(Exception):
    pass


def load_config_from_data(data: object) -> PluginConfig:
    """Validate already-parsed config data."""
    if data is None:
        raise ConfigError("Webhook config is missing")
    try:
        return PluginConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid webhook config: {exc}") from exc


def load_config(config_path: str) -> PluginConfig:
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Webhook config file not found: {config_path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Webhook config at {config_path} is invalid JSON: {exc}") from exc
    return load_config_from_data(data)


def load_config_from_env() -> PluginConfig:
    """Load the config file named by ``WEBHOOK_SENDER_CONFIG``."""
    return load_config(os.environ.get("WEBHOOK_SENDER_CONFIG", DEFAULT_CONFIG_PATH))
