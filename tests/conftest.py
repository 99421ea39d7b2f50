"""Shared test fixtures for webhook-sender."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from webhook_sender.audit.logger import AuditLogger
from webhook_sender.models import PluginConfig, WebhookDefinition


class FakeConnection:
    """Connection double that records delivered messages."""

    def __init__(self, platform: str = "test", self_id: str = "bot") -> None:
        self.platform = platform
        self.self_id = self_id
        self.sent: list[tuple[str, str]] = []

    async def send_message(self, channel_id: str, content: str) -> None:
        self.sent.append((channel_id, content))

    @property
    def messages(self) -> list[str]:
        return [content for _, content in self.sent]


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def config_dir() -> Path:
    return Path(__file__).parent.parent / "config"


# --- Factory functions for test data ---


def make_definition(**kwargs: Any) -> WebhookDefinition:
    """Factory for WebhookDefinition with sensible defaults."""
    defaults: dict[str, Any] = {
        "command": "ping",
        "url": "https://hooks.test/ping/{QQ}",
        "method": "POST",
    }
    defaults.update(kwargs)
    return WebhookDefinition.model_validate(defaults)


def make_config(*definitions: WebhookDefinition, **kwargs: Any) -> PluginConfig:
    return PluginConfig(webhooks=list(definitions), **kwargs)


class RecordingHandler:
    """httpx.MockTransport handler returning a canned response and keeping requests."""

    def __init__(
        self,
        status_code: int = 200,
        body: object = None,
        error: Callable[[httpx.Request], Exception] | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = {} if body is None else body
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


def make_transport(handler: RecordingHandler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)
