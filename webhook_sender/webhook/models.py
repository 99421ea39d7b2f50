"""Data models for the webhook dispatch pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webhook_sender.commands.surface import Connection


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one webhook call. An empty message means "do not reply"."""

    success: bool
    message: str = ""
    status_code: int | None = None


@dataclass
class InvocationSession:
    """Who invoked a command, and where a reply should go by default."""

    user_id: str | None
    channel_id: str
    connection: Connection | None = None
    platform: str | None = None
