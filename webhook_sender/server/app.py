"""FastAPI command host — invoke webhook commands over HTTP.

A chat bridge posts the parsed command (caller, arguments, options) and gets
back the replies the command produced.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from webhook_sender.audit.logger import AuditLogger
from webhook_sender.commands.surface import (
    CommandRegistry,
    CommandSurface,
    ConnectionResolver,
)
from webhook_sender.config import load_config_from_env
from webhook_sender.models import PluginConfig
from webhook_sender.server.auth_middleware import CommandAuthMiddleware
from webhook_sender.webhook.dispatcher import WebhookDispatcher
from webhook_sender.webhook.models import InvocationSession

logger = logging.getLogger(__name__)

# Route names reachable without the API token
PUBLIC_ENDPOINTS = ("health",)


class InvokeRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str | None = None
    channel_id: str = ""
    platform: str | None = None
    args: list[str] = Field(default_factory=list)
    options: dict[str, str | None] = Field(default_factory=dict)


class InvokeResponse(BaseModel):
    command: str
    messages: list[str]


class CommandInfo(BaseModel):
    name: str
    description: str
    signature: str
    options: list[str]


class ReplyCollector:
    """Connection that keeps replies so they can be returned in the HTTP response."""

    def __init__(self, platform: str = "http", self_id: str = "webhook-sender") -> None:
        self.platform = platform
        self.self_id = self_id
        self.messages: list[str] = []

    async def send_message(self, channel_id: str, content: str) -> None:
        self.messages.append(content)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = load_config_from_env()
    audit_log = os.environ.get("AUDIT_LOG_PATH")
    audit_logger = AuditLogger.from_env(audit_log) if audit_log else None
    return create_app(
        config,
        token=os.environ.get("WEBHOOK_SENDER_TOKEN"),
        audit_logger=audit_logger,
    )


def create_app(
    config: PluginConfig,
    token: str | None = None,
    audit_logger: AuditLogger | None = None,
    dispatcher: WebhookDispatcher | None = None,
    resolve_connection: ConnectionResolver | None = None,
) -> FastAPI:
    """Create the command API app, optionally protected by a Bearer token."""
    app = FastAPI(docs_url=None, redoc_url=None)
    surface = CommandSurface(
        config,
        dispatcher=dispatcher,
        resolve_connection=resolve_connection,
        audit_logger=audit_logger,
    )
    registry = CommandRegistry()
    surface.register(registry)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/commands")
    async def list_commands() -> list[CommandInfo]:
        return [
            CommandInfo(
                name=command.name,
                description=command.description,
                signature=command.signature,
                options=[f"--{spec.option}" for spec in command.options],
            )
            for command in registry
        ]

    @app.post("/commands/{name}")
    async def invoke(name: str, request: InvokeRequest) -> InvokeResponse:
        command = registry.get(name)
        if command is None:
            raise HTTPException(status_code=404, detail=f"Unknown command: {name}")

        collector = ReplyCollector(platform=request.platform or "http")
        session = InvocationSession(
            user_id=request.user_id,
            channel_id=request.channel_id,
            connection=collector,
            platform=request.platform,
        )
        reply = await command.action(session, request.args, request.options)
        if name == config.help_command:
            # The help command returns its text instead of delivering it
            collector.messages.append(reply)
        return InvokeResponse(command=name, messages=collector.messages)

    if token:
        app.add_middleware(
            CommandAuthMiddleware,
            token=token,
            public_paths=[app.url_path_for(name) for name in PUBLIC_ENDPOINTS],
            audit_logger=audit_logger,
        )
    else:
        logger.warning("WEBHOOK_SENDER_TOKEN not set; command API is unauthenticated")

    return app
