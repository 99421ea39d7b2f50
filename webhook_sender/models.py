"""Shared Pydantic data models for webhook-sender."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_IDENTITY_KEY = "QQ"
DEFAULT_HELP_COMMAND = "webhook-help"
DEFAULT_SUCCESS_MESSAGE = "Request sent successfully"

Scalar = str | int | float


class _ConfigModel(BaseModel):
    """Frozen model that reads camelCase config keys and accepts snake_case too."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


# --- Enums ---


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class AuditEventType(str, Enum):
    COMMAND_INVOKED = "command_invoked"
    PARAMETER_MISSING = "parameter_missing"
    WEBHOOK_SUCCESS = "webhook_success"
    WEBHOOK_FAILURE = "webhook_failure"
    AUTH_FAILURE = "auth_failure"


# --- Parameter Models ---


class ParameterSpec(_ConfigModel):
    """Positional parameter; its index in the list selects the argument token."""

    name: str = Field(min_length=1)
    required: bool = False
    default: Scalar | None = None
    description: str | None = None


class OptionSpec(_ConfigModel):
    """Named option supplied with an explicit ``--flag`` at invocation."""

    name: str = Field(min_length=1)
    option: str = Field(min_length=1)
    required: bool = False
    default: Scalar | None = None
    description: str | None = None

    @field_validator("option")
    @classmethod
    def _strip_dashes(cls, value: str) -> str:
        flag = value.lstrip("-")
        if not flag:
            raise ValueError("option flag must contain a name")
        return flag


class BotSelector(_ConfigModel):
    platform: str = Field(min_length=1)
    self_id: str = Field(min_length=1)


# --- Webhook Models ---


class WebhookDefinition(_ConfigModel):
    """One registrable command and the HTTP request template behind it."""

    command: str = Field(min_length=1)
    description: str | None = None
    url: str = Field(min_length=1)
    method: HttpMethod = HttpMethod.POST
    headers: dict[str, Any] = Field(default_factory=dict)
    body: Any = Field(default_factory=dict)
    timeout: int | None = Field(default=None, gt=0)  # milliseconds
    success_codes: list[int] = Field(default_factory=lambda: [200], min_length=1)
    enable_success_reply: bool = True
    enable_error_reply: bool = True
    success_message: str = DEFAULT_SUCCESS_MESSAGE
    error_message: str | None = None
    parameters: list[ParameterSpec] = Field(default_factory=list)
    options: list[OptionSpec] = Field(default_factory=list)
    bot: BotSelector | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_parameters(self) -> WebhookDefinition:
        seen_optional = False
        for spec in self.parameters:
            if spec.required and seen_optional:
                raise ValueError(
                    f"required parameter '{spec.name}' cannot follow an optional one",
                )
            if not spec.required:
                seen_optional = True

        flags = [spec.option for spec in self.options]
        duplicates = sorted({flag for flag in flags if flags.count(flag) > 1})
        if duplicates:
            raise ValueError(f"duplicate option flags: {duplicates}")
        return self

    @property
    def display_description(self) -> str:
        return self.description or f"Send a webhook request to {self.url}"


class PluginConfig(_ConfigModel):
    """Top-level configuration: the webhook list plus global settings."""

    webhooks: list[WebhookDefinition] = Field(default_factory=list)
    global_timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)  # milliseconds
    enable_logging: bool = True
    identity_key: str = Field(default=DEFAULT_IDENTITY_KEY, min_length=1)
    help_command: str = Field(default=DEFAULT_HELP_COMMAND, min_length=1)

    @model_validator(mode="after")
    def _check_commands(self) -> PluginConfig:
        names: set[str] = set()
        for webhook in self.webhooks:
            if webhook.command in names:
                raise ValueError(f"duplicate command name: '{webhook.command}'")
            if webhook.command == self.help_command:
                raise ValueError(
                    f"command '{webhook.command}' collides with the help command",
                )
            names.add(webhook.command)

            param_names = [s.name for s in webhook.parameters]
            param_names += [s.name for s in webhook.options]
            if self.identity_key in param_names:
                raise ValueError(
                    f"command '{webhook.command}' uses the reserved "
                    f"identity key '{self.identity_key}' as a parameter name",
                )
        return self


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    command: str
    user_id: str | None = None
    result: str  # "success" | "failure" | "rejected"
    details: dict[str, object] | None = None
