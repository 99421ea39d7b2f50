"""Command surface — binds each webhook definition to an invocable command."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from webhook_sender.audit.logger import AuditLogger
from webhook_sender.commands.params import (
    MissingRequiredParameterError,
    build_invocation_mapping,
)
from webhook_sender.models import (
    AuditEvent,
    AuditEventType,
    BotSelector,
    OptionSpec,
    PluginConfig,
    WebhookDefinition,
)
from webhook_sender.webhook.dispatcher import WebhookDispatcher
from webhook_sender.webhook.models import DispatchResult, InvocationSession

logger = logging.getLogger(__name__)

MISSING_IDENTITY_MESSAGE = "Unable to determine caller identity"
NO_WEBHOOKS_MESSAGE = "No webhook commands are configured."

CommandAction = Callable[
    [InvocationSession, Sequence[str], Mapping[str, str | None]], Awaitable[str]
]


class Connection(Protocol):
    """A live bot account able to deliver a message."""

    platform: str
    self_id: str

    async def send_message(self, channel_id: str, content: str) -> None: ...


ConnectionResolver = Callable[[BotSelector], Connection | None]


class CommandHost(Protocol):
    def register(
        self,
        name: str,
        description: str,
        signature: str,
        options: Sequence[OptionSpec],
        action: CommandAction,
    ) -> None: ...


@dataclass(frozen=True)
class RegisteredCommand:
    name: str
    description: str
    signature: str
    options: tuple[OptionSpec, ...]
    action: CommandAction


class CommandRegistry:
    """In-process command host keyed by command name."""

    def __init__(self) -> None:
        self._commands: dict[str, RegisteredCommand] = {}

    def register(
        self,
        name: str,
        description: str,
        signature: str,
        options: Sequence[OptionSpec],
        action: CommandAction,
    ) -> None:
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        self._commands[name] = RegisteredCommand(
            name=name,
            description=description,
            signature=signature,
            options=tuple(options),
            action=action,
        )

    def get(self, name: str) -> RegisteredCommand | None:
        return self._commands.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[RegisteredCommand]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)


def usage_signature(definition: WebhookDefinition) -> str:
    """``command <required> [optional]`` as shown in help output."""
    parts = [definition.command]
    for spec in definition.parameters:
        parts.append(f"<{spec.name}>" if spec.required else f"[{spec.name}]")
    return " ".join(parts)


def _describe_default(default: object) -> str:
    return "" if default is None else f", default: {default}"


def render_help(config: PluginConfig) -> str:
    """Human-readable listing of every configured webhook command."""
    if not config.webhooks:
        return NO_WEBHOOKS_MESSAGE

    blocks = []
    for definition in config.webhooks:
        lines = [f"/{usage_signature(definition)} - {definition.display_description}"]
        if definition.bot:
            lines.append(f"  bot: {definition.bot.platform}:{definition.bot.self_id}")
        if definition.parameters:
            lines.append("  parameters:")
            for position, spec in enumerate(definition.parameters, start=1):
                need = "required" if spec.required else "optional"
                line = f"    {position}. {spec.name} ({need}{_describe_default(spec.default)})"
                if spec.description:
                    line += f" - {spec.description}"
                lines.append(line)
        if definition.options:
            lines.append("  options:")
            for option in definition.options:
                need = "required" if option.required else "optional"
                line = (
                    f"    --{option.option} <{option.name}> "
                    f"({need}{_describe_default(option.default)})"
                )
                if option.description:
                    line += f" - {option.description}"
                lines.append(line)
        blocks.append("\n".join(lines))
    return "Available webhook commands:\n\n" + "\n\n".join(blocks)


class CommandSurface:
    """Turns webhook definitions into commands and delivers their replies."""

    def __init__(
        self,
        config: PluginConfig,
        dispatcher: WebhookDispatcher | None = None,
        resolve_connection: ConnectionResolver | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher or WebhookDispatcher(
            default_timeout_ms=config.global_timeout,
            verbose=config.enable_logging,
        )
        self._resolve_connection = resolve_connection
        self._audit = audit_logger
        self._definitions = {d.command: d for d in config.webhooks}

    @property
    def config(self) -> PluginConfig:
        return self._config

    def register(self, host: CommandHost) -> int:
        """Register one command per definition plus the help command."""
        if not self._config.webhooks:
            logger.warning("No webhooks configured; only the help command is registered")

        for definition in self._config.webhooks:
            logger.info("Registering command: %s", definition.command)
            host.register(
                definition.command,
                definition.display_description,
                usage_signature(definition),
                definition.options,
                self._make_action(definition),
            )

        host.register(
            self._config.help_command,
            "List all available webhook commands",
            self._config.help_command,
            (),
            self._help_action,
        )
        logger.info("Registered %d webhook commands", len(self._config.webhooks))
        return len(self._config.webhooks)

    def _make_action(self, definition: WebhookDefinition) -> CommandAction:
        async def action(
            session: InvocationSession,
            args: Sequence[str],
            options: Mapping[str, str | None],
        ) -> str:
            return await self.invoke(definition.command, session, args, options)

        return action

    async def _help_action(
        self,
        session: InvocationSession,
        args: Sequence[str],
        options: Mapping[str, str | None],
    ) -> str:
        return render_help(self._config)

    async def invoke(
        self,
        command: str,
        session: InvocationSession,
        args: Sequence[str] = (),
        options: Mapping[str, str | None] | None = None,
    ) -> str:
        """Run a webhook command and deliver its reply.

        Returns the delivered text; an empty string means nothing was sent.
        """
        definition = self._definitions.get(command)
        if definition is None:
            raise KeyError(f"Unknown webhook command: {command}")

        if not session.user_id:
            await self._deliver(definition, session, MISSING_IDENTITY_MESSAGE)
            return MISSING_IDENTITY_MESSAGE

        logger.info("User %s triggered command %s", session.user_id, command)
        self._log(AuditEventType.COMMAND_INVOKED, definition, session, "success",
                  {"args": len(args), "options": sorted(options or {})})

        try:
            mapping = build_invocation_mapping(
                definition, self._config.identity_key, session.user_id, args, options,
            )
        except MissingRequiredParameterError as exc:
            logger.info("Command %s rejected: %s", command, exc)
            self._log(AuditEventType.PARAMETER_MISSING, definition, session, "rejected",
                      {"parameter": exc.name, "position": exc.position})
            message = str(exc)
            await self._deliver(definition, session, message)
            return message

        try:
            result = await self._dispatcher.dispatch(definition, mapping)
        except Exception as exc:  # invocation boundary
            logger.exception("Webhook command %s failed unexpectedly", command)
            result = DispatchResult(success=False, message=f"Webhook command failed: {exc}")

        self._log(
            AuditEventType.WEBHOOK_SUCCESS if result.success else AuditEventType.WEBHOOK_FAILURE,
            definition,
            session,
            "success" if result.success else "failure",
            {"status_code": result.status_code},
        )

        if not result.message:
            logger.debug("Reply suppressed for command %s", command)
            return ""
        await self._deliver(definition, session, result.message)
        return result.message

    async def _deliver(
        self, definition: WebhookDefinition, session: InvocationSession, message: str,
    ) -> None:
        connection = session.connection
        if definition.bot is not None:
            selected = self._resolve_connection(definition.bot) if self._resolve_connection else None
            if selected is not None:
                connection = selected
            else:
                logger.warning(
                    "Bot %s:%s not available for %s; replying through the invoking connection",
                    definition.bot.platform, definition.bot.self_id, definition.command,
                )

        if connection is None:
            logger.warning("No connection to deliver the reply for %s", definition.command)
            return
        try:
            await connection.send_message(session.channel_id, message)
        except Exception:
            logger.exception("Failed to deliver the reply for %s", definition.command)

    def _log(
        self,
        event_type: AuditEventType,
        definition: WebhookDefinition,
        session: InvocationSession,
        result: str,
        details: dict[str, object],
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                command=definition.command,
                user_id=session.user_id,
                result=result,
                details=details,
            ))
