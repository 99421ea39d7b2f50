"""Click CLI for listing, checking and invoking webhook commands."""

from __future__ import annotations

import asyncio
import logging

import click

from webhook_sender.audit.logger import AuditLogger
from webhook_sender.commands.surface import CommandRegistry, CommandSurface
from webhook_sender.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from webhook_sender.webhook.models import InvocationSession


class ConsoleConnection:
    """Delivers replies to stdout."""

    platform = "console"
    self_id = "cli"

    async def send_message(self, channel_id: str, content: str) -> None:
        click.echo(content)


def _parse_options(values: tuple[str, ...]) -> dict[str, str | None]:
    options: dict[str, str | None] = {}
    for item in values:
        key, sep, value = item.partition("=")
        key = key.lstrip("-")
        if not key:
            raise click.BadParameter(f"invalid option '{item}'", param_hint="--option")
        options[key] = value if sep else None
    return options


@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH,
              help="Path to the webhook config JSON.")
@click.option("--audit-log", default=None, help="Audit log file path.")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str, audit_log: str | None, verbose: bool) -> None:
    """Webhook command runner."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    audit_logger = AuditLogger.from_env(audit_log) if audit_log else None
    surface = CommandSurface(config, audit_logger=audit_logger)
    registry = CommandRegistry()
    surface.register(registry)
    ctx.obj["config"] = config
    ctx.obj["surface"] = surface
    ctx.obj["registry"] = registry


@cli.command("list")
@click.pass_context
def list_commands(ctx: click.Context) -> None:
    """Show every configured command with its parameters."""
    registry: CommandRegistry = ctx.obj["registry"]
    help_command = registry.get(ctx.obj["config"].help_command)
    session = InvocationSession(user_id=None, channel_id="console")
    click.echo(asyncio.run(help_command.action(session, (), {})))


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the config and print the registered signatures."""
    registry: CommandRegistry = ctx.obj["registry"]
    for command in registry:
        flags = " ".join(f"[--{spec.option} <{spec.name}>]" for spec in command.options)
        click.echo(f"{command.signature} {flags}".rstrip())
    click.echo(f"{len(registry)} commands registered", err=True)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("command")
@click.argument("args", nargs=-1)
@click.option("--user", required=True, help="Caller identity.")
@click.option("--channel", default="console", help="Channel to reply to.")
@click.option("--option", "-o", "raw_options", multiple=True,
              help="Named option as KEY=VALUE (repeatable).")
@click.pass_context
def invoke(
    ctx: click.Context,
    command: str,
    args: tuple[str, ...],
    user: str,
    channel: str,
    raw_options: tuple[str, ...],
) -> None:
    """Invoke COMMAND with positional ARGS and print the reply."""
    registry: CommandRegistry = ctx.obj["registry"]
    registered = registry.get(command)
    if registered is None:
        raise click.ClickException(f"Unknown command: {command}")

    session = InvocationSession(
        user_id=user, channel_id=channel, connection=ConsoleConnection(), platform="console",
    )
    reply = asyncio.run(registered.action(session, args, _parse_options(raw_options)))
    if command == ctx.obj["config"].help_command:
        click.echo(reply)
