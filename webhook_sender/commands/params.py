"""Parameter resolver — merges identity, positional and named values."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from webhook_sender.models import OptionSpec, ParameterSpec, WebhookDefinition

logger = logging.getLogger(__name__)


class MissingRequiredParameterError(Exception):
    """Raised when a required parameter has neither a value nor a default.

    ``position`` is the 1-based argument position for positional parameters
    and the option flag for named options.
    """

    def __init__(self, name: str, position: int | str) -> None:
        self.name = name
        self.position = position
        if isinstance(position, int):
            message = f"Missing required parameter '{name}' (position {position})"
        else:
            message = f"Missing required option '{name}' (--{position})"
        super().__init__(message)


def resolve_positional(
    specs: Sequence[ParameterSpec], args: Sequence[str | None],
) -> dict[str, object]:
    resolved: dict[str, object] = {}
    for index, spec in enumerate(specs):
        value = args[index] if index < len(args) else None
        if value is not None:
            resolved[spec.name] = value
        elif spec.default is not None:
            resolved[spec.name] = spec.default
        elif spec.required:
            raise MissingRequiredParameterError(spec.name, index + 1)
    return resolved


def resolve_named(
    specs: Sequence[OptionSpec], provided: Mapping[str, str | None],
) -> dict[str, object]:
    known = {spec.option for spec in specs}
    unknown = sorted(flag for flag in provided if flag not in known)
    if unknown:
        logger.debug("Ignoring undeclared options: %s", unknown)

    resolved: dict[str, object] = {}
    for spec in specs:
        value = provided.get(spec.option)
        if value is not None:
            resolved[spec.name] = value
        elif spec.default is not None:
            resolved[spec.name] = spec.default
        elif spec.required:
            raise MissingRequiredParameterError(spec.name, spec.option)
    return resolved


def build_invocation_mapping(
    definition: WebhookDefinition,
    identity_key: str,
    identity: str,
    args: Sequence[str | None] = (),
    options: Mapping[str, str | None] | None = None,
) -> dict[str, object]:
    """Build the substitution mapping for one invocation.

    Named options override positional values sharing a key; the identity key
    is reserved and always holds the caller's identity.
    """
    mapping: dict[str, object] = {}
    mapping.update(resolve_positional(definition.parameters, args))
    mapping.update(resolve_named(definition.options, options or {}))
    mapping[identity_key] = identity
    return mapping
