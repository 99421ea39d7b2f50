"""Response flattener — nested payload to dotted keys for templating."""

from __future__ import annotations

from collections.abc import Mapping


def flatten(value: object, prefix: str = "") -> dict[str, object]:
    """Flatten nested mappings into ``parent.child`` keys.

    Every level keeps its raw value under its own key as well, so both
    ``{user}`` and ``{user.id}`` resolve. Lists are not descended into.
    Anything other than a mapping flattens to an empty dict.
    """
    if not isinstance(value, Mapping):
        return {}

    flat: dict[str, object] = {}
    for key, item in value.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        flat[path] = item
        if isinstance(item, Mapping):
            flat.update(flatten(item, path))
    return flat
