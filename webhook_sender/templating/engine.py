"""Template engine — ``{name}`` placeholder substitution over nested values.

Rendering never fails: placeholders whose name is missing from the mapping
are left in place as literal text. Callers that must not send unresolved
placeholders check with :func:`has_unresolved_placeholder` first.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping

# Names carry no whitespace or quotes, so JSON literals such as {"a":1} stay text
PLACEHOLDER_PATTERN = re.compile(r"\{([^{}\s\"]+)\}")


def stringify(value: object) -> str:
    """String form used when a value is substituted into a template."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def placeholder_names(text: str) -> list[str]:
    """Return every placeholder name in ``text``, in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(text)


def has_unresolved_placeholder(text: str, provided_names: Iterable[str]) -> bool:
    provided = set(provided_names)
    return any(name not in provided for name in placeholder_names(text))


def render(value: object, mapping: Mapping[str, object]) -> object:
    """Recursively substitute placeholders in strings, lists and dict keys/values."""
    if isinstance(value, str):
        return _render_text(value, mapping)
    if isinstance(value, (list, tuple)):
        return [render(item, mapping) for item in value]
    if isinstance(value, dict):
        return {
            (_render_text(key, mapping) if isinstance(key, str) else key): render(item, mapping)
            for key, item in value.items()
        }
    return value


def _render_text(text: str, mapping: Mapping[str, object]) -> str:
    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in mapping:
            return stringify(mapping[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_substitute, text)
