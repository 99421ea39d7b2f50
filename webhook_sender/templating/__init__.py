"""Placeholder templating over nested JSON-like values."""

from webhook_sender.templating.engine import (
    has_unresolved_placeholder,
    placeholder_names,
    render,
    stringify,
)
from webhook_sender.templating.flatten import flatten
from webhook_sender.templating.headers import filter_and_render

__all__ = [
    "filter_and_render",
    "flatten",
    "has_unresolved_placeholder",
    "placeholder_names",
    "render",
    "stringify",
]
