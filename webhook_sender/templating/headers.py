"""Header filter — render header templates, dropping unsatisfied ones."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from webhook_sender.templating.engine import has_unresolved_placeholder, render, stringify

logger = logging.getLogger(__name__)


def filter_and_render(
    header_templates: Mapping[str, object] | None,
    mapping: Mapping[str, object],
) -> dict[str, str]:
    """Render headers whose placeholders are all provided; omit the rest.

    A header such as ``Authorization: Bearer {token}`` is only sent when the
    invocation supplied ``token``. Non-string values are sent as strings.
    """
    headers: dict[str, str] = {}
    if not header_templates:
        return headers

    provided = mapping.keys()
    for name, template in header_templates.items():
        header_name = str(render(name, mapping))
        if not isinstance(template, str):
            headers[header_name] = stringify(template)
            continue
        if has_unresolved_placeholder(template, provided):
            logger.debug("Omitting header %s: unresolved placeholder", name)
            continue
        headers[header_name] = str(render(template, mapping))
    return headers
