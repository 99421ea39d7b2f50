"""Webhook dispatcher — render, send and interpret one webhook request.

Pipeline stages:
1. Render URL, headers (unsatisfied headers dropped) and body
2. Send via httpx, accepting every status code
3. Classify the status against the definition's success codes
4. Render the success or error reply from the combined mapping
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from webhook_sender.models import DEFAULT_TIMEOUT_MS, HttpMethod, WebhookDefinition
from webhook_sender.templating import filter_and_render, flatten, render, stringify
from webhook_sender.webhook.models import DispatchResult

logger = logging.getLogger(__name__)


class TransportFailure(Exception):
    """Raised when the request could not be built or no HTTP response arrived.

    httpx returns every response it receives, whatever the status, so a
    transport failure never carries a response body.
    """

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(description)


class WebhookDispatcher:
    """Sends the request described by a webhook definition."""

    def __init__(
        self,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        verbose: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._default_timeout_ms = default_timeout_ms
        self._log_level = logging.INFO if verbose else logging.DEBUG
        self._transport = transport

    async def dispatch(
        self, definition: WebhookDefinition, mapping: Mapping[str, object],
    ) -> DispatchResult:
        """Run the webhook for one invocation mapping."""
        url = str(render(definition.url, mapping))
        headers = filter_and_render(definition.headers, mapping)
        payload = render(definition.body, mapping)
        timeout_ms = definition.timeout or self._default_timeout_ms

        logger.log(self._log_level, "Sending %s webhook for '%s' to %s",
                   definition.method.value, definition.command, url)
        logger.log(self._log_level, "Headers: %s", sorted(headers))
        logger.log(self._log_level, "Payload: %s", _dump(payload))

        try:
            status_code, body = await self._send(
                definition.method, url, headers, payload, timeout_ms,
            )
        except TransportFailure as exc:
            logger.error("Webhook '%s' failed: %s", definition.command, exc.description)
            return self._transport_failure(definition, mapping, exc)

        logger.log(self._log_level, "Webhook '%s' answered %d: %s",
                   definition.command, status_code, _dump(body))

        message_mapping: dict[str, object] = {
            **mapping, "status": status_code, **flatten(body),
        }

        if status_code in definition.success_codes:
            message = ""
            if definition.enable_success_reply:
                message = str(render(definition.success_message, message_mapping))
            return DispatchResult(success=True, message=message, status_code=status_code)

        logger.warning("Webhook '%s' returned unexpected status %d",
                       definition.command, status_code)
        message = ""
        if definition.enable_error_reply:
            template = definition.error_message or f"Request failed with status {status_code}"
            message = str(render(template, message_mapping))
        return DispatchResult(success=False, message=message, status_code=status_code)

    def _transport_failure(
        self,
        definition: WebhookDefinition,
        mapping: Mapping[str, object],
        failure: TransportFailure,
    ) -> DispatchResult:
        if not definition.enable_error_reply:
            return DispatchResult(success=False)
        message_mapping: dict[str, object] = {**mapping, "error": failure.description}
        template = definition.error_message or f"Request failed: {failure.description}"
        return DispatchResult(success=False, message=str(render(template, message_mapping)))

    async def _send(
        self,
        method: HttpMethod,
        url: str,
        headers: dict[str, str],
        payload: object,
        timeout_ms: int,
    ) -> tuple[int, object]:
        """Issue the request and return ``(status_code, decoded_body)``."""
        request_kwargs: dict[str, Any] = {}
        if method == HttpMethod.POST:
            request_kwargs["json"] = payload if payload is not None else {}
        elif isinstance(payload, Mapping) and payload:
            request_kwargs["params"] = _query_params(payload)

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(
                    method.value,
                    url,
                    headers=headers,
                    timeout=timeout_ms / 1000,
                    **request_kwargs,
                )
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"timeout of {timeout_ms}ms exceeded") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(str(exc) or type(exc).__name__) from exc
        except (httpx.InvalidURL, UnicodeEncodeError) as exc:
            # Raised while the request is built, before anything is sent
            raise TransportFailure(f"invalid request: {exc}") from exc

        return resp.status_code, _decode_body(resp)


def _decode_body(resp: httpx.Response) -> object:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _query_params(payload: Mapping[Any, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, (str, int, float)) or value is None:
            params[str(key)] = value
        elif isinstance(value, list) and all(
            isinstance(item, (str, int, float)) for item in value
        ):
            params[str(key)] = value
        else:
            params[str(key)] = stringify(value)
    return params


def _dump(value: object) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)
