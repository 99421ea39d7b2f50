"""Command API token check — gates command listing and invocation.

Requests for a public route (the health check) pass straight through. Any
other request must carry ``Authorization: Bearer <token>``. A refused
invocation of ``POST /commands/{name}`` is audited under that command name,
so the audit trail shows which webhook someone tried to trigger.
"""

from __future__ import annotations

import hmac
import logging
import re
from collections.abc import Iterable

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from webhook_sender.audit.logger import AuditLogger
from webhook_sender.models import AuditEvent, AuditEventType

logger = logging.getLogger(__name__)

INVOKE_PATH = re.compile(r"^/commands/(?P<name>[^/]+)/?$")


def command_for_path(path: str) -> str:
    """Command an API path addresses; the path itself for non-invocation routes."""
    match = INVOKE_PATH.match(path)
    return match.group("name") if match else path


class CommandAuthMiddleware:
    """Requires the shared Bearer token on every non-public command API route."""

    def __init__(
        self,
        app: ASGIApp,
        token: str,
        public_paths: Iterable[str] = (),
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self.app = app
        self._token = token.encode()
        self.public_paths = frozenset(public_paths)
        self.audit_logger = audit_logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.public_paths:
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not credentials:
            self._refuse(request, "missing_token" if not scheme else "invalid_format")
            response = JSONResponse(
                {"detail": "Authentication required"},
                status_code=401,
                headers={"WWW-Authenticate": "Bearer"},
            )
            await response(scope, receive, send)
            return

        if not hmac.compare_digest(credentials.strip().encode(), self._token):
            self._refuse(request, "invalid_token")
            response = JSONResponse({"detail": "Access denied"}, status_code=403)
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)

    def _refuse(self, request: Request, reason: str) -> None:
        path = request.scope["path"]
        command = command_for_path(path)
        logger.warning("Refused %s %s (%s)", request.method, path, reason)
        if self.audit_logger:
            self.audit_logger.log(AuditEvent(
                event_type=AuditEventType.AUTH_FAILURE,
                command=command,
                result="rejected",
                details={
                    "reason": reason,
                    "method": request.method,
                    "path": path,
                    "source_ip": request.client.host if request.client else None,
                },
            ))
