"""FastAPI middleware — request ID tagging and access logging (pure ASGI)."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    """Tag every HTTP request/response with an ID and log its outcome.

    If the client sends ``X-Request-ID`` it is reused; otherwise a short
    UUID is generated.  The ID is stored in ``scope["state"]`` and echoed in
    the response headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode() or str(uuid.uuid4())[:8]

        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        t0 = time.monotonic()
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            logger.info(
                "[%s] %s %s → %d (%.0fms)",
                request_id, scope.get("method", ""), scope.get("path", ""),
                status_code, (time.monotonic() - t0) * 1000,
            )
