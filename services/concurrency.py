"""Concurrency controls for metric fetches and cohort requests.

Two layers:

- :func:`limited_call` caps concurrent learning-data fetches inside one
  cohort run (the engine passes its own ``asyncio.Semaphore``).
- :class:`ConcurrencyLimitMiddleware` caps how many cohort requests a worker
  serves at once; extra requests get 503 + ``Retry-After`` instead of
  queueing behind a slow backend.

The middleware is pure ASGI (not BaseHTTPMiddleware).
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Coroutine, Iterable

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

DEFAULT_HEAVY_PATHS = frozenset({"/api/risk/cohort"})
DEFAULT_MAX_CONCURRENT = 4  # per worker
RETRY_AFTER_SECONDS = 5


async def limited_call(
    semaphore: asyncio.Semaphore,
    func: Callable[..., Coroutine[Any, Any, Any]],
    *args: Any,
    **kwargs: Any,
) -> Any:
    """Await ``func(*args, **kwargs)`` while holding ``semaphore``.

    Usage::

        snapshot = await limited_call(sem, fetch_student_metrics, "s-001", 5, 30)
    """
    async with semaphore:
        return await func(*args, **kwargs)


class ConcurrencyLimitMiddleware:
    """Reject requests to ``paths`` once ``max_concurrent`` are in flight."""

    def __init__(
        self,
        app: ASGIApp,
        paths: Iterable[str] = DEFAULT_HEAVY_PATHS,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ) -> None:
        self.app = app
        self.paths = frozenset(paths)
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") not in self.paths:
            await self.app(scope, receive, send)
            return

        if self.semaphore.locked():
            logger.warning(
                "%s at capacity (%d in flight), returning 503",
                scope.get("path"), self.max_concurrent,
            )
            await self._reject(send)
            return

        async with self.semaphore:
            await self.app(scope, receive, send)

    @staticmethod
    async def _reject(send: Send) -> None:
        body = json.dumps(
            {"detail": "Server busy: too many concurrent cohort requests. Please retry."}
        ).encode()
        await send({
            "type": "http.response.start",
            "status": 503,
            "headers": [
                (b"content-type", b"application/json"),
                (b"retry-after", str(RETRY_AFTER_SECONDS).encode()),
            ],
        })
        await send({"type": "http.response.body", "body": body})
