"""HTTP client for the learning-data backend.

The backend serves per-student activity aggregates under
``{base_url}{api_prefix}/learning/...``.  Reads are idempotent, so the client
retries them freely:

- transport errors and 5xx responses are retried with exponential backoff
- 4xx responses are returned to the caller as :class:`LearningDataClientError`
- after ``CIRCUIT_OPEN_THRESHOLD`` consecutive failures a :class:`CircuitBreaker`
  short-circuits further calls until ``CIRCUIT_RESET_TIMEOUT`` has passed

The connection pool lives for the duration of the FastAPI lifespan.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from config.settings import get_settings

logger = logging.getLogger(__name__)

_client: LearningDataClient | None = None

MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.5  # seconds, doubles each attempt
CIRCUIT_OPEN_THRESHOLD = 5  # consecutive failures
CIRCUIT_RESET_TIMEOUT = 60  # seconds


class LearningDataClientError(Exception):
    """Non-2xx answer from the learning-data backend."""

    def __init__(self, status_code: int, detail: str, url: str = ""):
        self.status_code = status_code
        self.detail = detail
        self.url = url
        super().__init__(f"Learning data API {status_code}: {detail} ({url})")

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class CircuitOpenError(Exception):
    """The circuit breaker is open; the request was not sent."""

    def __init__(self, retry_in: float = 0.0):
        self.retry_in = retry_in
        super().__init__(
            f"Learning-data backend unavailable, circuit open for another {retry_in:.0f}s"
        )


class CircuitBreaker:
    """Consecutive-failure breaker with a timed half-open retry."""

    def __init__(
        self,
        threshold: int = CIRCUIT_OPEN_THRESHOLD,
        reset_timeout: float = CIRCUIT_RESET_TIMEOUT,
    ) -> None:
        self.threshold = threshold
        self.reset_timeout = reset_timeout
        self.failures = 0
        self.opened_at: float | None = None

    @property
    def is_open(self) -> bool:
        if self.failures < self.threshold:
            return False
        if self.opened_at is not None and self.remaining() <= 0:
            logger.info("Learning-data circuit half-open, letting one request through")
            return False
        return True

    def remaining(self) -> float:
        """Seconds left until a half-open request is allowed."""
        if self.opened_at is None:
            return 0.0
        return max(self.reset_timeout - (time.monotonic() - self.opened_at), 0.0)

    def record_success(self) -> None:
        if self.failures:
            logger.info("Learning-data backend recovered after %d failures", self.failures)
        self.failures = 0
        self.opened_at = None

    def record_failure(self) -> None:
        self.failures += 1
        if self.failures < self.threshold:
            return
        # also re-arms the window when the half-open request fails
        self.opened_at = time.monotonic()
        logger.warning(
            "Learning-data circuit OPEN after %d consecutive failures (reset in %ds)",
            self.failures, self.reset_timeout,
        )


class LearningDataClient:
    """Async read client for the learning-data backend."""

    def __init__(self) -> None:
        settings = get_settings()
        self._base_url = (
            settings.learning_data_base_url.rstrip("/") + settings.learning_data_api_prefix
        )
        self._timeout = settings.learning_data_timeout
        self._access_token = settings.learning_data_access_token
        self._http: httpx.AsyncClient | None = None
        self.breaker = CircuitBreaker()

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers=self._auth_headers(),
            limits=httpx.Limits(max_connections=30, max_keepalive_connections=15),
        )
        logger.info("LearningDataClient started, base_url=%s", self._base_url)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.info("LearningDataClient closed")

    # -- public API ----------------------------------------------------------

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body (``{}`` when empty).

        Raises:
            CircuitOpenError: the breaker is open.
            LearningDataClientError: 4xx, or 5xx after the last retry.
            httpx.TransportError: network failure after the last retry.
        """
        if self.breaker.is_open:
            raise CircuitOpenError(self.breaker.remaining())

        http = self._ensure_started()
        query = {k: v for k, v in (params or {}).items() if v is not None}

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                return await self._send(http, path, query)
            except (httpx.TransportError, LearningDataClientError) as exc:
                if isinstance(exc, LearningDataClientError) and not exc.retryable:
                    raise
                if attempt == MAX_RETRIES:
                    raise
                delay = RETRY_BASE_DELAY * 2 ** (attempt - 1)
                logger.warning(
                    "GET %s failed (%s), retry %d/%d in %.1fs",
                    path, exc, attempt, MAX_RETRIES, delay,
                )
                await asyncio.sleep(delay)

    async def _send(self, http: httpx.AsyncClient, path: str, params: dict[str, Any]) -> Any:
        t0 = time.monotonic()
        try:
            response = await http.request("GET", path, params=params)
        except httpx.TransportError:
            self.breaker.record_failure()
            raise

        logger.info(
            "GET %s → %d (%.0fms)",
            path, response.status_code, (time.monotonic() - t0) * 1000,
        )
        if response.status_code >= 500:
            self.breaker.record_failure()
        else:
            # a 4xx still proves the backend is up
            self.breaker.record_success()

        if response.status_code >= 400:
            raise LearningDataClientError(
                status_code=response.status_code,
                detail=(response.text or f"HTTP {response.status_code}")[:500],
                url=str(response.url),
            )
        return response.json() if response.text else {}

    # -- internals -----------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        if not self._access_token:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    def _ensure_started(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("LearningDataClient not started; call await client.start() first")
        return self._http


def get_learning_client() -> LearningDataClient:
    """Process-wide client; the app lifespan starts and closes it."""
    global _client
    if _client is None:
        _client = LearningDataClient()
    return _client
