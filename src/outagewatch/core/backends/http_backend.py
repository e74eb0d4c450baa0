"""
httpx backend for the outage pages.

A single ``AsyncClient`` is shared by all categories of a run. Transport
errors and 429 answers are retried with exponential backoff (tenacity);
refusals (403 and similar) fail immediately; any other status is handed back
to the caller in the ``FetchResult``.
"""

from __future__ import annotations

import time

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from outagewatch.core.config.models import DEFAULT_USER_AGENT, HttpConfig
from outagewatch.core.logging import get_logger

from .base import (
    Backend,
    BlockedError,
    FetchError,
    FetchResult,
    RateLimitError,
    RequestSpec,
)

logger = get_logger("backends.http")

BLOCKED_STATUS_CODES = frozenset({403, 406, 418, 451})

RETRYABLE = (httpx.TransportError, RateLimitError)


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    try:
        return float(value) if value else None
    except ValueError:
        return None


class HttpBackend(Backend):
    """Plain GET requests with retry; no JavaScript, no cookies."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_wait: float = 30.0,
    ):
        """
        Args:
            timeout: Per-request timeout in seconds
            max_retries: Attempts per page, first one included
            user_agent: Client identifier sent with every request
            default_headers: Headers for every request (per-request ones win)
            transport: Custom httpx transport, e.g. ``httpx.MockTransport``
            max_wait: Cap on the backoff between attempts, in seconds
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_wait = max_wait
        self.default_headers = {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            **(default_headers or {}),
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
        }
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: HttpConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpBackend":
        return cls(
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            user_agent=config.user_agent,
            default_headers=config.headers,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "http"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self._client

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=self.max_wait),
            retry=retry_if_exception_type(RETRYABLE),
            reraise=True,
        )

    async def _get_once(self, request: RequestSpec, attempt: int) -> FetchResult:
        client = self._get_client()
        started = time.perf_counter()
        response = await client.get(
            request.url,
            headers=request.headers,
            timeout=request.timeout or self.timeout,
        )
        elapsed_ms = (time.perf_counter() - started) * 1000

        if response.status_code == 429:
            raise RateLimitError("Rate limit exceeded", url=request.url, retry_after=_retry_after(response))
        if response.status_code in BLOCKED_STATUS_CODES:
            raise BlockedError(
                f"Request refused with status {response.status_code}",
                url=request.url,
                status_code=response.status_code,
            )

        return FetchResult(
            url=request.url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=response.text,
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
            attempts=attempt,
        )

    async def fetch(self, request: RequestSpec) -> FetchResult:
        """GET a page, retrying transport errors and 429s.

        Raises:
            FetchError: Transport failure, refusal, or retries exhausted
        """
        attempt_number = 0
        try:
            async for attempt in self._retrying():
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    if attempt_number > 1:
                        logger.warning("Retrying %s (attempt %d)", request.url, attempt_number)
                    result = await self._get_once(request, attempt_number)
        except FetchError:
            raise
        except httpx.HTTPError as e:
            raise FetchError(
                f"{type(e).__name__} after {attempt_number} attempt(s): {e}",
                url=request.url,
                cause=e,
            ) from e

        logger.debug(
            "Fetched %s: %d in %.0f ms",
            request.url,
            result.status_code,
            result.elapsed_ms,
            extra={"category": request.category, "url": request.url},
        )
        return result

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
