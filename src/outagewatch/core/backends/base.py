"""
Fetch capability: request/response types, the Backend interface and its errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RequestSpec:
    """One page to fetch."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None

    # Category key, for logs only
    category: str | None = None


@dataclass
class FetchResult:
    """A fetched page. Non-2xx responses are returned, not raised."""

    url: str
    final_url: str
    status_code: int
    html: str
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0
    attempts: int = 1
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Backend(ABC):
    """Something that turns a URL into page markup."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""

    @abstractmethod
    async def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch one page.

        Raises:
            FetchError: If no response could be obtained
        """

    async def close(self) -> None:
        """Release connections."""

    async def __aenter__(self) -> "Backend":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class BackendError(Exception):
    """Base exception for backend errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class FetchError(BackendError):
    """The source page could not be retrieved."""


class RateLimitError(FetchError):
    """The site answered 429; retried with backoff."""

    def __init__(self, message: str, url: str | None = None, retry_after: float | None = None):
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class BlockedError(FetchError):
    """The site refused the client outright (403 and similar)."""
