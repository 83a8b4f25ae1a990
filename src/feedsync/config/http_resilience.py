"""Settings shared by the feed download and the Shopify GraphQL client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import httpx

from feedsync import __version__

if TYPE_CHECKING:
    from collections.abc import Mapping

USER_AGENT = f"feedsync/{__version__}"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries performed by ``httpx-retries``.

    These cover connection failures and 5xx answers only. Shopify throttling
    (HTTP 429 or a ``THROTTLED`` GraphQL error) surfaces as a catalog error so
    the sync engine can apply its own longer backoff.
    """

    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(
        default_factory=lambda: frozenset({"GET", "HEAD", "OPTIONS", "POST"})
    )
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0

    @classmethod
    def none(cls) -> RetryPolicy:
        return cls(total=0)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """One named HTTP client: base URL, retries, rate limit and optional cache."""

    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None
    user_agent: str = USER_AGENT
