"""Product feed download configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import MissingConfigurationError
from .http_resilience import CacheConfig, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

FEED_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class FeedConfig:
    url: str
    resilience: ResilienceConfig


def default_feed_resilience(*, storage: StorageConfig | None = None) -> ResilienceConfig:
    storage_config = storage or get_storage_config()
    return ResilienceConfig(
        name="feed",
        timeout_seconds=FEED_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3, allowed_methods=frozenset({"GET"})),
        cache=CacheConfig(
            backend="sqlite",
            sqlite_path=str(storage_config.feed_cache_path()),
        ),
        default_headers={"Accept": "application/xml, text/xml;q=0.9, */*;q=0.5"},
    )


def get_feed_config(
    url: str | None = None,
    *,
    resilience: ResilienceConfig | None = None,
) -> FeedConfig:
    effective_url = url or os.getenv("FEEDSYNC_FEED_URL")
    if not effective_url or not effective_url.strip():
        raise MissingConfigurationError("FEEDSYNC_FEED_URL")
    return FeedConfig(
        url=effective_url.strip(),
        resilience=resilience or default_feed_resilience(),
    )
