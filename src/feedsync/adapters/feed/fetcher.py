"""Download the product feed over HTTP."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from feedsync.adapters.http_resilience import ResilientClient
from feedsync.config.feed import default_feed_resilience
from feedsync.domain.errors import FeedFetchError
from feedsync.domain.ports import FeedSource

if TYPE_CHECKING:
    from collections.abc import Callable

    from feedsync.config import FeedConfig, ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpFeedSource:
    """Fetches the feed document; any failure is a ``FeedFetchError``."""

    url: str
    resilience: ResilienceConfig = field(default_factory=default_feed_resilience)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    @classmethod
    def from_config(
        cls,
        config: FeedConfig,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> HttpFeedSource:
        if client_factory is None:
            return cls(url=config.url, resilience=config.resilience)
        return cls(url=config.url, resilience=config.resilience, client_factory=client_factory)

    async def fetch(self) -> bytes:
        log.info("Downloading feed %s", self.url)
        try:
            async with self.client_factory(self.resilience) as client:
                response = await client.get(self.url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"Could not download feed {self.url}: {exc}") from exc

        if not response.is_success:
            raise FeedFetchError(
                f"Feed {self.url} answered HTTP {response.status_code}",
                status_code=response.status_code,
            )
        log.info("Downloaded %s bytes from %s", len(response.content), self.url)
        return response.content


if TYPE_CHECKING:
    _source_check: FeedSource = HttpFeedSource("https://example.com/feed.xml")
