"""Bounded exponential backoff around catalog calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from feedsync.domain.errors import RETRYABLE_CATALOG_ERRORS, CatalogThrottledError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from feedsync.domain.model import (
        BulkVariantsResult,
        Channel,
        MediaRef,
        ProductDraft,
        RemoteProduct,
        RemoteVariant,
        VariantInput,
    )
    from feedsync.domain.ports import CatalogClient

type Sleep = Callable[[float], Awaitable[None]]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetrySettings:
    attempts: int = 3
    base_delay_seconds: float = 0.15
    throttle_multiplier: float = 4.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")

    def delay_for(self, attempt: int, error: BaseException) -> float:
        """Delay after failed ``attempt`` (1-based); throttling waits longer."""

        throttled = isinstance(error, CatalogThrottledError)
        base = self.base_delay_seconds * (self.throttle_multiplier if throttled else 1.0)
        delay = base * 2 ** (attempt - 1)
        if throttled and error.retry_after is not None:
            delay = max(delay, error.retry_after)
        return delay


async def call_with_retry[T](
    operation: Callable[[], Awaitable[T]],
    *,
    settings: RetrySettings,
    label: str,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await ``operation`` until it succeeds or the attempts are used up.

    Only throttling and availability errors are retried; anything else, and
    the last retryable error, propagates unchanged.
    """

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except RETRYABLE_CATALOG_ERRORS as exc:
            if attempt >= settings.attempts:
                log.warning("%s failed after %s attempts: %s", label, attempt, exc)
                raise
            delay = settings.delay_for(attempt, exc)
            log.info(
                "Retry %s/%s for %s in %.2fs: %s",
                attempt,
                settings.attempts - 1,
                label,
                delay,
                exc,
            )
            await sleep(delay)


@dataclass(slots=True)
class RetryingCatalogClient:
    """Catalog client decorator that routes every call through ``call_with_retry``."""

    inner: CatalogClient
    settings: RetrySettings = field(default_factory=RetrySettings)
    sleep: Sleep = asyncio.sleep

    async def _call[T](self, label: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await call_with_retry(
            operation, settings=self.settings, label=label, sleep=self.sleep
        )

    async def search_products(self, query: str) -> list[RemoteProduct]:
        return await self._call("search_products", lambda: self.inner.search_products(query))

    async def create_product(self, draft: ProductDraft) -> RemoteProduct:
        return await self._call("create_product", lambda: self.inner.create_product(draft))

    async def create_media(self, product_id: str, urls: Sequence[str]) -> list[MediaRef]:
        return await self._call(
            "create_media", lambda: self.inner.create_media(product_id, urls)
        )

    async def get_media(self, product_id: str) -> list[MediaRef]:
        return await self._call("get_media", lambda: self.inner.get_media(product_id))

    async def bulk_create_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        return await self._call(
            "bulk_create_variants",
            lambda: self.inner.bulk_create_variants(product_id, variants),
        )

    async def bulk_update_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        return await self._call(
            "bulk_update_variants",
            lambda: self.inner.bulk_update_variants(product_id, variants),
        )

    async def get_variants(self, product_id: str) -> list[RemoteVariant]:
        return await self._call("get_variants", lambda: self.inner.get_variants(product_id))

    async def list_publication_channels(self) -> list[Channel]:
        return await self._call(
            "list_publication_channels", self.inner.list_publication_channels
        )

    async def publish(self, product_id: str, channel_ids: Sequence[str]) -> None:
        await self._call("publish", lambda: self.inner.publish(product_id, channel_ids))


__all__ = ["RetrySettings", "RetryingCatalogClient", "call_with_retry"]
