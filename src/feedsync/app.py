"""Application entry points wiring configuration, adapters and the sync engine."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from feedsync.adapters.feed import HttpFeedSource
from feedsync.adapters.shopify import ShopifyCatalogClient, collect_option_values
from feedsync.config import get_feed_config, get_shopify_config, get_sync_config
from feedsync.domain.extraction import AttributeExtractor
from feedsync.domain.feed_parser import parse_feed
from feedsync.domain.grouping import build_groups
from feedsync.domain.model import OptionAxis
from feedsync.domain.sync import (
    MediaSettings,
    RetrySettings,
    RunRegistry,
    SyncOrchestrator,
    SyncSettings,
    logging_sink,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedsync.config import ShopifyConfig, SyncConfig
    from feedsync.domain.model import RunSummary, VariantGroup
    from feedsync.domain.ports import FeedSource, ProgressSink

CatalogFactory = Callable[["ShopifyConfig"], ShopifyCatalogClient]

log = getLogger(__name__)

registry = RunRegistry()


def sync_settings_from_config(config: SyncConfig) -> SyncSettings:
    return SyncSettings(
        batch_size=config.batch_size,
        batch_delay_seconds=config.batch_delay_seconds,
        vendor=config.vendor,
        publication_channels=config.publication_channels,
        handle_max_length=config.handle_max_length,
        media=MediaSettings(
            poll_attempts=config.media_poll_attempts,
            poll_interval_seconds=config.media_poll_interval_seconds,
        ),
    )


def retry_settings_from_config(config: SyncConfig) -> RetrySettings:
    return RetrySettings(
        attempts=config.retry_attempts,
        base_delay_seconds=config.retry_base_delay_seconds,
        throttle_multiplier=config.throttle_delay_multiplier,
    )


def sync_feed(
    *,
    feed_url: str | None = None,
    feed_source: FeedSource | None = None,
    shopify: ShopifyConfig | None = None,
    sync: SyncConfig | None = None,
    sinks: Iterable[ProgressSink] = (),
    catalog_factory: CatalogFactory = ShopifyCatalogClient,
    runs: RunRegistry | None = None,
) -> RunSummary:
    """Run one feed reconciliation against the configured shop."""

    shop_config = shopify or get_shopify_config()
    sync_config = sync or get_sync_config()
    source = feed_source or HttpFeedSource.from_config(get_feed_config(feed_url))
    active_registry = runs or registry
    context = active_registry.context_for(shop_config.tenant)
    log.info(
        "Starting feed sync for %s: batch_size=%s, channels=%s",
        shop_config.tenant,
        sync_config.batch_size,
        ", ".join(sync_config.publication_channels),
    )

    async def run() -> RunSummary:
        async with catalog_factory(shop_config) as catalog:
            orchestrator = SyncOrchestrator(
                catalog,
                settings=sync_settings_from_config(sync_config),
                retry=retry_settings_from_config(sync_config),
                sinks=[logging_sink(), *sinks],
            )
            return await orchestrator.run(source, context)

    try:
        summary = asyncio.run(run())
    except BaseException:
        active_registry.record(shop_config.tenant, context.run.summary())
        raise
    active_registry.record(shop_config.tenant, summary)
    return summary


def request_cancel(tenant: str, *, runs: RunRegistry | None = None) -> bool:
    return (runs or registry).request_cancel(tenant)


def sync_status(tenant: str, *, runs: RunRegistry | None = None) -> RunSummary | None:
    """Summary of the tenant's last finished run, if any."""

    return (runs or registry).last_summary(tenant)


def preview_groups(
    *,
    feed_url: str | None = None,
    feed_source: FeedSource | None = None,
    extractor: AttributeExtractor | None = None,
) -> list[VariantGroup]:
    """Download and group the feed without touching the catalog."""

    source = feed_source or HttpFeedSource.from_config(get_feed_config(feed_url))
    active_extractor = extractor or AttributeExtractor()
    document = asyncio.run(source.fetch())
    groups = build_groups(active_extractor.derive_all(parse_feed(document)))
    log.info("Feed preview: %s product groups", len(groups))
    return groups


def list_option_values(
    option_name: str = OptionAxis.COLOR.value,
    *,
    shopify: ShopifyConfig | None = None,
    catalog_factory: CatalogFactory = ShopifyCatalogClient,
) -> list[str]:
    """Distinct values of one variant option across the shop's catalog."""

    shop_config = shopify or get_shopify_config()

    async def collect() -> list[str]:
        async with catalog_factory(shop_config) as catalog:
            return await collect_option_values(catalog, option_name)

    return asyncio.run(collect())
