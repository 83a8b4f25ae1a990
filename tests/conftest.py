from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from feedsync.config import ShopifyConfig, SyncConfig
from feedsync.config.http_resilience import ResilienceConfig, RetryPolicy
from feedsync.config.shopify import admin_api_base_url

from tests.support.catalog import FakeCatalog
from tests.support.feeds import phone_feed

if TYPE_CHECKING:
    from pathlib import Path

_ENV_VARS = (
    "SHOPIFY_SHOP_DOMAIN",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_API_VERSION",
    "FEEDSYNC_FEED_URL",
    "FEEDSYNC_BATCH_SIZE",
    "FEEDSYNC_BATCH_DELAY",
    "FEEDSYNC_RETRY_ATTEMPTS",
    "FEEDSYNC_MEDIA_POLL_ATTEMPTS",
    "FEEDSYNC_VENDOR",
    "FEEDSYNC_PUBLICATION_CHANNELS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FEEDSYNC_DATA_DIR", str(tmp_path / "data"))


@pytest.fixture
def shopify_config() -> ShopifyConfig:
    return ShopifyConfig(
        shop_domain="acme.myshopify.com",
        access_token="shpat_test",
        resilience=ResilienceConfig(
            name="shopify",
            base_url=admin_api_base_url("acme.myshopify.com", "2025-01"),
            retry=RetryPolicy.none(),
            default_headers={"X-Shopify-Access-Token": "shpat_test"},
        ),
    )


@pytest.fixture
def fast_sync_config() -> SyncConfig:
    return SyncConfig(
        batch_delay_seconds=0.0,
        retry_base_delay_seconds=0.0,
        media_poll_interval_seconds=0.0,
    )


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def feed_document() -> bytes:
    return phone_feed()
