from __future__ import annotations

from pathlib import Path

import pytest

from feedsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_feed_config,
    get_shopify_config,
    get_storage_config,
    get_sync_config,
    require_env_var,
)
from feedsync.config.env import env_float, env_int, env_list


def test_require_env_var_lists_missing_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_VENDOR", "   ")

    with pytest.raises(MissingConfigurationError, match="FEEDSYNC_VENDOR"):
        require_env_var("FEEDSYNC_VENDOR")


def test_env_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_BATCH_SIZE", "5")
    monkeypatch.setenv("FEEDSYNC_BATCH_DELAY", "abc")

    assert env_int("FEEDSYNC_BATCH_SIZE", 3) == 5
    assert env_int("FEEDSYNC_RETRY_ATTEMPTS", 3) == 3
    with pytest.raises(ConfigurationError, match="FEEDSYNC_BATCH_DELAY must be a number"):
        env_float("FEEDSYNC_BATCH_DELAY", 0.7)


def test_env_list_skips_blank_entries(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_PUBLICATION_CHANNELS", "Online Store, ,Point of Sale ")

    assert env_list("FEEDSYNC_PUBLICATION_CHANNELS", ()) == ("Online Store", "Point of Sale")


def test_sync_config_defaults() -> None:
    config = get_sync_config()

    assert config.batch_size == 3
    assert config.batch_delay_seconds == 0.7
    assert config.retry_attempts == 3
    assert config.media_poll_attempts == 5
    assert config.vendor == "Proveedor"
    assert config.publication_channels == ("Online Store", "Shop")


def test_sync_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_BATCH_SIZE", "10")
    monkeypatch.setenv("FEEDSYNC_BATCH_DELAY", "0")
    monkeypatch.setenv("FEEDSYNC_VENDOR", "Acme Store")
    monkeypatch.setenv("FEEDSYNC_PUBLICATION_CHANNELS", "Online Store")

    config = get_sync_config()

    assert config.batch_size == 10
    assert config.batch_delay_seconds == 0.0
    assert config.vendor == "Acme Store"
    assert config.publication_channels == ("Online Store",)


def test_sync_config_rejects_empty_batches(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_BATCH_SIZE", "0")

    with pytest.raises(ValueError, match="batch_size"):
        get_sync_config()


def test_shopify_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", "acme")

    with pytest.raises(MissingConfigurationError, match="SHOPIFY_ACCESS_TOKEN") as info:
        get_shopify_config()

    assert info.value.names == ("SHOPIFY_ACCESS_TOKEN",)


@pytest.mark.parametrize(
    ("raw", "domain"),
    [
        ("acme", "acme.myshopify.com"),
        ("https://acme.myshopify.com/", "acme.myshopify.com"),
        ("shop.acme.com", "shop.acme.com"),
    ],
)
def test_shopify_domain_is_normalised(
    monkeypatch: pytest.MonkeyPatch, raw: str, domain: str
) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", raw)
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_x")

    config = get_shopify_config()

    assert config.shop_domain == domain
    assert config.resilience.base_url == f"https://{domain}/admin/api/2025-01/"


def test_shopify_config_headers_and_tenant(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP_DOMAIN", "acme")
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_x")
    monkeypatch.setenv("SHOPIFY_API_VERSION", "2025-04")

    config = get_shopify_config()

    assert config.tenant == "acme"
    assert config.api_version == "2025-04"
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["X-Shopify-Access-Token"] == "shpat_x"
    assert config.resilience.cache is None


def test_feed_config_requires_url() -> None:
    with pytest.raises(MissingConfigurationError, match="FEEDSYNC_FEED_URL"):
        get_feed_config()


def test_feed_config_prefers_explicit_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEEDSYNC_FEED_URL", "https://env.example.com/feed.xml")

    assert get_feed_config().url == "https://env.example.com/feed.xml"
    assert get_feed_config(" https://cli.example.com/feed.xml ").url == (
        "https://cli.example.com/feed.xml"
    )


def test_feed_cache_lives_in_data_dir(tmp_path: Path) -> None:
    config = get_feed_config("https://feeds.example.com/google.xml")

    assert config.resilience.cache is not None
    assert config.resilience.cache.backend == "sqlite"
    assert config.resilience.cache.sqlite_path == str(
        (tmp_path / "data" / "feed_cache.db").resolve()
    )
    assert get_storage_config().ensure_data_dir().is_dir()
