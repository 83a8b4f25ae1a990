"""Shopify Admin API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_SHOPIFY_API_VERSION = "2025-01"
SHOPIFY_TIMEOUT_SECONDS = 30.0
GRAPHQL_PATH = "graphql.json"


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    """Credentials and transport settings for one shop."""

    shop_domain: str
    access_token: str
    resilience: ResilienceConfig
    api_version: str = DEFAULT_SHOPIFY_API_VERSION

    @property
    def tenant(self) -> str:
        return self.shop_domain.removesuffix(".myshopify.com")


def admin_api_base_url(shop_domain: str, api_version: str) -> str:
    return f"https://{shop_domain}/admin/api/{api_version}/"


def _normalize_shop_domain(value: str) -> str:
    domain = value.strip().removeprefix("https://").removeprefix("http://").rstrip("/")
    if not domain:
        raise ConfigurationError("Shop domain must not be blank")
    if "." not in domain:
        domain = f"{domain}.myshopify.com"
    return domain


def get_shopify_config(*, resilience: ResilienceConfig | None = None) -> ShopifyConfig:
    values = require_env_vars(("SHOPIFY_SHOP_DOMAIN", "SHOPIFY_ACCESS_TOKEN"))
    shop_domain = _normalize_shop_domain(values["SHOPIFY_SHOP_DOMAIN"])
    api_version = os.getenv("SHOPIFY_API_VERSION") or DEFAULT_SHOPIFY_API_VERSION
    access_token = values["SHOPIFY_ACCESS_TOKEN"]
    return ShopifyConfig(
        shop_domain=shop_domain,
        access_token=access_token,
        api_version=api_version,
        resilience=resilience
        or ResilienceConfig(
            name="shopify",
            base_url=admin_api_base_url(shop_domain, api_version),
            timeout_seconds=SHOPIFY_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
            cache=None,
            default_headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
        ),
    )
