"""Shopify Admin GraphQL adapter for the catalog port."""

from __future__ import annotations

from .client import ShopifyCatalogClient, collect_option_values

__all__ = ["ShopifyCatalogClient", "collect_option_values"]
