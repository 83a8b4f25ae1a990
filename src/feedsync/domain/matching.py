"""Find the remote product a variant group already corresponds to."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from feedsync.domain.errors import CatalogError
from feedsync.domain.text import normalize, slugify

if TYPE_CHECKING:
    from feedsync.domain.model import RemoteProduct, VariantGroup
    from feedsync.domain.ports import CatalogClient

DEFAULT_HANDLE_MAX_LENGTH = 100

_QUERY_UNSAFE = re.compile(r"[\"'\\\n\r\t]+")

log = logging.getLogger(__name__)


def product_handle(model_key: str, max_length: int = DEFAULT_HANDLE_MAX_LENGTH) -> str:
    """Handle under which the product for ``model_key`` is created and found again."""

    return slugify(model_key, max_length)


def query_value(value: str) -> str:
    """Quote a value for a catalog search term."""

    cleaned = " ".join(_QUERY_UNSAFE.sub(" ", value).split())
    return f'"{cleaned}"'


@dataclass(slots=True)
class CatalogMatcher:
    """Resolve groups to existing products: by handle, then sku, then exact title.

    Lookups that fail with a catalog error count as misses; the group then
    follows the create path. Search results are cached for the matcher's
    lifetime, which is one run.
    """

    client: CatalogClient
    handle_max_length: int = DEFAULT_HANDLE_MAX_LENGTH
    _cache: dict[str, list[RemoteProduct]] = field(default_factory=dict, init=False)

    def handle_for(self, group: VariantGroup) -> str:
        return product_handle(group.base.model_key or group.group_id, self.handle_max_length)

    async def find_existing(self, group: VariantGroup) -> RemoteProduct | None:
        handle = self.handle_for(group)
        if handle:
            found = await self._by_handle(handle)
            if found is not None:
                return found

        skus = list(dict.fromkeys(variant.sku for variant in group.variants if variant.sku))
        for sku in skus:
            found = await self._by_sku(sku)
            if found is not None:
                log.info("Matched group %s to %s by sku %s", group.group_id, found.id, sku)
                return found

        title = group.model_title
        if title:
            found = await self._by_title(title)
            if found is not None:
                log.info("Matched group %s to %s by title", group.group_id, found.id)
                return found
        return None

    async def _by_handle(self, handle: str) -> RemoteProduct | None:
        products = await self._search(f"handle:{query_value(handle)}")
        return next((product for product in products if product.handle == handle), None)

    async def _by_sku(self, sku: str) -> RemoteProduct | None:
        products = await self._search(f"sku:{query_value(sku)}")
        return next(
            (
                product
                for product in products
                if any(variant.sku == sku for variant in product.variants)
            ),
            None,
        )

    async def _by_title(self, title: str) -> RemoteProduct | None:
        wanted = normalize(title)
        products = await self._search(f"title:{query_value(title)}")
        return next((product for product in products if normalize(product.title) == wanted), None)

    async def _search(self, query: str) -> list[RemoteProduct]:
        cached = self._cache.get(query)
        if cached is not None:
            return cached
        try:
            products = await self.client.search_products(query)
        except CatalogError as exc:
            log.warning("Catalog search %r failed, treating as not found: %s", query, exc)
            return []
        self._cache[query] = products
        return products


__all__ = ["DEFAULT_HANDLE_MAX_LENGTH", "CatalogMatcher", "product_handle", "query_value"]
