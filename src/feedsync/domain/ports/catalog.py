"""Port for the remote product catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from feedsync.domain.model import (
        BulkVariantsResult,
        Channel,
        MediaRef,
        ProductDraft,
        RemoteProduct,
        RemoteVariant,
        VariantInput,
    )


@runtime_checkable
class CatalogClient(Protocol):
    """Async query/mutation primitives of a remote catalog.

    Implementations raise ``CatalogThrottledError`` or ``CatalogUnavailableError``
    for transient failures and ``CatalogValidationError`` for rejected input.
    Bulk variant calls report per-variant rejections in the returned result.
    """

    async def search_products(self, query: str) -> list[RemoteProduct]: ...

    async def create_product(self, draft: ProductDraft) -> RemoteProduct: ...

    async def create_media(self, product_id: str, urls: Sequence[str]) -> list[MediaRef]: ...

    async def get_media(self, product_id: str) -> list[MediaRef]: ...

    async def bulk_create_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult: ...

    async def bulk_update_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult: ...

    async def get_variants(self, product_id: str) -> list[RemoteVariant]: ...

    async def list_publication_channels(self) -> list[Channel]: ...

    async def publish(self, product_id: str, channel_ids: Sequence[str]) -> None: ...


__all__ = ["CatalogClient"]
