"""In-memory catalog implementing the ``CatalogClient`` port."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from feedsync.domain.model import (
    BulkVariantsResult,
    Channel,
    MediaRef,
    RemoteProduct,
    RemoteVariant,
    VariantUserError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from feedsync.domain.model import ProductDraft, VariantInput
    from feedsync.domain.ports import CatalogClient
    from feedsync.domain.sync import ProgressEvent


class FakeCatalog:
    """Keeps products, variants and media in dictionaries and records every call.

    ``failures`` maps a method name to errors raised, one per call, before the
    call does anything. ``reject`` decides per variant input whether a bulk
    call reports a user error for it.
    """

    def __init__(
        self,
        *,
        channels: Sequence[Channel] = (Channel(id="pub-1", name="Online Store"),),
        media_ready: bool = True,
    ) -> None:
        self.products: dict[str, RemoteProduct] = {}
        self.variants: dict[str, list[RemoteVariant]] = {}
        self.media: dict[str, list[MediaRef]] = {}
        self.published: dict[str, tuple[str, ...]] = {}
        self.channels = list(channels)
        self.media_ready = media_ready
        self.calls: list[tuple[str, tuple[object, ...]]] = []
        self.drafts: list[ProductDraft] = []
        self.created_batches: list[tuple[str, tuple[VariantInput, ...]]] = []
        self.updated_batches: list[tuple[str, tuple[VariantInput, ...]]] = []
        self.failures: dict[str, list[Exception]] = {}
        self.reject: Callable[[VariantInput], str | None] = lambda _variant: None
        self._ids = 0

    def fail(self, method: str, *errors: Exception) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    def calls_to(self, method: str) -> list[tuple[object, ...]]:
        return [args for name, args in self.calls if name == method]

    def add_product(
        self,
        *,
        title: str,
        handle: str,
        variants: Sequence[RemoteVariant] = (),
        media: Sequence[MediaRef] = (),
    ) -> RemoteProduct:
        product = RemoteProduct(id=self._next_id("Product"), title=title, handle=handle)
        self.products[product.id] = product
        self.variants[product.id] = list(variants)
        self.media[product.id] = list(media)
        return product

    async def search_products(self, query: str) -> list[RemoteProduct]:
        self._record("search_products", query)
        field, _, raw = query.partition(":")
        value = raw.strip('"')
        found: list[RemoteProduct] = []
        for product_id in self.products:
            product = self._snapshot(product_id)
            if field == "handle" and product.handle == value:
                found.append(product)
            elif field == "sku" and any(variant.sku == value for variant in product.variants):
                found.append(product)
            elif field == "title" and value.casefold() in product.title.casefold():
                found.append(product)
        return found

    async def create_product(self, draft: ProductDraft) -> RemoteProduct:
        self._record("create_product", draft)
        self.drafts.append(draft)
        product = self.add_product(title=draft.title, handle=draft.handle)
        return self._snapshot(product.id)

    async def create_media(self, product_id: str, urls: Sequence[str]) -> list[MediaRef]:
        self._record("create_media", product_id, tuple(urls))
        created = [
            MediaRef(id=self._next_id("MediaImage"), source_url=url, ready=self.media_ready)
            for url in urls
        ]
        self.media.setdefault(product_id, []).extend(created)
        return created

    async def get_media(self, product_id: str) -> list[MediaRef]:
        self._record("get_media", product_id)
        return list(self.media.get(product_id, ()))

    async def bulk_create_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        self._record("bulk_create_variants", product_id, tuple(variants))
        self.created_batches.append((product_id, tuple(variants)))
        applied: list[RemoteVariant] = []
        errors: list[VariantUserError] = []
        for index, variant in enumerate(variants):
            reason = self.reject(variant)
            if reason is not None:
                errors.append(VariantUserError(message=reason, field=("variants", str(index))))
                continue
            remote = RemoteVariant(
                id=self._next_id("ProductVariant"),
                sku=variant.sku,
                barcode=variant.barcode,
                price=variant.price,
                selected_options=variant.options,
                media_id=variant.media_id,
            )
            self.variants.setdefault(product_id, []).append(remote)
            applied.append(remote)
        return BulkVariantsResult(variants=tuple(applied), errors=tuple(errors))

    async def bulk_update_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        self._record("bulk_update_variants", product_id, tuple(variants))
        self.updated_batches.append((product_id, tuple(variants)))
        stored = self.variants.setdefault(product_id, [])
        applied: list[RemoteVariant] = []
        errors: list[VariantUserError] = []
        for index, variant in enumerate(variants):
            reason = self.reject(variant)
            position = next(
                (pos for pos, remote in enumerate(stored) if remote.id == variant.id), None
            )
            if reason is not None or position is None:
                errors.append(
                    VariantUserError(
                        message=reason or "Variant does not exist",
                        field=("variants", str(index)),
                    )
                )
                continue
            updated = replace(
                stored[position],
                sku=variant.sku,
                barcode=variant.barcode or stored[position].barcode,
                price=variant.price,
                selected_options=variant.options,
                media_id=variant.media_id or stored[position].media_id,
            )
            stored[position] = updated
            applied.append(updated)
        return BulkVariantsResult(variants=tuple(applied), errors=tuple(errors))

    async def get_variants(self, product_id: str) -> list[RemoteVariant]:
        self._record("get_variants", product_id)
        return list(self.variants.get(product_id, ()))

    async def list_publication_channels(self) -> list[Channel]:
        self._record("list_publication_channels")
        return list(self.channels)

    async def publish(self, product_id: str, channel_ids: Sequence[str]) -> None:
        self._record("publish", product_id, tuple(channel_ids))
        self.published[product_id] = tuple(channel_ids)

    def _record(self, method: str, *args: object) -> None:
        self.calls.append((method, args))
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)

    def _snapshot(self, product_id: str) -> RemoteProduct:
        product = self.products[product_id]
        return replace(
            product,
            variants=tuple(self.variants.get(product_id, ())),
            media=tuple(self.media.get(product_id, ())),
        )

    def _next_id(self, kind: str) -> str:
        self._ids += 1
        return f"gid://shopify/{kind}/{self._ids}"


class RecordingSink:
    """Progress sink collecting every event it receives."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [str(event.type) for event in self.events]


async def no_sleep(_seconds: float) -> None:
    return None


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


if TYPE_CHECKING:
    _catalog_check: CatalogClient = FakeCatalog()
