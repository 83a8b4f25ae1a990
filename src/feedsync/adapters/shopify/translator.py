"""Translate between Shopify payloads and catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from feedsync.domain.model import (
    Channel,
    MediaRef,
    RemoteProduct,
    RemoteVariant,
    VariantUserError,
    coerce_price,
    format_price,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from feedsync.domain.model import ProductDraft, VariantInput

    from .schema import MediaNode, ProductNode, Publication, UserError, VariantNode

MEDIA_READY = "READY"


def to_media_ref(node: MediaNode) -> MediaRef:
    preview = node.preview.image.url if node.preview and node.preview.image else None
    return MediaRef(
        id=node.id,
        source_url=node.alt or None,
        preview_url=preview,
        ready=(node.status or "").upper() == MEDIA_READY,
    )


def to_remote_variant(node: VariantNode) -> RemoteVariant:
    media_id = node.media.nodes[0].id if node.media and node.media.nodes else None
    return RemoteVariant(
        id=node.id,
        sku=node.sku or None,
        barcode=node.barcode or None,
        price=coerce_price(node.price),
        selected_options=tuple((option.name, option.value) for option in node.selected_options),
        media_id=media_id,
    )


def to_remote_product(node: ProductNode) -> RemoteProduct:
    return RemoteProduct(
        id=node.id,
        title=node.title,
        handle=node.handle,
        tags=frozenset(node.tags),
        variants=tuple(to_remote_variant(item) for item in node.variants.nodes)
        if node.variants
        else (),
        media=tuple(to_media_ref(item) for item in node.media.nodes) if node.media else (),
    )


def to_channel(node: Publication) -> Channel:
    return Channel(id=node.id, name=node.name)


def to_variant_error(error: UserError) -> VariantUserError:
    return VariantUserError(message=error.message, field=tuple(error.field or ()), code=error.code)


def product_create_input(draft: ProductDraft) -> dict[str, Any]:
    """``ProductCreateInput`` for the draft; variants are created separately."""

    payload: dict[str, Any] = {
        "title": draft.title,
        "handle": draft.handle,
        "vendor": draft.vendor,
        "descriptionHtml": draft.description_html,
        "tags": list(draft.tags),
        "status": draft.status.value,
        "productOptions": [
            {"name": option.name, "values": [{"name": value} for value in option.values]}
            for option in draft.options
        ],
    }
    if draft.product_type:
        payload["productType"] = draft.product_type
    return payload


def media_inputs(urls: Iterable[str]) -> list[dict[str, str]]:
    """``CreateMediaInput`` list; the source URL doubles as alt text to recognise it later."""

    return [{"originalSource": url, "alt": url, "mediaContentType": "IMAGE"} for url in urls]


def variant_bulk_input(variant: VariantInput) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "inventoryItem": {"sku": variant.sku},
        "inventoryPolicy": variant.inventory_policy.value,
        "optionValues": [
            {"optionName": name, "name": value} for name, value in variant.options
        ],
    }
    if variant.id is not None:
        payload["id"] = variant.id
    if variant.price is not None:
        payload["price"] = format_price(variant.price)
    if variant.barcode:
        payload["barcode"] = variant.barcode
    if variant.media_id:
        payload["mediaId"] = variant.media_id
    return payload


def variant_bulk_inputs(variants: Sequence[VariantInput]) -> list[dict[str, Any]]:
    return [variant_bulk_input(variant) for variant in variants]


__all__ = [
    "media_inputs",
    "product_create_input",
    "to_channel",
    "to_media_ref",
    "to_remote_product",
    "to_remote_variant",
    "to_variant_error",
    "variant_bulk_input",
    "variant_bulk_inputs",
]
