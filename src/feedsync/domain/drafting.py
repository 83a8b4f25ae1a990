"""Build the target product shape for a variant group."""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from feedsync.domain.extraction import default_lexicon
from feedsync.domain.matching import DEFAULT_HANDLE_MAX_LENGTH, product_handle
from feedsync.domain.model import (
    NO_COLOR,
    Availability,
    InventoryPolicy,
    OptionAxis,
    ProductDraft,
    ProductOption,
    ProductStatus,
    RejectedItem,
    VariantInput,
)
from feedsync.domain.text import normalize, title_case

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedsync.domain.extraction import Lexicon
    from feedsync.domain.model import NormalizedVariant, OptionValues, VariantGroup

type OptionIdentity = frozenset[tuple[str, str]]

MISSING_PRICE = "missing or non-positive price"

log = logging.getLogger(__name__)


def option_identity(options: OptionValues) -> OptionIdentity:
    """Case and whitespace insensitive identity of a full option selection."""

    return frozenset((normalize(name), normalize(value)) for name, value in options)


def is_valid_image_url(url: str | None) -> bool:
    if not url:
        return False
    parts = urlsplit(url.strip())
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def color_label(color: str) -> str:
    return title_case(color) if color else title_case(NO_COLOR)


def description_html(text: str) -> str:
    """Keep markup as given; wrap plain text paragraphs in ``<p>``."""

    stripped = text.strip()
    if not stripped:
        return ""
    if "<" in stripped and ">" in stripped:
        return stripped
    paragraphs = [line.strip() for line in stripped.splitlines() if line.strip()]
    return "".join(f"<p>{html.escape(line)}</p>" for line in paragraphs)


def build_draft(
    group: VariantGroup,
    *,
    vendor: str,
    lexicon: Lexicon | None = None,
    handle_max_length: int = DEFAULT_HANDLE_MAX_LENGTH,
) -> ProductDraft:
    """Assemble options, images and one variant input per priced item.

    Items without a price are listed in ``rejected``. Items whose option
    selection repeats an earlier one are listed in ``duplicates``; the first
    occurrence in feed order wins.
    """

    lexicon = lexicon or default_lexicon()
    priced: list[NormalizedVariant] = []
    rejected: list[RejectedItem] = []
    for variant in group.variants:
        if variant.price is None:
            rejected.append(RejectedItem(sku=variant.sku, reason=MISSING_PRICE))
        else:
            priced.append(variant)

    with_color = any(variant.has_color for variant in priced)
    seen: set[OptionIdentity] = set()
    inputs: list[VariantInput] = []
    kept: list[NormalizedVariant] = []
    duplicates: list[VariantInput] = []
    for variant in priced:
        candidate = _variant_input(variant, lexicon, with_color=with_color)
        identity = option_identity(candidate.options)
        if identity in seen:
            log.debug(
                "Dropping %s in group %s: duplicates option selection %s",
                variant.sku,
                group.group_id,
                candidate.option_summary(),
            )
            duplicates.append(candidate)
            continue
        seen.add(identity)
        inputs.append(candidate)
        kept.append(variant)

    base = group.base
    return ProductDraft(
        title=group.model_title or group.group_id,
        handle=product_handle(base.model_key or group.group_id, handle_max_length),
        vendor=vendor,
        description_html=description_html(
            next((variant.description for variant in group.variants if variant.description), "")
        ),
        tags=tuple(sorted({tag for variant in group.variants for tag in variant.tags})),
        options=_options(inputs),
        variants=tuple(inputs),
        images=_unique_images(variant.image_url for variant in kept),
        status=_status(kept),
        product_type=next(
            (variant.product_type for variant in group.variants if variant.product_type), ""
        ),
        rejected=tuple(rejected),
        duplicates=tuple(duplicates),
    )


def _variant_input(
    variant: NormalizedVariant, lexicon: Lexicon, *, with_color: bool
) -> VariantInput:
    options: list[tuple[str, str]] = [(OptionAxis.CAPACITY.value, variant.capacity)]
    if with_color:
        options.append((OptionAxis.COLOR.value, color_label(variant.color)))
    options.append((OptionAxis.CONDITION.value, lexicon.condition_label(variant.condition)))
    return VariantInput(
        sku=variant.sku,
        options=tuple(options),
        price=variant.price,
        barcode=variant.gtin,
        image_url=variant.image_url if is_valid_image_url(variant.image_url) else None,
        inventory_policy=(
            InventoryPolicy.DENY
            if variant.availability is Availability.OUT_OF_STOCK
            else InventoryPolicy.CONTINUE
        ),
    )


def _options(inputs: Iterable[VariantInput]) -> tuple[ProductOption, ...]:
    values: dict[str, dict[str, None]] = {}
    for item in inputs:
        for name, value in item.options:
            values.setdefault(name, {})[value] = None
    return tuple(ProductOption(name=name, values=tuple(found)) for name, found in values.items())


def _unique_images(urls: Iterable[str | None]) -> tuple[str, ...]:
    unique: dict[str, None] = {}
    for url in urls:
        if url and is_valid_image_url(url):
            unique.setdefault(url, None)
    return tuple(unique)


def _status(variants: Iterable[NormalizedVariant]) -> ProductStatus:
    if any(variant.availability is not Availability.OUT_OF_STOCK for variant in variants):
        return ProductStatus.ACTIVE
    return ProductStatus.DRAFT


__all__ = [
    "MISSING_PRICE",
    "OptionIdentity",
    "build_draft",
    "color_label",
    "description_html",
    "is_valid_image_url",
    "option_identity",
]
