"""Typed records exchanged with the remote catalog."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal

from .enums import InventoryPolicy, ProductStatus

CENT = Decimal("0.01")

type OptionValues = tuple[tuple[str, str], ...]
"""Ordered ``(option name, value)`` pairs selected by one variant."""


def format_price(price: Decimal) -> str:
    """Render a price with two decimals, the precision the catalog stores."""

    return str(price.quantize(CENT, rounding=ROUND_HALF_UP))


def coerce_price(raw: object) -> Decimal | None:
    if raw is None or raw == "":
        return None
    try:
        return Decimal(str(raw))
    except ArithmeticError:
        return None


@dataclass(frozen=True, slots=True)
class MediaRef:
    id: str
    source_url: str | None = None
    preview_url: str | None = None
    ready: bool = False

    def matches(self, url: str) -> bool:
        return url in {self.source_url, self.preview_url}


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteVariant:
    id: str
    sku: str | None = None
    barcode: str | None = None
    price: Decimal | None = None
    selected_options: OptionValues = ()
    media_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteProduct:
    id: str
    title: str
    handle: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    variants: tuple[RemoteVariant, ...] = ()
    media: tuple[MediaRef, ...] = ()


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class ProductOption:
    name: str
    values: tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class VariantInput:
    """Target state of one variant as submitted to the catalog.

    ``id`` is only set for updates; ``image_url`` is resolved to ``media_id``
    once the image has been uploaded.
    """

    sku: str
    options: OptionValues
    price: Decimal | None = None
    barcode: str | None = None
    image_url: str | None = None
    media_id: str | None = None
    inventory_policy: InventoryPolicy = InventoryPolicy.DENY
    id: str | None = None

    def option_summary(self) -> str:
        return " / ".join(value for _, value in self.options)

    def with_media(self, media_id: str | None) -> VariantInput:
        return replace(self, media_id=media_id)

    def for_update(self, remote_id: str) -> VariantInput:
        return replace(self, id=remote_id)


@dataclass(frozen=True, slots=True)
class RejectedItem:
    sku: str
    reason: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductDraft:
    title: str
    handle: str
    vendor: str
    description_html: str = ""
    tags: tuple[str, ...] = ()
    options: tuple[ProductOption, ...] = ()
    variants: tuple[VariantInput, ...] = ()
    images: tuple[str, ...] = ()
    status: ProductStatus = ProductStatus.ACTIVE
    product_type: str = ""
    rejected: tuple[RejectedItem, ...] = ()
    duplicates: tuple[VariantInput, ...] = ()


@dataclass(frozen=True, slots=True)
class VariantUserError:
    """A per-variant rejection reported by a bulk variant mutation."""

    message: str
    field: tuple[str, ...] = ()
    code: str | None = None

    def __str__(self) -> str:
        location = ".".join(self.field)
        return f"{location}: {self.message}" if location else self.message


@dataclass(frozen=True, slots=True)
class BulkVariantsResult:
    variants: tuple[RemoteVariant, ...] = ()
    errors: tuple[VariantUserError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors
