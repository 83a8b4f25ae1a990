"""Records produced while reading and normalising a product feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .enums import Availability, Condition

if TYPE_CHECKING:
    from decimal import Decimal

DEFAULT_CAPACITY: Final[str] = "Estándar"
NO_COLOR: Final[str] = "sin color"


@dataclass(frozen=True, slots=True, kw_only=True)
class FeedItem:
    """One ``<item>`` of the feed with its raw Google Shopping fields."""

    sku: str
    raw_title: str
    group_id_hint: str | None = None
    brand: str = ""
    description: str = ""
    price: Decimal | None = None
    gtin: str | None = None
    image_url: str | None = None
    raw_color: str = ""
    raw_availability: str = ""
    raw_condition: str = ""
    product_type: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class NormalizedVariant:
    """A feed item after attribute extraction; one future catalog variant."""

    sku: str
    model_title: str
    model_key: str
    capacity: str = DEFAULT_CAPACITY
    color: str = NO_COLOR
    condition: Condition = Condition.NEW
    price: Decimal | None = None
    image_url: str | None = None
    gtin: str | None = None
    brand: str = ""
    raw_title: str = ""
    description: str = ""
    product_type: str = ""
    availability: Availability = Availability.IN_STOCK
    group_id_hint: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_color(self) -> bool:
        return bool(self.color) and self.color != NO_COLOR


@dataclass(frozen=True, slots=True)
class VariantGroup:
    """All variants sharing one grouping key, in feed order."""

    group_id: str
    variants: tuple[NormalizedVariant, ...]

    def __post_init__(self) -> None:
        if not self.variants:
            raise ValueError(f"Variant group {self.group_id!r} must not be empty")

    @property
    def base(self) -> NormalizedVariant:
        return self.variants[0]

    @property
    def model_title(self) -> str:
        return self.base.model_title

    def __len__(self) -> int:
        return len(self.variants)
