"""Immutable records shared by the feed, matching and sync layers."""

from __future__ import annotations

from .catalog import (
    BulkVariantsResult,
    Channel,
    MediaRef,
    OptionValues,
    ProductDraft,
    ProductOption,
    RejectedItem,
    RemoteProduct,
    RemoteVariant,
    VariantInput,
    VariantUserError,
    coerce_price,
    format_price,
)
from .enums import Availability, Condition, InventoryPolicy, OptionAxis, ProductStatus
from .feed import DEFAULT_CAPACITY, NO_COLOR, FeedItem, NormalizedVariant, VariantGroup
from .run import GroupOutcome, RunStatus, RunSummary, SyncRun

__all__ = [
    "DEFAULT_CAPACITY",
    "NO_COLOR",
    "Availability",
    "BulkVariantsResult",
    "Channel",
    "Condition",
    "FeedItem",
    "GroupOutcome",
    "InventoryPolicy",
    "MediaRef",
    "NormalizedVariant",
    "OptionAxis",
    "OptionValues",
    "ProductDraft",
    "ProductOption",
    "ProductStatus",
    "RejectedItem",
    "RemoteProduct",
    "RemoteVariant",
    "RunStatus",
    "RunSummary",
    "SyncRun",
    "VariantGroup",
    "VariantInput",
    "VariantUserError",
    "coerce_price",
    "format_price",
]
