"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Condition(StrEnum):
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"


class Availability(StrEnum):
    """Feed availability collapsed to what the catalog can express."""

    IN_STOCK = "in_stock"
    PREORDER = "preorder"
    OUT_OF_STOCK = "out_of_stock"


class ProductStatus(StrEnum):
    ACTIVE = "ACTIVE"
    DRAFT = "DRAFT"


class InventoryPolicy(StrEnum):
    CONTINUE = "CONTINUE"
    DENY = "DENY"


class OptionAxis(StrEnum):
    """Fixed logical option axes, in product option order."""

    CAPACITY = "Capacity"
    COLOR = "Color"
    CONDITION = "Condition"
