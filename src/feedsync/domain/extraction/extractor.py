"""Derive model titles, grouping keys and variant attributes from feed items."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cache
from typing import TYPE_CHECKING

from feedsync.domain.errors import ExtractionAmbiguity
from feedsync.domain.feed_parser import clean_gtin
from feedsync.domain.model import (
    DEFAULT_CAPACITY,
    NO_COLOR,
    Availability,
    Condition,
    FeedItem,
    NormalizedVariant,
)
from feedsync.domain.text import collapse_whitespace, normalize

from .lexicon import Lexicon, default_lexicon
from .rules import CAPACITY_PATTERN, BrandPrefixRule, Rule, apply_rules, build_title_rules

if TYPE_CHECKING:
    from collections.abc import Iterable

PREORDER_TAG = "preorder"
APPLE_TAG = "Apple"
ANDROID_TAG = "Android"

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AttributeExtractor:
    """Pure, deterministic attribute derivation driven by a lexicon."""

    lexicon: Lexicon = field(default_factory=default_lexicon)
    rules: tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        if not self.rules:
            self.rules = build_title_rules(self.lexicon)

    def model_title(self, title: str, brand: str = "") -> str:
        cleaned = apply_rules(title or "", self.rules)
        return BrandPrefixRule(brand).apply(cleaned)

    def model_key(self, title: str, brand: str = "") -> str:
        return normalize(self.model_title(title, brand))

    def capacity(self, title: str) -> str:
        try:
            return _single_capacity(title)
        except ExtractionAmbiguity as exc:
            log.debug("%s; using the largest capacity token", exc)
            return exc.fallback or DEFAULT_CAPACITY

    def condition(self, raw: str) -> Condition:
        try:
            return self._condition(raw)
        except ExtractionAmbiguity as exc:
            log.debug("%s; defaulting to new", exc)
            return Condition.NEW

    def color(self, raw: str) -> str:
        color = collapse_whitespace(raw).lower()
        return color or NO_COLOR

    def availability(self, raw: str) -> Availability:
        value = raw.strip().lower()
        if value in self.lexicon.active_availability:
            return Availability.IN_STOCK
        if value in self.lexicon.preorder_availability:
            return Availability.PREORDER
        return Availability.OUT_OF_STOCK

    def tags(self, brand: str, condition: Condition, availability: Availability) -> frozenset[str]:
        tags = {self.lexicon.condition_tag(condition)}
        if brand.strip():
            tags.add(APPLE_TAG if brand.strip().lower() == "apple" else ANDROID_TAG)
        if availability is Availability.PREORDER:
            tags.add(PREORDER_TAG)
        return frozenset(tags)

    def derive(self, item: FeedItem) -> NormalizedVariant:
        model_title = self.model_title(item.raw_title, item.brand)
        condition = self.condition(item.raw_condition)
        availability = self.availability(item.raw_availability)
        return NormalizedVariant(
            sku=item.sku,
            model_title=model_title,
            model_key=normalize(model_title),
            capacity=self.capacity(item.raw_title),
            color=self.color(item.raw_color),
            condition=condition,
            price=item.price,
            image_url=item.image_url,
            gtin=clean_gtin(item.gtin),
            brand=item.brand,
            raw_title=item.raw_title,
            description=item.description,
            product_type=item.product_type,
            availability=availability,
            group_id_hint=item.group_id_hint,
            tags=self.tags(item.brand, condition, availability),
        )

    def derive_all(self, items: Iterable[FeedItem]) -> list[NormalizedVariant]:
        return [self.derive(item) for item in items]

    def _condition(self, raw: str) -> Condition:
        if not raw.strip():
            return Condition.NEW
        condition = self.lexicon.condition_for(raw)
        if condition is None:
            raise ExtractionAmbiguity(f"Unknown condition {raw!r}")
        return condition


def _single_capacity(title: str) -> str:
    tokens = [f"{number}{unit.upper()}" for number, unit in CAPACITY_PATTERN.findall(title or "")]
    distinct = list(dict.fromkeys(tokens))
    if not distinct:
        return DEFAULT_CAPACITY
    if len(distinct) > 1:
        raise ExtractionAmbiguity(
            f"Several capacities in {title!r}: {distinct}",
            fallback=max(distinct, key=_capacity_size),
        )
    return distinct[0]


def _capacity_size(token: str) -> int:
    """Size of a capacity token in GB."""

    number, unit = int(token[:-2]), token[-2:]
    return number * 1024 if unit == "TB" else number


def extract_model_title(title: str, brand: str = "") -> str:
    return _default_extractor().model_title(title, brand)


def extract_model_key(title: str, brand: str = "") -> str:
    """Grouping identity of a feed title; stable across runs for identical input."""

    return _default_extractor().model_key(title, brand)


def derive_variant(item: FeedItem) -> NormalizedVariant:
    return _default_extractor().derive(item)


@cache
def _default_extractor() -> AttributeExtractor:
    return AttributeExtractor()


__all__ = [
    "AttributeExtractor",
    "derive_variant",
    "extract_model_key",
    "extract_model_title",
]
