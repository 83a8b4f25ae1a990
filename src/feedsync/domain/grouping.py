"""Bucket normalised variants into product groups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feedsync.domain.model import VariantGroup
from feedsync.domain.text import normalize

if TYPE_CHECKING:
    from collections.abc import Iterable

    from feedsync.domain.model import NormalizedVariant

log = logging.getLogger(__name__)


def grouping_key(variant: NormalizedVariant) -> str:
    """Model key, else the feed group hint, else the normalised title, else the sku."""

    if variant.model_key:
        return variant.model_key
    for candidate in (variant.group_id_hint, normalize(variant.raw_title), variant.sku):
        if candidate and candidate.strip():
            log.debug("Variant %s has no model key; grouping by %r", variant.sku, candidate)
            return candidate.strip()
    return variant.sku


def group_variants(variants: Iterable[NormalizedVariant]) -> dict[str, list[NormalizedVariant]]:
    """Single pass, insertion ordered; every variant lands in exactly one bucket."""

    groups: dict[str, list[NormalizedVariant]] = {}
    for variant in variants:
        groups.setdefault(grouping_key(variant), []).append(variant)
    return groups


def build_groups(variants: Iterable[NormalizedVariant]) -> list[VariantGroup]:
    return [
        VariantGroup(group_id=key, variants=tuple(members))
        for key, members in group_variants(variants).items()
    ]


__all__ = ["build_groups", "group_variants", "grouping_key"]
