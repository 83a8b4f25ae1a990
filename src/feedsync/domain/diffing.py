"""Classify draft variants against the variants that already exist remotely."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from feedsync.domain.drafting import option_identity
from feedsync.domain.model import format_price

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from decimal import Decimal

    from feedsync.domain.model import RemoteVariant, VariantInput


@dataclass(frozen=True, slots=True)
class SkippedVariant:
    draft: VariantInput
    remote: RemoteVariant


@dataclass(frozen=True, slots=True)
class VariantDiff:
    to_create: tuple[VariantInput, ...] = ()
    to_update: tuple[VariantInput, ...] = ()
    to_skip: tuple[SkippedVariant, ...] = ()


def diff_variants(existing: Sequence[RemoteVariant], drafts: Iterable[VariantInput]) -> VariantDiff:
    """Match each draft variant by sku, then barcode, then option selection.

    A remote variant is claimed by at most one draft variant. Matched variants
    that differ in price, sku, barcode, media or options become updates carrying
    the remote id; identical ones are skipped; unmatched ones are created.
    """

    unclaimed = list(existing)
    to_create: list[VariantInput] = []
    to_update: list[VariantInput] = []
    to_skip: list[SkippedVariant] = []
    for draft in drafts:
        remote = _claim(unclaimed, draft)
        if remote is None:
            to_create.append(draft)
        elif needs_update(remote, draft):
            to_update.append(draft.for_update(remote.id))
        else:
            to_skip.append(SkippedVariant(draft=draft, remote=remote))
    return VariantDiff(tuple(to_create), tuple(to_update), tuple(to_skip))


def needs_update(remote: RemoteVariant, draft: VariantInput) -> bool:
    if _price(remote.price) != _price(draft.price):
        return True
    if (remote.sku or "") != draft.sku:
        return True
    # A draft without a barcode leaves the remote one in place.
    if draft.barcode and remote.barcode != draft.barcode:
        return True
    if draft.media_id is not None and remote.media_id != draft.media_id:
        return True
    return option_identity(remote.selected_options) != option_identity(draft.options)


def _claim(unclaimed: list[RemoteVariant], draft: VariantInput) -> RemoteVariant | None:
    matchers = (
        lambda remote: bool(draft.sku) and remote.sku == draft.sku,
        lambda remote: bool(draft.barcode) and remote.barcode == draft.barcode,
        lambda remote: option_identity(remote.selected_options) == option_identity(draft.options),
    )
    for matches in matchers:
        for index, remote in enumerate(unclaimed):
            if matches(remote):
                return unclaimed.pop(index)
    return None


def _price(value: Decimal | None) -> str | None:
    return None if value is None else format_price(value)


__all__ = ["SkippedVariant", "VariantDiff", "diff_variants", "needs_update"]
