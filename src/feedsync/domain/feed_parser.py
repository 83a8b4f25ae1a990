"""Google Shopping feed parsing (RSS 2.0 and Atom)."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

from feedsync.domain.errors import FeedParseError
from feedsync.domain.model import FeedItem

if TYPE_CHECKING:
    from collections.abc import Iterable

GOOGLE_NS: Final[str] = "http://base.google.com/ns/1.0"

_PRICE_JUNK = re.compile(r"[^\d.,]")
_GTIN = re.compile(r"^\d{8,}$")

log = logging.getLogger(__name__)


def parse_feed(document: bytes | str) -> list[FeedItem]:
    """Parse a feed document into flat items, in document order.

    Raises ``FeedParseError`` for malformed XML. A well-formed document without
    an item container yields an empty list.
    """

    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise FeedParseError(f"Feed is not well-formed XML: {exc}") from exc

    nodes = _item_nodes(root)
    items: list[FeedItem] = []
    for position, node in enumerate(nodes):
        item = parse_item(node)
        if item is None:
            log.warning("Skipping feed item #%s without an id", position)
            continue
        items.append(item)
    log.info("Parsed %s feed items", len(items))
    return items


def parse_item(node: ET.Element) -> FeedItem | None:
    fields = _fields(node)
    sku = fields.get("id", "")
    if not sku:
        return None
    return FeedItem(
        sku=sku,
        raw_title=fields.get("title", ""),
        group_id_hint=fields.get("item_group_id") or None,
        brand=fields.get("brand", ""),
        description=fields.get("description", ""),
        price=parse_price(fields.get("price")),
        gtin=fields.get("gtin") or None,
        image_url=fields.get("image_link") or None,
        raw_color=fields.get("color", ""),
        raw_availability=fields.get("availability", ""),
        raw_condition=fields.get("condition", ""),
        product_type=fields.get("product_type", ""),
    )


def parse_price(raw: str | None) -> Decimal | None:
    """Parse a feed price such as ``"1.234,56 EUR"``.

    Currency text and spaces are dropped, commas become dots and only the last
    dot is kept as the decimal separator. Returns ``None`` for anything that is
    not a positive number.
    """

    if not raw:
        return None
    token = next((part for part in raw.split() if any(ch.isdigit() for ch in part)), "")
    if token.startswith("-"):
        return None
    text = _PRICE_JUNK.sub("", token).replace(",", ".")
    if text.count(".") > 1:
        whole, _, fraction = text.rpartition(".")
        text = f"{whole.replace('.', '')}.{fraction}"
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


def clean_gtin(raw: str | None) -> str | None:
    """Return ``raw`` when it looks like a barcode (digits only, at least 8)."""

    if raw is None:
        return None
    value = raw.strip()
    return value if _GTIN.match(value) else None


def _item_nodes(root: ET.Element) -> list[ET.Element]:
    root_name = _local_name(root.tag)
    if root_name == "rss":
        channel = next(_children(root, "channel"), None)
        if channel is None:
            log.warning("RSS feed has no <channel>; treating it as empty")
            return []
        return list(_children(channel, "item"))
    if root_name == "feed":
        return list(_children(root, "entry"))
    if root_name == "channel":
        return list(_children(root, "item"))
    log.warning("Unrecognised feed root <%s>; treating it as empty", root_name)
    return []


def _fields(node: ET.Element) -> dict[str, str]:
    """Flatten child elements to ``name -> text``; ``g:`` fields win."""

    plain: dict[str, str] = {}
    google: dict[str, str] = {}
    for child in node:
        namespace, name = _split_tag(child.tag)
        text = (child.text or "").strip()
        if namespace == GOOGLE_NS:
            google.setdefault(name, text)
        elif name.startswith("g:"):
            google.setdefault(name[2:], text)
        else:
            plain.setdefault(name, text)
    return plain | {name: value for name, value in google.items() if value}


def _children(element: ET.Element, name: str) -> Iterable[ET.Element]:
    return (child for child in element if _local_name(child.tag) == name)


def _split_tag(tag: str) -> tuple[str | None, str]:
    if tag.startswith("{"):
        namespace, _, name = tag[1:].partition("}")
        return namespace, name
    return None, tag


def _local_name(tag: str) -> str:
    return _split_tag(tag)[1]


__all__ = ["GOOGLE_NS", "clean_gtin", "parse_feed", "parse_item", "parse_price"]
