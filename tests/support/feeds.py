"""Feed documents and items for tests."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from feedsync.domain.model import FeedItem

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def rss_item(**fields: str) -> dict[str, str]:
    return dict(fields)


def rss_feed(items: Iterable[Mapping[str, str]]) -> bytes:
    """Google Shopping RSS document; every field is written as ``g:<name>``."""

    entries = []
    for item in items:
        body = "".join(
            f"<g:{name}>{escape(value)}</g:{name}>" for name, value in item.items()
        )
        entries.append(f"<item>{body}</item>")
    document = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0" xmlns:g="http://base.google.com/ns/1.0">'
        f"<channel><title>Test feed</title>{''.join(entries)}</channel></rss>"
    )
    return document.encode("utf-8")


def phone_feed() -> bytes:
    """Two colours of one phone plus a second model."""

    return rss_feed(
        [
            rss_item(
                id="ACME-1-RED",
                title="Acme Phone 1 128GB Red",
                brand="Acme",
                price="199.00 EUR",
                color="Red",
                condition="new",
                availability="in_stock",
                gtin="1234567890123",
                image_link="https://cdn.example.com/acme-red.jpg",
            ),
            rss_item(
                id="ACME-1-BLUE",
                title="Acme Phone 1 128GB Blue",
                brand="Acme",
                price="199.00 EUR",
                color="Blue",
                condition="new",
                availability="in_stock",
                gtin="1234567890124",
                image_link="https://cdn.example.com/acme-blue.jpg",
            ),
            rss_item(
                id="NOVA-2",
                title="Nova Tab 2 64GB",
                brand="Nova",
                price="99.90 EUR",
                condition="refurbished",
                availability="out_of_stock",
            ),
        ]
    )


def make_item(
    sku: str = "SKU-1",
    title: str = "Acme Phone 1 128GB",
    *,
    brand: str = "Acme",
    price: str | None = "100.00",
    color: str = "",
    condition: str = "new",
    availability: str = "in_stock",
    gtin: str | None = None,
    image_url: str | None = None,
    group_id_hint: str | None = None,
) -> FeedItem:
    return FeedItem(
        sku=sku,
        raw_title=title,
        brand=brand,
        price=Decimal(price) if price is not None else None,
        raw_color=color,
        raw_condition=condition,
        raw_availability=availability,
        gtin=gtin,
        image_url=image_url,
        group_id_hint=group_id_hint,
    )


class StaticFeedSource:
    """Feed source returning a fixed document, or raising a given error."""

    def __init__(self, document: bytes = b"", *, error: Exception | None = None) -> None:
        self.document = document
        self.error = error
        self.fetches = 0

    async def fetch(self) -> bytes:
        self.fetches += 1
        if self.error is not None:
            raise self.error
        return self.document
