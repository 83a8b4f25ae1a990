"""Port for the feed document source."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class FeedSource(Protocol):
    async def fetch(self) -> bytes: ...


__all__ = ["FeedSource"]
