"""Port for consumers of run progress events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from feedsync.domain.sync.events import ProgressEvent


class ProgressSink(Protocol):
    """Receives every event of a run; may be a plain or an async callable."""

    def __call__(self, event: ProgressEvent) -> Awaitable[None] | None: ...


__all__ = ["ProgressSink"]
