from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from feedsync import app
from feedsync.domain.errors import FeedFetchError
from feedsync.domain.model import RunStatus
from feedsync.domain.sync import RunRegistry

from tests.support.catalog import FakeCatalog, RecordingSink
from tests.support.feeds import StaticFeedSource

if TYPE_CHECKING:
    from types import TracebackType

    from feedsync.config import ShopifyConfig, SyncConfig


class _Session:
    """Async context manager handing out a shared fake catalog."""

    def __init__(self, catalog: FakeCatalog) -> None:
        self.catalog = catalog
        self.opened = 0
        self.closed = 0

    def __call__(self, _config: ShopifyConfig) -> _Session:
        return self

    async def __aenter__(self) -> FakeCatalog:
        self.opened += 1
        return self.catalog

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.closed += 1


def test_sync_feed_runs_and_records_summary(
    shopify_config: ShopifyConfig,
    fast_sync_config: SyncConfig,
    catalog: FakeCatalog,
    feed_document: bytes,
) -> None:
    session = _Session(catalog)
    runs = RunRegistry()
    sink = RecordingSink()

    summary = app.sync_feed(
        feed_source=StaticFeedSource(feed_document),
        shopify=shopify_config,
        sync=fast_sync_config,
        sinks=[sink],
        catalog_factory=session,  # type: ignore[arg-type]
        runs=runs,
    )

    assert summary.status is RunStatus.COMPLETED
    assert summary.created == 3
    assert (session.opened, session.closed) == (1, 1)
    assert sink.types[-1] == "sync-end"
    assert app.sync_status("acme", runs=runs) == summary
    assert not app.request_cancel("acme", runs=runs)


def test_sync_feed_records_fatal_fetch(
    shopify_config: ShopifyConfig,
    fast_sync_config: SyncConfig,
    catalog: FakeCatalog,
) -> None:
    runs = RunRegistry()
    source = StaticFeedSource(b"", error=FeedFetchError("HTTP 503", status_code=503))

    with pytest.raises(FeedFetchError):
        app.sync_feed(
            feed_source=source,
            shopify=shopify_config,
            sync=fast_sync_config,
            catalog_factory=_Session(catalog),  # type: ignore[arg-type]
            runs=runs,
        )

    last = app.sync_status("acme", runs=runs)
    assert last is not None
    assert last.status is RunStatus.ERROR
    assert catalog.calls == []


def test_preview_groups_never_touches_catalog(feed_document: bytes) -> None:
    source = StaticFeedSource(feed_document)

    groups = app.preview_groups(feed_source=source)

    assert [group.group_id for group in groups] == ["acme phone 1", "nova tab 2"]
    assert [len(group.variants) for group in groups] == [2, 1]
    assert source.fetches == 1


def test_list_option_values_uses_catalog_session(
    monkeypatch: pytest.MonkeyPatch, shopify_config: ShopifyConfig
) -> None:
    collected: list[str] = []

    async def fake_collect(_client: object, option_name: str) -> list[str]:
        collected.append(option_name)
        return ["Azul", "Rojo"]

    monkeypatch.setattr(app, "collect_option_values", fake_collect)
    session = _Session(FakeCatalog())

    values = app.list_option_values(
        "Color",
        shopify=shopify_config,
        catalog_factory=session,  # type: ignore[arg-type]
    )

    assert values == ["Azul", "Rojo"]
    assert collected == ["Color"]
    assert session.closed == 1
