from __future__ import annotations

import asyncio

import pytest

from feedsync.domain.errors import CatalogValidationError, MediaPollTimeoutError
from feedsync.domain.model import MediaRef
from feedsync.domain.sync import MediaSettings, ensure_media, wait_for_media

from tests.support.catalog import FakeCatalog, SleepRecorder

URLS = ("https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg")


def test_ensure_media_uploads_missing_images_and_resolves_ids(catalog: FakeCatalog) -> None:
    product = catalog.add_product(title="Acme", handle="acme")

    result = asyncio.run(
        ensure_media(catalog, product.id, URLS, settings=MediaSettings(), sleep=SleepRecorder())
    )

    assert result.error is None
    assert result.uploaded == 2
    assert set(result.media_ids) == set(URLS)
    assert catalog.calls_to("create_media") == [(product.id, URLS)]


def test_ensure_media_reuses_existing_media(catalog: FakeCatalog) -> None:
    existing = MediaRef(id="m-a", source_url=URLS[0], ready=True)
    product = catalog.add_product(title="Acme", handle="acme", media=[existing])

    result = asyncio.run(
        ensure_media(
            catalog,
            product.id,
            URLS,
            existing=[existing],
            settings=MediaSettings(),
            sleep=SleepRecorder(),
        )
    )

    assert result.media_ids[URLS[0]] == "m-a"
    assert catalog.calls_to("create_media") == [(product.id, (URLS[1],))]


def test_ensure_media_without_missing_images_makes_no_calls(catalog: FakeCatalog) -> None:
    existing = [MediaRef(id="m-a", source_url=URLS[0], ready=True)]

    result = asyncio.run(
        ensure_media(catalog, "p1", URLS[:1], existing=existing, settings=MediaSettings())
    )

    assert result.media_ids == {URLS[0]: "m-a"}
    assert catalog.calls == []


def test_poll_timeout_is_reported_not_raised() -> None:
    catalog = FakeCatalog(media_ready=False)
    product = catalog.add_product(title="Acme", handle="acme")
    sleep = SleepRecorder()

    result = asyncio.run(
        ensure_media(
            catalog,
            product.id,
            URLS,
            settings=MediaSettings(poll_attempts=3, poll_interval_seconds=0.5),
            sleep=sleep,
        )
    )

    assert result.media_ids == {}
    assert result.error is not None
    assert "not ready" in result.error
    assert catalog.count("get_media") == 3
    assert sleep.delays == [0.5, 0.5]


def test_upload_rejection_is_reported_not_raised(catalog: FakeCatalog) -> None:
    catalog.fail("create_media", CatalogValidationError("Image URL is invalid"))

    result = asyncio.run(ensure_media(catalog, "p1", URLS, settings=MediaSettings()))

    assert result.media_ids == {}
    assert result.error == "Image URL is invalid"


def test_wait_for_media_lists_pending_urls() -> None:
    catalog = FakeCatalog(media_ready=False)
    product = catalog.add_product(title="Acme", handle="acme")
    asyncio.run(catalog.create_media(product.id, URLS))

    with pytest.raises(MediaPollTimeoutError) as excinfo:
        asyncio.run(
            wait_for_media(
                catalog,
                product.id,
                URLS,
                settings=MediaSettings(poll_attempts=1),
                sleep=SleepRecorder(),
            )
        )

    assert excinfo.value.pending == URLS
