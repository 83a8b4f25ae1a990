from __future__ import annotations

import asyncio

import pytest

from feedsync.domain.errors import (
    CatalogThrottledError,
    CatalogUnavailableError,
    CatalogValidationError,
)
from feedsync.domain.model import Channel
from feedsync.domain.sync import RetrySettings, RetryingCatalogClient, call_with_retry

from tests.support.catalog import FakeCatalog, SleepRecorder


class _Flaky:
    def __init__(self, *errors: Exception) -> None:
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def test_delay_grows_exponentially() -> None:
    settings = RetrySettings(base_delay_seconds=0.1, throttle_multiplier=4.0)
    error = CatalogUnavailableError("down")

    assert [settings.delay_for(attempt, error) for attempt in (1, 2, 3)] == pytest.approx(
        [0.1, 0.2, 0.4]
    )


def test_throttling_waits_longer_and_honours_retry_after() -> None:
    settings = RetrySettings(base_delay_seconds=0.1, throttle_multiplier=4.0)

    assert settings.delay_for(1, CatalogThrottledError()) == pytest.approx(0.4)
    assert settings.delay_for(1, CatalogThrottledError(retry_after=2.0)) == pytest.approx(2.0)


def test_settings_require_one_attempt() -> None:
    with pytest.raises(ValueError, match="attempts"):
        RetrySettings(attempts=0)


def test_call_with_retry_recovers_from_transient_errors() -> None:
    operation = _Flaky(CatalogThrottledError(), CatalogUnavailableError("502"))
    sleep = SleepRecorder()

    result = asyncio.run(
        call_with_retry(
            operation,
            settings=RetrySettings(attempts=3, base_delay_seconds=0.1),
            label="test",
            sleep=sleep,
        )
    )

    assert result == "ok"
    assert operation.calls == 3
    assert sleep.delays == pytest.approx([0.4, 0.2])


def test_call_with_retry_gives_up_after_attempts() -> None:
    operation = _Flaky(*(CatalogUnavailableError("down") for _ in range(5)))
    sleep = SleepRecorder()

    with pytest.raises(CatalogUnavailableError):
        asyncio.run(
            call_with_retry(operation, settings=RetrySettings(attempts=3), label="t", sleep=sleep)
        )

    assert operation.calls == 3
    assert len(sleep.delays) == 2


def test_validation_errors_are_not_retried() -> None:
    operation = _Flaky(CatalogValidationError("bad input"))
    sleep = SleepRecorder()

    with pytest.raises(CatalogValidationError):
        asyncio.run(call_with_retry(operation, settings=RetrySettings(), label="t", sleep=sleep))

    assert operation.calls == 1
    assert sleep.delays == []


def test_retrying_client_delegates_and_retries() -> None:
    catalog = FakeCatalog(channels=[Channel(id="p1", name="Shop")])
    catalog.fail("list_publication_channels", CatalogThrottledError())
    client = RetryingCatalogClient(catalog, RetrySettings(attempts=2), SleepRecorder())

    channels = asyncio.run(client.list_publication_channels())

    assert channels == [Channel(id="p1", name="Shop")]
    assert catalog.count("list_publication_channels") == 2
