"""Synchronisation defaults for the feed reconciliation run."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_float, env_int, env_list

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY_SECONDS = 0.7
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 0.15
DEFAULT_THROTTLE_DELAY_MULTIPLIER = 4.0
DEFAULT_MEDIA_POLL_ATTEMPTS = 5
DEFAULT_MEDIA_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_VENDOR = "Proveedor"
DEFAULT_PUBLICATION_CHANNELS = ("Online Store", "Shop")
DEFAULT_HANDLE_MAX_LENGTH = 100


@dataclass(frozen=True, slots=True)
class SyncConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_base_delay_seconds: float = DEFAULT_RETRY_BASE_DELAY_SECONDS
    throttle_delay_multiplier: float = DEFAULT_THROTTLE_DELAY_MULTIPLIER
    media_poll_attempts: int = DEFAULT_MEDIA_POLL_ATTEMPTS
    media_poll_interval_seconds: float = DEFAULT_MEDIA_POLL_INTERVAL_SECONDS
    vendor: str = DEFAULT_VENDOR
    publication_channels: tuple[str, ...] = DEFAULT_PUBLICATION_CHANNELS
    handle_max_length: int = DEFAULT_HANDLE_MAX_LENGTH

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.retry_attempts < 1:
            raise ValueError("retry_attempts must be at least 1")


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        batch_size=env_int("FEEDSYNC_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        batch_delay_seconds=env_float("FEEDSYNC_BATCH_DELAY", DEFAULT_BATCH_DELAY_SECONDS),
        retry_attempts=env_int("FEEDSYNC_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
        media_poll_attempts=env_int("FEEDSYNC_MEDIA_POLL_ATTEMPTS", DEFAULT_MEDIA_POLL_ATTEMPTS),
        vendor=os.getenv("FEEDSYNC_VENDOR") or DEFAULT_VENDOR,
        publication_channels=env_list(
            "FEEDSYNC_PUBLICATION_CHANNELS", DEFAULT_PUBLICATION_CHANNELS
        ),
    )
