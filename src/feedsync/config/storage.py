"""Local state directory; feedsync only keeps the feed download cache there."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "feedsync"
FEED_CACHE_FILENAME: Final[str] = "feed_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    feed_cache_filename: str = FEED_CACHE_FILENAME

    def ensure_data_dir(self) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def feed_cache_path(self) -> Path:
        """SQLite database backing the HTTP cache of the feed download."""

        return self.ensure_data_dir() / self.feed_cache_filename


def _default_data_dir() -> Path:
    base = os.getenv("XDG_CACHE_HOME")
    base_path = Path(base) if base else Path.home() / ".cache"
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("FEEDSYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())
