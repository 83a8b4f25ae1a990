"""Ports implemented by adapters."""

from __future__ import annotations

from .catalog import CatalogClient
from .feed import FeedSource
from .progress import ProgressSink

__all__ = ["CatalogClient", "FeedSource", "ProgressSink"]
