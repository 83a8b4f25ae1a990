"""HTTP feed source adapter."""

from __future__ import annotations

from .fetcher import HttpFeedSource

__all__ = ["HttpFeedSource"]
