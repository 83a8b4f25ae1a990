"""Reconcile a Google Shopping product feed with a Shopify catalog."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("feedsync")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = ["__version__"]
