"""Run orchestration: batching, retries, cancellation, media and progress events."""

from __future__ import annotations

from .cancellation import RunContext, RunRegistry
from .events import EventType, ProgressEmitter, ProgressEvent, logging_sink
from .media import MediaResult, MediaSettings, ensure_media, wait_for_media
from .orchestrator import SyncOrchestrator, SyncSettings
from .retry import RetryingCatalogClient, RetrySettings, call_with_retry

__all__ = [
    "EventType",
    "MediaResult",
    "MediaSettings",
    "ProgressEmitter",
    "ProgressEvent",
    "RetrySettings",
    "RetryingCatalogClient",
    "RunContext",
    "RunRegistry",
    "SyncOrchestrator",
    "SyncSettings",
    "call_with_retry",
    "ensure_media",
    "logging_sink",
    "wait_for_media",
]
