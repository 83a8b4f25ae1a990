"""Error taxonomy for feed ingestion and catalog reconciliation."""

from __future__ import annotations


class FeedSyncError(RuntimeError):
    """Base class for all domain errors."""


class FeedFetchError(FeedSyncError):
    """The feed could not be downloaded. Fatal at run start."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedParseError(FeedSyncError):
    """The feed document is not well-formed XML."""


class ExtractionAmbiguity(FeedSyncError):
    """An attribute could not be derived unambiguously; callers fall back to defaults."""

    def __init__(self, message: str, *, fallback: str | None = None) -> None:
        super().__init__(message)
        self.fallback = fallback


class CatalogError(FeedSyncError):
    """Base class for failures reported by the remote catalog."""


class CatalogThrottledError(CatalogError):
    """The catalog rejected the call because of rate limiting. Safe to retry."""

    def __init__(self, message: str = "Throttled", *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class CatalogUnavailableError(CatalogError):
    """Network or server side failure. Safe to retry."""


class CatalogValidationError(CatalogError):
    """The catalog rejected the input. Never retried."""

    def __init__(self, message: str, *, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class CatalogNotFoundError(CatalogError):
    """The referenced remote entity does not exist."""


class MediaUploadError(FeedSyncError):
    """Images could not be attached to a product. Non-fatal for the group."""


class MediaPollTimeoutError(MediaUploadError):
    """Uploaded media did not become visible within the poll budget."""

    def __init__(self, message: str, *, pending: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.pending = pending


class GroupProcessingError(FeedSyncError):
    """Wraps any failure inside one variant group's pipeline."""

    def __init__(self, group_id: str, message: str) -> None:
        super().__init__(f"{group_id}: {message}")
        self.group_id = group_id


RETRYABLE_CATALOG_ERRORS: tuple[type[CatalogError], ...] = (
    CatalogThrottledError,
    CatalogUnavailableError,
)
