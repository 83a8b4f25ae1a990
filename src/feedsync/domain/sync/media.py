"""Upload product images and wait until the catalog reports them ready."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from feedsync.domain.errors import CatalogError, MediaPollTimeoutError, MediaUploadError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from feedsync.domain.model import MediaRef
    from feedsync.domain.ports import CatalogClient

    from .retry import Sleep

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MediaSettings:
    poll_attempts: int = 5
    poll_interval_seconds: float = 1.0


@dataclass(slots=True)
class MediaResult:
    """Media ids by source URL, plus what went wrong if not every image made it."""

    media_ids: dict[str, str] = field(default_factory=dict)
    uploaded: int = 0
    error: str | None = None


async def wait_for_media(
    client: CatalogClient,
    product_id: str,
    urls: Sequence[str],
    *,
    settings: MediaSettings,
    sleep: Sleep = asyncio.sleep,
) -> dict[str, MediaRef]:
    """Poll ``get_media`` until every URL has a ready media entry.

    Raises ``MediaPollTimeoutError`` listing the URLs still pending once the
    poll budget is spent.
    """

    pending = list(dict.fromkeys(urls))
    found: dict[str, MediaRef] = {}
    for attempt in range(1, settings.poll_attempts + 1):
        refs = await client.get_media(product_id)
        for url in list(pending):
            ref = next((ref for ref in refs if ref.ready and ref.matches(url)), None)
            if ref is not None:
                found[url] = ref
                pending.remove(url)
        if not pending:
            return found
        if attempt < settings.poll_attempts:
            await sleep(settings.poll_interval_seconds)
    raise MediaPollTimeoutError(
        f"{len(pending)} image(s) of {product_id} not ready after {settings.poll_attempts} polls",
        pending=tuple(pending),
    )


async def ensure_media(
    client: CatalogClient,
    product_id: str,
    urls: Sequence[str],
    *,
    existing: Sequence[MediaRef] = (),
    settings: MediaSettings,
    sleep: Sleep = asyncio.sleep,
) -> MediaResult:
    """Attach every URL not yet present on the product and resolve media ids.

    Failures are reported on the result instead of raised; the product then
    proceeds with the images that are available.
    """

    result = MediaResult()
    missing: list[str] = []
    for url in dict.fromkeys(urls):
        ref = next((ref for ref in existing if ref.matches(url)), None)
        if ref is None:
            missing.append(url)
        else:
            result.media_ids[url] = ref.id
    if not missing:
        return result

    try:
        created = await client.create_media(product_id, missing)
        if not created:
            raise MediaUploadError(f"Catalog accepted none of {len(missing)} image(s)")
        result.uploaded = len(created)
        ready = await wait_for_media(
            client, product_id, missing, settings=settings, sleep=sleep
        )
    except MediaPollTimeoutError as exc:
        log.warning("Media for %s not ready: %s", product_id, exc)
        result.error = str(exc)
        return result
    except (MediaUploadError, CatalogError) as exc:
        log.warning("Could not upload media for %s: %s", product_id, exc)
        result.error = str(exc)
        return result

    result.media_ids.update({url: ref.id for url, ref in ready.items()})
    return result


__all__ = ["MediaResult", "MediaSettings", "ensure_media", "wait_for_media"]
