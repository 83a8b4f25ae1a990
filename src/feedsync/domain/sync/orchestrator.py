"""Drive one feed reconciliation run from download to published products."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from itertools import batched
from typing import TYPE_CHECKING

from feedsync.domain.diffing import diff_variants
from feedsync.domain.drafting import build_draft
from feedsync.domain.errors import (
    CatalogError,
    FeedFetchError,
    FeedParseError,
    GroupProcessingError,
)
from feedsync.domain.extraction import AttributeExtractor
from feedsync.domain.feed_parser import parse_feed
from feedsync.domain.grouping import build_groups
from feedsync.domain.matching import DEFAULT_HANDLE_MAX_LENGTH, CatalogMatcher
from feedsync.domain.model import GroupOutcome, RunStatus

from .events import EventType, ProgressEmitter
from .media import MediaSettings, ensure_media
from .retry import RetryingCatalogClient, RetrySettings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from feedsync.domain.model import (
        BulkVariantsResult,
        MediaRef,
        ProductDraft,
        RemoteProduct,
        RunSummary,
        SyncRun,
        VariantGroup,
        VariantInput,
    )
    from feedsync.domain.ports import CatalogClient, FeedSource, ProgressSink

    from .cancellation import RunContext
    from .retry import Sleep

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncSettings:
    batch_size: int = 3
    batch_delay_seconds: float = 0.7
    vendor: str = "Proveedor"
    publication_channels: tuple[str, ...] = ("Online Store", "Shop")
    handle_max_length: int = DEFAULT_HANDLE_MAX_LENGTH
    media: MediaSettings = field(default_factory=MediaSettings)

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")


class _ChannelResolver:
    """Looks up the publication channel ids once per run."""

    def __init__(self, client: CatalogClient, names: Sequence[str]) -> None:
        self._client = client
        self._names = tuple(names)
        self._ids: tuple[str, ...] | None = None
        self._lock = asyncio.Lock()

    async def resolve(self) -> tuple[str, ...]:
        async with self._lock:
            if self._ids is None:
                channels = await self._client.list_publication_channels()
                wanted = {name.casefold() for name in self._names}
                self._ids = tuple(
                    channel.id for channel in channels if channel.name.casefold() in wanted
                )
                if not self._ids:
                    log.warning("No publication channel named %s", ", ".join(self._names))
            return self._ids


@dataclass(slots=True)
class _RunScope:
    run: SyncRun
    emitter: ProgressEmitter
    matcher: CatalogMatcher
    channels: _ChannelResolver
    finished_groups: int = 0


class SyncOrchestrator:
    """Reconcile a feed against the catalog, group by group, in bounded batches.

    Every catalog call is retried through ``RetryingCatalogClient``. Failures
    inside a group are reported as ``group-error`` and never stop the run;
    only fetching or parsing the feed is fatal.
    """

    def __init__(
        self,
        client: CatalogClient,
        *,
        settings: SyncSettings | None = None,
        retry: RetrySettings | None = None,
        extractor: AttributeExtractor | None = None,
        sinks: Iterable[ProgressSink] = (),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings or SyncSettings()
        self.client = RetryingCatalogClient(client, retry or RetrySettings(), sleep)
        self.extractor = extractor or AttributeExtractor()
        self._sinks = list(sinks)
        self._sleep = sleep

    def add_sink(self, sink: ProgressSink) -> None:
        self._sinks.append(sink)

    async def run(self, feed_source: FeedSource, context: RunContext) -> RunSummary:
        run = context.run
        run.start()
        context.reset_cancel_flag()
        emitter = ProgressEmitter(context.tenant, self._sinks)
        await emitter.emit(EventType.SYNC_START)

        try:
            groups = await self._load_groups(feed_source)
        except (FeedFetchError, FeedParseError) as exc:
            log.error("Sync for %s aborted: %s", context.tenant, exc)
            summary = run.finish(RunStatus.ERROR, error=str(exc))
            await emitter.emit(EventType.SYNC_END, **summary.as_payload())
            raise
        except BaseException as exc:
            run.finish(RunStatus.ERROR, error=str(exc) or type(exc).__name__)
            raise

        run.total_groups = len(groups)
        await emitter.emit(
            EventType.GROUPS_DETECTED,
            total_groups=len(groups),
            total_variants=sum(len(group) for group in groups),
            groups=[
                {"group_id": group.group_id, "title": group.model_title, "variants": len(group)}
                for group in groups
            ],
        )

        scope = _RunScope(
            run=run,
            emitter=emitter,
            matcher=CatalogMatcher(self.client, self.settings.handle_max_length),
            channels=_ChannelResolver(self.client, self.settings.publication_channels),
        )
        try:
            return await self._run_batches(groups, scope, context)
        except asyncio.CancelledError:
            run.finish(RunStatus.CANCELLED)
            raise

    async def _load_groups(self, feed_source: FeedSource) -> list[VariantGroup]:
        document = await feed_source.fetch()
        items = parse_feed(document)
        variants = self.extractor.derive_all(items)
        groups = build_groups(variants)
        log.info("Detected %s product groups in %s feed items", len(groups), len(items))
        return groups

    async def _run_batches(
        self, groups: Sequence[VariantGroup], scope: _RunScope, context: RunContext
    ) -> RunSummary:
        for index, batch in enumerate(batched(groups, self.settings.batch_size)):
            if index:
                await self._sleep(self.settings.batch_delay_seconds)
            if context.was_cancelled():
                return await self._cancel(scope, context)
            outcomes = await asyncio.gather(
                *(self._process_group(group, scope) for group in batch)
            )
            for outcome in outcomes:
                scope.run.record(outcome)

        if context.was_cancelled():
            return await self._cancel(scope, context)
        summary = scope.run.finish(RunStatus.COMPLETED)
        log.info(
            "Sync for %s finished: created=%s updated=%s skipped=%s errored=%s",
            context.tenant,
            summary.created,
            summary.updated,
            summary.skipped,
            summary.errored,
        )
        await scope.emitter.emit(EventType.SYNC_END, **summary.as_payload())
        return summary

    async def _cancel(self, scope: _RunScope, context: RunContext) -> RunSummary:
        summary = scope.run.finish(RunStatus.CANCELLED)
        log.info(
            "Sync for %s cancelled after %s of %s groups",
            context.tenant,
            summary.processed_groups,
            summary.total_groups,
        )
        await scope.emitter.emit(EventType.SYNC_CANCELLED, **summary.as_payload())
        return summary

    async def _process_group(self, group: VariantGroup, scope: _RunScope) -> GroupOutcome:
        outcome = GroupOutcome(group_id=group.group_id)
        emitter = scope.emitter
        await emitter.emit(
            EventType.GROUP_START,
            group_id=group.group_id,
            title=group.model_title,
            variants=len(group),
        )
        try:
            await self._sync_group(group, outcome, scope)
        except Exception as exc:
            log.exception("Group %s failed", group.group_id)
            error = (
                exc
                if isinstance(exc, GroupProcessingError)
                else GroupProcessingError(group.group_id, f"{type(exc).__name__}: {exc}")
            )
            outcome.error = str(error)
            outcome.errored = len(group) - outcome.created - outcome.updated - outcome.skipped
            scope.finished_groups += 1
            await emitter.emit(
                EventType.GROUP_ERROR,
                group_id=group.group_id,
                error=outcome.error,
                error_type=type(exc).__name__,
                product_id=outcome.product_id,
                **self._progress(outcome, scope),
            )
            return outcome

        scope.finished_groups += 1
        await emitter.emit(
            EventType.GROUP_END,
            group_id=group.group_id,
            product_id=outcome.product_id,
            warnings=list(outcome.warnings),
            **self._progress(outcome, scope),
        )
        return outcome

    async def _sync_group(
        self, group: VariantGroup, outcome: GroupOutcome, scope: _RunScope
    ) -> None:
        emitter = scope.emitter
        draft = build_draft(
            group,
            vendor=self.settings.vendor,
            lexicon=self.extractor.lexicon,
            handle_max_length=self.settings.handle_max_length,
        )
        for rejected in draft.rejected:
            outcome.errored += 1
            await emitter.emit(
                EventType.VARIANT_PROCESSING_ERROR,
                group_id=group.group_id,
                sku=rejected.sku,
                error=rejected.reason,
            )
        for duplicate in draft.duplicates:
            outcome.skipped += 1
            await emitter.emit(
                EventType.VARIANT_SKIPPED,
                group_id=group.group_id,
                sku=duplicate.sku,
                options=duplicate.option_summary(),
                reason="duplicate",
            )
        if not draft.variants:
            log.warning("Group %s has no priced variants; nothing to sync", group.group_id)
            outcome.warnings.append("no priced variants")
            return

        existing = await scope.matcher.find_existing(group)
        if existing is None:
            product_id = await self._create_product(group, draft, outcome, emitter)
        else:
            product_id = await self._update_product(group, draft, existing, outcome, emitter)
        await self._publish(product_id, outcome, scope)

    async def _create_product(
        self,
        group: VariantGroup,
        draft: ProductDraft,
        outcome: GroupOutcome,
        emitter: ProgressEmitter,
    ) -> str:
        for variant in draft.variants:
            await emitter.emit(
                EventType.VARIANT_DETECTED_CREATE,
                group_id=group.group_id,
                sku=variant.sku,
                options=variant.option_summary(),
            )
        product = await self.client.create_product(draft)
        outcome.product_id = product.id
        log.info("Created product %s (%s) for group %s", product.id, draft.handle, group.group_id)

        variants = await self._attach_media(product.id, draft, product.media, outcome)
        await self._apply(group, product.id, variants, outcome, emitter, update=False)
        return product.id

    async def _update_product(
        self,
        group: VariantGroup,
        draft: ProductDraft,
        existing: RemoteProduct,
        outcome: GroupOutcome,
        emitter: ProgressEmitter,
    ) -> str:
        outcome.product_id = existing.id
        log.info("Group %s matches existing product %s", group.group_id, existing.id)
        remote_variants = await self.client.get_variants(existing.id)
        current_media = await self.client.get_media(existing.id)
        variants = await self._attach_media(existing.id, draft, current_media, outcome)

        diff = diff_variants(remote_variants, variants)
        for variant in diff.to_update:
            await emitter.emit(
                EventType.VARIANT_DETECTED_UPDATE,
                group_id=group.group_id,
                sku=variant.sku,
                options=variant.option_summary(),
                variant_id=variant.id,
            )
        for variant in diff.to_create:
            await emitter.emit(
                EventType.VARIANT_DETECTED_CREATE,
                group_id=group.group_id,
                sku=variant.sku,
                options=variant.option_summary(),
            )
        for skipped in diff.to_skip:
            outcome.skipped += 1
            await emitter.emit(
                EventType.VARIANT_SKIPPED,
                group_id=group.group_id,
                sku=skipped.draft.sku,
                options=skipped.draft.option_summary(),
                variant_id=skipped.remote.id,
                reason="unchanged",
            )

        if diff.to_update:
            await self._apply(group, existing.id, diff.to_update, outcome, emitter, update=True)
        if diff.to_create:
            await self._apply(group, existing.id, diff.to_create, outcome, emitter, update=False)
        return existing.id

    async def _attach_media(
        self,
        product_id: str,
        draft: ProductDraft,
        existing: Sequence[MediaRef],
        outcome: GroupOutcome,
    ) -> list[VariantInput]:
        if not draft.images:
            return list(draft.variants)
        media = await ensure_media(
            self.client,
            product_id,
            draft.images,
            existing=existing,
            settings=self.settings.media,
            sleep=self._sleep,
        )
        if media.error is not None:
            outcome.warnings.append(f"media: {media.error}")
        return [
            variant.with_media(media.media_ids.get(variant.image_url))
            if variant.image_url
            else variant
            for variant in draft.variants
        ]

    async def _apply(
        self,
        group: VariantGroup,
        product_id: str,
        variants: Sequence[VariantInput],
        outcome: GroupOutcome,
        emitter: ProgressEmitter,
        *,
        update: bool,
    ) -> None:
        action = "update" if update else "create"
        for variant in variants:
            await emitter.emit(
                EventType.VARIANT_PROCESSING_START,
                group_id=group.group_id,
                sku=variant.sku,
                options=variant.option_summary(),
                action=action,
            )
        if update:
            result = await self.client.bulk_update_variants(product_id, variants)
        else:
            result = await self.client.bulk_create_variants(product_id, variants)

        failures = _failed_variants(variants, result)
        for position, variant in enumerate(variants):
            failure = failures.get(position)
            if failure is not None:
                outcome.errored += 1
                await emitter.emit(
                    EventType.VARIANT_PROCESSING_ERROR,
                    group_id=group.group_id,
                    sku=variant.sku,
                    options=variant.option_summary(),
                    action=action,
                    error=failure,
                )
                continue
            if update:
                outcome.updated += 1
            else:
                outcome.created += 1
            await emitter.emit(
                EventType.VARIANT_PROCESSING_SUCCESS,
                group_id=group.group_id,
                sku=variant.sku,
                options=variant.option_summary(),
                action=action,
            )
        if failures:
            log.warning(
                "%s of %s variant %ss rejected for %s",
                len(failures),
                len(variants),
                action,
                product_id,
            )

    async def _publish(self, product_id: str, outcome: GroupOutcome, scope: _RunScope) -> None:
        try:
            channel_ids = await scope.channels.resolve()
            if channel_ids:
                await self.client.publish(product_id, channel_ids)
        except CatalogError as exc:
            log.warning("Could not publish %s: %s", product_id, exc)
            outcome.warnings.append(f"publish: {exc}")

    @staticmethod
    def _progress(outcome: GroupOutcome, scope: _RunScope) -> dict[str, int]:
        return {
            "created": outcome.created,
            "updated": outcome.updated,
            "skipped": outcome.skipped,
            "errored": outcome.errored,
            "processed_groups": scope.finished_groups,
            "total_groups": scope.run.total_groups,
        }


def _failed_variants(
    variants: Sequence[VariantInput], result: BulkVariantsResult
) -> dict[int, str]:
    """Positions of variants the catalog did not apply, with the error message."""

    if result.ok:
        return {}
    failures: dict[int, str] = {}
    unplaced: list[str] = []
    for error in result.errors:
        index = _error_index(error.field)
        if index is not None and 0 <= index < len(variants):
            failures[index] = str(error)
        else:
            unplaced.append(str(error))
    applied = {variant.sku for variant in result.variants if variant.sku}
    message = "; ".join(unplaced) or "not applied by the catalog"
    for position, variant in enumerate(variants):
        if position not in failures and variant.sku not in applied:
            failures[position] = message
    return failures


def _error_index(path: Sequence[str]) -> int | None:
    for part in path:
        if part.isdigit():
            return int(part)
    return None


__all__ = ["SyncOrchestrator", "SyncSettings"]
