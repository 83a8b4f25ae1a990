"""Ordered progress events and their fan-out to sinks."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from feedsync.domain.ports import ProgressSink

log = logging.getLogger(__name__)


class EventType(StrEnum):
    SYNC_START = "sync-start"
    GROUPS_DETECTED = "groups-detected"
    GROUP_START = "group-start"
    GROUP_END = "group-end"
    GROUP_ERROR = "group-error"
    VARIANT_DETECTED_CREATE = "variant-detected-create"
    VARIANT_DETECTED_UPDATE = "variant-detected-update"
    VARIANT_PROCESSING_START = "variant-processing-start"
    VARIANT_PROCESSING_SUCCESS = "variant-processing-success"
    VARIANT_PROCESSING_ERROR = "variant-processing-error"
    VARIANT_SKIPPED = "variant-skipped"
    SYNC_CANCELLED = "sync-cancelled"
    SYNC_END = "sync-end"

    @property
    def terminal(self) -> bool:
        return self in {EventType.SYNC_CANCELLED, EventType.SYNC_END}


@dataclass(frozen=True, slots=True, kw_only=True)
class ProgressEvent:
    type: EventType
    sequence: int
    tenant: str
    group_id: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "sequence": self.sequence,
            "tenant": self.tenant,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.group_id is not None:
            data["group_id"] = self.group_id
        data.update(self.payload)
        return data


class ProgressEmitter:
    """Numbers events and delivers them, in order, to every sink.

    Guarantees one ``sync-start`` and at most one terminal event per run.
    A failing sink is logged and does not affect the other sinks or the run.
    """

    def __init__(self, tenant: str, sinks: Iterable[ProgressSink] = ()) -> None:
        self.tenant = tenant
        self._sinks: list[ProgressSink] = list(sinks)
        self._sequence = 0
        self._started = False
        self._terminated = False

    def add_sink(self, sink: ProgressSink) -> None:
        self._sinks.append(sink)

    @property
    def terminated(self) -> bool:
        return self._terminated

    async def emit(
        self,
        event_type: EventType,
        *,
        group_id: str | None = None,
        **payload: Any,
    ) -> ProgressEvent | None:
        if event_type is EventType.SYNC_START:
            if self._started:
                raise RuntimeError("sync-start already emitted for this run")
            self._started = True
        elif self._terminated:
            log.debug("Dropping %s emitted after the terminal event", event_type)
            return None
        if event_type.terminal:
            self._terminated = True

        self._sequence += 1
        event = ProgressEvent(
            type=event_type,
            sequence=self._sequence,
            tenant=self.tenant,
            group_id=group_id,
            payload=payload,
        )
        for sink in self._sinks:
            await self._deliver(sink, event)
        return event

    async def _deliver(self, sink: ProgressSink, event: ProgressEvent) -> None:
        try:
            result = sink(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception("Progress sink failed on %s #%s", event.type, event.sequence)


def logging_sink(logger: logging.Logger | None = None) -> ProgressSink:
    """Sink writing events to ``logger``; per-variant chatter goes to DEBUG."""

    target = logger or log

    def sink(event: ProgressEvent) -> None:
        if event.type in {EventType.GROUP_ERROR, EventType.VARIANT_PROCESSING_ERROR}:
            level = logging.WARNING
        elif event.type.value.startswith("variant-"):
            level = logging.DEBUG
        else:
            level = logging.INFO
        target.log(
            level,
            "%s #%s %s %s",
            event.type,
            event.sequence,
            event.group_id or "-",
            dict(event.payload),
        )

    return sink


__all__ = ["EventType", "ProgressEmitter", "ProgressEvent", "logging_sink"]
