"""Run state for one feed reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class RunStatus(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in {RunStatus.CANCELLED, RunStatus.COMPLETED, RunStatus.ERROR}


@dataclass(slots=True)
class GroupOutcome:
    """Variant counters and failure details for one processed group."""

    group_id: str
    product_id: str | None = None
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errored: int = 0
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class RunSummary:
    status: RunStatus
    total_groups: int = 0
    processed_groups: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errored: int = 0
    failed_groups: tuple[str, ...] = ()
    error: str | None = None

    def as_payload(self) -> dict[str, object]:
        return {
            "status": str(self.status),
            "total_groups": self.total_groups,
            "processed_groups": self.processed_groups,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "errored": self.errored,
            "failed_groups": list(self.failed_groups),
            "error": self.error,
        }


@dataclass(slots=True)
class SyncRun:
    """Mutable state of a run; only the orchestrator writes to it."""

    status: RunStatus = RunStatus.IDLE
    total_groups: int = 0
    outcomes: dict[str, GroupOutcome] = field(default_factory=dict)
    error: str | None = None

    def start(self) -> None:
        if self.status is RunStatus.RUNNING:
            raise RuntimeError("Run already in progress")
        self.status = RunStatus.RUNNING
        self.total_groups = 0
        self.outcomes.clear()
        self.error = None

    def record(self, outcome: GroupOutcome) -> None:
        self.outcomes[outcome.group_id] = outcome

    def finish(self, status: RunStatus, *, error: str | None = None) -> RunSummary:
        if not status.terminal:
            raise ValueError(f"{status} is not a terminal run status")
        self.status = status
        self.error = error
        return self.summary()

    @property
    def processed_groups(self) -> int:
        return len(self.outcomes)

    def summary(self) -> RunSummary:
        outcomes = list(self.outcomes.values())
        return RunSummary(
            status=self.status,
            total_groups=self.total_groups,
            processed_groups=self.processed_groups,
            created=sum(item.created for item in outcomes),
            updated=sum(item.updated for item in outcomes),
            skipped=sum(item.skipped for item in outcomes),
            errored=sum(item.errored for item in outcomes),
            failed_groups=tuple(item.group_id for item in outcomes if item.failed),
            error=self.error,
        )
