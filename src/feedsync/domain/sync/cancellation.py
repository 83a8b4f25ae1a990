"""Cooperative cancellation and per-tenant run bookkeeping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from feedsync.domain.model import RunStatus, SyncRun

if TYPE_CHECKING:
    from feedsync.domain.model import RunSummary

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RunContext:
    """Cancellation gate and run state for one tenant.

    The orchestrator polls ``was_cancelled`` between batches only; a batch that
    already started always finishes.
    """

    tenant: str
    run: SyncRun = field(default_factory=SyncRun)
    _cancel_requested: bool = field(default=False, init=False)

    def request_cancel(self) -> None:
        if not self._cancel_requested:
            log.info("Cancellation requested for %s", self.tenant)
        self._cancel_requested = True

    def was_cancelled(self) -> bool:
        return self._cancel_requested

    def reset_cancel_flag(self) -> None:
        self._cancel_requested = False

    @property
    def running(self) -> bool:
        return self.run.status is RunStatus.RUNNING


@dataclass(slots=True)
class RunRegistry:
    """Hands out one ``RunContext`` per tenant and keeps the last summary of each."""

    _contexts: dict[str, RunContext] = field(default_factory=dict)
    _last: dict[str, RunSummary] = field(default_factory=dict)

    def context_for(self, tenant: str) -> RunContext:
        context = self._contexts.get(tenant)
        if context is None:
            context = RunContext(tenant=tenant)
            self._contexts[tenant] = context
        return context

    def request_cancel(self, tenant: str) -> bool:
        """Cancel the tenant's run; returns whether a run was in flight."""

        context = self._contexts.get(tenant)
        if context is None or not context.running:
            return False
        context.request_cancel()
        return True

    def record(self, tenant: str, summary: RunSummary) -> None:
        self._last[tenant] = summary

    def last_summary(self, tenant: str) -> RunSummary | None:
        return self._last.get(tenant)

    def status(self, tenant: str) -> RunStatus:
        context = self._contexts.get(tenant)
        return context.run.status if context is not None else RunStatus.IDLE


__all__ = ["RunContext", "RunRegistry"]
