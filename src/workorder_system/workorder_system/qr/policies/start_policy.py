from __future__ import annotations

from typing import Optional

from ...core.enums import WorkStatus
from ...core.exceptions import TransitionRejected
from ...works.model import Work
from .base import TransitionDecision, TransitionPolicy


class StartWorkPolicy(TransitionPolicy):
    """Worker scan: take an open work and start it."""

    allowed_sources = frozenset({WorkStatus.REQUEST_PLANNED, WorkStatus.REQUESTING})
    action = "started"

    def decide(self, work: Work, *, actor_worker_id: Optional[int]) -> TransitionDecision:
        if actor_worker_id is None:
            raise TransitionRejected("Worker information was not found")
        if work.status == WorkStatus.COMPLETED:
            raise TransitionRejected("This work is already completed")
        if work.worker_id is not None and work.worker_id != actor_worker_id:
            raise TransitionRejected("This work is assigned to another worker")
        self.require_allowed_source(work)
        return TransitionDecision(to_status=WorkStatus.IN_PROGRESS, assign_worker_id=actor_worker_id)
