from __future__ import annotations

from typing import Optional

from ...core.enums import WorkStatus
from ...works.model import Work
from .base import TransitionDecision, TransitionPolicy


class CompleteWorkPolicy(TransitionPolicy):
    """Admin scan: receive delivered work."""

    allowed_sources = frozenset({WorkStatus.IN_DELIVERY, WorkStatus.PICKUP_REQUESTING, WorkStatus.WAITING_DROPOFF})
    action = "completed"

    def decide(self, work: Work, *, actor_worker_id: Optional[int]) -> TransitionDecision:
        self.require_allowed_source(work)
        return TransitionDecision(to_status=WorkStatus.COMPLETED, stamp_ended_at=True)
