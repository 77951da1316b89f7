from __future__ import annotations

from typing import Optional

from ...core.enums import DeliveryMethod, WorkStatus
from ...core.exceptions import TransitionRejected
from ...works.model import Work
from .base import TransitionDecision, TransitionPolicy

DELIVERY_TARGETS = {
    DeliveryMethod.DROPOFF: WorkStatus.WAITING_DROPOFF,
    DeliveryMethod.MAIL: WorkStatus.IN_DELIVERY,
    DeliveryMethod.PICKUP: WorkStatus.PICKUP_REQUESTING,
}


class DeliveryMethodPolicy(TransitionPolicy):
    """Worker finished the job and picks how it reaches the office."""

    allowed_sources = frozenset({WorkStatus.IN_PROGRESS})
    action = "handed over for delivery"

    def __init__(self, method: DeliveryMethod):
        self.method = method

    def decide(self, work: Work, *, actor_worker_id: Optional[int]) -> TransitionDecision:
        if actor_worker_id is None or work.worker_id != actor_worker_id:
            raise TransitionRejected("This work is not assigned to you")
        self.require_allowed_source(work)
        return TransitionDecision(to_status=DELIVERY_TARGETS[self.method])
