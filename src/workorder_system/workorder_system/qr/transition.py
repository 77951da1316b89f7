from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import DeliveryMethod, WorkStatus
from ..core.exceptions import NotFoundError, TransitionRejected, ValidationError
from ..works.model import Work
from ..works.repository import WorkRepository
from .policies.base import TransitionPolicy
from .policies.complete_policy import CompleteWorkPolicy
from .policies.delivery_policy import DeliveryMethodPolicy
from .policies.start_policy import StartWorkPolicy

logger = logging.getLogger(__name__)


class WorkTransitionService:
    """Apply one guarded status change to a work record.

    The guard runs against the status read at commit time, and the write is
    conditional on that status so a concurrent change is rejected, not overwritten.
    """

    def __init__(self, works: WorkRepository, *, clock: Callable[[], datetime] = now_local):
        self._works = works
        self._clock = clock

    def apply(self, work_id: int, policy: TransitionPolicy, *, actor_worker_id: Optional[int] = None) -> Work:
        work = self._works.get_by_id(int(work_id))
        if not work:
            raise NotFoundError("Work not found")

        try:
            decision = policy.decide(work, actor_worker_id=actor_worker_id)
        except TransitionRejected as e:
            logger.info("transition rejected work=%s policy=%s: %s", work_id, type(policy).__name__, e)
            raise

        ended_at = self._clock() if decision.stamp_ended_at else None
        ok = self._works.transition(
            work_id=work.work_id,
            from_status=work.status,
            to_status=decision.to_status,
            worker_id=decision.assign_worker_id,
            ended_at=ended_at,
        )
        if not ok:
            raise TransitionRejected("The work was changed in the meantime, please scan again")

        logger.info("work %s: %s -> %s", work.work_id, work.status, decision.to_status)
        return self._works.get_by_id(work.work_id) or work

    def start_work(self, work_id: int, *, worker_id: int) -> Work:
        return self.apply(work_id, StartWorkPolicy(), actor_worker_id=worker_id)

    def complete_work(self, work_id: int) -> Work:
        return self.apply(work_id, CompleteWorkPolicy())

    def choose_delivery(self, *, worker_id: int, method: str, work_id: Optional[int] = None) -> Work:
        """Without work_id the worker's most recently updated in-progress work is used."""

        try:
            delivery = DeliveryMethod(method)
        except ValueError:
            raise ValidationError("Unknown delivery method")

        if work_id is None:
            current = self._works.list_for_worker(int(worker_id), status=WorkStatus.IN_PROGRESS, limit=1)
            if not current:
                raise NotFoundError("You have no work in progress")
            work_id = current[0].work_id
        return self.apply(work_id, DeliveryMethodPolicy(delivery), actor_worker_id=worker_id)
