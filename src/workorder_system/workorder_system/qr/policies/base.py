from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, Optional

from ...core.enums import WorkStatus, status_label
from ...core.exceptions import TransitionRejected
from ...works.model import Work


@dataclass(frozen=True)
class TransitionDecision:
    to_status: WorkStatus
    assign_worker_id: Optional[int] = None
    stamp_ended_at: bool = False


class TransitionPolicy(ABC):
    """Strategy Pattern: one allow-list of source statuses per kind of status change."""

    allowed_sources: FrozenSet[WorkStatus] = frozenset()
    action: str = ""

    def require_allowed_source(self, work: Work) -> None:
        if work.status not in self.allowed_sources:
            allowed = ", ".join(s.label for s in sorted(self.allowed_sources))
            raise TransitionRejected(
                f"This work cannot be {self.action}. Current status: {status_label(work.status)} "
                f"(allowed: {allowed})"
            )

    @abstractmethod
    def decide(self, work: Work, *, actor_worker_id: Optional[int]) -> TransitionDecision:
        raise NotImplementedError
