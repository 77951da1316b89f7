from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import WorkStatus
from .model import ProceedsRow, Work


class WorkRepository(Protocol):
    """Giao diện repository cho Work.

    Soft-deleted rows (deleted_at set) are invisible to every read.
    """

    def get_by_id(self, work_id: int) -> Optional[Work]:
        raise NotImplementedError

    def list_live(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[WorkStatus] = None,
        worker_id: Optional[int] = None,
    ) -> Sequence[Work]:
        raise NotImplementedError

    def list_for_worker(self, worker_id: int, *, status: Optional[WorkStatus] = None, limit: int = 50) -> Sequence[Work]:
        """Newest update first."""

        raise NotImplementedError

    def list_completed_between(self, *, worker_id: int, start: date, end: date) -> Sequence[ProceedsRow]:
        """Completed works with start <= ended_at < end, newest first."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        status: WorkStatus,
        quantity: int,
        unit_price: int,
        cost: int,
        worker_id: Optional[int],
        delivery_date: Optional[datetime],
        work_video_id: Optional[int],
        note: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        work_id: int,
        title: str,
        status: WorkStatus,
        quantity: int,
        unit_price: int,
        cost: int,
        worker_id: Optional[int],
        delivery_date: Optional[datetime],
        work_video_id: Optional[int],
        note: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def transition(
        self,
        *,
        work_id: int,
        from_status: WorkStatus,
        to_status: WorkStatus,
        worker_id: Optional[int] = None,
        ended_at: Optional[datetime] = None,
    ) -> bool:
        """Single conditional update; False when the stored status is no longer from_status.

        worker_id / ended_at are only written when given.
        """

        raise NotImplementedError

    def soft_delete(self, work_id: int) -> bool:
        raise NotImplementedError
