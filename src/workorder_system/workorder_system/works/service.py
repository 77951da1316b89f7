from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from ..common.datetime_utils import iso_or_none, parse_optional_datetime
from ..common.validators import optional_int, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import WorkStatus, status_label
from ..core.exceptions import NotFoundError, ValidationError
from ..workers.repository import WorkerRepository
from .cache import WorkListCache
from .calculator.base import CostCalculator
from .calculator.standard_calculator import StandardCostCalculator
from .model import Work
from .repository import WorkRepository
from .sorting import sort_works


@dataclass(frozen=True)
class WorkInput:
    title: str
    quantity: int
    unit_price: int
    status: WorkStatus = WorkStatus.REQUEST_PLANNED
    worker_id: Optional[int] = None
    delivery_date: Optional[datetime] = None
    work_video_id: Optional[int] = None
    note: Optional[str] = None

    @classmethod
    def from_form(cls, data: dict) -> "WorkInput":
        """Build from request JSON/form values (strings allowed)."""

        raw_status = data.get("status")
        try:
            status = WorkStatus(int(raw_status)) if raw_status not in (None, "") else WorkStatus.REQUEST_PLANNED
        except ValueError:
            raise ValidationError("Invalid work status")

        try:
            delivery_date = parse_optional_datetime(data.get("delivery_date"))
        except ValueError:
            raise ValidationError("Invalid delivery date")

        return cls(
            title=data.get("title") or "",
            quantity=require_positive_int(data.get("quantity", 0), "Quantity"),
            unit_price=require_positive_int(data.get("unit_price", 0), "Unit price"),
            status=status,
            worker_id=optional_int(data.get("worker_id"), "Worker"),
            delivery_date=delivery_date,
            work_video_id=optional_int(data.get("work_video_id"), "Video"),
            note=(data.get("note") or "").strip() or None,
        )


class WorkService:
    """Use case: manage works (admin) and read them back in display order."""

    def __init__(
        self,
        works: WorkRepository,
        workers: WorkerRepository,
        *,
        calculator: Optional[CostCalculator] = None,
        cache: Optional[WorkListCache] = None,
    ):
        self._works = works
        self._workers = workers
        self._calculator = calculator or StandardCostCalculator()
        self._cache = cache

    def list_sorted(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[WorkStatus] = None,
        worker_id: Optional[int] = None,
    ) -> List[Work]:
        search = (search or "").strip() or None
        if self._cache and search is None and status is None and worker_id is None:
            return self._cache.get()
        return sort_works(self._works.list_live(search=search, status=status, worker_id=worker_id))

    def get_detail(self, work_id: int) -> Work:
        work = self._works.get_by_id(int(work_id))
        if not work:
            raise NotFoundError("Work not found")
        return work

    def _cost_for(self, data: WorkInput) -> int:
        ratio = None
        if data.worker_id is not None:
            worker = self._workers.get_by_id(data.worker_id)
            if not worker:
                raise ValidationError("Assigned worker does not exist")
            ratio = worker.unit_price_ratio
        return self._calculator.cost(quantity=data.quantity, unit_price=data.unit_price, unit_price_ratio=ratio)

    def create_work(self, data: WorkInput) -> int:
        title = require_non_empty(data.title, "Work title")
        cost = self._cost_for(data)
        return self._works.create(
            title=title,
            status=data.status,
            quantity=data.quantity,
            unit_price=data.unit_price,
            cost=cost,
            worker_id=data.worker_id,
            delivery_date=data.delivery_date,
            work_video_id=data.work_video_id,
            note=data.note,
        )

    def update_work(self, work_id: int, data: WorkInput) -> None:
        self.get_detail(work_id)
        title = require_non_empty(data.title, "Work title")
        cost = self._cost_for(data)
        ok = self._works.update(
            work_id=int(work_id),
            title=title,
            status=data.status,
            quantity=data.quantity,
            unit_price=data.unit_price,
            cost=cost,
            worker_id=data.worker_id,
            delivery_date=data.delivery_date,
            work_video_id=data.work_video_id,
            note=data.note,
        )
        if not ok:
            raise NotFoundError("Work not found")

    def delete_work(self, work_id: int) -> None:
        if not self._works.soft_delete(int(work_id)):
            raise NotFoundError("Work not found")

    def current_for_worker(self, worker_id: int) -> Sequence[Work]:
        return self._works.list_for_worker(int(worker_id), status=WorkStatus.IN_PROGRESS)

    def history_for_worker(self, worker_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[Work]:
        return self._works.list_for_worker(int(worker_id), limit=limit)


def work_to_dict(w: Work) -> dict:
    return {
        "id": w.work_id,
        "title": w.title,
        "status": int(w.status) if w.status is not None else None,
        "status_label": status_label(w.status),
        "quantity": w.quantity,
        "unit_price": w.unit_price,
        "cost": w.cost,
        "worker_id": w.worker_id,
        "worker_name": w.worker_name,
        "delivery_date": iso_or_none(w.delivery_date),
        "ended_at": iso_or_none(w.ended_at),
        "work_video_id": w.work_video_id,
        "note": w.note,
    }
