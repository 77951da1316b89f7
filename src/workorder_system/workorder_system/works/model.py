from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import WorkStatus


@dataclass(frozen=True)
class Work:
    """Thực thể miền (domain): một đơn vị công việc khoán."""

    work_id: int
    title: str
    status: WorkStatus | int
    quantity: int
    unit_price: int
    cost: int
    worker_id: Optional[int] = None
    worker_name: Optional[str] = None
    worker_unit_price_ratio: Optional[float] = None
    delivery_date: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    work_video_id: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProceedsRow:
    """Read-model cho báo cáo thù lao theo tháng."""

    work_id: int
    title: str
    cost: int
    ended_at: datetime
