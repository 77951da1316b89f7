from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Worker:
    """Thực thể miền (domain): người thợ nhận việc.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    worker_id: int
    name: str
    email: str
    auth_user_id: str
    address: Optional[str] = None
    birthday: Optional[date] = None
    next_visit_date: Optional[date] = None
    unit_price_ratio: Optional[float] = None
    group_id: Optional[int] = None
    group_name: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkerSkill:
    skill_id: int
    worker_id: int
    rank_id: int
    rank_name: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class Group:
    group_id: int
    name: str


@dataclass(frozen=True)
class Rank:
    rank_id: int
    rank_name: str
