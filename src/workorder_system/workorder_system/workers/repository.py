from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Worker, WorkerSkill


class WorkerRepository(Protocol):
    """Giao diện repository cho Worker.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        raise NotImplementedError

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Worker]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Worker]:
        raise NotImplementedError

    def get_many(self, worker_ids: Sequence[int]) -> Sequence[Worker]:
        raise NotImplementedError

    def list_live(self, *, search: Optional[str] = None, group_id: Optional[int] = None) -> Sequence[Worker]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        email: str,
        auth_user_id: str,
        next_visit_date: Optional[date],
        unit_price_ratio: Optional[float],
        group_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        worker_id: int,
        name: str,
        email: str,
        address: Optional[str],
        birthday: Optional[date],
        next_visit_date: Optional[date],
        unit_price_ratio: Optional[float],
        group_id: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def update_profile(self, *, worker_id: int, address: Optional[str], birthday: Optional[date]) -> bool:
        raise NotImplementedError

    def soft_delete(self, worker_id: int) -> bool:
        raise NotImplementedError

    def hard_delete(self, worker_id: int) -> bool:
        """Remove a row that never became usable (creation rolled back)."""

        raise NotImplementedError


class SkillRepository(Protocol):
    def list_for_worker(self, worker_id: int) -> Sequence[WorkerSkill]:
        raise NotImplementedError

    def add(self, *, worker_id: int, rank_id: int, comment: Optional[str]) -> int:
        raise NotImplementedError

    def soft_delete(self, *, worker_id: int, skill_id: int) -> bool:
        raise NotImplementedError
