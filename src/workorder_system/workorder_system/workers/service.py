from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Sequence, Tuple

from ..common.datetime_utils import parse_optional_date
from ..common.validators import optional_int, optional_ratio, require_email, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import CleanupFailedError, NotFoundError, ValidationError
from ..identity.model import Invitation
from ..identity.service import IdentityService
from ..notifications.service import NotificationService
from ..works.model import Work
from ..works.repository import WorkRepository
from .group_repository import GroupRepository, RankRepository
from .model import Group, Rank, Worker, WorkerSkill
from .repository import SkillRepository, WorkerRepository

logger = logging.getLogger(__name__)


def _optional_date(value, field_name: str) -> Optional[date]:
    try:
        return parse_optional_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date")


@dataclass(frozen=True)
class WorkerInput:
    name: str
    email: str
    next_visit_date: Optional[date] = None
    unit_price_ratio: Optional[float] = None
    group_id: Optional[int] = None
    address: Optional[str] = None
    birthday: Optional[date] = None

    @classmethod
    def from_form(cls, data: dict) -> "WorkerInput":
        return cls(
            name=data.get("name") or "",
            email=(data.get("email") or "").strip(),
            next_visit_date=_optional_date(data.get("next_visit_date"), "Next visit date"),
            unit_price_ratio=optional_ratio(data.get("unit_price_ratio")),
            group_id=optional_int(data.get("group_id"), "Group"),
            address=(data.get("address") or "").strip() or None,
            birthday=_optional_date(data.get("birthday"), "Birthday"),
        )


@dataclass(frozen=True)
class WorkerDetail:
    worker: Worker
    skills: Sequence[WorkerSkill]
    history: Sequence[Work]


class WorkerService:
    """Use case: manage workers (admin) and the worker's own profile.

    Tạo thợ = tạo identity (mời qua email) + thêm dòng workers (+ kỹ năng).
    Các bước không chung transaction nên lỗi ở bước sau phải dọn bước trước.
    """

    def __init__(
        self,
        workers: WorkerRepository,
        skills: SkillRepository,
        ranks: RankRepository,
        works: WorkRepository,
        identity_service: IdentityService,
        notifications: Optional[NotificationService] = None,
    ):
        self._workers = workers
        self._skills = skills
        self._ranks = ranks
        self._works = works
        self._identity = identity_service
        self._notifications = notifications

    def create_worker(
        self,
        data: WorkerInput,
        *,
        rank_id: Optional[int] = None,
        skill_comment: Optional[str] = None,
    ) -> Tuple[int, Invitation]:
        name = require_non_empty(data.name, "Name")
        email = require_email(data.email)
        if self._workers.get_by_email(email):
            raise ValidationError("This email address is already used by another worker")
        if rank_id is not None and not self._ranks.get_by_id(rank_id):
            raise ValidationError("Rank does not exist")

        invitation = self._identity.invite(email, Role.WORKER)

        try:
            worker_id = self._workers.create(
                name=name,
                email=email,
                auth_user_id=invitation.identity_id,
                next_visit_date=data.next_visit_date,
                unit_price_ratio=data.unit_price_ratio,
                group_id=data.group_id,
            )
        except Exception as exc:
            logger.error("worker insert failed for %s: %s", email, exc)
            self._undo_identity(invitation)
            raise

        if rank_id is not None:
            try:
                self._skills.add(worker_id=worker_id, rank_id=rank_id, comment=skill_comment)
            except Exception as exc:
                logger.error("skill insert failed for worker %s: %s", worker_id, exc)
                try:
                    self._workers.hard_delete(worker_id)
                except Exception as cleanup_exc:
                    logger.exception("could not delete worker %s", worker_id)
                    raise CleanupFailedError(
                        f"Worker creation failed and could not be undone. Remove the worker {email} manually."
                    ) from cleanup_exc
                self._undo_identity(invitation)
                raise

        if self._notifications:
            self._notifications.queue_invitation(invitation, worker_id=worker_id)
        return worker_id, invitation

    def _undo_identity(self, invitation: Invitation) -> None:
        try:
            self._identity.discard_invitation(invitation)
        except Exception as cleanup_exc:
            logger.exception("could not delete identity %s", invitation.identity_id)
            raise CleanupFailedError(
                f"Worker creation failed and the login for {invitation.email} remains. Delete it manually."
            ) from cleanup_exc

    def _get(self, worker_id: int) -> Worker:
        worker = self._workers.get_by_id(int(worker_id))
        if not worker:
            raise NotFoundError("Worker does not exist")
        return worker

    def update_worker(self, worker_id: int, data: WorkerInput) -> None:
        current = self._get(worker_id)
        name = require_non_empty(data.name, "Name")
        email = require_email(data.email)
        other = self._workers.get_by_email(email)
        if other and other.worker_id != current.worker_id:
            raise ValidationError("This email address is already used by another worker")

        self._save(
            replace(
                current,
                name=name,
                email=email,
                address=data.address,
                birthday=data.birthday,
                next_visit_date=data.next_visit_date,
                unit_price_ratio=data.unit_price_ratio,
                group_id=data.group_id,
            )
        )
        if email != current.email:
            try:
                self._identity.change_email(current.auth_user_id, email)
            except Exception:
                logger.error("login email change failed for worker %s, restoring row", current.worker_id)
                self._save(current)
                raise

    def _save(self, w: Worker) -> None:
        self._workers.update(
            worker_id=w.worker_id,
            name=w.name,
            email=w.email,
            address=w.address,
            birthday=w.birthday,
            next_visit_date=w.next_visit_date,
            unit_price_ratio=w.unit_price_ratio,
            group_id=w.group_id,
        )

    def assign_group(self, worker_id: int, group_id: Optional[int]) -> None:
        self._save(replace(self._get(worker_id), group_id=group_id))

    def delete_worker(self, worker_id: int) -> None:
        if not self._workers.soft_delete(int(worker_id)):
            raise NotFoundError("Worker does not exist")

    def list_workers(self, *, search: Optional[str] = None, group_id: Optional[int] = None) -> Sequence[Worker]:
        return self._workers.list_live(search=(search or "").strip() or None, group_id=group_id)

    def get_detail(self, worker_id: int, *, history_limit: int = DEFAULT_HISTORY_LIMIT) -> WorkerDetail:
        worker = self._get(worker_id)
        return WorkerDetail(
            worker=worker,
            skills=self._skills.list_for_worker(worker.worker_id),
            history=self._works.list_for_worker(worker.worker_id, limit=history_limit),
        )

    def update_own_profile(self, worker_id: int, *, address: Optional[str], birthday) -> None:
        self._get(worker_id)
        self._workers.update_profile(
            worker_id=int(worker_id),
            address=(address or "").strip() or None,
            birthday=_optional_date(birthday, "Birthday"),
        )

    def add_skill(self, worker_id: int, rank_id: int, comment: Optional[str] = None) -> int:
        self._get(worker_id)
        if not self._ranks.get_by_id(int(rank_id)):
            raise ValidationError("Rank does not exist")
        return self._skills.add(worker_id=int(worker_id), rank_id=int(rank_id), comment=(comment or "").strip() or None)

    def remove_skill(self, worker_id: int, skill_id: int) -> None:
        if not self._skills.soft_delete(worker_id=int(worker_id), skill_id=int(skill_id)):
            raise NotFoundError("Skill does not exist")


class GroupService:
    def __init__(self, groups: GroupRepository, ranks: RankRepository):
        self._groups = groups
        self._ranks = ranks

    def list_groups(self) -> Sequence[Group]:
        return self._groups.list_live()

    def create_group(self, name: str) -> int:
        name = require_non_empty(name, "Group name")
        if any(g.name == name for g in self._groups.list_live()):
            raise ValidationError("A group with this name already exists")
        return self._groups.create(name)

    def delete_group(self, group_id: int) -> None:
        if not self._groups.soft_delete(int(group_id)):
            raise NotFoundError("Group does not exist")

    def list_ranks(self) -> Sequence[Rank]:
        return self._ranks.list_all()


def worker_to_dict(w: Worker) -> dict:
    return {
        "id": w.worker_id,
        "name": w.name,
        "email": w.email,
        "address": w.address,
        "birthday": w.birthday.isoformat() if w.birthday else None,
        "next_visit_date": w.next_visit_date.isoformat() if w.next_visit_date else None,
        "unit_price_ratio": w.unit_price_ratio,
        "group_id": w.group_id,
        "group_name": w.group_name,
    }
