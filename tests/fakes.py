"""In-memory repositories shared by the service and controller tests."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.workorder_system.workorder_system.accounts.model import Admin, AdminRoles
from src.workorder_system.workorder_system.core.enums import WorkStatus
from src.workorder_system.workorder_system.identity.model import Identity
from src.workorder_system.workorder_system.notifications.model import MailRecord
from src.workorder_system.workorder_system.realtime.feed import DELETE, INSERT, UPDATE, ChangeEvent
from src.workorder_system.workorder_system.videos.model import WorkVideo
from src.workorder_system.workorder_system.workers.model import Group, Rank, Worker, WorkerSkill
from src.workorder_system.workorder_system.works.model import ProceedsRow, Work


class FailingWrite(RuntimeError):
    pass


class InMemoryIdentities:
    def __init__(self):
        self.items: dict[str, Identity] = {}
        self.fail_delete = False
        self.fail_update_email = False

    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        return self.items.get(identity_id)

    def get_by_email(self, email: str) -> Optional[Identity]:
        return next((i for i in self.items.values() if i.email == email), None)

    def create(self, *, email: str) -> str:
        identity_id = str(uuid.uuid4())
        self.items[identity_id] = Identity(identity_id=identity_id, email=email, password_hash=None)
        return identity_id

    def set_password(self, identity_id: str, password_hash: str) -> bool:
        current = self.items.get(identity_id)
        if not current:
            return False
        self.items[identity_id] = replace(current, password_hash=password_hash, confirmed=True)
        return True

    def clear_password(self, identity_id: str) -> bool:
        current = self.items.get(identity_id)
        if not current:
            return False
        self.items[identity_id] = replace(current, password_hash=None, confirmed=False)
        return True

    def update_email(self, identity_id: str, email: str) -> bool:
        if self.fail_update_email:
            raise FailingWrite("identity email update failed")
        current = self.items.get(identity_id)
        if not current:
            return False
        self.items[identity_id] = replace(current, email=email)
        return True

    def delete(self, identity_id: str) -> bool:
        if self.fail_delete:
            raise FailingWrite("identity delete failed")
        return self.items.pop(identity_id, None) is not None


class InMemoryAdmins:
    def __init__(self):
        self.items: dict[int, Admin] = {}
        self.deleted: set[int] = set()
        self.fail_create = False
        self.fail_hard_delete = False
        self._id = 0

    def _live(self):
        return [a for a in self.items.values() if a.admin_id not in self.deleted]

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        return next((a for a in self._live() if a.admin_id == admin_id), None)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Admin]:
        return next((a for a in self._live() if a.auth_user_id == auth_user_id), None)

    def get_by_email(self, email: str) -> Optional[Admin]:
        return next((a for a in self._live() if a.email == email), None)

    def list_live(self):
        return self._live()

    def create(self, *, name: str, email: str, auth_user_id: str) -> int:
        if self.fail_create:
            raise FailingWrite("admin insert failed")
        self._id += 1
        self.items[self._id] = Admin(admin_id=self._id, name=name, email=email, auth_user_id=auth_user_id)
        return self._id

    def update_email(self, admin_id: int, email: str) -> bool:
        admin = self.get_by_id(admin_id)
        if not admin:
            return False
        self.items[admin_id] = replace(admin, email=email)
        return True

    def soft_delete(self, admin_id: int) -> bool:
        if admin_id not in self.items or admin_id in self.deleted:
            return False
        self.deleted.add(admin_id)
        return True

    def hard_delete(self, admin_id: int) -> bool:
        if self.fail_hard_delete:
            raise FailingWrite("admin delete failed")
        return self.items.pop(admin_id, None) is not None


class InMemoryAdminRoles:
    def __init__(self):
        self.items: dict[int, AdminRoles] = {}
        self.fail_create = False

    def get_for_admin(self, admin_id: int) -> Optional[AdminRoles]:
        return self.items.get(admin_id)

    def create(self, *, admin_id: int, permissions) -> int:
        if self.fail_create:
            raise FailingWrite("admin_roles insert failed")
        self.items[admin_id] = AdminRoles(admin_id=admin_id, permissions=frozenset(permissions))
        return admin_id

    def update(self, *, admin_id: int, permissions) -> bool:
        if admin_id not in self.items:
            return False
        self.items[admin_id] = AdminRoles(admin_id=admin_id, permissions=frozenset(permissions))
        return True


class InMemoryWorkers:
    def __init__(self, *workers: Worker, feed=None):
        self.items: dict[int, Worker] = {w.worker_id: w for w in workers}
        self.deleted: set[int] = set()
        self.fail_create = False
        self.fail_hard_delete = False
        self.feed = feed
        self._id = max(self.items, default=0)

    def _notify(self, action: str, worker_id: int) -> None:
        if self.feed:
            self.feed.publish(ChangeEvent(table="workers", action=action, record_id=worker_id))

    def _live(self):
        return [w for w in self.items.values() if w.worker_id not in self.deleted]

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        return next((w for w in self._live() if w.worker_id == worker_id), None)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Worker]:
        return next((w for w in self._live() if w.auth_user_id == auth_user_id), None)

    def get_by_email(self, email: str) -> Optional[Worker]:
        return next((w for w in self._live() if w.email == email), None)

    def get_many(self, worker_ids):
        wanted = set(worker_ids)
        return [w for w in self._live() if w.worker_id in wanted]

    def list_live(self, *, search=None, group_id=None):
        items = self._live()
        if search:
            items = [w for w in items if search in w.name or search in w.email]
        if group_id is not None:
            items = [w for w in items if w.group_id == group_id]
        return items

    def create(self, *, name, email, auth_user_id, next_visit_date, unit_price_ratio, group_id=None) -> int:
        if self.fail_create:
            raise FailingWrite("worker insert failed")
        self._id += 1
        self.items[self._id] = Worker(
            worker_id=self._id,
            name=name,
            email=email,
            auth_user_id=auth_user_id,
            next_visit_date=next_visit_date,
            unit_price_ratio=unit_price_ratio,
            group_id=group_id,
        )
        self._notify(INSERT, self._id)
        return self._id

    def update(self, *, worker_id, name, email, address, birthday, next_visit_date, unit_price_ratio, group_id) -> bool:
        current = self.get_by_id(worker_id)
        if not current:
            return False
        self.items[worker_id] = replace(
            current,
            name=name,
            email=email,
            address=address,
            birthday=birthday,
            next_visit_date=next_visit_date,
            unit_price_ratio=unit_price_ratio,
            group_id=group_id,
        )
        self._notify(UPDATE, worker_id)
        return True

    def update_profile(self, *, worker_id, address, birthday) -> bool:
        current = self.get_by_id(worker_id)
        if not current:
            return False
        self.items[worker_id] = replace(current, address=address, birthday=birthday)
        self._notify(UPDATE, worker_id)
        return True

    def soft_delete(self, worker_id: int) -> bool:
        if worker_id not in self.items or worker_id in self.deleted:
            return False
        self.deleted.add(worker_id)
        self._notify(DELETE, worker_id)
        return True

    def hard_delete(self, worker_id: int) -> bool:
        if self.fail_hard_delete:
            raise FailingWrite("worker delete failed")
        if self.items.pop(worker_id, None) is None:
            return False
        self._notify(DELETE, worker_id)
        return True


class InMemorySkills:
    def __init__(self):
        self.items: dict[int, WorkerSkill] = {}
        self.deleted: set[int] = set()
        self.fail_add = False
        self._id = 0

    def list_for_worker(self, worker_id: int):
        return [s for s in self.items.values() if s.worker_id == worker_id and s.skill_id not in self.deleted]

    def add(self, *, worker_id: int, rank_id: int, comment) -> int:
        if self.fail_add:
            raise FailingWrite("skill insert failed")
        self._id += 1
        self.items[self._id] = WorkerSkill(skill_id=self._id, worker_id=worker_id, rank_id=rank_id, comment=comment)
        return self._id

    def soft_delete(self, *, worker_id: int, skill_id: int) -> bool:
        skill = self.items.get(skill_id)
        if not skill or skill.worker_id != worker_id or skill_id in self.deleted:
            return False
        self.deleted.add(skill_id)
        return True


class InMemoryGroups:
    def __init__(self, *groups: Group):
        self.items: dict[int, Group] = {g.group_id: g for g in groups}
        self.deleted: set[int] = set()
        self._id = max(self.items, default=0)

    def list_live(self):
        return [g for g in self.items.values() if g.group_id not in self.deleted]

    def get_by_id(self, group_id: int) -> Optional[Group]:
        return next((g for g in self.list_live() if g.group_id == group_id), None)

    def create(self, name: str) -> int:
        self._id += 1
        self.items[self._id] = Group(group_id=self._id, name=name)
        return self._id

    def soft_delete(self, group_id: int) -> bool:
        if group_id not in self.items or group_id in self.deleted:
            return False
        self.deleted.add(group_id)
        return True


class InMemoryRanks:
    def __init__(self, *ranks: Rank):
        self.items = {r.rank_id: r for r in ranks}

    def list_all(self):
        return list(self.items.values())

    def get_by_id(self, rank_id: int) -> Optional[Rank]:
        return self.items.get(rank_id)


class InMemoryWorks:
    def __init__(self, *works: Work, feed=None):
        self.items: dict[int, Work] = {w.work_id: w for w in works}
        self.deleted: set[int] = set()
        self.feed = feed
        self.transitions: list[tuple] = []
        self._id = max(self.items, default=0)

    def _notify(self, action: str, work_id: int) -> None:
        if self.feed:
            self.feed.publish(ChangeEvent(table="works", action=action, record_id=work_id))

    def _live(self):
        return [w for w in self.items.values() if w.work_id not in self.deleted]

    def get_by_id(self, work_id: int) -> Optional[Work]:
        return next((w for w in self._live() if w.work_id == work_id), None)

    def list_live(self, *, search=None, status=None, worker_id=None):
        items = self._live()
        if search:
            items = [w for w in items if search in w.title]
        if status is not None:
            items = [w for w in items if w.status == status]
        if worker_id is not None:
            items = [w for w in items if w.worker_id == worker_id]
        return items

    def list_for_worker(self, worker_id: int, *, status=None, limit: int = 50):
        items = [w for w in self._live() if w.worker_id == worker_id]
        if status is not None:
            items = [w for w in items if w.status == status]
        items.sort(key=lambda w: (w.updated_at or datetime.min, w.work_id), reverse=True)
        return items[:limit]

    def list_completed_between(self, *, worker_id: int, start: date, end: date):
        start_dt = datetime.combine(start, datetime.min.time())
        end_dt = datetime.combine(end, datetime.min.time())
        rows = [
            ProceedsRow(work_id=w.work_id, title=w.title, cost=w.cost, ended_at=w.ended_at)
            for w in self._live()
            if w.worker_id == worker_id
            and w.status == WorkStatus.COMPLETED
            and w.ended_at is not None
            and start_dt <= w.ended_at < end_dt
        ]
        rows.sort(key=lambda r: r.ended_at, reverse=True)
        return rows

    def create(self, *, title, status, quantity, unit_price, cost, worker_id, delivery_date, work_video_id, note) -> int:
        self._id += 1
        self.items[self._id] = Work(
            work_id=self._id,
            title=title,
            status=status,
            quantity=quantity,
            unit_price=unit_price,
            cost=cost,
            worker_id=worker_id,
            delivery_date=delivery_date,
            work_video_id=work_video_id,
            note=note,
        )
        self._notify(INSERT, self._id)
        return self._id

    def update(self, *, work_id, title, status, quantity, unit_price, cost, worker_id, delivery_date, work_video_id, note) -> bool:
        current = self.get_by_id(work_id)
        if not current:
            return False
        self.items[work_id] = replace(
            current,
            title=title,
            status=status,
            quantity=quantity,
            unit_price=unit_price,
            cost=cost,
            worker_id=worker_id,
            delivery_date=delivery_date,
            work_video_id=work_video_id,
            note=note,
        )
        self._notify(UPDATE, work_id)
        return True

    def transition(self, *, work_id, from_status, to_status, worker_id=None, ended_at=None) -> bool:
        current = self.get_by_id(work_id)
        if not current or current.status != from_status:
            return False
        changes = {"status": to_status}
        if worker_id is not None:
            changes["worker_id"] = worker_id
        if ended_at is not None:
            changes["ended_at"] = ended_at
        self.items[work_id] = replace(current, **changes)
        self.transitions.append((work_id, from_status, to_status))
        self._notify(UPDATE, work_id)
        return True

    def soft_delete(self, work_id: int) -> bool:
        if work_id not in self.items or work_id in self.deleted:
            return False
        self.deleted.add(work_id)
        self._notify(DELETE, work_id)
        return True


class InMemoryOutbox:
    def __init__(self):
        self.items: list[MailRecord] = []

    def enqueue(self, *, worker_id, mail_from, mail_to, subject, body) -> int:
        mail_id = len(self.items) + 1
        self.items.append(
            MailRecord(
                mail_id=mail_id,
                worker_id=worker_id,
                mail_from=mail_from,
                mail_to=mail_to,
                subject=subject,
                body=body,
            )
        )
        return mail_id

    def list_recent(self, limit: int = 50):
        return list(reversed(self.items))[:limit]


class InMemoryVideos:
    def __init__(self):
        self.items: dict[int, WorkVideo] = {}
        self.deleted: set[int] = set()
        self.fail_create = False
        self._id = 0

    def get_by_id(self, video_id: int) -> Optional[WorkVideo]:
        if video_id in self.deleted:
            return None
        return self.items.get(video_id)

    def list_live(self):
        return [v for v in self.items.values() if v.video_id not in self.deleted]

    def create(self, *, title, url, storage_path, created_admin_id) -> int:
        if self.fail_create:
            raise FailingWrite("video insert failed")
        self._id += 1
        self.items[self._id] = WorkVideo(
            video_id=self._id,
            title=title,
            url=url,
            storage_path=storage_path,
            created_admin_id=created_admin_id,
        )
        return self._id

    def soft_delete(self, video_id: int) -> bool:
        if video_id not in self.items or video_id in self.deleted:
            return False
        self.deleted.add(video_id)
        return True


def make_container(tmp_path, *, works=None, workers=None, secret_key: str = "test-secret"):
    """Real services wired onto in-memory repositories."""

    from src.workorder_system.workorder_system.accounts.service import AccountService
    from src.workorder_system.workorder_system.container import Container
    from src.workorder_system.workorder_system.identity.service import AuthService, IdentityService
    from src.workorder_system.workorder_system.notifications.service import NotificationService
    from src.workorder_system.workorder_system.qr.transition import WorkTransitionService
    from src.workorder_system.workorder_system.realtime.feed import ChangeFeed
    from src.workorder_system.workorder_system.storage.local_storage import LocalFileStorage
    from src.workorder_system.workorder_system.videos.service import VideoService
    from src.workorder_system.workorder_system.workers.service import GroupService, WorkerService
    from src.workorder_system.workorder_system.works.proceeds import ProceedsReportService
    from src.workorder_system.workorder_system.works.service import WorkService

    feed = ChangeFeed()
    works = works if works is not None else InMemoryWorks()
    works.feed = feed
    workers = workers if workers is not None else InMemoryWorkers()
    workers.feed = feed
    identities = InMemoryIdentities()
    admins = InMemoryAdmins()
    admin_roles = InMemoryAdminRoles()
    ranks = InMemoryRanks(Rank(rank_id=1, rank_name="S"))
    storage = LocalFileStorage(tmp_path, secret_key=secret_key)

    identity_service = IdentityService(identities, admins, workers, secret_key=secret_key)
    notification_service = NotificationService(InMemoryOutbox(), workers, from_address="office@example.com")
    return Container(
        feed=feed,
        storage=storage,
        identity_service=identity_service,
        auth_service=AuthService(identities, admins, admin_roles, workers),
        account_service=AccountService(admins, admin_roles, identity_service, notification_service),
        worker_service=WorkerService(workers, InMemorySkills(), ranks, works, identity_service, notification_service),
        group_service=GroupService(InMemoryGroups(), ranks),
        work_service=WorkService(works, workers),
        transition_service=WorkTransitionService(works),
        proceeds_service=ProceedsReportService(works),
        notification_service=notification_service,
        video_service=VideoService(InMemoryVideos(), storage),
    )
