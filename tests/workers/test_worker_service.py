from datetime import date

import pytest

from src.workorder_system.workorder_system.core.exceptions import CleanupFailedError, NotFoundError, ValidationError
from src.workorder_system.workorder_system.identity.service import IdentityService
from src.workorder_system.workorder_system.notifications.service import NotificationService
from src.workorder_system.workorder_system.workers.export import export_workers_csv
from src.workorder_system.workorder_system.workers.model import Group, Rank
from src.workorder_system.workorder_system.workers.service import GroupService, WorkerInput, WorkerService
from tests.fakes import (
    FailingWrite,
    InMemoryAdmins,
    InMemoryGroups,
    InMemoryIdentities,
    InMemoryOutbox,
    InMemoryRanks,
    InMemorySkills,
    InMemoryWorkers,
    InMemoryWorks,
)


class Env:
    def __init__(self):
        self.identities = InMemoryIdentities()
        self.workers = InMemoryWorkers()
        self.skills = InMemorySkills()
        self.outbox = InMemoryOutbox()
        ranks = InMemoryRanks(Rank(rank_id=1, rank_name="S"), Rank(rank_id=2, rank_name="A"))
        identity = IdentityService(self.identities, InMemoryAdmins(), self.workers, secret_key="k")
        notifications = NotificationService(self.outbox, self.workers, from_address="office@example.com")
        self.svc = WorkerService(self.workers, self.skills, ranks, InMemoryWorks(), identity, notifications)


def _input(**kw):
    data = dict(name="Hoa", email="hoa@example.com", next_visit_date=date(2025, 5, 1), unit_price_ratio=1.1)
    data.update(kw)
    return WorkerInput(**data)


def test_create_worker_with_skill_and_invitation():
    env = Env()

    worker_id, invitation = env.svc.create_worker(_input(), rank_id=2, skill_comment="fast")

    worker = env.workers.get_by_id(worker_id)
    assert worker.auth_user_id == invitation.identity_id
    assert [s.rank_id for s in env.skills.list_for_worker(worker_id)] == [2]
    assert env.outbox.items[0].worker_id == worker_id


def test_create_worker_validates_before_any_write():
    env = Env()

    with pytest.raises(ValidationError):
        env.svc.create_worker(_input(name=" "))
    with pytest.raises(ValidationError):
        env.svc.create_worker(_input(email="bad"))
    with pytest.raises(ValidationError):
        env.svc.create_worker(_input(), rank_id=9)
    assert env.identities.items == {}


def test_failed_worker_insert_removes_identity():
    env = Env()
    env.workers.fail_create = True

    with pytest.raises(FailingWrite):
        env.svc.create_worker(_input())

    assert env.identities.items == {}


def test_failed_identity_cleanup_reports_email():
    env = Env()
    env.workers.fail_create = True
    env.identities.fail_delete = True

    with pytest.raises(CleanupFailedError, match="hoa@example.com"):
        env.svc.create_worker(_input())


def test_failed_skill_insert_removes_worker_and_identity():
    env = Env()
    env.skills.fail_add = True

    with pytest.raises(FailingWrite):
        env.svc.create_worker(_input(), rank_id=1)

    assert env.workers.items == {}
    assert env.identities.items == {}
    assert env.outbox.items == []

    env.skills.fail_add = False
    worker_id, _ = env.svc.create_worker(_input(), rank_id=1)
    assert env.workers.get_by_id(worker_id).email == "hoa@example.com"


def test_failed_worker_cleanup_after_skill_insert_reports_email():
    env = Env()
    env.skills.fail_add = True
    env.workers.fail_hard_delete = True

    with pytest.raises(CleanupFailedError, match="hoa@example.com"):
        env.svc.create_worker(_input(), rank_id=1)


def test_removed_worker_can_be_registered_again():
    env = Env()
    old_id, first = env.svc.create_worker(_input())
    env.identities.set_password(first.identity_id, "old-hash")
    env.svc.delete_worker(old_id)

    new_id, second = env.svc.create_worker(_input(name="Hoa N."))

    assert new_id != old_id
    assert second.identity_id == first.identity_id
    assert env.workers.get_by_auth_user_id(second.identity_id).worker_id == new_id
    assert env.identities.get_by_id(second.identity_id).password_hash is None
    assert len(env.outbox.items) == 2


def test_failed_login_email_change_restores_worker_row():
    env = Env()
    worker_id, invitation = env.svc.create_worker(_input())
    env.identities.fail_update_email = True

    with pytest.raises(FailingWrite):
        env.svc.update_worker(worker_id, _input(name="Hoa N.", email="hoa2@example.com"))

    worker = env.workers.get_by_id(worker_id)
    assert (worker.name, worker.email) == ("Hoa", "hoa@example.com")
    assert env.identities.get_by_id(invitation.identity_id).email == "hoa@example.com"


def test_update_profile_and_skills():
    env = Env()
    worker_id, _ = env.svc.create_worker(_input())

    env.svc.update_own_profile(worker_id, address=" 1 Main St ", birthday="1990-02-03")
    skill_id = env.svc.add_skill(worker_id, 1, "")

    detail = env.svc.get_detail(worker_id)
    assert detail.worker.address == "1 Main St"
    assert detail.worker.birthday == date(1990, 2, 3)
    assert [s.skill_id for s in detail.skills] == [skill_id]

    env.svc.remove_skill(worker_id, skill_id)
    with pytest.raises(NotFoundError):
        env.svc.remove_skill(worker_id, skill_id)
    with pytest.raises(ValidationError):
        env.svc.update_own_profile(worker_id, address=None, birthday="03/02/1990")


def test_update_worker_changes_login_email():
    env = Env()
    worker_id, invitation = env.svc.create_worker(_input())

    env.svc.update_worker(worker_id, _input(email="hoa2@example.com", group_id=None))

    assert env.identities.get_by_id(invitation.identity_id).email == "hoa2@example.com"
    env.svc.delete_worker(worker_id)
    with pytest.raises(NotFoundError):
        env.svc.get_detail(worker_id)


def test_groups_and_ranks():
    svc = GroupService(InMemoryGroups(Group(group_id=1, name="Morning")), InMemoryRanks(Rank(rank_id=1, rank_name="S")))

    with pytest.raises(ValidationError):
        svc.create_group("Morning")
    group_id = svc.create_group("Evening")
    svc.delete_group(1)

    assert [g.group_id for g in svc.list_groups()] == [group_id]
    assert [r.rank_name for r in svc.list_ranks()] == ["S"]


def test_worker_csv():
    env = Env()
    env.svc.create_worker(_input())

    text = export_workers_csv(env.workers.list_live()).decode("utf-8-sig")

    assert '"Hoa","hoa@example.com","-","1.1","2025/05/01","-"' in text
