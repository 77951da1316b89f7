import time

import pytest

from src.workorder_system.workorder_system.core.enums import AdminPermission, Role, WorkStatus
from src.workorder_system.workorder_system.identity.model import SessionUser
from src.workorder_system.workorder_system.identity.session import start_session
from src.workorder_system.workorder_system.main import create_app
from src.workorder_system.workorder_system.works.model import Work
from tests.fakes import InMemoryWorks, make_container


def _work(work_id, status, worker_id=None):
    return Work(work_id=work_id, title=f"w{work_id}", status=status, quantity=1, unit_price=100, cost=100,
                worker_id=worker_id)


@pytest.fixture
def works():
    return InMemoryWorks(
        _work(1, WorkStatus.REQUESTING),
        _work(2, WorkStatus.IN_DELIVERY, worker_id=7),
        _work(3, WorkStatus.REQUEST_PLANNED, worker_id=8),
    )


@pytest.fixture
def container(tmp_path, works):
    return make_container(tmp_path, works=works)


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, role, account_id=7, permissions=frozenset(AdminPermission), issued_at=None):
    user = SessionUser(account_id=account_id, identity_id="u", name="N", role=role,
                       permissions=permissions if role == Role.ADMIN else frozenset())
    with client.session_transaction() as s:
        start_session(s, user, now=issued_at)


def _scan(client, prefix, payload):
    client.post(f"{prefix}/qr/start")
    return client.post(f"{prefix}/qr/frame", json={"payload": payload}).get_json()


def test_worker_scan_confirm_starts_work(client, works):
    _login(client, Role.WORKER, account_id=7)

    frame = _scan(client, "/worker", "workid:#1")
    assert frame["outcome"] == "detected"
    assert frame["state"] == "detected"
    assert works.get_by_id(1).status == WorkStatus.REQUESTING

    resp = client.post("/worker/qr/confirm")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["state"] == "committed"
    assert body["work"]["status"] == int(WorkStatus.IN_PROGRESS)
    assert works.get_by_id(1).worker_id == 7


def test_admin_complete_outside_allow_list_is_rejected(client, works):
    _login(client, Role.ADMIN, account_id=1)
    _scan(client, "/admin", "WORKID:1")

    resp = client.post("/admin/qr/confirm")

    assert resp.status_code == 409
    assert resp.get_json()["state"] == "rejected"
    assert works.get_by_id(1).status == WorkStatus.REQUESTING
    assert works.transitions == []

    assert client.post("/admin/qr/rescan").get_json()["state"] == "scanning"


def test_admin_completes_delivered_work(client, works):
    _login(client, Role.ADMIN, account_id=1)
    _scan(client, "/admin", "workid:2")

    assert client.post("/admin/qr/confirm").status_code == 200
    assert works.get_by_id(2).status == WorkStatus.COMPLETED
    assert works.get_by_id(2).ended_at is not None


def test_worker_cannot_start_work_of_another_worker(client, works):
    _login(client, Role.WORKER, account_id=7)
    _scan(client, "/worker", "workid:3")

    resp = client.post("/worker/qr/confirm")

    assert resp.status_code == 409
    assert works.get_by_id(3).worker_id == 8


def test_invalid_payload_reports_error(client):
    _login(client, Role.WORKER)

    body = _scan(client, "/worker", "hello")

    assert body["outcome"] == "invalid"
    assert body["error"] == "Invalid QR code"
    assert client.post("/worker/qr/confirm").status_code == 400


def test_stop_ends_scanning(client):
    _login(client, Role.WORKER)
    client.post("/worker/qr/start")

    assert client.post("/worker/qr/stop").get_json()["state"] == "stopped"
    assert client.post("/worker/qr/frame", json={"payload": "workid:1"}).get_json()["outcome"] == "ignored"


def test_requires_login_of_the_right_role(client):
    resp = client.post("/worker/qr/start")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/worker/login")

    _login(client, Role.WORKER)
    resp = client.post("/admin/qr/start")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin/login")


def test_admin_without_edit_permission_is_forbidden(client):
    _login(client, Role.ADMIN, permissions=frozenset({AdminPermission.WORKS_VIEW}))

    assert client.post("/admin/qr/start").status_code == 403


def test_expired_session_redirects_to_login(client):
    _login(client, Role.WORKER, issued_at=time.time() - 31 * 60)

    resp = client.post("/worker/qr/start")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/worker/login")
    with client.session_transaction() as s:
        assert "account_id" not in s


def test_backend_token_error_during_commit_redirects(client, container, monkeypatch):
    _login(client, Role.WORKER, account_id=7)
    _scan(client, "/worker", "workid:1")

    def expired(*args, **kwargs):
        raise RuntimeError("JWT expired")

    monkeypatch.setattr(container.transition_service, "start_work", expired)

    resp = client.post("/worker/qr/confirm")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/worker/login")
