import pytest

from src.workorder_system.workorder_system.core.enums import AdminPermission, Role
from src.workorder_system.workorder_system.core.exceptions import SessionExpiredError, ValidationError
from src.workorder_system.workorder_system.identity.model import SessionUser
from src.workorder_system.workorder_system.identity.session import (
    current_user,
    ensure_fresh,
    is_session_expired_error,
    start_session,
)


class BackendError(Exception):
    def __init__(self, message, code=None):
        super().__init__(message)
        self.code = code


def test_session_round_trip_and_expiry():
    session = {"stale": 1}
    user = SessionUser(account_id=3, identity_id="u", name="A", role=Role.ADMIN,
                       permissions=frozenset({AdminPermission.VIDEOS_EDIT}))

    start_session(session, user, now=1000.0)

    assert "stale" not in session
    assert current_user(session) == user
    ensure_fresh(session, lifetime_minutes=10, now=1000.0 + 600)
    with pytest.raises(SessionExpiredError):
        ensure_fresh(session, lifetime_minutes=10, now=1000.0 + 601)


def test_session_without_issue_time_is_expired():
    with pytest.raises(SessionExpiredError):
        ensure_fresh({"account_id": 1, "role": "worker"}, lifetime_minutes=10)


@pytest.mark.parametrize(
    "error",
    [
        SessionExpiredError("x"),
        BackendError("JWT expired"),
        BackendError("Invalid JWT"),
        BackendError("request unauthorized"),
        BackendError("token has expired"),
        BackendError("boom", code="PGRST301"),
    ],
)
def test_expired_session_errors_are_recognized(error):
    assert is_session_expired_error(error)


def test_other_errors_are_not_session_errors():
    assert not is_session_expired_error(BackendError("duplicate key"))
    assert not is_session_expired_error(ValidationError("This link has expired"))
