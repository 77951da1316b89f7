"""Helpers around the Flask session of a logged in admin/worker."""

from __future__ import annotations

import time
from typing import MutableMapping, Optional

from ..core.enums import AdminPermission, Role
from ..core.exceptions import DomainError, SessionExpiredError
from .model import SessionUser

_EXPIRED_MARKERS = ("JWT", "unauthorized", "Invalid JWT", "expired")
_EXPIRED_CODES = {"PGRST301"}


def start_session(session: MutableMapping, user: SessionUser, *, now: Optional[float] = None) -> None:
    session.clear()
    session["account_id"] = user.account_id
    session["identity_id"] = user.identity_id
    session["name"] = user.name
    session["role"] = user.role.value
    session["permissions"] = sorted(p.value for p in user.permissions)
    session["issued_at"] = time.time() if now is None else now


def end_session(session: MutableMapping) -> None:
    session.clear()


def current_user(session: MutableMapping) -> Optional[SessionUser]:
    if "account_id" not in session or "role" not in session:
        return None
    try:
        role = Role(session["role"])
    except ValueError:
        return None
    permissions = frozenset(AdminPermission(p) for p in session.get("permissions") or [])
    return SessionUser(
        account_id=int(session["account_id"]),
        identity_id=str(session.get("identity_id") or ""),
        name=session.get("name") or "",
        role=role,
        permissions=permissions,
    )


def ensure_fresh(session: MutableMapping, *, lifetime_minutes: int, now: Optional[float] = None) -> None:
    """Raise SessionExpiredError once the session is older than its lifetime."""

    issued_at = session.get("issued_at")
    if issued_at is None:
        raise SessionExpiredError("Session has no issue time")
    now = time.time() if now is None else now
    if now - float(issued_at) > lifetime_minutes * 60:
        raise SessionExpiredError("Session expired")


def is_session_expired_error(error: BaseException) -> bool:
    if isinstance(error, SessionExpiredError):
        return True
    if isinstance(error, DomainError):
        # our own messages (e.g. "This link has expired") are not backend auth errors
        return False
    if getattr(error, "code", None) in _EXPIRED_CODES:
        return True
    message = str(getattr(error, "message", "") or error)
    return any(marker in message for marker in _EXPIRED_MARKERS)
