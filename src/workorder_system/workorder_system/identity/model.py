from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..core.enums import AdminPermission, Role


@dataclass(frozen=True)
class Identity:
    """Login identity shared by admins and workers (auth_users)."""

    identity_id: str
    email: str
    password_hash: Optional[str]
    confirmed: bool = False


@dataclass(frozen=True)
class Invitation:
    identity_id: str
    email: str
    role: Role
    token: str
    # True when an identity left behind by a removed account was handed out again
    reused: bool = False


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    account_id: int
    identity_id: str
    name: str
    role: Role
    permissions: FrozenSet[AdminPermission] = field(default_factory=frozenset)
