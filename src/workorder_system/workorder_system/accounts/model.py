from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional

from ..core.enums import AdminPermission


@dataclass(frozen=True)
class Admin:
    """Thực thể miền (domain): tài khoản quản trị."""

    admin_id: int
    name: str
    email: str
    auth_user_id: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdminRoles:
    admin_id: int
    permissions: FrozenSet[AdminPermission] = field(default_factory=frozenset)
