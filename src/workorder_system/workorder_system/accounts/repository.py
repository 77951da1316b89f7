from __future__ import annotations

from typing import FrozenSet, Optional, Protocol, Sequence

from ..core.enums import AdminPermission
from .model import Admin, AdminRoles


class AdminRepository(Protocol):
    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Admin]:
        raise NotImplementedError

    def list_live(self) -> Sequence[Admin]:
        raise NotImplementedError

    def create(self, *, name: str, email: str, auth_user_id: str) -> int:
        raise NotImplementedError

    def update_email(self, admin_id: int, email: str) -> bool:
        raise NotImplementedError

    def soft_delete(self, admin_id: int) -> bool:
        raise NotImplementedError

    def hard_delete(self, admin_id: int) -> bool:
        """Remove a row that never became usable (creation rolled back)."""

        raise NotImplementedError


class AdminRoleRepository(Protocol):
    def get_for_admin(self, admin_id: int) -> Optional[AdminRoles]:
        raise NotImplementedError

    def create(self, *, admin_id: int, permissions: FrozenSet[AdminPermission]) -> int:
        raise NotImplementedError

    def update(self, *, admin_id: int, permissions: FrozenSet[AdminPermission]) -> bool:
        raise NotImplementedError
