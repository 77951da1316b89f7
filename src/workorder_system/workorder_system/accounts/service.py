from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from ..common.validators import require_email, require_non_empty
from ..core.enums import AdminPermission, Role
from ..core.exceptions import (
    AuthorizationError,
    CleanupFailedError,
    NotFoundError,
    ValidationError,
)
from ..identity.model import Invitation, SessionUser
from ..identity.service import IdentityService
from ..notifications.service import NotificationService
from .model import Admin, AdminRoles
from .repository import AdminRepository, AdminRoleRepository

logger = logging.getLogger(__name__)


def parse_permissions(values: Iterable[str]) -> frozenset:
    granted = set()
    for value in values:
        try:
            granted.add(AdminPermission(value))
        except ValueError:
            raise ValidationError(f"Unknown permission: {value}")
    return frozenset(granted)


def require_permission(user: Optional[SessionUser], permission: AdminPermission) -> None:
    if not user or user.role != Role.ADMIN:
        raise AuthorizationError("Administrator login required")
    if permission not in user.permissions:
        raise AuthorizationError("You do not have permission for this action")


@dataclass(frozen=True)
class AdminDetail:
    admin: Admin
    roles: AdminRoles


class AccountService:
    """Use case: manage administrator accounts.

    Tạo admin gồm 3 bước ghi (identity, admins, admin_roles) không nằm trong
    một transaction, nên khi bước sau lỗi thì phải dọn các bước trước.
    """

    def __init__(
        self,
        admins: AdminRepository,
        admin_roles: AdminRoleRepository,
        identity_service: IdentityService,
        notifications: Optional[NotificationService] = None,
    ):
        self._admins = admins
        self._roles = admin_roles
        self._identity = identity_service
        self._notifications = notifications

    def create_admin(self, *, name: str, email: str, permissions: Iterable[AdminPermission]) -> Tuple[int, Invitation]:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        if self._admins.get_by_email(email):
            raise ValidationError("This email address is already used by another administrator")

        invitation = self._identity.invite(email, Role.ADMIN)

        try:
            admin_id = self._admins.create(name=name, email=email, auth_user_id=invitation.identity_id)
        except Exception as exc:
            logger.error("admin insert failed for %s: %s", email, exc)
            self._undo_identity(invitation)
            raise

        try:
            self._roles.create(admin_id=admin_id, permissions=frozenset(permissions))
        except Exception as exc:
            logger.error("admin_roles insert failed for admin %s: %s", admin_id, exc)
            try:
                self._admins.hard_delete(admin_id)
            except Exception as cleanup_exc:
                logger.exception("could not delete admin %s", admin_id)
                raise CleanupFailedError(
                    f"Administrator creation failed and could not be undone. Remove the account for {email} manually."
                ) from cleanup_exc
            self._undo_identity(invitation)
            raise

        if self._notifications:
            self._notifications.queue_invitation(invitation)
        return admin_id, invitation

    def _undo_identity(self, invitation: Invitation) -> None:
        try:
            self._identity.discard_invitation(invitation)
        except Exception as cleanup_exc:
            logger.exception("could not delete identity %s", invitation.identity_id)
            raise CleanupFailedError(
                f"Account creation failed and the login for {invitation.email} remains. Delete it manually."
            ) from cleanup_exc

    def list_admins(self) -> Sequence[Admin]:
        return self._admins.list_live()

    def get_detail(self, admin_id: int) -> AdminDetail:
        admin = self._admins.get_by_id(admin_id)
        if not admin:
            raise NotFoundError("Administrator does not exist")
        roles = self._roles.get_for_admin(admin_id) or AdminRoles(admin_id=admin_id)
        return AdminDetail(admin=admin, roles=roles)

    def update_permissions(self, admin_id: int, permissions: Iterable[AdminPermission]) -> AdminRoles:
        self.get_detail(admin_id)
        granted = frozenset(permissions)
        if not self._roles.update(admin_id=admin_id, permissions=granted):
            self._roles.create(admin_id=admin_id, permissions=granted)
        return AdminRoles(admin_id=admin_id, permissions=granted)

    def delete_admin(self, *, actor_admin_id: int, admin_id: int) -> None:
        if int(actor_admin_id) == int(admin_id):
            raise ValidationError("You cannot delete your own account")
        if not self._admins.soft_delete(admin_id):
            raise NotFoundError("Administrator does not exist")

    def change_email(self, admin_id: int, email: str) -> str:
        email = require_email(email)
        detail = self.get_detail(admin_id)
        other = self._admins.get_by_email(email)
        if other and other.admin_id != detail.admin.admin_id:
            raise ValidationError("This email address is already used by another administrator")

        old_email = detail.admin.email
        self._admins.update_email(admin_id, email)
        try:
            self._identity.change_email(detail.admin.auth_user_id, email)
        except Exception:
            logger.error("login email change failed for admin %s, restoring %s", admin_id, old_email)
            self._admins.update_email(admin_id, old_email)
            raise
        return email
