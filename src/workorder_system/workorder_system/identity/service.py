from __future__ import annotations

import logging
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from ..accounts.repository import AdminRepository, AdminRoleRepository
from ..common.validators import require_email, require_min_length
from ..core.constants import DEFAULT_INVITE_SECONDS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..workers.repository import WorkerRepository
from .model import Invitation, SessionUser
from .repository import IdentityRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_INVITE_SALT = "invite"
_RESET_SALT = "password-reset"


class IdentityService:
    """Use case: login identities (invite, accept, reset password).

    Token ký bằng itsdangerous, salt khác nhau cho invite và reset để token
    của luồng này không dùng được cho luồng kia.
    """

    def __init__(
        self,
        identities: IdentityRepository,
        admins: AdminRepository,
        workers: WorkerRepository,
        *,
        secret_key: str,
        invite_max_age: int = DEFAULT_INVITE_SECONDS,
    ):
        self._identities = identities
        self._admins = admins
        self._workers = workers
        self._serializer = URLSafeTimedSerializer(secret_key)
        self._max_age = invite_max_age

    def _dumps(self, identity_id: str, email: str, role: Role, salt: str) -> str:
        return self._serializer.dumps({"uid": identity_id, "email": email, "role": role.value}, salt=salt)

    def _loads(self, token: str, salt: str, role: Optional[Role] = None) -> dict:
        try:
            data = self._serializer.loads(token, salt=salt, max_age=self._max_age)
        except SignatureExpired:
            raise ValidationError("This link has expired")
        except BadSignature:
            raise ValidationError("This link is invalid")
        if not isinstance(data, dict) or "uid" not in data:
            raise ValidationError("This link is invalid")
        if role is not None and data.get("role") != role.value:
            raise ValidationError("This link is for a different login")
        return data

    def invite(self, email: str, role: Role) -> Invitation:
        email = require_email(email)
        existing = self._identities.get_by_email(email)
        if existing and self.is_in_use(existing.identity_id):
            raise ValidationError("This email address is already registered")

        if existing:
            # Removed accounts keep their identity (soft-deleted rows still reference it).
            # Hand it out again with the old password wiped.
            self._identities.clear_password(existing.identity_id)
            logger.info("reusing identity %s for %s", existing.identity_id, email)
            token = self._dumps(existing.identity_id, email, role, _INVITE_SALT)
            return Invitation(identity_id=existing.identity_id, email=email, role=role, token=token, reused=True)

        identity_id = self._identities.create(email=email)
        token = self._dumps(identity_id, email, role, _INVITE_SALT)
        return Invitation(identity_id=identity_id, email=email, role=role, token=token)

    def is_in_use(self, identity_id: str) -> bool:
        """True while a live admin or worker logs in with this identity."""

        return bool(self._admins.get_by_auth_user_id(identity_id) or self._workers.get_by_auth_user_id(identity_id))

    def accept_invite(self, token: str, password: str, *, role: Optional[Role] = None) -> Role:
        data = self._loads(token, _INVITE_SALT, role)
        self._set_password(data["uid"], password)
        return Role(data["role"])

    def request_password_reset(self, email: str, role: Role) -> Optional[Invitation]:
        """Return a reset token, or None when no live account of that role uses the email."""

        email = require_email(email)
        identity = self._identities.get_by_email(email)
        if not identity:
            return None

        if role == Role.ADMIN:
            account = self._admins.get_by_auth_user_id(identity.identity_id)
        else:
            account = self._workers.get_by_auth_user_id(identity.identity_id)
        if not account:
            return None

        token = self._dumps(identity.identity_id, identity.email, role, _RESET_SALT)
        return Invitation(identity_id=identity.identity_id, email=identity.email, role=role, token=token)

    def reset_password(self, token: str, password: str, *, role: Optional[Role] = None) -> Role:
        data = self._loads(token, _RESET_SALT, role)
        self._set_password(data["uid"], password)
        return Role(data["role"])

    def _set_password(self, identity_id: str, password: str) -> None:
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if not self._identities.get_by_id(identity_id):
            raise NotFoundError("Account does not exist")
        self._identities.set_password(identity_id, generate_password_hash(password))

    def change_email(self, identity_id: str, email: str) -> str:
        email = require_email(email)
        existing = self._identities.get_by_email(email)
        if existing and existing.identity_id != identity_id:
            raise ValidationError("This email address is already registered")
        if not self._identities.update_email(identity_id, email):
            raise NotFoundError("Account does not exist")
        return email

    def discard_invitation(self, invitation: Invitation) -> None:
        """Undo `invite` after the account row could not be written."""

        if invitation.reused:
            # Still referenced by the removed account row; wiped already, stays reusable.
            return
        self.delete_identity(invitation.identity_id)

    def delete_identity(self, identity_id: str) -> None:
        if not self._identities.delete(identity_id):
            logger.warning("identity %s was already gone", identity_id)


class AuthService:
    """Use case: authenticate admin/worker (login)."""

    def __init__(
        self,
        identities: IdentityRepository,
        admins: AdminRepository,
        admin_roles: AdminRoleRepository,
        workers: WorkerRepository,
    ):
        self._identities = identities
        self._admins = admins
        self._admin_roles = admin_roles
        self._workers = workers

    def login(self, email: str, password: str, role: Role) -> SessionUser:
        identity = self._identities.get_by_email((email or "").strip())
        if not identity or not identity.password_hash:
            raise AuthenticationError("Wrong email or password")

        try:
            ok = check_password_hash(identity.password_hash, password or "")
        except ValueError:
            # unknown hash method stored in the column
            ok = False
        if not ok:
            raise AuthenticationError("Wrong email or password")

        if role == Role.ADMIN:
            admin = self._admins.get_by_auth_user_id(identity.identity_id)
            if not admin:
                raise AuthenticationError("Wrong email or password")
            roles = self._admin_roles.get_for_admin(admin.admin_id)
            return SessionUser(
                account_id=admin.admin_id,
                identity_id=identity.identity_id,
                name=admin.name,
                role=Role.ADMIN,
                permissions=roles.permissions if roles else frozenset(),
            )

        worker = self._workers.get_by_auth_user_id(identity.identity_id)
        if not worker:
            raise AuthenticationError("Wrong email or password")
        return SessionUser(
            account_id=worker.worker_id,
            identity_id=identity.identity_id,
            name=worker.name,
            role=Role.WORKER,
        )
