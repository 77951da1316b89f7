import pytest
from werkzeug.security import generate_password_hash

from src.workorder_system.workorder_system.core.enums import AdminPermission, Role
from src.workorder_system.workorder_system.core.exceptions import AuthenticationError, ValidationError
from src.workorder_system.workorder_system.accounts.model import AdminRoles
from src.workorder_system.workorder_system.identity.service import AuthService, IdentityService
from src.workorder_system.workorder_system.workers.model import Worker
from tests.fakes import InMemoryAdminRoles, InMemoryAdmins, InMemoryIdentities, InMemoryWorkers


@pytest.fixture
def repos():
    return InMemoryIdentities(), InMemoryAdmins(), InMemoryAdminRoles(), InMemoryWorkers()


def _identity_service(repos, **kwargs):
    identities, admins, _, workers = repos
    return IdentityService(identities, admins, workers, secret_key="k", **kwargs)


def test_invite_then_accept_sets_password(repos):
    identities = repos[0]
    svc = _identity_service(repos)

    invitation = svc.invite("new@example.com", Role.WORKER)
    assert identities.get_by_id(invitation.identity_id).password_hash is None

    assert svc.accept_invite(invitation.token, "secret1") == Role.WORKER
    stored = identities.get_by_id(invitation.identity_id)
    assert stored.confirmed
    assert stored.password_hash != "secret1"


def test_invite_rejects_email_of_live_account_and_bad_email(repos):
    admins = repos[1]
    svc = _identity_service(repos)
    invitation = svc.invite("a@example.com", Role.ADMIN)
    admins.create(name="A", email="a@example.com", auth_user_id=invitation.identity_id)

    with pytest.raises(ValidationError):
        svc.invite("a@example.com", Role.ADMIN)
    with pytest.raises(ValidationError):
        svc.invite("a@example.com", Role.WORKER)
    with pytest.raises(ValidationError):
        svc.invite("not-an-email", Role.ADMIN)


def test_identity_of_removed_worker_is_handed_out_again(repos):
    identities, _, _, workers = repos
    svc = _identity_service(repos)
    first = svc.invite("hoa@example.com", Role.WORKER)
    worker_id = workers.create(
        name="Hoa", email="hoa@example.com", auth_user_id=first.identity_id, next_visit_date=None, unit_price_ratio=None
    )
    svc.accept_invite(first.token, "secret1")
    workers.soft_delete(worker_id)

    second = svc.invite("hoa@example.com", Role.ADMIN)

    assert second.identity_id == first.identity_id
    assert second.reused
    stored = identities.get_by_id(second.identity_id)
    assert stored.password_hash is None
    assert not stored.confirmed

    svc.discard_invitation(second)
    assert identities.get_by_id(second.identity_id) is not None


def test_discarding_fresh_invitation_deletes_identity(repos):
    identities = repos[0]
    svc = _identity_service(repos)
    invitation = svc.invite("new@example.com", Role.WORKER)

    svc.discard_invitation(invitation)

    assert identities.items == {}


def test_tokens_are_bound_to_their_purpose(repos):
    svc = _identity_service(repos)
    invitation = svc.invite("a@example.com", Role.WORKER)

    with pytest.raises(ValidationError):
        svc.reset_password(invitation.token, "secret1")
    with pytest.raises(ValidationError):
        svc.accept_invite(invitation.token + "x", "secret1")
    with pytest.raises(ValidationError):
        svc.accept_invite(invitation.token, "123")


def test_expired_invitation_is_refused(repos):
    svc = _identity_service(repos, invite_max_age=-1)
    invitation = svc.invite("a@example.com", Role.WORKER)

    with pytest.raises(ValidationError, match="expired"):
        svc.accept_invite(invitation.token, "secret1")


def test_password_reset_only_for_live_account_of_role(repos):
    identities, _, _, workers = repos
    svc = _identity_service(repos)
    invitation = svc.invite("w@example.com", Role.WORKER)
    workers.items[1] = Worker(worker_id=1, name="W", email="w@example.com", auth_user_id=invitation.identity_id)

    assert svc.request_password_reset("w@example.com", Role.ADMIN) is None
    assert svc.request_password_reset("nobody@example.com", Role.WORKER) is None

    reset = svc.request_password_reset("w@example.com", Role.WORKER)
    assert svc.reset_password(reset.token, "newpass") == Role.WORKER
    assert identities.get_by_id(invitation.identity_id).password_hash


def test_login_requires_matching_live_account(repos):
    identities, admins, admin_roles, workers = repos
    identity_id = identities.create(email="boss@example.com")
    identities.set_password(identity_id, generate_password_hash("secret1"))
    admin_id = admins.create(name="Boss", email="boss@example.com", auth_user_id=identity_id)
    admin_roles.items[admin_id] = AdminRoles(admin_id=admin_id, permissions=frozenset({AdminPermission.WORKS_VIEW}))
    auth = AuthService(identities, admins, admin_roles, workers)

    user = auth.login("boss@example.com", "secret1", Role.ADMIN)
    assert user.account_id == admin_id
    assert user.permissions == frozenset({AdminPermission.WORKS_VIEW})

    with pytest.raises(AuthenticationError):
        auth.login("boss@example.com", "wrong", Role.ADMIN)
    with pytest.raises(AuthenticationError):
        auth.login("boss@example.com", "secret1", Role.WORKER)

    admins.soft_delete(admin_id)
    with pytest.raises(AuthenticationError):
        auth.login("boss@example.com", "secret1", Role.ADMIN)


def test_invitation_for_admin_cannot_be_used_on_worker_login(repos):
    identities = repos[0]
    svc = _identity_service(repos)
    invitation = svc.invite("a@example.com", Role.ADMIN)

    with pytest.raises(ValidationError):
        svc.accept_invite(invitation.token, "secret1", role=Role.WORKER)
    assert identities.get_by_id(invitation.identity_id).password_hash is None
