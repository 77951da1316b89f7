from __future__ import annotations

from flask import Flask, request, session

from ..common.web import error_response, guard, ok, request_data
from ..core.enums import Role
from ..container import Container
from .session import end_session, start_session


def register(app: Flask, container: Container) -> None:
    def login_view(role: Role):
        if request.method == "GET":
            return ok(login=role.value)

        data = request_data(request)
        try:
            user = container.auth_service.login(data.get("email", ""), data.get("password", ""), role)
        except Exception as e:
            return error_response(app, e, role)

        start_session(session, user)
        app.logger.info("%s %s logged in", role.value, user.account_id)
        return ok(
            user={
                "id": user.account_id,
                "name": user.name,
                "role": user.role.value,
                "permissions": sorted(p.value for p in user.permissions),
            }
        )

    def password_reset_view(role: Role):
        data = request_data(request)
        try:
            invitation = container.identity_service.request_password_reset(data.get("email", ""), role)
            if invitation:
                container.notification_service.queue_password_reset(invitation)
        except Exception as e:
            return error_response(app, e, role)
        # same answer whether or not the address is registered
        return ok(message="If the address is registered, a reset link has been sent")

    def password_reset_confirm_view(role: Role):
        data = request_data(request)
        try:
            container.identity_service.reset_password(data.get("token", ""), data.get("password", ""), role=role)
        except Exception as e:
            return error_response(app, e, role)
        return ok(message="Password updated, please log in")

    def accept_invite_view(role: Role):
        data = request_data(request)
        try:
            container.identity_service.accept_invite(data.get("token", ""), data.get("password", ""), role=role)
        except Exception as e:
            return error_response(app, e, role)
        return ok(message="Password set, please log in")

    @app.route("/admin/login", methods=["GET", "POST"], endpoint="admin_login")
    def admin_login():
        return login_view(Role.ADMIN)

    @app.route("/worker/login", methods=["GET", "POST"], endpoint="worker_login")
    def worker_login():
        return login_view(Role.WORKER)

    @app.route("/admin/logout", methods=["POST"], endpoint="admin_logout")
    def admin_logout():
        end_session(session)
        return ok()

    @app.route("/worker/logout", methods=["POST"], endpoint="worker_logout")
    def worker_logout():
        end_session(session)
        return ok()

    @app.route("/admin/password-reset", methods=["POST"], endpoint="admin_password_reset")
    def admin_password_reset():
        return password_reset_view(Role.ADMIN)

    @app.route("/worker/password-reset", methods=["POST"], endpoint="worker_password_reset")
    def worker_password_reset():
        return password_reset_view(Role.WORKER)

    @app.route("/admin/password-reset/confirm", methods=["POST"], endpoint="admin_password_reset_confirm")
    def admin_password_reset_confirm():
        return password_reset_confirm_view(Role.ADMIN)

    @app.route("/worker/password-reset/confirm", methods=["POST"], endpoint="worker_password_reset_confirm")
    def worker_password_reset_confirm():
        return password_reset_confirm_view(Role.WORKER)

    @app.route("/admin/invite/accept", methods=["POST"], endpoint="admin_accept_invite")
    def admin_accept_invite():
        return accept_invite_view(Role.ADMIN)

    @app.route("/worker/invite/accept", methods=["POST"], endpoint="worker_accept_invite")
    def worker_accept_invite():
        return accept_invite_view(Role.WORKER)

    @app.route("/admin/me", endpoint="admin_me")
    @guard(app, Role.ADMIN)
    def admin_me(user):
        return ok(
            user={
                "id": user.account_id,
                "name": user.name,
                "permissions": sorted(p.value for p in user.permissions),
            }
        )
