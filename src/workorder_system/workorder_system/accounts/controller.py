from __future__ import annotations

from flask import Flask, request

from ..common.web import guard, ok, request_data
from ..core.enums import AdminPermission, Role
from ..container import Container
from .service import parse_permissions


def _admin_to_dict(a) -> dict:
    return {"id": a.admin_id, "name": a.name, "email": a.email}


def _permission_values(data: dict) -> list:
    if "permissions" in data:
        values = data["permissions"]
        return values if isinstance(values, list) else [v for v in str(values).split(",") if v]
    # form posts send one checkbox per permission
    return [p.value for p in AdminPermission if data.get(p.value) in ("1", "on", "true", True)]


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/accounts", methods=["GET"], endpoint="admin_accounts")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_VIEW)
    def admin_accounts(user):
        return ok(accounts=[_admin_to_dict(a) for a in container.account_service.list_admins()])

    @app.route("/admin/accounts", methods=["POST"], endpoint="admin_create_account")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_EDIT)
    def admin_create_account(user):
        data = request_data(request)
        admin_id, _ = container.account_service.create_admin(
            name=data.get("name", ""),
            email=data.get("email", ""),
            permissions=parse_permissions(_permission_values(data)),
        )
        app.logger.info("admin %s created admin %s", user.account_id, admin_id)
        return ok(201, id=admin_id)

    @app.route("/admin/accounts/<int:admin_id>", methods=["GET"], endpoint="admin_account_detail")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_VIEW)
    def admin_account_detail(user, admin_id: int):
        detail = container.account_service.get_detail(admin_id)
        return ok(
            account=_admin_to_dict(detail.admin),
            permissions=sorted(p.value for p in detail.roles.permissions),
        )

    @app.route("/admin/accounts/<int:admin_id>/permissions", methods=["POST", "PUT"], endpoint="admin_account_permissions")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_EDIT)
    def admin_account_permissions(user, admin_id: int):
        granted = parse_permissions(_permission_values(request_data(request)))
        roles = container.account_service.update_permissions(admin_id, granted)
        return ok(permissions=sorted(p.value for p in roles.permissions))

    @app.route("/admin/accounts/<int:admin_id>/email", methods=["POST", "PUT"], endpoint="admin_account_email")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_EDIT)
    def admin_account_email(user, admin_id: int):
        email = container.account_service.change_email(admin_id, request_data(request).get("email", ""))
        return ok(email=email)

    @app.route("/admin/accounts/<int:admin_id>", methods=["DELETE"], endpoint="admin_delete_account")
    @guard(app, Role.ADMIN, AdminPermission.ACCOUNTS_EDIT)
    def admin_delete_account(user, admin_id: int):
        container.account_service.delete_admin(actor_admin_id=user.account_id, admin_id=admin_id)
        app.logger.info("admin %s deleted admin %s", user.account_id, admin_id)
        return ok()
