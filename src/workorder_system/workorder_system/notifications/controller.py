from __future__ import annotations

from flask import Flask, request

from ..common.web import guard, ok, request_data
from ..core.enums import AdminPermission, Role
from ..core.exceptions import ValidationError
from ..container import Container


def _worker_ids(data: dict) -> list:
    raw = data.get("worker_ids") or []
    if not isinstance(raw, list):
        raw = [v for v in str(raw).split(",") if v.strip()]
    try:
        return [int(v) for v in raw]
    except (TypeError, ValueError):
        raise ValidationError("Invalid worker selection")


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/notifications", methods=["POST"], endpoint="admin_send_notification")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_send_notification(user):
        data = request_data(request)
        if not request.is_json and "worker_ids" in request.form:
            data["worker_ids"] = request.form.getlist("worker_ids")
        count = container.notification_service.send(_worker_ids(data), data.get("subject", ""), data.get("body", ""))
        return ok(queued=count)

    @app.route("/admin/notifications", methods=["GET"], endpoint="admin_notifications")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_notifications(user):
        mails = container.notification_service.list_recent()
        return ok(
            mails=[
                {
                    "id": m.mail_id,
                    "worker_id": m.worker_id,
                    "to": m.mail_to,
                    "subject": m.subject,
                    "sent_at": m.sent_at.isoformat() if m.sent_at else None,
                }
                for m in mails
            ]
        )
