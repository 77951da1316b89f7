from __future__ import annotations

from datetime import date

from flask import Flask, Response, request

from ..common.validators import optional_int
from ..common.web import guard, ok, request_data
from ..core.enums import AdminPermission, Role, WorkStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..qr.codec import render_png
from ..qr.payload import build_payload
from .export import export_works_csv
from .proceeds import default_month, month_options
from .service import WorkInput, work_to_dict


def _optional_int_arg(name: str):
    return optional_int(request.args.get(name), name)


def _status_arg():
    value = _optional_int_arg("status")
    if value is None:
        return None
    try:
        return WorkStatus(value)
    except ValueError:
        raise ValidationError("Invalid work status")


def register(app: Flask, container: Container) -> None:
    # --- admin ---

    @app.route("/admin/works", methods=["GET"], endpoint="admin_works")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_VIEW)
    def admin_works(user):
        works = container.work_service.list_sorted(
            search=request.args.get("q"),
            status=_status_arg(),
            worker_id=_optional_int_arg("worker_id"),
        )
        return ok(works=[work_to_dict(w) for w in works])

    @app.route("/admin/works", methods=["POST"], endpoint="admin_create_work")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_EDIT)
    def admin_create_work(user):
        work_id = container.work_service.create_work(WorkInput.from_form(request_data(request)))
        app.logger.info("admin %s created work %s", user.account_id, work_id)
        return ok(201, id=work_id)

    @app.route("/admin/works/<int:work_id>", methods=["GET"], endpoint="admin_work_detail")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_VIEW)
    def admin_work_detail(user, work_id: int):
        return ok(work=work_to_dict(container.work_service.get_detail(work_id)))

    @app.route("/admin/works/<int:work_id>", methods=["PUT", "POST"], endpoint="admin_update_work")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_EDIT)
    def admin_update_work(user, work_id: int):
        container.work_service.update_work(work_id, WorkInput.from_form(request_data(request)))
        return ok(id=work_id)

    @app.route("/admin/works/<int:work_id>", methods=["DELETE"], endpoint="admin_delete_work")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_EDIT)
    def admin_delete_work(user, work_id: int):
        container.work_service.delete_work(work_id)
        app.logger.info("admin %s deleted work %s", user.account_id, work_id)
        return ok()

    @app.route("/admin/works/export.csv", endpoint="admin_export_works")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_VIEW)
    def admin_export_works(user):
        works = container.work_service.list_sorted(
            search=request.args.get("q"),
            status=_status_arg(),
            worker_id=_optional_int_arg("worker_id"),
        )
        filename = f"works_{date.today().strftime('%Y%m%d')}.csv"
        return Response(
            export_works_csv(works),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/admin/works/<int:work_id>/qr.png", endpoint="admin_work_qr")
    @guard(app, Role.ADMIN, AdminPermission.WORKS_VIEW)
    def admin_work_qr(user, work_id: int):
        work = container.work_service.get_detail(work_id)
        return Response(render_png(build_payload(work.work_id)), mimetype="image/png")

    # --- worker ---

    @app.route("/worker/works", endpoint="worker_works")
    @guard(app, Role.WORKER)
    def worker_works(user):
        current = container.work_service.current_for_worker(user.account_id)
        history = container.work_service.history_for_worker(user.account_id)
        return ok(
            current=[work_to_dict(w) for w in current],
            history=[work_to_dict(w) for w in history],
        )

    @app.route("/worker/proceeds", endpoint="worker_proceeds")
    @guard(app, Role.WORKER)
    def worker_proceeds(user):
        today = date.today()
        options = month_options(app.config["START_YEAR_MONTH"], today)
        month = request.args.get("month") or default_month(options, today)
        if not month:
            return ok(months=options, month=None, rows=[], total=0)

        report = container.proceeds_service.monthly(worker_id=user.account_id, year_month=month)
        return ok(months=options, month=report.year_month, rows=report.rows, total=report.total)

    @app.route("/worker/delivery", methods=["POST"], endpoint="worker_delivery")
    @guard(app, Role.WORKER)
    def worker_delivery(user):
        data = request_data(request)
        work = container.transition_service.choose_delivery(
            worker_id=user.account_id,
            method=data.get("method", ""),
            work_id=optional_int(data.get("work_id"), "Work"),
        )
        return ok(work=work_to_dict(work))
