from __future__ import annotations

from datetime import date

from flask import Flask, Response, request

from ..common.validators import optional_int
from ..common.web import guard, ok, request_data
from ..core.enums import AdminPermission, Role
from ..container import Container
from ..works.service import work_to_dict
from .export import export_workers_csv
from .service import WorkerInput, worker_to_dict


def _skill_to_dict(s) -> dict:
    return {"id": s.skill_id, "rank_id": s.rank_id, "rank_name": s.rank_name, "comment": s.comment}


def register(app: Flask, container: Container) -> None:
    def list_args():
        return dict(
            search=request.args.get("q"),
            group_id=optional_int(request.args.get("group_id"), "Group"),
        )

    @app.route("/admin/workers", methods=["GET"], endpoint="admin_workers")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_workers(user):
        workers = container.worker_service.list_workers(**list_args())
        return ok(workers=[worker_to_dict(w) for w in workers])

    @app.route("/admin/workers", methods=["POST"], endpoint="admin_create_worker")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_create_worker(user):
        data = request_data(request)
        worker_id, _ = container.worker_service.create_worker(
            WorkerInput.from_form(data),
            rank_id=optional_int(data.get("rank_id"), "Rank"),
            skill_comment=data.get("skill_comment"),
        )
        app.logger.info("admin %s created worker %s", user.account_id, worker_id)
        return ok(201, id=worker_id)

    @app.route("/admin/workers/export.csv", endpoint="admin_export_workers")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_export_workers(user):
        workers = container.worker_service.list_workers(**list_args())
        filename = f"workers_{date.today().strftime('%Y%m%d')}.csv"
        return Response(
            export_workers_csv(workers),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/admin/workers/<int:worker_id>", methods=["GET"], endpoint="admin_worker_detail")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_worker_detail(user, worker_id: int):
        detail = container.worker_service.get_detail(worker_id)
        return ok(
            worker=worker_to_dict(detail.worker),
            skills=[_skill_to_dict(s) for s in detail.skills],
            history=[work_to_dict(w) for w in detail.history],
        )

    @app.route("/admin/workers/<int:worker_id>", methods=["PUT", "POST"], endpoint="admin_update_worker")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_update_worker(user, worker_id: int):
        container.worker_service.update_worker(worker_id, WorkerInput.from_form(request_data(request)))
        return ok(id=worker_id)

    @app.route("/admin/workers/<int:worker_id>", methods=["DELETE"], endpoint="admin_delete_worker")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_delete_worker(user, worker_id: int):
        container.worker_service.delete_worker(worker_id)
        app.logger.info("admin %s deleted worker %s", user.account_id, worker_id)
        return ok()

    @app.route("/admin/workers/<int:worker_id>/group", methods=["POST"], endpoint="admin_assign_group")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_assign_group(user, worker_id: int):
        group_id = optional_int(request_data(request).get("group_id"), "Group")
        container.worker_service.assign_group(worker_id, group_id)
        return ok()

    @app.route("/admin/workers/<int:worker_id>/skills", methods=["POST"], endpoint="admin_add_skill")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_add_skill(user, worker_id: int):
        data = request_data(request)
        skill_id = container.worker_service.add_skill(
            worker_id,
            optional_int(data.get("rank_id"), "Rank") or 0,
            data.get("comment"),
        )
        return ok(201, id=skill_id)

    @app.route(
        "/admin/workers/<int:worker_id>/skills/<int:skill_id>",
        methods=["DELETE"],
        endpoint="admin_remove_skill",
    )
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_remove_skill(user, worker_id: int, skill_id: int):
        container.worker_service.remove_skill(worker_id, skill_id)
        return ok()

    @app.route("/admin/groups", methods=["GET"], endpoint="admin_groups")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_groups(user):
        groups = container.group_service.list_groups()
        return ok(groups=[{"id": g.group_id, "name": g.name} for g in groups])

    @app.route("/admin/groups", methods=["POST"], endpoint="admin_create_group")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_create_group(user):
        group_id = container.group_service.create_group(request_data(request).get("name", ""))
        return ok(201, id=group_id)

    @app.route("/admin/groups/<int:group_id>", methods=["DELETE"], endpoint="admin_delete_group")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_EDIT)
    def admin_delete_group(user, group_id: int):
        container.group_service.delete_group(group_id)
        return ok()

    @app.route("/admin/ranks", endpoint="admin_ranks")
    @guard(app, Role.ADMIN, AdminPermission.WORKERS_VIEW)
    def admin_ranks(user):
        ranks = container.group_service.list_ranks()
        return ok(ranks=[{"id": r.rank_id, "name": r.rank_name} for r in ranks])

    # --- worker my page ---

    @app.route("/worker/me", methods=["GET"], endpoint="worker_my_page")
    @guard(app, Role.WORKER)
    def worker_my_page(user):
        detail = container.worker_service.get_detail(user.account_id)
        return ok(
            worker=worker_to_dict(detail.worker),
            skills=[_skill_to_dict(s) for s in detail.skills],
        )

    @app.route("/worker/me", methods=["POST", "PUT"], endpoint="worker_update_profile")
    @guard(app, Role.WORKER)
    def worker_update_profile(user):
        data = request_data(request)
        container.worker_service.update_own_profile(
            user.account_id,
            address=data.get("address"),
            birthday=data.get("birthday"),
        )
        return ok()
