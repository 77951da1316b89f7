from __future__ import annotations

from flask import Flask, request, send_file

from ..common.web import fail, guard, ok, request_data
from ..core.enums import AdminPermission, Role
from ..core.exceptions import DomainError, NotFoundError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/videos", methods=["GET"], endpoint="admin_videos")
    @guard(app, Role.ADMIN, AdminPermission.VIDEOS_VIEW)
    def admin_videos(user):
        svc = container.video_service
        return ok(videos=[svc.to_dict(v) for v in svc.list_videos()])

    @app.route("/admin/videos/youtube", methods=["POST"], endpoint="admin_add_youtube_video")
    @guard(app, Role.ADMIN, AdminPermission.VIDEOS_EDIT)
    def admin_add_youtube_video(user):
        data = request_data(request)
        video_id = container.video_service.add_youtube(
            title=data.get("title", ""), url=data.get("url", ""), admin_id=user.account_id
        )
        return ok(201, id=video_id)

    @app.route("/admin/videos/upload", methods=["POST"], endpoint="admin_upload_video")
    @guard(app, Role.ADMIN, AdminPermission.VIDEOS_EDIT)
    def admin_upload_video(user):
        video_id = container.video_service.upload(
            title=request.form.get("title", ""),
            upload=request.files.get("file"),
            admin_id=user.account_id,
        )
        app.logger.info("admin %s uploaded video %s", user.account_id, video_id)
        return ok(201, id=video_id)

    @app.route("/admin/videos/<int:video_id>", methods=["DELETE"], endpoint="admin_delete_video")
    @guard(app, Role.ADMIN, AdminPermission.VIDEOS_EDIT)
    def admin_delete_video(user, video_id: int):
        container.video_service.delete_video(video_id)
        return ok()

    @app.route("/worker/works/<int:work_id>/video", endpoint="worker_work_video")
    @guard(app, Role.WORKER)
    def worker_work_video(user, work_id: int):
        work = container.work_service.get_detail(work_id)
        if work.worker_id != user.account_id:
            return fail("This work is not assigned to you", 403)
        if work.work_video_id is None:
            return ok(video=None)
        svc = container.video_service
        return ok(video=svc.to_dict(svc.get(work.work_video_id)))

    @app.route("/files/<path:token>", endpoint="signed_file")
    def signed_file(token: str):
        # the signature is the authorization
        try:
            path = container.storage.resolve(token)
        except DomainError as e:
            return fail(str(e), 404 if isinstance(e, NotFoundError) else 403)
        return send_file(path, conditional=True)
