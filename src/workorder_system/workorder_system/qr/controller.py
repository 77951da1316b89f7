from __future__ import annotations

import time

from flask import Flask, jsonify, request, session

from ..common.web import error_response, error_status, guard, ok, request_data
from ..core.enums import AdminPermission, Role
from ..core.exceptions import DomainError
from ..container import Container
from ..identity.session import is_session_expired_error
from ..works.service import work_to_dict
from .codec import decode_image
from .payload import parse_work_id
from .scanner import FRAME_INVALID, ScanSession

SESSION_KEY = "qr_scan"


def _now() -> float:
    return time.time()


def _load() -> ScanSession:
    return ScanSession.from_dict(session.get(SESSION_KEY))


def _save(scan: ScanSession) -> None:
    session[SESSION_KEY] = scan.to_dict()


def _frame_payload():
    """Text of the frame: explicit payload, or the QR decoded from an uploaded image."""

    upload = request.files.get("frame")
    if upload is not None:
        texts = decode_image(upload.stream)
        if not texts:
            return None
        # a frame may hold several symbols; prefer one carrying a work id
        return next((t for t in texts if parse_work_id(t)), texts[0])
    return request_data(request).get("payload") or None


def _state(scan: ScanSession, **extra):
    return ok(state=scan.state, work_id=scan.work_id, error=scan.error, **extra)


def register(app: Flask, container: Container) -> None:
    def commit(user, role: Role):
        scan = _load()
        work_id = scan.begin_commit()
        _save(scan)
        try:
            if role == Role.ADMIN:
                work = container.transition_service.complete_work(work_id)
            else:
                work = container.transition_service.start_work(work_id, worker_id=user.account_id)
        except Exception as e:
            scan.mark_rejected(str(e) if isinstance(e, DomainError) else "Status update failed")
            _save(scan)
            if isinstance(e, DomainError) and not is_session_expired_error(e):
                body = {"success": False, "message": str(e), "state": scan.state, "work_id": scan.work_id}
                return jsonify(body), error_status(e)
            return error_response(app, e, role)

        scan.mark_committed()
        _save(scan)
        app.logger.info("%s %s committed QR transition on work %s", role.value, user.account_id, work_id)
        return _state(scan, work=work_to_dict(work))

    for role, permission in ((Role.ADMIN, AdminPermission.WORKS_EDIT), (Role.WORKER, None)):
        prefix = f"/{role.value}/qr"

        def make_views(role=role, permission=permission):
            @guard(app, role, permission)
            def qr_start(user):
                scan = ScanSession()
                _save(scan)
                return _state(scan)

            @guard(app, role, permission)
            def qr_state(user):
                return _state(_load())

            @guard(app, role, permission)
            def qr_frame(user):
                scan = _load()
                outcome = scan.feed(_frame_payload(), _now())
                _save(scan)
                if outcome == FRAME_INVALID:
                    app.logger.info("invalid QR payload from %s %s", role.value, user.account_id)
                return _state(scan, outcome=outcome)

            @guard(app, role, permission)
            def qr_confirm(user):
                return commit(user, role)

            @guard(app, role, permission)
            def qr_rescan(user):
                scan = _load()
                scan.rescan()
                _save(scan)
                return _state(scan)

            @guard(app, role, permission)
            def qr_stop(user):
                scan = _load()
                scan.stop()
                _save(scan)
                return _state(scan)

            return {
                "start": qr_start,
                "state": qr_state,
                "frame": qr_frame,
                "confirm": qr_confirm,
                "rescan": qr_rescan,
                "stop": qr_stop,
            }

        for name, view in make_views().items():
            methods = ["GET"] if name == "state" else ["POST"]
            path = prefix if name == "state" else f"{prefix}/{name}"
            app.add_url_rule(path, endpoint=f"{role.value}_qr_{name}", view_func=view, methods=methods)
