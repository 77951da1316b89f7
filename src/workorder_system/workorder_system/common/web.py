"""Shared JSON helpers and route guards for the Flask controllers."""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, jsonify, redirect, session, url_for

from ..accounts.service import require_permission
from ..core.enums import AdminPermission, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CleanupFailedError,
    DomainError,
    NotFoundError,
    TransitionRejected,
)
from ..identity.session import current_user, end_session, ensure_fresh, is_session_expired_error

LOGIN_ENDPOINTS = {Role.ADMIN: "admin_login", Role.WORKER: "worker_login"}


def ok(status: int = 200, **payload):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status


def fail(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status


def redirect_to_login(role: Role):
    end_session(session)
    return redirect(url_for(LOGIN_ENDPOINTS[role]))


def error_status(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, TransitionRejected):
        return 409
    if isinstance(error, CleanupFailedError):
        return 500
    return 400


def error_response(app: Flask, error: Exception, role: Role):
    # expired login must win over every other error display
    if is_session_expired_error(error):
        app.logger.info("session expired for %s, redirecting to login", role.value)
        return redirect_to_login(role)
    if isinstance(error, CleanupFailedError):
        app.logger.error("cleanup failed: %s", error)
    if isinstance(error, DomainError):
        return fail(str(error), error_status(error))

    app.logger.exception("unexpected error")
    if bool(app.config.get("DEBUG", False)):
        return fail(f"System error: {error}", 500)
    return fail("System error", 500)


def guard(app: Flask, role: Role, permission: Optional[AdminPermission] = None):
    """Route decorator: require a fresh session of ``role``; the view receives the SessionUser first."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user(session)
            if not user or user.role != role:
                return redirect_to_login(role)
            try:
                ensure_fresh(session, lifetime_minutes=int(app.config["SESSION_LIFETIME_MINUTES"]))
                if permission is not None:
                    require_permission(user, permission)
                return view(user, *args, **kwargs)
            except Exception as e:
                return error_response(app, e, role)

        return wrapper

    return decorator


def request_data(request) -> dict:
    """JSON body when sent as JSON, otherwise form fields."""

    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()
