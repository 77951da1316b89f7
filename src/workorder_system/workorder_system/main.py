from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .core.constants import DEFAULT_SESSION_MINUTES
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables

from .container import Container, build_container
from .accounts.controller import register as register_accounts
from .identity.controller import register as register_identity
from .notifications.controller import register as register_notifications
from .qr.controller import register as register_qr
from .videos.controller import register as register_videos
from .workers.controller import register as register_workers
from .works.controller import register as register_works

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass ``container`` to skip database setup (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SESSION_LIFETIME_MINUTES"] = int(getattr(settings, "SESSION_LIFETIME_MINUTES", DEFAULT_SESSION_MINUTES))
    app.config["START_YEAR_MONTH"] = getattr(settings, "START_YEAR_MONTH", "2025/01")
    app.permanent_session_lifetime = timedelta(minutes=app.config["SESSION_LIFETIME_MINUTES"])

    upload_folder = Path(getattr(settings, "UPLOAD_FOLDER", "uploads"))
    if not upload_folder.is_absolute():
        upload_folder = REPO_ROOT / upload_folder

    if app.config["DEBUG"]:
        app.logger.setLevel(logging.DEBUG)
        print(
            "[workorder-system] settings=", settings_module,
            " db=", f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        )

    if container is None:
        auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
        auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))
        if auto_init_db:
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            if app.config["DEBUG"]:
                print(f"[workorder-system] schema ready (tables={len(list_tables(db_config))})")
        if auto_seed_db:
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_accounts(db_config)
            if app.config["DEBUG"]:
                print("[workorder-system] demo seed ready")

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            upload_folder=str(upload_folder),
            mail_from=getattr(settings, "MAIL_FROM_ADDRESS", "no-reply@example.com"),
            base_url=getattr(settings, "APP_BASE_URL", ""),
        )

    app.extensions["workorder_container"] = container

    register_identity(app, container)
    register_works(app, container)
    register_qr(app, container)
    register_workers(app, container)
    register_accounts(app, container)
    register_notifications(app, container)
    register_videos(app, container)

    return app
