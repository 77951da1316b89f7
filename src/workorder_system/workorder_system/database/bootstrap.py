from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes and '--' comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]

    for ch in "\n".join(lines):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def _run_file(db_config: dict, path: str | Path) -> None:
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = factory.connect()
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_file(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_file(db_config, seed_path)


def ensure_demo_accounts(db_config: dict) -> None:
    """Create a demo admin (all permissions) and a demo worker with known passwords."""

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_identity(email: str, password: str) -> str:
            cur.execute("SELECT id FROM auth_users WHERE email=%s", (email,))
            row = cur.fetchone()
            password_hash = generate_password_hash(password)
            if row:
                cur.execute(
                    "UPDATE auth_users SET password_hash=%s, confirmed=1 WHERE id=%s",
                    (password_hash, row["id"]),
                )
                return row["id"]
            identity_id = str(uuid.uuid4())
            cur.execute(
                "INSERT INTO auth_users (id, email, password_hash, confirmed) VALUES (%s, %s, %s, 1)",
                (identity_id, email, password_hash),
            )
            return identity_id

        admin_identity = upsert_identity("admin@example.com", "admin123")
        cur.execute("SELECT id FROM admins WHERE auth_user_id=%s AND deleted_at IS NULL", (admin_identity,))
        admin = cur.fetchone()
        if not admin:
            cur.execute(
                "INSERT INTO admins (auth_user_id, name, email) VALUES (%s, %s, %s)",
                (admin_identity, "Admin Demo", "admin@example.com"),
            )
            cur.execute(
                """
                INSERT INTO admin_roles (admin_id, allow_works_view, allow_works_edit, allow_workers_view,
                    allow_workers_edit, allow_accounts_view, allow_accounts_edit, allow_videos_view, allow_videos_edit)
                VALUES (%s, 1, 1, 1, 1, 1, 1, 1, 1)
                """,
                (cur.lastrowid,),
            )

        worker_identity = upsert_identity("worker@example.com", "worker123")
        cur.execute("SELECT id FROM workers WHERE auth_user_id=%s AND deleted_at IS NULL", (worker_identity,))
        if not cur.fetchone():
            cur.execute(
                "INSERT INTO workers (auth_user_id, name, email, unit_price_ratio) VALUES (%s, %s, %s, 1.0)",
                (worker_identity, "Worker Demo", "worker@example.com"),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
