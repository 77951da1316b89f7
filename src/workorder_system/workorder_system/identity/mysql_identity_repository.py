from __future__ import annotations

import uuid
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Identity
from .repository import IdentityRepository


def _to_identity(r: dict) -> Identity:
    return Identity(
        identity_id=r["id"],
        email=r["email"],
        password_hash=r.get("password_hash"),
        confirmed=bool(r.get("confirmed")),
    )


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, email, password_hash, confirmed FROM auth_users WHERE id=%s", (identity_id,))
            row = fetchone(cur)
            return _to_identity(row) if row else None

    def get_by_email(self, email: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, email, password_hash, confirmed FROM auth_users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_identity(row) if row else None

    def create(self, *, email: str) -> str:
        identity_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO auth_users(id, email, password_hash, confirmed) VALUES(%s,%s,NULL,0)",
                (identity_id, email),
            )
        return identity_id

    def set_password(self, identity_id: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE auth_users SET password_hash=%s, confirmed=1 WHERE id=%s",
                (password_hash, identity_id),
            )
            return cur.rowcount > 0

    def clear_password(self, identity_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_users SET password_hash=NULL, confirmed=0 WHERE id=%s", (identity_id,))
            return cur.rowcount > 0

    def update_email(self, identity_id: str, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE auth_users SET email=%s WHERE id=%s", (email, identity_id))
            return cur.rowcount > 0

    def delete(self, identity_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM auth_users WHERE id=%s", (identity_id,))
            return cur.rowcount > 0
