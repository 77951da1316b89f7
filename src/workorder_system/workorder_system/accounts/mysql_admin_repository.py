from __future__ import annotations

from typing import FrozenSet, Optional, Sequence

from ..core.enums import AdminPermission
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Admin, AdminRoles
from .repository import AdminRepository, AdminRoleRepository

# admin_roles column per permission, in column order
_PERMISSION_COLUMNS = [(p, f"allow_{p.value}") for p in AdminPermission]


def _to_admin(r: dict) -> Admin:
    return Admin(
        admin_id=int(r["id"]),
        name=r.get("name") or "",
        email=r.get("email") or "",
        auth_user_id=r["auth_user_id"],
        created_at=r.get("created_at"),
    )


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, name, email, auth_user_id, created_at FROM admins WHERE {column}=%s AND deleted_at IS NULL",
                (value,),
            )
            row = fetchone(cur)
            return _to_admin(row) if row else None

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        return self._get_one("id", admin_id)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Admin]:
        return self._get_one("auth_user_id", auth_user_id)

    def get_by_email(self, email: str) -> Optional[Admin]:
        return self._get_one("email", email)

    def list_live(self) -> Sequence[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, email, auth_user_id, created_at FROM admins WHERE deleted_at IS NULL ORDER BY id"
            )
            return [_to_admin(r) for r in fetchall(cur)]

    def create(self, *, name: str, email: str, auth_user_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO admins(name, email, auth_user_id) VALUES(%s,%s,%s)",
                (name, email, auth_user_id),
            )
            return int(cur.lastrowid)

    def update_email(self, admin_id: int, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE admins SET email=%s, updated_at=NOW() WHERE id=%s AND deleted_at IS NULL",
                (email, admin_id),
            )
            return cur.rowcount > 0

    def soft_delete(self, admin_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admins SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL", (admin_id,))
            return cur.rowcount > 0

    def hard_delete(self, admin_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM admins WHERE id=%s", (admin_id,))
            return cur.rowcount > 0


class MySQLAdminRoleRepository(AdminRoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_admin(self, admin_id: int) -> Optional[AdminRoles]:
        columns = ", ".join(col for _, col in _PERMISSION_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT admin_id, {columns} FROM admin_roles WHERE admin_id=%s AND deleted_at IS NULL "
                "ORDER BY id DESC LIMIT 1",
                (admin_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            granted = frozenset(p for p, col in _PERMISSION_COLUMNS if row.get(col))
            return AdminRoles(admin_id=int(row["admin_id"]), permissions=granted)

    def create(self, *, admin_id: int, permissions: FrozenSet[AdminPermission]) -> int:
        columns = ", ".join(col for _, col in _PERMISSION_COLUMNS)
        placeholders = ",".join(["%s"] * (len(_PERMISSION_COLUMNS) + 1))
        values = [admin_id] + [1 if p in permissions else 0 for p, _ in _PERMISSION_COLUMNS]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO admin_roles(admin_id, {columns}) VALUES({placeholders})", tuple(values))
            return int(cur.lastrowid)

    def update(self, *, admin_id: int, permissions: FrozenSet[AdminPermission]) -> bool:
        sets = ", ".join(f"{col}=%s" for _, col in _PERMISSION_COLUMNS)
        values = [1 if p in permissions else 0 for p, _ in _PERMISSION_COLUMNS] + [admin_id]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE admin_roles SET {sets}, updated_at=NOW() WHERE admin_id=%s AND deleted_at IS NULL",
                tuple(values),
            )
            return cur.rowcount > 0
