from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern, to_float
from ..realtime.feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from .model import Worker
from .repository import WorkerRepository

TABLE = "workers"

_SELECT = """
    SELECT w.id, w.name, w.email, w.auth_user_id, w.address, w.birthday, w.next_visit_date,
           w.unit_price_ratio, w.group_id, g.name AS group_name, w.created_at
    FROM workers w
    LEFT JOIN worker_groups g ON g.id = w.group_id AND g.deleted_at IS NULL
"""


def _to_worker(r: dict) -> Worker:
    return Worker(
        worker_id=int(r["id"]),
        name=r.get("name") or "",
        email=r.get("email") or "",
        auth_user_id=r["auth_user_id"],
        address=r.get("address"),
        birthday=r.get("birthday"),
        next_visit_date=r.get("next_visit_date"),
        unit_price_ratio=to_float(r.get("unit_price_ratio")),
        group_id=r.get("group_id"),
        group_name=r.get("group_name"),
        created_at=r.get("created_at"),
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed

    def _notify(self, action: str, worker_id: Optional[int]) -> None:
        if self._feed:
            self._feed.publish(ChangeEvent(table=TABLE, action=action, record_id=worker_id))

    def _get_one(self, where: str, value) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where}=%s AND w.deleted_at IS NULL", (value,))
            row = fetchone(cur)
            return _to_worker(row) if row else None

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        return self._get_one("w.id", worker_id)

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[Worker]:
        return self._get_one("w.auth_user_id", auth_user_id)

    def get_by_email(self, email: str) -> Optional[Worker]:
        return self._get_one("w.email", email)

    def get_many(self, worker_ids: Sequence[int]) -> Sequence[Worker]:
        ids = [int(i) for i in worker_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE w.id IN ({placeholders}) AND w.deleted_at IS NULL ORDER BY w.id",
                tuple(ids),
            )
            return [_to_worker(r) for r in fetchall(cur)]

    def list_live(self, *, search: Optional[str] = None, group_id: Optional[int] = None) -> Sequence[Worker]:
        where = ["w.deleted_at IS NULL"]
        params: list = []
        if search:
            where.append("(w.name LIKE %s OR w.email LIKE %s)")
            params.extend([like_pattern(search), like_pattern(search)])
        if group_id is not None:
            where.append("w.group_id=%s")
            params.append(group_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE " + " AND ".join(where) + " ORDER BY w.id", tuple(params))
            return [_to_worker(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        email: str,
        auth_user_id: str,
        next_visit_date: Optional[date],
        unit_price_ratio: Optional[float],
        group_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO workers(name, email, auth_user_id, next_visit_date, unit_price_ratio, group_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, email, auth_user_id, next_visit_date, unit_price_ratio, group_id),
            )
            worker_id = int(cur.lastrowid)
        self._notify(INSERT, worker_id)
        return worker_id

    def update(
        self,
        *,
        worker_id: int,
        name: str,
        email: str,
        address: Optional[str],
        birthday: Optional[date],
        next_visit_date: Optional[date],
        unit_price_ratio: Optional[float],
        group_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE workers
                SET name=%s, email=%s, address=%s, birthday=%s, next_visit_date=%s,
                    unit_price_ratio=%s, group_id=%s, updated_at=NOW()
                WHERE id=%s AND deleted_at IS NULL
                """,
                (name, email, address, birthday, next_visit_date, unit_price_ratio, group_id, worker_id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify(UPDATE, worker_id)
        return changed

    def update_profile(self, *, worker_id: int, address: Optional[str], birthday: Optional[date]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workers SET address=%s, birthday=%s, updated_at=NOW() WHERE id=%s AND deleted_at IS NULL",
                (address, birthday, worker_id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify(UPDATE, worker_id)
        return changed

    def soft_delete(self, worker_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE workers SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL", (worker_id,))
            changed = cur.rowcount > 0
        if changed:
            self._notify(DELETE, worker_id)
        return changed

    def hard_delete(self, worker_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM workers WHERE id=%s", (worker_id,))
            changed = cur.rowcount > 0
        if changed:
            self._notify(DELETE, worker_id)
        return changed
