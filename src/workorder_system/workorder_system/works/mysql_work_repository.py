from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import WorkStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern, to_float
from ..realtime.feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from .model import ProceedsRow, Work
from .repository import WorkRepository

TABLE = "works"

_SELECT = """
    SELECT w.id, w.work_title, w.status, w.quantity, w.unit_price, w.cost,
           w.worker_id, wk.name AS worker_name, wk.unit_price_ratio,
           w.delivery_date, w.ended_at, w.work_videos_id, w.note, w.created_at, w.updated_at
    FROM works w
    LEFT JOIN workers wk ON wk.id = w.worker_id
"""


def _to_work(r: dict) -> Work:
    return Work(
        work_id=int(r["id"]),
        title=r["work_title"],
        status=WorkStatus.coerce(r["status"]),
        quantity=int(r.get("quantity") or 0),
        unit_price=int(r.get("unit_price") or 0),
        cost=int(r.get("cost") or 0),
        worker_id=r.get("worker_id"),
        worker_name=r.get("worker_name"),
        worker_unit_price_ratio=to_float(r.get("unit_price_ratio")),
        delivery_date=r.get("delivery_date"),
        ended_at=r.get("ended_at"),
        work_video_id=r.get("work_videos_id"),
        note=r.get("note"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLWorkRepository(WorkRepository):
    def __init__(self, conn_factory: DatabaseConnection, feed: Optional[ChangeFeed] = None):
        self._conn_factory = conn_factory
        self._feed = feed

    def _notify(self, action: str, work_id: Optional[int]) -> None:
        if self._feed:
            self._feed.publish(ChangeEvent(table=TABLE, action=action, record_id=work_id))

    def get_by_id(self, work_id: int) -> Optional[Work]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE w.id=%s AND w.deleted_at IS NULL", (work_id,))
            row = fetchone(cur)
            return _to_work(row) if row else None

    def list_live(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[WorkStatus] = None,
        worker_id: Optional[int] = None,
    ) -> Sequence[Work]:
        where = ["w.deleted_at IS NULL"]
        params: list = []
        if search:
            where.append("(w.work_title LIKE %s OR wk.name LIKE %s)")
            params.extend([like_pattern(search), like_pattern(search)])
        if status is not None:
            where.append("w.status=%s")
            params.append(int(status))
        if worker_id is not None:
            where.append("w.worker_id=%s")
            params.append(worker_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE " + " AND ".join(where) + " ORDER BY w.id", tuple(params))
            return [_to_work(r) for r in fetchall(cur)]

    def list_for_worker(self, worker_id: int, *, status: Optional[WorkStatus] = None, limit: int = 50) -> Sequence[Work]:
        sql = _SELECT + " WHERE w.worker_id=%s AND w.deleted_at IS NULL"
        params: list = [worker_id]
        if status is not None:
            sql += " AND w.status=%s"
            params.append(int(status))
        sql += " ORDER BY COALESCE(w.updated_at, w.created_at) DESC, w.id DESC LIMIT %s"
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_work(r) for r in fetchall(cur)]

    def list_completed_between(self, *, worker_id: int, start: date, end: date) -> Sequence[ProceedsRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, work_title, cost, ended_at
                FROM works
                WHERE worker_id=%s AND status=%s AND deleted_at IS NULL
                  AND ended_at >= %s AND ended_at < %s
                ORDER BY ended_at DESC
                """,
                (worker_id, int(WorkStatus.COMPLETED), start, end),
            )
            return [
                ProceedsRow(
                    work_id=int(r["id"]),
                    title=r["work_title"] or "",
                    cost=int(r.get("cost") or 0),
                    ended_at=r["ended_at"],
                )
                for r in fetchall(cur)
            ]

    def create(
        self,
        *,
        title: str,
        status: WorkStatus,
        quantity: int,
        unit_price: int,
        cost: int,
        worker_id: Optional[int],
        delivery_date: Optional[datetime],
        work_video_id: Optional[int],
        note: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO works(work_title, status, quantity, unit_price, cost, worker_id,
                                  delivery_date, work_videos_id, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (title, int(status), quantity, unit_price, cost, worker_id, delivery_date, work_video_id, note),
            )
            work_id = int(cur.lastrowid)
        self._notify(INSERT, work_id)
        return work_id

    def update(
        self,
        *,
        work_id: int,
        title: str,
        status: WorkStatus,
        quantity: int,
        unit_price: int,
        cost: int,
        worker_id: Optional[int],
        delivery_date: Optional[datetime],
        work_video_id: Optional[int],
        note: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE works
                SET work_title=%s, status=%s, quantity=%s, unit_price=%s, cost=%s, worker_id=%s,
                    delivery_date=%s, work_videos_id=%s, note=%s, updated_at=NOW()
                WHERE id=%s AND deleted_at IS NULL
                """,
                (title, int(status), quantity, unit_price, cost, worker_id, delivery_date, work_video_id, note, work_id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify(UPDATE, work_id)
        return changed

    def transition(
        self,
        *,
        work_id: int,
        from_status: WorkStatus,
        to_status: WorkStatus,
        worker_id: Optional[int] = None,
        ended_at: Optional[datetime] = None,
    ) -> bool:
        sets = ["status=%s", "updated_at=NOW()"]
        params: list = [int(to_status)]
        if worker_id is not None:
            sets.append("worker_id=%s")
            params.append(worker_id)
        if ended_at is not None:
            sets.append("ended_at=%s")
            params.append(ended_at)
        params.extend([work_id, int(from_status)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE works SET " + ", ".join(sets) + " WHERE id=%s AND status=%s AND deleted_at IS NULL",
                tuple(params),
            )
            changed = cur.rowcount > 0
        if changed:
            self._notify(UPDATE, work_id)
        return changed

    def soft_delete(self, work_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE works SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL", (work_id,))
            changed = cur.rowcount > 0
        if changed:
            self._notify(DELETE, work_id)
        return changed
