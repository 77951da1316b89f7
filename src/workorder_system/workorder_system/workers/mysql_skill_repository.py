from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import WorkerSkill
from .repository import SkillRepository


class MySQLSkillRepository(SkillRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_worker(self, worker_id: int) -> Sequence[WorkerSkill]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.id, s.worker_id, s.rank_id, r.rank_name, s.comment
                FROM worker_skills s
                LEFT JOIN ranks r ON r.id = s.rank_id
                WHERE s.worker_id=%s AND s.deleted_at IS NULL
                ORDER BY s.id
                """,
                (worker_id,),
            )
            return [
                WorkerSkill(
                    skill_id=int(r["id"]),
                    worker_id=int(r["worker_id"]),
                    rank_id=int(r["rank_id"]),
                    rank_name=r.get("rank_name"),
                    comment=r.get("comment"),
                )
                for r in fetchall(cur)
            ]

    def add(self, *, worker_id: int, rank_id: int, comment: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO worker_skills(worker_id, rank_id, comment) VALUES(%s,%s,%s)",
                (worker_id, rank_id, comment),
            )
            return int(cur.lastrowid)

    def soft_delete(self, *, worker_id: int, skill_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE worker_skills SET deleted_at=NOW() WHERE id=%s AND worker_id=%s AND deleted_at IS NULL",
                (skill_id, worker_id),
            )
            return cur.rowcount > 0
