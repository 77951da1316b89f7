from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .group_repository import GroupRepository, RankRepository
from .model import Group, Rank


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_live(self) -> Sequence[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM worker_groups WHERE deleted_at IS NULL ORDER BY name")
            return [Group(group_id=int(r["id"]), name=r["name"]) for r in fetchall(cur)]

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM worker_groups WHERE id=%s AND deleted_at IS NULL", (group_id,))
            row = fetchone(cur)
            return Group(group_id=int(row["id"]), name=row["name"]) if row else None

    def create(self, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO worker_groups(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)

    def soft_delete(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE worker_groups SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL", (group_id,))
            return cur.rowcount > 0


class MySQLRankRepository(RankRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Rank]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, rank_name FROM ranks ORDER BY id")
            return [Rank(rank_id=int(r["id"]), rank_name=r["rank_name"]) for r in fetchall(cur)]

    def get_by_id(self, rank_id: int) -> Optional[Rank]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, rank_name FROM ranks WHERE id=%s", (rank_id,))
            row = fetchone(cur)
            return Rank(rank_id=int(row["id"]), rank_name=row["rank_name"]) if row else None
