from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group, Rank


class GroupRepository(Protocol):
    def list_live(self) -> Sequence[Group]:
        raise NotImplementedError

    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def create(self, name: str) -> int:
        raise NotImplementedError

    def soft_delete(self, group_id: int) -> bool:
        raise NotImplementedError


class RankRepository(Protocol):
    def list_all(self) -> Sequence[Rank]:
        raise NotImplementedError

    def get_by_id(self, rank_id: int) -> Optional[Rank]:
        raise NotImplementedError
