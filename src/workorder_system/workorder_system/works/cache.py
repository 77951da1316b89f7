from __future__ import annotations

import threading
from typing import Callable, List, Optional, Sequence

from ..realtime.feed import ChangeEvent, ChangeFeed
from .model import Work
from .sorting import sort_works

# Cached rows join worker name and price ratio, so worker writes matter too.
WATCHED_TABLES = ("works", "workers")


class WorkListCache:
    """Sorted list of all live works, dropped whenever a watched table changes."""

    def __init__(
        self,
        loader: Callable[[], Sequence[Work]],
        feed: Optional[ChangeFeed] = None,
        tables: Sequence[str] = WATCHED_TABLES,
    ):
        self._loader = loader
        self._items: Optional[List[Work]] = None
        self._lock = threading.Lock()
        self._unsubscribes = [feed.subscribe(table, self._on_change) for table in tables] if feed else []

    def _on_change(self, event: ChangeEvent) -> None:
        self.invalidate()

    def invalidate(self) -> None:
        with self._lock:
            self._items = None

    def get(self) -> List[Work]:
        with self._lock:
            if self._items is None:
                self._items = sort_works(self._loader())
            return list(self._items)

    def close(self) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []
