from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str
    record_id: Optional[int] = None


Listener = Callable[[ChangeEvent], None]


class ChangeFeed:
    """In-process change notifications per table.

    Repositories publish after a committed write; subscribers only learn that
    something changed, there is no ordering guarantee between tables.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def subscribe(self, table: str, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(table, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(table, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event.table, []))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # The write is already committed; one bad listener must not hide it from the others.
                logger.exception("change listener failed for %s %s", event.table, event.action)
