# lounge/notices.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal
import threading

NoticeLevel = Literal["success", "error", "info"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass
class NoticeBoard:
    """Pending user-visible notices for one browser session.

    The dashboard sync loop posts from its own thread while the page drains
    from the script thread, hence the lock.
    """

    _items: List[Notice] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def post(self, notice: Notice) -> None:
        with self._lock:
            self._items.append(notice)

    def drain(self) -> List[Notice]:
        with self._lock:
            items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        return len(self._items)
