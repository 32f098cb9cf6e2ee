from __future__ import annotations
import logging
from collections import deque
from threading import Lock

from .models import LogEntry
from ..core.timeutil import Clock, now_utc

logger = logging.getLogger(__name__)


class ActivityLog:
    """Bounded, append-only event trace. Oldest entries are evicted first."""

    def __init__(self, capacity: int = 5000, clock: Clock = now_utc) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = Lock()
        self._clock = clock

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def add(self, msg: str) -> LogEntry:
        entry = LogEntry(time=self._clock(), msg=msg)
        with self._lock:
            self._entries.append(entry)
        logger.info("%s", msg)
        return entry

    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
