"""
Event log aggregator for the crawler.

Collects the log entries produced while a tick is processed and commits
them in one ordered append to a bounded buffer. The oldest entries are
dropped once the buffer is full.
"""

import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from pydantic import BaseModel, Field

from crawler.core.constants import MAX_LOG_ENTRIES, LogCategory


class LogEntry(BaseModel):
    """A single line of the event log."""

    text: str
    category: LogCategory = LogCategory.COMBAT
    timestamp: float = Field(description="Milliseconds since the epoch.")
    is_critical: bool = False


LogSubscriber = Callable[[list[LogEntry]], None]


def wall_clock_ms() -> float:
    return time.time() * 1000


class EventLog:
    """
    Bounded, ordered event log.

    Writes made inside `batch()` are buffered and committed together when the
    outermost batch exits, stably sorted by timestamp. Writes outside a batch
    are committed immediately. A batch holds the log's lock until it exits,
    so batches opened by different threads never interleave.
    """

    def __init__(
        self,
        max_entries: int = MAX_LOG_ENTRIES,
        clock: Callable[[], float] = wall_clock_ms,
    ) -> None:
        """
        Initialize an empty log.

        Args:
            max_entries (int): How many entries to keep.
            clock (Callable[[], float]): Source of millisecond timestamps.

        """
        self.max_entries = max_entries
        self.clock = clock
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._pending: list[LogEntry] = []
        self._depth = 0
        self._subscribers: list[LogSubscriber] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entries(self) -> list[LogEntry]:
        """Returns the committed entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def tail(self, count: int) -> list[LogEntry]:
        """Returns the newest `count` committed entries, oldest first."""
        if count <= 0:
            return []
        with self._lock:
            return list(self._entries)[-count:]

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def subscribe(self, callback: LogSubscriber) -> None:
        """Registers a callback that receives every committed batch."""
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: LogSubscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def add(
        self,
        text: str,
        category: LogCategory = LogCategory.COMBAT,
        is_critical: bool = False,
        timestamp: float | None = None,
    ) -> LogEntry:
        """
        Records one entry.

        Args:
            text (str): The message.
            category (LogCategory): The category of the entry.
            is_critical (bool): Whether to highlight the entry.
            timestamp (float | None): Milliseconds, the clock if None.

        Returns:
            LogEntry: The recorded entry.

        """
        entry = LogEntry(
            text=text,
            category=category,
            timestamp=self.clock() if timestamp is None else timestamp,
            is_critical=is_critical,
        )
        self.extend([entry])
        return entry

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """Records several entries at once."""
        with self._lock:
            self._pending.extend(entries)
            if self._depth == 0:
                self.flush()

    @contextmanager
    def batch(self) -> Iterator["EventLog"]:
        """Coalesces every write made inside the block into one append."""
        with self._lock:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self.flush()

    def flush(self) -> list[LogEntry]:
        """
        Commits the pending entries.

        Returns:
            list[LogEntry]: The committed entries, in order.

        """
        with self._lock:
            if not self._pending:
                return []
            committed = sorted(self._pending, key=lambda entry: entry.timestamp)
            self._pending = []
            self._entries.extend(committed)
            # Subscribers run under the lock so batches reach them in commit order.
            for callback in list(self._subscribers):
                callback(committed)
            return committed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._pending = []
