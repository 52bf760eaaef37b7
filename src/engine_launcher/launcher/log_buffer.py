"""Bounded, thread-safe buffer of output lines for display."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINES = 500


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class LogLine:
    message: str
    is_error: bool = False
    timestamp: datetime = field(default_factory=_utc_now)


LogSubscriber = Callable[[LogLine], None]


class LogBuffer:
    """Keeps the most recent ``max_lines`` lines; older lines are discarded.

    Appends may come from any thread. Subscribers are called outside the lock,
    in append order per appending thread.
    """

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES) -> None:
        if max_lines < 1:
            raise ValueError("max_lines must be >= 1")
        self._lines: deque[LogLine] = deque(maxlen=max_lines)
        self._lock = threading.Lock()
        self._subscribers: list[LogSubscriber] = []

    @property
    def max_lines(self) -> int:
        return self._lines.maxlen or DEFAULT_MAX_LINES

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def append(self, message: str, is_error: bool = False) -> LogLine:
        line = LogLine(message=message, is_error=is_error)
        with self._lock:
            self._lines.append(line)
            subscribers = list(self._subscribers)

        logger.debug(
            "Output line",
            extra={"line": message, "is_error": is_error},
        )
        for callback in subscribers:
            try:
                callback(line)
            except Exception:
                logger.exception("Log subscriber failed")
        return line

    def snapshot(self, limit: int | None = None) -> list[LogLine]:
        """Return buffered lines oldest first; ``limit`` keeps only the newest."""

        with self._lock:
            lines = list(self._lines)
        if limit is not None:
            if limit <= 0:
                return []
            lines = lines[-limit:]
        return lines

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def subscribe(self, callback: LogSubscriber) -> Callable[[], None]:
        """Register ``callback`` for new lines; returns an unsubscribe function."""

        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def as_sink(self) -> Callable[[str, bool], None]:
        def sink(message: str, is_error: bool) -> None:
            self.append(message, is_error)

        return sink
