"""In-process ring buffer of recent log records.

The dashboard context attaches one buffer to the package logger so a
diagnostics panel can show what the chart engine decided recently (empty
states, ignored selections, recovered config errors).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
from typing import Deque, List, Optional

__all__ = ["LogEntry", "LogBuffer"]


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float

    @property
    def levelno(self) -> int:
        return logging.getLevelName(self.level) if self.level else logging.NOTSET

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEntry":
        return cls(record.levelname, record.name, record.getMessage(), record.created)


class _Capture(logging.Handler):
    def __init__(self, sink: Deque[LogEntry]) -> None:
        super().__init__(level=logging.DEBUG)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        self.sink.append(LogEntry.from_record(record))


class LogBuffer:
    """Keeps the last ``capacity`` records of one logger tree."""

    def __init__(self, capacity: int = 500, *, logger_name: str = "incident_charts") -> None:
        self.capacity = capacity
        self.logger_name = logger_name
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._capture = _Capture(self._entries)
        self._saved_level: Optional[int] = None

    @property
    def attached(self) -> bool:
        return self._capture in logging.getLogger(self.logger_name).handlers

    def attach(self) -> None:
        """Install on the package logger, opening it up to DEBUG records.

        The logger's own level is restored by ``detach``.
        """
        logger = logging.getLogger(self.logger_name)
        if self._capture in logger.handlers:
            return
        logger.addHandler(self._capture)
        if logger.getEffectiveLevel() > logging.DEBUG:
            self._saved_level = logger.level
            logger.setLevel(logging.DEBUG)

    def detach(self) -> None:
        logger = logging.getLogger(self.logger_name)
        if self._capture not in logger.handlers:
            return
        logger.removeHandler(self._capture)
        if self._saved_level is not None:
            logger.setLevel(self._saved_level)
            self._saved_level = None

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        entries = list(self._entries)
        if limit is None:
            return entries
        return entries[-limit:] if limit > 0 else []

    def filter(
        self,
        *,
        level: str | None = None,
        name_contains: str | None = None,
        min_level: int | None = None,
    ) -> List[LogEntry]:
        """Entries matching an exact level name, a logger substring and a level floor.

        Each criterion left as ``None`` matches everything.
        """
        return [
            e
            for e in self._entries
            if (not level or e.level == level)
            and (not name_contains or name_contains in e.name)
            and (min_level is None or e.levelno >= min_level)
        ]

    def clear(self) -> None:
        self._entries.clear()
