"""Destinations for completed exercise sessions."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Protocol, runtime_checkable

from vertimotion.types import ExerciseSession

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionSink(Protocol):
    """Receives each completed session exactly once."""

    def save(self, session: ExerciseSession) -> None:
        ...


class MemorySessionSink:
    """Keeps saved sessions in memory, oldest first."""

    def __init__(self):
        self._sessions: List[ExerciseSession] = []
        self._lock = threading.Lock()

    def save(self, session: ExerciseSession) -> None:
        with self._lock:
            self._sessions.append(session)
        logger.debug(
            "Saved session: score=%d/%d, %ds",
            session.score, session.total_targets, session.duration_sec,
        )

    @property
    def sessions(self) -> List[ExerciseSession]:
        with self._lock:
            return list(self._sessions)

    @property
    def last(self) -> Optional[ExerciseSession]:
        with self._lock:
            return self._sessions[-1] if self._sessions else None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["SessionSink", "MemorySessionSink"]
