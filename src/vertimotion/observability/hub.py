"""Trace levels and the observability hub.

The hub fans trace records out to sinks. Components receive a hub
instance from whoever constructs them; there is no process-wide hub.
"""

from __future__ import annotations

import logging
import threading
from enum import IntEnum
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from vertimotion.observability.records import TraceRecord
    from vertimotion.observability.sinks import Sink

logger = logging.getLogger(__name__)


class TraceLevel(IntEnum):
    """Tracing verbosity.

    - OFF: No tracing (default)
    - MINIMAL: Direction events and session summaries only
    - NORMAL: Lifecycle, target changes, rejected samples
    - VERBOSE: Per-sample feedback
    """

    OFF = 0
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3

    @classmethod
    def from_string(cls, value: str) -> "TraceLevel":
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown trace level: {value!r}") from None


class ObservabilityHub:
    """Routes trace records to registered sinks.

    Example:
        >>> hub = ObservabilityHub(level=TraceLevel.NORMAL)
        >>> sink = MemorySink()
        >>> hub.add_sink(sink)
        >>> if hub.enabled:
        ...     hub.emit(SessionStateRecord(old_state="idle", new_state="running"))
    """

    def __init__(self, level: TraceLevel = TraceLevel.OFF):
        self._level = level
        self._sinks: List["Sink"] = []
        self._lock = threading.Lock()

    def configure(self, level: TraceLevel) -> None:
        self._level = level

    @property
    def level(self) -> TraceLevel:
        return self._level

    @property
    def enabled(self) -> bool:
        return self._level > TraceLevel.OFF and bool(self._sinks)

    def is_level_enabled(self, level: TraceLevel) -> bool:
        return self._level >= level

    def add_sink(self, sink: "Sink") -> None:
        with self._lock:
            self._sinks.append(sink)

    def remove_sink(self, sink: "Sink") -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    @property
    def sinks(self) -> List["Sink"]:
        return list(self._sinks)

    def emit(self, record: "TraceRecord") -> None:
        """Send a record to every sink if its level is enabled.

        A failing sink is logged and skipped so tracing never breaks the
        session it observes.
        """
        if not self.enabled or not self.is_level_enabled(record.min_level):
            return
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink.write(record)
            except Exception as e:
                logger.warning("Trace sink %s failed: %s", type(sink).__name__, e)

    def shutdown(self) -> None:
        """Flush and close all sinks."""
        with self._lock:
            sinks = list(self._sinks)
            self._sinks.clear()
        for sink in sinks:
            sink.close()


__all__ = ["TraceLevel", "ObservabilityHub"]
