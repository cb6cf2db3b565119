"""Trace output sinks for observability.

Sinks receive trace records and handle their output to various destinations:
- FileSink: JSONL file output
- ConsoleSink: Formatted console output
- MemorySink: In-memory buffer for testing/analysis
- NullSink: Discards everything
"""

from __future__ import annotations

import json
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, TextIO, Type, TypeVar, Union

from vertimotion.observability.records import (
    CenterArmedRecord,
    DirectionEventRecord,
    SampleRejectedRecord,
    SessionStateRecord,
    SessionSummaryRecord,
    TargetChangeRecord,
    TraceRecord,
)

R = TypeVar("R", bound=TraceRecord)

_COLORS = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
}
_RESET = "\033[0m"


class Sink(ABC):
    """Destination for trace records."""

    @abstractmethod
    def write(self, record: TraceRecord) -> None:
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class NullSink(Sink):
    """Sink that discards all records."""

    def write(self, record: TraceRecord) -> None:
        pass


class MemorySink(Sink):
    """Keeps records in memory, optionally bounded.

    Args:
        max_records: Oldest records are dropped beyond this (None = unbounded).
    """

    def __init__(self, max_records: Optional[int] = None):
        self._max_records = max_records
        self._records: List[TraceRecord] = []
        self._lock = threading.Lock()

    def write(self, record: TraceRecord) -> None:
        with self._lock:
            self._records.append(record)
            if self._max_records is not None and len(self._records) > self._max_records:
                del self._records[0]

    def get_records(self) -> List[TraceRecord]:
        with self._lock:
            return list(self._records)

    def get_records_of(self, record_cls: Type[R]) -> List[R]:
        return [r for r in self.get_records() if isinstance(r, record_cls)]

    def get_direction_events(self) -> List[DirectionEventRecord]:
        """Get all direction event records."""
        return self.get_records_of(DirectionEventRecord)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class FileSink(Sink):
    """Appends records to a JSONL file, one record per line.

    Args:
        path: Output file path. Parent directories are created.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[TextIO] = open(self._path, "a", encoding="utf-8")
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: TraceRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        with self._lock:
            if self._file is None:
                return
            self._file.write(line + "\n")

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()
                self._file.close()
                self._file = None


class ConsoleSink(Sink):
    """Prints a one-line summary for the record types worth reading live.

    Args:
        stream: Output stream (default: stderr).
        color: Use ANSI colors.
    """

    def __init__(self, stream: Optional[TextIO] = None, color: bool = True):
        self._stream = stream or sys.stderr
        self._color = color

    def _colorize(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{_COLORS.get(color, '')}{text}{_RESET}"

    def write(self, record: TraceRecord) -> None:
        line = self._format_record(record)
        if line is not None:
            print(line, file=self._stream)

    def flush(self) -> None:
        self._stream.flush()

    def _format_record(self, record: TraceRecord) -> Optional[str]:
        """Format a record for console output.

        Returns:
            Formatted string or None to skip output.
        """
        if isinstance(record, DirectionEventRecord):
            tag = self._colorize("[MOVE]", "green")
            return (
                f"{tag} t={record.t_ns / 1e9:.3f}s {record.direction} "
                f"(pitch={record.pitch_deg:.1f} yaw={record.yaw_deg:.1f})"
            )
        elif isinstance(record, CenterArmedRecord):
            tag = self._colorize("[CENTER]", "blue")
            return (
                f"{tag} t={record.t_ns / 1e9:.3f}s re-armed after "
                f"{record.previous_direction} ({record.held_ns / 1e6:.0f}ms)"
            )
        elif isinstance(record, TargetChangeRecord):
            tag = self._colorize("[TARGET]", "cyan")
            return (
                f"{tag} t={record.t_ns / 1e9:.3f}s #{record.target_index} "
                f"{record.direction} for {record.dwell_sec:.1f}s"
            )
        elif isinstance(record, SessionStateRecord):
            tag = self._colorize("[SESSION]", "magenta")
            return f"{tag} {record.old_state} -> {record.new_state} ({record.remaining_sec}s left)"
        elif isinstance(record, SampleRejectedRecord):
            tag = self._colorize("[DROP]", "yellow")
            return f"{tag} t={record.t_ns / 1e9:.3f}s {record.reason}"
        elif isinstance(record, SessionSummaryRecord):
            return self._format_summary(record)
        return None

    def _format_summary(self, record: SessionSummaryRecord) -> str:
        sep = "=" * 40
        lines = [
            sep,
            "Session Summary",
            sep,
            f"  Duration:   {record.duration_sec}s",
            f"  Score:      {record.score}/{record.total_targets} "
            f"({record.targets_presented} targets shown)",
            f"  Accuracy:   {record.accuracy:.0f}%",
            f"  Turns/min:  {record.head_turns_per_minute:.1f}",
            f"  Samples:    {record.samples_processed} processed, "
            f"{record.samples_rejected} rejected, {record.samples_dropped} dropped",
            sep,
        ]
        return "\n".join(lines)


__all__ = [
    "Sink",
    "NullSink",
    "MemorySink",
    "FileSink",
    "ConsoleSink",
]
