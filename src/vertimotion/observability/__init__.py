"""Observability system for vertimotion.

Provides tracing infrastructure to follow:
- Direction events and center re-arming
- Rejected or out-of-order samples
- Target changes and lifecycle transitions
- Per-sample feedback (verbose)

Trace Levels:
- OFF: No tracing (production default)
- MINIMAL: Direction events and session summaries
- NORMAL: + lifecycle, targets, rejected samples
- VERBOSE: + per-sample feedback

Example:
    >>> from vertimotion.observability import ObservabilityHub, TraceLevel, FileSink
    >>> hub = ObservabilityHub(level=TraceLevel.NORMAL)
    >>> hub.add_sink(FileSink("/tmp/trace.jsonl"))
    >>> controller = SessionController(hub=hub)
"""

from vertimotion.observability.hub import ObservabilityHub, TraceLevel
from vertimotion.observability.records import (
    CenterArmedRecord,
    DirectionEventRecord,
    FeedbackRecord,
    SampleRejectedRecord,
    SessionStateRecord,
    SessionSummaryRecord,
    TargetChangeRecord,
    TraceRecord,
)
from vertimotion.observability.sinks import (
    ConsoleSink,
    FileSink,
    MemorySink,
    NullSink,
    Sink,
)

__all__ = [
    # Core
    "TraceLevel",
    "ObservabilityHub",
    # Records
    "TraceRecord",
    "DirectionEventRecord",
    "CenterArmedRecord",
    "SampleRejectedRecord",
    "FeedbackRecord",
    "TargetChangeRecord",
    "SessionStateRecord",
    "SessionSummaryRecord",
    # Sinks
    "Sink",
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "NullSink",
]
