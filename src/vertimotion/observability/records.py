"""Trace records emitted by the classifier and the session controller."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from vertimotion.observability.hub import TraceLevel


@dataclass
class TraceRecord:
    """Base trace record.

    Subclasses override ``record_type`` and, where needed, ``min_level``.
    """

    record_type: str = field(default="trace", init=False)
    min_level: TraceLevel = field(default=TraceLevel.NORMAL, repr=False)
    timestamp_ns: int = field(default_factory=time.time_ns, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("min_level", None)
        return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


# =============================================================================
# Classifier Records
# =============================================================================


@dataclass
class DirectionEventRecord(TraceRecord):
    """A debounced direction event was emitted.

    Always emitted at MINIMAL level since events drive scoring.
    """
    record_type: str = field(default="direction_event", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    t_ns: int = 0
    direction: str = ""
    pitch_deg: float = 0.0
    yaw_deg: float = 0.0


@dataclass
class CenterArmedRecord(TraceRecord):
    """Head held center long enough; detection re-armed."""
    record_type: str = field(default="center_armed", init=False)

    t_ns: int = 0
    previous_direction: str = ""
    held_ns: int = 0


@dataclass
class SampleRejectedRecord(TraceRecord):
    """A sample was dropped before classification."""
    record_type: str = field(default="sample_rejected", init=False)

    t_ns: int = 0
    reason: str = ""  # "invalid", "out_of_range", "out_of_order"


# =============================================================================
# Session Records
# =============================================================================


@dataclass
class FeedbackRecord(TraceRecord):
    """Per-sample feedback (VERBOSE only)."""
    record_type: str = field(default="feedback", init=False)
    min_level: TraceLevel = field(default=TraceLevel.VERBOSE, repr=False)

    t_ns: int = 0
    target: str = ""
    feedback: str = ""
    accuracy: float = 0.0
    quality: Optional[str] = None


@dataclass
class TargetChangeRecord(TraceRecord):
    """A new target direction became active."""
    record_type: str = field(default="target_change", init=False)

    t_ns: int = 0
    direction: str = ""
    dwell_sec: float = 0.0
    target_index: int = 0


@dataclass
class SessionStateRecord(TraceRecord):
    """Lifecycle transition of the session controller."""
    record_type: str = field(default="session_state", init=False)

    t_ns: int = 0
    old_state: str = ""
    new_state: str = ""
    remaining_sec: int = 0


@dataclass
class SessionSummaryRecord(TraceRecord):
    """Final session summary. Always emitted at MINIMAL level."""
    record_type: str = field(default="session_summary", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    duration_sec: int = 0
    score: int = 0
    total_targets: int = 0
    targets_presented: int = 0
    accuracy: float = 0.0
    head_turns_per_minute: float = 0.0

    # Sample accounting
    samples_processed: int = 0
    samples_rejected: int = 0
    samples_dropped: int = 0


__all__ = [
    "TraceRecord",
    "DirectionEventRecord",
    "CenterArmedRecord",
    "SampleRejectedRecord",
    "FeedbackRecord",
    "TargetChangeRecord",
    "SessionStateRecord",
    "SessionSummaryRecord",
]
