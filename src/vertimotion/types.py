"""Core data types for head-orientation exercises.

All timestamps are integer nanoseconds on a monotonic timeline (``t_ns``).
Durations are float seconds at the API surface (``*_sec``).

Sign convention:
    Inside the engine, angles follow the HEAD_MOTION convention:
    - pitch: down(-) / up(+)
    - yaw: right(-) / left(+)
    Trackers that report a different convention are normalized once,
    in ``OrientationSample.from_tracker()``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

NS_PER_SECOND = 1_000_000_000


class Direction(Enum):
    """Head movement direction."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.UP, Direction.DOWN)


class SignConvention(Enum):
    """Pitch/yaw sign convention reported by an orientation tracker.

    HEAD_MOTION: positive pitch when the head moves up, positive yaw when
        it turns left. This is the engine's canonical convention.
    GAZE: negative pitch when the head moves up (pitch measured as the
        face normal tilting toward the camera), positive yaw to the left.
    """

    HEAD_MOTION = "head_motion"
    GAZE = "gaze"

    @classmethod
    def from_string(cls, value: str) -> "SignConvention":
        try:
            return cls(value.lower().replace("-", "_"))
        except ValueError:
            raise ValueError(
                f"Unknown sign convention: {value!r} "
                f"(expected one of {[c.value for c in cls]})"
            ) from None


@dataclass(frozen=True)
class OrientationSample:
    """A single head orientation reading.

    Attributes:
        pitch_deg: Pitch in degrees, down(-) / up(+).
        yaw_deg: Yaw in degrees, right(-) / left(+).
        t_ns: Sample timestamp in nanoseconds (monotonic).
    """

    pitch_deg: float
    yaw_deg: float
    t_ns: int

    @property
    def is_valid(self) -> bool:
        """False when either angle is NaN or infinite."""
        return math.isfinite(self.pitch_deg) and math.isfinite(self.yaw_deg)

    @property
    def is_vertical_dominant(self) -> bool:
        """True when pitch dominates. Exact ties count as horizontal."""
        return abs(self.pitch_deg) > abs(self.yaw_deg)

    @classmethod
    def from_tracker(
        cls,
        pitch_deg: float,
        yaw_deg: float,
        t_ns: int,
        convention: SignConvention = SignConvention.HEAD_MOTION,
    ) -> "OrientationSample":
        """Build a sample from raw tracker angles.

        Args:
            pitch_deg: Pitch as reported by the tracker.
            yaw_deg: Yaw as reported by the tracker.
            t_ns: Timestamp in nanoseconds.
            convention: The tracker's sign convention.

        Returns:
            Sample in the HEAD_MOTION convention.
        """
        pitch = float(pitch_deg)
        yaw = float(yaw_deg)
        if convention is SignConvention.GAZE:
            pitch = -pitch
        return cls(pitch_deg=pitch, yaw_deg=yaw, t_ns=int(t_ns))


@dataclass(frozen=True)
class DirectionEvent:
    """A debounced directional movement detected by the classifier."""

    direction: Direction
    t_ns: int


class MovementFeedback(Enum):
    """Per-sample feedback class against the current target."""

    NONE = "none"
    CORRECT = "correct"
    BORDERLINE = "borderline"
    INCORRECT = "incorrect"


class MovementQuality(Enum):
    """Advisory quality tier blended from precision and stability."""

    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_WORK = "needs_work"
    INCORRECT = "incorrect"

    @property
    def description(self) -> str:
        return _QUALITY_DESCRIPTIONS[self]


_QUALITY_DESCRIPTIONS = {
    MovementQuality.EXCELLENT: "Perfect form!",
    MovementQuality.GOOD: "Good movement",
    MovementQuality.NEEDS_WORK: "Adjust movement",
    MovementQuality.INCORRECT: "Incorrect pattern",
}


@dataclass(frozen=True)
class MovementMetrics:
    """Short-horizon smoothness/speed metrics for UI coloring.

    Attributes:
        speed_deg_per_sec: Mean angular speed over the rolling window.
        precision: 0-100, how close the movement heading is to the target's.
        stability: 0-100, how close the speed is to the ideal range.
        interval_sec: Time since the previous sample.
        quality: Overall tier.
    """

    speed_deg_per_sec: float = 0.0
    precision: float = 0.0
    stability: float = 0.0
    interval_sec: float = 0.0
    quality: MovementQuality = MovementQuality.INCORRECT


@dataclass(frozen=True)
class FeedbackUpdate:
    """Continuous feedback produced for every processed sample."""

    feedback: MovementFeedback
    accuracy: float
    target: Optional[Direction] = None
    t_ns: int = 0
    metrics: Optional[MovementMetrics] = None
    looking_away: bool = False


@dataclass(frozen=True)
class Movement:
    """A target hit recorded during a session."""

    direction: Direction
    response_time_sec: float
    t_ns: int


@dataclass(frozen=True)
class TargetStep:
    """A target direction and how long it stays active."""

    direction: Direction
    dwell_sec: float

    @property
    def dwell_ns(self) -> int:
        return int(round(self.dwell_sec * NS_PER_SECOND))


class Pattern(Enum):
    """Exercise movement pattern."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    COMBINED = "combined"

    @classmethod
    def from_label(cls, label: str) -> "Pattern":
        """Parse a pattern from an enum value or a setup-screen label.

        Accepts "vertical"/"horizontal"/"combined" (any case) as well as
        "Up & Down", "Left & Right" and "All".
        """
        key = label.strip().lower()
        if key in _PATTERN_LABELS:
            return _PATTERN_LABELS[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown pattern: {label!r}") from None


_PATTERN_LABELS = {
    "up & down": Pattern.VERTICAL,
    "left & right": Pattern.HORIZONTAL,
    "all": Pattern.COMBINED,
}


class TargetPolicy(Enum):
    """How the next target direction is chosen."""

    CYCLE = "cycle"
    RANDOM = "random"


class SessionState(Enum):
    """Exercise session lifecycle state."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


@dataclass(frozen=True)
class ExerciseSession:
    """Completed exercise session.

    Derived metrics are computed once at construction and are always
    finite: degenerate inputs (no targets, zero duration) yield 0.

    Attributes:
        date: Wall-clock time the session ended (UTC).
        duration_sec: Seconds actually exercised.
        score: Number of target hits.
        total_targets: Denominator for accuracy.
        movements: Target hits in order.
        dizziness_level: Self-reported dizziness (1-10).
        targets_presented: Number of targets shown during the session.
        pattern: Pattern the session ran with.
        speed_level: Speed level the session ran with.
        accuracy: score / total_targets * 100, clamped to [0, 100].
        head_turns_per_minute: score / (duration_sec / 60).
    """

    date: datetime
    duration_sec: int
    score: int
    total_targets: int
    movements: Tuple[Movement, ...] = ()
    dizziness_level: float = 0.0
    targets_presented: int = 0
    pattern: Optional[Pattern] = None
    speed_level: Optional[int] = None

    accuracy: float = field(default=0.0, init=False)
    head_turns_per_minute: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        for name in ("duration_sec", "score", "total_targets", "targets_presented"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

        # frozen: assign through object.__setattr__
        object.__setattr__(self, "movements", tuple(self.movements))

        accuracy = 0.0
        if self.total_targets > 0:
            accuracy = _finite_or_zero(self.score / self.total_targets * 100.0)
            accuracy = max(0.0, min(100.0, accuracy))
        object.__setattr__(self, "accuracy", accuracy)

        rate = 0.0
        minutes = self.duration_sec / 60.0
        if minutes > 0:
            rate = _finite_or_zero(self.score / minutes)
        object.__setattr__(self, "head_turns_per_minute", rate)

    @classmethod
    def now(cls, **kwargs: Any) -> "ExerciseSession":
        """Create a session stamped with the current UTC time."""
        return cls(date=datetime.now(timezone.utc), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary of the session."""
        return {
            "date": self.date.isoformat(),
            "duration_sec": self.duration_sec,
            "score": self.score,
            "total_targets": self.total_targets,
            "targets_presented": self.targets_presented,
            "dizziness_level": self.dizziness_level,
            "pattern": self.pattern.value if self.pattern else None,
            "speed_level": self.speed_level,
            "accuracy": self.accuracy,
            "head_turns_per_minute": self.head_turns_per_minute,
            "movements": [
                {
                    "direction": m.direction.value,
                    "response_time_sec": m.response_time_sec,
                    "t_ns": m.t_ns,
                }
                for m in self.movements
            ],
        }


__all__ = [
    "NS_PER_SECOND",
    "Direction",
    "SignConvention",
    "OrientationSample",
    "DirectionEvent",
    "MovementFeedback",
    "MovementQuality",
    "MovementMetrics",
    "FeedbackUpdate",
    "Movement",
    "TargetStep",
    "Pattern",
    "TargetPolicy",
    "SessionState",
    "ExerciseSession",
]
