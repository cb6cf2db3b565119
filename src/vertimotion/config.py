"""Configuration classes for classification and exercise sessions.

Example:
    >>> from vertimotion.config import ClassifierConfig, SessionConfig
    >>> from vertimotion.types import Pattern
    >>>
    >>> classifier = ClassifierConfig(correct_threshold_deg=12.0)
    >>> session = SessionConfig(
    ...     speed_level=2,
    ...     pattern=Pattern.COMBINED,
    ...     duration_sec=30,
    ... )
    >>> session.validate()
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from vertimotion.errors import SessionConfigError
from vertimotion.types import Pattern, TargetPolicy

DURATION_PRESETS_SEC = (30, 60)

# Index = speed level
SPEED_LABELS = ("Xt. Slow", "Slow", "Medium", "Fast", "Xt. Fast")
MIN_SPEED_LEVEL = 0
MAX_SPEED_LEVEL = 4

MIN_DIZZINESS = 1
MAX_DIZZINESS = 10


@dataclass
class ClassifierConfig:
    """Thresholds for direction classification.

    Attributes:
        center_threshold_deg: Both angles below this = head centered.
        correct_threshold_deg: Dominant angle beyond this confirms a movement.
        center_hold_sec: Time the head must stay centered before a new
            movement can be detected.
        max_abs_angle_deg: Samples with either angle beyond this are rejected
            as tracker glitches.
    """

    center_threshold_deg: float = 4.0
    correct_threshold_deg: float = 5.0
    center_hold_sec: float = 0.3
    max_abs_angle_deg: float = 180.0

    def __post_init__(self) -> None:
        if self.center_threshold_deg <= 0:
            raise ValueError("center_threshold_deg must be > 0")
        if self.correct_threshold_deg < self.center_threshold_deg:
            raise ValueError(
                "correct_threshold_deg must be >= center_threshold_deg "
                f"({self.correct_threshold_deg} < {self.center_threshold_deg})"
            )
        if self.center_hold_sec < 0:
            raise ValueError("center_hold_sec must be >= 0")
        if self.max_abs_angle_deg < self.correct_threshold_deg:
            raise ValueError(
                "max_abs_angle_deg must be >= correct_threshold_deg "
                f"({self.max_abs_angle_deg} < {self.correct_threshold_deg})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClassifierConfig":
        return cls(
            center_threshold_deg=float(data.get("center_threshold_deg", 4.0)),
            correct_threshold_deg=float(data.get("correct_threshold_deg", 5.0)),
            center_hold_sec=float(data.get("center_hold_sec", 0.3)),
            max_abs_angle_deg=float(data.get("max_abs_angle_deg", 180.0)),
        )


@dataclass
class EstimatorConfig:
    """Thresholds for movement quality feedback.

    Attributes:
        correct_threshold_deg: Relevant angle within this = CORRECT.
        warning_threshold_deg: Relevant angle within this = BORDERLINE.
        away_threshold_deg: Either angle beyond this flags looking away.
        history_size: Rolling window size for speed estimation.
        min_ideal_speed: Lower bound of the ideal speed range (deg/s).
        max_ideal_speed: Upper bound of the ideal speed range (deg/s).
    """

    correct_threshold_deg: float = 5.0
    warning_threshold_deg: float = 8.0
    away_threshold_deg: float = 15.0
    history_size: int = 5
    min_ideal_speed: float = 10.0
    max_ideal_speed: float = 30.0

    def __post_init__(self) -> None:
        if self.correct_threshold_deg <= 0:
            raise ValueError("correct_threshold_deg must be > 0")
        if self.warning_threshold_deg < self.correct_threshold_deg:
            raise ValueError("warning_threshold_deg must be >= correct_threshold_deg")
        if self.history_size < 2:
            raise ValueError("history_size must be >= 2")
        if not 0 < self.min_ideal_speed <= self.max_ideal_speed:
            raise ValueError("ideal speed range must satisfy 0 < min <= max")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimatorConfig":
        return cls(
            correct_threshold_deg=float(data.get("correct_threshold_deg", 5.0)),
            warning_threshold_deg=float(data.get("warning_threshold_deg", 8.0)),
            away_threshold_deg=float(data.get("away_threshold_deg", 15.0)),
            history_size=int(data.get("history_size", 5)),
            min_ideal_speed=float(data.get("min_ideal_speed", 10.0)),
            max_ideal_speed=float(data.get("max_ideal_speed", 30.0)),
        )


@dataclass
class SessionConfig:
    """Settings consumed by SessionController.start().

    Unlike the threshold configs, SessionConfig is not validated on
    construction: start() calls validate() so that a rejected config
    leaves the controller idle.

    Attributes:
        dizziness_level: Self-reported dizziness, 1-10.
        speed_level: 0 (extra slow) to 4 (extra fast).
        pattern: Movement pattern.
        duration_sec: Session length in seconds.
        target_policy: Fixed cycle or random-excluding-current.
        seed: RNG seed for the random policy.
    """

    dizziness_level: float = 5.0
    speed_level: int = 2
    pattern: Pattern = Pattern.COMBINED
    duration_sec: int = 30
    target_policy: TargetPolicy = TargetPolicy.CYCLE
    seed: Optional[int] = None

    def validate(self) -> None:
        """Check all fields.

        Raises:
            SessionConfigError: If any field is out of range.
        """
        if not isinstance(self.pattern, Pattern):
            raise SessionConfigError(f"Unsupported pattern: {self.pattern!r}")
        if not isinstance(self.target_policy, TargetPolicy):
            raise SessionConfigError(f"Unsupported target policy: {self.target_policy!r}")
        if isinstance(self.duration_sec, bool) or not isinstance(self.duration_sec, int):
            raise SessionConfigError(
                f"duration_sec must be an integer number of seconds, got {self.duration_sec!r}"
            )
        if self.duration_sec <= 0:
            raise SessionConfigError(f"duration_sec must be > 0, got {self.duration_sec}")
        if isinstance(self.speed_level, bool) or not isinstance(self.speed_level, int):
            raise SessionConfigError(f"speed_level must be an integer, got {self.speed_level!r}")
        if not MIN_SPEED_LEVEL <= self.speed_level <= MAX_SPEED_LEVEL:
            raise SessionConfigError(
                f"speed_level must be in {MIN_SPEED_LEVEL}..{MAX_SPEED_LEVEL}, "
                f"got {self.speed_level}"
            )
        if not MIN_DIZZINESS <= self.dizziness_level <= MAX_DIZZINESS:
            raise SessionConfigError(
                f"dizziness_level must be in {MIN_DIZZINESS}..{MAX_DIZZINESS}, "
                f"got {self.dizziness_level}"
            )

    @property
    def speed_label(self) -> str:
        return SPEED_LABELS[self.speed_level]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["pattern"] = self.pattern.value
        data["target_policy"] = self.target_policy.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        """Create SessionConfig from a dictionary (e.g., loaded from JSON).

        Pattern accepts enum values or setup labels ("Up & Down", ...).

        Raises:
            SessionConfigError: If the pattern or policy is unknown.
        """
        try:
            pattern = Pattern.from_label(str(data.get("pattern", "combined")))
            policy = TargetPolicy(str(data.get("target_policy", "cycle")).lower())
        except ValueError as e:
            raise SessionConfigError(str(e)) from e

        seed = data.get("seed")
        return cls(
            dizziness_level=float(data.get("dizziness_level", 5.0)),
            speed_level=int(data.get("speed_level", 2)),
            pattern=pattern,
            duration_sec=int(data.get("duration_sec", 30)),
            target_policy=policy,
            seed=int(seed) if seed is not None else None,
        )


__all__ = [
    "DURATION_PRESETS_SEC",
    "SPEED_LABELS",
    "ClassifierConfig",
    "EstimatorConfig",
    "SessionConfig",
]
