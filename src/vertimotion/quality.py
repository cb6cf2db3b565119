"""Per-sample movement feedback against the active target.

Feedback class and accuracy come from ``validate_movement``; the
speed/precision/stability metrics are advisory (UI coloring) and never
affect direction events or scoring.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import Deque, Optional, Tuple

import numpy as np

from vertimotion.config import EstimatorConfig
from vertimotion.types import (
    NS_PER_SECOND,
    Direction,
    FeedbackUpdate,
    MovementFeedback,
    MovementMetrics,
    MovementQuality,
    OrientationSample,
)

logger = logging.getLogger(__name__)

# Heading of an ideal movement in degrees, measured as atan2(pitch, -yaw):
# right = 0, up = 90, left = 180, down = -90.
IDEAL_HEADING_DEG = {
    Direction.UP: 90.0,
    Direction.DOWN: -90.0,
    Direction.LEFT: 180.0,
    Direction.RIGHT: 0.0,
}

# Overall score cut-offs, highest first
_QUALITY_TIERS = (
    (90.0, MovementQuality.EXCELLENT),
    (70.0, MovementQuality.GOOD),
    (50.0, MovementQuality.NEEDS_WORK),
)


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def validate_movement(
    pitch_deg: float,
    yaw_deg: float,
    target: Direction,
    correct_threshold_deg: float,
    warning_threshold_deg: float,
) -> Tuple[MovementFeedback, float]:
    """Classify a single orientation against a target direction.

    The relevant angle is pitch for UP/DOWN and yaw for LEFT/RIGHT. If the
    relevant axis is not the dominant one the movement is INCORRECT.

    Returns:
        (feedback, accuracy) with accuracy in [0, 100].
    """
    if target.is_vertical:
        angle, other = pitch_deg, yaw_deg
    else:
        angle, other = yaw_deg, pitch_deg

    if not abs(angle) > abs(other):
        return MovementFeedback.INCORRECT, 0.0

    magnitude = abs(angle)
    accuracy = _clamp((1.0 - magnitude / correct_threshold_deg) * 100.0)

    if magnitude <= correct_threshold_deg:
        return MovementFeedback.CORRECT, accuracy
    if magnitude <= warning_threshold_deg:
        return MovementFeedback.BORDERLINE, accuracy
    return MovementFeedback.INCORRECT, accuracy


def heading_deg(pitch_deg: float, yaw_deg: float) -> float:
    """Movement heading in degrees, on the same axes as IDEAL_HEADING_DEG."""
    return math.degrees(math.atan2(pitch_deg, -yaw_deg))


def angular_difference_deg(a: float, b: float) -> float:
    """Smallest absolute difference between two headings, in [0, 180]."""
    diff = abs(a - b) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def quality_tier(score: float) -> MovementQuality:
    for cutoff, tier in _QUALITY_TIERS:
        if score >= cutoff:
            return tier
    return MovementQuality.INCORRECT


class MovementQualityEstimator:
    """Produces a FeedbackUpdate for every sample.

    Keeps a bounded window of recent valid samples to estimate angular
    speed.

    Args:
        config: Feedback thresholds (default: EstimatorConfig()).
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        self._config = config or EstimatorConfig()
        self._history: Deque[OrientationSample] = deque(maxlen=self._config.history_size)

    @property
    def config(self) -> EstimatorConfig:
        return self._config

    def reset(self) -> None:
        self._history.clear()

    def estimate(
        self,
        sample: OrientationSample,
        target: Optional[Direction],
        prior: Optional[OrientationSample] = None,
    ) -> FeedbackUpdate:
        """Evaluate one sample against the active target.

        Args:
            sample: Orientation sample in the HEAD_MOTION convention.
            target: Active target, or None before the first target.
            prior: Previous sample, used to seed the speed window when the
                estimator has no history yet.

        Returns:
            FeedbackUpdate. NONE with accuracy 0 when there is no target or
            the sample is invalid.
        """
        if target is None or not sample.is_valid:
            return FeedbackUpdate(
                feedback=MovementFeedback.NONE,
                accuracy=0.0,
                target=target,
                t_ns=sample.t_ns,
            )

        cfg = self._config
        feedback, accuracy = validate_movement(
            sample.pitch_deg,
            sample.yaw_deg,
            target,
            cfg.correct_threshold_deg,
            cfg.warning_threshold_deg,
        )

        if not self._history and prior is not None and prior.is_valid:
            self._history.append(prior)
        interval_sec = self._interval_since_last(sample)
        self._history.append(sample)

        metrics = self._compute_metrics(sample, target, interval_sec)
        looking_away = (
            abs(sample.pitch_deg) > cfg.away_threshold_deg
            or abs(sample.yaw_deg) > cfg.away_threshold_deg
        )

        return FeedbackUpdate(
            feedback=feedback,
            accuracy=accuracy,
            target=target,
            t_ns=sample.t_ns,
            metrics=metrics,
            looking_away=looking_away,
        )

    def _interval_since_last(self, sample: OrientationSample) -> float:
        if not self._history:
            return 0.0
        return max(0, sample.t_ns - self._history[-1].t_ns) / NS_PER_SECOND

    def _speed(self) -> float:
        """Mean angular speed (deg/s) over the window."""
        if len(self._history) < 2:
            return 0.0

        pitch = np.array([s.pitch_deg for s in self._history], dtype=np.float64)
        yaw = np.array([s.yaw_deg for s in self._history], dtype=np.float64)
        t = np.array([s.t_ns for s in self._history], dtype=np.int64)

        dt = np.diff(t) / NS_PER_SECOND
        step = np.hypot(np.diff(pitch), np.diff(yaw))
        valid = dt > 0
        if not np.any(valid):
            return 0.0
        return float(np.mean(step[valid] / dt[valid]))

    def _stability(self, speed: float) -> float:
        lo = self._config.min_ideal_speed
        hi = self._config.max_ideal_speed
        if speed < lo:
            return _clamp(speed / lo * 100.0)
        if speed > hi:
            return _clamp(100.0 - (speed - hi) / hi * 100.0)
        return 100.0

    def _compute_metrics(
        self,
        sample: OrientationSample,
        target: Direction,
        interval_sec: float,
    ) -> MovementMetrics:
        speed = self._speed()
        diff = angular_difference_deg(
            heading_deg(sample.pitch_deg, sample.yaw_deg),
            IDEAL_HEADING_DEG[target],
        )
        precision = _clamp(100.0 - diff * 5.0)
        stability = self._stability(speed)
        quality = quality_tier((precision + stability) / 2.0)

        return MovementMetrics(
            speed_deg_per_sec=speed,
            precision=precision,
            stability=stability,
            interval_sec=interval_sec,
            quality=quality,
        )


__all__ = [
    "IDEAL_HEADING_DEG",
    "validate_movement",
    "heading_deg",
    "angular_difference_deg",
    "quality_tier",
    "MovementQualityEstimator",
]
