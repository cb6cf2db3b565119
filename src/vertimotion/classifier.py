"""Direction classification from head orientation samples.

Turns a noisy pitch/yaw stream into debounced direction events using a
center zone with dwell-time hysteresis:

    CENTER (armed) ──excursion beyond threshold──► EVENT ──► LATCHED
       ▲                                                        │
       └──────── centered for >= center_hold_sec ◄──────────────┘

At most one event is emitted per excursion from the center zone. The head
must return to center and stay there for ``center_hold_sec`` before the
next movement (same or different direction) can be detected.
"""

from __future__ import annotations

import logging
from typing import Optional

from vertimotion.config import ClassifierConfig
from vertimotion.observability import (
    CenterArmedRecord,
    DirectionEventRecord,
    ObservabilityHub,
    SampleRejectedRecord,
)
from vertimotion.types import NS_PER_SECOND, Direction, DirectionEvent, OrientationSample

logger = logging.getLogger(__name__)


def dominant_direction(sample: OrientationSample, threshold_deg: float) -> Optional[Direction]:
    """Map a sample's dominant axis to a direction if it clears the threshold.

    Pitch dominates only when strictly larger than yaw; ties go to yaw.

    Args:
        sample: Sample in the HEAD_MOTION convention.
        threshold_deg: Magnitude the dominant angle must exceed.

    Returns:
        Direction, or None if the dominant angle is within the threshold.
    """
    if sample.is_vertical_dominant:
        if sample.pitch_deg > threshold_deg:
            return Direction.UP
        if sample.pitch_deg < -threshold_deg:
            return Direction.DOWN
        return None

    if sample.yaw_deg > threshold_deg:
        return Direction.LEFT
    if sample.yaw_deg < -threshold_deg:
        return Direction.RIGHT
    return None


class DirectionClassifier:
    """Stateful filter from orientation samples to direction events.

    Samples must arrive in non-decreasing time order; the session
    controller drops out-of-order samples before they get here.

    Args:
        config: Classification thresholds (default: ClassifierConfig()).
        hub: Optional observability hub for trace records.

    Example:
        >>> classifier = DirectionClassifier()
        >>> event = classifier.classify(OrientationSample(8.0, 1.0, t_ns))
        >>> if event:
        ...     print(event.direction)
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        hub: Optional[ObservabilityHub] = None,
    ):
        self._config = config or ClassifierConfig()
        self._hub = hub

        self._center_threshold = self._config.center_threshold_deg
        self._correct_threshold = self._config.correct_threshold_deg
        self._max_abs_angle = self._config.max_abs_angle_deg
        self._center_hold_ns = int(self._config.center_hold_sec * NS_PER_SECOND)

        self.rejected_count = 0
        self.reset()

    def reset(self) -> None:
        """Clear filter state. The next excursion will be reported."""
        self._last_direction: Optional[Direction] = None
        self._center_entry_ns: Optional[int] = None

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    @property
    def last_direction(self) -> Optional[Direction]:
        """Direction of the current excursion, None once re-armed."""
        return self._last_direction

    @property
    def is_armed(self) -> bool:
        return self._last_direction is None

    @property
    def is_centered(self) -> bool:
        return self._center_entry_ns is not None

    def is_center(self, sample: OrientationSample) -> bool:
        return (
            abs(sample.pitch_deg) < self._center_threshold
            and abs(sample.yaw_deg) < self._center_threshold
        )

    def classify(self, sample: OrientationSample) -> Optional[DirectionEvent]:
        """Process one sample.

        Args:
            sample: Orientation sample in the HEAD_MOTION convention.

        Returns:
            DirectionEvent for the first qualifying sample of an excursion,
            None otherwise (including invalid samples and out-of-range samples).
        """
        if not sample.is_valid:
            self.rejected_count += 1
            logger.debug(
                "Rejected invalid sample at t=%.3fs (pitch=%s, yaw=%s)",
                sample.t_ns / 1e9, sample.pitch_deg, sample.yaw_deg,
            )
            if self._hub is not None and self._hub.enabled:
                self._hub.emit(SampleRejectedRecord(t_ns=sample.t_ns, reason="invalid"))
            return None

        if abs(sample.pitch_deg) > self._max_abs_angle or abs(sample.yaw_deg) > self._max_abs_angle:
            self.rejected_count += 1
            logger.debug(
                "Rejected out-of-range sample at t=%.3fs (pitch=%.1f, yaw=%.1f)",
                sample.t_ns / 1e9, sample.pitch_deg, sample.yaw_deg,
            )
            if self._hub is not None and self._hub.enabled:
                self._hub.emit(SampleRejectedRecord(t_ns=sample.t_ns, reason="out_of_range"))
            return None

        t_ns = sample.t_ns

        if self.is_center(sample):
            self._update_center(t_ns)
            return None

        # Excursion
        self._center_entry_ns = None

        if self._last_direction is not None:
            # Already reported this excursion
            return None

        direction = dominant_direction(sample, self._correct_threshold)
        if direction is None:
            return None

        self._last_direction = direction
        logger.debug(
            "%s detected at t=%.3fs (pitch=%.1f, yaw=%.1f)",
            direction.value, t_ns / 1e9, sample.pitch_deg, sample.yaw_deg,
        )
        if self._hub is not None and self._hub.enabled:
            self._hub.emit(DirectionEventRecord(
                t_ns=t_ns,
                direction=direction.value,
                pitch_deg=sample.pitch_deg,
                yaw_deg=sample.yaw_deg,
            ))
        return DirectionEvent(direction=direction, t_ns=t_ns)

    def _update_center(self, t_ns: int) -> None:
        """Track center dwell and re-arm once held long enough."""
        if self._center_entry_ns is None:
            self._center_entry_ns = t_ns

        held_ns = t_ns - self._center_entry_ns
        if held_ns < self._center_hold_ns or self._last_direction is None:
            return

        previous = self._last_direction
        self._last_direction = None
        logger.debug("Center confirmed at t=%.3fs, detection re-armed", t_ns / 1e9)
        if self._hub is not None and self._hub.enabled:
            self._hub.emit(CenterArmedRecord(
                t_ns=t_ns,
                previous_direction=previous.value,
                held_ns=held_ns,
            ))


__all__ = ["DirectionClassifier", "dominant_direction"]
