"""Target direction sequencing."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import numpy as np

from vertimotion.config import MAX_SPEED_LEVEL, MIN_SPEED_LEVEL
from vertimotion.types import Direction, Pattern, TargetPolicy, TargetStep

logger = logging.getLogger(__name__)

PATTERN_CYCLES: Dict[Pattern, Tuple[Direction, ...]] = {
    Pattern.VERTICAL: (Direction.UP, Direction.DOWN, Direction.UP, Direction.DOWN),
    Pattern.HORIZONTAL: (Direction.LEFT, Direction.RIGHT, Direction.LEFT, Direction.RIGHT),
    Pattern.COMBINED: (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT),
}

# Seconds each target stays active, by speed level
SPEED_DWELL_SEC: Dict[int, float] = {0: 3.0, 1: 2.0, 2: 1.5, 3: 1.0, 4: 0.5}


class DirectionSequencer:
    """Yields the next target direction for a pattern.

    Args:
        pattern: Movement pattern.
        speed_level: 0 (extra slow) to 4 (extra fast).
        policy: CYCLE walks the pattern's fixed cycle; RANDOM picks
            uniformly among the pattern's directions, never repeating the
            current one.
        seed: Seed for the RANDOM policy.

    Raises:
        ValueError: If the pattern, policy or speed level is unsupported.
    """

    def __init__(
        self,
        pattern: Pattern,
        speed_level: int,
        policy: TargetPolicy = TargetPolicy.CYCLE,
        seed: Optional[int] = None,
    ):
        if pattern not in PATTERN_CYCLES:
            raise ValueError(f"Unsupported pattern: {pattern!r}")
        if not isinstance(policy, TargetPolicy):
            raise ValueError(f"Unsupported target policy: {policy!r}")
        if speed_level not in SPEED_DWELL_SEC:
            raise ValueError(
                f"speed_level must be in {MIN_SPEED_LEVEL}..{MAX_SPEED_LEVEL}, got {speed_level}"
            )

        self._pattern = pattern
        self._speed_level = speed_level
        self._policy = policy
        self._seed = seed
        self._cycle = PATTERN_CYCLES[pattern]
        # Distinct directions in cycle order
        self._choices = tuple(dict.fromkeys(self._cycle))
        self.reset()

    def reset(self) -> None:
        """Restart the cycle and reseed the random generator."""
        self._index = 0
        self._current: Optional[Direction] = None
        self._rng = np.random.default_rng(self._seed)

    @property
    def pattern(self) -> Pattern:
        return self._pattern

    @property
    def policy(self) -> TargetPolicy:
        return self._policy

    @property
    def cycle(self) -> Tuple[Direction, ...]:
        return self._cycle

    @property
    def current(self) -> Optional[Direction]:
        """Most recently returned direction."""
        return self._current

    @property
    def dwell_sec(self) -> float:
        return SPEED_DWELL_SEC[self._speed_level]

    def dwell_duration(self) -> float:
        """Seconds each target stays active at this speed level."""
        return self.dwell_sec

    def next(self) -> Direction:
        if self._policy is TargetPolicy.CYCLE:
            direction = self._cycle[self._index]
            self._index = (self._index + 1) % len(self._cycle)
        else:
            candidates = [d for d in self._choices if d is not self._current]
            direction = candidates[int(self._rng.integers(len(candidates)))]

        self._current = direction
        logger.debug("Next target: %s", direction.value)
        return direction

    def next_step(self) -> TargetStep:
        return TargetStep(direction=self.next(), dwell_sec=self.dwell_sec)


__all__ = ["PATTERN_CYCLES", "SPEED_DWELL_SEC", "DirectionSequencer"]
