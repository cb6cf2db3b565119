"""Exercise session state machine.

    IDLE ──start──► RUNNING ◄──resume── PAUSED
                      │  └────pause────►  │
                      │                   │
                      └──stop / timeout──►┴──stop──► FINISHED

The controller owns one classifier, one estimator and one sequencer per
session. Sensor samples, the 1 Hz tick and the target timer may arrive on
different threads; every public entry point takes the same re-entrant lock
and re-checks the state under it, so a late callback after stop() is a
no-op.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from vertimotion.classifier import DirectionClassifier
from vertimotion.config import ClassifierConfig, EstimatorConfig, SessionConfig
from vertimotion.errors import SessionStateError
from vertimotion.observability import (
    FeedbackRecord,
    ObservabilityHub,
    SampleRejectedRecord,
    SessionStateRecord,
    SessionSummaryRecord,
    TargetChangeRecord,
)
from vertimotion.quality import MovementQualityEstimator
from vertimotion.sequencer import DirectionSequencer
from vertimotion.sinks import SessionSink
from vertimotion.types import (
    NS_PER_SECOND,
    Direction,
    ExerciseSession,
    FeedbackUpdate,
    Movement,
    OrientationSample,
    SessionState,
    SignConvention,
    TargetStep,
)

logger = logging.getLogger(__name__)

DirectionCallback = Callable[[Direction], None]
FeedbackCallback = Callable[[FeedbackUpdate], None]
TargetCallback = Callable[[TargetStep], None]
FinishedCallback = Callable[[ExerciseSession], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _resolve_t_ns(t_ns: Optional[int]) -> int:
    return time.monotonic_ns() if t_ns is None else int(t_ns)


class SessionController:
    """Runs one exercise session from start to finish.

    Args:
        classifier_config: Thresholds for direction classification.
        estimator_config: Thresholds for movement feedback.
        sink: Receives the completed ExerciseSession.
        on_direction_changed: Called with every detected direction.
        on_feedback_updated: Called with feedback for every processed sample.
        on_target_changed: Called whenever a new target becomes active.
        on_session_finished: Called once with the completed session.
        hub: Observability hub for trace records.
        clock: Wall clock used to stamp the session (default: UTC now).

    Example:
        >>> controller = SessionController(sink=MemorySessionSink())
        >>> controller.start(SessionConfig(duration_sec=30), t_ns=0)
        >>> controller.deliver_sample(12.0, 0.0, t_ns=200_000_000)
        >>> controller.score
        1
    """

    def __init__(
        self,
        classifier_config: Optional[ClassifierConfig] = None,
        estimator_config: Optional[EstimatorConfig] = None,
        sink: Optional[SessionSink] = None,
        on_direction_changed: Optional[DirectionCallback] = None,
        on_feedback_updated: Optional[FeedbackCallback] = None,
        on_target_changed: Optional[TargetCallback] = None,
        on_session_finished: Optional[FinishedCallback] = None,
        hub: Optional[ObservabilityHub] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._classifier_config = classifier_config or ClassifierConfig()
        self._estimator_config = estimator_config or EstimatorConfig()
        self._sink = sink
        self._hub = hub
        self._clock = clock or _utc_now

        self.on_direction_changed = on_direction_changed
        self.on_feedback_updated = on_feedback_updated
        self.on_target_changed = on_target_changed
        self.on_session_finished = on_session_finished

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._config: Optional[SessionConfig] = None
        self._session: Optional[ExerciseSession] = None

        self._classifier: Optional[DirectionClassifier] = None
        self._estimator: Optional[MovementQualityEstimator] = None
        self._sequencer: Optional[DirectionSequencer] = None

        self._score = 0
        self._movements: List[Movement] = []
        self._remaining_sec = 0
        self._target: Optional[TargetStep] = None
        self._target_appearance_ns = 0
        self._targets_presented = 0
        self._paused_at_ns: Optional[int] = None
        self._paused_total_ns = 0
        self._last_sample: Optional[OrientationSample] = None
        self._last_feedback: Optional[FeedbackUpdate] = None

        self.samples_processed = 0
        self.samples_rejected = 0
        self.samples_dropped = 0
        self.samples_ignored = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> Optional[SessionConfig]:
        return self._config

    @property
    def score(self) -> int:
        return self._score

    @property
    def movements(self) -> Tuple[Movement, ...]:
        with self._lock:
            return tuple(self._movements)

    @property
    def remaining_sec(self) -> int:
        return self._remaining_sec

    @property
    def target(self) -> Optional[Direction]:
        """Active target direction."""
        step = self._target
        return step.direction if step is not None else None

    @property
    def target_step(self) -> Optional[TargetStep]:
        return self._target

    @property
    def targets_presented(self) -> int:
        return self._targets_presented

    @property
    def paused_total_ns(self) -> int:
        """Total time spent paused in completed pauses this session."""
        return self._paused_total_ns

    @property
    def last_feedback(self) -> Optional[FeedbackUpdate]:
        return self._last_feedback

    @property
    def session(self) -> Optional[ExerciseSession]:
        """Completed session record, available once FINISHED."""
        return self._session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, config: SessionConfig, t_ns: Optional[int] = None) -> TargetStep:
        """Start a session and present the first target.

        Args:
            config: Session settings, validated here.
            t_ns: Start time (default: monotonic clock).

        Returns:
            The first target.

        Raises:
            SessionConfigError: If the config is invalid. The controller stays IDLE.
            SessionStateError: If the controller is not IDLE.
        """
        with self._lock:
            if self._state is not SessionState.IDLE:
                raise SessionStateError(f"Cannot start session in state {self._state.value}")
            try:
                config.validate()
            except ValueError as e:
                logger.warning("Rejected session config: %s", e)
                raise

            t_ns = _resolve_t_ns(t_ns)
            sequencer = DirectionSequencer(
                config.pattern,
                config.speed_level,
                policy=config.target_policy,
                seed=config.seed,
            )
            self._config = config
            self._sequencer = sequencer
            self._classifier = DirectionClassifier(self._classifier_config, hub=self._hub)
            self._estimator = MovementQualityEstimator(self._estimator_config)

            self._score = 0
            self._movements = []
            self._remaining_sec = config.duration_sec
            self._targets_presented = 0
            self._paused_at_ns = None
            self._paused_total_ns = 0
            self._last_sample = None
            self._last_feedback = None
            self.samples_processed = 0
            self.samples_rejected = 0
            self.samples_dropped = 0
            self.samples_ignored = 0

            self._set_state(SessionState.RUNNING, t_ns)
            logger.info(
                "Session started: pattern=%s speed=%s duration=%ds policy=%s",
                config.pattern.value, config.speed_label, config.duration_sec,
                config.target_policy.value,
            )
            return self._advance_target(t_ns)

    def pause(self, t_ns: Optional[int] = None) -> None:
        with self._lock:
            if self._state is not SessionState.RUNNING:
                raise SessionStateError(f"Cannot pause session in state {self._state.value}")
            t_ns = _resolve_t_ns(t_ns)
            self._paused_at_ns = t_ns
            self._set_state(SessionState.PAUSED, t_ns)
            logger.info("Session paused with %ds remaining", self._remaining_sec)

    def resume(self, t_ns: Optional[int] = None) -> None:
        """Resume a paused session.

        The active target's appearance time moves forward by the paused
        interval, so response times exclude the pause. The interval is
        also added to ``paused_total_ns`` so schedulers can shift their
        deadlines.
        """
        with self._lock:
            if self._state is not SessionState.PAUSED:
                raise SessionStateError(f"Cannot resume session in state {self._state.value}")
            t_ns = _resolve_t_ns(t_ns)
            if self._paused_at_ns is not None:
                paused_ns = max(0, t_ns - self._paused_at_ns)
                self._target_appearance_ns += paused_ns
                self._paused_total_ns += paused_ns
            self._paused_at_ns = None
            self._set_state(SessionState.RUNNING, t_ns)
            logger.info("Session resumed with %ds remaining", self._remaining_sec)

    def stop(self, t_ns: Optional[int] = None) -> ExerciseSession:
        """End the session early.

        Returns:
            The completed session.

        Raises:
            SessionStateError: If the session is not RUNNING or PAUSED.
        """
        with self._lock:
            if self._state not in (SessionState.RUNNING, SessionState.PAUSED):
                raise SessionStateError(f"Cannot stop session in state {self._state.value}")
            return self._finish(_resolve_t_ns(t_ns))

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def on_tick(self, t_ns: Optional[int] = None) -> None:
        """One second elapsed. Finishes the session when time runs out."""
        with self._lock:
            if self._state is not SessionState.RUNNING:
                logger.debug("Tick ignored in state %s", self._state.value)
                return
            self._remaining_sec = max(0, self._remaining_sec - 1)
            logger.debug("Tick: %ds remaining", self._remaining_sec)
            if self._remaining_sec == 0:
                self._finish(_resolve_t_ns(t_ns))

    def on_target_timer(self, t_ns: Optional[int] = None) -> Optional[TargetStep]:
        """The active target's dwell elapsed; present the next one."""
        with self._lock:
            if self._state is not SessionState.RUNNING:
                logger.debug("Target timer ignored in state %s", self._state.value)
                return None
            return self._advance_target(_resolve_t_ns(t_ns))

    # ------------------------------------------------------------------
    # Samples
    # ------------------------------------------------------------------

    def deliver_sample(
        self,
        pitch_deg: float,
        yaw_deg: float,
        t_ns: int,
        convention: SignConvention = SignConvention.HEAD_MOTION,
    ) -> Optional[FeedbackUpdate]:
        """Entry point for raw tracker angles."""
        return self.on_sample(OrientationSample.from_tracker(pitch_deg, yaw_deg, t_ns, convention))

    def on_sample(self, sample: OrientationSample) -> Optional[FeedbackUpdate]:
        """Process one orientation sample.

        Returns:
            The feedback for the sample, or None if it was ignored,
            rejected or dropped.
        """
        with self._lock:
            if self._state is not SessionState.RUNNING:
                self.samples_ignored += 1
                logger.debug(
                    "Sample at t=%.3fs ignored in state %s", sample.t_ns / 1e9, self._state.value,
                )
                return None

            if not sample.is_valid:
                self.samples_rejected += 1
                logger.debug("Rejected invalid sample at t=%.3fs", sample.t_ns / 1e9)
                self._emit(SampleRejectedRecord(t_ns=sample.t_ns, reason="invalid"))
                return None

            max_abs = self._classifier_config.max_abs_angle_deg
            if abs(sample.pitch_deg) > max_abs or abs(sample.yaw_deg) > max_abs:
                self.samples_rejected += 1
                logger.debug(
                    "Rejected out-of-range sample at t=%.3fs (pitch=%.1f, yaw=%.1f)",
                    sample.t_ns / 1e9, sample.pitch_deg, sample.yaw_deg,
                )
                self._emit(SampleRejectedRecord(t_ns=sample.t_ns, reason="out_of_range"))
                return None

            if self._last_sample is not None and sample.t_ns < self._last_sample.t_ns:
                self.samples_dropped += 1
                logger.debug(
                    "Dropped out-of-order sample at t=%.3fs (last t=%.3fs)",
                    sample.t_ns / 1e9, self._last_sample.t_ns / 1e9,
                )
                self._emit(SampleRejectedRecord(t_ns=sample.t_ns, reason="out_of_order"))
                return None

            target = self.target
            update = self._estimator.estimate(sample, target, prior=self._last_sample)
            event = self._classifier.classify(sample)
            self._last_sample = sample
            self._last_feedback = update
            self.samples_processed += 1

            self._emit(FeedbackRecord(
                t_ns=sample.t_ns,
                target=target.value if target else "",
                feedback=update.feedback.value,
                accuracy=update.accuracy,
                quality=update.metrics.quality.value if update.metrics else None,
            ))
            if event is not None and event.direction is target:
                self._record_hit(event.direction, event.t_ns)

            self._notify(self.on_feedback_updated, update)
            if event is not None:
                self._notify(self.on_direction_changed, event.direction)

            return update

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _record_hit(self, direction: Direction, t_ns: int) -> None:
        response_ns = max(0, t_ns - self._target_appearance_ns)
        movement = Movement(
            direction=direction,
            response_time_sec=response_ns / NS_PER_SECOND,
            t_ns=t_ns,
        )
        self._movements.append(movement)
        self._score += 1
        logger.debug(
            "Target %s hit at t=%.3fs (%.2fs), score=%d",
            direction.value, t_ns / 1e9, movement.response_time_sec, self._score,
        )

    def _advance_target(self, t_ns: int) -> TargetStep:
        step = self._sequencer.next_step()
        self._target = step
        self._target_appearance_ns = t_ns
        self._targets_presented += 1

        self._emit(TargetChangeRecord(
            t_ns=t_ns,
            direction=step.direction.value,
            dwell_sec=step.dwell_sec,
            target_index=self._targets_presented,
        ))
        self._notify(self.on_target_changed, step)
        return step

    def _finish(self, t_ns: int) -> ExerciseSession:
        config = self._config
        session = ExerciseSession(
            date=self._clock(),
            duration_sec=config.duration_sec - self._remaining_sec,
            score=self._score,
            total_targets=len(self._movements),
            movements=tuple(self._movements),
            dizziness_level=config.dizziness_level,
            targets_presented=self._targets_presented,
            pattern=config.pattern,
            speed_level=config.speed_level,
        )
        self._session = session
        self._paused_at_ns = None
        self._set_state(SessionState.FINISHED, t_ns)

        logger.info(
            "Session finished: score=%d, %d targets presented, %ds, %.1f turns/min",
            session.score, session.targets_presented, session.duration_sec,
            session.head_turns_per_minute,
        )
        self._emit(SessionSummaryRecord(
            duration_sec=session.duration_sec,
            score=session.score,
            total_targets=session.total_targets,
            targets_presented=session.targets_presented,
            accuracy=session.accuracy,
            head_turns_per_minute=session.head_turns_per_minute,
            samples_processed=self.samples_processed,
            samples_rejected=self.samples_rejected,
            samples_dropped=self.samples_dropped,
        ))

        if self._sink is not None:
            try:
                self._sink.save(session)
            except Exception:
                logger.exception("Session sink %s failed to save session", type(self._sink).__name__)
        self._notify(self.on_session_finished, session)
        return session

    def _notify(self, callback, value) -> None:
        # Callback errors are logged; session state is already committed.
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("Callback %r raised", getattr(callback, "__name__", callback))

    def _set_state(self, new_state: SessionState, t_ns: int) -> None:
        old_state = self._state
        self._state = new_state
        self._emit(SessionStateRecord(
            t_ns=t_ns,
            old_state=old_state.value,
            new_state=new_state.value,
            remaining_sec=self._remaining_sec,
        ))

    def _emit(self, record) -> None:
        if self._hub is not None and self._hub.enabled:
            self._hub.emit(record)


__all__ = ["SessionController"]
