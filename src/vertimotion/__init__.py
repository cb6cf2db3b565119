"""vertimotion - Head-movement exercise engine for vestibular rehabilitation.

Turns a stream of head pitch/yaw samples into debounced direction events,
scores them against a sequence of target directions, and produces an
exercise session summary.

Quick Start:
    >>> from vertimotion import SessionController, SessionConfig, MemorySessionSink
    >>> sink = MemorySessionSink()
    >>> controller = SessionController(sink=sink)
    >>> controller.start(SessionConfig(duration_sec=30), t_ns=0)
    >>> controller.deliver_sample(12.0, 0.0, t_ns=200_000_000)
    >>> controller.stop(t_ns=1_000_000_000)
    >>> print(f"Score: {sink.last.score}")
"""

from vertimotion.types import (
    NS_PER_SECOND,
    Direction,
    SignConvention,
    OrientationSample,
    DirectionEvent,
    MovementFeedback,
    MovementQuality,
    MovementMetrics,
    FeedbackUpdate,
    Movement,
    TargetStep,
    Pattern,
    TargetPolicy,
    SessionState,
    ExerciseSession,
)
from vertimotion.errors import SessionConfigError, SessionStateError
from vertimotion.config import ClassifierConfig, EstimatorConfig, SessionConfig
from vertimotion.classifier import DirectionClassifier
from vertimotion.quality import MovementQualityEstimator, validate_movement
from vertimotion.sequencer import DirectionSequencer
from vertimotion.sinks import SessionSink, MemorySessionSink
from vertimotion.session import SessionController
from vertimotion.driver import SessionDriver

__all__ = [
    # Types
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
    # Errors
    "SessionConfigError",
    "SessionStateError",
    # Config
    "ClassifierConfig",
    "EstimatorConfig",
    "SessionConfig",
    # Components
    "DirectionClassifier",
    "MovementQualityEstimator",
    "validate_movement",
    "DirectionSequencer",
    "SessionSink",
    "MemorySessionSink",
    "SessionController",
    "SessionDriver",
]
