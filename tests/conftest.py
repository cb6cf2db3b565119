"""Shared fixtures for vertimotion tests.

All orientation data is synthetic; NO tracker or camera needed.
"""

from datetime import datetime, timezone

import pytest

from vertimotion.observability import MemorySink, ObservabilityHub, TraceLevel
from vertimotion.session import SessionController
from vertimotion.sinks import MemorySessionSink
from vertimotion.types import NS_PER_SECOND, OrientationSample

FIXED_DATE = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def sec(value: float) -> int:
    """Seconds to nanoseconds."""
    return int(round(value * NS_PER_SECOND))


@pytest.fixture
def make_sample():
    """Factory fixture for orientation samples with times in seconds."""
    def _make(pitch: float = 0.0, yaw: float = 0.0, t: float = 0.0) -> OrientationSample:
        return OrientationSample(pitch_deg=pitch, yaw_deg=yaw, t_ns=sec(t))
    return _make


@pytest.fixture
def make_excursion(make_sample):
    """Factory fixture: center hold, excursion, center hold.

    Returns the list of samples, 100 ms apart, starting at ``t0``.
    """
    def _make(pitch: float, yaw: float, t0: float = 0.0, hold: int = 5, out: int = 3):
        samples = []
        t = t0
        for _ in range(hold):
            samples.append(make_sample(0.0, 0.0, t))
            t += 0.1
        for _ in range(out):
            samples.append(make_sample(pitch, yaw, t))
            t += 0.1
        for _ in range(hold):
            samples.append(make_sample(0.0, 0.0, t))
            t += 0.1
        return samples
    return _make


@pytest.fixture
def session_sink():
    return MemorySessionSink()


@pytest.fixture
def trace_sink():
    return MemorySink()


@pytest.fixture
def hub(trace_sink):
    """Hub at VERBOSE level with a memory sink attached."""
    hub = ObservabilityHub(level=TraceLevel.VERBOSE)
    hub.add_sink(trace_sink)
    return hub


@pytest.fixture
def events():
    """Recorder for controller callbacks, keyed by callback name."""
    return {"direction": [], "feedback": [], "target": [], "finished": []}


@pytest.fixture
def controller(session_sink, events):
    """Controller with default thresholds, a memory sink and recorded callbacks."""
    return SessionController(
        sink=session_sink,
        on_direction_changed=events["direction"].append,
        on_feedback_updated=events["feedback"].append,
        on_target_changed=events["target"].append,
        on_session_finished=events["finished"].append,
        clock=lambda: FIXED_DATE,
    )
