"""Tests for the observability hub, records and sinks."""

import io
import json

import pytest

from vertimotion.observability import (
    ConsoleSink,
    DirectionEventRecord,
    FeedbackRecord,
    FileSink,
    MemorySink,
    NullSink,
    ObservabilityHub,
    SessionStateRecord,
    SessionSummaryRecord,
    Sink,
    TargetChangeRecord,
    TraceLevel,
)


class FailingSink(Sink):
    def write(self, record):
        raise IOError("disk full")


class TestTraceLevel:
    def test_from_string(self):
        assert TraceLevel.from_string("Verbose") is TraceLevel.VERBOSE

    def test_unknown(self):
        with pytest.raises(ValueError):
            TraceLevel.from_string("loud")

    def test_ordering(self):
        assert TraceLevel.OFF < TraceLevel.MINIMAL < TraceLevel.NORMAL < TraceLevel.VERBOSE


class TestHub:
    def test_disabled_without_sinks(self):
        assert not ObservabilityHub(level=TraceLevel.VERBOSE).enabled

    def test_disabled_when_off(self):
        hub = ObservabilityHub()
        hub.add_sink(MemorySink())
        assert not hub.enabled

    @pytest.mark.parametrize("level, expected_types", [
        (TraceLevel.MINIMAL, {"direction_event"}),
        (TraceLevel.NORMAL, {"direction_event", "session_state"}),
        (TraceLevel.VERBOSE, {"direction_event", "session_state", "feedback"}),
    ])
    def test_level_filtering(self, level, expected_types):
        sink = MemorySink()
        hub = ObservabilityHub(level=level)
        hub.add_sink(sink)

        hub.emit(DirectionEventRecord(direction="up"))
        hub.emit(SessionStateRecord(old_state="idle", new_state="running"))
        hub.emit(FeedbackRecord(target="up", feedback="correct"))

        assert {r.record_type for r in sink.get_records()} == expected_types

    def test_configure_changes_level(self):
        sink = MemorySink()
        hub = ObservabilityHub(level=TraceLevel.MINIMAL)
        hub.add_sink(sink)
        hub.configure(TraceLevel.OFF)
        hub.emit(DirectionEventRecord())
        assert len(sink) == 0

    def test_failing_sink_does_not_break_others(self):
        sink = MemorySink()
        hub = ObservabilityHub(level=TraceLevel.NORMAL)
        hub.add_sink(FailingSink())
        hub.add_sink(sink)

        hub.emit(DirectionEventRecord())

        assert len(sink) == 1

    def test_remove_sink(self):
        sink = MemorySink()
        hub = ObservabilityHub(level=TraceLevel.NORMAL)
        hub.add_sink(sink)
        hub.remove_sink(sink)
        assert hub.sinks == []

    def test_shutdown_closes_sinks(self, tmp_path):
        hub = ObservabilityHub(level=TraceLevel.NORMAL)
        file_sink = FileSink(tmp_path / "trace.jsonl")
        hub.add_sink(file_sink)
        hub.shutdown()

        assert hub.sinks == []
        file_sink.write(DirectionEventRecord())  # closed: dropped
        assert (tmp_path / "trace.jsonl").read_text() == ""


class TestRecords:
    def test_to_dict(self):
        record = TargetChangeRecord(t_ns=5, direction="left", dwell_sec=1.0, target_index=2)
        data = record.to_dict()
        assert data["record_type"] == "target_change"
        assert data["direction"] == "left"
        assert data["target_index"] == 2
        assert "min_level" not in data
        assert "timestamp_ns" in data

    def test_record_type_not_settable(self):
        with pytest.raises(TypeError):
            DirectionEventRecord(record_type="other")


class TestSinks:
    def test_memory_sink_bounded(self):
        sink = MemorySink(max_records=2)
        for i in range(5):
            sink.write(DirectionEventRecord(t_ns=i))
        assert [r.t_ns for r in sink.get_records()] == [3, 4]

    def test_memory_sink_clear(self):
        sink = MemorySink()
        sink.write(DirectionEventRecord())
        sink.clear()
        assert len(sink) == 0

    def test_null_sink(self):
        NullSink().write(DirectionEventRecord())

    def test_file_sink_jsonl(self, tmp_path):
        path = tmp_path / "nested" / "trace.jsonl"
        sink = FileSink(path)
        sink.write(DirectionEventRecord(t_ns=1, direction="up", pitch_deg=8.0))
        sink.write(SessionStateRecord(old_state="idle", new_state="running"))
        sink.close()

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["record_type"] == "direction_event"
        assert first["pitch_deg"] == 8.0
        assert json.loads(lines[1])["new_state"] == "running"

    def test_console_sink_formats(self):
        stream = io.StringIO()
        sink = ConsoleSink(stream=stream, color=False)

        sink.write(DirectionEventRecord(t_ns=1_500_000_000, direction="up", pitch_deg=8.0))
        sink.write(FeedbackRecord())  # not printed
        sink.write(SessionSummaryRecord(duration_sec=30, score=4, total_targets=4))

        out = stream.getvalue()
        assert "[MOVE] t=1.500s up" in out
        assert "Score:      4/4" in out
        assert "feedback" not in out
        assert "\033[" not in out

    def test_console_sink_color(self):
        stream = io.StringIO()
        ConsoleSink(stream=stream, color=True).write(DirectionEventRecord(direction="down"))
        assert "\033[32m" in stream.getvalue()
