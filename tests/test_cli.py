"""Tests for the vertimotion CLI."""

import json

import pytest

from vertimotion.cli import build_parser, main
from vertimotion.cli.utils import load_samples
from vertimotion.types import SignConvention


def _write_jsonl(path, rows):
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n")
    return path


@pytest.fixture
def up_movement_rows():
    """Center, one UP excursion, back to center."""
    rows = [{"pitch": 0.0, "yaw": 0.0, "t_sec": 0.1 * i} for i in range(3)]
    rows += [{"pitch": 10.0, "yaw": 1.0, "t_sec": 0.3 + 0.1 * i} for i in range(3)]
    rows += [{"pitch": 0.0, "yaw": 0.0, "t_sec": 0.6 + 0.1 * i} for i in range(5)]
    return rows


class TestLoadSamples:
    def test_jsonl_t_sec(self, tmp_path, up_movement_rows):
        path = _write_jsonl(tmp_path / "s.jsonl", up_movement_rows)
        samples = load_samples(path)
        assert len(samples) == 11
        assert samples[3].pitch_deg == 10.0
        assert samples[3].t_ns == 300_000_000

    def test_jsonl_skips_blank_lines(self, tmp_path):
        path = tmp_path / "s.jsonl"
        path.write_text('{"pitch": 1, "yaw": 2, "t_ns": 5}\n\n{"pitch": 3, "yaw": 4, "t_ns": 6}\n')
        assert [s.t_ns for s in load_samples(path)] == [5, 6]

    def test_csv(self, tmp_path):
        path = tmp_path / "s.csv"
        path.write_text("t_ns,pitch,yaw\n0,0.0,0.0\n100000000,-15.0,0.0\n")
        samples = load_samples(path, SignConvention.GAZE)
        assert samples[1].pitch_deg == 15.0
        assert samples[1].t_ns == 100_000_000

    def test_missing_timestamp(self, tmp_path):
        path = _write_jsonl(tmp_path / "s.jsonl", [{"pitch": 1.0, "yaw": 0.0}])
        with pytest.raises(ValueError, match="s.jsonl:1"):
            load_samples(path)

    def test_bad_json(self, tmp_path):
        path = tmp_path / "s.jsonl"
        path.write_text('{"pitch": 1, "yaw": 2, "t_ns": 5}\n{oops\n')
        with pytest.raises(ValueError, match="s.jsonl:2"):
            load_samples(path)

    def test_non_numeric_angle(self, tmp_path):
        path = _write_jsonl(tmp_path / "s.jsonl", [{"pitch": "up", "yaw": 0, "t_ns": 0}])
        with pytest.raises(ValueError, match="numbers"):
            load_samples(path)


class TestParser:
    def test_replay_defaults(self):
        args = build_parser().parse_args(["replay", "x.jsonl"])
        assert args.duration == 30
        assert args.pattern == "combined"
        assert args.speed == 2
        assert args.policy == "cycle"
        assert args.convention == "head_motion"
        assert args.trace == "off"
        assert args.warning is None

    @pytest.mark.parametrize("argv, expected", [
        (["-v", "replay", "x.jsonl"], True),
        (["replay", "x.jsonl", "-v"], True),
        (["--verbose", "replay", "x.jsonl", "--verbose"], True),
        (["replay", "x.jsonl"], False),
        (["-v", "info"], True),
    ])
    def test_verbose_either_side_of_command(self, argv, expected):
        assert build_parser().parse_args(argv).verbose is expected

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


class TestInfo:
    def test_info(self, capsys):
        main(["info"])
        out = capsys.readouterr().out
        assert "Up & Down" in out
        assert "Left & Right" in out
        assert "Xt. Slow" in out
        assert "3.0s per target" in out
        assert "30s, 60s" in out


class TestReplay:
    def test_json_summary(self, tmp_path, capsys, up_movement_rows):
        path = _write_jsonl(tmp_path / "s.jsonl", up_movement_rows)

        main(["replay", str(path), "--duration", "2", "--json"])

        data = json.loads(capsys.readouterr().out)
        session = data["session"]
        assert session["score"] == 1
        assert session["duration_sec"] == 2
        assert session["movements"][0]["direction"] == "up"
        assert session["movements"][0]["response_time_sec"] == pytest.approx(0.3)
        assert data["stats"]["samples_processed"] == 11

    def test_gaze_convention(self, tmp_path, capsys):
        path = tmp_path / "s.csv"
        path.write_text("t_sec,pitch,yaw\n0.0,0,0\n0.2,-15,0\n0.3,-15,0\n")

        main([
            "replay", str(path), "--duration", "1",
            "--convention", "gaze", "--correct", "12", "--json",
        ])

        assert json.loads(capsys.readouterr().out)["session"]["score"] == 1

    def test_text_summary(self, tmp_path, capsys, up_movement_rows):
        path = _write_jsonl(tmp_path / "s.jsonl", up_movement_rows)
        main(["replay", str(path), "--duration", "2", "--pattern", "Up & Down"])
        out = capsys.readouterr().out
        assert "score 1" in out
        assert "vertical" in out

    def test_trace_output(self, tmp_path, capsys, up_movement_rows):
        path = _write_jsonl(tmp_path / "s.jsonl", up_movement_rows)
        trace = tmp_path / "trace.jsonl"

        main([
            "replay", str(path), "--duration", "2",
            "--trace", "minimal", "--trace-output", str(trace), "--json",
        ])

        types = [json.loads(line)["record_type"] for line in trace.read_text().splitlines()]
        assert types == ["direction_event", "session_summary"]

    def test_invalid_settings(self, tmp_path, capsys, up_movement_rows):
        path = _write_jsonl(tmp_path / "s.jsonl", up_movement_rows)
        with pytest.raises(SystemExit) as exc:
            main(["replay", str(path), "--speed", "9"])
        assert exc.value.code == 2
        assert "speed_level" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["replay", str(tmp_path / "nope.jsonl")])
        assert exc.value.code == 1
        assert "Cannot read samples" in capsys.readouterr().err
