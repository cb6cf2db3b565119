"""CLI utility functions."""

import csv
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from vertimotion.observability import ConsoleSink, FileSink, ObservabilityHub, TraceLevel
from vertimotion.types import NS_PER_SECOND, OrientationSample, SignConvention

logger = logging.getLogger(__name__)

BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"


def setup_observability(
    trace_level: str, trace_output: Optional[str] = None
) -> Tuple[ObservabilityHub, Optional[FileSink]]:
    """Configure observability based on CLI arguments.

    Args:
        trace_level: Trace level string ("off", "minimal", "normal", "verbose").
        trace_output: Optional path to output JSONL file.

    Returns:
        Tuple of (hub, file_sink) for cleanup. file_sink may be None.
    """
    level = TraceLevel.from_string(trace_level)
    hub = ObservabilityHub(level=level)

    if level == TraceLevel.OFF:
        return hub, None

    hub.add_sink(ConsoleSink())

    file_sink = None
    if trace_output:
        file_sink = FileSink(trace_output)
        hub.add_sink(file_sink)

    logger.info("Observability: level=%s output=%s", trace_level, trace_output or "-")
    return hub, file_sink


def cleanup_observability(hub: Optional[ObservabilityHub], file_sink: Optional[FileSink]) -> None:
    """Clean up observability resources."""
    if hub is not None:
        hub.shutdown()
    if file_sink is not None:
        logger.info("Trace written to %s", file_sink.path)


def _parse_timestamp(row: dict, where: str) -> int:
    if row.get("t_ns") not in (None, ""):
        return int(row["t_ns"])
    if row.get("t_sec") not in (None, ""):
        return int(round(float(row["t_sec"]) * NS_PER_SECOND))
    raise ValueError(f"{where}: missing t_ns or t_sec")


def _parse_row(row: dict, where: str, convention: SignConvention) -> OrientationSample:
    try:
        pitch = float(row["pitch"])
        yaw = float(row["yaw"])
    except KeyError as e:
        raise ValueError(f"{where}: missing field {e.args[0]!r}") from None
    except (TypeError, ValueError):
        raise ValueError(f"{where}: pitch and yaw must be numbers") from None
    return OrientationSample.from_tracker(pitch, yaw, _parse_timestamp(row, where), convention)


def load_samples(
    path, convention: SignConvention = SignConvention.HEAD_MOTION
) -> List[OrientationSample]:
    """Load recorded orientation samples.

    ``.csv`` files need a header row; anything else is read as JSONL.
    Each record has ``pitch`` and ``yaw`` in degrees and either ``t_ns`` or
    ``t_sec``. Blank lines in JSONL are skipped.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: On a malformed record (message names the line).
    """
    path = Path(path)
    samples = []

    with open(path, "r", encoding="utf-8", newline="") as f:
        if path.suffix.lower() == ".csv":
            reader = csv.DictReader(f)
            for lineno, row in enumerate(reader, start=2):
                samples.append(_parse_row(row, f"{path.name}:{lineno}", convention))
        else:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                where = f"{path.name}:{lineno}"
                try:
                    row = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValueError(f"{where}: invalid JSON ({e.msg})") from None
                if not isinstance(row, dict):
                    raise ValueError(f"{where}: expected an object")
                samples.append(_parse_row(row, where, convention))

    return samples
