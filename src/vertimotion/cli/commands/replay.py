"""Replay command for vertimotion CLI.

Feeds a recorded sample file through a SessionController driven by a
SessionDriver on the recording's own timeline: the session starts at the
first sample, deadlines are advanced up to each sample before it is
delivered, and the remaining ticks fire after the last sample.
"""

import sys
import json

from vertimotion.cli.utils import (
    BOLD,
    DIM,
    RESET,
    cleanup_observability,
    load_samples,
    setup_observability,
)
from vertimotion.config import ClassifierConfig, EstimatorConfig, SessionConfig
from vertimotion.driver import SessionDriver
from vertimotion.errors import SessionConfigError
from vertimotion.session import SessionController
from vertimotion.sinks import MemorySessionSink
from vertimotion.types import NS_PER_SECOND, Pattern, SessionState, SignConvention, TargetPolicy


def _build_configs(args):
    """Build (session, classifier, estimator) configs from CLI args.

    Raises:
        SessionConfigError: On any invalid setting.
    """
    warning = args.warning if args.warning is not None else max(8.0, args.correct)
    try:
        session = SessionConfig(
            dizziness_level=args.dizziness,
            speed_level=args.speed,
            pattern=Pattern.from_label(args.pattern),
            duration_sec=args.duration,
            target_policy=TargetPolicy(args.policy),
            seed=args.seed,
        )
        session.validate()
        classifier = ClassifierConfig(
            center_threshold_deg=args.center,
            correct_threshold_deg=args.correct,
            center_hold_sec=args.hold,
        )
        estimator = EstimatorConfig(
            correct_threshold_deg=args.correct,
            warning_threshold_deg=warning,
        )
    except ValueError as e:
        raise SessionConfigError(str(e)) from e
    return session, classifier, estimator


def run_replay(args):
    """Replay a sample file and print the session summary."""
    try:
        session_config, classifier_config, estimator_config = _build_configs(args)
    except SessionConfigError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        sys.exit(2)

    convention = SignConvention.from_string(args.convention)
    try:
        samples = load_samples(args.path, convention)
    except (OSError, ValueError) as e:
        print(f"Cannot read samples: {e}", file=sys.stderr)
        sys.exit(1)

    hub, file_sink = setup_observability(args.trace, args.trace_output)

    sink = MemorySessionSink()
    controller = SessionController(
        classifier_config=classifier_config,
        estimator_config=estimator_config,
        sink=sink,
        hub=hub,
    )
    driver = SessionDriver(controller)

    t0 = samples[0].t_ns if samples else 0
    try:
        driver.start(session_config, t_ns=t0)
        for sample in samples:
            driver.advance(sample.t_ns)
            if controller.state is not SessionState.RUNNING:
                break
            controller.on_sample(sample)
        driver.advance(t0 + session_config.duration_sec * NS_PER_SECOND)
    finally:
        cleanup_observability(hub, file_sink)

    session = sink.last
    stats = {
        "samples_total": len(samples),
        "samples_processed": controller.samples_processed,
        "samples_rejected": controller.samples_rejected,
        "samples_dropped": controller.samples_dropped,
        "samples_ignored": controller.samples_ignored,
    }

    if args.json:
        print(json.dumps({"session": session.to_dict(), "stats": stats}, indent=2))
        return

    _ = "          "  # 10-char indent
    print()
    print(f"{BOLD}{'Replay':<10}{RESET}{args.path}")
    print(
        f"{_}{DIM}{session_config.pattern.value} · {session_config.speed_label} · "
        f"{session_config.duration_sec}s · {session_config.target_policy.value}{RESET}"
    )
    print()
    print(
        f"{BOLD}{'Summary':<10}{RESET}score {session.score} · "
        f"{session.targets_presented} targets · {session.duration_sec}s"
    )
    print(
        f"{_}{DIM}accuracy {session.accuracy:.0f}% · "
        f"{session.head_turns_per_minute:.1f} turns/min{RESET}"
    )
    print(
        f"{_}{DIM}samples: {stats['samples_processed']} processed · "
        f"{stats['samples_rejected']} rejected · {stats['samples_dropped']} dropped{RESET}"
    )
    if session.movements:
        print()
        print(f"{BOLD}{'Hits':<10}{RESET}")
        for m in session.movements:
            print(f"  {m.direction.value:<6}{DIM}{m.t_ns / 1e9:8.2f}s · {m.response_time_sec:.2f}s{RESET}")
