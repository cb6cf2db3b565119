"""Command-line interface for vertimotion."""

import sys
import argparse
import logging

from vertimotion.config import SPEED_LABELS
from vertimotion.types import Pattern, SignConvention, TargetPolicy


def _add_trace_args(parser):
    """Add --trace, --trace-output args to a parser."""
    parser.add_argument("--trace", choices=["off", "minimal", "normal", "verbose"], default="off")
    parser.add_argument("--trace-output", type=str, help="Output file for trace records (JSONL)")


def _add_threshold_args(parser):
    """Add classifier/estimator threshold args to a parser."""
    parser.add_argument(
        "--center", type=float, default=4.0, metavar="DEG",
        help="Center zone threshold in degrees (default: 4)",
    )
    parser.add_argument(
        "--correct", type=float, default=5.0, metavar="DEG",
        help="Movement threshold in degrees (default: 5)",
    )
    parser.add_argument(
        "--warning", type=float, default=None, metavar="DEG",
        help="Borderline feedback threshold in degrees (default: max(8, --correct))",
    )
    parser.add_argument(
        "--hold", type=float, default=0.3, metavar="SEC",
        help="Time the head must stay centered before the next movement (default: 0.3)",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="vertimotion",
        description="VertiMotion - Head-movement exercise engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vertimotion info                                  # Patterns, speeds, defaults
  vertimotion replay samples.jsonl                  # Replay a 30s combined session
  vertimotion replay samples.csv --pattern vertical --speed 0
  vertimotion replay samples.jsonl --convention gaze --correct 12
  vertimotion replay samples.jsonl --trace normal --trace-output trace.jsonl
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info command
    subparsers.add_parser(
        "info",
        help="Show patterns, speed levels and defaults",
        description="Display movement patterns, speed levels with dwell times, and default thresholds.",
    )

    # replay command
    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay recorded orientation samples through a session",
        description="Run a full exercise session over a recorded JSONL or CSV sample file.",
    )
    replay_parser.add_argument(
        "path",
        help="Sample file: JSONL or CSV with pitch, yaw and t_ns (or t_sec)",
    )
    replay_parser.add_argument(
        "--duration", type=int, default=30, metavar="SEC",
        help="Session duration in seconds (default: 30)",
    )
    replay_parser.add_argument(
        "--pattern", type=str, default="combined",
        help=f"Movement pattern: {', '.join(p.value for p in Pattern)} "
             "or 'Up & Down' / 'Left & Right' / 'All' (default: combined)",
    )
    replay_parser.add_argument(
        "--speed", type=int, default=2, metavar="LEVEL",
        help="Speed level 0-4: " + ", ".join(f"{i}={label}" for i, label in enumerate(SPEED_LABELS))
             + " (default: 2)",
    )
    replay_parser.add_argument(
        "--dizziness", type=float, default=5.0, metavar="LEVEL",
        help="Self-reported dizziness 1-10 (default: 5)",
    )
    replay_parser.add_argument(
        "--policy", choices=[p.value for p in TargetPolicy], default="cycle",
        help="Target selection policy (default: cycle)",
    )
    replay_parser.add_argument("--seed", type=int, default=None, help="Seed for --policy random")
    replay_parser.add_argument(
        "--convention", choices=[c.value for c in SignConvention], default="head_motion",
        help="Sign convention of the recorded angles (default: head_motion)",
    )
    _add_threshold_args(replay_parser)
    _add_trace_args(replay_parser)
    replay_parser.add_argument(
        "--json", action="store_true", help="Print the session summary as JSON",
    )
    replay_parser.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Enable verbose logging",
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    from vertimotion.cli import commands

    if args.command == "info":
        commands.run_info(args)

    elif args.command == "replay":
        commands.run_replay(args)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
