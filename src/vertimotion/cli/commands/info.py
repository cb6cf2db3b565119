"""Info command for vertimotion CLI.

Shows movement patterns, speed levels and default thresholds.
"""

from vertimotion.cli.utils import BOLD, DIM, RESET
from vertimotion.config import (
    DURATION_PRESETS_SEC,
    SPEED_LABELS,
    ClassifierConfig,
    EstimatorConfig,
    SessionConfig,
)
from vertimotion.sequencer import PATTERN_CYCLES, SPEED_DWELL_SEC
from vertimotion.types import Pattern, TargetPolicy

_PATTERN_TITLES = {
    Pattern.VERTICAL: "Up & Down",
    Pattern.HORIZONTAL: "Left & Right",
    Pattern.COMBINED: "All",
}


def run_info(args):
    """Show patterns, speed levels and defaults."""
    print(f"{BOLD}VertiMotion - Exercise Settings{RESET}")
    print("=" * 60)
    _print_version_info()
    _print_patterns()
    _print_speeds()
    _print_session_defaults()
    _print_thresholds()


def _print_version_info():
    try:
        from importlib.metadata import PackageNotFoundError, version
        print(f"  vertimotion: {version('vertimotion')}")
    except PackageNotFoundError:
        print("  vertimotion: (version not available)")


def _print_patterns():
    print(f"\n{BOLD}[Patterns]{RESET}")
    for pattern in Pattern:
        cycle = " -> ".join(d.value for d in PATTERN_CYCLES[pattern])
        print(f"  {pattern.value:<12}{_PATTERN_TITLES[pattern]:<14}{DIM}{cycle}{RESET}")
    print(f"  {DIM}policies: {', '.join(p.value for p in TargetPolicy)}{RESET}")


def _print_speeds():
    print(f"\n{BOLD}[Speed levels]{RESET}")
    for level, label in enumerate(SPEED_LABELS):
        print(f"  {level}  {label:<10}{DIM}{SPEED_DWELL_SEC[level]:.1f}s per target{RESET}")


def _print_session_defaults():
    defaults = SessionConfig()
    presets = ", ".join(f"{d}s" for d in DURATION_PRESETS_SEC)
    print(f"\n{BOLD}[Session]{RESET}")
    print(f"  duration presets:  {presets}")
    print(f"  default duration:  {defaults.duration_sec}s")
    print(f"  default speed:     {defaults.speed_level} ({defaults.speed_label})")
    print(f"  default pattern:   {defaults.pattern.value}")


def _print_thresholds():
    classifier = ClassifierConfig()
    estimator = EstimatorConfig()
    print(f"\n{BOLD}[Thresholds]{RESET}")
    print(f"  center zone:       < {classifier.center_threshold_deg:g} deg")
    print(f"  movement:          > {classifier.correct_threshold_deg:g} deg")
    print(f"  center hold:       {classifier.center_hold_sec:g}s")
    print(f"  borderline:        <= {estimator.warning_threshold_deg:g} deg")
    print(f"  looking away:      > {estimator.away_threshold_deg:g} deg")
    print(
        f"  ideal speed:       {estimator.min_ideal_speed:g}-{estimator.max_ideal_speed:g} deg/s"
    )
