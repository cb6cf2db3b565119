"""CLI command handlers."""

from vertimotion.cli.commands.info import run_info
from vertimotion.cli.commands.replay import run_replay

__all__ = [
    "run_info",
    "run_replay",
]
