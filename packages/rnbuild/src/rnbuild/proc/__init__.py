"""External process execution with optional live output."""

from rnbuild.proc.command import (
    Command,
    CommandError,
    CommandOutput,
    run_all,
    run_all_live,
)

__all__ = [
    "Command",
    "CommandError",
    "CommandOutput",
    "run_all",
    "run_all_live",
]
