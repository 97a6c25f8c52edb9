"""
Progress indicators for long-running build steps.

This module provides the building blocks for live build output:
- Step: Single-line spinner for a task without output
- MultiStep: Spinner plus a live window over merged stream output
- Terminal: Scoped handle on the stderr terminal
- OutputBuffer, LineHistory: Line stores behind MultiStep
- progress_title, completed_title, split_line_to_chunks: Pure formatters
"""

from rnbuild.progress.buffer import LineHistory, OutputBuffer
from rnbuild.progress.exceptions import ProgressError, SessionStateError
from rnbuild.progress.multistep import MultiStep
from rnbuild.progress.session import SessionState
from rnbuild.progress.step import Step
from rnbuild.progress.terminal import Terminal
from rnbuild.progress.titles import (
    SPINNER_CHARS,
    completed_title,
    progress_title,
    split_line_to_chunks,
)

__all__ = [
    "LineHistory",
    "MultiStep",
    "OutputBuffer",
    "ProgressError",
    "SPINNER_CHARS",
    "SessionState",
    "SessionStateError",
    "Step",
    "Terminal",
    "completed_title",
    "progress_title",
    "split_line_to_chunks",
]
