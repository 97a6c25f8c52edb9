"""
Terminal handle for live progress output.

Every session owns a Terminal instead of poking at process-wide terminal
state. The handle wraps a Rich Console bound to stderr (stdout is reserved
for program results) and keeps track of how many rows it drew last, so a
redraw only erases what it wrote itself.

Non-interactive consoles (pipes, CI logs, dumb terminals) get no
intermediate frames, only the final completed title.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from rnbuild.config import settings
from rnbuild.progress.titles import DONE_MARKER, completed_title, progress_title

logger = logging.getLogger(__name__)

# Carriage return, then erase the whole current line
_CLEAR_LINE = (ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 2))


class Terminal:
    """
    Scoped access to the stderr terminal.

    Example:
        terminal = Terminal()
        with terminal.live_region():
            terminal.draw([Text("title"), Text("| line")])
        terminal.write_completed("title")
    """

    def __init__(
        self,
        console: Console | None = None,
        interactive: bool | None = None,
        fallback_width: int | None = None,
    ) -> None:
        """
        Args:
            console: Console to draw on (default: new stderr console)
            interactive: Force live redraws on/off (default: auto-detect)
            fallback_width: Width reported when not interactive
        """
        self.console = console or Console(stderr=True, highlight=False)
        if interactive is None:
            interactive = self.console.is_terminal and not self.console.is_dumb_terminal
        self.interactive = interactive
        self._fallback_width = fallback_width or settings.fallback_width
        self._drawn = 0  # rows written by the last draw()

    @property
    def width(self) -> int:
        """Usable width in columns."""
        if self.interactive:
            return self.console.width
        return self._fallback_width

    @contextmanager
    def live_region(self) -> Iterator["Terminal"]:
        """
        Hide the cursor while a live region is being redrawn.

        On failure the region is erased before the exception propagates.
        The cursor is restored on every exit path.
        """
        self._show_cursor(False)
        try:
            yield self
        except BaseException:
            try:
                self.erase()
            except OSError as e:
                logger.debug(f"Could not erase live region: {e}")
            raise
        finally:
            self._show_cursor(True)

    def write_progress(self, label: str, tick: int) -> None:
        """Rewrite the current line with the spinner title."""
        if not self.interactive:
            return
        self.console.control(Control(*_CLEAR_LINE))
        self.console.print(Text(progress_title(label, tick)), end="", no_wrap=True, overflow="crop")

    def write_completed(self, label: str) -> None:
        """Replace the live region (or current line) with the completed title."""
        self.erase()
        text = Text(completed_title(label))
        text.stylize("bold green", 0, len(DONE_MARKER))
        self.console.print(text, end="", no_wrap=True, overflow="crop")

    def draw(self, rows: list[Text]) -> None:
        """
        Repaint the live region with the given rows.

        Erases the rows written by the previous call, then prints the new
        frame followed by a newline. Rows are cropped, never wrapped.

        Args:
            rows: Frame rows, title first
        """
        if not self.interactive:
            return
        self.erase()
        frame = Text("\n").join(rows)
        self.console.print(frame, no_wrap=True, overflow="crop", crop=True)
        self._drawn = frame.plain.count("\n") + 1

    def erase(self) -> None:
        """Clear the current line and every row drawn by the last frame."""
        if not self.interactive:
            self._drawn = 0
            return
        up = ((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2)) * self._drawn
        self.console.control(Control(*_CLEAR_LINE, *up))
        self._drawn = 0

    def _show_cursor(self, show: bool) -> None:
        if self.interactive:
            self.console.show_cursor(show)
