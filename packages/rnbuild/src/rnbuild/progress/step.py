"""Single-line spinner for tasks without live output."""

import time

from rnbuild.progress.session import Session
from rnbuild.progress.titles import SPINNER_CHARS, UPDATE_DELAY
from rnbuild.progress.worker import Worker


class Step(Session):
    """
    Animated spinner for one indeterminate task.

    One renderer thread rewrites the spinner line on stderr every
    UPDATE_DELAY seconds until stop(), then prints the completed title.

    Example:
        with Step("patching CMakeLists.txt"):
            patch_cmakelists(path)
    """

    def _create_workers(self) -> list[Worker]:
        return [Worker(self._render, name=f"step-render[{self.label}]")]

    def _render(self) -> None:
        tick = 0
        with self._terminal.live_region():
            while self._running.is_set():
                self._terminal.write_progress(self.label, tick)
                tick = (tick + 1) % len(SPINNER_CHARS)
                time.sleep(UPDATE_DELAY)
        self._finish()
