"""
Lifecycle shared by progress indicators.

A session moves IDLE -> RUNNING -> STOPPED exactly once:
- show() starts the session's worker threads
- stop() clears the running flag, joins the workers and raises
  ProgressError if any of them failed
- Using the session as a context manager guarantees stop() runs on every
  exit path from the owning block
"""

import logging
import threading
from enum import Enum
from types import TracebackType

from rnbuild.progress.exceptions import ProgressError, SessionStateError
from rnbuild.progress.terminal import Terminal
from rnbuild.progress.worker import Worker, join_workers

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle state of a progress session."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Session:
    """
    Base class for Step and MultiStep.

    Subclasses provide their worker threads through _create_workers() and
    may hook into shutdown with _on_stopping() (before join) and
    _on_stopped() (after join).
    """

    def __init__(self, label: str, terminal: Terminal | None = None) -> None:
        self.label = label
        self._terminal = terminal or Terminal()
        self._running = threading.Event()
        self._state = SessionState.IDLE
        self._state_lock = threading.Lock()
        self._workers: list[Worker] = []
        self._aborted = False  # owner block failed; erase instead of completing

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def show(self) -> None:
        """
        Start rendering.

        Calling show() on a running session does nothing.

        Raises:
            SessionStateError: If the session was already stopped
        """
        with self._state_lock:
            if self._state is SessionState.RUNNING:
                logger.debug(f"Progress '{self.label}' already running")
                return
            if self._state is SessionState.STOPPED:
                raise SessionStateError(self.label, self._state.value, "show")

            self._state = SessionState.RUNNING
            self._running.set()
            self._workers = self._create_workers()
            for worker in self._workers:
                worker.start()

    def stop(self) -> None:
        """
        Stop rendering and join the worker threads.

        Idempotent: stopping an idle or already stopped session returns
        immediately.

        Raises:
            ProgressError: If any worker thread failed
        """
        with self._state_lock:
            if self._state is not SessionState.RUNNING:
                return
            self._state = SessionState.STOPPED
            self._running.clear()
            workers, self._workers = self._workers, []

        self._on_stopping()
        failures = join_workers(workers)
        self._on_stopped()

        if failures:
            raise ProgressError(self.label, failures)

    def _create_workers(self) -> list[Worker]:
        raise NotImplementedError

    def _finish(self) -> None:
        """Leave the terminal after the render loop: completed title, or nothing if aborted."""
        if self._aborted:
            self._terminal.erase()
        else:
            self._terminal.write_completed(self.label)

    def _on_stopping(self) -> None:
        pass

    def _on_stopped(self) -> None:
        pass

    def __enter__(self):
        self.show()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.stop()
            return
        # The owner's exception propagates; a stop failure is only logged
        self._aborted = True
        try:
            self.stop()
        except ProgressError as e:
            logger.warning(f"{e}")
