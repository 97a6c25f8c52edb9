"""
MultiStep: live window over the merged output of several streams.

This module provides the progress aggregator used by Command.run_live():
- Any number of byte or text streams are read concurrently, one reader
  thread each, and pushed line by line onto a shared queue
- A consumer thread drains the queue into a bounded OutputBuffer (the live
  window) and an unbounded LineHistory
- A renderer thread repaints a title row plus `rows` content rows on stderr
  every UPDATE_DELAY seconds

Lines from one stream keep their order. Lines from different streams are
shown in the order they reached the queue.

Reader threads are not joined by stop(); they end on their own at
end-of-stream. Call drain() first when every line must reach the history.
Lines that arrive after stop() are dropped.
"""

import logging
import queue
import threading
import time
from collections.abc import Iterable
from typing import IO

from rich.text import Text

from rnbuild.config import settings
from rnbuild.progress.buffer import LineHistory, OutputBuffer
from rnbuild.progress.session import Session
from rnbuild.progress.terminal import Terminal
from rnbuild.progress.titles import (
    SPINNER_CHARS,
    UPDATE_DELAY,
    progress_title,
    split_line_to_chunks,
)
from rnbuild.progress.worker import Worker

logger = logging.getLogger(__name__)

POLL_TIMEOUT = 0.2  # seconds the consumer waits before re-checking the running flag

# Queued by stop(); everything queued before it is still consumed
_CLOSED = object()


class MultiStep(Session):
    """
    Spinner title plus the last `rows` lines of merged stream output.

    Example:
        with MultiStep("building with ubrn", rows=10) as progress:
            progress.register_reader(proc.stdout)
            progress.register_reader(proc.stderr)
            proc.wait()
            progress.drain()
        print(progress.output())
    """

    def __init__(
        self,
        label: str,
        rows: int,
        terminal: Terminal | None = None,
        chunk_width: int | None = None,
    ) -> None:
        """
        Initialize an idle session. No threads are started.

        Args:
            label: Title shown next to the spinner
            rows: Number of content rows in the live window
            terminal: Terminal to draw on (default: stderr)
            chunk_width: Requested maximum width of a content row
        """
        if rows < 0:
            raise ValueError(f"rows must be non-negative, got {rows}")
        super().__init__(label, terminal)
        self.rows = rows
        self._chunk_width = chunk_width or settings.chunk_width
        self._lines: queue.Queue = queue.Queue()
        self._buffer = OutputBuffer(maxlen=rows)
        self._history = LineHistory()
        self._readers: list[threading.Thread] = []
        self._readers_lock = threading.Lock()
        self._consumer: Worker | None = None

    def register_reader(self, stream: IO) -> threading.Thread:
        """
        Read a stream concurrently into this session.

        Returns immediately. Each line is split into fragments no wider
        than the clamped terminal width, and every fragment is queued in
        order. Undecodable lines are skipped. The stream is closed at
        end-of-stream.

        Args:
            stream: Binary or text stream, e.g. a child process pipe

        Returns:
            The (detached) reader thread
        """
        width = max(settings.min_chunk_width, min(self._chunk_width, self._terminal.width))
        reader = threading.Thread(
            target=self._read,
            args=(stream, width),
            name=f"multistep-reader[{self.label}]",
            daemon=True,
        )
        with self._readers_lock:
            self._readers.append(reader)
        reader.start()
        return reader

    def send(self, line: str) -> None:
        """Queue a line directly, e.g. a status message from the owner."""
        self._lines.put(line.rstrip("\r\n"))

    def output(self) -> str:
        """Return every line seen so far, newline-joined. Safe after stop()."""
        return self._history.text()

    def visible_lines(self) -> list[str]:
        """Return a snapshot of the live window, oldest first."""
        return self._buffer.snapshot()

    def flush(self) -> None:
        """
        Block until every queued line has been consumed.

        Returns early if the session is not (or stops) running, or if the
        consumer thread has died.
        """
        with self._lines.all_tasks_done:
            while (
                self._lines.unfinished_tasks
                and self._running.is_set()
                and self._consumer is not None
                and self._consumer.is_alive()
            ):
                self._lines.all_tasks_done.wait(POLL_TIMEOUT)

    def drain(self, timeout: float | None = None) -> bool:
        """
        Wait for registered readers to reach end-of-stream.

        Args:
            timeout: Overall seconds to wait, or None to wait indefinitely

        Returns:
            True if every reader finished
        """
        with self._readers_lock:
            readers = list(self._readers)

        deadline = None if timeout is None else time.monotonic() + timeout
        for reader in readers:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            reader.join(remaining)
        return not any(reader.is_alive() for reader in readers)

    def _create_workers(self) -> list[Worker]:
        self._consumer = Worker(self._consume, name=f"multistep-consumer[{self.label}]")
        return [
            self._consumer,
            Worker(self._render, name=f"multistep-render[{self.label}]"),
        ]

    def _on_stopping(self) -> None:
        self._lines.put(_CLOSED)

    def _on_stopped(self) -> None:
        self._buffer.clear()

    def _read(self, stream: IO, width: int) -> None:
        try:
            for raw in stream:
                if isinstance(raw, bytes):
                    try:
                        line = raw.decode("utf-8")
                    except UnicodeDecodeError as e:
                        logger.debug(f"Skipping undecodable line in '{self.label}': {e}")
                        continue
                else:
                    line = raw
                for chunk in split_line_to_chunks(line.rstrip("\r\n"), width):
                    self._lines.put(chunk)
        except (OSError, ValueError) as e:
            logger.debug(f"Reader for '{self.label}' stopped: {e}")
        finally:
            stream.close()

    def _consume(self) -> None:
        while True:
            try:
                line = self._lines.get(timeout=POLL_TIMEOUT)
            except queue.Empty:
                if not self._running.is_set():
                    break
                continue

            try:
                if line is _CLOSED:
                    break
                self._history.append(line)
                self._buffer.append(line)
            finally:
                self._lines.task_done()

    def _render(self) -> None:
        tick = 0
        with self._terminal.live_region():
            while self._running.is_set():
                self._terminal.draw(self._frame(self._buffer.snapshot(), tick))
                tick = (tick + 1) % len(SPINNER_CHARS)
                time.sleep(UPDATE_DELAY)
        self._finish()

    def _frame(self, snapshot: Iterable[str], tick: int) -> list[Text]:
        lines = list(snapshot)
        frame = [Text(progress_title(self.label, tick))]
        for i in range(self.rows):
            row = Text("|", style="bold white")
            if i < len(lines):
                row.append(" ")
                row.append_text(Text.from_ansi(lines[i].rstrip(), style="bright_black"))
            frame.append(row)
        return frame
