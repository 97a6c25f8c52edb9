"""
Line stores shared between the consumer and the renderer.

This module implements the two stores behind a MultiStep session:
- OutputBuffer: bounded ring buffer of the most recent lines (live window)
- LineHistory: unbounded, append-only record of every line

OutputBuffer uses collections.deque with maxlen for automatic oldest-removal.
Both stores hand out copies, so readers never observe a partial update.
"""

import threading
from collections import deque
from collections.abc import Iterator

from readerwriterlock import rwlock


class OutputBuffer:
    """
    Fixed-size ring buffer for the live output window.

    Automatically discards oldest lines when full. All access goes through
    a mutex; readers receive a snapshot.

    Example:
        buffer = OutputBuffer(maxlen=2)
        buffer.append("line 1")
        buffer.append("line 2")
        buffer.append("line 3")
        print(buffer.get_text())  # "line 2\\nline 3"
    """

    def __init__(self, maxlen: int = 10) -> None:
        """
        Initialize buffer with maximum line count.

        Args:
            maxlen: Maximum number of lines to store (0 stores nothing)
        """
        self._lock = threading.Lock()
        self._buffer: deque[str] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._buffer.maxlen or 0

    def append(self, line: str) -> None:
        """
        Add a line to the buffer.

        Strips trailing newline if present. When buffer is full,
        oldest line is automatically removed.

        Args:
            line: Line of text to add
        """
        with self._lock:
            self._buffer.append(line.rstrip("\n"))

    def snapshot(self) -> list[str]:
        """Return a copy of the buffered lines, oldest first."""
        with self._lock:
            return list(self._buffer)

    def get_text(self) -> str:
        """Return buffered lines joined with newlines."""
        return "\n".join(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def clear(self) -> None:
        """Clear all lines from buffer."""
        with self._lock:
            self._buffer.clear()


class LineHistory:
    """
    Append-only record of every line a session has seen.

    Reads (renderer snapshots, output() calls) far outnumber writes (one
    consumer thread), so access is mediated by a reader-preferring
    reader/writer lock.
    """

    def __init__(self) -> None:
        self._lock = rwlock.RWLockRead()
        self._lines: list[str] = []

    def append(self, line: str) -> None:
        with self._lock.gen_wlock():
            self._lines.append(line)

    def lines(self) -> list[str]:
        """Return a copy of all recorded lines in arrival order."""
        with self._lock.gen_rlock():
            return list(self._lines)

    def text(self) -> str:
        """Return all recorded lines joined with newlines."""
        with self._lock.gen_rlock():
            return "\n".join(self._lines)

    def __len__(self) -> int:
        with self._lock.gen_rlock():
            return len(self._lines)
