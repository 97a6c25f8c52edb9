"""
Tests for MultiStep, the live output window over several streams.

Most tests use the non-interactive terminal so nothing depends on frame
timing; the buffer, history and reader behavior is the same either way.
"""

import io
import threading
import time

import pytest
from rich.console import Console

from rnbuild.progress import LineHistory, MultiStep, ProgressError, SessionState, Terminal


class BrokenTerminal(Terminal):
    """Terminal whose frame writes fail."""

    def draw(self, rows) -> None:
        raise OSError("terminal gone")


class FailingHistory(LineHistory):
    """History that rejects every line, killing the consumer."""

    def append(self, line: str) -> None:
        raise RuntimeError("history full")


@pytest.fixture
def multistep(quiet_terminal):
    """Factory for sessions on the quiet terminal, stopped after the test."""
    sessions = []

    def make(rows: int = 10, **kwargs) -> MultiStep:
        session = MultiStep("building", rows, terminal=quiet_terminal, **kwargs)
        sessions.append(session)
        return session

    yield make

    for session in sessions:
        session.stop()


class TestLiveWindow:
    """Tests for the bounded window and the full history."""

    @pytest.mark.parametrize("count", [0, 3, 10, 25])
    @pytest.mark.parametrize("rows", [0, 1, 10])
    def test_window_holds_last_rows_lines(self, multistep, count, rows):
        """The window holds min(count, rows) lines, the most recent ones."""
        progress = multistep(rows)
        progress.show()
        lines = [f"line {i}" for i in range(count)]
        for line in lines:
            progress.send(line)
        progress.flush()

        assert progress.visible_lines() == lines[max(0, count - rows):]
        assert progress.output() == "\n".join(lines)

    def test_fifteen_lines_ten_rows(self, multistep):
        """Window shows lines 6-15, history keeps all 15."""
        progress = multistep(10)
        progress.show()
        for i in range(1, 16):
            progress.send(f"line {i}\n")
        progress.flush()

        assert progress.visible_lines() == [f"line {i}" for i in range(6, 16)]
        assert progress.output().splitlines() == [f"line {i}" for i in range(1, 16)]

    def test_negative_rows_rejected(self, quiet_terminal):
        with pytest.raises(ValueError, match="rows"):
            MultiStep("building", -1, terminal=quiet_terminal)


class TestLifecycle:
    """Tests for show/stop and reading results afterwards."""

    def test_output_empty_before_show(self, multistep):
        progress = multistep()

        assert progress.output() == ""
        assert progress.state is SessionState.IDLE

    def test_history_survives_stop(self, multistep):
        """Lines queued before stop() are consumed, window is cleared."""
        progress = multistep()
        progress.show()
        progress.send("compiling")
        progress.send("linking")
        progress.stop()

        assert progress.output() == "compiling\nlinking"
        assert progress.visible_lines() == []

    def test_stop_twice(self, multistep, term_output):
        progress = multistep()
        progress.show()
        progress.stop()
        progress.stop()

        assert term_output.getvalue() == "[OK] building\n"

    def test_context_manager_abort_skips_completed_title(self, multistep, term_output):
        progress = multistep()

        with pytest.raises(RuntimeError):
            with progress:
                progress.send("error: linker failed")
                raise RuntimeError("build failed")

        assert progress.state is SessionState.STOPPED
        assert "[OK]" not in term_output.getvalue()

    def test_renderer_failure_reported(self, term_output):
        terminal = BrokenTerminal(console=Console(file=term_output), interactive=False)
        progress = MultiStep("building", 3, terminal=terminal)
        progress.show()
        time.sleep(0.05)

        with pytest.raises(ProgressError, match=r"multistep-render\[building\]"):
            progress.stop()

    def test_flush_returns_when_consumer_dies(self, multistep):
        """Lines the dead consumer never took do not block flush()."""
        progress = multistep()
        progress._history = FailingHistory()
        progress.show()
        for i in range(3):
            progress.send(f"line {i}")

        flusher = threading.Thread(target=progress.flush, daemon=True)
        flusher.start()
        flusher.join(timeout=5)

        assert not flusher.is_alive()
        with pytest.raises(ProgressError, match=r"multistep-consumer\[building\]"):
            progress.stop()


class TestReaders:
    """Tests for register_reader() and drain()."""

    def test_per_source_order_preserved(self, multistep):
        """Two concurrent readers interleave, but each keeps its own order."""
        progress = multistep(5)
        progress.show()
        out = io.BytesIO("".join(f"out {i}\n" for i in range(200)).encode())
        err = io.BytesIO("".join(f"err {i}\n" for i in range(200)).encode())
        progress.register_reader(out)
        progress.register_reader(err)

        assert progress.drain(timeout=5)
        progress.flush()

        lines = progress.output().splitlines()
        assert len(lines) == 400
        assert [line for line in lines if line.startswith("out")] == [f"out {i}" for i in range(200)]
        assert [line for line in lines if line.startswith("err")] == [f"err {i}" for i in range(200)]
        assert out.closed and err.closed

    def test_reader_registered_before_show(self, multistep):
        """Lines read before show() wait in the queue."""
        progress = multistep()
        progress.register_reader(io.BytesIO(b"early\nlines\n"))
        assert progress.drain(timeout=5)

        progress.show()
        progress.flush()

        assert progress.output() == "early\nlines"

    def test_undecodable_line_skipped(self, multistep):
        progress = multistep()
        progress.show()
        progress.register_reader(io.BytesIO(b"before\n\xff\xfe broken\nafter\n"))
        progress.drain(timeout=5)
        progress.flush()

        assert progress.output() == "before\nafter"

    def test_text_stream_and_crlf(self, multistep):
        progress = multistep()
        progress.show()
        progress.register_reader(io.StringIO("windows\r\nline\r\n"))
        progress.drain(timeout=5)
        progress.flush()

        assert progress.output() == "windows\nline"

    def test_long_lines_chunked(self, multistep):
        """A 45 character line becomes fragments of 20, 20 and 5."""
        progress = multistep(chunk_width=20)
        progress.show()
        progress.register_reader(io.BytesIO(b"a" * 45 + b"\n"))
        progress.drain(timeout=5)
        progress.flush()

        assert progress.visible_lines() == ["a" * 20, "a" * 20, "a" * 5]

    def test_chunk_width_has_a_floor(self, multistep):
        """Tiny requested widths are clamped up to the minimum."""
        progress = multistep(chunk_width=5)
        progress.show()
        progress.register_reader(io.BytesIO(b"b" * 30 + b"\n"))
        progress.drain(timeout=5)
        progress.flush()

        assert progress.visible_lines() == ["b" * 20, "b" * 10]

    def test_empty_line_kept(self, multistep):
        progress = multistep()
        progress.show()
        progress.register_reader(io.BytesIO(b"one\n\ntwo\n"))
        progress.drain(timeout=5)
        progress.flush()

        assert progress.visible_lines() == ["one", "", "two"]


class TestFrames:
    """Tests for what gets drawn."""

    def test_frame_shape(self, multistep):
        progress = multistep(3)
        frame = progress._frame(["compiling", "warning: \x1b[33munused\x1b[0m  "], 0)

        assert [row.plain for row in frame] == [
            "⠋ building.",
            "| compiling",
            "| warning: unused",
            "|",
        ]

    def test_interactive_session_draws_and_completes(self, live_terminal, term_output):
        progress = MultiStep("building", 2, terminal=live_terminal)
        progress.show()
        progress.send("hello")
        progress.flush()
        time.sleep(0.3)
        progress.stop()

        out = term_output.getvalue()
        assert "| hello" in out
        assert out.endswith("[OK] building\n")

    def test_failed_block_clears_every_drawn_row(self, live_terminal, term_output):
        """A failing owner leaves no partial frame: title plus rows are erased."""
        progress = MultiStep("building", 10, terminal=live_terminal)

        with pytest.raises(RuntimeError, match="exit 3"):
            with progress:
                for i in range(15):
                    progress.send(f"line {i}")
                progress.flush()
                time.sleep(0.2)
                raise RuntimeError("exit 3")

        out = term_output.getvalue()
        assert out.endswith("\x1b[?25h" + "\r\x1b[2K" + "\x1b[1A\x1b[2K" * 11)
        assert "[OK]" not in out
