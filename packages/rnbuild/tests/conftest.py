"""Shared fixtures for rnbuild tests."""

import io

import pytest
from rich.console import Console

from rnbuild.progress import Terminal


@pytest.fixture
def term_output() -> io.StringIO:
    """Captures everything a test terminal writes."""
    return io.StringIO()


@pytest.fixture
def live_terminal(term_output, monkeypatch) -> Terminal:
    """Interactive terminal writing plain text and control codes to term_output."""
    monkeypatch.setenv("TERM", "xterm-256color")
    console = Console(file=term_output, force_terminal=True, color_system=None, width=80)
    return Terminal(console=console, interactive=True)


@pytest.fixture
def quiet_terminal(term_output) -> Terminal:
    """Non-interactive terminal: no frames, only completed titles."""
    console = Console(file=term_output, force_terminal=False, color_system=None, width=80)
    return Terminal(console=console, interactive=False)


@pytest.fixture
def cpp_adapter_source():
    """Factory for a generated cpp-adapter.cpp with the install call on line 45."""

    def make(namespace: str = "metrics", trailing_newline: bool = True) -> str:
        head = [f"// generated line {i}" for i in range(1, 27)]
        body = [f"// body line {i}" for i in range(27, 56)]
        body[18] = f"    return {namespace}::installRustCrate(*runtime, jsCallInvoker);"
        tail = ["// tail line 56", "}"]
        text = "\n".join(head + body + tail)
        return text + "\n" if trailing_newline else text

    return make
