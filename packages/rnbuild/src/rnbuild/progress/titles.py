"""
Spinner titles and line chunking for progress output.

Pure helpers shared by Step and MultiStep:
- progress_title / completed_title: single-line labels for the spinner row
- split_line_to_chunks: grapheme-aware splitting of long output lines so a
  fixed-height live region never wraps
"""

import regex

SPINNER_CHARS = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
UPDATE_DELAY = 0.1  # seconds between redraws

DONE_MARKER = "[OK]"

# One user-perceived character (extended grapheme cluster)
GRAPHEME_PATTERN = regex.compile(r"\X")


def progress_title(label: str, tick: int) -> str:
    """
    Format the animated title for a running task.

    Args:
        label: Human-readable task label
        tick: Animation counter (any non-negative int)

    Returns:
        "<glyph> <label><dots>" with 1-3 trailing dots
    """
    glyph = SPINNER_CHARS[tick % len(SPINNER_CHARS)]
    return f"{glyph} {label}{'.' * ((tick % 3) + 1)}"


def completed_title(label: str) -> str:
    """Format the final title for a finished task."""
    return f"{DONE_MARKER} {label}\n"


def split_line_to_chunks(line: str, max_width: int) -> list[str]:
    """
    Split a line into fragments of at most max_width graphemes.

    Combining marks and joined emoji sequences are never split across
    fragments. An empty line yields a single empty fragment.

    Args:
        line: Text to split (no trailing newline expected)
        max_width: Maximum user-perceived characters per fragment

    Returns:
        Ordered fragments whose concatenation equals line

    Raises:
        ValueError: If max_width is less than 1
    """
    if max_width < 1:
        raise ValueError(f"max_width must be at least 1, got {max_width}")

    graphemes = GRAPHEME_PATTERN.findall(line)
    if not graphemes:
        return [""]
    return [
        "".join(graphemes[i : i + max_width])
        for i in range(0, len(graphemes), max_width)
    ]
