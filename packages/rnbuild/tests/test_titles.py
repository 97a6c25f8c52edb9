"""
Tests for spinner titles and line chunking.
"""

import pytest
import regex

from rnbuild.progress.titles import (
    SPINNER_CHARS,
    completed_title,
    progress_title,
    split_line_to_chunks,
)


def grapheme_len(text: str) -> int:
    return len(regex.findall(r"\X", text))


class TestProgressTitle:
    """Tests for progress_title()."""

    def test_first_tick(self):
        """Tick 0 uses the first glyph and one dot."""
        assert progress_title("building", 0) == "⠋ building."

    def test_dots_cycle_one_to_three(self):
        """Trailing dots cycle 1, 2, 3, 1."""
        assert progress_title("x", 1).endswith("x..")
        assert progress_title("x", 2).endswith("x...")
        assert progress_title("x", 3).endswith("x.")

    def test_glyph_cycles_through_spinner(self):
        """Each tick advances the glyph and wraps after the last one."""
        glyphs = [progress_title("x", tick)[0] for tick in range(len(SPINNER_CHARS) + 1)]
        assert glyphs[:-1] == list(SPINNER_CHARS)
        assert glyphs[-1] == SPINNER_CHARS[0]

    def test_same_tick_class_same_output(self):
        """Ticks equal modulo glyph count and modulo 3 render identically."""
        assert progress_title("x", 0) == progress_title("x", 30)
        assert progress_title("x", 7) == progress_title("x", 37)


class TestCompletedTitle:
    """Tests for completed_title()."""

    def test_marker_label_newline(self):
        assert completed_title("patching CMakeLists.txt") == "[OK] patching CMakeLists.txt\n"


class TestSplitLineToChunks:
    """Tests for split_line_to_chunks()."""

    def test_empty_line_single_empty_fragment(self):
        assert split_line_to_chunks("", 10) == [""]

    def test_short_line_unchanged(self):
        assert split_line_to_chunks("hello", 10) == ["hello"]

    def test_exact_width_single_fragment(self):
        assert split_line_to_chunks("abcd", 4) == ["abcd"]

    def test_splits_in_order(self):
        assert split_line_to_chunks("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_combining_marks_stay_together(self):
        """An accent composed from two code points is one character."""
        line = "e\u0301" * 3
        assert split_line_to_chunks(line, 2) == ["e\u0301e\u0301", "e\u0301"]

    def test_emoji_sequence_not_split(self):
        """Zero-width-joined emoji count as one character."""
        family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
        assert split_line_to_chunks(family + "ab", 1) == [family, "a", "b"]

    @pytest.mark.parametrize(
        "line",
        [
            "plain ascii build output line",
            "warning: ünïcödé paths in C:\\Users\\dev",
            "日本語のビルドログ",
            "mixed e\u0301 and \U0001F680 rockets",
        ],
    )
    @pytest.mark.parametrize("width", [1, 3, 7, 120])
    def test_fragments_rejoin_and_fit(self, line, width):
        """Fragments concatenate to the input and none exceeds the width."""
        chunks = split_line_to_chunks(line, width)

        assert "".join(chunks) == line
        assert all(grapheme_len(chunk) <= width for chunk in chunks)

    def test_zero_width_rejected(self):
        with pytest.raises(ValueError, match="max_width"):
            split_line_to_chunks("abc", 0)
