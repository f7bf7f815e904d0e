"""Tests for statement line segmentation."""

import pytest

from statement_ledger.parsers.windowing import ContextWindower, split_lines

EXAMPLE_LINES = [
    "2025.07.01 valörlü GZ:",
    "GZ: -1.234,56 TL",
    "10:15:00 GARAN 100 ADET",
    "x12,34 TL ALIS",
]


class TestSplitLines:
    """Tests for split_lines function."""

    def test_strips_and_drops_empty(self) -> None:
        """Test that lines are stripped and blank lines removed."""
        assert split_lines("  a  \n\n   \nb\n") == ["a", "b"]

    def test_normalizes_line_endings(self) -> None:
        """Test CRLF and CR line endings."""
        assert split_lines("a\r\nb\rc") == ["a", "b", "c"]

    def test_non_breaking_space(self) -> None:
        """Test that NBSP is turned into a regular space."""
        assert split_lines("GZ:\u00a0-5,00\u00a0TL") == ["GZ: -5,00 TL"]

    def test_removes_cid_glyphs(self) -> None:
        """Test that unmapped PDF glyph markers are dropped."""
        assert split_lines("(cid:3)\nvalörlü(cid:12) GZ:") == ["valörlü GZ:"]

    def test_empty_text(self) -> None:
        """Test empty input."""
        assert split_lines("") == []


class TestContextWindower:
    """Tests for ContextWindower.segment."""

    @pytest.fixture
    def windower(self) -> ContextWindower:
        """Create a windower with default settings."""
        return ContextWindower()

    def test_example_block_is_one_window(self, windower: ContextWindower) -> None:
        """Test that a complete block produces exactly its four lines."""
        windows = list(windower.segment(EXAMPLE_LINES))

        assert len(windows) == 1
        assert windows[0].lines == tuple(EXAMPLE_LINES)
        assert windows[0].anchor == EXAMPLE_LINES[0]
        assert windows[0].anchor_index == 0

    def test_lines_before_anchor_ignored(self, windower: ContextWindower) -> None:
        """Test that header lines do not open windows."""
        lines = ["VAKIF YATIRIM", "Hesap Ekstresi"] + EXAMPLE_LINES
        windows = list(windower.segment(lines))

        assert len(windows) == 1
        assert windows[0].anchor_index == 2

    def test_closes_at_limit(self, windower: ContextWindower) -> None:
        """Test that a window without a side keyword stops after ten lines."""
        lines = ["2025.07.01 valörlü GZ:"] + [f"line {i}" for i in range(15)]
        windows = list(windower.segment(lines))

        assert len(windows) == 1
        assert len(windows[0]) == 11
        assert windows[0].lines[-1] == "line 9"

    def test_closes_at_end_of_input(self, windower: ContextWindower) -> None:
        """Test that a window open at end of input is still yielded."""
        lines = ["2025.07.01 valörlü GZ:", "GZ: 5,00 TL", "10:15:00 GARAN 1 ADET"]
        windows = list(windower.segment(lines))

        assert len(windows) == 1
        assert len(windows[0]) == 3

    def test_anchor_line_not_tested_for_side(self, windower: ContextWindower) -> None:
        """Test that a side keyword on the anchor line does not close the window."""
        lines = ["2025.07.01 valörlü GZ: SATIS", "GZ: 5,00 TL", "x5,00 TL SATIS", "tail"]
        windows = list(windower.segment(lines))

        assert windows[0].lines == tuple(lines[:3])

    def test_sequential_blocks(self, windower: ContextWindower) -> None:
        """Test back-to-back blocks produce separate windows."""
        second = [
            "2025.07.02 valörlü GZ: 2.000,00 TL",
            "11:00:00 THYAO 10 ADET",
            "x200,00 TL SATIS",
        ]
        windows = list(windower.segment(EXAMPLE_LINES + second))

        assert [w.anchor_index for w in windows] == [0, 4]
        assert windows[1].lines == tuple(second)

    def test_overlapping_windows(self, windower: ContextWindower) -> None:
        """Test that an anchor inside an open window opens its own window too."""
        lines = [
            "2025.07.01 valörlü GZ:",
            "GZ: 1,00 TL",
            "2025.07.02 valörlü GZ:",
            "GZ: 2,00 TL",
            "x1,00 TL ALIS",
        ]
        windows = list(windower.segment(lines))

        assert [w.anchor_index for w in windows] == [0, 2]
        assert windows[0].lines == tuple(lines)
        assert windows[1].lines == tuple(lines[2:])

    def test_accepts_generator(self, windower: ContextWindower) -> None:
        """Test that any single-pass iterable works."""
        windows = list(windower.segment(line for line in EXAMPLE_LINES))
        assert len(windows) == 1

    def test_custom_marker_and_limit(self) -> None:
        """Test configurable anchor marker and window size."""
        windower = ContextWindower(anchor_marker="START", max_following_lines=2)
        windows = list(windower.segment(["START", "a", "b", "c", "START"]))

        assert [w.lines for w in windows] == [("START", "a", "b"), ("START",)]

    def test_zero_following_lines(self) -> None:
        """Test that a zero limit yields the anchor alone."""
        windower = ContextWindower(max_following_lines=0)
        windows = list(windower.segment(EXAMPLE_LINES))

        assert windows[0].lines == (EXAMPLE_LINES[0],)

    def test_negative_limit_rejected(self) -> None:
        """Test that a negative limit is refused."""
        with pytest.raises(ValueError):
            ContextWindower(max_following_lines=-1)
