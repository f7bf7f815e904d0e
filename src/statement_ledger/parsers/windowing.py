"""Segmentation of statement lines into per-transaction context windows."""

import re
from collections.abc import Iterable, Iterator

from statement_ledger.models.extraction import ContextWindow
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Marker that follows the settlement date on the first line of a transaction
DEFAULT_ANCHOR_MARKER = "valörlü GZ:"

# Keywords that close a transaction block (buy / sell)
DEFAULT_SIDE_KEYWORDS = ("ALIS", "SATIS")

DEFAULT_MAX_FOLLOWING_LINES = 10

_CID_PATTERN = re.compile(r"\(cid:\d+\)")


def split_lines(text: str) -> list[str]:
    """Turn extracted statement text into the line stream the windower reads.

    Each line is stripped and empty lines are dropped.

    Args:
        text: Raw text as returned by a PDF/text extractor.

    Returns:
        Non-empty, stripped lines in document order.
    """
    if not text:
        return []

    text = text.replace("\u00a0", " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CID_PATTERN.sub("", text)

    return [line.strip() for line in text.split("\n") if line.strip()]


class ContextWindower:
    """Finds anchor lines and bounds the lines that belong to each transaction.

    A window starts at an anchor line and takes up to ``max_following_lines``
    further lines, closing early (inclusive) on the first line that carries a
    side keyword. The anchor line itself is not checked for a side keyword.

    Windows may overlap: an anchor found while an earlier window is still
    open is appended to that window and also opens its own.
    """

    def __init__(
        self,
        anchor_marker: str = DEFAULT_ANCHOR_MARKER,
        side_keywords: tuple[str, ...] = DEFAULT_SIDE_KEYWORDS,
        max_following_lines: int = DEFAULT_MAX_FOLLOWING_LINES,
    ):
        """Initialize windower.

        Args:
            anchor_marker: Literal that identifies an anchor line.
            side_keywords: Literals that close a window.
            max_following_lines: Maximum lines appended after the anchor.
        """
        if max_following_lines < 0:
            raise ValueError("max_following_lines must be >= 0")
        self.anchor_marker = anchor_marker
        self.side_keywords = side_keywords
        self.max_following_lines = max_following_lines

    def is_anchor(self, line: str) -> bool:
        """Check if a line starts a transaction."""
        return self.anchor_marker in line

    def is_side_marker(self, line: str) -> bool:
        """Check if a line carries a buy/sell keyword."""
        return any(keyword in line for keyword in self.side_keywords)

    def segment(self, lines: Iterable[str]) -> Iterator[ContextWindow]:
        """Yield context windows in document order.

        Iterates the lines once. Each line is held by at most
        ``max_following_lines + 1`` open windows.

        Args:
            lines: Ordered statement lines.

        Yields:
            ContextWindow for every anchor line found.
        """
        # Open windows as (anchor_index, collected lines), oldest first
        open_windows: list[tuple[int, list[str]]] = []
        anchors = 0

        for index, line in enumerate(lines):
            still_open: list[tuple[int, list[str]]] = []
            for anchor_index, collected in open_windows:
                collected.append(line)
                following = len(collected) - 1
                if self.is_side_marker(line) or following >= self.max_following_lines:
                    yield ContextWindow(lines=tuple(collected), anchor_index=anchor_index)
                else:
                    still_open.append((anchor_index, collected))
            open_windows = still_open

            if self.is_anchor(line):
                anchors += 1
                logger.debug(f"Anchor found at line {index + 1}: {line!r}")
                if self.max_following_lines == 0:
                    yield ContextWindow(lines=(line,), anchor_index=index)
                else:
                    open_windows.append((index, [line]))

        # Input ended before these windows closed
        for anchor_index, collected in open_windows:
            yield ContextWindow(lines=tuple(collected), anchor_index=anchor_index)

        logger.debug(f"Segmented {anchors} context windows")
