"""Transient models produced while extracting transactions from statement text."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Union


class Side(Enum):
    """Buy or sell direction of a securities transaction."""

    BUY = "ALIS"
    SELL = "SATIS"

    @property
    def label(self) -> str:
        """Human label used in ledger descriptions."""
        return "Alım" if self is Side.BUY else "Satış"


class RejectReason(Enum):
    """Why a context window did not yield a transaction."""

    MISSING_DATE = "missing_date"
    MISSING_AMOUNT = "missing_amount"
    MISSING_POSITION = "missing_position"
    MISSING_PRICE = "missing_price"


@dataclass(frozen=True)
class ContextWindow:
    """Bounded run of lines starting at an anchor line.

    Attributes:
        lines: The anchor line followed by up to ten further lines.
        anchor_index: 0-based position of the anchor line in the line stream.
    """

    lines: tuple[str, ...]
    anchor_index: int = 0

    @property
    def anchor(self) -> str:
        """The anchor line."""
        return self.lines[0]

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class ExtractedTransaction:
    """Structured fields pulled out of one context window."""

    date: date
    time: str
    side: Side
    symbol: str
    share_count: Decimal
    unit_price: Decimal
    gross_amount: Decimal
    sign_negative: bool
    commission: Decimal = Decimal("0.00")

    @property
    def computed_gross(self) -> Decimal:
        """Share count times unit price."""
        return self.share_count * self.unit_price


@dataclass(frozen=True)
class Reject:
    """Terminal outcome for a window that is not a valid transaction."""

    reason: RejectReason
    detail: str = ""
    anchor_index: int = 0

    def __str__(self) -> str:
        suffix = f": {self.detail}" if self.detail else ""
        return f"{self.reason.value} (line {self.anchor_index + 1}){suffix}"


ExtractionResult = Union[ExtractedTransaction, Reject]
