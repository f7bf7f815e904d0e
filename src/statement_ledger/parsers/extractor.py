"""Field extraction from a single transaction context window.

Each pass is a pure function over the window's lines that returns the typed
value it looks for, or None. TransactionExtractor runs them in a fixed order
and turns the first missing required field into a Reject.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional

from statement_ledger.exceptions import ParseError
from statement_ledger.models.extraction import (
    ContextWindow,
    ExtractedTransaction,
    ExtractionResult,
    Reject,
    RejectReason,
    Side,
)
from statement_ledger.utils.date_utils import find_statement_date, is_valid_time
from statement_ledger.utils.decimal_utils import parse_amount, parse_decimal
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# tr-TR numeric literal as it appears inside a line
_NUMBER = r"-?\d[\d.,]*"

# "GZ: -1.234,56 TL" on a single line
INLINE_AMOUNT_PATTERN = re.compile(rf"GZ:\s*({_NUMBER})\s*TL")

# Anchor line ending with the marker; the amount follows on the next line
TRAILING_MARKER_PATTERN = re.compile(r"GZ:\s*$")

# "-1.234,56 TL" anywhere on a line
AMOUNT_PATTERN = re.compile(rf"(?<![\d,.])({_NUMBER})\s*TL")

# "10:15:00 GARAN 100 ADET"
POSITION_PATTERN = re.compile(
    r"(\d{2}:\d{2}:\d{2})\s+([A-Z]{4,6})\s+(\d[\d.,]*)\s+ADET"
)

# "x12,34 TL ALIS"
PRICE_PATTERN = re.compile(r"x(\d[\d.,]*)\s+TL\s+(ALIS|SATIS)")

# Commission and transaction tax lines, e.g. "Komisyon: 1,23 TL", "BSMV 0,06 TL"
COMMISSION_PATTERN = re.compile(rf"(?i)\bkomisyon\b\s*:?\s*({_NUMBER})\s*TL")
TAX_PATTERN = re.compile(rf"(?i)\bbsmv\b\s*:?\s*({_NUMBER})\s*TL")


def extract_date(lines: tuple[str, ...]) -> Optional[date]:
    """Pass 1: settlement date from the first line of the window."""
    if not lines:
        return None
    return find_statement_date(lines[0])


def extract_settlement_amount(lines: tuple[str, ...]) -> Optional[tuple[Decimal, bool]]:
    """Pass 2: settlement amount tied to the GZ: marker.

    The amount is either inline ("GZ: -1.234,56 TL") or, when a line ends
    with the marker, on the line right after it. First hit wins.

    Returns:
        Tuple of (absolute amount, is_negative) or None.

    Raises:
        ParseError: If the amount token is found but is not a valid literal.
    """
    for i, line in enumerate(lines):
        if TRAILING_MARKER_PATTERN.search(line):
            if i + 1 >= len(lines):
                continue
            match = AMOUNT_PATTERN.search(lines[i + 1])
        else:
            match = INLINE_AMOUNT_PATTERN.search(line)

        if match:
            amount, is_negative = parse_amount(match.group(1))
            return abs(amount), is_negative

    return None


def extract_position(lines: tuple[str, ...]) -> Optional[tuple[str, str, Decimal]]:
    """Pass 3: time, symbol and share count. First match in the window wins.

    Returns:
        Tuple of (HH:MM:SS, symbol, share count) or None.

    Raises:
        ParseError: If the share count is not a valid literal.
    """
    for line in lines:
        match = POSITION_PATTERN.search(line)
        if match and is_valid_time(match.group(1)):
            share_count, _ = parse_decimal(match.group(3))
            return match.group(1), match.group(2), abs(share_count)
    return None


def extract_price(lines: tuple[str, ...]) -> Optional[tuple[Decimal, Side]]:
    """Pass 4: unit price and side keyword. First match wins.

    Returns:
        Tuple of (unit price, side) or None.

    Raises:
        ParseError: If the unit price is not a valid literal.
    """
    for line in lines:
        match = PRICE_PATTERN.search(line)
        if match:
            unit_price, _ = parse_decimal(match.group(1))
            return abs(unit_price), Side(match.group(2))
    return None


def extract_commission(lines: tuple[str, ...]) -> Decimal:
    """Pass 5: commission plus transaction tax, zero when absent.

    Unparsable literals are skipped; this pass never rejects a window.
    """
    total = Decimal("0.00")
    for line in lines:
        for pattern in (COMMISSION_PATTERN, TAX_PATTERN):
            for match in pattern.finditer(line):
                try:
                    amount, _ = parse_amount(match.group(1))
                except ParseError:
                    logger.debug(f"Ignoring unparsable fee literal: {match.group(1)!r}")
                    continue
                total += abs(amount)
    return total


class TransactionExtractor:
    """Turns one context window into an ExtractedTransaction or a Reject.

    Holds no state between windows.
    """

    def extract(self, window: ContextWindow) -> ExtractionResult:
        """Extract a transaction from a window.

        Args:
            window: Context window produced by the windower.

        Returns:
            ExtractedTransaction, or Reject naming the first missing field.
        """
        lines = window.lines

        tx_date = extract_date(lines)
        if tx_date is None:
            return self._reject(window, RejectReason.MISSING_DATE, lines[0] if lines else "")

        try:
            settlement = extract_settlement_amount(lines)
        except ParseError as e:
            return self._reject(window, RejectReason.MISSING_AMOUNT, str(e))
        if settlement is None:
            return self._reject(window, RejectReason.MISSING_AMOUNT)
        gross_amount, sign_negative = settlement

        try:
            position = extract_position(lines)
        except ParseError as e:
            return self._reject(window, RejectReason.MISSING_POSITION, str(e))
        if position is None:
            return self._reject(window, RejectReason.MISSING_POSITION)
        time, symbol, share_count = position

        try:
            price = extract_price(lines)
        except ParseError as e:
            return self._reject(window, RejectReason.MISSING_PRICE, str(e))
        if price is None:
            return self._reject(window, RejectReason.MISSING_PRICE)
        unit_price, side = price

        return ExtractedTransaction(
            date=tx_date,
            time=time,
            side=side,
            symbol=symbol,
            share_count=share_count,
            unit_price=unit_price,
            gross_amount=gross_amount,
            sign_negative=sign_negative,
            commission=extract_commission(lines),
        )

    def _reject(self, window: ContextWindow, reason: RejectReason, detail: str = "") -> Reject:
        reject = Reject(reason=reason, detail=detail, anchor_index=window.anchor_index)
        logger.debug(f"Rejected window: {reject}")
        return reject
