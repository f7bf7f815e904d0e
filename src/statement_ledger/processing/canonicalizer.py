"""Mapping from extracted transactions to canonical ledger records."""

import re
from dataclasses import dataclass
from decimal import Decimal

from statement_ledger.models.extraction import ExtractedTransaction, Side
from statement_ledger.models.ledger import LedgerRecord, RecordKind
from statement_ledger.processing.fingerprint import compute_fingerprint
from statement_ledger.utils.decimal_utils import format_tr, parse_decimal

# Bumped whenever extraction or the description template changes, since
# both feed the fingerprint through the source tag.
EXTRACTOR_VERSION = "1"

DEFAULT_CATEGORY = "Hisse Senetleri"
DEFAULT_CHANNEL = "PDF Import Vakıf"

# Read side of the description template. Keep in sync with describe().
DESCRIPTION_PATTERN = re.compile(
    r"^(?P<symbol>[A-Z]{4,6}) Hisse (?P<side>Alım|Satış) "
    r"\((?P<quantity>[\d.,]+) adet x (?P<price>[\d.,]+) TL = (?P<gross>[\d.,]+) TL\) "
    r"\[(?P<time>\d{2}:\d{2}:\d{2})\]$"
)


@dataclass(frozen=True)
class DescriptionFields:
    """Fields recovered from a generated description."""

    symbol: str
    side: Side
    quantity: Decimal
    unit_price: Decimal
    gross: Decimal
    time: str


def describe(tx: ExtractedTransaction) -> str:
    """Render the ledger description for a transaction.

    Format:
        GARAN Hisse Alım (100 adet x 12,34 TL = 1.234,00 TL) [10:15:00]

    Read-side consumers parse this string back, so field order and
    separators must not change.
    """
    quantity = format_tr(tx.share_count)
    price = format_tr(tx.unit_price, min_fraction_digits=2)
    gross = format_tr(tx.computed_gross, min_fraction_digits=2)
    return f"{tx.symbol} Hisse {tx.side.label} ({quantity} adet x {price} TL = {gross} TL) [{tx.time}]"


def parse_description(text: str) -> DescriptionFields | None:
    """Recover the structured fields from a generated description.

    Args:
        text: Ledger description.

    Returns:
        DescriptionFields, or None if the text was not produced by describe().
    """
    match = DESCRIPTION_PATTERN.match(text.strip())
    if not match:
        return None

    side = Side.BUY if match.group("side") == "Alım" else Side.SELL
    quantity, _ = parse_decimal(match.group("quantity"))
    unit_price, _ = parse_decimal(match.group("price"))
    gross, _ = parse_decimal(match.group("gross"))
    return DescriptionFields(
        symbol=match.group("symbol"),
        side=side,
        quantity=quantity,
        unit_price=unit_price,
        gross=gross,
        time=match.group("time"),
    )


def classify(tx: ExtractedTransaction) -> RecordKind:
    """Cash direction of a transaction.

    A buy is an outflow. A negative settlement amount is also treated as an
    outflow even when the side keyword says sell.
    """
    if tx.side is Side.BUY or tx.sign_negative:
        return RecordKind.DEBIT
    return RecordKind.CREDIT


class RecordCanonicalizer:
    """Builds fingerprinted ledger records from extracted transactions."""

    def __init__(
        self,
        category: str = DEFAULT_CATEGORY,
        channel: str = DEFAULT_CHANNEL,
        version: str = EXTRACTOR_VERSION,
    ):
        """Initialize canonicalizer.

        Args:
            category: Category tag written on every record.
            channel: Ingestion channel name, part of the source tag.
            version: Extractor version, part of the source tag.
        """
        self.category = category
        self.source = f"{channel} v{version}"

    def canonicalize(self, tx: ExtractedTransaction) -> LedgerRecord:
        """Map an extracted transaction to a ledger record.

        Args:
            tx: Transaction produced by the extractor.

        Returns:
            LedgerRecord with its fingerprint set.
        """
        record = LedgerRecord(
            date=tx.date,
            kind=classify(tx),
            amount=tx.gross_amount,
            description=describe(tx),
            category=self.category,
            source=self.source,
        )
        record.fingerprint = compute_fingerprint(record)
        return record
