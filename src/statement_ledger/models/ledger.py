"""Ledger data models: persisted records and source documents."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class RecordKind(Enum):
    """Direction/category of a cash movement in the ledger.

    Values are the labels stored in the ledger and used in fingerprints.
    """

    CREDIT = "gelir"  # Money in
    DEBIT = "gider"  # Money out
    DONATION = "bağış"  # Money in, donation
    DISBURSEMENT = "harcama"  # Money out, spending

    @property
    def is_income(self) -> bool:
        """Whether this kind counts toward income totals."""
        return self in (RecordKind.CREDIT, RecordKind.DONATION)


@dataclass
class LedgerRecord:
    """One append-only ledger entry.

    Attributes:
        date: Settlement date of the transaction.
        kind: Direction/category of the cash movement.
        amount: Non-negative magnitude; the sign lives in kind.
        description: Human-readable summary generated from extracted fields.
        category: Classification tag (e.g. "Hisse Senetleri").
        source: Ingestion channel and extractor version.
        fingerprint: 16-hex-character dedup key over the fields above.
        id: Storage-assigned identity, None until inserted.
        created_at: Storage-assigned insert time, None until inserted.
    """

    date: date
    kind: RecordKind
    amount: Decimal
    description: str
    category: str
    source: str
    fingerprint: str = ""
    id: int | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Ledger amount must be non-negative, got {self.amount}")

    @property
    def signed_amount(self) -> Decimal:
        """Return the amount signed by direction (negative for outflows)."""
        return self.amount if self.kind.is_income else -self.amount

    def __repr__(self) -> str:
        return (
            f"LedgerRecord(date={self.date}, kind={self.kind.value}, "
            f"amount={self.amount}, description={self.description[:30]!r}..., "
            f"fingerprint={self.fingerprint})"
        )


@dataclass
class SourceDocument:
    """One ingested statement file.

    Attributes:
        filename: Original file name.
        content_hash: SHA-256 hex digest of the raw bytes.
        byte_size: Size of the raw bytes.
        ingested_record_count: Records actually inserted from this document.
        id: Storage-assigned identity.
        ingested_at: Storage-assigned registration time.
    """

    filename: str
    content_hash: str
    byte_size: int
    ingested_record_count: int = 0
    id: int | None = None
    ingested_at: datetime | None = None
