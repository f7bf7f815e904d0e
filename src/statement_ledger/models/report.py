"""Result and summary models reported to callers."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from statement_ledger.models.ledger import LedgerRecord, RecordKind
from statement_ledger.utils.decimal_utils import sum_amounts


@dataclass
class IngestResult:
    """Aggregate outcome of ingesting one statement.

    Attributes:
        accepted: Records inserted in this run.
        duplicate_records: Candidates whose fingerprint was already in the ledger.
        total_records: Candidates produced by extraction (rejected windows excluded).
        inserted_ids: Storage ids of the inserted records, in insert order.
        rejected_windows: Context windows that did not yield a transaction.
        document_id: Storage id of the registered source document.
        content_hash: SHA-256 of the source bytes.
        filename: Source file name.
        cancelled: Whether the run stopped early on request.
    """

    accepted: int = 0
    duplicate_records: int = 0
    total_records: int = 0
    inserted_ids: list[int] = field(default_factory=list)
    rejected_windows: int = 0
    document_id: int | None = None
    content_hash: str = ""
    filename: str = ""
    cancelled: bool = False

    @property
    def all_duplicates(self) -> bool:
        """True when the statement had records but every one already existed."""
        return self.accepted == 0 and self.duplicate_records > 0

    @property
    def message(self) -> str:
        """One-line human summary."""
        if self.all_duplicates:
            return f"All {self.total_records} records already exist"
        if self.duplicate_records:
            return (
                f"{self.accepted} new records added, "
                f"{self.duplicate_records} already existed"
            )
        return f"{self.accepted} records added"


@dataclass
class LedgerSummary:
    """Totals over the whole ledger, grouped by kind."""

    record_count: int = 0
    active_days: int = 0
    categories: int = 0
    totals_by_kind: dict[RecordKind, Decimal] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[LedgerRecord]) -> "LedgerSummary":
        """Compute totals from a sequence of ledger records.

        Args:
            records: Ledger records to aggregate.

        Returns:
            LedgerSummary with per-kind totals.
        """
        summary = cls()
        days = set()
        categories = set()
        for record in records:
            summary.record_count += 1
            days.add(record.date)
            categories.add(record.category)
            summary.totals_by_kind[record.kind] = (
                summary.totals_by_kind.get(record.kind, Decimal("0")) + record.amount
            )
        summary.active_days = len(days)
        summary.categories = len(categories)
        return summary

    @property
    def total_income(self) -> Decimal:
        """Credits plus donations."""
        return sum_amounts([amount for kind, amount in self.totals_by_kind.items() if kind.is_income])

    @property
    def total_expense(self) -> Decimal:
        """Debits plus disbursements."""
        return sum_amounts([amount for kind, amount in self.totals_by_kind.items() if not kind.is_income])

    @property
    def net_income(self) -> Decimal:
        """Total income minus total expense."""
        return self.total_income - self.total_expense


@dataclass
class DatabaseInfo:
    """Diagnostic counts over the store."""

    total_records: int = 0
    total_documents: int = 0
    duplicate_fingerprints: int = 0
