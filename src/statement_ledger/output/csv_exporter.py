"""CSV exporter for ledger records and extracted transactions."""

import csv
from collections.abc import Iterable
from pathlib import Path

from statement_ledger.config import Config
from statement_ledger.models.extraction import ExtractedTransaction
from statement_ledger.models.ledger import LedgerRecord
from statement_ledger.processing.canonicalizer import RecordCanonicalizer, classify, describe
from statement_ledger.utils.date_utils import date_to_iso, format_date
from statement_ledger.utils.decimal_utils import format_fixed
from statement_ledger.utils.logging_config import get_logger
from statement_ledger.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

LEDGER_HEADERS = [
    "ID", "Date", "Type", "Amount", "Description", "Category", "Source",
    "Fingerprint", "Created At",
]

TRANSACTION_HEADERS = [
    "Date", "Time", "Type", "Amount", "StockCode", "ShareCount", "UnitPrice",
    "TransactionType", "Commission", "Description", "Category", "Source",
]


class CSVExporter:
    """Exports ledger contents and statement previews to CSV files.

    Text cells are sanitized against spreadsheet formula injection.
    """

    def __init__(self, config: Config):
        """Initialize CSV exporter.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

    def export_records(self, output_path: Path, records: Iterable[LedgerRecord]) -> Path:
        """Export ledger records, one row per record.

        Args:
            output_path: Destination CSV file.
            records: Records to write, in the order given.

        Returns:
            Path to created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        places = self.output_config.decimal_places
        count = 0

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(LEDGER_HEADERS)

            for record in records:
                writer.writerow([
                    record.id if record.id is not None else "",
                    format_date(record.date, self.output_config.date_format),
                    record.kind.value,
                    format_fixed(record.amount, places),
                    sanitize_for_csv(record.description),
                    sanitize_for_csv(record.category),
                    sanitize_for_csv(record.source),
                    record.fingerprint,
                    record.created_at.isoformat(sep=" ") if record.created_at else "",
                ])
                count += 1

        logger.info(f"Exported {count} ledger records to {output_path}")
        return output_path

    def export_transactions(
        self,
        output_path: Path,
        transactions: Iterable[ExtractedTransaction],
    ) -> Path:
        """Export extracted statement transactions without storing them.

        Args:
            output_path: Destination CSV file.
            transactions: Transactions produced by the extractor.

        Returns:
            Path to created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        canonicalizer = RecordCanonicalizer(
            category=self.config.statement.category,
            channel=self.config.statement.channel,
        )
        places = self.output_config.decimal_places
        count = 0

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(TRANSACTION_HEADERS)

            for tx in transactions:
                writer.writerow([
                    date_to_iso(tx.date),
                    tx.time,
                    classify(tx).value,
                    format_fixed(tx.gross_amount, places),
                    tx.symbol,
                    str(tx.share_count),
                    str(tx.unit_price),
                    tx.side.value,
                    format_fixed(tx.commission, places),
                    sanitize_for_csv(describe(tx)),
                    sanitize_for_csv(canonicalizer.category),
                    sanitize_for_csv(canonicalizer.source),
                ])
                count += 1

        logger.info(f"Exported {count} statement transactions to {output_path}")
        return output_path
