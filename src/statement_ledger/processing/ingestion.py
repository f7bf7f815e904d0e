"""Statement ingestion: document-level and record-level deduplication."""

import threading
from collections import Counter
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from statement_ledger.models.extraction import ExtractedTransaction, Reject, RejectReason
from statement_ledger.models.ledger import LedgerRecord, SourceDocument
from statement_ledger.models.report import IngestResult
from statement_ledger.parsers.base import BaseReader
from statement_ledger.parsers.extractor import TransactionExtractor
from statement_ledger.parsers.readers import get_reader
from statement_ledger.parsers.windowing import ContextWindower
from statement_ledger.processing.canonicalizer import RecordCanonicalizer
from statement_ledger.processing.fingerprint import compute_content_hash
from statement_ledger.storage.base import LedgerStore, StorageConflict
from statement_ledger.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class DuplicateDocumentError(Exception):
    """The exact same statement bytes were already ingested."""

    def __init__(self, filename: str, content_hash: str):
        """Initialize DuplicateDocumentError.

        Args:
            filename: Name of the rejected upload.
            content_hash: SHA-256 of its bytes.
        """
        self.filename = filename
        self.content_hash = content_hash
        super().__init__(f"Statement already ingested: {filename or content_hash[:16]}")


class IngestionOrchestrator:
    """Runs statements through the extraction pipeline into a ledger store.

    Pipeline: windower -> extractor -> canonicalizer (fingerprint) -> store.

    Guarantees:
    - A byte-identical statement is rejected before any parsing.
    - A fingerprint is inserted at most once; overlapping statements only
      add their new transactions.
    - Each record insert is independent; a storage failure stops the batch
      but leaves already inserted records in place.
    """

    def __init__(
        self,
        store: LedgerStore,
        windower: Optional[ContextWindower] = None,
        extractor: Optional[TransactionExtractor] = None,
        canonicalizer: Optional[RecordCanonicalizer] = None,
    ):
        """Initialize orchestrator.

        Args:
            store: Ledger store to write to.
            windower: Line segmenter (default settings if None).
            extractor: Window field extractor (default if None).
            canonicalizer: Record builder (default tags if None).
        """
        self.store = store
        self.windower = windower or ContextWindower()
        self.extractor = extractor or TransactionExtractor()
        self.canonicalizer = canonicalizer or RecordCanonicalizer()

    def preview(self, lines: Iterable[str]) -> tuple[list[ExtractedTransaction], list[Reject]]:
        """Run windowing and extraction without touching the store.

        Args:
            lines: Ordered statement lines.

        Returns:
            Tuple of (extracted transactions, rejected windows).
        """
        transactions: list[ExtractedTransaction] = []
        rejects: list[Reject] = []
        for window in self.windower.segment(lines):
            result = self.extractor.extract(window)
            if isinstance(result, Reject):
                rejects.append(result)
            else:
                transactions.append(result)
        return transactions, rejects

    def build_records(self, lines: Iterable[str]) -> tuple[list[LedgerRecord], list[Reject]]:
        """Turn statement lines into fingerprinted candidate records.

        Args:
            lines: Ordered statement lines.

        Returns:
            Tuple of (candidate records, rejected windows).
        """
        transactions, rejects = self.preview(lines)
        records = [self.canonicalizer.canonicalize(tx) for tx in transactions]

        if rejects:
            reasons: Counter[RejectReason] = Counter(r.reason for r in rejects)
            summary = ", ".join(f"{reason.value}={count}" for reason, count in reasons.items())
            logger.info(f"Skipped {len(rejects)} unparsable windows ({summary})")

        return records, rejects

    def ingest(
        self,
        source_bytes: bytes,
        lines: Iterable[str],
        filename: str = "",
        cancel_event: Optional[threading.Event] = None,
    ) -> IngestResult:
        """Ingest one statement.

        Args:
            source_bytes: Raw bytes of the statement file (content hash input).
            lines: Text lines extracted from the statement.
            filename: Original file name, for the document row and logs.
            cancel_event: When set, stops the insert loop between records.

        Returns:
            IngestResult with accepted/duplicate/total counts and inserted ids.

        Raises:
            DuplicateDocumentError: If the same bytes were ingested before.
            StorageUnavailable: If the store fails; committed records remain.
        """
        content_hash = compute_content_hash(source_bytes)

        if self.store.find_document(content_hash) is not None:
            logger.warning(f"Statement already ingested, skipping: {filename} ({content_hash[:16]})")
            raise DuplicateDocumentError(filename, content_hash)

        document = SourceDocument(
            filename=filename,
            content_hash=content_hash,
            byte_size=len(source_bytes),
        )
        try:
            document_id = self.store.register_document(document)
        except StorageConflict as e:
            logger.warning(f"Statement registered concurrently, skipping: {filename}")
            raise DuplicateDocumentError(filename, content_hash) from e

        result = IngestResult(
            document_id=document_id,
            content_hash=content_hash,
            filename=filename,
        )

        with LogContext(logger, "ingest statement", filename=filename, document_id=document_id):
            records, rejects = self.build_records(lines)
            result.total_records = len(records)
            result.rejected_windows = len(rejects)

            for record in records:
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    logger.warning(
                        f"Ingestion of {filename} cancelled after "
                        f"{result.accepted + result.duplicate_records}/{len(records)} records"
                    )
                    break
                self._insert(record, result)

            self.store.update_document_count(document_id, result.accepted)

        logger.info(
            f"Ingested {filename} into {self.store.name}: {result.accepted} inserted, "
            f"{result.duplicate_records} duplicates, {result.total_records} total"
        )
        return result

    def ingest_file(
        self,
        file_path: Path,
        reader: Optional[BaseReader] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> IngestResult:
        """Read a statement file and ingest it.

        Args:
            file_path: Path to a .pdf or .txt statement.
            reader: Reader to use (picked by extension if None).
            cancel_event: Passed through to ingest().

        Returns:
            IngestResult for the file.
        """
        reader = reader or get_reader(file_path)
        statement = reader.read(file_path)
        return self.ingest(
            statement.data,
            statement.lines,
            filename=statement.filename,
            cancel_event=cancel_event,
        )

    def _insert(self, record: LedgerRecord, result: IngestResult) -> None:
        try:
            record_id = self.store.insert_record(record)
        except StorageConflict:
            result.duplicate_records += 1
            logger.debug(f"Duplicate record skipped: {record.fingerprint}")
            return
        result.accepted += 1
        result.inserted_ids.append(record_id)

