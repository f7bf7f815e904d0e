"""In-process ledger store."""

import threading
from dataclasses import replace
from datetime import datetime

from statement_ledger.models.ledger import LedgerRecord, SourceDocument
from statement_ledger.models.report import DatabaseInfo
from statement_ledger.storage.base import LedgerStore, StorageConflict
from statement_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)


class InMemoryLedgerStore(LedgerStore):
    """Ledger store held in process memory.

    Uniqueness checks and inserts run under one lock, so concurrent
    duplicates surface as StorageConflict. Returned objects are copies;
    callers cannot mutate stored rows.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, LedgerRecord] = {}
        self._fingerprints: dict[str, int] = {}
        self._documents: dict[int, SourceDocument] = {}
        self._hashes: dict[str, int] = {}
        self._next_record_id = 1
        self._next_document_id = 1

    def register_document(self, document: SourceDocument) -> int:
        with self._lock:
            if document.content_hash in self._hashes:
                raise StorageConflict(
                    f"Document already registered: {document.filename}",
                    key=document.content_hash,
                )
            document_id = self._next_document_id
            self._next_document_id += 1
            self._documents[document_id] = replace(
                document, id=document_id, ingested_at=datetime.now()
            )
            self._hashes[document.content_hash] = document_id
        return document_id

    def find_document(self, content_hash: str) -> SourceDocument | None:
        with self._lock:
            document_id = self._hashes.get(content_hash)
            if document_id is None:
                return None
            return replace(self._documents[document_id])

    def insert_record(self, record: LedgerRecord) -> int:
        if not record.fingerprint:
            raise ValueError("Record has no fingerprint")

        with self._lock:
            if record.fingerprint in self._fingerprints:
                raise StorageConflict(
                    f"Duplicate fingerprint: {record.fingerprint}", key=record.fingerprint
                )
            record_id = self._next_record_id
            self._next_record_id += 1
            self._records[record_id] = replace(
                record, id=record_id, created_at=datetime.now()
            )
            self._fingerprints[record.fingerprint] = record_id
        return record_id

    def update_document_count(self, document_id: int, count: int) -> None:
        with self._lock:
            document = self._documents.get(document_id)
            if document is None:
                logger.warning(f"Cannot update count, unknown document id {document_id}")
                return
            document.ingested_record_count = count

    def list_records(self) -> list[LedgerRecord]:
        with self._lock:
            records = [replace(r) for r in self._records.values()]
        # Stable sorts: id desc first, then date desc
        records.sort(key=lambda r: r.id or 0, reverse=True)
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    def list_documents(self) -> list[SourceDocument]:
        with self._lock:
            documents = [replace(d) for d in self._documents.values()]
        documents.sort(key=lambda d: d.id or 0, reverse=True)
        return documents

    def remove_duplicate_records(self) -> int:
        with self._lock:
            survivors: dict[str, int] = {}
            for record_id in sorted(self._records):
                fingerprint = self._records[record_id].fingerprint
                survivors.setdefault(fingerprint, record_id)

            keep = set(survivors.values())
            doomed = [record_id for record_id in self._records if record_id not in keep]
            for record_id in doomed:
                del self._records[record_id]
            self._fingerprints = survivors

        logger.info(f"Removed {len(doomed)} duplicate records")
        return len(doomed)

    def database_info(self) -> DatabaseInfo:
        with self._lock:
            counts: dict[str, int] = {}
            for record in self._records.values():
                counts[record.fingerprint] = counts.get(record.fingerprint, 0) + 1
            return DatabaseInfo(
                total_records=len(self._records),
                total_documents=len(self._documents),
                duplicate_fingerprints=sum(1 for c in counts.values() if c > 1),
            )

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._fingerprints.clear()
            self._documents.clear()
            self._hashes.clear()
        logger.info("Ledger cleared")
