"""Storage capability interface for the ledger.

Adapters implement storage operations only. Fingerprints, content hashes and
canonicalization are computed by the processing layer and handed in ready.
"""

from abc import ABC, abstractmethod

from statement_ledger.models.ledger import LedgerRecord, SourceDocument
from statement_ledger.models.report import DatabaseInfo, LedgerSummary


class StorageError(Exception):
    """Base class for storage failures."""

    pass


class StorageConflict(StorageError):
    """A uniqueness constraint rejected an insert (fingerprint or content hash)."""

    def __init__(self, message: str, key: str = ""):
        """Initialize StorageConflict.

        Args:
            message: Error message.
            key: The conflicting fingerprint or content hash.
        """
        self.key = key
        super().__init__(message)


class StorageUnavailable(StorageError):
    """The store cannot be reached or failed unexpectedly."""

    pass


class LedgerStore(ABC):
    """Abstract base class for ledger stores.

    Subclasses must guarantee that insert_record and register_document are
    atomic with respect to their uniqueness key: a concurrent duplicate must
    surface as StorageConflict, never as a second row.
    """

    @property
    def name(self) -> str:
        """Return store name for logging."""
        return self.__class__.__name__

    @abstractmethod
    def register_document(self, document: SourceDocument) -> int:
        """Insert a source document keyed by content hash.

        Args:
            document: Document to register.

        Returns:
            Storage id of the new document.

        Raises:
            StorageConflict: If a document with the same content hash exists.
            StorageUnavailable: On storage failure.
        """
        pass

    @abstractmethod
    def find_document(self, content_hash: str) -> SourceDocument | None:
        """Look up a document by content hash.

        Raises:
            StorageUnavailable: On storage failure.
        """
        pass

    @abstractmethod
    def insert_record(self, record: LedgerRecord) -> int:
        """Insert a ledger record keyed by fingerprint.

        Args:
            record: Fingerprinted ledger record.

        Returns:
            Storage id of the new record.

        Raises:
            StorageConflict: If a record with the same fingerprint exists.
            StorageUnavailable: On storage failure.
        """
        pass

    @abstractmethod
    def update_document_count(self, document_id: int, count: int) -> None:
        """Set the number of records ingested from a document.

        Raises:
            StorageUnavailable: On storage failure.
        """
        pass

    @abstractmethod
    def list_records(self) -> list[LedgerRecord]:
        """Return all records ordered by date desc, then insertion order desc."""
        pass

    @abstractmethod
    def list_documents(self) -> list[SourceDocument]:
        """Return all source documents, most recently ingested first."""
        pass

    @abstractmethod
    def remove_duplicate_records(self) -> int:
        """Delete all but the lowest-id record of each fingerprint group.

        This is a repair tool. With uniqueness enforced on insert it finds
        nothing to delete.

        Returns:
            Number of records removed.
        """
        pass

    @abstractmethod
    def database_info(self) -> DatabaseInfo:
        """Return diagnostic counts."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete all records and documents."""
        pass

    def summarize(self) -> LedgerSummary:
        """Aggregate totals by kind over the whole ledger."""
        return LedgerSummary.from_records(self.list_records())
