"""Data models for ledger records, source documents and extraction results."""

from statement_ledger.models.extraction import (
    ContextWindow,
    ExtractedTransaction,
    ExtractionResult,
    Reject,
    RejectReason,
    Side,
)
from statement_ledger.models.ledger import LedgerRecord, RecordKind, SourceDocument
from statement_ledger.models.report import DatabaseInfo, IngestResult, LedgerSummary

__all__ = [
    "ContextWindow",
    "ExtractedTransaction",
    "ExtractionResult",
    "Reject",
    "RejectReason",
    "Side",
    "LedgerRecord",
    "RecordKind",
    "SourceDocument",
    "DatabaseInfo",
    "IngestResult",
    "LedgerSummary",
]
