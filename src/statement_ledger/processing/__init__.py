"""Canonicalization, fingerprinting and ingestion of extracted transactions."""

from statement_ledger.processing.canonicalizer import (
    RecordCanonicalizer,
    describe,
    parse_description,
)
from statement_ledger.processing.fingerprint import (
    compute_content_hash,
    compute_fingerprint,
)
from statement_ledger.processing.ingestion import (
    DuplicateDocumentError,
    IngestionOrchestrator,
)

__all__ = [
    "RecordCanonicalizer",
    "describe",
    "parse_description",
    "compute_content_hash",
    "compute_fingerprint",
    "DuplicateDocumentError",
    "IngestionOrchestrator",
]
