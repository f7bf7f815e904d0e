"""Deterministic fingerprints for ledger records and source documents.

The record fingerprint is the ledger's dedup key. It covers only the stable
canonical fields; storage-assigned ids and timestamps never participate.
"""

import hashlib

from statement_ledger.models.ledger import LedgerRecord
from statement_ledger.utils.decimal_utils import format_fixed

FINGERPRINT_LENGTH = 16

# Amount precision inside the fingerprint payload
FINGERPRINT_AMOUNT_PLACES = 8


def fingerprint_payload(record: LedgerRecord) -> str:
    """Build the pipe-joined payload that is hashed into the fingerprint.

    Args:
        record: Canonical ledger record.

    Returns:
        "date|kind|amount(8dp)|description|category|source"
    """
    return "|".join(
        [
            record.date.isoformat(),
            record.kind.value,
            format_fixed(record.amount, FINGERPRINT_AMOUNT_PLACES),
            record.description.strip(),
            record.category,
            record.source,
        ]
    )


def compute_fingerprint(record: LedgerRecord) -> str:
    """Generate the 16-hex-character dedup key for a record.

    Two records with the same date, kind, amount (to 8 decimals), trimmed
    description, category and source share a fingerprint and are the same
    ledger entry.

    Args:
        record: Canonical ledger record.

    Returns:
        First 16 hex characters of the SHA-256 of the payload.
    """
    data = fingerprint_payload(record)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def compute_content_hash(data: bytes) -> str:
    """Hash the raw bytes of a source document.

    Args:
        data: Raw file content.

    Returns:
        Full SHA-256 hex digest.
    """
    return hashlib.sha256(data).hexdigest()
