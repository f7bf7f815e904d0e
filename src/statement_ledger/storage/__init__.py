"""Ledger storage adapters."""

from statement_ledger.storage.base import (
    LedgerStore,
    StorageConflict,
    StorageError,
    StorageUnavailable,
)
from statement_ledger.storage.memory import InMemoryLedgerStore
from statement_ledger.storage.sql import SqlLedgerStore, create_ledger_engine

__all__ = [
    "LedgerStore",
    "StorageConflict",
    "StorageError",
    "StorageUnavailable",
    "InMemoryLedgerStore",
    "SqlLedgerStore",
    "create_ledger_engine",
]
