"""SQLAlchemy-backed ledger store.

Usage
-----
store = SqlLedgerStore.from_url("sqlite:///ledger.db")
store.insert_record(record)

Uniqueness of fingerprints and content hashes is enforced by UNIQUE
constraints; an IntegrityError on insert is reported as StorageConflict.
Each write runs in its own transaction.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, delete, event, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from statement_ledger.models.ledger import LedgerRecord, SourceDocument
from statement_ledger.models.report import DatabaseInfo
from statement_ledger.storage.base import LedgerStore, StorageConflict, StorageUnavailable
from statement_ledger.storage.schema import Base, LedgerRecordRow, SourceDocumentRow
from statement_ledger.utils.logging_config import LogContext, get_logger, mask_url_password

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///ledger.db"


def create_ledger_engine(database_url: str = DEFAULT_DATABASE_URL, sqlite_wal: bool = True) -> Engine:
    """Create an engine for the ledger database.

    In-memory SQLite URLs share one connection so every session sees the
    same database. File-backed SQLite switches to WAL journaling when
    sqlite_wal is set.

    Args:
        database_url: SQLAlchemy database URL.
        sqlite_wal: Enable WAL mode for file-backed SQLite.

    Returns:
        Configured Engine.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = create_engine(database_url, pool_pre_ping=True)

    if engine.dialect.name == "sqlite" and sqlite_wal:

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


class SqlLedgerStore(LedgerStore):
    """Ledger store on any SQLAlchemy-supported database."""

    def __init__(self, engine: Engine, create_schema: bool = True):
        """Initialize store.

        Args:
            engine: SQLAlchemy engine to use.
            create_schema: Create missing tables on startup.
        """
        self.engine = engine
        self._session_maker = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        if create_schema:
            try:
                Base.metadata.create_all(engine)
            except SQLAlchemyError as e:
                raise StorageUnavailable(f"Cannot initialize database: {e}") from e
            logger.info(f"Ledger schema ready on {mask_url_password(str(engine.url))}")

    @classmethod
    def from_url(cls, database_url: str = DEFAULT_DATABASE_URL, sqlite_wal: bool = True) -> SqlLedgerStore:
        """Create a store from a database URL."""
        with LogContext(logger, "open ledger database", url=database_url):
            return cls(create_ledger_engine(database_url, sqlite_wal=sqlite_wal))

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def register_document(self, document: SourceDocument) -> int:
        row = SourceDocumentRow.from_document(document)
        try:
            with self.session_scope() as session:
                session.add(row)
                session.flush()
                document_id = row.id
        except IntegrityError as e:
            raise StorageConflict(
                f"Document already registered: {document.filename}", key=document.content_hash
            ) from e
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot register document: {e}") from e
        return document_id

    def find_document(self, content_hash: str) -> SourceDocument | None:
        try:
            with self.session_scope() as session:
                row = session.scalars(
                    select(SourceDocumentRow).where(SourceDocumentRow.content_hash == content_hash)
                ).first()
                return row.to_document() if row else None
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot look up document: {e}") from e

    def insert_record(self, record: LedgerRecord) -> int:
        if not record.fingerprint:
            raise ValueError("Record has no fingerprint")

        row = LedgerRecordRow.from_record(record)
        try:
            with self.session_scope() as session:
                session.add(row)
                session.flush()
                record_id = row.id
        except IntegrityError as e:
            raise StorageConflict(
                f"Duplicate fingerprint: {record.fingerprint}", key=record.fingerprint
            ) from e
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot insert record: {e}") from e
        return record_id

    def update_document_count(self, document_id: int, count: int) -> None:
        try:
            with self.session_scope() as session:
                session.execute(
                    update(SourceDocumentRow)
                    .where(SourceDocumentRow.id == document_id)
                    .values(record_count=count)
                )
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot update document count: {e}") from e

    def list_records(self) -> list[LedgerRecord]:
        try:
            with self.session_scope() as session:
                rows = session.scalars(
                    select(LedgerRecordRow).order_by(
                        LedgerRecordRow.date.desc(), LedgerRecordRow.id.desc()
                    )
                ).all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot read ledger: {e}") from e

    def list_documents(self) -> list[SourceDocument]:
        try:
            with self.session_scope() as session:
                rows = session.scalars(
                    select(SourceDocumentRow).order_by(
                        SourceDocumentRow.ingested_at.desc(), SourceDocumentRow.id.desc()
                    )
                ).all()
                return [row.to_document() for row in rows]
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot read documents: {e}") from e

    def remove_duplicate_records(self) -> int:
        survivors = select(func.min(LedgerRecordRow.id)).group_by(LedgerRecordRow.fingerprint)
        try:
            with self.session_scope() as session:
                result = session.execute(
                    delete(LedgerRecordRow).where(LedgerRecordRow.id.not_in(survivors))
                )
                removed = result.rowcount or 0
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot remove duplicates: {e}") from e

        logger.info(f"Removed {removed} duplicate records")
        return removed

    def database_info(self) -> DatabaseInfo:
        duplicated = (
            select(LedgerRecordRow.fingerprint)
            .group_by(LedgerRecordRow.fingerprint)
            .having(func.count() > 1)
            .subquery()
        )
        try:
            with self.session_scope() as session:
                return DatabaseInfo(
                    total_records=session.scalar(select(func.count()).select_from(LedgerRecordRow)) or 0,
                    total_documents=session.scalar(select(func.count()).select_from(SourceDocumentRow)) or 0,
                    duplicate_fingerprints=session.scalar(select(func.count()).select_from(duplicated)) or 0,
                )
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot read database info: {e}") from e

    def clear(self) -> None:
        try:
            with self.session_scope() as session:
                session.execute(delete(LedgerRecordRow))
                session.execute(delete(SourceDocumentRow))
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot clear ledger: {e}") from e
        logger.info("Ledger cleared")
