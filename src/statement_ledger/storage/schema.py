"""SQLAlchemy ORM tables for the ledger."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    CHAR,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from statement_ledger.models.ledger import LedgerRecord, RecordKind, SourceDocument


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ledger_records
# ---------------------------


class LedgerRecordRow(Base):
    __tablename__ = "ledger_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    # Fixed-point so amounts round-trip exactly; the fingerprint uses 8 places.
    amount: Mapped[Decimal] = mapped_column(Numeric(20, 8), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False, server_default="Manual")
    fingerprint: Mapped[str] = mapped_column(CHAR(16), nullable=False, unique=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint(
            "kind in ('gelir', 'gider', 'bağış', 'harcama')",
            name="ck_ledger_records_kind",
        ),
        CheckConstraint("amount >= 0", name="ck_ledger_records_amount"),
        Index("idx_ledger_records_date", "date"),
        Index("idx_ledger_records_kind", "kind"),
        Index("idx_ledger_records_category", "category"),
    )

    @classmethod
    def from_record(cls, record: LedgerRecord) -> LedgerRecordRow:
        return cls(
            date=record.date,
            kind=record.kind.value,
            amount=record.amount,
            description=record.description,
            category=record.category,
            source=record.source,
            fingerprint=record.fingerprint,
        )

    def to_record(self) -> LedgerRecord:
        return LedgerRecord(
            date=self.date,
            kind=RecordKind(self.kind),
            amount=self.amount,
            description=self.description,
            category=self.category,
            source=self.source,
            fingerprint=self.fingerprint,
            id=self.id,
            created_at=self.created_at,
        )


# ---------------------------
# Core: source_documents
# ---------------------------


class SourceDocumentRow(Base):
    __tablename__ = "source_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String, nullable=False)
    content_hash: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)
    byte_size: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    record_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    ingested_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )

    @classmethod
    def from_document(cls, document: SourceDocument) -> SourceDocumentRow:
        return cls(
            filename=document.filename,
            content_hash=document.content_hash,
            byte_size=document.byte_size,
            record_count=document.ingested_record_count,
        )

    def to_document(self) -> SourceDocument:
        return SourceDocument(
            filename=self.filename,
            content_hash=self.content_hash,
            byte_size=self.byte_size,
            ingested_record_count=self.record_count,
            id=self.id,
            ingested_at=self.ingested_at,
        )
