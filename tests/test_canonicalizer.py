"""Tests for record canonicalization and description rendering."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from statement_ledger.models.extraction import ExtractedTransaction, Side
from statement_ledger.models.ledger import RecordKind
from statement_ledger.processing.canonicalizer import (
    DEFAULT_CATEGORY,
    RecordCanonicalizer,
    classify,
    describe,
    parse_description,
)
from statement_ledger.processing.fingerprint import compute_fingerprint


def make_transaction(
    side: Side = Side.BUY,
    sign_negative: bool = True,
    share_count: str = "100",
    unit_price: str = "12.34",
    gross_amount: str = "1234.56",
) -> ExtractedTransaction:
    return ExtractedTransaction(
        date=date(2025, 7, 1),
        time="10:15:00",
        side=side,
        symbol="GARAN",
        share_count=Decimal(share_count),
        unit_price=Decimal(unit_price),
        gross_amount=Decimal(gross_amount),
        sign_negative=sign_negative,
    )


class TestClassify:
    """Tests for classify function."""

    def test_buy_is_debit(self) -> None:
        """Test that a buy is an outflow."""
        assert classify(make_transaction(Side.BUY, sign_negative=True)) is RecordKind.DEBIT

    def test_buy_with_positive_amount_is_debit(self) -> None:
        """Test that a buy stays an outflow regardless of sign."""
        assert classify(make_transaction(Side.BUY, sign_negative=False)) is RecordKind.DEBIT

    def test_sell_is_credit(self) -> None:
        """Test that a sell with a positive amount is an inflow."""
        assert classify(make_transaction(Side.SELL, sign_negative=False)) is RecordKind.CREDIT

    def test_negative_sell_is_debit(self) -> None:
        """Test that a negative settlement amount forces an outflow."""
        assert classify(make_transaction(Side.SELL, sign_negative=True)) is RecordKind.DEBIT


class TestDescribe:
    """Tests for describe and parse_description."""

    def test_buy_description(self) -> None:
        """Test the rendered description for a buy."""
        assert describe(make_transaction()) == (
            "GARAN Hisse Alım (100 adet x 12,34 TL = 1.234,00 TL) [10:15:00]"
        )

    def test_sell_description(self) -> None:
        """Test the rendered description for a sell with a fractional quantity."""
        tx = make_transaction(Side.SELL, sign_negative=False, share_count="2.5", unit_price="1000")
        assert describe(tx) == "GARAN Hisse Satış (2,5 adet x 1.000,00 TL = 2.500,00 TL) [10:15:00]"

    def test_parse_description(self) -> None:
        """Test that a generated description can be read back."""
        fields = parse_description(describe(make_transaction()))

        assert fields is not None
        assert fields.symbol == "GARAN"
        assert fields.side is Side.BUY
        assert fields.quantity == Decimal("100")
        assert fields.unit_price == Decimal("12.34")
        assert fields.gross == Decimal("1234.00")
        assert fields.time == "10:15:00"

    def test_parse_foreign_description(self) -> None:
        """Test that free text is not mistaken for a generated description."""
        assert parse_description("Bağış - Ahmet Yılmaz") is None


class TestRecordCanonicalizer:
    """Tests for RecordCanonicalizer."""

    @pytest.fixture
    def canonicalizer(self) -> RecordCanonicalizer:
        """Create a canonicalizer with default tags."""
        return RecordCanonicalizer()

    def test_example_record(self, canonicalizer: RecordCanonicalizer) -> None:
        """Test the reference transaction maps to a debit of the settlement amount."""
        record = canonicalizer.canonicalize(make_transaction())

        assert record.kind is RecordKind.DEBIT
        assert record.amount == Decimal("1234.56")
        assert record.date == date(2025, 7, 1)
        assert record.category == DEFAULT_CATEGORY
        assert record.source == "PDF Import Vakıf v1"
        assert record.id is None
        assert record.signed_amount == Decimal("-1234.56")

    def test_fingerprint_assigned(self, canonicalizer: RecordCanonicalizer) -> None:
        """Test the record carries its computed fingerprint."""
        record = canonicalizer.canonicalize(make_transaction())

        assert len(record.fingerprint) == 16
        assert record.fingerprint == compute_fingerprint(record)

    def test_deterministic(self, canonicalizer: RecordCanonicalizer) -> None:
        """Test the same transaction always yields the same record."""
        first = canonicalizer.canonicalize(make_transaction())
        second = RecordCanonicalizer().canonicalize(make_transaction())

        assert first == second

    def test_custom_tags_change_fingerprint(self, canonicalizer: RecordCanonicalizer) -> None:
        """Test that category, channel and version feed the fingerprint."""
        base = canonicalizer.canonicalize(make_transaction()).fingerprint

        assert RecordCanonicalizer(category="Fon").canonicalize(make_transaction()).fingerprint != base
        assert RecordCanonicalizer(channel="CSV").canonicalize(make_transaction()).fingerprint != base
        assert RecordCanonicalizer(version="2").canonicalize(make_transaction()).fingerprint != base

    def test_negative_amount_rejected(self) -> None:
        """Test ledger amounts are magnitudes; the sign lives in the kind."""
        record = RecordCanonicalizer().canonicalize(make_transaction())
        with pytest.raises(ValueError, match="non-negative"):
            replace(record, amount=Decimal("-1"))
