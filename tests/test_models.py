"""Tests for transaction and result models."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from smart_recon.models import (
    AggregationResult,
    ConsumedIds,
    MatchKind,
    MatchResult,
    ReconciliationRun,
    id_sort_key,
    normalize_description,
)
from smart_recon.utils.formatting import format_currency
from tests.factories import TransactionFactory


class TestNormalizedTransaction:
    """Tests for the normalized transaction record."""

    def test_normalized_description_derived(self):
        txn = TransactionFactory.statement("S1", "10.00", "  AMZN  Mktp*ZA, Ltd. ")

        assert txn.normalized_description == "amzn mktpza ltd"

    def test_explicit_normalized_description_kept(self):
        txn = TransactionFactory.statement("S1", "10.00", "Coffee Shop")
        explicit = type(txn)(
            id="S2",
            source=txn.source,
            date=txn.date,
            amount=txn.amount,
            sign=txn.sign,
            description="Coffee Shop",
            normalized_description="cafe",
        )

        assert explicit.normalized_description == "cafe"

    def test_normalized_date_is_iso(self):
        txn = TransactionFactory.ledger("L1", "1.00", on=date(2024, 3, 7))

        assert txn.normalized_date == "2024-03-07"

    def test_is_immutable(self):
        txn = TransactionFactory.ledger("L1", "1.00")

        with pytest.raises(FrozenInstanceError):
            txn.amount = Decimal("2.00")


class TestHelpers:
    """Tests for description normalization and id ordering."""

    def test_normalize_description_strips_punctuation(self):
        assert normalize_description("McDonald's  #1234") == "mcdonalds 1234"

    def test_normalize_description_underscores(self):
        assert normalize_description("ACME_SUPPLIES") == "acmesupplies"

    def test_id_sort_key_is_natural(self):
        ids = ["S10", "S2", "S1", "A"]

        assert sorted(ids, key=id_sort_key) == ["A", "S1", "S2", "S10"]

    def test_id_sort_key_distinguishes_padding(self):
        assert id_sort_key("01") != id_sort_key("1")

    @pytest.mark.parametrize("txn_id", ["²", "S①", "x²10", "١٢"])
    def test_id_sort_key_accepts_unicode_digit_characters(self, txn_id):
        key = id_sort_key(txn_id)

        assert key[1] == txn_id

    def test_id_sort_key_orders_superscripts_as_text(self):
        ids = ["L²", "L10", "L2"]

        assert sorted(ids, key=id_sort_key)[:2] == ["L2", "L10"]


class TestResults:
    """Tests for result value objects."""

    def test_consumed_ids_with_results(self):
        s1 = TransactionFactory.statement("S1", "10.00")
        s2 = TransactionFactory.statement("S2", "5.00")
        s3 = TransactionFactory.statement("S3", "5.00")
        l1 = TransactionFactory.ledger("L1", "10.00")
        l2 = TransactionFactory.ledger("L2", "10.00")

        match = MatchResult(s1, l1, 1.0, MatchKind.EXACT)
        agg = AggregationResult(l2, (s2, s3), Decimal("10.00"), Decimal("0.00"))

        original = ConsumedIds()
        consumed = original.with_results([match, agg])

        assert consumed.statement_ids == frozenset({"S1", "S2", "S3"})
        assert consumed.ledger_ids == frozenset({"L1", "L2"})
        assert original.statement_ids == frozenset()

    def test_match_differences(self):
        s1 = TransactionFactory.statement("S1", "10.00", on=date(2024, 1, 1))
        l1 = TransactionFactory.ledger("L1", "10.01", on=date(2024, 1, 4))

        match = MatchResult(s1, l1, 0.9, MatchKind.FUZZY)

        assert match.amount_difference == Decimal("0.01")
        assert match.date_difference_days == 3

    def test_run_splits_match_kinds(self):
        s1 = TransactionFactory.statement("S1", "1.00")
        s2 = TransactionFactory.statement("S2", "1.00")
        l1 = TransactionFactory.ledger("L1", "1.00")
        l2 = TransactionFactory.ledger("L2", "1.00")
        run = ReconciliationRun(
            matched=(
                MatchResult(s1, l1, 1.0, MatchKind.EXACT),
                MatchResult(s2, l2, 0.8, MatchKind.FUZZY),
            )
        )

        assert [m.statement_entry.id for m in run.exact_matches] == ["S1"]
        assert [m.statement_entry.id for m in run.fuzzy_matches] == ["S2"]


class TestFormatCurrency:
    """Tests for the presentation currency formatter."""

    def test_negative_with_thousands(self):
        assert format_currency(Decimal("-1234.5"), "R") == "-R1,234.50"

    def test_zero_with_custom_symbol(self):
        assert format_currency(Decimal("0"), "$") == "$0.00"

    def test_rounds_half_up(self):
        assert format_currency("2.345") == "R2.35"
