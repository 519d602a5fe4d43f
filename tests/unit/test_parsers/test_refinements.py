"""Tests for bank-specific parser refinements."""

import pytest

from finagg.parsers import RowParser
from finagg.parsers.refinements import AMEX_VARIANT, REVOLUT_VARIANT
from finagg.schemas.transaction import UNCATEGORIZED_ID, TransactionType


class TestRevolutRefinement:
    @pytest.fixture
    def parser(self, categorizer):
        return RowParser(categorizer, REVOLUT_VARIANT)

    @pytest.mark.parametrize(
        "amount,expected",
        [
            ("-5.00", TransactionType.OUTCOME),
            ("5.00", TransactionType.INCOME),
            ("+5.00", TransactionType.INCOME),
        ],
    )
    def test_type_from_sign(self, parser, columns, amount, expected):
        txn, errors = parser.parse_row(["2024-03-01 08:00:00", amount, "Top-up", ""], columns, 3, 1)

        assert errors == []
        assert txn.type == expected

    def test_invalid_amount_leaves_type_unspecified(self, parser, columns):
        txn, errors = parser.parse_row(["2024-03-01", "n/a", "x", ""], columns, 3, 1)

        assert errors == ["invalid amount format: n/a"]
        assert txn.type == TransactionType.UNSPECIFIED


class TestAmexRefinement:
    @pytest.fixture
    def parser(self, categorizer):
        return RowParser(categorizer, AMEX_VARIANT)

    def test_purchase_is_outcome(self, parser, columns):
        txn, errors = parser.parse_row(["15/01/2024", "12.00", "TESCO STORES", "r1"], columns, 2, 1)

        assert errors == []
        assert txn.category_id == 3
        assert txn.type == TransactionType.OUTCOME
        assert txn.amount == "12.00"

    def test_transfer_keeps_type(self, parser, columns):
        txn, errors = parser.parse_row(
            ["15/01/2024", "-500.00", "PAYMENT RECEIVED - THANK YOU", "r2"], columns, 2, 1
        )

        assert errors == []
        assert txn.category_id == 2
        assert txn.type == TransactionType.UNSPECIFIED

    def test_uncategorized_row_is_outcome(self, parser, columns):
        txn, _ = parser.parse_row(["15/01/2024", "4.20", "Corner shop", "r3"], columns, 2, 1)

        assert txn.category_id == UNCATEGORIZED_ID
        assert txn.type == TransactionType.OUTCOME

    def test_type_resolved_even_when_amount_fails(self, parser, columns):
        txn, errors = parser.parse_row(["15/01/2024", "", "Corner shop", "r4"], columns, 2, 1)

        assert errors == ["empty amount data"]
        assert txn.type == TransactionType.OUTCOME
