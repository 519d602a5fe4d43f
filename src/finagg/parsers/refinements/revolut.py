"""Revolut parser refinement.

Revolut exports only sign outgoing amounts; anything without a leading
minus is money coming in.
"""

from finagg.parsers.generic import ParserVariant, RowParser, parse_amount_value
from finagg.schemas.transaction import CanonicalTransaction, TransactionField, TransactionType


def parse_amount(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    raw = values[0]
    txn.amount = parse_amount_value(raw)
    txn.type = TransactionType.OUTCOME if raw.startswith("-") else TransactionType.INCOME


REVOLUT_VARIANT = ParserVariant(
    name="revolut",
    overrides={TransactionField.AMOUNT: parse_amount},
)
