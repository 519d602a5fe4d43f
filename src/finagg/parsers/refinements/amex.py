"""American Express parser refinement.

Amex CSV exports list purchases as positive amounts and don't mark the
direction at all, so the sign can't be used to infer the type. Every listed
row is a debit except transfers (card payments), hence the type is derived
from the inferred category once all fields are parsed.
"""

from finagg.parsers.generic import ParserVariant, RowParser, parse_amount_value
from finagg.schemas.category import TRANSFER_CATEGORY_NAME
from finagg.schemas.transaction import CanonicalTransaction, TransactionField, TransactionType


def parse_amount(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    """Store the amount without touching the type."""
    txn.amount = parse_amount_value(values[0])


def resolve_type(parser: RowParser, txn: CanonicalTransaction) -> None:
    """Force outcome for anything not categorized as a transfer."""
    if parser.categorizer.category_name(txn.category_id) != TRANSFER_CATEGORY_NAME:
        txn.type = TransactionType.OUTCOME


AMEX_VARIANT = ParserVariant(
    name="amex",
    overrides={TransactionField.AMOUNT: parse_amount},
    finalizers=(resolve_type,),
)
