"""Generic CSV row parser.

A RowParser turns one raw CSV row plus the field -> column assignment into a
CanonicalTransaction. Each canonical field has a handler function; bank
refinements don't subclass the parser, they supply a ParserVariant that
replaces individual handlers and may add finalizers that run after all
field handlers (e.g. to derive the transaction type from the category).

Parsing is best effort: a handler failure is recorded as a row error and the
remaining fields are still populated.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from finagg.categorization import KeywordCategorizer
from finagg.core.exceptions import FieldParseError
from finagg.schemas.transaction import CanonicalTransaction, TransactionField, TransactionType

FieldHandler = Callable[["RowParser", CanonicalTransaction, list[str]], None]
Finalizer = Callable[["RowParser", CanonicalTransaction], None]
ColumnAssignment = Mapping[TransactionField, Sequence[int]]

# Accepted date layouts, tried in order
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y",
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%Y/%m/%d",
)


def parse_amount_value(raw: str) -> str:
    """Validate a decimal amount string and return it unchanged.

    Raises:
        FieldParseError: If the string is empty or not a finite decimal
    """
    if not raw:
        raise FieldParseError("empty amount data")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise FieldParseError(f"invalid amount format: {raw}") from None
    if not value.is_finite():
        raise FieldParseError(f"invalid amount format: {raw}")
    return raw


def parse_date(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    raw = values[0]
    if not raw:
        raise FieldParseError("empty date data")

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(raw, fmt)
        except ValueError:
            continue
        txn.transaction_date = parsed.replace(tzinfo=timezone.utc)
        return

    raise FieldParseError(f"unknown date format: {raw}")


def parse_amount(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    """Store the amount and infer the type from an explicit sign."""
    raw = values[0]
    txn.amount = parse_amount_value(raw)
    if raw.startswith("-"):
        txn.type = TransactionType.OUTCOME
    elif raw.startswith("+"):
        txn.type = TransactionType.INCOME
    else:
        txn.type = TransactionType.UNSPECIFIED


def parse_description(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    txn.description = ", ".join(values)


def parse_category(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    txn.category_id = parser.categorizer.infer(*values)


def parse_external_id(parser: RowParser, txn: CanonicalTransaction, values: list[str]) -> None:
    txn.external_id = values[0] or None


DEFAULT_HANDLERS: Mapping[TransactionField, FieldHandler] = MappingProxyType(
    {
        TransactionField.DATE: parse_date,
        TransactionField.AMOUNT: parse_amount,
        TransactionField.DESCRIPTION: parse_description,
        TransactionField.CATEGORY: parse_category,
        TransactionField.EXTERNAL_ID: parse_external_id,
    }
)


@dataclass(frozen=True)
class ParserVariant:
    """Per-bank deviations from the default handler set."""

    name: str
    overrides: Mapping[TransactionField, FieldHandler] = field(default_factory=dict)
    finalizers: tuple[Finalizer, ...] = ()


GENERIC_VARIANT = ParserVariant(name="generic")


class RowParser:
    """Parses CSV rows into canonical transactions for one bank variant.

    Example:
        >>> parser = RowParser(categorizer)
        >>> txns, errors = parser.parse_rows(rows, columns, bank_id=3, user_id=1)
    """

    def __init__(self, categorizer: KeywordCategorizer, variant: ParserVariant = GENERIC_VARIANT):
        self.categorizer = categorizer
        self.variant = variant
        self.handlers: Mapping[TransactionField, FieldHandler] = MappingProxyType(
            {**DEFAULT_HANDLERS, **variant.overrides}
        )

    @property
    def name(self) -> str:
        return self.variant.name

    def parse_row(
        self,
        row: Sequence[str],
        columns: ColumnAssignment,
        bank_id: int,
        user_id: int,
    ) -> tuple[CanonicalTransaction, list[str]]:
        """Parse one row.

        Args:
            row: Cells of one CSV record
            columns: Canonical field -> column indices that supply it
            bank_id: Bank the upload belongs to
            user_id: Owner of the transactions

        Returns:
            The transaction (always populated with defaults) and the row's errors
        """
        txn = CanonicalTransaction(bank_id=bank_id, user_id=user_id)
        errors: list[str] = []

        for trx_field in TransactionField:
            indices = columns.get(trx_field)
            handler = self.handlers.get(trx_field)
            if not indices or handler is None:
                continue

            values: list[str] = []
            for idx in indices:
                if idx < len(row):
                    values.append(row[idx].strip())
                else:
                    errors.append(f"missing field at column index {idx}")
            if not values:
                continue

            try:
                handler(self, txn, values)
            except FieldParseError as e:
                errors.append(str(e))

        for finalize in self.variant.finalizers:
            finalize(self, txn)

        return txn, errors

    def parse_rows(
        self,
        rows: Sequence[Sequence[str]],
        columns: ColumnAssignment,
        bank_id: int,
        user_id: int,
    ) -> tuple[list[CanonicalTransaction], dict[int, list[str]]]:
        """Parse a slice of rows.

        Returns:
            All transactions (failed rows included, with their defaults) and
            errors keyed by the 0-based index of the row within ``rows``
        """
        transactions: list[CanonicalTransaction] = []
        row_errors: dict[int, list[str]] = {}
        for i, row in enumerate(rows):
            txn, errors = self.parse_row(row, columns, bank_id, user_id)
            transactions.append(txn)
            if errors:
                row_errors[i] = errors
        return transactions, row_errors
