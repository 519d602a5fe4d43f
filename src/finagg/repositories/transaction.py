"""Transaction repository: bulk idempotent inserts, partitions and monthly reads."""
from datetime import date
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from finagg.models.bank import Bank
from finagg.models.category import Category
from finagg.models.transaction import Transaction
from finagg.models.user import User

UNIQUE_EXTERNAL_CONSTRAINT = "uniq_transaction_external"


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def next_month(value: date) -> date:
    if value.month == 12:
        return date(value.year + 1, 1, 1)
    return date(value.year, value.month + 1, 1)


def partition_name(month: date) -> str:
    return f"transaction_{month:%Y_%m}"


def build_insert_statement(rows: list[dict[str, Any]]):
    """Build the bulk insert that skips rows already stored.

    Re-uploading overlapping data hits the (bank, external id, date)
    constraint and those rows are silently skipped.
    """
    stmt = pg_insert(Transaction).values(rows)
    return stmt.on_conflict_do_nothing(constraint=UNIQUE_EXTERNAL_CONSTRAINT)


class TransactionRepository:
    """Repository for the partitioned transaction table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def ensure_partition(self, month: date) -> None:
        """Create the partition holding ``month`` if it doesn't exist yet."""
        start = month_start(month)
        end = next_month(start)
        # Identifiers can't be bound parameters; every part is derived from a date.
        await self.db.execute(
            text(
                f'CREATE TABLE IF NOT EXISTS "{partition_name(start)}" '
                f"PARTITION OF \"transaction\" "
                f"FOR VALUES FROM ('{start.isoformat()}') TO ('{end.isoformat()}')"
            )
        )

    async def insert_many(self, rows: list[dict[str, Any]]) -> int:
        """Insert rows, skipping duplicates. Returns the number of rows written."""
        result = await self.db.execute(build_insert_statement(rows))
        return result.rowcount if result.rowcount is not None and result.rowcount >= 0 else 0

    async def list_enriched(
        self,
        month: int,
        year: int,
        user_id: int | None = None,
        bank_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Get a month's transactions with bank, category and user names."""
        start = date(year, month, 1)
        end = next_month(start)

        query = (
            select(
                Transaction,
                Bank.name.label("bank_name"),
                Category.name.label("category_name"),
                User.name.label("user_name"),
            )
            .outerjoin(Bank, Transaction.bank_id == Bank.id)
            .outerjoin(Category, Transaction.category_id == Category.id)
            .outerjoin(User, Transaction.user_id == User.id)
            .where(Transaction.transaction_date >= start, Transaction.transaction_date < end)
            .order_by(Transaction.id)
        )
        if user_id:
            query = query.where(Transaction.user_id == user_id)
        if bank_id:
            query = query.where(Transaction.bank_id == bank_id)

        result = await self.db.execute(query)
        enriched = []
        for txn, bank_name, category_name, user_name in result.all():
            enriched.append(
                {
                    "id": txn.id,
                    "bank_id": txn.bank_id,
                    "external_id": txn.external_id,
                    "user_id": txn.user_id,
                    "amount": txn.amount,
                    "category_id": txn.category_id,
                    "description": txn.description,
                    "type": txn.type,
                    "transaction_date": txn.transaction_date,
                    "created_at": txn.created_at,
                    "bank_name": bank_name,
                    "category_name": category_name,
                    "user_name": user_name,
                }
            )
        return enriched
