"""Transaction persistence and monthly reads."""

import asyncio
import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.core.exceptions import PersistenceError
from finagg.repositories.transaction import TransactionRepository, month_start, next_month
from finagg.schemas.transaction import CanonicalTransaction, TransactionResponse, TransactionType

logger = logging.getLogger(__name__)

FINGERPRINT_PREFIX = "fp:"

# Stored date for rows whose date could not be parsed
UNKNOWN_DATE = datetime(1970, 1, 1, tzinfo=timezone.utc)


def compute_fingerprint(txn: CanonicalTransaction) -> str:
    """Stable SHA-256 over the fields that identify a transaction without a source id.

    Fields used: bank, user, date (ISO), amount, description (trimmed).
    """
    payload = {
        "bank_id": txn.bank_id,
        "user_id": txn.user_id,
        "date": txn.transaction_date.isoformat() if txn.transaction_date else None,
        "amount": txn.amount,
        "description": txn.description.strip(),
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return FINGERPRINT_PREFIX + hashlib.sha256(data.encode("utf-8")).hexdigest()


def to_row(txn: CanonicalTransaction) -> dict[str, Any]:
    """Map a canonical transaction to a table row.

    Rows whose date couldn't be parsed are stored on UNKNOWN_DATE, so a
    re-upload hits the same conflict key. Rows without a source identifier
    get a content fingerprint.
    """
    return {
        "bank_id": txn.bank_id,
        "user_id": txn.user_id,
        "external_id": txn.external_id or compute_fingerprint(txn),
        "amount": txn.amount,
        "category_id": txn.category_id,
        "description": txn.description,
        "type": txn.type.value,
        "transaction_date": txn.transaction_date or UNKNOWN_DATE,
        "created_at": txn.created_at,
    }


def months_ahead(start: date, count: int) -> list[date]:
    """First days of ``count`` consecutive months, starting with ``start``'s month."""
    months = [month_start(start)]
    for _ in range(count - 1):
        months.append(next_month(months[-1]))
    return months


class TransactionService:
    """Writes canonical transactions into the partitioned transaction table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._known_partitions: set[date] = set()
        self._partition_lock = asyncio.Lock()

    async def ensure_partitions(self, months: Iterable[date]) -> None:
        """Create the monthly partitions for ``months`` that don't exist yet.

        DDL is serialized so concurrent chunks never race on the same partition.
        """
        wanted = sorted({month_start(m) for m in months})
        async with self._partition_lock:
            missing = [m for m in wanted if m not in self._known_partitions]
            if not missing:
                return
            try:
                async with self._session_factory() as session:
                    repo = TransactionRepository(session)
                    for month in missing:
                        await repo.ensure_partition(month)
                    await session.commit()
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to create transaction partitions",
                    extra={"months": [m.isoformat() for m in missing], "error_type": type(e).__name__},
                )
                raise PersistenceError("DB_001", {"reason": "partition creation failed"}) from e
            self._known_partitions.update(missing)

    async def ensure_upcoming_partitions(self, count: int, today: date | None = None) -> None:
        today = today or datetime.now(timezone.utc).date()
        await self.ensure_partitions(months_ahead(today, count))

    async def save_transactions(self, transactions: Sequence[CanonicalTransaction]) -> int:
        """Persist a batch in one transaction, skipping already-stored rows.

        Returns:
            Number of rows actually inserted

        Raises:
            PersistenceError: If the batch is empty or the store rejects it
        """
        if not transactions:
            raise PersistenceError("DB_001", {"reason": "empty transaction batch"})

        rows = [to_row(t) for t in transactions]
        await self.ensure_partitions(r["transaction_date"].date() for r in rows)

        try:
            async with self._session_factory() as session:
                inserted = await TransactionRepository(session).insert_many(rows)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to save transactions",
                extra={"rows_count": len(rows), "error_type": type(e).__name__},
            )
            raise PersistenceError("DB_001", {"rows_count": len(rows)}) from e

        skipped = len(rows) - inserted
        logger.info(
            "Transactions saved",
            extra={"rows_count": len(rows), "inserted": inserted, "skipped": skipped},
        )
        if skipped:
            # Rows without a source id that share date, amount and description
            # collapse onto one fingerprint and land here too.
            logger.warning(
                "Transactions skipped as already stored",
                extra={"rows_count": len(rows), "skipped": skipped, "bank_id": rows[0]["bank_id"]},
            )
        return inserted

    async def list_transactions(
        self,
        month: int,
        year: int,
        user_id: int | None = None,
        bank_id: int | None = None,
    ) -> list[TransactionResponse]:
        try:
            async with self._session_factory() as session:
                rows = await TransactionRepository(session).list_enriched(month, year, user_id, bank_id)
        except SQLAlchemyError as e:
            logger.error("Failed to list transactions", extra={"month": month, "year": year, "error_type": type(e).__name__})
            raise PersistenceError("DB_001", {"month": month, "year": year}) from e
        return [TransactionResponse.model_validate(r) for r in rows]

    @staticmethod
    def transaction_types() -> list[str]:
        return [t.value for t in TransactionType]
