"""Unit tests for TransactionService and the insert statement."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from finagg.core.exceptions import PersistenceError
from finagg.parsers import RowParser
from finagg.repositories.transaction import build_insert_statement, next_month, partition_name
from finagg.schemas.transaction import CanonicalTransaction, TransactionType
from finagg.services.transaction import (
    FINGERPRINT_PREFIX,
    UNKNOWN_DATE,
    TransactionService,
    compute_fingerprint,
    months_ahead,
    to_row,
)


def make_txn(**overrides) -> CanonicalTransaction:
    values = {
        "bank_id": 3,
        "user_id": 1,
        "external_id": "ext-1",
        "amount": "-9.99",
        "description": "Tesco",
        "transaction_date": datetime(2024, 2, 10, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return CanonicalTransaction(**values)


def executed_sql(session) -> list[str]:
    return [str(call.args[0]) for call in session.execute.await_args_list]


class TestRowMapping:
    def test_to_row(self):
        row = to_row(make_txn(type=TransactionType.OUTCOME, category_id=3))

        assert row["external_id"] == "ext-1"
        assert row["type"] == "outcome"
        assert row["category_id"] == 3
        assert row["transaction_date"] == datetime(2024, 2, 10, tzinfo=timezone.utc)

    def test_missing_date_stored_on_unknown_date(self):
        assert to_row(make_txn(transaction_date=None))["transaction_date"] == UNKNOWN_DATE

    def test_unparseable_date_keeps_conflict_key_across_uploads(self, categorizer, columns):
        parser = RowParser(categorizer)
        key_fields = ("bank_id", "external_id", "transaction_date")

        first, errors = parser.parse_row(["not-a-date", "-5.00", "Tesco", "ext-1"], columns, 3, 1)
        second, _ = parser.parse_row(["not-a-date", "-5.00", "Tesco", "ext-1"], columns, 3, 1)

        assert errors == ["unknown date format: not-a-date"]
        assert [to_row(first)[k] for k in key_fields] == [to_row(second)[k] for k in key_fields]

    def test_missing_external_id_gets_fingerprint(self):
        row = to_row(make_txn(external_id=None))

        assert row["external_id"].startswith(FINGERPRINT_PREFIX)
        assert row["external_id"] == compute_fingerprint(make_txn(external_id=None))

    def test_fingerprint_depends_on_content(self):
        a = compute_fingerprint(make_txn())
        assert a == compute_fingerprint(make_txn(description="  Tesco "))
        assert a != compute_fingerprint(make_txn(amount="-10.00"))
        assert a != compute_fingerprint(make_txn(user_id=2))


class TestInsertStatement:
    def test_conflicts_on_external_constraint(self):
        stmt = build_insert_statement([to_row(make_txn())])
        sql = str(stmt.compile(dialect=postgresql.dialect()))

        assert 'INSERT INTO "transaction"' in sql
        assert "ON CONFLICT ON CONSTRAINT uniq_transaction_external DO NOTHING" in sql


class TestPartitions:
    def test_partition_name(self):
        assert partition_name(date(2024, 3, 1)) == "transaction_2024_03"

    def test_next_month_rolls_year(self):
        assert next_month(date(2024, 12, 1)) == date(2025, 1, 1)

    def test_months_ahead(self):
        assert months_ahead(date(2024, 11, 20), 3) == [date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1)]

    @pytest.mark.asyncio
    async def test_ensure_partitions_creates_each_month_once(self, session_factory, mock_session):
        service = TransactionService(session_factory)

        await service.ensure_partitions([date(2024, 1, 5), date(2024, 1, 20), date(2024, 2, 1)])
        await service.ensure_partitions([date(2024, 2, 14)])

        sql = executed_sql(mock_session)
        assert len(sql) == 2
        assert '"transaction_2024_01"' in sql[0]
        assert "FOR VALUES FROM ('2024-01-01') TO ('2024-02-01')" in sql[0]
        assert '"transaction_2024_02"' in sql[1]
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ensure_upcoming_partitions(self, session_factory, mock_session):
        service = TransactionService(session_factory)

        await service.ensure_upcoming_partitions(12, today=date(2024, 6, 15))

        sql = executed_sql(mock_session)
        assert len(sql) == 12
        assert "transaction_2024_06" in sql[0]
        assert "transaction_2025_05" in sql[-1]


class TestSaveTransactions:
    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, session_factory):
        with pytest.raises(PersistenceError):
            await TransactionService(session_factory).save_transactions([])

    @pytest.mark.asyncio
    async def test_save_returns_inserted_count(self, session_factory, mock_session):
        insert_result = MagicMock()
        insert_result.rowcount = 1
        mock_session.execute = AsyncMock(side_effect=[MagicMock(), insert_result])
        service = TransactionService(session_factory)

        inserted = await service.save_transactions([make_txn(), make_txn(external_id="ext-2")])

        assert inserted == 1
        assert "ON CONFLICT" in str(mock_session.execute.await_args_list[-1].args[0].compile(dialect=postgresql.dialect()))
        assert mock_session.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_undated_row_gets_its_partition(self, session_factory, mock_session):
        insert_result = MagicMock()
        insert_result.rowcount = 1
        mock_session.execute = AsyncMock(side_effect=[MagicMock(), insert_result])
        service = TransactionService(session_factory)

        await service.save_transactions([make_txn(transaction_date=None)])

        assert '"transaction_1970_01"' in executed_sql(mock_session)[0]

    @pytest.mark.asyncio
    async def test_skipped_rows_logged_as_warning(self, session_factory, mock_session, caplog):
        service = TransactionService(session_factory)
        await service.ensure_partitions([date(2024, 2, 1)])
        insert_result = MagicMock()
        insert_result.rowcount = 1
        mock_session.execute = AsyncMock(return_value=insert_result)

        with caplog.at_level("WARNING", logger="finagg.services.transaction"):
            inserted = await service.save_transactions(
                [make_txn(external_id=None), make_txn(external_id=None)]
            )

        assert inserted == 1
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert warnings[0].skipped == 1

    @pytest.mark.asyncio
    async def test_database_error_wrapped(self, session_factory, mock_session):
        service = TransactionService(session_factory)
        await service.ensure_partitions([date(2024, 2, 1)])
        mock_session.execute = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))

        with pytest.raises(PersistenceError) as exc_info:
            await service.save_transactions([make_txn()])

        assert exc_info.value.error_code == "DB_001"


def test_transaction_types():
    assert TransactionService.transaction_types() == ["unspecified", "income", "outcome"]
