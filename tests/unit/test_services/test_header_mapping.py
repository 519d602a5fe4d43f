"""Tests for header row resolution."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from finagg.caches import HeaderMappingCache
from finagg.core.exceptions import MissingHeaderError
from finagg.schemas.bank import HeaderMapping
from finagg.schemas.transaction import TransactionField
from finagg.services.header_mapping import (
    HeaderMappingResolver,
    assign_columns,
    normalize_headers,
    to_header_mappings,
)

GENERIC_BANK_ID = 7


class TestAssignColumns:
    def test_resolves_configured_columns(self, make_header_mappings):
        columns = assign_columns(GENERIC_BANK_ID, make_header_mappings(GENERIC_BANK_ID), ["Id", "Date", "Description", "Amount"])

        assert columns == {
            TransactionField.EXTERNAL_ID: [0],
            TransactionField.DATE: [1],
            TransactionField.DESCRIPTION: [2],
            TransactionField.CATEGORY: [2],
            TransactionField.AMOUNT: [3],
        }

    def test_strips_bom_and_whitespace(self, make_header_mappings):
        columns = assign_columns(GENERIC_BANK_ID, make_header_mappings(GENERIC_BANK_ID), ["\ufeffDate", " Amount "])

        assert columns[TransactionField.DATE] == [0]
        assert columns[TransactionField.AMOUNT] == [1]

    def test_missing_optional_header_is_skipped(self, make_header_mappings):
        columns = assign_columns(GENERIC_BANK_ID, make_header_mappings(GENERIC_BANK_ID), ["Date", "Amount"])
        assert set(columns) == {TransactionField.DATE, TransactionField.AMOUNT}

    def test_missing_required_header(self, make_header_mappings):
        with pytest.raises(MissingHeaderError) as exc_info:
            assign_columns(GENERIC_BANK_ID, make_header_mappings(GENERIC_BANK_ID), ["Date", "Description"])

        assert exc_info.value.error_code == "UPLOAD_003"
        assert exc_info.value.http_status == 400
        assert exc_info.value.details["header"] == "Amount"

    def test_date_and_amount_must_be_mapped(self):
        mappings = [
            HeaderMapping(bank_id=1, name="When", required=False, fields=(TransactionField.DATE,)),
            HeaderMapping(bank_id=1, name="Value", required=False, fields=(TransactionField.AMOUNT,)),
        ]
        with pytest.raises(MissingHeaderError) as exc_info:
            assign_columns(1, mappings, ["When", "Other"])

        assert exc_info.value.details["unmapped_fields"] == ["amount"]

    def test_bank_without_configuration(self):
        with pytest.raises(MissingHeaderError):
            assign_columns(1, [], ["Date", "Amount"])

    def test_several_columns_feed_one_field(self, make_header_mappings):
        mappings = make_header_mappings(1) + [
            HeaderMapping(bank_id=1, name="Notes", fields=(TransactionField.DESCRIPTION,)),
        ]
        columns = assign_columns(1, mappings, ["Date", "Amount", "Description", "Notes"])

        assert columns[TransactionField.DESCRIPTION] == [2, 3]

    def test_normalize_headers(self):
        assert normalize_headers(["\ufeff Date ", "Amount"]) == ["Date", "Amount"]
        assert normalize_headers([]) == []


class TestHeaderMappingResolver:
    @pytest.mark.asyncio
    async def test_resolve_from_cache(self, header_cache, session_factory):
        resolver = HeaderMappingResolver(header_cache, session_factory)

        columns = await resolver.resolve(GENERIC_BANK_ID, ["Date", "Amount"])

        assert columns[TransactionField.DATE] == [0]
        session_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_miss_loads_and_stores(self, session_factory):
        cache = HeaderMappingCache()
        resolver = HeaderMappingResolver(cache, session_factory)
        stored = [
            SimpleNamespace(bank_id=9, name="Date", required=True, mappings=[SimpleNamespace(transaction_field="date")]),
            SimpleNamespace(bank_id=9, name="Amount", required=True, mappings=[SimpleNamespace(transaction_field="amount")]),
        ]

        with patch("finagg.services.header_mapping.BankRepository") as repo_cls:
            repo_cls.return_value.get_headers = AsyncMock(return_value=stored)
            columns = await resolver.resolve(9, ["Amount", "Date"])

        assert columns == {TransactionField.AMOUNT: [0], TransactionField.DATE: [1]}
        repo_cls.return_value.get_headers.assert_awaited_once_with(9)
        assert [m.name for m in cache.get_by_bank(9)] == ["Date", "Amount"]

    @pytest.mark.asyncio
    async def test_empty_store_result_not_cached(self, session_factory):
        cache = HeaderMappingCache()
        resolver = HeaderMappingResolver(cache, session_factory)
        stored = [
            SimpleNamespace(bank_id=9, name="Date", required=True, mappings=[SimpleNamespace(transaction_field="date")]),
            SimpleNamespace(bank_id=9, name="Amount", required=True, mappings=[SimpleNamespace(transaction_field="amount")]),
        ]

        with patch("finagg.services.header_mapping.BankRepository") as repo_cls:
            repo_cls.return_value.get_headers = AsyncMock(side_effect=[[], stored])
            with pytest.raises(MissingHeaderError):
                await resolver.resolve(9, ["Date", "Amount"])
            assert cache.get_by_bank(9) is None

            columns = await resolver.resolve(9, ["Date", "Amount"])

        assert columns == {TransactionField.DATE: [0], TransactionField.AMOUNT: [1]}
        assert repo_cls.return_value.get_headers.await_count == 2

    @pytest.mark.asyncio
    async def test_load_all_replaces_cache(self, session_factory):
        cache = HeaderMappingCache()
        resolver = HeaderMappingResolver(cache, session_factory)
        stored = [SimpleNamespace(bank_id=4, name="Date", required=True, mappings=[SimpleNamespace(transaction_field="date")])]

        with patch("finagg.services.header_mapping.BankRepository") as repo_cls:
            repo_cls.return_value.get_headers = AsyncMock(return_value=stored)
            await resolver.load_all()

        assert cache.get_by_bank(4)[0].fields == (TransactionField.DATE,)


def test_unknown_stored_field_is_ignored():
    header = SimpleNamespace(
        bank_id=1,
        name="Date",
        required=True,
        mappings=[SimpleNamespace(transaction_field="date"), SimpleNamespace(transaction_field="balance")],
    )
    assert to_header_mappings([header])[0].fields == (TransactionField.DATE,)
