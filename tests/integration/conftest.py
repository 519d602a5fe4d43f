from unittest.mock import AsyncMock, Mock

import pytest
from httpx import ASGITransport, AsyncClient

from finagg.core.banks import ImportMethod
from finagg.core.exceptions import UnsupportedBankError
from finagg.main import create_app
from finagg.parsers import build_parser_factory
from finagg.schemas.bank import BankInfo
from finagg.services.category import CategoryService
from finagg.services.header_mapping import HeaderMappingResolver
from finagg.services.uploader import UploadService

BANKS = {
    3: BankInfo(id=3, name="Revolut", import_methods=(ImportMethod.CSV,)),
    7: BankInfo(id=7, name="Local Credit Union", import_methods=(ImportMethod.CSV,)),
}


async def get_bank(bank_id):
    if bank_id not in BANKS:
        raise UnsupportedBankError("BANK_001", {"bank_id": bank_id}, http_status=404)
    return BANKS[bank_id]


@pytest.fixture
def transaction_service():
    service = Mock()
    service.save_transactions = AsyncMock(side_effect=lambda txns: len(txns))
    service.list_transactions = AsyncMock(return_value=[])
    return service


@pytest.fixture
def app(header_cache, category_cache, categorizer, session_factory, transaction_service):
    """App wired with in-memory caches; the store is replaced by mocks."""
    app = create_app()

    bank_service = Mock()
    bank_service.get_bank = AsyncMock(side_effect=get_bank)
    bank_service.list_banks = AsyncMock(return_value=list(BANKS.values()))
    category_service = CategoryService(category_cache, session_factory)

    app.state.bank_service = bank_service
    app.state.category_service = category_service
    app.state.transaction_service = transaction_service
    app.state.upload_service = UploadService(
        bank_service=bank_service,
        header_resolver=HeaderMappingResolver(header_cache, session_factory),
        category_service=category_service,
        parser_factory=build_parser_factory(categorizer),
        transaction_service=transaction_service,
        chunk_size=2,
    )
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
