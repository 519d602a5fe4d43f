import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

sys.path.append(str(Path(__file__).parents[1] / "src"))

from finagg.caches import CategoryCache, HeaderMappingCache
from finagg.categorization import KeywordCategorizer
from finagg.schemas.bank import HeaderMapping
from finagg.schemas.category import CategoryInfo, CategoryKeywordInfo
from finagg.schemas.transaction import TransactionField

GENERIC_BANK_ID = 7
AMEX_BANK_ID = 2
REVOLUT_BANK_ID = 3

CATEGORIES = [
    CategoryInfo(id=1, name="Uncategorized"),
    CategoryInfo(id=2, name="Transfer"),
    CategoryInfo(id=3, name="Groceries"),
    CategoryInfo(id=4, name="Transport"),
    CategoryInfo(id=5, name="Eating out"),
]

KEYWORDS = [
    CategoryKeywordInfo(id=1, category_id=2, name="transfer"),
    CategoryKeywordInfo(id=2, category_id=2, name="payment received"),
    CategoryKeywordInfo(id=3, category_id=3, name="tesco"),
    CategoryKeywordInfo(id=4, category_id=4, name="uber"),
    CategoryKeywordInfo(id=5, category_id=5, name="uber eats"),
]


def header_mappings(bank_id: int) -> list[HeaderMapping]:
    """Date, Amount, Description (also used for category) and Id columns."""
    return [
        HeaderMapping(bank_id=bank_id, name="Date", required=True, fields=(TransactionField.DATE,)),
        HeaderMapping(bank_id=bank_id, name="Amount", required=True, fields=(TransactionField.AMOUNT,)),
        HeaderMapping(
            bank_id=bank_id,
            name="Description",
            required=False,
            fields=(TransactionField.DESCRIPTION, TransactionField.CATEGORY),
        ),
        HeaderMapping(bank_id=bank_id, name="Id", required=False, fields=(TransactionField.EXTERNAL_ID,)),
    ]


@pytest.fixture
def category_cache():
    """Category cache loaded with the test categories and keywords."""
    cache = CategoryCache()
    cache.reload_categories(CATEGORIES)
    cache.reload_keywords(KEYWORDS)
    return cache


@pytest.fixture
def categorizer(category_cache):
    return KeywordCategorizer(category_cache)


@pytest.fixture
def header_cache():
    cache = HeaderMappingCache()
    cache.set(header_mappings(GENERIC_BANK_ID) + header_mappings(AMEX_BANK_ID) + header_mappings(REVOLUT_BANK_ID))
    return cache


@pytest.fixture
def columns():
    return {
        TransactionField.DATE: [0],
        TransactionField.AMOUNT: [1],
        TransactionField.DESCRIPTION: [2],
        TransactionField.CATEGORY: [2],
        TransactionField.EXTERNAL_ID: [3],
    }


@pytest.fixture
def mock_session():
    """Create a mock database session."""
    session = AsyncMock(spec=AsyncSession)
    execute_result = MagicMock()
    execute_result.rowcount = 0
    scalars_result = MagicMock()
    scalars_result.all.return_value = []
    execute_result.scalars.return_value = scalars_result
    session.execute = AsyncMock(return_value=execute_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def session_factory(mock_session):
    """Stand-in for async_sessionmaker: every call yields mock_session."""
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = mock_session
    factory.return_value.__aexit__.return_value = False
    return factory


@pytest.fixture
def make_header_mappings():
    return header_mappings
