"""Bank registry service."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.core.banks import ImportMethod
from finagg.core.exceptions import PersistenceError, UnsupportedBankError
from finagg.models.bank import Bank
from finagg.repositories.bank import BankRepository
from finagg.schemas.bank import BankInfo

logger = logging.getLogger(__name__)


def to_bank_info(bank: Bank) -> BankInfo:
    return BankInfo(
        id=bank.id,
        name=bank.name,
        import_methods=tuple(ImportMethod.parse(m.import_method) for m in bank.import_methods),
    )


class BankService:
    """Resolves banks and their supported import methods."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_bank(self, bank_id: int) -> BankInfo:
        """Get a bank by ID.

        Raises:
            UnsupportedBankError: If the bank doesn't exist (BANK_001)
            PersistenceError: If the store can't be read
        """
        try:
            async with self._session_factory() as session:
                bank = await BankRepository(session).get_by_id(bank_id)
                info = to_bank_info(bank) if bank else None
        except SQLAlchemyError as e:
            logger.error("Failed to get bank", extra={"bank_id": bank_id, "error_type": type(e).__name__})
            raise PersistenceError("DB_001", {"bank_id": bank_id}) from e

        if info is None:
            raise UnsupportedBankError("BANK_001", {"bank_id": bank_id}, http_status=404)
        return info

    async def list_banks(self) -> list[BankInfo]:
        try:
            async with self._session_factory() as session:
                banks = await BankRepository(session).list_banks()
                return [to_bank_info(b) for b in banks]
        except SQLAlchemyError as e:
            logger.error("Failed to list banks", extra={"error_type": type(e).__name__})
            raise PersistenceError("DB_001") from e
