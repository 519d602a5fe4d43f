"""Bank repository: banks with their import methods and CSV header mappings."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finagg.models.bank import Bank, BankHeader
from finagg.repositories.base import BaseRepository


class BankRepository(BaseRepository[Bank]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Bank)

    async def list_banks(self) -> list[Bank]:
        result = await self.db.execute(select(Bank).order_by(Bank.name))
        return list(result.scalars().all())

    async def get_headers(self, bank_id: int | None = None) -> list[BankHeader]:
        """Get configured CSV headers (with their field mappings).

        Args:
            bank_id: Restrict to one bank; None returns every bank's headers
        """
        query = select(BankHeader).order_by(BankHeader.bank_id, BankHeader.id)
        if bank_id is not None:
            query = query.where(BankHeader.bank_id == bank_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
