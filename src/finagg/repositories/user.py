"""User repository."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finagg.models.user import User
from finagg.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.name))
        return list(result.scalars().all())
