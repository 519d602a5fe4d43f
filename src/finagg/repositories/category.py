"""Category repository."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finagg.models.category import Category, CategoryKeyword
from finagg.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def list_categories(self) -> list[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_keywords(self) -> list[CategoryKeyword]:
        """Get every keyword whose category still exists."""
        result = await self.db.execute(
            select(CategoryKeyword)
            .join(Category, CategoryKeyword.category_id == Category.id)
            .order_by(CategoryKeyword.id)
        )
        return list(result.scalars().all())
