"""Category registry service.

Reads go through the CategoryCache and fall back to the store on a miss.
Results fetched on a miss are written back to the cache.
"""

import logging
from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.caches import CategoryCache
from finagg.core.exceptions import NotFoundError, PersistenceError
from finagg.repositories.category import CategoryRepository
from finagg.schemas.category import CategoryInfo, CategoryKeywordInfo

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, cache: CategoryCache, session_factory: async_sessionmaker[AsyncSession]):
        self.cache = cache
        self._session_factory = session_factory

    async def initialize(self) -> None:
        """Load keywords and categories into the cache."""
        await self._reload_keywords()
        await self._reload_categories()
        logger.info(
            "Category cache loaded",
            extra={
                "keywords_count": len(self.cache.keywords() or {}),
                "categories_count": len(self.cache.categories()),
            },
        )

    async def list_categories(self) -> list[CategoryInfo]:
        try:
            async with self._session_factory() as session:
                categories = await CategoryRepository(session).list_categories()
                return [CategoryInfo.model_validate(c) for c in categories]
        except SQLAlchemyError as e:
            logger.error("Failed to list categories", extra={"error_type": type(e).__name__})
            raise PersistenceError("DB_001") from e

    async def get_category(self, category_id: int) -> CategoryInfo:
        """Get a category by ID.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        cached = self.cache.get_category(category_id)
        if cached is not None:
            return cached

        logger.warning("Category cache miss", extra={"category_id": category_id})
        try:
            async with self._session_factory() as session:
                category = await CategoryRepository(session).get_by_id(category_id)
                info = CategoryInfo.model_validate(category) if category else None
        except SQLAlchemyError as e:
            logger.error("Failed to get category", extra={"category_id": category_id, "error_type": type(e).__name__})
            raise PersistenceError("DB_001", {"category_id": category_id}) from e

        if info is None:
            raise NotFoundError("API_001", {"category_id": category_id})
        self.cache.put_category(info)
        return info

    async def get_keyword_map(self) -> Mapping[str, int]:
        """Get the keyword -> category id map, loading it on a miss."""
        keywords = self.cache.keywords()
        if keywords is not None:
            return keywords

        logger.warning("Keyword cache miss, reloading from store")
        await self._reload_keywords()
        return self.cache.keywords() or {}

    async def warm(self) -> None:
        """Make sure every lookup category inference may need is cached.

        Category inference runs in worker threads and reads only the cache,
        so the keyword map and every category it references are loaded here
        beforehand.
        """
        keywords = await self.get_keyword_map()
        missing = {cid for cid in keywords.values() if self.cache.get_category(cid) is None}
        if missing:
            logger.warning("Categories missing from cache, reloading", extra={"category_ids": sorted(missing)})
            await self._reload_categories()

    async def _reload_keywords(self) -> None:
        try:
            async with self._session_factory() as session:
                keywords = await CategoryRepository(session).get_keywords()
                infos = [CategoryKeywordInfo.model_validate(k) for k in keywords]
        except SQLAlchemyError as e:
            logger.error("Failed to get category keywords", extra={"error_type": type(e).__name__})
            raise PersistenceError("DB_001") from e
        self.cache.reload_keywords(infos)

    async def _reload_categories(self) -> None:
        try:
            async with self._session_factory() as session:
                categories = await CategoryRepository(session).list_categories()
                infos = [CategoryInfo.model_validate(c) for c in categories]
        except SQLAlchemyError as e:
            logger.error("Failed to get categories", extra={"error_type": type(e).__name__})
            raise PersistenceError("DB_001") from e
        self.cache.reload_categories(infos)
