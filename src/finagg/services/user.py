import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.core.exceptions import PersistenceError
from finagg.repositories.user import UserRepository
from finagg.schemas.user import UserInfo

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_users(self) -> list[UserInfo]:
        try:
            async with self._session_factory() as session:
                users = await UserRepository(session).list_users()
                return [UserInfo.model_validate(u) for u in users]
        except SQLAlchemyError as e:
            logger.error("Failed to list users", extra={"error_type": type(e).__name__})
            raise PersistenceError("DB_001") from e
