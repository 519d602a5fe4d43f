from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from finagg.config import settings

# Do not log SQL statement parameters outside development: transaction
# descriptions end up in bound parameters.
async_engine = create_async_engine(
    settings.database_url,
    echo=(settings.db_echo if settings.app_env.lower() == "development" else False),
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
