import logging
from contextlib import asynccontextmanager
from types import SimpleNamespace

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.api.middleware.error_handler import register_exception_handlers
from finagg.api.middleware.logging import RequestLoggingMiddleware, configure_logging
from finagg.api.v1 import router as v1_router
from finagg.api.v1.health import router as health_router
from finagg.caches import CategoryCache, HeaderMappingCache
from finagg.categorization import KeywordCategorizer
from finagg.clients.monzo import MonzoClient
from finagg.config import Settings, settings
from finagg.db.session import AsyncSessionLocal, async_engine
from finagg.parsers import build_parser_factory
from finagg.services.bank import BankService
from finagg.services.category import CategoryService
from finagg.services.header_mapping import HeaderMappingResolver
from finagg.services.monzo import MonzoService
from finagg.services.transaction import TransactionService
from finagg.services.uploader import UploadService
from finagg.services.user import UserService

logger = logging.getLogger(__name__)


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    config: Settings,
) -> SimpleNamespace:
    """Wire caches, parsers and services around one session factory."""
    category_cache = CategoryCache()
    header_cache = HeaderMappingCache()
    categorizer = KeywordCategorizer(category_cache)

    bank_service = BankService(session_factory)
    category_service = CategoryService(category_cache, session_factory)
    transaction_service = TransactionService(session_factory)
    upload_service = UploadService(
        bank_service=bank_service,
        header_resolver=HeaderMappingResolver(header_cache, session_factory),
        category_service=category_service,
        parser_factory=build_parser_factory(categorizer),
        transaction_service=transaction_service,
        chunk_size=config.upload_chunk_size,
        max_concurrency=config.upload_max_concurrent_chunks,
    )
    monzo_client = MonzoClient(
        client_id=config.monzo_client_id,
        client_secret=config.monzo_client_secret,
        redirect_uri=config.monzo_redirect_uri,
        timeout=config.http_client_timeout_seconds,
    )
    return SimpleNamespace(
        bank_service=bank_service,
        category_service=category_service,
        transaction_service=transaction_service,
        upload_service=upload_service,
        user_service=UserService(session_factory),
        monzo_client=monzo_client,
        monzo_service=MonzoService(
            client=monzo_client,
            transaction_service=transaction_service,
            category_service=category_service,
            categorizer=categorizer,
            bank_id=config.monzo_bank_id,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    services = build_services(AsyncSessionLocal, settings)
    for name, service in vars(services).items():
        setattr(app.state, name, service)

    await services.upload_service.initialize()
    await services.transaction_service.ensure_upcoming_partitions(settings.partition_months_ahead)
    logger.info(f"Application started ({settings.app_env})")

    yield

    await services.monzo_client.aclose()
    await async_engine.dispose()


def create_app() -> FastAPI:
    configure_logging(settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title="Finance Aggregator API",
        description="Bank transaction ingestion and categorization",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("finagg.main:app", host=settings.host, port=settings.port)
