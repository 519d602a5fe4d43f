"""Exception handlers producing the common JSON error body.

Every error response carries the catalog fields: error_code, message,
user_message, suggestion and retry_allowed.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from finagg.config import settings
from finagg.core.errors import get_error
from finagg.core.exceptions import IngestionError

logger = logging.getLogger(__name__)


def error_body(error_code: str, message: str | None = None) -> dict:
    entry = get_error(error_code)
    return {
        "error_code": error_code,
        "message": message or entry["message"],
        "user_message": entry["user_message"],
        "suggestion": entry["suggestion"],
        "retry_allowed": entry["retry_allowed"],
    }


async def handle_ingestion_error(request: Request, exc: IngestionError) -> JSONResponse:
    # Details may echo uploaded content; only logged in debug.
    extra = {"error_code": exc.error_code, "path": request.url.path, "method": request.method}
    if settings.debug:
        extra["details"] = exc.details
    logger.error(f"Ingestion error: {exc.error_code}", extra=extra)

    return JSONResponse(status_code=exc.http_status, content=error_body(exc.error_code))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error.get("loc", []))
        messages.append(f"{loc}: {error.get('msg', 'Invalid value')}")

    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VAL_001", " | ".join(messages)),
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # str(exc) can include SQL and bound parameters.
    extra = {"path": request.url.path, "method": request.method, "error_type": type(exc).__name__}
    if settings.debug:
        logger.exception(f"Database error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Database error on {request.url.path}", extra=extra)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("DB_001"),
    )


async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
    extra = {"path": request.url.path, "method": request.method, "error_type": type(exc).__name__}
    if settings.debug:
        logger.exception(f"Unexpected error on {request.url.path}", extra=extra)
    else:
        logger.error(f"Unexpected error on {request.url.path}", extra=extra)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("SYS_001"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IngestionError, handle_ingestion_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)
    app.add_exception_handler(Exception, handle_generic_error)
