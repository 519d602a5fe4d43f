"""Unit tests for error handlers and log masking."""

import json
import logging
from unittest.mock import Mock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from finagg.api.middleware.error_handler import (
    handle_database_error,
    handle_generic_error,
    handle_ingestion_error,
    handle_validation_error,
)
from finagg.api.middleware.logging import JSONLogFormatter, mask_sensitive
from finagg.core.errors import ERROR_CATALOG, get_error, is_retryable
from finagg.core.exceptions import InvalidFormatError, MissingHeaderError, UnsupportedBankError

EXPECTED_KEYS = {"error_code", "message", "user_message", "suggestion", "retry_allowed"}


@pytest.fixture
def request_mock():
    request = Mock(spec=Request)
    request.url.path = "/api/v1/uploads/csv"
    request.method = "POST"
    return request


def body(response: JSONResponse) -> dict:
    return json.loads(response.body.decode())


class TestIngestionErrorHandler:
    @pytest.mark.asyncio
    async def test_uses_exception_status_and_catalog(self, request_mock):
        response = await handle_ingestion_error(request_mock, MissingHeaderError("UPLOAD_003", {"header": "Amount"}))

        assert response.status_code == 400
        content = body(response)
        assert set(content) == EXPECTED_KEYS
        assert content["error_code"] == "UPLOAD_003"
        assert content["user_message"] == ERROR_CATALOG["UPLOAD_003"]["user_message"]

    @pytest.mark.asyncio
    async def test_status_override(self, request_mock):
        exc = UnsupportedBankError("BANK_001", http_status=404)
        response = await handle_ingestion_error(request_mock, exc)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_details_not_returned(self, request_mock):
        exc = InvalidFormatError("UPLOAD_001", {"reason": "secret row content"})
        response = await handle_ingestion_error(request_mock, exc)
        assert "secret row content" not in response.body.decode()


class TestOtherHandlers:
    @pytest.mark.asyncio
    async def test_validation_error(self, request_mock):
        exc = RequestValidationError(
            [{"loc": ("query", "bank_id"), "msg": "Field required", "type": "missing"}]
        )
        response = await handle_validation_error(request_mock, exc)

        assert response.status_code == 400
        content = body(response)
        assert content["error_code"] == "VAL_001"
        assert "query.bank_id: Field required" in content["message"]

    @pytest.mark.asyncio
    async def test_database_error_hides_sql(self, request_mock):
        exc = OperationalError("SELECT secret FROM t", {"p": "v"}, Exception("boom"))
        response = await handle_database_error(request_mock, exc)

        assert response.status_code == 500
        assert body(response)["error_code"] == "DB_001"
        assert "secret" not in response.body.decode()

    @pytest.mark.asyncio
    async def test_generic_error(self, request_mock):
        response = await handle_generic_error(request_mock, RuntimeError("internal detail"))

        assert response.status_code == 500
        assert body(response)["error_code"] == "SYS_001"
        assert "internal detail" not in response.body.decode()


class TestErrorCatalog:
    def test_entries_are_complete(self):
        for code, entry in ERROR_CATALOG.items():
            assert entry["code"] == code
            assert set(entry) == {"code", "message", "user_message", "suggestion", "retry_allowed"}

    def test_unknown_code(self):
        assert get_error("NOPE_999")["code"] == "UNKNOWN"

    def test_retryable(self):
        assert is_retryable("DB_001") is True
        assert is_retryable("UPLOAD_003") is False


class TestMasking:
    @pytest.mark.parametrize(
        "text,placeholder",
        [
            ("card 4111 1111 1111 1111 declined", "[CARD]"),
            ("iban GB33BUKB20201555555555", "[IBAN]"),
            ("mail me at jane@example.com", "[EMAIL]"),
            ("/callback?state=abc&code=secret", "[REDACTED]"),
        ],
    )
    def test_masks(self, text, placeholder):
        masked = mask_sensitive(text)
        assert placeholder in masked

    def test_callback_code_removed(self):
        assert "secret" not in mask_sensitive("/callback?state=abc&code=secret")

    def test_plain_text_untouched(self):
        assert mask_sensitive("Chunk persistence failed") == "Chunk persistence failed"

    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord("finagg", logging.INFO, __file__, 1, "CSV upload processed", None, None)
        record.bank_id = 3
        record.rows_total = 250

        data = json.loads(JSONLogFormatter().format(record))

        assert data["message"] == "CSV upload processed"
        assert data["bank_id"] == 3
        assert data["rows_total"] == 250
        assert data["level"] == "INFO"
