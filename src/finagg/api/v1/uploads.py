"""CSV upload endpoint."""

from fastapi import APIRouter, Depends, Query, Request, status

from finagg.api.deps import get_upload_service
from finagg.config import settings
from finagg.core.exceptions import InvalidFormatError
from finagg.schemas.upload import UploadResult
from finagg.services.uploader import UploadService

router = APIRouter(prefix="/uploads", tags=["uploads"])


async def read_body(request: Request, max_bytes: int) -> bytes:
    """Read the raw request body, refusing anything over ``max_bytes``."""
    buf = bytearray()
    async for chunk in request.stream():
        if not chunk:
            continue
        if len(buf) + len(chunk) > max_bytes:
            raise InvalidFormatError(
                "UPLOAD_004",
                {"max_bytes": max_bytes},
                http_status=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            )
        buf.extend(chunk)
    return bytes(buf)


@router.post(
    "/csv",
    response_model=UploadResult,
    summary="Upload a bank CSV export",
    description="""
    Import a bank's CSV export for a user. The request body is the raw CSV
    (`Content-Type: text/csv`), UTF-8 encoded, header row first.

    Rows that fail to parse are still stored with default values and are
    listed in `record_errors` by their row number in the file (the header
    is row 1). Rows already imported are skipped. A row without an id
    column value is identified by its date, amount and description, so two
    such rows that match on all three are stored once.

    ## Error Codes
    - UPLOAD_001: Content is not valid UTF-8 CSV
    - UPLOAD_002: Empty file
    - UPLOAD_003: Required header missing
    - UPLOAD_004: File too large
    - BANK_001: Unknown bank
    - BANK_002: Bank doesn't support CSV imports
    """,
)
async def upload_csv(
    request: Request,
    bank_id: int = Query(..., gt=0),
    user_id: int = Query(..., gt=0),
    service: UploadService = Depends(get_upload_service),
) -> UploadResult:
    data = await read_body(request, settings.upload_max_size_mb * 1024 * 1024)
    return await service.upload_csv(bank_id, user_id, data)
