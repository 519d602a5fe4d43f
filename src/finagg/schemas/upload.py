"""Schemas returned by the CSV upload endpoint."""

from pydantic import BaseModel, Field


class RecordError(BaseModel):
    """All errors for one row of the uploaded file (header row is row 1)."""

    row_id: int = Field(..., ge=1)
    errors: list[str]


class ChunkFailure(BaseModel):
    """A chunk whose transactions could not be persisted."""

    first_row: int
    last_row: int
    error: str


class UploadResult(BaseModel):
    """Outcome of an accepted upload.

    Rejected uploads raise instead, so ``success`` is always true here; row
    and chunk problems are carried in ``record_errors`` and ``chunk_failures``.
    """

    success: bool = True
    rows_total: int = 0
    record_errors: list[RecordError] = Field(default_factory=list)
    chunk_failures: list[ChunkFailure] = Field(default_factory=list)
