"""Chunked concurrent parsing and persistence of CSV data rows.

Rows are split into fixed-size chunks. Each chunk is parsed in a worker
thread and then persisted in one store call. Chunks run concurrently, up
to a configured limit, and a failing chunk never cancels the others.

Row numbers reported in errors are absolute positions in the uploaded
file: the header row is row 1, so the first data row is row 2.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from finagg.core.exceptions import IngestionError
from finagg.parsers import RowParser
from finagg.parsers.generic import ColumnAssignment
from finagg.schemas.transaction import CanonicalTransaction
from finagg.schemas.upload import ChunkFailure, RecordError

logger = logging.getLogger(__name__)

PERSIST_FAILED = "failed to persist transaction"

PersistFn = Callable[[Sequence[CanonicalTransaction]], Awaitable[int]]


@dataclass
class ChunkResult:
    first_row: int
    last_row: int
    row_errors: dict[int, list[str]] = field(default_factory=dict)
    inserted: int = 0
    failure: str | None = None


@dataclass
class BatchResult:
    rows_total: int = 0
    inserted: int = 0
    row_errors: dict[int, list[str]] = field(default_factory=dict)
    chunk_failures: list[ChunkFailure] = field(default_factory=list)

    @property
    def record_errors(self) -> list[RecordError]:
        return [RecordError(row_id=row, errors=errs) for row, errs in sorted(self.row_errors.items())]


def split_chunks(rows: Sequence[Sequence[str]], size: int) -> list[tuple[int, Sequence[Sequence[str]]]]:
    """Split rows into (offset, chunk) pairs; only the last chunk may be short."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [(offset, rows[offset : offset + size]) for offset in range(0, len(rows), size)]


class BatchProcessor:
    """Parses and persists data rows chunk by chunk.

    Example:
        >>> processor = BatchProcessor(service.save_transactions, chunk_size=100)
        >>> result = await processor.process(rows, parser, columns, bank_id=3, user_id=1)
    """

    def __init__(
        self,
        persist: PersistFn,
        chunk_size: int = 100,
        max_concurrency: int = 8,
        header_rows: int = 1,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be positive")
        self._persist = persist
        self.chunk_size = chunk_size
        self.max_concurrency = max_concurrency
        self.header_rows = header_rows

    async def process(
        self,
        rows: Sequence[Sequence[str]],
        parser: RowParser,
        columns: ColumnAssignment,
        bank_id: int,
        user_id: int,
    ) -> BatchResult:
        result = BatchResult(rows_total=len(rows))
        if not rows:
            return result

        semaphore = asyncio.Semaphore(self.max_concurrency)
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self._process_chunk(semaphore, offset, chunk, parser, columns, bank_id, user_id))
                for offset, chunk in split_chunks(rows, self.chunk_size)
            ]

        for task in tasks:
            chunk_result = task.result()
            result.inserted += chunk_result.inserted
            for row, errors in chunk_result.row_errors.items():
                result.row_errors.setdefault(row, []).extend(errors)
            if chunk_result.failure is not None:
                result.chunk_failures.append(
                    ChunkFailure(
                        first_row=chunk_result.first_row,
                        last_row=chunk_result.last_row,
                        error=chunk_result.failure,
                    )
                )
        return result

    async def _process_chunk(
        self,
        semaphore: asyncio.Semaphore,
        offset: int,
        chunk: Sequence[Sequence[str]],
        parser: RowParser,
        columns: ColumnAssignment,
        bank_id: int,
        user_id: int,
    ) -> ChunkResult:
        first_row = self.header_rows + offset + 1
        result = ChunkResult(first_row=first_row, last_row=first_row + len(chunk) - 1)

        async with semaphore:
            transactions, errors = await asyncio.to_thread(parser.parse_rows, chunk, columns, bank_id, user_id)
            for idx, row_errors in errors.items():
                result.row_errors[first_row + idx] = list(row_errors)

            try:
                result.inserted = await self._persist(transactions)
            except IngestionError as e:
                result.failure = e.error_code
            except Exception as e:  # noqa: BLE001
                logger.exception("Unexpected error persisting chunk", extra={"first_row": first_row})
                result.failure = type(e).__name__

        if result.failure is not None:
            logger.error(
                "Chunk persistence failed",
                extra={
                    "first_row": result.first_row,
                    "last_row": result.last_row,
                    "bank_id": bank_id,
                    "error": result.failure,
                },
            )
            for row in range(result.first_row, result.last_row + 1):
                result.row_errors.setdefault(row, []).append(PERSIST_FAILED)

        return result
