"""CSV upload orchestration.

Flow: decode -> bank check -> header resolution -> category warm-up ->
chunked parse and persist -> aggregated result. Only the steps before the
batch run can fail the whole upload; everything after is reported per row.
"""

import csv
import io
import logging
import time

from finagg.core.banks import ImportMethod
from finagg.core.exceptions import InvalidFormatError, UnsupportedBankError
from finagg.parsers import ParserFactory, RowParser
from finagg.schemas.upload import UploadResult
from finagg.services.bank import BankService
from finagg.services.batch import BatchProcessor
from finagg.services.category import CategoryService
from finagg.services.header_mapping import HeaderMappingResolver
from finagg.services.transaction import TransactionService

logger = logging.getLogger(__name__)


def decode_csv(data: bytes) -> list[list[str]]:
    """Decode raw upload bytes into CSV records.

    A leading UTF-8 byte-order mark is dropped and blank lines are skipped.
    Rows may have differing lengths; short rows are reported per row later.

    Raises:
        InvalidFormatError: If the data isn't UTF-8 or isn't valid CSV
            (UPLOAD_001), or holds no records (UPLOAD_002)
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidFormatError("UPLOAD_001", {"reason": "not utf-8", "position": e.start}) from e

    try:
        records = [row for row in csv.reader(io.StringIO(text, newline=""), strict=True) if row]
    except csv.Error as e:
        raise InvalidFormatError("UPLOAD_001", {"reason": str(e)}) from e

    if not records or not any(cell.strip() for cell in records[0]):
        raise InvalidFormatError("UPLOAD_002")
    return records


class UploadService:
    """Turns an uploaded bank CSV into persisted transactions plus row errors."""

    def __init__(
        self,
        bank_service: BankService,
        header_resolver: HeaderMappingResolver,
        category_service: CategoryService,
        parser_factory: ParserFactory,
        transaction_service: TransactionService,
        chunk_size: int = 100,
        max_concurrency: int = 8,
    ):
        self.bank_service = bank_service
        self.header_resolver = header_resolver
        self.category_service = category_service
        self.parser_factory = parser_factory
        self.transaction_service = transaction_service
        self.batch = BatchProcessor(
            transaction_service.save_transactions,
            chunk_size=chunk_size,
            max_concurrency=max_concurrency,
        )

    async def initialize(self) -> None:
        await self.header_resolver.load_all()
        await self.category_service.initialize()

    async def get_bank_parser(self, bank_id: int) -> RowParser:
        """Select the parser for a bank that accepts CSV imports.

        Raises:
            UnsupportedBankError: If the bank is unknown (BANK_001) or doesn't
                support CSV imports (BANK_002)
        """
        bank = await self.bank_service.get_bank(bank_id)
        if not bank.supports(ImportMethod.CSV):
            raise UnsupportedBankError("BANK_002", {"bank_id": bank_id, "bank_name": bank.name})
        return self.parser_factory.get_parser(bank.name)

    async def upload_csv(self, bank_id: int, user_id: int, data: bytes) -> UploadResult:
        started = time.perf_counter()
        records = decode_csv(data)
        parser = await self.get_bank_parser(bank_id)
        columns = await self.header_resolver.resolve(bank_id, records[0])
        await self.category_service.warm()

        batch = await self.batch.process(records[1:], parser, columns, bank_id, user_id)

        result = UploadResult(
            success=True,
            rows_total=batch.rows_total,
            record_errors=batch.record_errors,
            chunk_failures=batch.chunk_failures,
        )
        logger.info(
            "CSV upload processed",
            extra={
                "bank_id": bank_id,
                "user_id": user_id,
                "parser": parser.name,
                "rows_total": batch.rows_total,
                "inserted": batch.inserted,
                "rows_with_errors": len(batch.row_errors),
                "chunk_failures": len(batch.chunk_failures),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return result
