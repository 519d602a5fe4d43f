"""CSV header row -> canonical field column resolution."""

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finagg.caches import HeaderMappingCache
from finagg.core.exceptions import MissingHeaderError, PersistenceError
from finagg.models.bank import BankHeader
from finagg.repositories.bank import BankRepository
from finagg.schemas.bank import HeaderMapping
from finagg.schemas.transaction import REQUIRED_FIELDS, TransactionField

logger = logging.getLogger(__name__)

BOM = "\ufeff"


def to_header_mappings(headers: Iterable[BankHeader]) -> list[HeaderMapping]:
    mappings = []
    for header in headers:
        fields = []
        for m in header.mappings:
            try:
                fields.append(TransactionField(m.transaction_field))
            except ValueError:
                logger.warning(
                    "Ignoring unknown transaction field in header mapping",
                    extra={"bank_id": header.bank_id, "header": header.name, "field": m.transaction_field},
                )
        mappings.append(
            HeaderMapping(
                bank_id=header.bank_id,
                name=header.name,
                required=header.required,
                fields=tuple(fields),
            )
        )
    return mappings


def normalize_headers(headers: Sequence[str]) -> list[str]:
    """Strip whitespace from header cells and a byte-order mark from the first one."""
    normalized = [h.strip() for h in headers]
    if normalized:
        normalized[0] = normalized[0].lstrip(BOM).strip()
    return normalized


def assign_columns(
    bank_id: int,
    mappings: Sequence[HeaderMapping],
    headers: Sequence[str],
) -> dict[TransactionField, list[int]]:
    """Map each canonical field to the column indices that supply it.

    Indices for a field keep the order the mappings are configured in.

    Raises:
        MissingHeaderError: If a required column is absent, the bank has no
            header configuration, or date/amount end up unmapped (UPLOAD_003)
    """
    if not mappings:
        raise MissingHeaderError("UPLOAD_003", {"bank_id": bank_id, "reason": "no header configuration"})

    positions: dict[str, int] = {}
    for idx, name in enumerate(normalize_headers(headers)):
        positions.setdefault(name, idx)

    columns: dict[TransactionField, list[int]] = {}
    for mapping in mappings:
        idx = positions.get(mapping.name)
        if idx is None:
            if mapping.required:
                raise MissingHeaderError("UPLOAD_003", {"bank_id": bank_id, "header": mapping.name})
            continue
        for trx_field in mapping.fields:
            columns.setdefault(trx_field, []).append(idx)

    unmapped = [f.value for f in REQUIRED_FIELDS if f not in columns]
    if unmapped:
        raise MissingHeaderError("UPLOAD_003", {"bank_id": bank_id, "unmapped_fields": unmapped})

    return columns


class HeaderMappingResolver:
    """Resolves a bank's header row against its configured header mappings."""

    def __init__(self, cache: HeaderMappingCache, session_factory: async_sessionmaker[AsyncSession]):
        self.cache = cache
        self._session_factory = session_factory

    async def load_all(self) -> None:
        """Replace the cache with every bank's header mappings."""
        headers = await self._fetch_headers()
        mappings = to_header_mappings(headers)
        self.cache.set(mappings)
        logger.info("Header mapping cache loaded", extra={"mappings_count": len(mappings)})

    async def get_mappings(self, bank_id: int) -> tuple[HeaderMapping, ...]:
        cached = self.cache.get_by_bank(bank_id)
        if cached is not None:
            return cached

        logger.warning("Header mapping cache miss", extra={"bank_id": bank_id})
        mappings = to_header_mappings(await self._fetch_headers(bank_id))
        if mappings:
            self.cache.put(bank_id, mappings)
        return tuple(mappings)

    async def resolve(self, bank_id: int, headers: Sequence[str]) -> dict[TransactionField, list[int]]:
        mappings = await self.get_mappings(bank_id)
        return assign_columns(bank_id, mappings, headers)

    async def _fetch_headers(self, bank_id: int | None = None) -> list[BankHeader]:
        try:
            async with self._session_factory() as session:
                return await BankRepository(session).get_headers(bank_id)
        except SQLAlchemyError as e:
            logger.error("Failed to get bank headers", extra={"bank_id": bank_id, "error_type": type(e).__name__})
            raise PersistenceError("DB_001", {"bank_id": bank_id}) from e
