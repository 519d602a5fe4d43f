"""Bank id -> header mapping configuration cache."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from finagg.schemas.bank import HeaderMapping


class HeaderMappingCache:
    """Holds the latest header mapping snapshot, keyed by bank id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_bank: Mapping[int, tuple[HeaderMapping, ...]] = MappingProxyType({})

    def set(self, mappings: Iterable[HeaderMapping]) -> None:
        """Replace the whole snapshot with ``mappings`` grouped by bank."""
        grouped: dict[int, list[HeaderMapping]] = {}
        for mapping in mappings:
            grouped.setdefault(mapping.bank_id, []).append(mapping)
        snapshot = MappingProxyType({bank_id: tuple(items) for bank_id, items in grouped.items()})

        with self._lock:
            self._by_bank = snapshot

    def put(self, bank_id: int, mappings: Iterable[HeaderMapping]) -> None:
        """Replace a single bank's entry (used to refill after a miss)."""
        items = tuple(mappings)
        with self._lock:
            updated = dict(self._by_bank)
            updated[bank_id] = items
            self._by_bank = MappingProxyType(updated)

    def get_by_bank(self, bank_id: int) -> tuple[HeaderMapping, ...] | None:
        """Return the bank's mappings, or None when the bank isn't cached."""
        with self._lock:
            return self._by_bank.get(bank_id)

    def snapshot(self) -> Mapping[int, tuple[HeaderMapping, ...]]:
        with self._lock:
            return self._by_bank
