"""Bank names and import methods known to the ingestion pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Final

AMEX_BANK_NAME: Final[str] = "American express"
REVOLUT_BANK_NAME: Final[str] = "Revolut"
UNKNOWN_BANK_NAME: Final[str] = "Unknown"


class ImportMethod(str, Enum):
    UNDEFINED = "undefined"
    CSV = "csv"
    API = "api"

    @classmethod
    def parse(cls, value: str | None) -> "ImportMethod":
        """Map a stored import method to the enum; anything unknown is UNDEFINED."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNDEFINED
