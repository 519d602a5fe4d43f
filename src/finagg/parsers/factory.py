"""Parser factory for routing CSV uploads to a bank's parser.

Banks are matched by name (case-insensitive). Banks without a registered
refinement use the generic parser.
"""

import logging

from finagg.categorization import KeywordCategorizer
from finagg.core.banks import AMEX_BANK_NAME, REVOLUT_BANK_NAME
from finagg.parsers.generic import GENERIC_VARIANT, ParserVariant, RowParser
from finagg.parsers.refinements import AMEX_VARIANT, REVOLUT_VARIANT

logger = logging.getLogger(__name__)


def _bank_key(bank_name: str) -> str:
    return bank_name.strip().lower()


class ParserFactory:
    """Factory for per-bank CSV row parsers.

    Example:
        >>> factory = ParserFactory(categorizer)
        >>> factory.register_refinement("Revolut", REVOLUT_VARIANT)
        >>> parser = factory.get_parser("Revolut")
    """

    def __init__(self, categorizer: KeywordCategorizer):
        self.categorizer = categorizer
        self._generic = RowParser(categorizer, GENERIC_VARIANT)

        # Format: {"bank name (lowercase)": RowParser}
        self._refinements: dict[str, RowParser] = {}

    def register_refinement(self, bank_name: str, variant: ParserVariant) -> None:
        """Register a bank-specific parser variant.

        Args:
            bank_name: Bank name as stored in the bank registry
            variant: Handler overrides for that bank
        """
        if not isinstance(variant, ParserVariant):
            raise ValueError(f"Refinement must be a ParserVariant, got {variant!r}")

        self._refinements[_bank_key(bank_name)] = RowParser(self.categorizer, variant)

    def unregister_refinement(self, bank_name: str) -> None:
        """Remove a bank-specific refinement; the bank falls back to the generic parser."""
        self._refinements.pop(_bank_key(bank_name), None)

    def get_registered_banks(self) -> list[str]:
        return list(self._refinements.keys())

    def get_parser(self, bank_name: str | None) -> RowParser:
        """Get the parser for a bank (refinement if registered, else generic)."""
        if bank_name and _bank_key(bank_name) in self._refinements:
            return self._refinements[_bank_key(bank_name)]

        logger.warning("No parser refinement for bank, using generic parser", extra={"bank_name": bank_name})
        return self._generic


def build_parser_factory(categorizer: KeywordCategorizer) -> ParserFactory:
    """Create a factory with the built-in bank refinements registered."""
    factory = ParserFactory(categorizer)
    factory.register_refinement(AMEX_BANK_NAME, AMEX_VARIANT)
    factory.register_refinement(REVOLUT_BANK_NAME, REVOLUT_VARIANT)
    return factory
