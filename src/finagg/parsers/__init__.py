"""CSV row parsing for bank exports.

- RowParser with the generic field handlers covers most banks
- Bank-specific refinements replace only the handlers that differ
"""

from finagg.parsers.factory import ParserFactory, build_parser_factory
from finagg.parsers.generic import GENERIC_VARIANT, ParserVariant, RowParser

__all__ = [
    "GENERIC_VARIANT",
    "ParserFactory",
    "ParserVariant",
    "RowParser",
    "build_parser_factory",
]
