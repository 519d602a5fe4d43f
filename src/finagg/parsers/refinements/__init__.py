"""Bank-specific parser refinements.

Each refinement is a ParserVariant that replaces only the field handlers
that differ for that bank.
"""

from .amex import AMEX_VARIANT
from .revolut import REVOLUT_VARIANT

__all__ = ["AMEX_VARIANT", "REVOLUT_VARIANT"]
