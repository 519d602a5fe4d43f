"""Transaction categorization utilities.

Categories are inferred locally from configurable keywords stored in the
database: no network calls, and every decision can be traced back to the
keyword that produced it.
"""

from .keywords import KeywordCategorizer, infer_category, normalize_text

__all__ = ["KeywordCategorizer", "infer_category", "normalize_text"]
