"""Keyword-based category inference.

Each keyword is a text fragment linked to a category. A transaction gets the
category of a keyword contained (case-insensitively) in its combined
category/description text. When several keywords match, the longest one wins
and equal lengths fall back to alphabetical order, so the result never
depends on the order keywords were loaded in. No match means the
uncategorized sentinel; inference never fails.
"""

from __future__ import annotations

from collections.abc import Mapping

from finagg.caches import CategoryCache
from finagg.schemas.transaction import UNCATEGORIZED_ID

OrderedKeywords = tuple[tuple[str, int], ...]


def normalize_text(*parts: str | None) -> str:
    return " ".join(p for p in parts if p).lower()


def order_keywords(keywords: Mapping[str, int]) -> OrderedKeywords:
    """Lowercase keywords and sort them into match priority order."""
    pairs = ((k.lower(), v) for k, v in keywords.items() if k and k.strip())
    return tuple(sorted(pairs, key=lambda kv: (-len(kv[0]), kv[0])))


def infer_category(text: str, keywords: OrderedKeywords | Mapping[str, int]) -> int:
    """Return the category id for ``text``.

    Args:
        text: Free text (category label, description, or both).
        keywords: Keyword -> category id map, or the output of order_keywords().

    Returns:
        Matching category id, or UNCATEGORIZED_ID.
    """
    if not text or not keywords:
        return UNCATEGORIZED_ID

    ordered = order_keywords(keywords) if isinstance(keywords, Mapping) else keywords
    haystack = text.lower()
    for keyword, category_id in ordered:
        if keyword in haystack:
            return category_id
    return UNCATEGORIZED_ID


class KeywordCategorizer:
    """Category inference over the current CategoryCache snapshot.

    Safe to call from worker threads: it only reads cache snapshots. The
    keyword priority order is recomputed whenever the cache swaps in a new
    keyword snapshot.
    """

    def __init__(self, cache: CategoryCache):
        self._cache = cache
        self._ordered: tuple[Mapping[str, int] | None, OrderedKeywords] = (None, ())

    def _ordered_keywords(self) -> OrderedKeywords:
        snapshot = self._cache.keywords()
        if not snapshot:
            return ()
        source, ordered = self._ordered
        if source is not snapshot:
            ordered = order_keywords(snapshot)
            self._ordered = (snapshot, ordered)
        return ordered

    def infer(self, *texts: str | None) -> int:
        return infer_category(normalize_text(*texts), self._ordered_keywords())

    def category_name(self, category_id: int) -> str | None:
        category = self._cache.get_category(category_id)
        return category.name if category else None
