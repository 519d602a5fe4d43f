"""Category and keyword cache."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from finagg.schemas.category import CategoryInfo, CategoryKeywordInfo


class CategoryCache:
    """Holds keyword -> category id and category id -> category snapshots.

    ``keywords()`` returns None until the keyword map has been loaded once,
    so callers can tell "never loaded" from "loaded but empty".
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keywords: Mapping[str, int] | None = None
        self._categories: Mapping[int, CategoryInfo] = MappingProxyType({})

    def reload_keywords(self, keywords: Iterable[CategoryKeywordInfo]) -> None:
        snapshot = MappingProxyType({kw.name: kw.category_id for kw in keywords})
        with self._lock:
            self._keywords = snapshot

    def reload_categories(self, categories: Iterable[CategoryInfo]) -> None:
        snapshot = MappingProxyType({c.id: c for c in categories})
        with self._lock:
            self._categories = snapshot

    def put_category(self, category: CategoryInfo) -> None:
        with self._lock:
            updated = dict(self._categories)
            updated[category.id] = category
            self._categories = MappingProxyType(updated)

    def keywords(self) -> Mapping[str, int] | None:
        with self._lock:
            return self._keywords

    def get_category(self, category_id: int) -> CategoryInfo | None:
        with self._lock:
            return self._categories.get(category_id)

    def categories(self) -> Mapping[int, CategoryInfo]:
        with self._lock:
            return self._categories
