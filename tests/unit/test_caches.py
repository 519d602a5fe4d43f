"""Tests for the snapshot caches."""

import threading

import pytest

from finagg.caches import CategoryCache, HeaderMappingCache
from finagg.schemas.bank import HeaderMapping
from finagg.schemas.category import CategoryInfo, CategoryKeywordInfo
from finagg.schemas.transaction import TransactionField


def _mapping(bank_id: int, name: str) -> HeaderMapping:
    return HeaderMapping(bank_id=bank_id, name=name, fields=(TransactionField.DESCRIPTION,))


class TestHeaderMappingCache:
    def test_unknown_bank_is_none(self):
        assert HeaderMappingCache().get_by_bank(1) is None

    def test_set_groups_by_bank(self):
        cache = HeaderMappingCache()
        cache.set([_mapping(1, "A"), _mapping(2, "B"), _mapping(1, "C")])

        assert [m.name for m in cache.get_by_bank(1)] == ["A", "C"]
        assert [m.name for m in cache.get_by_bank(2)] == ["B"]

    def test_set_replaces_everything(self):
        cache = HeaderMappingCache()
        cache.set([_mapping(1, "A")])
        cache.set([_mapping(2, "B")])

        assert cache.get_by_bank(1) is None

    def test_put_replaces_one_bank(self):
        cache = HeaderMappingCache()
        cache.set([_mapping(1, "A"), _mapping(2, "B")])

        cache.put(1, [_mapping(1, "Z")])

        assert [m.name for m in cache.get_by_bank(1)] == ["Z"]
        assert [m.name for m in cache.get_by_bank(2)] == ["B"]

    def test_empty_entry_is_cached(self):
        cache = HeaderMappingCache()
        cache.put(5, [])
        assert cache.get_by_bank(5) == ()

    def test_snapshot_is_read_only_and_stable(self):
        cache = HeaderMappingCache()
        cache.set([_mapping(1, "A")])
        snapshot = cache.snapshot()

        with pytest.raises(TypeError):
            snapshot[2] = ()

        cache.put(2, [_mapping(2, "B")])
        assert 2 not in snapshot


class TestCategoryCache:
    def test_keywords_none_until_loaded(self):
        cache = CategoryCache()
        assert cache.keywords() is None

        cache.reload_keywords([])
        assert cache.keywords() == {}

    def test_reload_keywords(self):
        cache = CategoryCache()
        cache.reload_keywords([CategoryKeywordInfo(id=1, category_id=3, name="tesco")])
        assert dict(cache.keywords()) == {"tesco": 3}

    def test_put_category_keeps_others(self):
        cache = CategoryCache()
        cache.reload_categories([CategoryInfo(id=1, name="Uncategorized")])

        cache.put_category(CategoryInfo(id=4, name="Transport"))

        assert cache.get_category(1).name == "Uncategorized"
        assert cache.get_category(4).name == "Transport"
        assert cache.get_category(5) is None

    def test_readers_see_whole_snapshots(self):
        cache = CategoryCache()
        old = [CategoryKeywordInfo(id=i, category_id=1, name=f"old{i}") for i in range(50)]
        new = [CategoryKeywordInfo(id=i, category_id=2, name=f"new{i}") for i in range(50)]
        cache.reload_keywords(old)
        seen = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                seen.append(set(cache.keywords().values()))

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for _ in range(200):
            cache.reload_keywords(new)
            cache.reload_keywords(old)
        stop.set()
        for t in threads:
            t.join()

        assert all(values in ({1}, {2}) for values in seen)
