"""In-memory snapshot caches backing the header mapping and category lookups.

Both caches are loaded from the store at startup and refilled on a miss.
Writers build a new map and swap it in under the cache's lock, so readers
never see a partially updated map.
"""

from .categories import CategoryCache
from .header_mappings import HeaderMappingCache

__all__ = ["CategoryCache", "HeaderMappingCache"]
