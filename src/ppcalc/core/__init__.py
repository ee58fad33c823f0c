"""Runtime helpers shared by the calculators."""

from ppcalc.core.cache import AttributesCache, LRUCache
from ppcalc.core.cache_settings import DEFAULT_ATTRIBUTES_CACHE_SIZE, CacheOptions

__all__ = ["AttributesCache", "CacheOptions", "DEFAULT_ATTRIBUTES_CACHE_SIZE", "LRUCache"]
