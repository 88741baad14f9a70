"""Persistence of discovered command trees."""

from .cache import CacheStorage, get_cache_file_name, is_cache_file_name

__all__ = ["CacheStorage", "get_cache_file_name", "is_cache_file_name"]
