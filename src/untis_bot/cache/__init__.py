"""Flat-file cache of the last WebUntis fetch."""

from untis_bot.cache.store import CacheStore

__all__ = ["CacheStore"]
