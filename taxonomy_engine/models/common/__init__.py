"""Common models shared by all domains."""

from taxonomy_engine.models.common.base import BaseEntity
from taxonomy_engine.models.common.cache import CACHE_DDL, CacheEntry

__all__ = [
    "BaseEntity",
    "CACHE_DDL",
    "CacheEntry",
]
