"""Common repositories."""

from taxonomy_engine.repositories.common.cache import SharedCacheRepository, utcnow

__all__ = [
    "SharedCacheRepository",
    "utcnow",
]
