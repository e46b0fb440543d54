"""Models package - DDL and entities."""

from taxonomy_engine.models.common import CACHE_DDL, BaseEntity, CacheEntry
from taxonomy_engine.models.taxonomy import (
    TERM_DDL,
    TERM_META_DDL,
    TERM_SEQUENCE_DDL,
)

ALL_DDL = [
    # Taxonomy
    TERM_SEQUENCE_DDL,
    TERM_DDL,
    TERM_META_DDL,
    # Common
    CACHE_DDL,
]

__all__ = [
    # Common
    "BaseEntity",
    "CacheEntry",
    "CACHE_DDL",
    # Taxonomy
    "TERM_SEQUENCE_DDL",
    "TERM_DDL",
    "TERM_META_DDL",
    # All DDL
    "ALL_DDL",
]
