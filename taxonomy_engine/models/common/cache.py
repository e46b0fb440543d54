"""Shared term cache table."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taxonomy_engine.models.common.base import BaseEntity

CACHE_DDL = """
CREATE TABLE IF NOT EXISTS term_cache (
    key VARCHAR PRIMARY KEY,
    taxonomy VARCHAR NOT NULL,
    data VARCHAR NOT NULL,
    expires_at TIMESTAMP
)
"""


@dataclass
class CacheEntry(BaseEntity):
    """One row of the shared cache."""

    key: str
    value: Any
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now
