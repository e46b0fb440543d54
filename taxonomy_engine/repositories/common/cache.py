"""Shared cache repository - TTL-backed term cache storage."""

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import duckdb
from loguru import logger

from settings import CACHE_PURGE_INTERVAL, CACHING_ENABLED
from taxonomy_engine.models.common import CacheEntry
from taxonomy_engine.repositories.base import BaseRepository


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SharedCacheRepository(BaseRepository):
    """Cache tier shared across requests and processes.

    Entries past ``expires_at`` read as misses. Writes sweep expired rows at
    most once per ``purge_interval`` seconds, so the table does not grow with
    one-off keys such as search snapshots.
    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection | None = None,
        read_only: bool = False,
        enabled: bool = CACHING_ENABLED,
        clock: Callable[[], datetime] = utcnow,
        purge_interval: int = CACHE_PURGE_INTERVAL,
    ):
        super().__init__(conn, read_only)
        self._enabled = enabled
        self._clock = clock
        self._purge_interval = timedelta(seconds=purge_interval)
        self._next_purge: datetime | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def entry(self, key: str) -> CacheEntry | None:
        """Raw entry regardless of expiry."""
        row = self.fetchone("SELECT key, data, expires_at FROM term_cache WHERE key = ?", [key])
        if row is None:
            return None
        return CacheEntry(key=row[0], value=json.loads(row[1]), expires_at=row[2])

    def get(self, key: str) -> Any | None:
        """Cached value or None on miss or expiry."""
        if not self._enabled:
            return None

        entry = self.entry(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            logger.debug("Cache stale: {}", key)
            return None
        logger.debug("Cache hit: {}", key)
        return entry.value

    def set(self, key: str, taxonomy: str, value: Any, ttl: int | None) -> None:
        """Store a JSON-serializable value; ttl in seconds, None for no expiry."""
        if not self._enabled:
            return
        self._check_writable()

        expires_at = self._clock() + timedelta(seconds=ttl) if ttl else None
        self.execute(
            """
            INSERT OR REPLACE INTO term_cache (key, taxonomy, data, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            [key, taxonomy, json.dumps(value), expires_at],
        )
        logger.debug("Cache saved: {} (ttl={})", key, ttl)
        self._maybe_purge()

    def delete(self, *keys: str) -> None:
        """Delete exact keys."""
        if not keys:
            return
        self._check_writable()
        placeholders = ", ".join("?" for _ in keys)
        self.execute(f"DELETE FROM term_cache WHERE key IN ({placeholders})", list(keys))

    def delete_prefix(self, prefix: str) -> None:
        """Delete every key starting with prefix."""
        self._check_writable()
        self.execute("DELETE FROM term_cache WHERE starts_with(key, ?)", [prefix])
        logger.debug("Cache cleared: {}*", prefix)

    def clear(self, taxonomy: str | None = None) -> None:
        """Clear cache for a taxonomy tag or all."""
        self._check_writable()
        if taxonomy:
            self.execute("DELETE FROM term_cache WHERE taxonomy = ?", [taxonomy])
            logger.info("Cache cleared for taxonomy {}", taxonomy)
        else:
            self.execute("DELETE FROM term_cache")
            logger.info("All cache cleared")

    def _maybe_purge(self) -> None:
        now = self._clock()
        if self._next_purge is not None and now < self._next_purge:
            return
        self._next_purge = now + self._purge_interval
        self.purge_expired()

    def purge_expired(self) -> int:
        """Delete expired rows, return how many."""
        self._check_writable()
        now = self._clock()
        count = self.fetchone(
            "SELECT COUNT(*) FROM term_cache WHERE expires_at IS NOT NULL AND expires_at <= ?",
            [now],
        )[0]
        if count:
            self.execute("DELETE FROM term_cache WHERE expires_at IS NOT NULL AND expires_at <= ?", [now])
            logger.info("Purged {} expired cache entries", count)
        return count

    def keys(self, prefix: str = "") -> list[str]:
        """Stored keys (including expired) starting with prefix."""
        rows = self.fetchall("SELECT key FROM term_cache WHERE starts_with(key, ?) ORDER BY key", [prefix])
        return [r[0] for r in rows]

    def stats(self) -> dict[str, Any]:
        """Entry counts per taxonomy tag."""
        rows = self.fetchall("SELECT taxonomy, COUNT(*) FROM term_cache GROUP BY taxonomy ORDER BY taxonomy")
        expired = self.fetchone(
            "SELECT COUNT(*) FROM term_cache WHERE expires_at IS NOT NULL AND expires_at <= ?",
            [self._clock()],
        )[0]
        by_taxonomy = {r[0]: int(r[1]) for r in rows}
        return {
            "enabled": self._enabled,
            "total": sum(by_taxonomy.values()),
            "expired": int(expired),
            "by_taxonomy": by_taxonomy,
        }
