"""Repositories package - DuckDB access for terms and the shared cache."""

from taxonomy_engine.repositories.base import BaseRepository
from taxonomy_engine.repositories.common import SharedCacheRepository
from taxonomy_engine.repositories.db import close_db, connect, get_db, init_tables
from taxonomy_engine.repositories.taxonomy import TermStore

__all__ = [
    # DB
    "connect",
    "get_db",
    "close_db",
    "init_tables",
    # Base
    "BaseRepository",
    # Shared cache
    "SharedCacheRepository",
    # Terms
    "TermStore",
]
