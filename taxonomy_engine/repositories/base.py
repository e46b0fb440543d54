"""Shared plumbing for DuckDB-backed repositories."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import duckdb
from loguru import logger

from taxonomy_engine.errors import StoreUnavailableError
from taxonomy_engine.repositories.db import get_db


class BaseRepository:
    """Owns a connection and maps DuckDB failures onto StoreUnavailableError.

    Constraint violations pass through untouched so callers can turn them
    into validation errors.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None, read_only: bool = False):
        self._db = conn if conn is not None else get_db(read_only)
        self._read_only = read_only

    def execute(self, query: str, params: list | None = None) -> duckdb.DuckDBPyConnection:
        try:
            if params:
                return self._db.execute(query, params)
            return self._db.execute(query)
        except duckdb.ConstraintException:
            raise
        except duckdb.Error as e:
            logger.error("{}: {}", type(self).__name__, e)
            raise StoreUnavailableError(str(e)) from e

    def fetchall(self, query: str, params: list | None = None) -> list[tuple]:
        return self.execute(query, params).fetchall()

    def fetchone(self, query: str, params: list | None = None) -> Any:
        return self.execute(query, params).fetchone()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run several statements as one unit; any exception rolls them back."""
        self.execute("BEGIN TRANSACTION")
        try:
            yield
        except BaseException:
            self.execute("ROLLBACK")
            raise
        self.execute("COMMIT")

    def _check_writable(self) -> None:
        if self._read_only:
            raise StoreUnavailableError(f"{type(self).__name__} opened read-only")
