"""DuckDB connections for the term store and the shared cache."""

import threading
from pathlib import Path

import duckdb
from loguru import logger

from settings import DB_PATH
from taxonomy_engine.errors import StoreUnavailableError
from taxonomy_engine.models import ALL_DDL

MEMORY = ":memory:"

_local = threading.local()


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Apply the term, term_meta and term_cache schema. Safe on every start."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    logger.debug("Taxonomy schema ready ({} statements)", len(ALL_DDL))


def connect(path: str | Path = DB_PATH, read_only: bool = False) -> duckdb.DuckDBPyConnection:
    """Open a taxonomy database; writable connections get the schema applied."""
    if str(path) != MEMORY:
        path = Path(path)
        if not path.exists():
            if read_only:
                raise StoreUnavailableError(f"Taxonomy database not found: {path}")
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.warning("Creating taxonomy database {}", path)

    try:
        conn = duckdb.connect(str(path), read_only=read_only)
    except duckdb.Error as e:
        raise StoreUnavailableError(f"Cannot open {path}: {e}") from e

    if not read_only:
        init_tables(conn)
    logger.debug("Connected to {} (read_only={})", path, read_only)
    return conn


def get_db(read_only: bool = False) -> duckdb.DuckDBPyConnection:
    """Per-thread connection to DB_PATH, opened on first use."""
    conn = getattr(_local, "conn", None)
    if conn is None:
        conn = _local.conn = connect(DB_PATH, read_only)
    return conn


def close_db() -> None:
    conn = getattr(_local, "conn", None)
    if conn is not None:
        conn.close()
        _local.conn = None
