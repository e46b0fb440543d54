"""Process-wide wiring of the term store, shared cache and taxonomy service."""

import duckdb
from loguru import logger

from settings import CACHING_ENABLED
from taxonomy_engine.repositories import SharedCacheRepository, TermStore, get_db
from taxonomy_engine.services.taxonomy import TaxonomyService


class Container:
    """One TaxonomyService per process, built on first ``init``.

    Pass a connection to run against a scratch database; ``reset`` drops the
    wiring so the next ``init`` builds it again.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._service = None
        return cls._instance

    def init(
        self,
        conn: duckdb.DuckDBPyConnection | None = None,
        caching: bool = CACHING_ENABLED,
    ) -> TaxonomyService:
        if self._service is None:
            conn = conn if conn is not None else get_db()
            store = TermStore(conn)
            shared = SharedCacheRepository(conn, enabled=caching)
            self._service = TaxonomyService(store=store, shared=shared)
            logger.debug("Container ready (caching={})", caching)
        return self._service

    def reset(self) -> None:
        self._service = None

    @property
    def taxonomy(self) -> TaxonomyService:
        if self._service is None:
            raise RuntimeError("Container.init() has not been called")
        return self._service

    @property
    def store(self) -> TermStore:
        return self.taxonomy.store


container = Container()
