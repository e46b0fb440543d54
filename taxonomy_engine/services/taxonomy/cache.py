"""Two-tier term cache in front of the term store."""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from settings import CACHE_TTL_LONG, CACHE_TTL_MEDIUM
from taxonomy_engine.errors import ValidationError
from taxonomy_engine.models.taxonomy import Taxonomy, Term, TermQuery, meta_keys, meta_model
from taxonomy_engine.repositories import SharedCacheRepository, TermStore
from taxonomy_engine.services.taxonomy import keys


class TermCache:
    """Request-local map, then shared TTL cache, then the term store.

    The request-local tier only exists inside ``request()``; outside of it every
    call goes straight to the shared tier. Store misses (``None``) are never cached.
    """

    def __init__(self, store: TermStore, shared: SharedCacheRepository):
        self._store = store
        self._shared = shared
        self._scope = threading.local()
        logger.debug("TermCache initialized")

    @contextmanager
    def request(self) -> Iterator["TermCache"]:
        """Open a request scope. Nested scopes share the outermost map."""
        depth = getattr(self._scope, "depth", 0)
        if depth == 0:
            self._scope.local = {}
        self._scope.depth = depth + 1
        try:
            yield self
        finally:
            self._scope.depth -= 1
            if self._scope.depth == 0:
                self._scope.local = None

    def _local(self) -> dict[str, Any]:
        local = getattr(self._scope, "local", None)
        return local if local is not None else {}

    def clear_local(self, taxonomy: Taxonomy | None = None) -> None:
        """Drop request-local entries for a taxonomy (and all search snapshots), or everything."""
        local = getattr(self._scope, "local", None)
        if not local:
            return
        if taxonomy is None:
            local.clear()
            return
        prefixes = (keys.taxonomy_prefix(taxonomy), keys.SEARCH_PREFIX)
        for key in [k for k in local if k.startswith(prefixes)]:
            del local[key]

    def remember(self, key: str, tag: str, ttl: int, fetch: Callable[[], Any]) -> Any:
        """Get a JSON-serializable value from the first tier that has it."""
        local = self._local()
        if key in local:
            return local[key]

        value = self._shared.get(key)
        if value is None:
            value = fetch()
            if value is None:
                logger.debug("Store miss: {}", key)
                return None
            self._shared.set(key, tag, value, ttl)
            logger.debug("Cache miss: {}", key)

        local[key] = value
        return value

    @staticmethod
    def normalize_query(query: TermQuery | dict | None) -> TermQuery:
        if query is None:
            return TermQuery()
        if isinstance(query, TermQuery):
            return query
        try:
            return TermQuery.model_validate(query)
        except PydanticValidationError as e:
            raise ValidationError("invalid_query", str(e)) from e

    def get_terms(self, taxonomy: Taxonomy | str, query: TermQuery | dict | None = None) -> list[Term]:
        """Terms matching a query."""
        taxonomy = Taxonomy.parse(taxonomy)
        query = self.normalize_query(query)

        def fetch() -> list[dict]:
            return [t.to_dict() for t in self._store.fetch(taxonomy, query)]

        data = self.remember(keys.terms_key(taxonomy, query), taxonomy.value, CACHE_TTL_MEDIUM, fetch)
        return [Term.from_dict(d) for d in data]

    def _get_one(self, taxonomy: Taxonomy, key: str, query: TermQuery) -> Term | None:
        def fetch() -> dict | None:
            terms = self._store.fetch(taxonomy, query)
            return terms[0].to_dict() if terms else None

        data = self.remember(key, taxonomy.value, CACHE_TTL_LONG, fetch)
        return Term.from_dict(data) if data else None

    def get_term_by_id(self, taxonomy: Taxonomy | str, term_id: int) -> Term | None:
        taxonomy = Taxonomy.parse(taxonomy)
        return self._get_one(taxonomy, keys.term_key(taxonomy, term_id), TermQuery(term_id=term_id, limit=1))

    def get_term_by_external_id(self, taxonomy: Taxonomy | str, external_id: int) -> Term | None:
        """Term whose ``api_id`` meta equals external_id."""
        taxonomy = Taxonomy.parse(taxonomy)
        external_id = int(external_id)
        query = TermQuery(meta_key="api_id", meta_value=external_id, limit=1)
        return self._get_one(taxonomy, keys.external_key(taxonomy, external_id), query)

    def get_term_meta(self, taxonomy: Taxonomy | str, term_id: int) -> BaseModel:
        """Typed meta of a term; keys outside the taxonomy's set are ignored."""
        taxonomy = Taxonomy.parse(taxonomy)
        data = self.remember(
            keys.meta_key(taxonomy, term_id),
            taxonomy.value,
            CACHE_TTL_LONG,
            lambda: self._store.fetch_all_meta(term_id),
        )
        known = meta_keys(taxonomy)
        return meta_model(taxonomy).model_validate({k: v for k, v in data.items() if k in known})
