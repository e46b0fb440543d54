"""Taxonomy service - the interface callers use."""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from pydantic import BaseModel

from taxonomy_engine.models.taxonomy import (
    HierarchyNode,
    ImportRecord,
    ImportResult,
    SearchHit,
    Taxonomy,
    Term,
    TermQuery,
)
from taxonomy_engine.repositories import SharedCacheRepository, TermStore
from taxonomy_engine.services.taxonomy.cache import TermCache
from taxonomy_engine.services.taxonomy.hierarchy import HierarchyBuilder
from taxonomy_engine.services.taxonomy.importer import BulkImporter, record_label
from taxonomy_engine.services.taxonomy.invalidation import InvalidationCoordinator
from taxonomy_engine.services.taxonomy.metrics import PerformanceTracker
from taxonomy_engine.services.taxonomy.search import SearchIndex


class TaxonomyService:
    """Cached term access, hierarchies, search and bulk sync.

    Every public call runs inside a request scope; wrap several calls in
    ``request()`` to share one request-local map between them.
    """

    def __init__(
        self,
        store: TermStore,
        shared: SharedCacheRepository,
        tracker: PerformanceTracker | None = None,
    ):
        self._store = store
        self._shared = shared
        self.tracker = tracker or PerformanceTracker()
        self.cache = TermCache(store, shared)
        self.invalidation = InvalidationCoordinator(shared, self.cache)
        self.invalidation.attach(store)
        self.hierarchy = HierarchyBuilder(self.cache)
        self.importer = BulkImporter(store, self.cache, self.invalidation)
        self.index = SearchIndex(self.cache)
        logger.debug("TaxonomyService initialized")

    @property
    def store(self) -> TermStore:
        return self._store

    @contextmanager
    def request(self) -> Iterator["TaxonomyService"]:
        with self.cache.request():
            yield self

    def get_terms_cached(self, taxonomy: Taxonomy | str, query: TermQuery | dict | None = None) -> list[Term]:
        with self.cache.request():
            return self.cache.get_terms(taxonomy, query)

    def get_term(self, taxonomy: Taxonomy | str, term_id: int) -> Term | None:
        with self.cache.request():
            return self.cache.get_term_by_id(taxonomy, term_id)

    def get_term_by_external_id(self, taxonomy: Taxonomy | str, external_id: int) -> Term | None:
        with self.cache.request():
            return self.cache.get_term_by_external_id(taxonomy, external_id)

    def get_term_meta(self, taxonomy: Taxonomy | str, term_id: int) -> BaseModel:
        with self.cache.request():
            return self.cache.get_term_meta(taxonomy, term_id)

    def get_term_hierarchy(self, taxonomy: Taxonomy | str, parent_id: int | None = None) -> list[HierarchyNode]:
        with self.tracker.track("get_term_hierarchy"), self.cache.request():
            return self.hierarchy.build(taxonomy, parent_id)

    def search_terms(self, query: str, taxonomies: Iterable[Taxonomy | str] | None = None) -> list[SearchHit]:
        with self.tracker.track("search_terms"), self.cache.request():
            return self.index.search(query, taxonomies)

    def bulk_import_terms(self, taxonomy: Taxonomy | str, records: Iterable[ImportRecord | dict]) -> ImportResult:
        with self.tracker.track("bulk_import_terms"), self.cache.request():
            result = self.importer.import_terms(taxonomy, records)

        context = f"bulk_import_terms:{Taxonomy.parse(taxonomy).value}"
        for record, reason in result.failed:
            self.tracker.log_error(context, f"{record_label(record)}: {reason}")
        if result.error is not None:
            self.tracker.log_error(context, f"aborted: {result.error.message}")
        return result

    def export_terms(self, taxonomy: Taxonomy | str) -> list[ImportRecord]:
        with self.cache.request():
            return self.importer.export_terms(taxonomy)

    def clear_taxonomy_cache(self, taxonomy: Taxonomy | str | None = None) -> None:
        """Evict one taxonomy, or everything when taxonomy is None."""
        if taxonomy is None:
            self.invalidation.invalidate_all()
        else:
            self.invalidation.invalidate_taxonomy(taxonomy)

    def sync_term_counts(self, taxonomy: Taxonomy | str) -> int:
        """Copy case_count meta into term counts. Returns number of terms changed."""
        taxonomy = Taxonomy.parse(taxonomy)
        updated = 0
        with self.tracker.track("sync_term_counts"), self.cache.request():
            for term in self._store.fetch(taxonomy):
                case_count = self._store.fetch_meta(term.id, "case_count")
                if case_count is not None and int(case_count) != term.count:
                    self._store.update(term.id, count=int(case_count))
                    updated += 1
            self.invalidation.invalidate_taxonomy(taxonomy)

        logger.info("Synced counts for {} {} terms", updated, taxonomy.value)
        return updated

    def cache_stats(self) -> dict[str, Any]:
        return self._shared.stats()

    def purge_expired_cache(self) -> int:
        """Drop expired shared-cache rows now. Returns how many were removed."""
        return self._shared.purge_expired()

    def performance_metrics(self) -> dict[str, dict[str, Any]]:
        """count, total, min, max and average seconds per timed operation."""
        return self.tracker.metrics()

    def error_log(self, context: str | None = None) -> dict[str, list[dict[str, str]]]:
        """Recent import failures per ``bulk_import_terms:<taxonomy>`` context."""
        return self.tracker.errors(context)
