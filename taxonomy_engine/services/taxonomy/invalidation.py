"""Invalidation coordinator - cascades evictions across both cache tiers."""

from collections.abc import Iterable

from loguru import logger

from taxonomy_engine.models.taxonomy import Taxonomy, TermEvent, TermEventKind
from taxonomy_engine.repositories import SharedCacheRepository, TermStore
from taxonomy_engine.services.taxonomy import keys
from taxonomy_engine.services.taxonomy.cache import TermCache


class InvalidationCoordinator:
    """Evicts every cache entry that could mirror a changed term.

    Writes never patch cached values: they evict, and the next read refetches.
    """

    def __init__(self, shared: SharedCacheRepository, cache: TermCache):
        self._shared = shared
        self._cache = cache

    def attach(self, store: TermStore) -> None:
        """Subscribe to the store's mutation events."""
        store.subscribe(self.handle)

    def handle(self, event: TermEvent) -> None:
        if event.kind is TermEventKind.DELETED:
            # children were re-parented, so every level may have changed
            self.invalidate_taxonomy(event.taxonomy)
        else:
            self.invalidate(event.taxonomy, event.term_id, event.parent_ids or None)

    def invalidate(
        self,
        taxonomy: Taxonomy | str,
        term_id: int,
        parent_ids: Iterable[int | None] | None = None,
    ) -> None:
        """Evict one term, the levels it belongs to and lists of its taxonomy.

        Without parent_ids the parent is taken from the cached term; when that is
        unknown too, every hierarchy level of the taxonomy is evicted.
        """
        taxonomy = Taxonomy.parse(taxonomy)
        if parent_ids is None:
            parent_ids = self._cached_parent(taxonomy, term_id)

        self._shared.delete(keys.term_key(taxonomy, term_id), keys.meta_key(taxonomy, term_id))

        prefixes = [
            keys.level_prefix(taxonomy, term_id),
            keys.list_prefix(taxonomy),
            keys.external_prefix(taxonomy),
            keys.SEARCH_PREFIX,
        ]
        if parent_ids is None:
            prefixes.append(keys.levels_prefix(taxonomy))
        else:
            prefixes.extend(keys.level_prefix(taxonomy, p) for p in parent_ids)

        for prefix in dict.fromkeys(prefixes):
            self._shared.delete_prefix(prefix)

        self._cache.clear_local(taxonomy)
        logger.debug("Invalidated {} term {}", taxonomy.value, term_id)

    def invalidate_taxonomy(self, taxonomy: Taxonomy | str) -> None:
        """Evict every key of a taxonomy plus all search snapshots."""
        taxonomy = Taxonomy.parse(taxonomy)
        self._shared.clear(taxonomy.value)
        self._shared.delete_prefix(keys.taxonomy_prefix(taxonomy))
        self._shared.delete_prefix(keys.SEARCH_PREFIX)
        self._cache.clear_local(taxonomy)

    def invalidate_all(self) -> None:
        self._shared.clear()
        self._cache.clear_local()

    def _cached_parent(self, taxonomy: Taxonomy, term_id: int) -> tuple[int | None, ...] | None:
        cached = self._shared.get(keys.term_key(taxonomy, term_id))
        if not isinstance(cached, dict):
            return None
        return (cached.get("parent_id"),)
