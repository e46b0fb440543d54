"""Search index - cross-taxonomy name search ranked by usage."""

from collections.abc import Iterable

from loguru import logger

from settings import CACHE_TTL_SHORT
from taxonomy_engine.models.taxonomy import SearchHit, Taxonomy
from taxonomy_engine.services.taxonomy import keys
from taxonomy_engine.services.taxonomy.cache import TermCache


class SearchIndex:
    def __init__(self, cache: TermCache):
        self._cache = cache

    def search(self, query: str, taxonomies: Iterable[Taxonomy | str] | None = None) -> list[SearchHit]:
        """Terms whose name contains query, highest count first (ties by name).

        An empty query matches nothing.
        """
        query = (query or "").strip()
        if not query:
            return []

        selected = sorted({Taxonomy.parse(t) for t in taxonomies or ()} or set(Taxonomy), key=lambda t: t.value)

        def fetch() -> list[dict]:
            hits = [
                SearchHit.from_term(term)
                for taxonomy in selected
                for term in self._cache.get_terms(taxonomy, {"name_substring": query})
            ]
            hits.sort(key=lambda h: (-h.count, h.name.casefold(), h.name))
            logger.debug("search({!r}, {}): {} hits", query, [t.value for t in selected], len(hits))
            return [h.to_dict() for h in hits]

        data = self._cache.remember(keys.search_key(query, selected), keys.SEARCH_TAG, CACHE_TTL_SHORT, fetch)
        return [SearchHit(**{**d, "taxonomy": Taxonomy(d["taxonomy"])}) for d in data]
