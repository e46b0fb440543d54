"""Hierarchy builder - parent/child forests from flat term levels."""

from loguru import logger

from taxonomy_engine.errors import CycleDetectedError
from taxonomy_engine.models.taxonomy import ROOT_PARENT, HierarchyNode, Taxonomy, Term
from taxonomy_engine.services.taxonomy.cache import TermCache


def sibling_order(node: HierarchyNode) -> tuple:
    """Explicit display_order first (ascending), then by name."""
    order = getattr(node.meta, "display_order", None)
    name = node.term.name
    if order:
        return (0, order, name.casefold(), name)
    return (1, 0, name.casefold(), name)


class HierarchyBuilder:
    """Builds one level per (taxonomy, parent) through the term cache."""

    def __init__(self, cache: TermCache):
        self._cache = cache

    def build(self, taxonomy: Taxonomy | str, root_parent_id: int | None = None) -> list[HierarchyNode]:
        """Forest below root_parent_id (None = taxonomy roots).

        Raises CycleDetectedError when a parent chain loops.
        """
        taxonomy = Taxonomy.parse(taxonomy)
        path = () if root_parent_id is None else (root_parent_id,)
        nodes = self._level(taxonomy, root_parent_id, path)

        if root_parent_id is None:
            self._check_unreachable(taxonomy, nodes)

        logger.debug("build_hierarchy({}, {}): {} roots", taxonomy.value, root_parent_id, len(nodes))
        return nodes

    def _level(self, taxonomy: Taxonomy, parent_id: int | None, path: tuple[int, ...]) -> list[HierarchyNode]:
        terms = self._cache.get_terms(taxonomy, {"parent_id": parent_id or ROOT_PARENT})

        nodes = []
        for term in terms:
            if term.id in path:
                raise CycleDetectedError([*path[path.index(term.id) :], term.id])
            node = HierarchyNode(term=term, meta=self._cache.get_term_meta(taxonomy, term.id))
            node.children = self._level(taxonomy, term.id, (*path, term.id))
            nodes.append(node)

        return sorted(nodes, key=sibling_order)

    def _check_unreachable(self, taxonomy: Taxonomy, roots: list[HierarchyNode]) -> None:
        """Terms not reached from the roots either sit on a cycle or have a missing parent."""
        reached = {n.term.id for root in roots for n in root.walk()}
        all_terms = self._cache.get_terms(taxonomy)
        by_id = {t.id: t for t in all_terms}

        for term in all_terms:
            if term.id in reached:
                continue
            chain = self._parent_chain(term, by_id)
            if chain is not None:
                logger.warning("Orphaned {} term {} (missing parent {})", taxonomy.value, term.id, chain)

    @staticmethod
    def _parent_chain(term: Term, by_id: dict[int, Term]) -> int | None:
        """Walk up from term. Returns the missing parent id, raises on a loop."""
        chain = [term.id]
        current = term
        while current.parent_id is not None:
            if current.parent_id in chain:
                raise CycleDetectedError([*chain[chain.index(current.parent_id) :], current.parent_id])
            parent = by_id.get(current.parent_id)
            if parent is None:
                return current.parent_id
            chain.append(parent.id)
            current = parent
        return None
