"""Taxonomy integrity checks."""

from taxonomy_engine.models.taxonomy import Taxonomy, meta_keys
from taxonomy_engine.repositories import TermStore


def validate_taxonomy(store: TermStore, taxonomy: Taxonomy) -> dict:
    """Validate parent links and meta keys of a taxonomy."""
    issues = []
    stats = {}

    terms = store.fetch(taxonomy)
    by_id = {t.id: t for t in terms}
    stats["terms"] = len(terms)
    stats["roots"] = sum(1 for t in terms if t.parent_id is None)

    orphans = []
    foreign = []
    for term in terms:
        if term.parent_id is None or term.parent_id in by_id:
            continue
        parent = store.get(term.parent_id)
        if parent is None:
            orphans.append(term.id)
        else:
            foreign.append(term.id)
    stats["orphans"] = len(orphans)
    if orphans:
        issues.append(f"{len(orphans)} terms reference a missing parent: {orphans}")
    if foreign:
        issues.append(f"{len(foreign)} terms have a parent in another taxonomy: {foreign}")

    cycles = set()
    for term in terms:
        seen = []
        current = term
        while current is not None and current.parent_id is not None:
            if current.id in seen:
                cycles.update(seen[seen.index(current.id) :])
                break
            seen.append(current.id)
            current = by_id.get(current.parent_id)
    stats["cycle_terms"] = len(cycles)
    if cycles:
        issues.append(f"{len(cycles)} terms sit on a parent cycle: {sorted(cycles)}")

    known = meta_keys(taxonomy)
    unknown = sorted({key for _, key in store.meta_rows(taxonomy) if key not in known})
    if unknown:
        issues.append(f"Unknown meta keys stored: {unknown}")

    return {
        "taxonomy": taxonomy.value,
        "valid": len(issues) == 0,
        "stats": stats,
        "issues": issues,
    }
