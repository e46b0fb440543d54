"""Cache key layout.

    <taxonomy>:term:<id>
    <taxonomy>:meta:<id>
    <taxonomy>:external:<api_id>
    <taxonomy>:terms:parent=<id>:<digest>    list query bound to one parent (0 = roots)
    <taxonomy>:terms:all:<digest>            any other list query
    search:<digest>
"""

import hashlib
import json

from taxonomy_engine.models.taxonomy import ROOT_PARENT, Taxonomy, TermQuery

SEARCH_PREFIX = "search:"
SEARCH_TAG = "search"


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def taxonomy_prefix(taxonomy: Taxonomy) -> str:
    return f"{taxonomy.value}:"


def term_key(taxonomy: Taxonomy, term_id: int) -> str:
    return f"{taxonomy.value}:term:{term_id}"


def meta_key(taxonomy: Taxonomy, term_id: int) -> str:
    return f"{taxonomy.value}:meta:{term_id}"


def external_prefix(taxonomy: Taxonomy) -> str:
    return f"{taxonomy.value}:external:"


def external_key(taxonomy: Taxonomy, external_id: int) -> str:
    return f"{external_prefix(taxonomy)}{external_id}"


def levels_prefix(taxonomy: Taxonomy) -> str:
    """Every parent-bound list key of a taxonomy."""
    return f"{taxonomy.value}:terms:parent="


def level_prefix(taxonomy: Taxonomy, parent_id: int | None) -> str:
    return f"{levels_prefix(taxonomy)}{parent_id or ROOT_PARENT}:"


def list_prefix(taxonomy: Taxonomy) -> str:
    """List keys not bound to a parent."""
    return f"{taxonomy.value}:terms:all:"


def terms_key(taxonomy: Taxonomy, query: TermQuery) -> str:
    """Same key for semantically identical queries, whatever the caller's key order."""
    prefix = level_prefix(taxonomy, query.parent_id) if query.parent_id is not None else list_prefix(taxonomy)
    return f"{prefix}{_digest(query.canonical())}"


def search_key(query: str, taxonomies: list[Taxonomy]) -> str:
    payload = json.dumps({"q": query.strip().lower(), "taxonomies": sorted(t.value for t in taxonomies)})
    return f"{SEARCH_PREFIX}{_digest(payload)}"
