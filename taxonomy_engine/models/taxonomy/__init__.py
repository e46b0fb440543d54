"""Taxonomy domain models."""

from taxonomy_engine.models.taxonomy.entities import HierarchyNode, SearchHit
from taxonomy_engine.models.taxonomy.events import TermEvent, TermEventKind
from taxonomy_engine.models.taxonomy.meta import (
    TERM_META_DDL,
    CategoryMeta,
    ProcedureMeta,
    TermMeta,
    meta_keys,
    meta_model,
    meta_to_dict,
)
from taxonomy_engine.models.taxonomy.query import TermQuery
from taxonomy_engine.models.taxonomy.records import ImportRecord, ImportResult
from taxonomy_engine.models.taxonomy.term import (
    ROOT_PARENT,
    TERM_DDL,
    TERM_SEQUENCE_DDL,
    Taxonomy,
    Term,
)

__all__ = [
    "TERM_SEQUENCE_DDL",
    "TERM_DDL",
    "TERM_META_DDL",
    "ROOT_PARENT",
    "Taxonomy",
    "Term",
    "CategoryMeta",
    "ProcedureMeta",
    "TermMeta",
    "meta_keys",
    "meta_model",
    "meta_to_dict",
    "TermQuery",
    "ImportRecord",
    "ImportResult",
    "HierarchyNode",
    "SearchHit",
    "TermEvent",
    "TermEventKind",
]
