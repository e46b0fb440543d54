"""Computed taxonomy views."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from taxonomy_engine.models.common import BaseEntity
from taxonomy_engine.models.taxonomy.meta import meta_to_dict
from taxonomy_engine.models.taxonomy.term import Taxonomy, Term


@dataclass
class HierarchyNode:
    """A term with its ordered children."""

    term: Term
    meta: BaseModel
    children: list["HierarchyNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term.to_dict(),
            "meta": meta_to_dict(self.meta),
            "children": [c.to_dict() for c in self.children],
        }

    def walk(self):
        """Pre-order traversal of this subtree."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class SearchHit(BaseEntity):
    """One search result row."""

    term_id: int
    taxonomy: Taxonomy
    name: str
    slug: str
    count: int

    @classmethod
    def from_term(cls, term: Term) -> "SearchHit":
        return cls(
            term_id=term.id,
            taxonomy=term.taxonomy,
            name=term.name,
            slug=term.slug,
            count=term.count,
        )
