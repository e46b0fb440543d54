"""Term model - a node in the category or procedure taxonomy."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from taxonomy_engine.errors import ValidationError
from taxonomy_engine.models.common import BaseEntity

# Parent filter value selecting root terms only.
ROOT_PARENT = 0

TERM_SEQUENCE_DDL = "CREATE SEQUENCE IF NOT EXISTS term_id_seq START 1"

TERM_DDL = """
CREATE TABLE IF NOT EXISTS term (
    id INTEGER PRIMARY KEY DEFAULT nextval('term_id_seq'),
    taxonomy VARCHAR NOT NULL,
    name VARCHAR NOT NULL,
    slug VARCHAR NOT NULL,
    description VARCHAR NOT NULL DEFAULT '',
    parent_id INTEGER,
    count INTEGER NOT NULL DEFAULT 0,
    UNIQUE (taxonomy, slug)
)
"""


class Taxonomy(StrEnum):
    """Classification axes."""

    CATEGORY = "category"
    PROCEDURE = "procedure"

    @classmethod
    def parse(cls, value: "str | Taxonomy") -> "Taxonomy":
        """Accept an enum member, its value or its name in any case."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if normalized in (member.value, member.name.lower()):
                return member
        raise ValidationError("unknown_taxonomy", f"Unknown taxonomy: {value}")


@dataclass
class Term(BaseEntity):
    """A single term as mirrored from the term store."""

    id: int
    taxonomy: Taxonomy
    name: str
    slug: str
    description: str = ""
    parent_id: int | None = None
    count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Term":
        return cls(
            id=int(data["id"]),
            taxonomy=Taxonomy(data["taxonomy"]),
            name=data["name"],
            slug=data["slug"],
            description=data.get("description") or "",
            parent_id=data.get("parent_id"),
            count=int(data.get("count") or 0),
        )

    @classmethod
    def from_row(cls, row: tuple) -> "Term":
        """Build from a (id, taxonomy, name, slug, description, parent_id, count) row."""
        term_id, taxonomy, name, slug, description, parent_id, count = row
        return cls(
            id=term_id,
            taxonomy=Taxonomy(taxonomy),
            name=name,
            slug=slug,
            description=description or "",
            parent_id=parent_id,
            count=count or 0,
        )
