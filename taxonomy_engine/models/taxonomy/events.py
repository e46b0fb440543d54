"""Term store mutation events."""

from dataclasses import dataclass
from enum import StrEnum

from taxonomy_engine.models.taxonomy.term import Taxonomy


class TermEventKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class TermEvent:
    """Emitted by the term store after a write is committed.

    ``parent_ids`` holds every parent the term had around the write (old and new).
    """

    kind: TermEventKind
    taxonomy: Taxonomy
    term_id: int
    parent_ids: tuple[int | None, ...] = ()
