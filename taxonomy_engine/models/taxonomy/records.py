"""Bulk import records and results."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from taxonomy_engine.errors import StoreUnavailableError


class ImportRecord(BaseModel):
    """External term description used for import and export."""

    name: str = ""
    slug: str | None = None
    parent_slug: str | None = None
    description: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


@dataclass
class ImportResult:
    """Aggregate outcome of one bulk import."""

    created: list[int] = field(default_factory=list)
    updated: list[int] = field(default_factory=list)
    failed: list[tuple[ImportRecord, str]] = field(default_factory=list)
    error: StoreUnavailableError | None = None

    @property
    def aborted(self) -> bool:
        return self.error is not None

    def summary(self) -> dict[str, int]:
        return {
            "created": len(self.created),
            "updated": len(self.updated),
            "failed": len(self.failed),
        }
