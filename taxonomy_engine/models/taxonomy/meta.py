"""Typed term meta per taxonomy."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from settings import MAX_DISPLAY_ORDER, MAX_SLUG_LENGTH
from taxonomy_engine.models.taxonomy.term import Taxonomy
from taxonomy_engine.text import slugify

TERM_META_DDL = """
CREATE TABLE IF NOT EXISTS term_meta (
    term_id INTEGER NOT NULL,
    key VARCHAR NOT NULL,
    value VARCHAR NOT NULL,
    PRIMARY KEY (term_id, key)
)
"""


class CategoryMeta(BaseModel):
    """Category attributes."""

    model_config = ConfigDict(extra="forbid")

    api_id: int | None = Field(default=None, ge=0)
    display_order: int | None = Field(default=None, ge=0, le=MAX_DISPLAY_ORDER)


class ProcedureMeta(BaseModel):
    """Procedure attributes."""

    model_config = ConfigDict(extra="forbid")

    api_id: int | None = Field(default=None, ge=0)
    slug_name: str | None = None
    contains_nudity: bool | None = None
    case_count: int | None = Field(default=None, ge=0)

    @field_validator("slug_name")
    @classmethod
    def _slug_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return slugify(v, MAX_SLUG_LENGTH) or None


TermMeta = CategoryMeta | ProcedureMeta

META_MODELS: dict[Taxonomy, type[BaseModel]] = {
    Taxonomy.CATEGORY: CategoryMeta,
    Taxonomy.PROCEDURE: ProcedureMeta,
}


def meta_model(taxonomy: Taxonomy) -> type[BaseModel]:
    """Meta model class for a taxonomy."""
    return META_MODELS[taxonomy]


def meta_keys(taxonomy: Taxonomy) -> set[str]:
    """Closed set of meta keys known for a taxonomy."""
    return set(META_MODELS[taxonomy].model_fields)


def meta_to_dict(meta: BaseModel) -> dict[str, Any]:
    """Set keys only - absent keys have no placeholder."""
    return meta.model_dump(exclude_none=True)
