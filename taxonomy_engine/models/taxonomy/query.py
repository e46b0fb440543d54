"""Term store filter."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class TermQuery(BaseModel):
    """Filter understood by the term store.

    ``parent_id`` of ``ROOT_PARENT`` (0) selects root terms, ``None`` leaves the
    parent unconstrained. ``name_substring`` is matched case-insensitively.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    parent_id: int | None = None
    name_substring: str | None = None
    hide_empty: bool = False
    slug: str | None = None
    term_id: int | None = None
    meta_key: str | None = None
    meta_value: Any = None
    limit: int | None = None

    @field_validator("name_substring")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip().lower() or None

    def canonical(self) -> str:
        """Stable serialization: sorted keys, defaults omitted."""
        return json.dumps(self.model_dump(exclude_defaults=True), sort_keys=True, default=str)
