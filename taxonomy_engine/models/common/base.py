"""Base entity for dataclass models that travel through the JSON cache."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class BaseEntity:
    """Dataclass entity with a JSON-safe dict form (enums become their values)."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self, dict_factory=lambda items: {k: _plain(v) for k, v in items})
