"""Services package."""

from taxonomy_engine.services.taxonomy import TaxonomyService

__all__ = [
    "TaxonomyService",
]
