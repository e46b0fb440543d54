"""Taxonomy services - cache, hierarchy, import/export, search, invalidation."""

from taxonomy_engine.services.taxonomy.cache import TermCache
from taxonomy_engine.services.taxonomy.hierarchy import HierarchyBuilder
from taxonomy_engine.services.taxonomy.importer import BulkImporter
from taxonomy_engine.services.taxonomy.invalidation import InvalidationCoordinator
from taxonomy_engine.services.taxonomy.metrics import PerformanceTracker
from taxonomy_engine.services.taxonomy.search import SearchIndex
from taxonomy_engine.services.taxonomy.service import TaxonomyService

__all__ = [
    "TermCache",
    "HierarchyBuilder",
    "BulkImporter",
    "InvalidationCoordinator",
    "SearchIndex",
    "PerformanceTracker",
    "TaxonomyService",
]
