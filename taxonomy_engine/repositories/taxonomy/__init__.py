"""Taxonomy repositories."""

from taxonomy_engine.repositories.taxonomy.store import TermListener, TermStore

__all__ = [
    "TermStore",
    "TermListener",
]
