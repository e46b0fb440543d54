"""Taxonomy term cache and hierarchy engine."""
