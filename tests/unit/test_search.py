"""Tests for cross-taxonomy search."""

import pytest

from taxonomy_engine.errors import ValidationError
from taxonomy_engine.models.taxonomy import SearchHit, Taxonomy


@pytest.fixture
def lifts(store):
    ids = {}
    for name, count in [("Brow Lift", 5), ("Face Lift", 20), ("Neck Lift", 1)]:
        ids[name] = store.create(Taxonomy.PROCEDURE, name, name.lower().replace(" ", "-"))
        store.update(ids[name], count=count)
    return ids


class TestSearch:
    def test_ranked_by_count(self, service, lifts):
        hits = service.search_terms("lift")
        assert [h.count for h in hits] == [20, 5, 1]
        assert [h.name for h in hits] == ["Face Lift", "Brow Lift", "Neck Lift"]

    def test_ties_by_name(self, service, store):
        store.create(Taxonomy.PROCEDURE, "Zeta Peel", "zeta-peel")
        store.create(Taxonomy.PROCEDURE, "alpha peel", "alpha-peel")
        assert [h.name for h in service.search_terms("peel")] == ["alpha peel", "Zeta Peel"]

    def test_case_insensitive(self, service, lifts):
        assert len(service.search_terms("LIFT")) == 3

    def test_empty_query(self, service, lifts):
        assert service.search_terms("") == []
        assert service.search_terms("   ") == []

    def test_no_match(self, service, lifts):
        assert service.search_terms("tattoo") == []

    def test_across_taxonomies(self, service, store, lifts):
        store.create(Taxonomy.CATEGORY, "Lifting", "lifting")
        hits = service.search_terms("lift")
        assert {h.taxonomy for h in hits} == {Taxonomy.CATEGORY, Taxonomy.PROCEDURE}
        assert all(isinstance(h, SearchHit) for h in hits)

    def test_taxonomy_filter(self, service, store, lifts):
        store.create(Taxonomy.CATEGORY, "Lifting", "lifting")
        hits = service.search_terms("lift", ["category"])
        assert [h.name for h in hits] == ["Lifting"]

    def test_unknown_taxonomy(self, service):
        with pytest.raises(ValidationError) as exc:
            service.search_terms("lift", ["tags"])
        assert exc.value.code == "unknown_taxonomy"


class TestSnapshots:
    def test_snapshot_cached(self, service, store, lifts):
        service.search_terms("lift")
        calls = store.fetch_calls
        service.search_terms("lift")
        assert store.fetch_calls == calls

    def test_query_normalized(self, service, store, lifts):
        service.search_terms("Lift")
        calls = store.fetch_calls
        service.search_terms(" lift ")
        assert store.fetch_calls == calls

    def test_write_evicts_snapshot(self, service, store, lifts):
        service.search_terms("lift")
        store.update(lifts["Neck Lift"], count=50)
        hits = service.search_terms("lift")
        assert hits[0].name == "Neck Lift"

    def test_snapshot_expires_before_lists(self, service, shared, clock, lifts):
        service.search_terms("lift")
        (key,) = shared.keys("search:")

        clock.advance(299)
        assert shared.get(key) is not None
        clock.advance(2)
        assert shared.get(key) is None
        assert shared.keys("procedure:terms:all:")
        assert all(shared.get(k) is not None for k in shared.keys("procedure:terms:all:"))


def test_one_off_queries_do_not_accumulate(service, shared, clock, lifts):
    for i in range(50):
        service.search_terms(f"q{i}")
    clock.advance(72000)
    service.search_terms("lift")

    assert shared.stats()["expired"] == 0
    assert len(shared.keys("search:")) == 1
