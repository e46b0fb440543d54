"""Tests for bulk import and export."""

import pytest

from taxonomy_engine.errors import StoreUnavailableError
from taxonomy_engine.models.taxonomy import ImportRecord, Taxonomy, TermEventKind
from taxonomy_engine.repositories import SharedCacheRepository, TermStore, connect
from taxonomy_engine.services.taxonomy import TaxonomyService

FACE_AND_NOSE = [
    {"name": "Face", "slug": "face"},
    {"name": "Rhinoplasty", "slug": "rhinoplasty", "parent_slug": "face", "meta": {"api_id": 42}},
]


def _state(service, taxonomy):
    return sorted(
        (
            r.name,
            r.slug,
            r.parent_slug,
            r.description,
            tuple(sorted(r.meta.items())),
        )
        for r in service.export_terms(taxonomy)
    )


class TestImport:
    def test_example_scenario(self, service, store):
        result = service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)

        face = store.fetch(Taxonomy.PROCEDURE, None)[0]
        rhino = store.fetch(Taxonomy.PROCEDURE, None)[1]
        assert result.created == [face.id, rhino.id]
        assert result.updated == []
        assert result.failed == []

        roots = service.get_term_hierarchy("procedure")
        assert len(roots) == 1
        assert roots[0].term.name == "Face"
        assert [c.term.name for c in roots[0].children] == ["Rhinoplasty"]
        assert roots[0].children[0].meta.api_id == 42

    def test_idempotent(self, service):
        service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        before = _state(service, Taxonomy.PROCEDURE)

        rerun = service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        assert rerun.created == []
        assert len(rerun.updated) == 2
        assert _state(service, Taxonomy.PROCEDURE) == before

    def test_rerun_emits_no_writes(self, service, store):
        service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        store.events.clear()
        service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        assert store.events == []

    def test_slug_derived_from_name(self, service, store):
        service.bulk_import_terms(Taxonomy.CATEGORY, [{"name": "Breast Surgery & Lift"}])
        assert store.fetch(Taxonomy.CATEGORY)[0].slug == "breast-surgery-lift"

    def test_partial_failure(self, service):
        records = [
            {"name": ""},
            {"name": "x" * 201},
            {"name": "Orphan", "parent_slug": "nowhere"},
            {"name": "Face"},
        ]
        result = service.bulk_import_terms(Taxonomy.PROCEDURE, records)

        assert [reason for _, reason in result.failed] == ["missing_name", "name_too_long", "parent_not_found"]
        assert len(result.created) == 1

    def test_update_changes_name_and_description(self, service, store):
        service.bulk_import_terms(Taxonomy.CATEGORY, [{"name": "Face", "slug": "face"}])
        result = service.bulk_import_terms(
            Taxonomy.CATEGORY,
            [{"name": "Facial", "slug": "face", "description": "Head and neck"}],
        )

        term = store.get(result.updated[0])
        assert term.name == "Facial"
        assert term.description == "Head and neck"

    def test_unknown_meta_dropped(self, service, store):
        result = service.bulk_import_terms(
            Taxonomy.CATEGORY,
            [{"name": "Face", "meta": {"api_id": 3, "colour": "red"}}],
        )
        assert result.failed == []
        assert store.fetch_all_meta(result.created[0]) == {"api_id": 3}

    def test_invalid_meta_value(self, service):
        result = service.bulk_import_terms(
            Taxonomy.CATEGORY,
            [{"name": "Face", "meta": {"display_order": 100000}}],
        )
        assert result.failed[0][1] == "invalid_meta"
        assert result.created == []

    def test_meta_change_written(self, service, store):
        service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        rhino = store.fetch(Taxonomy.PROCEDURE, None)[1]
        store.events.clear()

        service.bulk_import_terms(
            Taxonomy.PROCEDURE,
            [{"name": "Rhinoplasty", "slug": "rhinoplasty", "meta": {"api_id": 43, "case_count": 9}}],
        )

        assert store.fetch_all_meta(rhino.id) == {"api_id": 43, "case_count": 9}
        assert {e.kind for e in store.events} == {TermEventKind.UPDATED}

    def test_invalid_record_shape(self, service):
        result = service.bulk_import_terms(Taxonomy.CATEGORY, [{"name": "Face", "meta": "oops"}])
        assert result.failed[0][1] == "invalid_record"

    def test_store_failure_aborts(self, service, store, monkeypatch):
        real_create = store.create
        calls = []

        def flaky_create(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise StoreUnavailableError("disk full")
            return real_create(*args, **kwargs)

        monkeypatch.setattr(store, "create", flaky_create)
        result = service.bulk_import_terms(
            Taxonomy.CATEGORY,
            [{"name": "A"}, {"name": "B"}, {"name": "C"}],
        )

        assert len(result.created) == 1
        assert result.aborted
        assert result.error.message == "disk full"
        assert [t.name for t in store.fetch(Taxonomy.CATEGORY)] == ["A"]

    def test_import_invalidates_lists(self, service, store):
        assert service.get_terms_cached(Taxonomy.CATEGORY) == []
        service.bulk_import_terms(Taxonomy.CATEGORY, [{"name": "Face"}])
        assert [t.name for t in service.get_terms_cached(Taxonomy.CATEGORY)] == ["Face"]


class TestExport:
    def test_parents_first(self, service, store):
        service.bulk_import_terms(
            Taxonomy.PROCEDURE,
            [
                {"name": "Zygoma", "slug": "zygoma"},
                {"name": "Augment", "slug": "augment", "parent_slug": "zygoma"},
                {"name": "Apex", "slug": "apex", "parent_slug": "augment"},
            ],
        )
        records = service.export_terms(Taxonomy.PROCEDURE)
        assert [r.slug for r in records] == ["zygoma", "augment", "apex"]
        assert records[2].parent_slug == "augment"

    def test_round_trip(self, service, store):
        service.bulk_import_terms(
            Taxonomy.PROCEDURE,
            [
                *FACE_AND_NOSE,
                {"name": "Body", "description": "Below the neck"},
                {
                    "name": "Tummy Tuck",
                    "parent_slug": "body",
                    "meta": {"case_count": 12, "contains_nudity": True, "slug_name": "Tummy Tuck"},
                },
            ],
        )
        exported = service.export_terms(Taxonomy.PROCEDURE)

        conn = connect(":memory:")
        fresh = TaxonomyService(TermStore(conn), SharedCacheRepository(conn))
        result = fresh.bulk_import_terms(Taxonomy.PROCEDURE, exported)

        assert result.failed == []
        assert _state(fresh, Taxonomy.PROCEDURE) == _state(service, Taxonomy.PROCEDURE)
        conn.close()

    def test_records_are_import_records(self, service):
        service.bulk_import_terms(Taxonomy.PROCEDURE, FACE_AND_NOSE)
        records = service.export_terms(Taxonomy.PROCEDURE)
        assert all(isinstance(r, ImportRecord) for r in records)
        assert records[1].meta == {"api_id": 42}


def test_cycle_blocks_export(service, store):
    from taxonomy_engine.errors import CycleDetectedError

    a = store.create(Taxonomy.CATEGORY, "A", "a")
    b = store.create(Taxonomy.CATEGORY, "B", "b", a)
    store.update(a, parent_id=b)
    with pytest.raises(CycleDetectedError):
        service.export_terms(Taxonomy.CATEGORY)


def test_name_length_limit(service):
    result = service.bulk_import_terms(
        Taxonomy.CATEGORY,
        [{"name": "a" * 200, "slug": "long"}, {"name": "b" * 201, "slug": "longer"}],
    )
    assert len(result.created) == 1
    assert [reason for _, reason in result.failed] == ["name_too_long"]
