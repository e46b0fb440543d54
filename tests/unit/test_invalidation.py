"""Tests for cascading cache invalidation."""

from taxonomy_engine.models.taxonomy import ROOT_PARENT, Taxonomy


def _names(nodes):
    return [n.term.name for n in nodes]


class TestStoreEvents:
    def test_rename_visible_everywhere(self, service, store, procedures):
        rhino = procedures["rhinoplasty"]
        service.get_term_hierarchy(Taxonomy.PROCEDURE)
        service.get_term(Taxonomy.PROCEDURE, rhino)
        service.get_terms_cached(Taxonomy.PROCEDURE)

        store.update(rhino, name="Nose Job")

        face = service.get_term_hierarchy(Taxonomy.PROCEDURE)[1]
        assert _names(face.children) == ["Facelift", "Nose Job"]
        assert service.get_term(Taxonomy.PROCEDURE, rhino).name == "Nose Job"
        assert "Nose Job" in [t.name for t in service.get_terms_cached(Taxonomy.PROCEDURE)]

    def test_create_evicts_parent_level(self, service, store, procedures):
        service.get_term_hierarchy(Taxonomy.PROCEDURE)
        store.create(Taxonomy.PROCEDURE, "Blepharoplasty", "blepharoplasty", procedures["face"])

        face = service.get_term_hierarchy(Taxonomy.PROCEDURE)[1]
        assert _names(face.children) == ["Blepharoplasty", "Facelift", "Rhinoplasty"]

    def test_move_evicts_old_and_new_parent(self, service, store, procedures):
        service.get_term_hierarchy(Taxonomy.PROCEDURE)
        store.update(procedures["liposuction"], parent_id=procedures["face"])

        body, face = service.get_term_hierarchy(Taxonomy.PROCEDURE)
        assert body.children == []
        assert _names(face.children) == ["Facelift", "Liposuction", "Rhinoplasty"]

    def test_meta_write_evicts_meta(self, service, store, procedures):
        rhino = procedures["rhinoplasty"]
        assert service.get_term_meta(Taxonomy.PROCEDURE, rhino).api_id is None
        store.write_meta(rhino, "api_id", 7)
        assert service.get_term_meta(Taxonomy.PROCEDURE, rhino).api_id == 7
        assert service.get_term_by_external_id(Taxonomy.PROCEDURE, 7).id == rhino

    def test_external_lookup_refreshed(self, service, store, procedures):
        store.write_meta(procedures["facelift"], "api_id", 9)
        assert service.get_term_by_external_id(Taxonomy.PROCEDURE, 9).id == procedures["facelift"]

        store.delete_meta(procedures["facelift"], "api_id")
        store.write_meta(procedures["rhinoplasty"], "api_id", 9)
        assert service.get_term_by_external_id(Taxonomy.PROCEDURE, 9).id == procedures["rhinoplasty"]

    def test_delete_reparents(self, service, store, procedures):
        service.get_term_hierarchy(Taxonomy.PROCEDURE)
        store.delete(procedures["face"])

        roots = service.get_term_hierarchy(Taxonomy.PROCEDURE)
        assert _names(roots) == ["Body", "Facelift", "Rhinoplasty"]
        assert service.get_term(Taxonomy.PROCEDURE, procedures["face"]) is None

    def test_other_taxonomy_untouched(self, service, store, shared, procedures):
        store.create(Taxonomy.CATEGORY, "Face", "face")
        service.get_terms_cached(Taxonomy.CATEGORY)
        before = shared.keys("category:")

        store.update(procedures["rhinoplasty"], name="Nose Job")
        assert shared.keys("category:") == before


class TestCoordinator:
    def test_invalidate_removes_keys(self, service, shared, procedures):
        rhino = procedures["rhinoplasty"]
        service.get_term(Taxonomy.PROCEDURE, rhino)
        service.get_term_meta(Taxonomy.PROCEDURE, rhino)
        service.get_terms_cached(Taxonomy.PROCEDURE, {"parent_id": procedures["face"]})
        service.get_terms_cached(Taxonomy.PROCEDURE, {"parent_id": procedures["body"]})

        service.invalidation.invalidate(Taxonomy.PROCEDURE, rhino, (procedures["face"],))

        remaining = shared.keys("procedure:")
        assert f"procedure:term:{rhino}" not in remaining
        assert f"procedure:meta:{rhino}" not in remaining
        assert not shared.keys(f"procedure:terms:parent={procedures['face']}:")
        assert shared.keys(f"procedure:terms:parent={procedures['body']}:")

    def test_unknown_parent_evicts_all_levels(self, service, shared, procedures):
        service.get_term_hierarchy(Taxonomy.PROCEDURE)
        assert shared.keys("procedure:terms:parent=")

        service.invalidation.invalidate(Taxonomy.PROCEDURE, 12345)
        assert shared.keys("procedure:terms:parent=") == []

    def test_parent_from_cached_term(self, service, shared, procedures):
        lipo = procedures["liposuction"]
        service.get_term(Taxonomy.PROCEDURE, lipo)
        service.get_terms_cached(Taxonomy.PROCEDURE, {"parent_id": procedures["body"]})
        service.get_terms_cached(Taxonomy.PROCEDURE, {"parent_id": procedures["face"]})

        service.invalidation.invalidate(Taxonomy.PROCEDURE, lipo)
        assert not shared.keys(f"procedure:terms:parent={procedures['body']}:")
        assert shared.keys(f"procedure:terms:parent={procedures['face']}:")

    def test_request_local_cleared(self, service, store, procedures):
        with service.request():
            assert service.get_term(Taxonomy.PROCEDURE, procedures["face"]).name == "Face"
            store.update(procedures["face"], name="Head")
            assert service.get_term(Taxonomy.PROCEDURE, procedures["face"]).name == "Head"

    def test_clear_taxonomy_cache(self, service, shared, procedures):
        service.get_terms_cached(Taxonomy.PROCEDURE, {"parent_id": ROOT_PARENT})
        service.search_terms("face")
        service.clear_taxonomy_cache(Taxonomy.PROCEDURE)
        assert shared.keys("procedure:") == []
        assert shared.keys("search:") == []

    def test_clear_everything(self, service, store, shared, procedures):
        store.create(Taxonomy.CATEGORY, "Face", "face")
        service.get_terms_cached(Taxonomy.CATEGORY)
        service.get_terms_cached(Taxonomy.PROCEDURE)
        service.clear_taxonomy_cache()
        assert service.cache_stats()["total"] == 0


def test_sync_term_counts(service, store, procedures):
    store.write_meta(procedures["rhinoplasty"], "case_count", 14)
    store.write_meta(procedures["facelift"], "case_count", 0)
    service.get_terms_cached(Taxonomy.PROCEDURE, {"hide_empty": True})

    assert service.sync_term_counts("procedure") == 1
    assert [t.name for t in service.get_terms_cached(Taxonomy.PROCEDURE, {"hide_empty": True})] == ["Rhinoplasty"]
