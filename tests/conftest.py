"""Shared fixtures - in-memory DuckDB with a wired taxonomy service."""

from datetime import datetime, timedelta

import pytest

from taxonomy_engine.models.taxonomy import Taxonomy, TermQuery
from taxonomy_engine.repositories import SharedCacheRepository, TermStore, connect
from taxonomy_engine.services.taxonomy import TaxonomyService


class Clock:
    """Controllable clock for TTL tests."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


class CountingStore(TermStore):
    """Term store that counts fetch calls."""

    def __init__(self, conn):
        super().__init__(conn)
        self.fetch_calls = 0
        self.events = []
        self.subscribe(self.events.append)

    def fetch(self, taxonomy: Taxonomy, query: TermQuery | None = None):
        self.fetch_calls += 1
        return super().fetch(taxonomy, query)


@pytest.fixture
def conn():
    c = connect(":memory:")
    yield c
    c.close()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store(conn):
    return CountingStore(conn)


@pytest.fixture
def shared(conn, clock):
    return SharedCacheRepository(conn, enabled=True, clock=clock)


@pytest.fixture
def service(store, shared):
    return TaxonomyService(store, shared)


@pytest.fixture
def procedures(store):
    """Face > (Rhinoplasty, Facelift), Body > Liposuction."""
    face = store.create(Taxonomy.PROCEDURE, "Face", "face")
    body = store.create(Taxonomy.PROCEDURE, "Body", "body")
    rhino = store.create(Taxonomy.PROCEDURE, "Rhinoplasty", "rhinoplasty", face)
    facelift = store.create(Taxonomy.PROCEDURE, "Facelift", "facelift", face)
    lipo = store.create(Taxonomy.PROCEDURE, "Liposuction", "liposuction", body)
    return {"face": face, "body": body, "rhinoplasty": rhino, "facelift": facelift, "liposuction": lipo}
