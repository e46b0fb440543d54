"""Term store - persistent source of truth for terms and their meta."""

import json
from collections.abc import Callable
from typing import Any

import duckdb
from loguru import logger

from taxonomy_engine.errors import ValidationError
from taxonomy_engine.models.taxonomy import (
    ROOT_PARENT,
    Taxonomy,
    Term,
    TermEvent,
    TermEventKind,
    TermQuery,
)
from taxonomy_engine.repositories.base import BaseRepository

_TERM_COLUMNS = "t.id, t.taxonomy, t.name, t.slug, t.description, t.parent_id, t.count"

_UPDATABLE = ("name", "description", "parent_id", "count")

TermListener = Callable[[TermEvent], None]


class TermStore(BaseRepository):
    """CRUD over the term and term_meta tables.

    Every committed write is announced to subscribers as a ``TermEvent``.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection | None = None, read_only: bool = False):
        super().__init__(conn, read_only)
        self._listeners: list[TermListener] = []

    def subscribe(self, listener: TermListener) -> None:
        """Register a callback for mutation events."""
        self._listeners.append(listener)

    def _emit(self, kind: TermEventKind, taxonomy: Taxonomy, term_id: int, *parent_ids: int | None) -> None:
        event = TermEvent(kind=kind, taxonomy=taxonomy, term_id=term_id, parent_ids=tuple(dict.fromkeys(parent_ids)))
        for listener in self._listeners:
            listener(event)

    # Reads

    def fetch(self, taxonomy: Taxonomy, query: TermQuery | None = None) -> list[Term]:
        """Terms of a taxonomy matching the filter, ordered by name."""
        query = query or TermQuery()
        sql = f"SELECT {_TERM_COLUMNS} FROM term t"
        where = ["t.taxonomy = ?"]
        params: list[Any] = [taxonomy.value]

        if query.meta_key is not None:
            sql += " JOIN term_meta m ON m.term_id = t.id AND m.key = ?"
            params.insert(0, query.meta_key)
            if query.meta_value is not None:
                where.append("m.value = ?")
                params.append(json.dumps(query.meta_value))

        if query.parent_id == ROOT_PARENT:
            where.append("t.parent_id IS NULL")
        elif query.parent_id is not None:
            where.append("t.parent_id = ?")
            params.append(query.parent_id)

        if query.name_substring:
            where.append("contains(lower(t.name), ?)")
            params.append(query.name_substring)
        if query.slug is not None:
            where.append("t.slug = ?")
            params.append(query.slug)
        if query.term_id is not None:
            where.append("t.id = ?")
            params.append(query.term_id)
        if query.hide_empty:
            where.append("t.count > 0")

        sql += " WHERE " + " AND ".join(where) + " ORDER BY t.name, t.id"
        if query.limit:
            sql += f" LIMIT {int(query.limit)}"

        rows = self.fetchall(sql, params)
        logger.debug("fetch({}, {}): {} terms", taxonomy.value, query.canonical(), len(rows))
        return [Term.from_row(r) for r in rows]

    def get(self, term_id: int) -> Term | None:
        """Single term in any taxonomy."""
        row = self.fetchone(f"SELECT {_TERM_COLUMNS} FROM term t WHERE t.id = ?", [term_id])
        return Term.from_row(row) if row else None

    def fetch_meta(self, term_id: int, key: str) -> Any | None:
        """Meta value or None when absent."""
        row = self.fetchone("SELECT value FROM term_meta WHERE term_id = ? AND key = ?", [term_id, key])
        return json.loads(row[0]) if row else None

    def fetch_all_meta(self, term_id: int) -> dict[str, Any]:
        """Every stored meta value of a term."""
        rows = self.fetchall("SELECT key, value FROM term_meta WHERE term_id = ? ORDER BY key", [term_id])
        return {k: json.loads(v) for k, v in rows}

    def meta_rows(self, taxonomy: Taxonomy) -> list[tuple[int, str]]:
        """(term_id, key) for all meta rows of a taxonomy."""
        return self.fetchall(
            """
            SELECT m.term_id, m.key FROM term_meta m
            JOIN term t ON t.id = m.term_id
            WHERE t.taxonomy = ?
            ORDER BY m.term_id, m.key
            """,
            [taxonomy.value],
        )

    # Writes

    def write_meta(self, term_id: int, key: str, value: Any) -> None:
        """Insert or overwrite one meta value."""
        self._check_writable()
        term = self._require(term_id)
        self.execute(
            "INSERT OR REPLACE INTO term_meta (term_id, key, value) VALUES (?, ?, ?)",
            [term_id, key, json.dumps(value)],
        )
        self._emit(TermEventKind.UPDATED, term.taxonomy, term_id, term.parent_id)

    def delete_meta(self, term_id: int, key: str) -> None:
        self._check_writable()
        term = self._require(term_id)
        self.execute("DELETE FROM term_meta WHERE term_id = ? AND key = ?", [term_id, key])
        self._emit(TermEventKind.UPDATED, term.taxonomy, term_id, term.parent_id)

    def create(
        self,
        taxonomy: Taxonomy,
        name: str,
        slug: str,
        parent_id: int | None = None,
        description: str = "",
    ) -> int:
        """Insert a term and return its id."""
        self._check_writable()
        if parent_id:
            self._check_parent(taxonomy, parent_id)
        else:
            parent_id = None

        try:
            row = self.fetchone(
                """
                INSERT INTO term (taxonomy, name, slug, description, parent_id)
                VALUES (?, ?, ?, ?, ?)
                RETURNING id
                """,
                [taxonomy.value, name, slug, description, parent_id],
            )
        except duckdb.ConstraintException as e:
            raise ValidationError("duplicate_slug", f"Slug already exists in {taxonomy.value}: {slug}") from e

        term_id = row[0]
        logger.debug("Term created: {} {} ({})", taxonomy.value, term_id, slug)
        self._emit(TermEventKind.CREATED, taxonomy, term_id, parent_id)
        return term_id

    def update(self, term_id: int, **fields: Any) -> None:
        """Update name, description, parent_id or count."""
        self._check_writable()
        unknown = set(fields) - set(_UPDATABLE)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            return

        term = self._require(term_id)
        if "parent_id" in fields:
            fields["parent_id"] = fields["parent_id"] or None
            if fields["parent_id"] == term_id:
                raise ValidationError("invalid_parent", "A term cannot be its own parent")
            if fields["parent_id"] is not None:
                self._check_parent(term.taxonomy, fields["parent_id"])

        assignments = ", ".join(f"{k} = ?" for k in fields)
        self.execute(f"UPDATE term SET {assignments} WHERE id = ?", [*fields.values(), term_id])
        logger.debug("Term updated: {} {}", term_id, sorted(fields))
        self._emit(TermEventKind.UPDATED, term.taxonomy, term_id, term.parent_id, fields.get("parent_id", term.parent_id))

    def delete(self, term_id: int) -> None:
        """Delete a term; its children move up to its parent."""
        self._check_writable()
        term = self._require(term_id)
        with self.transaction():
            self.execute("UPDATE term SET parent_id = ? WHERE parent_id = ?", [term.parent_id, term_id])
            self.execute("DELETE FROM term_meta WHERE term_id = ?", [term_id])
            self.execute("DELETE FROM term WHERE id = ?", [term_id])
        logger.debug("Term deleted: {} {}", term.taxonomy.value, term_id)
        self._emit(TermEventKind.DELETED, term.taxonomy, term_id, term.parent_id)

    def _require(self, term_id: int) -> Term:
        term = self.get(term_id)
        if term is None:
            raise ValidationError("term_not_found", f"Term {term_id} does not exist")
        return term

    def _check_parent(self, taxonomy: Taxonomy, parent_id: int) -> None:
        parent = self.get(parent_id)
        if parent is None or parent.taxonomy != taxonomy:
            raise ValidationError("invalid_parent", f"Parent {parent_id} is not a {taxonomy.value} term")
