"""Bulk import/export - idempotent create-or-update keyed by slug."""

from collections.abc import Iterable
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from settings import MAX_DESCRIPTION_LENGTH, MAX_SLUG_LENGTH, MAX_TERM_NAME_LENGTH
from taxonomy_engine.errors import CycleDetectedError, StoreUnavailableError, ValidationError
from taxonomy_engine.models.taxonomy import (
    ImportRecord,
    ImportResult,
    Taxonomy,
    Term,
    TermQuery,
    meta_keys,
    meta_model,
    meta_to_dict,
)
from taxonomy_engine.repositories import TermStore
from taxonomy_engine.services.taxonomy.cache import TermCache
from taxonomy_engine.services.taxonomy.invalidation import InvalidationCoordinator
from taxonomy_engine.text import clean_text, slugify


class BulkImporter:
    """Applies ImportRecords to the term store and flattens terms back to records.

    Records are processed in input order; parents must precede their children.
    A bad record is collected in ``failed`` and the batch goes on; a store
    failure stops the batch and is returned in ``ImportResult.error``.
    """

    def __init__(self, store: TermStore, cache: TermCache, invalidation: InvalidationCoordinator):
        self._store = store
        self._cache = cache
        self._invalidation = invalidation

    def import_terms(self, taxonomy: Taxonomy | str, records: Iterable[ImportRecord | dict]) -> ImportResult:
        taxonomy = Taxonomy.parse(taxonomy)
        log = logger.bind(taxonomy=taxonomy.value)
        result = ImportResult()

        for raw in records:
            record = raw
            try:
                record = self._coerce(raw)
                term_id, created = self._import_one(taxonomy, record)
            except ValidationError as e:
                log.warning("Import failed for {!r}: {}", record_label(record), e.message)
                result.failed.append((record, e.code))
                continue
            except StoreUnavailableError as e:
                log.error("Import aborted at {!r}: {}", record_label(record), e.message)
                result.error = e
                break

            if created:
                result.created.append(term_id)
            else:
                result.updated.append(term_id)

        self._invalidation.invalidate_taxonomy(taxonomy)
        log.info("Import: {}", result.summary())
        return result

    @staticmethod
    def _coerce(raw: ImportRecord | dict) -> ImportRecord:
        if isinstance(raw, ImportRecord):
            return raw
        try:
            return ImportRecord.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError("invalid_record", str(e)) from e

    def _import_one(self, taxonomy: Taxonomy, record: ImportRecord) -> tuple[int, bool]:
        """Returns (term_id, created)."""
        name = (record.name or "").strip()
        if not name:
            raise ValidationError("missing_name", "Term name is required")
        if len(name) > MAX_TERM_NAME_LENGTH:
            raise ValidationError("name_too_long", f"Term name exceeds {MAX_TERM_NAME_LENGTH} characters")

        meta = self._prepare_meta(taxonomy, record.meta)
        description = clean_text(record.description, MAX_DESCRIPTION_LENGTH)

        slug = slugify(record.slug or name, MAX_SLUG_LENGTH)
        if not slug:
            raise ValidationError("invalid_slug", f"Cannot derive a slug from {record.slug or name!r}")

        existing = self._find(taxonomy, slug)
        if existing is not None:
            term_id = existing.id
            parent_id = existing.parent_id
            changes: dict[str, Any] = {}
            if existing.name != name:
                changes["name"] = name
            if record.description is not None and existing.description != description:
                changes["description"] = description
            if changes:
                self._store.update(term_id, **changes)
            created = False
        else:
            parent_id = self._resolve_parent(taxonomy, record.parent_slug)
            term_id = self._store.create(taxonomy, name, slug, parent_id, description)
            created = True

        current = self._store.fetch_all_meta(term_id)
        for key, value in meta.items():
            if current.get(key) != value:
                self._store.write_meta(term_id, key, value)

        self._invalidation.invalidate(taxonomy, term_id, (parent_id,))
        return term_id, created

    def _find(self, taxonomy: Taxonomy, slug: str) -> Term | None:
        terms = self._store.fetch(taxonomy, TermQuery(slug=slug, limit=1))
        return terms[0] if terms else None

    def _resolve_parent(self, taxonomy: Taxonomy, parent_slug: str | None) -> int | None:
        if not parent_slug:
            return None
        parent = self._find(taxonomy, slugify(parent_slug, MAX_SLUG_LENGTH))
        if parent is None:
            raise ValidationError("parent_not_found", f"Parent {parent_slug!r} not found")
        return parent.id

    @staticmethod
    def _prepare_meta(taxonomy: Taxonomy, raw: dict[str, Any]) -> dict[str, Any]:
        """Validate known keys; unknown keys are dropped."""
        known = meta_keys(taxonomy)
        dropped = sorted(set(raw) - known)
        if dropped:
            logger.warning("Dropping unknown {} meta keys: {}", taxonomy.value, dropped)
        try:
            meta = meta_model(taxonomy).model_validate({k: v for k, v in raw.items() if k in known})
        except PydanticValidationError as e:
            raise ValidationError("invalid_meta", str(e)) from e
        return meta_to_dict(meta)

    def export_terms(self, taxonomy: Taxonomy | str) -> list[ImportRecord]:
        """Every term as an ImportRecord, parents before children."""
        taxonomy = Taxonomy.parse(taxonomy)
        terms = self._cache.get_terms(taxonomy)
        by_id = {t.id: t for t in terms}
        depths: dict[int, int] = {}

        def depth(term: Term) -> int:
            chain = []
            current = term
            while current.id not in depths:
                if current.id in chain:
                    raise CycleDetectedError([*chain[chain.index(current.id) :], current.id])
                chain.append(current.id)
                parent = by_id.get(current.parent_id) if current.parent_id is not None else None
                if parent is None:
                    depths[current.id] = 0
                    chain.pop()
                    break
                current = parent
            for term_id in reversed(chain):
                depths[term_id] = depths[by_id[term_id].parent_id] + 1
            return depths[term.id]

        ordered = sorted(terms, key=lambda t: (depth(t), t.name.casefold(), t.id))

        records = []
        for term in ordered:
            parent = by_id.get(term.parent_id) if term.parent_id is not None else None
            records.append(
                ImportRecord(
                    name=term.name,
                    slug=term.slug,
                    parent_slug=parent.slug if parent else None,
                    description=term.description or None,
                    meta=meta_to_dict(self._cache.get_term_meta(taxonomy, term.id)),
                )
            )

        logger.info("Exported {} {} terms", len(records), taxonomy.value)
        return records


def record_label(record: Any) -> str:
    if isinstance(record, ImportRecord):
        return record.slug or record.name
    if isinstance(record, dict):
        return str(record.get("slug") or record.get("name") or "")
    return str(record)
