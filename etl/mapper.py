"""Map sidebar payloads to procedure import records."""

from loguru import logger

from gallery_client.schemas import SidebarCategory, SidebarResponse
from taxonomy_engine.models.taxonomy import ImportRecord
from taxonomy_engine.text import slugify


def category_record(category: SidebarCategory) -> ImportRecord:
    """Root procedure term for a sidebar category."""
    return ImportRecord(
        name=category.name,
        slug=category.slug_name or slugify(category.name),
        description=category.description,
    )


def sidebar_to_records(response: SidebarResponse) -> list[ImportRecord]:
    """Categories become roots, their procedures children. Parents come first."""
    records = []
    for category in response.data:
        parent = category_record(category)
        records.append(parent)

        for procedure in category.procedures:
            if not procedure.ids:
                logger.debug("Skipping procedure without ids: {}", procedure.name)
                continue
            slug = procedure.slug_name or slugify(procedure.name)
            records.append(
                ImportRecord(
                    name=procedure.name,
                    slug=slug,
                    parent_slug=parent.slug,
                    description=procedure.description,
                    meta={
                        "api_id": procedure.ids[0],
                        "slug_name": slug,
                        "contains_nudity": procedure.nudity,
                        "case_count": procedure.total_case,
                    },
                )
            )

    logger.info("Mapped {} categories to {} records", len(response.data), len(records))
    return records
