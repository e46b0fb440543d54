"""Main sync orchestration."""

import asyncio

from loguru import logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from etl.mapper import sidebar_to_records
from etl.validation import validate_taxonomy
from gallery_client import SidebarClient
from settings import API_TOKENS
from taxonomy_engine.errors import StoreUnavailableError
from taxonomy_engine.models.taxonomy import ImportRecord, ImportResult, Taxonomy
from taxonomy_engine.services.taxonomy import TaxonomyService


def _log_retry(retry_state) -> None:
    logger.warning(
        "Import attempt {} failed, retrying: {}",
        retry_state.attempt_number,
        retry_state.outcome.exception(),
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(StoreUnavailableError),
    before_sleep=_log_retry,
    reraise=True,
)
def import_with_retry(
    service: TaxonomyService,
    taxonomy: Taxonomy,
    records: list[ImportRecord | dict],
) -> ImportResult:
    """Run a bulk import; re-run the whole batch on store failure (imports are idempotent)."""
    result = service.bulk_import_terms(taxonomy, records)
    if result.error is not None:
        raise result.error
    return result


async def fetch_procedure_records(client: SidebarClient, api_tokens: list[str]) -> list[ImportRecord]:
    response = await client.sidebar(api_tokens)
    return sidebar_to_records(response)


async def _sync_async(service: TaxonomyService, api_tokens: list[str], client: SidebarClient | None) -> ImportResult:
    async with client or SidebarClient() as sidebar_client:
        records = await fetch_procedure_records(sidebar_client, api_tokens)

    result = import_with_retry(service, Taxonomy.PROCEDURE, records)
    for record, reason in result.failed:
        logger.warning("Procedure {!r} not imported: {}", record.name, reason)

    service.sync_term_counts(Taxonomy.PROCEDURE)
    return result


def sync_procedures(
    service: TaxonomyService,
    api_tokens: list[str] | None = None,
    client: SidebarClient | None = None,
) -> ImportResult:
    """Main sync entry point: sidebar API -> procedure taxonomy."""
    tokens = api_tokens if api_tokens is not None else API_TOKENS
    result = asyncio.run(_sync_async(service, tokens, client))

    service.purge_expired_cache()

    report = validate_taxonomy(service.store, Taxonomy.PROCEDURE)
    if report["valid"]:
        logger.info("Validation OK: {}", report["stats"])
    else:
        logger.warning("Validation issues: {}", report["issues"])

    logger.info("Sync complete! {} timings={}", result.summary(), service.performance_metrics())
    return result
