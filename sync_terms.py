#!/usr/bin/env python3
"""
Sync taxonomy terms and maintain the term cache.

Usage:
    python sync_terms.py                                 # Sync procedures from the gallery API
    python sync_terms.py --import terms.json procedure   # Import records from a JSON file
    python sync_terms.py --export category               # Print records as JSON
    python sync_terms.py --validate                      # Check taxonomy integrity
    python sync_terms.py --clear-cache                   # Drop all cached entries
    python sync_terms.py --purge-cache                   # Drop expired cached entries
    python sync_terms.py --recount                       # Copy case counts into term counts
"""

import json
import sys
from pathlib import Path

import httpx

from etl import sync_procedures
from etl.sync import import_with_retry
from etl.validation import validate_taxonomy
from gallery_client import GalleryAPIError
from settings.logging import setup_logging
from taxonomy_engine.container import container
from taxonomy_engine.errors import TaxonomyError
from taxonomy_engine.models.taxonomy import Taxonomy

logger = setup_logging(to_file=True)


def run_validation() -> bool:
    """Validate every taxonomy in the store."""
    print("\n" + "=" * 60)
    print("TAXONOMY VALIDATION REPORT")
    print("=" * 60)

    all_valid = True
    for taxonomy in Taxonomy:
        result = validate_taxonomy(container.store, taxonomy)
        status = "OK" if result["valid"] else "ISSUES"
        print(f"\n{taxonomy.value} [{status}]")
        for name, value in result["stats"].items():
            print(f"  {name}: {value:,}")
        for issue in result["issues"]:
            all_valid = False
            print(f"  ! {issue}")

    print("\n" + "=" * 60 + "\n")
    return all_valid


def run_import(path: Path, taxonomy: Taxonomy) -> None:
    """Import a JSON list of records."""
    records = json.loads(path.read_text())
    if not isinstance(records, list):
        raise TaxonomyError(f"{path} must hold a JSON list of records")
    result = import_with_retry(container.taxonomy, taxonomy, records)
    logger.info("Imported {}: {}", path, result.summary())
    for record, reason in result.failed:
        logger.warning("  {!r}: {}", getattr(record, "name", record), reason)


def run_export(taxonomy: Taxonomy) -> None:
    records = container.taxonomy.export_terms(taxonomy)
    print(json.dumps([r.model_dump(exclude_none=True) for r in records], indent=2))


def main():
    args = sys.argv[1:]
    container.init()

    try:
        if "--validate" in args:
            sys.exit(0 if run_validation() else 1)

        if "--clear-cache" in args:
            container.taxonomy.clear_taxonomy_cache()
            logger.info("Cache cleared")
            return

        if "--purge-cache" in args:
            container.taxonomy.purge_expired_cache()
            return

        if "--recount" in args:
            for taxonomy in Taxonomy:
                container.taxonomy.sync_term_counts(taxonomy)
            return

        if "--import" in args:
            i = args.index("--import")
            if len(args) < i + 3:
                print(__doc__)
                sys.exit(1)
            run_import(Path(args[i + 1]), Taxonomy.parse(args[i + 2]))
            return

        if "--export" in args:
            i = args.index("--export")
            if len(args) < i + 2:
                print(__doc__)
                sys.exit(1)
            run_export(Taxonomy.parse(args[i + 1]))
            return

        if args:
            print(__doc__)
            sys.exit(1)

        logger.info("Syncing procedures from gallery API")
        sync_procedures(container.taxonomy)
    except (TaxonomyError, GalleryAPIError, httpx.HTTPError) as e:
        logger.error("{}: {}", type(e).__name__, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
