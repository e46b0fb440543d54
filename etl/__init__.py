"""ETL package - term sync from the gallery API to the term store."""

from etl.mapper import sidebar_to_records
from etl.sync import import_with_retry, sync_procedures
from etl.validation import validate_taxonomy

__all__ = [
    "sidebar_to_records",
    "import_with_retry",
    "sync_procedures",
    "validate_taxonomy",
]
