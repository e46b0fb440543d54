"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("TAXONOMY_DB_PATH", "taxonomy.duckdb")

# Logging
LOG_DIR = Path(os.getenv("TAXONOMY_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("TAXONOMY_LOG_LEVEL", "INFO")

# Gallery API
API_BASE_URL = os.getenv("GALLERY_API_URL", "https://app.bragbookgallery.com")
API_TIMEOUT = 30
API_TOKENS = [t.strip() for t in os.getenv("GALLERY_API_TOKENS", "").split(",") if t.strip()]
MAX_CONCURRENT = 5

# Cache
CACHING_ENABLED = os.getenv("TAXONOMY_CACHING_ENABLED", "1").lower() not in ("0", "false", "no")
CACHE_TTL_SHORT = 300  # 5 minutes
CACHE_TTL_MEDIUM = 1800  # 30 minutes
CACHE_TTL_LONG = 3600  # 1 hour
CACHE_PURGE_INTERVAL = 300  # sweep expired rows at most this often (seconds)

# Field limits
MAX_TERM_NAME_LENGTH = 200
MAX_SLUG_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 500
MAX_DISPLAY_ORDER = 9999
