"""Text normalisation helpers."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int | None = None) -> str:
    """Lowercase, fold accents, replace non-alphanumeric runs with a single hyphen."""
    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", folded.lower()).strip("-")
    if max_length is not None:
        slug = slug[:max_length].rstrip("-")
    return slug


def clean_text(value: str | None, max_length: int) -> str:
    """Strip whitespace and cut to max_length characters."""
    if not value:
        return ""
    return value.strip()[:max_length]
