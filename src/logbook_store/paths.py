"""Blob path layout for logbook documents.

Every component builds paths through these functions; nothing else in the
package concatenates path strings. Layout under the data root:

    data/shops.json                        shop index
    data/templates/<shop_id>.json          per-shop checklist template
    data/entries/<shop_id>/<date>.json     daily entry
    data/cleaning/<shop_id>/<date>.json    daily cleaning log
"""

import re
from datetime import date as Date, datetime
from typing import Union

from .constants import (
    CLEANING_DIR,
    DATA_ROOT,
    DOCUMENT_EXTENSION,
    ENTRIES_DIR,
    SHOP_INDEX_FILE,
    TEMPLATES_DIR,
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[str, Date]


def _safe_segment(value: str, what: str) -> str:
    """Validate a single path segment.

    Raises:
        ValueError: If the segment is empty, contains separators or
            would traverse out of its directory
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {what}: empty value")
    if "/" in value or "\\" in value or ".." in value or value.startswith("."):
        raise ValueError(f"Invalid {what}: {value!r}")
    return value


def date_key(value: DateLike) -> str:
    """Normalize a date to its YYYY-MM-DD segment."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, Date):
        return value.isoformat()
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    # Reject impossible calendar dates like 2025-02-30
    Date.fromisoformat(value)
    return value


def qualify(path: str) -> str:
    """Qualify a path relative to the data root.

    Already-qualified paths pass through unchanged, so ``entries/x`` and
    ``data/entries/x`` resolve to the same blob path.
    """
    clean = path.strip("/")
    if clean == DATA_ROOT or clean.startswith(DATA_ROOT + "/"):
        return clean
    if not clean:
        return DATA_ROOT
    return f"{DATA_ROOT}/{clean}"


def key_from_name(name: str, extension: str = DOCUMENT_EXTENSION) -> str:
    """Strip the document extension from a child name."""
    if extension and name.endswith(extension):
        return name[: -len(extension)]
    return name


def shop_index_path() -> str:
    return f"{DATA_ROOT}/{SHOP_INDEX_FILE}"


def template_path(shop_id: str) -> str:
    shop_id = _safe_segment(shop_id, "shop id")
    return f"{DATA_ROOT}/{TEMPLATES_DIR}/{shop_id}{DOCUMENT_EXTENSION}"


def entries_prefix(shop_id: str) -> str:
    shop_id = _safe_segment(shop_id, "shop id")
    return f"{DATA_ROOT}/{ENTRIES_DIR}/{shop_id}"


def entry_path(shop_id: str, date: DateLike) -> str:
    return f"{entries_prefix(shop_id)}/{date_key(date)}{DOCUMENT_EXTENSION}"


def cleaning_prefix(shop_id: str) -> str:
    shop_id = _safe_segment(shop_id, "shop id")
    return f"{DATA_ROOT}/{CLEANING_DIR}/{shop_id}"


def cleaning_log_path(shop_id: str, date: DateLike) -> str:
    return f"{cleaning_prefix(shop_id)}/{date_key(date)}{DOCUMENT_EXTENSION}"
