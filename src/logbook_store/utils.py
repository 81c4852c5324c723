"""Utility functions for logbook-store."""

import json
from datetime import datetime, timezone
from typing import Any

from .errors import InvalidDocumentError
from .models import Document


def encode_json(content: Any) -> bytes:
    """Serialize content the way documents are committed.

    Two-space indentation and a trailing newline keep commit diffs readable.
    """
    return (json.dumps(content, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def decode_json(document: Document) -> Any:
    """Parse a document's bytes; an empty blob decodes to None.

    Raises:
        InvalidDocumentError: If the bytes are not UTF-8 JSON
    """
    if not document.content.strip():
        return None
    try:
        return json.loads(document.content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidDocumentError(document.path, str(e)) from e


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
