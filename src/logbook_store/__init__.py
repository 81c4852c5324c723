"""Versioned JSON document store for the shop checklist logbook."""

from .cache import DocumentCache
from .config import StoreSettings, load_settings
from .errors import (
    AuthError,
    ConcurrentModificationError,
    ConfigError,
    ConflictError,
    InvalidDocumentError,
    NotFoundError,
    RateLimitedError,
    StoreError,
    TemporaryUnavailableError,
    TransportError,
)
from .index import DirectoryIndex
from .models import (
    CheckItem,
    CleaningLogDocument,
    CleaningTask,
    Document,
    EntryDocument,
    ShopIndexDocument,
    ShopSummary,
    TemplateDocument,
)
from .paths import (
    cleaning_log_path,
    cleaning_prefix,
    entries_prefix,
    entry_path,
    shop_index_path,
    template_path,
)
from .store import DocumentStore
from .writer import OptimisticWriter

__all__ = [
    "AuthError",
    "CheckItem",
    "CleaningLogDocument",
    "CleaningTask",
    "ConcurrentModificationError",
    "ConfigError",
    "ConflictError",
    "DirectoryIndex",
    "Document",
    "DocumentCache",
    "DocumentStore",
    "EntryDocument",
    "InvalidDocumentError",
    "NotFoundError",
    "OptimisticWriter",
    "RateLimitedError",
    "ShopIndexDocument",
    "ShopSummary",
    "StoreError",
    "StoreSettings",
    "TemplateDocument",
    "TemporaryUnavailableError",
    "TransportError",
    "cleaning_log_path",
    "cleaning_prefix",
    "entries_prefix",
    "entry_path",
    "load_settings",
    "shop_index_path",
    "template_path",
]
