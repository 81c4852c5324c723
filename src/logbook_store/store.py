"""Document store facade consumed by the checklist application.

Three generic operations make up the public surface:

- ``read_document(path)``: decoded JSON, or NotFoundError
- ``write_document(path, mutate, default)``: conflict-safe update, returns
  the committed version
- ``list_keys(prefix)``: document keys under a prefix, newest first

The typed helpers below them (shops, templates, entries, cleaning logs) are
thin wrappers that build paths through ``paths`` and express every change
as a delta on the freshly read document.
"""

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar

import httpx

from .cache import DocumentCache
from .config import StoreSettings, load_settings
from .constants import DEFAULT_SHOP_ID
from .errors import NotFoundError
from .index import DirectoryIndex
from .models import (
    CleaningLogDocument,
    CleaningMark,
    EntryDocument,
    ShopIndexDocument,
    ShopSummary,
    StoredDocument,
    TemplateDocument,
    default_shop,
    default_template,
)
from .paths import (
    DateLike,
    cleaning_log_path,
    cleaning_prefix,
    date_key,
    entries_prefix,
    entry_path,
    qualify,
    shop_index_path,
    template_path,
)
from .storage import ContentStore, make_content_store
from .utils import decode_json, utc_timestamp
from .writer import Mutation, OptimisticWriter

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=StoredDocument)


class DocumentStore:
    """JSON document store on top of a versioned content backend.

    Owns one DocumentCache, one OptimisticWriter and one DirectoryIndex, all
    sharing the same backend. One instance per process; create it inside
    the event loop that will use it.
    """

    def __init__(
        self,
        backend: ContentStore,
        settings: Optional[StoreSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], str] = utc_timestamp,
    ):
        """
        Args:
            backend: Versioned content backend
            settings: Cache and retry policy (defaults if omitted)
            clock: Monotonic clock for cache expiry
            now: Timestamp source for savedAt fields
        """
        settings = settings or StoreSettings()
        self.backend = backend
        self.settings = settings
        self._now = now
        self.cache = DocumentCache(
            backend,
            ttl=settings.cache_ttl,
            not_found_ttl=settings.not_found_ttl,
            clock=clock,
        )
        self.writer = OptimisticWriter(
            backend,
            self.cache,
            max_attempts=settings.max_write_attempts,
            serialize=settings.serialize_writes,
        )
        self.index = DirectoryIndex(backend)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[StoreSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "DocumentStore":
        """Build a store from settings (loaded from config/env if omitted)."""
        settings = settings or load_settings()
        return cls(make_content_store(settings, http_client=http_client), settings)

    async def aclose(self) -> None:
        await self.backend.aclose()

    async def __aenter__(self) -> "DocumentStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # === Generic surface ===

    async def read_document(self, path: str) -> Any:
        """Read and decode a document.

        Reading the shop index before it exists bootstraps the store.

        Raises:
            NotFoundError: If the document does not exist
        """
        path = qualify(path)
        try:
            return decode_json(await self.cache.read(path))
        except NotFoundError:
            if path != shop_index_path():
                raise
        await self.bootstrap()
        return decode_json(await self.cache.read(path))

    async def write_document(
        self,
        path: str,
        mutate: Mutation,
        default: Any = None,
        message: Optional[str] = None,
    ) -> str:
        """Apply mutate to the current content (or default) and commit.

        Raises:
            TypeError: If mutate is not a function
            ConcurrentModificationError: If conflicts persist
        """
        return await self.writer.write(qualify(path), mutate, default, message)

    async def list_keys(self, prefix: str) -> List[str]:
        """Document keys under prefix, sorted descending."""
        return await self.index.list_keys(prefix)

    # === Bootstrap ===

    async def bootstrap(self) -> None:
        """Create the default shop and its template if no index exists.

        Both writes only seed documents that are still empty, so concurrent
        bootstraps converge on the same content. The template is written
        first: once the index exists the store counts as bootstrapped.
        """
        def seed_template(current):
            if current and (current.get("items") or current.get("cleaning")):
                return current
            return default_template().to_content()

        def seed_index(current):
            if current:
                return current
            return ShopIndexDocument(shops=[default_shop()]).to_content()

        await self.writer.write(
            template_path(DEFAULT_SHOP_ID), seed_template, {}, "Initialize default template"
        )
        await self.writer.write(shop_index_path(), seed_index, [], "Initialize shop index")
        logger.info("Bootstrapped store with shop %s", DEFAULT_SHOP_ID)

    # === Typed helpers ===

    async def _load(self, model: Type[D], path: str) -> Optional[D]:
        try:
            content = await self.read_document(path)
        except NotFoundError:
            return None
        if content is None:
            return None
        return model.from_content(content, path)

    async def _update(
        self,
        model: Type[D],
        path: str,
        mutate: Callable[[D], Optional[D]],
        default: D,
        message: str,
    ) -> str:
        def apply(content):
            doc = model.from_content(content, path) if content is not None else default.model_copy(deep=True)
            result = mutate(doc)
            return (doc if result is None else result).to_content()

        return await self.write_document(path, apply, default.to_content(), message)

    # Shops

    async def load_shop_index(self) -> ShopIndexDocument:
        path = shop_index_path()
        return ShopIndexDocument.from_content(await self.read_document(path), path)

    async def load_shops(self) -> List[ShopSummary]:
        return (await self.load_shop_index()).shops

    async def get_shop(self, shop_id: str) -> Optional[ShopSummary]:
        return (await self.load_shop_index()).get(shop_id)

    async def _update_shops(self, mutate: Callable[[List[ShopSummary]], List[ShopSummary]], message: str) -> str:
        path = shop_index_path()
        await self.load_shops()  # bootstraps an absent index

        def apply(content):
            index = ShopIndexDocument.from_content(content, path)
            return ShopIndexDocument(shops=mutate(index.shops)).to_content()

        return await self.write_document(path, apply, [], message)

    async def upsert_shop(self, shop: ShopSummary) -> str:
        """Add a shop, or replace the stored shop with the same id."""
        template_path(shop.id)  # validates the id as a path segment

        def apply(shops: List[ShopSummary]) -> List[ShopSummary]:
            replaced = [shop if s.id == shop.id else s for s in shops]
            if not any(s.id == shop.id for s in shops):
                replaced.append(shop)
            return replaced

        return await self._update_shops(apply, f"Save shop {shop.id}")

    async def delete_shop(self, shop_id: str) -> str:
        """Remove a shop from the index; its documents are left in place."""
        return await self._update_shops(
            lambda shops: [s for s in shops if s.id != shop_id],
            f"Delete shop {shop_id}",
        )

    # Templates

    async def load_template(self, shop_id: str) -> TemplateDocument:
        return await self._load(TemplateDocument, template_path(shop_id)) or TemplateDocument()

    async def update_template(
        self, shop_id: str, mutate: Callable[[TemplateDocument], Optional[TemplateDocument]]
    ) -> str:
        return await self._update(
            TemplateDocument, template_path(shop_id), mutate, TemplateDocument(),
            f"Update template {shop_id}",
        )

    async def save_template(self, shop_id: str, template: TemplateDocument) -> str:
        """Replace a shop's checklist with an admin's edited copy.

        The checklist (items and cleaning tasks) is replaced as a whole, so
        two admins saving at once resolve last-writer-wins. Keys of the
        stored template that the edited copy does not carry are kept.
        """
        edited = template.to_content()

        def apply(current: TemplateDocument) -> TemplateDocument:
            merged = current.to_content()
            merged.update(edited)
            return TemplateDocument.from_content(merged, template_path(shop_id))

        return await self.update_template(shop_id, apply)

    # Daily entries

    async def load_entry(self, shop_id: str, date: DateLike) -> Optional[EntryDocument]:
        return await self._load(EntryDocument, entry_path(shop_id, date))

    async def save_entry(
        self,
        shop_id: str,
        date: DateLike,
        values: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
        issues: Optional[Iterable[str]] = None,
        saved_by: Optional[str] = None,
    ) -> str:
        """Merge a submission into the day's entry.

        Values are merged key by key and issues are added once each, so two
        people saving different readings on the same day both keep theirs.
        """
        day = date_key(date)
        new_issues = list(issues or [])

        def apply(entry: EntryDocument) -> None:
            entry.values.update(values or {})
            if notes is not None:
                entry.notes = notes
            for issue in new_issues:
                if issue not in entry.issues:
                    entry.issues.append(issue)
            if saved_by:
                entry.saved_by = saved_by
            entry.saved_at = self._now()

        return await self._update(
            EntryDocument, entry_path(shop_id, day), apply,
            EntryDocument(date=day, shop_id=shop_id),
            f"Save entry {shop_id} {day}",
        )

    async def list_entry_dates(self, shop_id: str) -> List[str]:
        return await self.list_keys(entries_prefix(shop_id))

    # Cleaning logs

    async def load_cleaning_log(self, shop_id: str, date: DateLike) -> Optional[CleaningLogDocument]:
        return await self._load(CleaningLogDocument, cleaning_log_path(shop_id, date))

    async def mark_cleaning_done(
        self,
        shop_id: str,
        date: DateLike,
        task_ids: Iterable[str],
        saved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Record cleaning tasks as done; earlier marks are kept."""
        day = date_key(date)
        tasks = list(task_ids)

        def apply(log: CleaningLogDocument) -> None:
            at = self._now()
            for task_id in tasks:
                log.done.setdefault(task_id, CleaningMark(by=saved_by, at=at))
            if notes is not None:
                log.notes = notes

        return await self._update(
            CleaningLogDocument, cleaning_log_path(shop_id, day), apply,
            CleaningLogDocument(date=day, shop_id=shop_id),
            f"Save cleaning log {shop_id} {day}",
        )

    async def list_cleaning_dates(self, shop_id: str) -> List[str]:
        return await self.list_keys(cleaning_prefix(shop_id))
