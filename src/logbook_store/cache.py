"""Short-TTL read-through cache for remote documents."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set

from .constants import DEFAULT_CACHE_TTL, DEFAULT_NOT_FOUND_TTL
from .errors import NotFoundError
from .models import Document
from .storage.base import ContentStore

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached fetch result; ``document`` is None for a known-missing path."""
    document: Optional[Document]
    fetched_at: float


class DocumentCache:
    """Cache documents by path for a short TTL.

    Missing documents are remembered only for ``not_found_ttl`` so a document
    created elsewhere becomes visible promptly.

    Safe for concurrent tasks: the entry map is only touched under an
    asyncio lock, and every fetch registers a token under its path.
    ``invalidate`` discards the tokens of fetches still in flight; such a
    fetch is returned to its caller but never stored, so a successful write
    can not be shadowed by an older read finishing late. Expired entries are
    evicted whenever a new result is stored.
    """

    def __init__(
        self,
        store: ContentStore,
        ttl: float = DEFAULT_CACHE_TTL,
        not_found_ttl: float = DEFAULT_NOT_FOUND_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache.

        Args:
            store: Backend to read through to
            ttl: Seconds a fetched document stays fresh
            not_found_ttl: Seconds a NotFound result stays fresh
            clock: Monotonic time source (injectable for tests)
        """
        self.store = store
        self.ttl = ttl
        self.not_found_ttl = not_found_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._pending: Dict[str, Set[object]] = {}
        self._lock = asyncio.Lock()

    async def read(self, path: str) -> Document:
        """Return the cached document or fetch it from the store.

        Raises:
            NotFoundError: If the document does not exist
        """
        path = path.strip("/")
        entry = await self._lookup(path)
        if entry is not None:
            logger.debug("Cache hit: %s", path)
            if entry.document is None:
                raise NotFoundError(path)
            return entry.document

        logger.debug("Cache miss: %s", path)
        token = object()
        async with self._lock:
            self._pending.setdefault(path, set()).add(token)
        started = self._clock()
        try:
            document = await self.store.get(path)
        except NotFoundError:
            await self._store(path, None, token, started)
            raise
        except BaseException:
            self._release(path, token)
            raise
        await self._store(path, document, token, started)
        return document

    async def invalidate(self, path: str) -> None:
        """Drop the entry for path and discard any fetch still in flight."""
        path = path.strip("/")
        async with self._lock:
            self._entries.pop(path, None)
            self._pending.pop(path, None)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._pending.clear()

    async def _lookup(self, path: str) -> Optional[CacheEntry]:
        async with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[path]
                return None
            return entry

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        ttl = self.ttl if entry.document is not None else self.not_found_ttl
        return now - entry.fetched_at >= ttl

    def _release(self, path: str, token: object) -> bool:
        """Unregister a fetch; False if it was invalidated meanwhile."""
        tokens = self._pending.get(path)
        if tokens is None or token not in tokens:
            return False
        tokens.discard(token)
        if not tokens:
            del self._pending[path]
        return True

    async def _store(
        self, path: str, document: Optional[Document], token: object, fetched_at: float
    ) -> None:
        async with self._lock:
            if not self._release(path, token):
                logger.debug("Not caching %s: invalidated during fetch", path)
                return
            now = self._clock()
            for stale in [p for p, e in self._entries.items() if self._expired(e, now)]:
                del self._entries[stale]
            self._entries[path] = CacheEntry(document, fetched_at)
