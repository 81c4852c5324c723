"""Optimistic read-modify-write for single documents.

The backing API's only concurrency primitive is "a write succeeds only if
you present the version token of the content you last read". A writer that
loses that race must not resend the bytes it computed earlier: it re-reads
the latest content and re-applies its intended change on top of it. That is
why ``write`` accepts a mutation function of the current content and never
a precomputed value.

Attempt loop:

1. Read through the cache; a missing document starts from ``default``.
2. ``updated = mutate(content)``
3. If ``updated`` equals the content it was derived from, confirm that
   content against the store when it came from the cache, and return its
   version without committing.
4. ``put(path, updated, version)``
5. Success: invalidate the cache entry and return the new version.
6. Conflict: fetch straight from the store (the cache may be stale too),
   go back to 2.
7. After ``max_attempts`` conflicts raise ConcurrentModificationError.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional, Tuple

from .cache import DocumentCache
from .constants import DEFAULT_MAX_WRITE_ATTEMPTS
from .errors import ConcurrentModificationError, ConflictError, NotFoundError
from .models import Document
from .storage.base import ContentStore
from .utils import decode_json, encode_json

logger = logging.getLogger(__name__)

# Receives a private copy of the current content; returns the new content,
# or None after modifying its argument in place.
Mutation = Callable[[Any], Any]


class OptimisticWriter:
    """Conflict-safe document writer with bounded retry."""

    def __init__(
        self,
        store: ContentStore,
        cache: DocumentCache,
        max_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
        serialize: bool = True,
    ):
        """
        Args:
            store: Backend receiving the conditional writes
            cache: Cache consulted for the first read and invalidated on commit
            max_attempts: Total put attempts before giving up
            serialize: Hold a per-path lock for the whole read-modify-write
                so writers in this process never race each other
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.cache = cache
        self.max_attempts = max_attempts
        self.serialize = serialize
        # path -> (lock, number of writers holding or awaiting it)
        self._path_locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    async def write(
        self,
        path: str,
        mutate: Mutation,
        default: Any = None,
        message: Optional[str] = None,
    ) -> str:
        """Apply mutate to the current content of path and commit it.

        Returns:
            Version token of the committed content

        Raises:
            TypeError: If mutate is not callable
            ConcurrentModificationError: If every attempt hit a conflict
        """
        if not callable(mutate):
            raise TypeError(
                "mutate must be a function of the current content, "
                f"got {type(mutate).__name__}"
            )
        path = path.strip("/")
        if not self.serialize:
            return await self._write(path, mutate, default, message)
        async with self._path_lock(path):
            return await self._write(path, mutate, default, message)

    @asynccontextmanager
    async def _path_lock(self, path: str) -> AsyncIterator[None]:
        """Hold the lock for path; it is dropped once no writer needs it."""
        lock, users = self._path_locks.get(path, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._path_locks[path] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._path_locks[path]
            if users == 1:
                del self._path_locks[path]
            else:
                self._path_locks[path] = (lock, users - 1)

    async def _write(
        self, path: str, mutate: Mutation, default: Any, message: Optional[str]
    ) -> str:
        try:
            current: Optional[Document] = await self.cache.read(path)
        except NotFoundError:
            current = None
        fresh = False

        attempt = 0
        while attempt < self.max_attempts:
            content, version = self._snapshot(current, default)
            result = mutate(content)
            payload = encode_json(content if result is None else result)

            if current is not None and payload == current.content:
                if fresh:
                    logger.debug("No change for %s, skipping commit", path)
                    return current.version
                # A cached copy may predate another writer's commit
                current = await self._fetch_fresh(path)
                fresh = True
                continue

            attempt += 1
            try:
                new_version = await self.store.put(path, payload, version, message)
            except ConflictError:
                logger.warning(
                    "Version conflict on %s (attempt %d/%d)", path, attempt, self.max_attempts
                )
                await self.cache.invalidate(path)
                if attempt == self.max_attempts:
                    break
                current = await self._fetch_fresh(path)
                fresh = True
                continue

            await self.cache.invalidate(path)
            if attempt > 1:
                logger.info("Saved %s after %d attempts", path, attempt)
            return new_version

        raise ConcurrentModificationError(path, self.max_attempts)

    @staticmethod
    def _snapshot(current: Optional[Document], default: Any) -> Tuple[Any, Optional[str]]:
        """Fresh, caller-owned copy of the content plus its version."""
        if current is None:
            return copy.deepcopy(default), None
        return decode_json(current), current.version

    async def _fetch_fresh(self, path: str) -> Optional[Document]:
        try:
            return await self.store.get(path)
        except NotFoundError:
            return None
