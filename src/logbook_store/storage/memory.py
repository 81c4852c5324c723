"""In-memory versioned content store for tests and local development."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import ConflictError, NotFoundError
from ..hashing import compute_blob_version
from ..models import ChildEntry, Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Revision:
    """One committed write."""
    path: str
    version: str
    message: str


class InMemoryContentStore:
    """
    Process-local store with the same version contract as the remote API.

    Avoids a network dependency in unit tests. Every successful put is
    appended to ``revisions``, mirroring the commit history of the remote
    backend.
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self.revisions: List[Revision] = []

    async def get(self, path: str) -> Document:
        path = path.strip("/")
        if path not in self._blobs:
            raise NotFoundError(path)
        content = self._blobs[path]
        return Document(path=path, content=content, version=compute_blob_version(content))

    async def put(
        self,
        path: str,
        content: bytes,
        expected_version: Optional[str] = None,
        message: Optional[str] = None,
    ) -> str:
        path = path.strip("/")
        current = self._blobs.get(path)
        if current is not None:
            if expected_version != compute_blob_version(current):
                raise ConflictError(path, expected_version)
        elif expected_version is not None:
            # Document vanished since it was read
            raise ConflictError(path, expected_version)

        self._blobs[path] = bytes(content)
        version = compute_blob_version(content)
        self.revisions.append(Revision(path, version, message or f"Update {path}"))
        logger.debug("Committed %s @ %s", path, version[:12])
        return version

    async def list(self, prefix: str) -> List[ChildEntry]:
        prefix = prefix.strip("/")
        base = prefix + "/" if prefix else ""
        children: Dict[str, str] = {}
        for path in self._blobs:
            if not path.startswith(base):
                continue
            head, sep, _ = path[len(base):].partition("/")
            children[head] = "dir" if sep else "file"
        return [ChildEntry(key=k, kind=children[k]) for k in sorted(children)]

    async def aclose(self) -> None:
        pass
