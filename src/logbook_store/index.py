"""Directory listing as a sorted key index."""

import logging
from typing import List

from .constants import DOCUMENT_EXTENSION
from .paths import key_from_name, qualify
from .storage.base import ContentStore

logger = logging.getLogger(__name__)


class DirectoryIndex:
    """Derive logical keys (e.g. entry dates) from a prefix listing.

    Only documents carrying the document extension count; subdirectories
    and stray files are ignored. A prefix that was never written lists as
    empty, the same as a prefix with no children.
    """

    def __init__(self, store: ContentStore, extension: str = DOCUMENT_EXTENSION):
        self.store = store
        self.extension = extension

    async def list_keys(self, prefix: str, descending: bool = True) -> List[str]:
        """
        List document keys under prefix.

        Args:
            prefix: Directory path, qualified or relative to the data root
            descending: Newest first for ISO-date keys (history order)

        Returns:
            Unique keys with the extension stripped
        """
        prefix = qualify(prefix)
        children = await self.store.list(prefix)
        keys = {
            key_from_name(child.key, self.extension)
            for child in children
            if child.kind == "file" and child.key.endswith(self.extension)
        }
        logger.debug("Listed %d keys under %s", len(keys), prefix)
        return sorted(keys, reverse=descending)
