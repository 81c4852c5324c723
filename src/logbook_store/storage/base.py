"""Base protocol for versioned content store implementations."""

from typing import List, Optional, Protocol

from ..models import ChildEntry, Document


class ContentStore(Protocol):
    """
    Protocol for versioned content store implementations.

    Every read returns the version token of the bytes it returned, and every
    conditional write must present the token of the content it was derived
    from. Conflict retry is the caller's responsibility, not the store's.
    """

    async def get(self, path: str) -> Document:
        """
        Fetch current content and version token.

        Args:
            path: Blob path (e.g. data/shops.json)

        Returns:
            Document with content bytes and version

        Raises:
            NotFoundError: If nothing is stored at path
            AuthError: If the credential is rejected
            TemporaryUnavailableError: If the backend stays unavailable
        """
        ...

    async def put(
        self,
        path: str,
        content: bytes,
        expected_version: Optional[str] = None,
        message: Optional[str] = None,
    ) -> str:
        """
        Write content, conditioned on a version token.

        Without expected_version the write only succeeds if path does not
        exist yet (create).

        Args:
            path: Blob path
            content: New bytes
            expected_version: Version token of the content being replaced
            message: Commit message recorded with the revision

        Returns:
            New version token

        Raises:
            ConflictError: If expected_version is stale or missing
        """
        ...

    async def list(self, prefix: str) -> List[ChildEntry]:
        """
        List immediate children of a prefix.

        Returns an empty list when the prefix has never been written.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
