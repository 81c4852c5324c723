"""Storage package for versioned content backends."""

from .base import ContentStore
from .factory import make_content_store
from .github import GitHubContentStore
from .memory import InMemoryContentStore

__all__ = ["ContentStore", "GitHubContentStore", "InMemoryContentStore", "make_content_store"]
