"""Test key listing under a prefix."""

import asyncio

from logbook_store.index import DirectoryIndex
from logbook_store.models import ChildEntry


def seed(backend, *paths):
    async def _seed():
        for path in paths:
            await backend.put(path, b"{}")
    asyncio.run(_seed())


class StubListing:
    """Backend returning a fixed listing, whatever the prefix."""

    def __init__(self, children):
        self.children = children
        self.prefixes = []

    async def list(self, prefix):
        self.prefixes.append(prefix)
        return list(self.children)


def test_dates_newest_first(memory_backend):
    seed(
        memory_backend,
        "data/entries/s1/2025-01-09.json",
        "data/entries/s1/2025-01-11.json",
        "data/entries/s1/2024-12-31.json",
    )
    keys = asyncio.run(DirectoryIndex(memory_backend).list_keys("data/entries/s1"))
    assert keys == ["2025-01-11", "2025-01-09", "2024-12-31"]


def test_ascending_order(memory_backend):
    seed(memory_backend, "data/entries/s1/2025-01-11.json", "data/entries/s1/2025-01-09.json")
    keys = asyncio.run(
        DirectoryIndex(memory_backend).list_keys("data/entries/s1", descending=False)
    )
    assert keys == ["2025-01-09", "2025-01-11"]


def test_relative_prefix_is_qualified(memory_backend):
    seed(memory_backend, "data/entries/s1/2025-01-10.json")
    index = DirectoryIndex(memory_backend)
    assert asyncio.run(index.list_keys("entries/s1")) == ["2025-01-10"]
    assert asyncio.run(index.list_keys("/entries/s1/")) == ["2025-01-10"]


def test_unknown_prefix_is_empty(memory_backend):
    assert asyncio.run(DirectoryIndex(memory_backend).list_keys("entries/nobody")) == []


def test_directories_and_foreign_files_ignored():
    backend = StubListing([
        ChildEntry(key="2025-01-10.json", kind="file"),
        ChildEntry(key="archive", kind="dir"),
        ChildEntry(key="archive.json", kind="dir"),
        ChildEntry(key="README.md", kind="file"),
        ChildEntry(key=".gitkeep", kind="file"),
    ])
    assert asyncio.run(DirectoryIndex(backend).list_keys("entries/s1")) == ["2025-01-10"]
    assert backend.prefixes == ["data/entries/s1"]


def test_duplicate_children_reported_once():
    backend = StubListing([
        ChildEntry(key="2025-01-10.json", kind="file"),
        ChildEntry(key="2025-01-10.json", kind="file"),
    ])
    assert asyncio.run(DirectoryIndex(backend).list_keys("entries/s1")) == ["2025-01-10"]


def test_custom_extension():
    backend = StubListing([
        ChildEntry(key="a.yaml", kind="file"),
        ChildEntry(key="b.json", kind="file"),
    ])
    assert asyncio.run(DirectoryIndex(backend, extension=".yaml").list_keys("x")) == ["a"]
