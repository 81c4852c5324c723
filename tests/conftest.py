"""Shared test fixtures and utilities."""

import base64
import json
import urllib.parse
from typing import Any, Dict, List, Optional

import httpx
import pytest

from logbook_store.config import StoreSettings
from logbook_store.errors import ConflictError
from logbook_store.hashing import compute_blob_version
from logbook_store.storage.github import GitHubContentStore
from logbook_store.storage.memory import InMemoryContentStore
from logbook_store.store import DocumentStore

FIXED_NOW = "2025-01-10T08:00:00Z"


class FakeContentsAPI:
    """In-process stand-in for the GitHub repository contents endpoint.

    Implements GET on files and directories and conditional PUT with the
    same status codes GitHub uses. Faults queued with ``fail_next`` are
    served before normal handling: an int status, a (status, headers)
    tuple, or an exception to raise from the transport.
    """

    def __init__(self, owner: str = "acme", repo: str = "logbook"):
        self.base = f"/repos/{owner}/{repo}/contents/"
        self.files: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.commits: List[Dict[str, Any]] = []
        self.faults: List[Any] = []

    def seed(self, path: str, content: bytes) -> str:
        self.files[path] = content
        return compute_blob_version(content)

    def fail_next(self, *faults) -> None:
        self.faults.extend(faults)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.faults:
            fault = self.faults.pop(0)
            if isinstance(fault, Exception):
                raise fault
            status, headers = fault if isinstance(fault, tuple) else (fault, {})
            return httpx.Response(status, headers=headers, json={"message": "injected"})

        path = urllib.parse.unquote(request.url.path)
        assert path.startswith(self.base), path
        path = path[len(self.base):].strip("/")
        if request.method == "GET":
            return self._get(path)
        if request.method == "PUT":
            return self._put(path, json.loads(request.content))
        return httpx.Response(405)

    def _get(self, path: str) -> httpx.Response:
        if path in self.files:
            content = self.files[path]
            encoded = base64.encodebytes(content).decode("ascii")  # GitHub wraps lines
            return httpx.Response(200, json={
                "type": "file",
                "name": path.rsplit("/", 1)[-1],
                "path": path,
                "sha": compute_blob_version(content),
                "encoding": "base64",
                "content": encoded,
            })

        base = path + "/" if path else ""
        children: Dict[str, str] = {}
        for stored in self.files:
            if stored.startswith(base):
                head, sep, _ = stored[len(base):].partition("/")
                children[head] = "dir" if sep else "file"
        if not children:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=[
            {"name": name, "path": base + name, "type": kind}
            for name, kind in sorted(children.items())
        ])

    def _put(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        sha: Optional[str] = body.get("sha")
        current = self.files.get(path)
        if current is not None and sha is None:
            return httpx.Response(422, json={"message": "\"sha\" wasn't supplied."})
        if current is not None and sha != compute_blob_version(current):
            return httpx.Response(409, json={"message": f"{path} does not match {sha}"})
        if current is None and sha is not None:
            return httpx.Response(409, json={"message": f"{path} does not exist"})

        content = base64.b64decode(body["content"])
        self.files[path] = content
        new_sha = compute_blob_version(content)
        self.commits.append({"path": path, "message": body["message"], "branch": body["branch"]})
        return httpx.Response(201 if current is None else 200, json={
            "content": {"name": path.rsplit("/", 1)[-1], "path": path, "sha": new_sha},
            "commit": {"message": body["message"]},
        })


class RecordingBackend(InMemoryContentStore):
    """In-memory backend counting calls and conflicts."""

    def __init__(self):
        super().__init__()
        self.gets = 0
        self.puts = 0
        self.conflicts = 0

    async def get(self, path):
        self.gets += 1
        return await super().get(path)

    async def put(self, path, content, expected_version=None, message=None):
        self.puts += 1
        try:
            return await super().put(path, content, expected_version, message)
        except ConflictError:
            self.conflicts += 1
            raise


class InterferingBackend(RecordingBackend):
    """Simulates another editor committing right before each of our puts.

    ``interfere`` is the number of puts that get pre-empted; each pre-emption
    applies ``competing`` to the stored JSON out of band.
    """

    def __init__(self, competing, interfere: int):
        super().__init__()
        self.competing = competing
        self.interfere = interfere

    async def put(self, path, content, expected_version=None, message=None):
        if self.interfere > 0 and path in self._blobs:
            self.interfere -= 1
            stored = json.loads(self._blobs[path])
            self.competing(stored, self.interfere)
            rival = json.dumps(stored).encode("utf-8")
            await InMemoryContentStore.put(
                self, path, rival, compute_blob_version(self._blobs[path]), "rival edit"
            )
        return await super().put(path, content, expected_version, message)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def contents_api():
    """Fake GitHub contents API."""
    return FakeContentsAPI()


@pytest.fixture
def github_store(contents_api):
    """GitHubContentStore wired to the fake API with zero backoff."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(contents_api.handler))
    return GitHubContentStore(
        token="test-token",
        repo="acme/logbook",
        max_attempts=3,
        backoff_initial=0,
        backoff_max=0,
        http_client=client,
    )


@pytest.fixture
def memory_backend():
    return RecordingBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_store(memory_backend, clock):
    """Factory fixture for DocumentStore instances sharing one backend."""
    def _make(backend=None, **overrides):
        settings = StoreSettings(provider="memory", **overrides)
        return DocumentStore(
            backend if backend is not None else memory_backend,
            settings,
            clock=clock,
            now=lambda: FIXED_NOW,
        )
    return _make
