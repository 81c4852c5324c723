"""GitHub contents API implementation of the versioned content store."""

import base64
import logging
import urllib.parse
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ..constants import (
    DEFAULT_API_URL,
    DEFAULT_BACKOFF_INITIAL,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_BRANCH,
    DEFAULT_MAX_REQUEST_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT,
    USER_AGENT,
)
from ..errors import (
    AuthError,
    ConfigError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    StoreError,
    TemporaryUnavailableError,
    TransportError,
)
from ..models import ChildEntry, Document

logger = logging.getLogger(__name__)


def _retry_after(response: httpx.Response) -> Optional[float]:
    """Seconds to wait as signalled by Retry-After, if present and numeric."""
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _is_rate_limited(response: httpx.Response) -> bool:
    """Distinguish secondary/primary rate limits from permission errors on 403."""
    if response.headers.get("x-ratelimit-remaining") == "0":
        return True
    if "retry-after" in response.headers:
        return True
    return "rate limit" in response.text.lower()


class GitHubContentStore:
    """
    Versioned content store backed by the GitHub repository contents API.

    Every successful put is a commit on the configured branch. The blob
    ``sha`` reported by the API is the version token.

    Transient failures (timeouts, connection errors, 5xx, throttling) are
    retried with exponential backoff and jitter up to ``max_attempts``
    total attempts. Conflicts, auth failures and 404s are never retried here.
    """

    def __init__(
        self,
        token: str,
        repo: str,
        branch: str = DEFAULT_BRANCH,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_REQUEST_ATTEMPTS,
        backoff_initial: float = DEFAULT_BACKOFF_INITIAL,
        backoff_max: float = DEFAULT_BACKOFF_MAX,
        user_agent: str = USER_AGENT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize GitHub content store.

        Args:
            token: GitHub token with contents read/write permission
            repo: Repository as owner/name
            branch: Branch that receives the commits
            api_url: API base URL (GitHub Enterprise uses a different host)
            timeout: Per-request timeout in seconds
            max_attempts: Total attempts for transient failures
            backoff_initial: First backoff delay in seconds
            backoff_max: Upper bound for a single backoff delay
            user_agent: User-Agent header (required by GitHub)
            http_client: Optional pre-configured client (not closed by aclose)
        """
        if not token:
            raise ConfigError("GitHub token is required for the github provider")
        owner, _, name = repo.partition("/")
        if not owner or not name or "/" in name:
            raise ConfigError(f"Repository must be given as owner/name, got {repo!r}")
        if max_attempts < 1:
            raise ConfigError("max_attempts must be at least 1")

        self.owner = owner
        self.name = name
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_max = backoff_max
        self.headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
        }
        self._backoff = wait_exponential_jitter(multiplier=backoff_initial, max=backoff_max)
        self._timeout = httpx.Timeout(timeout)
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=self._timeout)

    # -------- HTTP core --------

    def _contents_url(self, path: str) -> str:
        quoted = urllib.parse.quote(path.strip("/"), safe="/")
        return f"{self.api_url}/repos/{self.owner}/{self.name}/contents/{quoted}"

    def _wait(self, retry_state: RetryCallState) -> float:
        """Honor Retry-After when throttled, otherwise exponential backoff."""
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
            return min(exc.retry_after, self.backoff_max)
        return self._backoff(retry_state)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=self._wait,
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_exception_type(TemporaryUnavailableError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        expected_version: Optional[str] = None,
    ) -> httpx.Response:
        return await self._retrying()(
            self._send, method, path, params, body, expected_version
        )

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]],
        body: Optional[Dict[str, Any]],
        expected_version: Optional[str],
    ) -> httpx.Response:
        url = self._contents_url(path)
        logger.debug("%s %s", method, url)
        try:
            response = await self.client.request(
                method, url, headers=self.headers, params=params, json=body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out after {self.timeout}s: {method} {path}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Cannot reach {self.api_url}: {e}") from e

        status = response.status_code
        if status < 400:
            return response
        if status == 404:
            raise NotFoundError(path)
        if status == 401:
            raise AuthError(f"GitHub rejected the token (401) for {path}")
        if status == 429 or (status == 403 and _is_rate_limited(response)):
            raise RateLimitedError(
                f"GitHub rate limit hit ({status}) for {method} {path}",
                retry_after=_retry_after(response),
            )
        if status == 403:
            raise AuthError(f"Token lacks permission (403) for {method} {path}")
        if method == "PUT" and status in (409, 422):
            raise ConflictError(path, expected_version)
        if status >= 500:
            raise TransportError(f"HTTP {status} from GitHub for {method} {path}")
        raise StoreError(f"HTTP {status} for {method} {path}: {response.text[:180]}")

    # -------- Content operations --------

    async def get(self, path: str) -> Document:
        path = path.strip("/")
        response = await self._request("GET", path, params={"ref": self.branch})
        payload = response.json()
        if not isinstance(payload, dict) or payload.get("type") != "file":
            raise StoreError(f"Expected a file at {path}, found a directory")
        content = base64.b64decode(payload.get("content") or "")
        return Document(path=path, content=content, version=payload["sha"])

    async def put(
        self,
        path: str,
        content: bytes,
        expected_version: Optional[str] = None,
        message: Optional[str] = None,
    ) -> str:
        path = path.strip("/")
        body: Dict[str, Any] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }
        if expected_version:
            body["sha"] = expected_version
        response = await self._request("PUT", path, body=body, expected_version=expected_version)
        version = (response.json().get("content") or {}).get("sha")
        if not version:
            raise StoreError(f"GitHub did not return a content sha for {path}")
        logger.info("Committed %s @ %s", path, version[:12])
        return version

    async def list(self, prefix: str) -> List[ChildEntry]:
        prefix = prefix.strip("/")
        try:
            response = await self._request("GET", prefix, params={"ref": self.branch})
        except NotFoundError:
            logger.debug("Prefix %s does not exist yet", prefix)
            return []
        payload = response.json()
        if not isinstance(payload, list):
            logger.warning("Listing %s returned a file, not a directory", prefix)
            return []
        return [
            ChildEntry(key=item["name"], kind=item["type"])
            for item in payload
            if item.get("type") in ("file", "dir")
        ]

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
