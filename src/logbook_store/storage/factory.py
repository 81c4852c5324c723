"""Factory for creating content store instances."""

import os
from typing import Optional

import httpx

from ..config import StoreSettings
from ..errors import ConfigError
from .base import ContentStore
from .github import GitHubContentStore
from .memory import InMemoryContentStore


def validate_github_config(settings: StoreSettings) -> None:
    """
    Early validation of GitHub configuration.

    Args:
        settings: Store settings to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    if not settings.repo:
        raise ConfigError("repo (owner/name) required for the github provider")

    if not os.environ.get("GITHUB_TOKEN"):
        raise ConfigError("Set GITHUB_TOKEN and repo for the github provider")


def make_content_store(
    settings: StoreSettings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ContentStore:
    """
    Create content store instance based on settings.

    Args:
        settings: Store settings
        http_client: Optional HTTP client for the github provider

    Returns:
        ContentStore instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if settings.provider == "github":
        validate_github_config(settings)
        return GitHubContentStore(
            token=os.environ["GITHUB_TOKEN"],
            repo=settings.repo,
            branch=settings.branch,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
            max_attempts=settings.max_request_attempts,
            backoff_initial=settings.backoff_initial,
            backoff_max=settings.backoff_max,
            user_agent=settings.user_agent,
            http_client=http_client,
        )

    elif settings.provider == "memory":
        return InMemoryContentStore()

    else:
        raise ConfigError(f"Provider {settings.provider} not supported")
