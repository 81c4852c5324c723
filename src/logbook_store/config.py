"""Store configuration helpers."""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from .constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILE,
    DEFAULT_API_URL,
    DEFAULT_BACKOFF_INITIAL,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_BRANCH,
    DEFAULT_CACHE_TTL,
    DEFAULT_MAX_REQUEST_ATTEMPTS,
    DEFAULT_MAX_WRITE_ATTEMPTS,
    DEFAULT_NOT_FOUND_TTL,
    DEFAULT_REQUEST_TIMEOUT,
    USER_AGENT,
)
from .errors import ConfigError

# Environment variables that override values from the YAML file
_ENV_OVERRIDES = {
    "LOGBOOK_STORE_PROVIDER": "provider",
    "GITHUB_REPO": "repo",
    "GITHUB_BRANCH": "branch",
    "GITHUB_API_URL": "api_url",
}


class StoreSettings(BaseModel):
    """
    Settings for the document store and its backing API.

    The access token is deliberately not a setting: it is read from
    GITHUB_TOKEN when the backend is constructed so it never ends up in a
    config file.
    """
    provider: Literal["github", "memory"] = "github"
    repo: str = ""                  # owner/name
    branch: str = DEFAULT_BRANCH
    api_url: str = DEFAULT_API_URL
    user_agent: str = USER_AGENT

    cache_ttl: float = DEFAULT_CACHE_TTL
    not_found_ttl: float = DEFAULT_NOT_FOUND_TTL
    max_write_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS
    serialize_writes: bool = True

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_request_attempts: int = DEFAULT_MAX_REQUEST_ATTEMPTS
    backoff_initial: float = DEFAULT_BACKOFF_INITIAL
    backoff_max: float = DEFAULT_BACKOFF_MAX

    @model_validator(mode="after")
    def validate_limits(self):
        """Reject policies that would disable caching bounds or retries."""
        if self.cache_ttl < 0 or self.not_found_ttl < 0:
            raise ValueError("cache TTLs must not be negative")
        if self.not_found_ttl > self.cache_ttl:
            raise ValueError("not_found_ttl must not exceed cache_ttl")
        if self.max_write_attempts < 1 or self.max_request_attempts < 1:
            raise ValueError("attempt limits must be at least 1")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        return self


def _default_config_path() -> Optional[Path]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    local = Path.cwd() / CONFIG_FILE
    return local if local.exists() else None


def load_settings(path: Optional[Path] = None) -> StoreSettings:
    """Load store settings from YAML plus environment overrides.

    Resolution order: explicit path > $LOGBOOK_STORE_CONFIG >
    ./logbook-store.yaml > defaults. Environment variables listed in
    ``_ENV_OVERRIDES`` win over file values.

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    cfg_path = Path(path) if path else _default_config_path()

    data = {}
    if cfg_path is not None:
        if not cfg_path.exists():
            raise ConfigError(f"Config file not found: {cfg_path}")
        try:
            data = yaml.safe_load(cfg_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{cfg_path} must contain a mapping")
        data = data.get("store", data)

    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[field_name] = value

    try:
        return StoreSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid store configuration: {e}") from e
