"""Configuration management for the request layer.

This module provides the configuration system using Pydantic models. All
settings are loaded from environment variables with sensible defaults.

## Configuration Sources

Configuration is read from environment variables the first time
`get_settings()` is called. The function uses `@lru_cache` so settings are
loaded once per process; tests that change the environment must call
`get_settings.cache_clear()`.

## Environment Variables

The following environment variables are supported (all optional with
defaults):

**HTTP Transport**
- `HTTP_TIMEOUT`: Request timeout in seconds (default: unset, no timeout)
- `HTTP_MAX_RETRIES`: Connection-level retry attempts (default: `0`)
- `HTTP_BACKOFF_FACTOR`: Backoff factor between connection retries
  (default: `0.5`)

**Discovery**
- `DISCOVERY_ENDPOINT`: Discovery document url template with `{name}` and
  `{version}` placeholders
  (default: `https://www.googleapis.com/discovery/v1/apis/{name}/{version}/rest`)
- `DISCOVERY_CACHE_TTL`: Seconds a resolved endpoint stays cached
  (default: `21600`, values above `21600` are capped)
- `DISCOVERY_CACHE_MAX_ENTRIES`: Maximum cached endpoints (default: `512`)

**Rate Limiting**
- `RATE_LIMIT_SAFETY_MARGIN_MS`: Extra milliseconds added to the wait derived
  from `x-ratelimit-reset` (default: `10`)

**OAuth**
- `OAUTH_TOKEN_URL`: Token endpoint for the JWT bearer grant
  (default: `https://accounts.google.com/o/oauth2/token`)
- `OAUTH_ISSUER_EMAIL`: Service account email used as the assertion issuer
- `OAUTH_PRIVATE_KEY`: PEM-encoded signing key
- `OAUTH_SCOPES`: Comma-separated scopes
- `OAUTH_SUBJECT`: Optional user to impersonate
- `OAUTH_ACCESS_TOKEN_ENV`: Name of the variable holding the ambient access
  token used by `oauth="me"` (default: `OAUTH_ACCESS_TOKEN`)

## Usage

```python
from config import get_settings
from clients import create_requests

settings = get_settings()
client = create_requests(base_url="https://api.example.com/v1/{thing}")
```
"""

import os
from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import SettingsConfigDict

from foundation.cache import MAX_TTL_SECONDS as MAX_CACHE_TTL_SECONDS

DEFAULT_DISCOVERY_ENDPOINT = "https://www.googleapis.com/discovery/v1/apis/{name}/{version}/rest"
DEFAULT_TOKEN_URL = "https://accounts.google.com/o/oauth2/token"


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return float(value)


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


class TransportConfig(BaseModel):
    """Configuration for the HTTP transport.

    Attributes:
        timeout_s: Request timeout in seconds. None waits indefinitely.
        max_retries: Connection-level retry attempts. Status codes are never
            retried here; rate limits are handled by the request layer.
        backoff_factor: Backoff factor between connection retries.
    """

    timeout_s: float | None = None
    max_retries: int = Field(default=0, ge=0)
    backoff_factor: float = Field(default=0.5, ge=0)

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "TransportConfig":
        return cls(
            timeout_s=_optional_float("HTTP_TIMEOUT"),
            max_retries=int(os.getenv("HTTP_MAX_RETRIES", "0")),
            backoff_factor=float(os.getenv("HTTP_BACKOFF_FACTOR", "0.5")),
        )


class DiscoveryConfig(BaseModel):
    """Configuration for discovery document resolution.

    Attributes:
        endpoint: Discovery url template with `{name}` and `{version}`.
        cache_ttl_s: Seconds a resolved endpoint template stays cached.
            Capped at 21600 (6 hours).
        cache_max_entries: Maximum number of cached endpoint templates.
    """

    endpoint: str = DEFAULT_DISCOVERY_ENDPOINT
    cache_ttl_s: int = Field(default=MAX_CACHE_TTL_SECONDS, gt=0)
    cache_max_entries: int = Field(default=512, gt=0)

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "DiscoveryConfig":
        ttl = int(os.getenv("DISCOVERY_CACHE_TTL", str(MAX_CACHE_TTL_SECONDS)))
        return cls(
            endpoint=os.getenv("DISCOVERY_ENDPOINT") or DEFAULT_DISCOVERY_ENDPOINT,
            cache_ttl_s=min(ttl, MAX_CACHE_TTL_SECONDS),
            cache_max_entries=int(os.getenv("DISCOVERY_CACHE_MAX_ENTRIES", "512")),
        )


class RateLimitConfig(BaseModel):
    """Configuration for rate-limit handling.

    Attributes:
        safety_margin_ms: Milliseconds added to the wait computed from the
            `x-ratelimit-reset` header.
    """

    safety_margin_ms: int = Field(default=10, ge=0)

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "RateLimitConfig":
        return cls(safety_margin_ms=int(os.getenv("RATE_LIMIT_SAFETY_MARGIN_MS", "10")))


class OAuthConfig(BaseModel):
    """Configuration for signing-key based OAuth token providers.

    Attributes:
        token_url: Token endpoint for the JWT bearer grant.
        issuer_email: Service account email (assertion issuer).
        private_key: PEM-encoded RSA signing key.
        scopes: Scopes requested for the token.
        subject: Optional user to impersonate (domain-wide delegation).
        access_token_env: Environment variable read by the ambient "me"
            token source.
    """

    token_url: str = DEFAULT_TOKEN_URL
    issuer_email: str | None = None
    private_key: str | None = None
    scopes: tuple[str, ...] = ()
    subject: str | None = None
    access_token_env: str = "OAUTH_ACCESS_TOKEN"

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "OAuthConfig":
        return cls(
            token_url=os.getenv("OAUTH_TOKEN_URL") or DEFAULT_TOKEN_URL,
            issuer_email=os.getenv("OAUTH_ISSUER_EMAIL"),
            private_key=os.getenv("OAUTH_PRIVATE_KEY"),
            scopes=_split_csv(os.getenv("OAUTH_SCOPES")),
            subject=os.getenv("OAUTH_SUBJECT"),
            access_token_env=os.getenv("OAUTH_ACCESS_TOKEN_ENV") or "OAUTH_ACCESS_TOKEN",
        )


class Settings(BaseModel):
    """Immutable runtime configuration for the request layer.

    Attributes:
        transport: HTTP transport configuration.
        discovery: Discovery resolution and caching configuration.
        rate_limit: Rate-limit handling configuration.
        oauth: OAuth token provider configuration.
    """

    transport: TransportConfig
    discovery: DiscoveryConfig
    rate_limit: RateLimitConfig
    oauth: OAuthConfig

    model_config = SettingsConfigDict(frozen=True)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            transport=TransportConfig.from_env(),
            discovery=DiscoveryConfig.from_env(),
            rate_limit=RateLimitConfig.from_env(),
            oauth=OAuthConfig.from_env(),
        )


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Load and return settings (cached per process).

    Returns:
        A frozen `Settings` instance with all configuration values.
    """
    return Settings.from_env()
