"""OAuth token sources.

This module provides the token providers the request layer reads bearer
tokens from. The request layer itself holds no token logic; it only calls
`has_access()`/`get_access_token()` or reads `token` at send time.

- `StaticTokenSource`: a fixed token.
- `EnvironmentTokenSource`: the ambient token, read from an environment
  variable on every access (the `oauth="me"` shortcut).
- `ServiceAccountTokenSource`: signing-key based JWT bearer grant
  (RFC 7523) with in-provider caching until shortly before expiry.

## Usage

```python
from clients.oauth import ServiceAccountTokenSource
from config import OAuthConfig

source = ServiceAccountTokenSource.from_config(
    "chat-bot",
    OAuthConfig(
        issuer_email="bot@project.iam.gserviceaccount.com",
        private_key=PRIVATE_KEY,
        scopes=("https://www.googleapis.com/auth/chat.bot",),
    ),
)
client = Requests.from_discovery(name="chat", version="v1", resource="spaces", method="list", oauth=source)
```
"""

import os
import time
from collections.abc import Callable, Sequence

import attrs
import requests
from jose import jwt

from config import DEFAULT_TOKEN_URL, OAuthConfig, get_settings
from foundation.exceptions import UpstreamError
from foundation.http import create_retry_session

from .mixins import ConfigValidationMixin, LoggerMixin

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_S = 3600
# Tokens are refreshed this many seconds before they expire
EXPIRY_LEEWAY_S = 60


@attrs.define(frozen=True, slots=True)
class StaticTokenSource:
    """Token source returning a fixed token."""

    token: str | None


@attrs.define(frozen=True, slots=True)
class EnvironmentTokenSource:
    """Token source reading the ambient access token from the environment.

    Attributes:
        variable: Environment variable holding the token.
    """

    variable: str = "OAUTH_ACCESS_TOKEN"

    @property
    def token(self) -> str | None:
        return os.environ.get(self.variable) or None


@attrs.define(frozen=False, slots=True)
class ServiceAccountTokenSource(ConfigValidationMixin, LoggerMixin):
    """Token provider for service accounts using a signed JWT assertion.

    Attributes:
        service: Name of the service, used in logs.
        issuer_email: Service account email (assertion `iss`).
        private_key: PEM-encoded RSA key used to sign the assertion.
        scopes: Scopes requested for the token.
        token_url: Token endpoint (assertion `aud`).
        subject: Optional user to impersonate (assertion `sub`).
        session: Optional requests.Session for the token endpoint.
        clock: Returns the current time in epoch seconds.
    """

    service: str
    issuer_email: str
    private_key: str = attrs.field(repr=False)
    scopes: tuple[str, ...] = attrs.field(converter=tuple)
    token_url: str = DEFAULT_TOKEN_URL
    subject: str | None = None
    _session: requests.Session | None = attrs.field(default=None)
    clock: Callable[[], float] = attrs.field(default=time.time, repr=False)
    _access_token: str | None = attrs.field(init=False, default=None, repr=False)
    _expires_at: float = attrs.field(init=False, default=0.0)
    last_error: str | None = attrs.field(init=False, default=None)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_retry_session()
        return self._session

    @classmethod
    def from_config(
        cls,
        service: str,
        config: OAuthConfig,
        session: requests.Session | None = None,
    ) -> "ServiceAccountTokenSource":
        """Create a token source from `OAuthConfig`.

        Raises:
            IllegalArgumentError: If issuer email, private key or scopes are
                missing.
        """
        cls._validate_config(config, ["issuer_email", "private_key", "scopes"])
        assert config.issuer_email is not None
        assert config.private_key is not None
        return cls(
            service=service,
            issuer_email=config.issuer_email,
            private_key=config.private_key,
            scopes=config.scopes,
            token_url=config.token_url,
            subject=config.subject,
            session=session,
        )

    def _assertion(self, now: float) -> str:
        claims: dict[str, str | int] = {
            "iss": self.issuer_email,
            "scope": " ".join(self.scopes),
            "aud": self.token_url,
            "iat": int(now),
            "exp": int(now) + ASSERTION_LIFETIME_S,
        }
        if self.subject:
            claims["sub"] = self.subject
        return jwt.encode(claims, self.private_key, algorithm="RS256")

    def _token_is_fresh(self) -> bool:
        return self._access_token is not None and self.clock() < self._expires_at - EXPIRY_LEEWAY_S

    def refresh(self) -> str:
        """Exchange a freshly signed assertion for an access token.

        Raises:
            UpstreamError: If the token endpoint is unreachable, refuses the
                grant, or returns a body that is not JSON or holds
                no access token.
        """
        now = self.clock()
        data = {"grant_type": JWT_BEARER_GRANT, "assertion": self._assertion(now)}
        try:
            resp = self.session.post(self.token_url, data=data)
        except requests.RequestException as e:
            msg = f"Token request for {self.service} failed: {e}"
            raise UpstreamError(msg) from e

        if resp.status_code >= 400:
            msg = f"Token endpoint error {resp.status_code} for {self.service}: {resp.text}"
            raise UpstreamError(msg)

        try:
            payload = resp.json()
        except ValueError as e:
            msg = f"Token response for {self.service} is not JSON: {e}"
            raise UpstreamError(msg) from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            msg = f"Token response for {self.service} missing access_token"
            raise UpstreamError(msg)

        self._access_token = str(token)
        self._expires_at = now + float(payload.get("expires_in", ASSERTION_LIFETIME_S))
        self._logger.info(  # type: ignore[attr-defined]
            "Obtained access token",
            extra={"service": self.service, "expires_in": payload.get("expires_in")},
        )
        return self._access_token

    def has_access(self) -> bool:
        """Return True if a valid token is held or can be obtained now.

        Refresh failures are recorded in `last_error` and logged; the method
        then returns False so the caller can report the missing authorization.
        """
        if self._token_is_fresh():
            return True
        try:
            self.refresh()
        except UpstreamError as e:
            self.last_error = str(e)
            self._logger.warning(  # type: ignore[attr-defined]
                "Could not obtain access token",
                extra={"service": self.service, "error": str(e)},
            )
            return False
        self.last_error = None
        return True

    def get_access_token(self) -> str:
        """Return the current access token, refreshing it when expired."""
        if not self._token_is_fresh():
            return self.refresh()
        assert self._access_token is not None
        return self._access_token

    def reset(self) -> None:
        """Forget the cached token."""
        self._access_token = None
        self._expires_at = 0.0


def oauth_service(
    service: str,
    config: OAuthConfig | None = None,
    scopes: Sequence[str] | None = None,
) -> ServiceAccountTokenSource:
    """Build a service account token source.

    Args:
        service: Name of the service, used in logs.
        config: OAuth configuration. If None, uses `get_settings().oauth`.
        scopes: Optional scopes overriding those in `config`.

    Returns:
        A `ServiceAccountTokenSource` usable as a request token source.
    """
    if config is None:
        config = get_settings().oauth
    if scopes is not None:
        config = config.model_copy(update={"scopes": tuple(scopes)})
    return ServiceAccountTokenSource.from_config(service, config)
