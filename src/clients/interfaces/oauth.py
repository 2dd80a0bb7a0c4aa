"""OAuth token source contracts.

A token source is anything the request layer can ask for an access token at
send time. Two shapes are accepted, probed in this order:

1. `AccessCheckingTokenSource`: `has_access()` plus `get_access_token()`,
   for providers that can refresh or fail (e.g., `ServiceAccountTokenSource`).
2. `StaticTokenSource`-like objects exposing a `token` attribute or property.

The request layer never caches tokens; refresh is the provider's concern.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AccessCheckingTokenSource(Protocol):
    """Token provider that can report whether a token is obtainable."""

    def has_access(self) -> bool:
        """Return True when `get_access_token()` can return a token."""
        ...

    def get_access_token(self) -> str:
        """Return a valid access token."""
        ...


@runtime_checkable
class TokenAttributeSource(Protocol):
    """Token provider exposing a plain `token` attribute."""

    token: str | None


TokenSource = AccessCheckingTokenSource | TokenAttributeSource


def read_token(source: Any) -> str | None:
    """Read an access token from a token source.

    Args:
        source: Object matching one of the token source shapes.

    Returns:
        The token, or None when the source has no access or no token.
    """
    if isinstance(source, AccessCheckingTokenSource):
        if source.has_access():
            return source.get_access_token()
        return None
    return getattr(source, "token", None) or None
