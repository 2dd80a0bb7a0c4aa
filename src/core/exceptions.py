"""Exception hierarchy for the request layer.

This module defines the errors raised while resolving endpoints, building
requests and reading responses. All of them inherit from `RequestsError` so
callers can catch the whole family at once.

## Exception Hierarchy

- `IllegalArgumentError`: Conflicting or missing construction parameters
- `UnknownResourceOrMethodError`: Discovery document lacks the requested path
- `MissingInterpolationValueError`: Template references an unsupplied name
- `UnauthorizedError`: No access token could be obtained
- `ParseError`: Response body is not valid JSON
- `TransportError`: The transport failed before a response was received

## Usage

```python
from core.exceptions import ParseError, TransportError

try:
    data = request.send().json
except ParseError as e:
    logger.warning("Unexpected body", extra={"body": e.text})
except TransportError as e:
    logger.error("Request failed", extra={"url": e.url})
```

Only HTTP 429 is recovered automatically (once, see `Request.send_with_retry`);
everything here propagates to the caller.
"""

from collections.abc import Mapping, Sequence
from typing import Any

# Re-export UpstreamError from foundation for callers that catch both layers
from foundation.exceptions import UpstreamError  # noqa: F401


class RequestsError(Exception):
    """Base exception class for all request-layer errors."""


class IllegalArgumentError(RequestsError, ValueError):
    """Exception raised for conflicting or missing construction parameters.

    This is a caller bug and is never retried.

    Examples:
        - Interpolation values supplied together with an explicit url
        - Interpolation values supplied but no base template is set
        - Required discovery fields missing, or unexpected ones passed

    Attributes:
        missing: Names of required parameters that were absent.
        unexpected: Names of parameters that are not accepted.
    """

    def __init__(
        self,
        message: str,
        *,
        missing: Sequence[str] = (),
        unexpected: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.missing = tuple(missing)
        self.unexpected = tuple(unexpected)


class UnknownResourceOrMethodError(RequestsError, LookupError):
    """Exception raised when a discovery document lacks a resource or method."""


class MissingInterpolationValueError(RequestsError, LookupError):
    """Exception raised when a template placeholder has no supplied value.

    Attributes:
        name: Placeholder name that could not be resolved.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"No value supplied for template placeholder '{name}'")
        self.name = name


class UnauthorizedError(RequestsError):
    """Exception raised when the token source cannot provide an access token."""


class ParseError(RequestsError, ValueError):
    """Exception raised when a response body is not valid JSON.

    Attributes:
        text: Raw response body, kept for debugging.
    """

    def __init__(self, message: str, *, text: str) -> None:
        super().__init__(f"{message}: {text[:200]!r}")
        self.text = text


class TransportError(RequestsError):
    """Exception raised when the transport fails before producing a response.

    Attributes:
        url: The url that was being requested.
        options: Transport options that were sent (method, headers, body).
    """

    def __init__(self, message: str, *, url: str, options: Mapping[str, Any]) -> None:
        super().__init__(message)
        self.url = url
        self.options = dict(options)
