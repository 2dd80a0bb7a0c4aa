"""Transport interface.

This module defines the `Transport` ABC: the single synchronous fetch
primitive the request layer sends through. Concrete implementations live in
the parent `clients` package (e.g., `RequestsTransport`).
"""

from abc import ABC, abstractmethod
from typing import Any, TypedDict

from core.models import RawResponse


class TransportOptions(TypedDict, total=False):
    """Options produced by `Request.materialize()`.

    Keys:
        method: HTTP verb, lower case (`get`, `post`, ...).
        headers: Final request headers.
        body: JSON-serialized body, present only when the body is non-empty.
        mute_exceptions: When True, non-2xx statuses are returned, not raised.
        url: The full url, present only when requested with `embed_url`.
    """

    method: str
    headers: dict[str, str]
    body: str
    mute_exceptions: bool
    url: str


class Transport(ABC):
    """Abstract base class for HTTP transports.

    Example:
        ```python
        class RecordingTransport(Transport):
            def __init__(self) -> None:
                self.calls = []

            def execute(self, url, options):
                self.calls.append((url, options))
                return RawResponse(status_code=200, text="{}")
        ```
    """

    @abstractmethod
    def execute(self, url: str, options: TransportOptions | dict[str, Any]) -> RawResponse:
        """Perform one HTTP exchange.

        Args:
            url: Absolute url including the query string.
            options: Method, headers, optional body and `mute_exceptions`.

        Returns:
            The raw response.

        Raises:
            UpstreamError: On connection failures, and on non-2xx statuses
                when `mute_exceptions` is False.
        """

    def close(self) -> None:  # noqa: B027
        """Release transport resources. Default implementation does nothing."""
