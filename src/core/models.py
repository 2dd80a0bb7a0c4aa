"""Value types shared by the request layer.

These are plain immutable records; behaviour lives in `clients`.
"""

from collections.abc import Mapping
from typing import Any

import attrs

from .validation import Interface

DISCOVERY_INTERFACE = Interface("Discovery", required=("name", "version", "resource", "method"))


@attrs.define(frozen=True, slots=True)
class DiscoveryDescriptor:
    """Identifies one API operation in a discovery document.

    Attributes:
        name: API name (e.g., `chat`, `sheets`).
        version: API version (e.g., `v1`, `v4`).
        resource: Resource path. Nested resources are dot-separated
            (e.g., `spaces.members`, `spreadsheets.values`).
        method: Method name on the resource (e.g., `get`, `list`).
    """

    name: str
    version: str
    resource: str
    method: str

    @classmethod
    def from_kwargs(cls, kwargs: Mapping[str, Any]) -> "DiscoveryDescriptor":
        """Build a descriptor from keyword arguments.

        Raises:
            IllegalArgumentError: If any of the four fields is missing or an
                unexpected key is present.
        """
        DISCOVERY_INTERFACE.validate(kwargs)
        return cls(
            name=str(kwargs["name"]),
            version=str(kwargs["version"]),
            resource=str(kwargs["resource"]),
            method=str(kwargs["method"]),
        )

    @property
    def cache_key(self) -> str:
        return f"{self.name}{self.version}{self.resource}{self.method}"


@attrs.define(frozen=True, slots=True)
class RawResponse:
    """What a transport returns for one HTTP exchange.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers as received.
        text: Decoded response body.
    """

    status_code: int
    headers: Mapping[str, str] = attrs.field(factory=dict)
    text: str = ""


@attrs.define(frozen=True, slots=True)
class SentRequest:
    """Echo of a materialized request, attached to its response."""

    url: str
    options: Mapping[str, Any] = attrs.field(factory=dict)

    @property
    def method(self) -> str:
        return str(self.options.get("method", "get"))

    @property
    def headers(self) -> Mapping[str, str]:
        return self.options.get("headers", {})
