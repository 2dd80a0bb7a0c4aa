"""Discovery document resolution with caching.

`DiscoveryCache` turns a `DiscoveryDescriptor` into the absolute url template
of one API method by reading the API's discovery document. Results are cached
for up to 6 hours; misses are always recoverable by fetching the document
again.

## Usage

```python
from clients.discovery import DiscoveryCache
from core.models import DiscoveryDescriptor

cache = DiscoveryCache(transport=RequestsTransport())
cache.resolve(DiscoveryDescriptor("chat", "v1", "spaces.members", "list"))
# "https://chat.googleapis.com/v1/{+parent}/members"
```

## Design

Cache-aside: read the store, compute on a miss, write the result, return it.
Failures are never cached. Concurrent misses on the same key may each fetch
the document; the write is idempotent.
"""

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import attrs

from config import DEFAULT_DISCOVERY_ENDPOINT, MAX_CACHE_TTL_SECONDS, DiscoveryConfig, get_settings
from core.exceptions import UnknownResourceOrMethodError
from core.models import DiscoveryDescriptor
from foundation.cache import CacheStore, MemoryCacheStore

from .interfaces.transport import Transport
from .mixins import LoggerMixin
from .request import Request


@lru_cache(maxsize=1)
def shared_discovery_store() -> MemoryCacheStore:
    """Return the process-wide store shared by every `DiscoveryCache` by default."""
    return MemoryCacheStore(max_entries=get_settings().discovery.cache_max_entries)


def locate_path(document: Mapping[str, Any], resource: str, method: str) -> str:
    """Find the `path` of `resource.method` in a discovery document.

    Args:
        document: Parsed discovery document.
        resource: Resource path; dot-separated segments walk nested
            `resources` (`a.b` reads `resources.a.resources.b`).
        method: Method name under the final resource.

    Returns:
        The method's path, relative to the document's `baseUrl`.

    Raises:
        UnknownResourceOrMethodError: If a segment or the method is absent.
    """
    node: Mapping[str, Any] = document
    walked: list[str] = []
    for segment in resource.split("."):
        walked.append(segment)
        children = node.get("resources") or {}
        if segment not in children:
            msg = f"Resource '{'.'.join(walked)}' not found in discovery document"
            raise UnknownResourceOrMethodError(msg)
        node = children[segment]

    methods = node.get("methods") or {}
    if method not in methods or "path" not in methods[method]:
        msg = f"Method '{method}' not found on resource '{resource}'"
        raise UnknownResourceOrMethodError(msg)
    return str(methods[method]["path"])


@attrs.define(frozen=False, slots=True)
class DiscoveryCache(LoggerMixin):
    """Resolves discovery descriptors to absolute url templates.

    Attributes:
        transport: Transport used to fetch discovery documents.
        store: Cache store; defaults to the process-wide shared store.
        endpoint: Discovery url template with `{name}` and `{version}`.
        ttl_seconds: Lifetime of cached entries, at most 21600.
    """

    transport: Transport
    store: CacheStore = attrs.field(factory=shared_discovery_store)
    endpoint: str = DEFAULT_DISCOVERY_ENDPOINT
    ttl_seconds: int = attrs.field(default=MAX_CACHE_TTL_SECONDS)

    @ttl_seconds.validator
    def _check_ttl(self, attribute: attrs.Attribute, value: int) -> None:
        if not 0 < value <= MAX_CACHE_TTL_SECONDS:
            msg = f"ttl_seconds must be between 1 and {MAX_CACHE_TTL_SECONDS}, got {value}"
            raise ValueError(msg)

    @classmethod
    def from_config(
        cls,
        config: DiscoveryConfig,
        transport: Transport,
        store: CacheStore | None = None,
    ) -> "DiscoveryCache":
        """Create a DiscoveryCache from `DiscoveryConfig`.

        When no store is given, the process-wide shared store is used.
        """
        if store is None:
            store = shared_discovery_store()
        return cls(
            transport=transport,
            store=store,
            endpoint=config.endpoint,
            ttl_seconds=config.cache_ttl_s,
        )

    def document_url(self, name: str, version: str) -> str:
        return self.endpoint.format(name=name, version=version)

    def fetch_document(self, name: str, version: str) -> dict[str, Any]:
        """Fetch and parse the discovery document of an API.

        Raises:
            UnknownResourceOrMethodError: If the document cannot be retrieved.
            ParseError: If the document is not valid JSON.
            TransportError: If the transport fails.
        """
        url = self.document_url(name, version)
        response = Request(url=url, transport=self.transport).send()
        if not response.ok:
            msg = f"Discovery document for {name} {version} unavailable: HTTP {response.status_code}"
            raise UnknownResourceOrMethodError(msg)
        return response.json

    def resolve(self, descriptor: DiscoveryDescriptor) -> str:
        """Return the absolute url template for a descriptor.

        Args:
            descriptor: API name, version, resource path and method.

        Returns:
            `baseUrl + path`, with discovery-style placeholders untouched.

        Raises:
            UnknownResourceOrMethodError: If the resource or method is absent.
        """
        key = descriptor.cache_key
        cached = self.store.get(key)
        if cached:
            self._logger.debug("Discovery cache hit", extra={"cache_key": key})  # type: ignore[attr-defined]
            return cached

        document = self.fetch_document(descriptor.name, descriptor.version)
        path = locate_path(document, descriptor.resource, descriptor.method)
        template = str(document.get("baseUrl", "")) + path

        self.store.put(key, template, self.ttl_seconds)
        self._logger.info(  # type: ignore[attr-defined]
            "Resolved discovery endpoint",
            extra={"cache_key": key, "template": template},
        )
        return template
