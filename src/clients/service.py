"""Service client facade.

`Requests` is the entry point of the request layer. It is bound either to an
explicit base url or to a discovery descriptor (resolved eagerly into a url
template), plus an optional token source, and produces `Request` objects
through one method per HTTP verb.

## Usage

```python
from clients.service import Requests

members = Requests.from_discovery(
    name="chat", version="v1", resource="spaces.members", method="list", oauth=token_source
)
response = members.get({"parent": "spaces/AAA"}, params={"pageSize": 100}).send_with_retry()

plain = Requests(base_url="https://api.example.com/v1/{thing}")
plain.get({"thing": "42"}, params={"x": "y"}).materialize()[0]
# "https://api.example.com/v1/42?x=y"
```
"""

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import attrs

from config import OAuthConfig, get_settings
from core.exceptions import IllegalArgumentError
from core.models import DiscoveryDescriptor
from core.templates import interpolate, to_template

from .discovery import DiscoveryCache
from .interfaces.extension import RequestExtension
from .interfaces.transport import Transport
from .mixins import LoggerMixin
from .oauth import EnvironmentTokenSource, ServiceAccountTokenSource, oauth_service
from .request import Request
from .transport import RequestsTransport

# Selects the ambient token source
AMBIENT_OAUTH = "me"


def _default_transport() -> Transport:
    return RequestsTransport.from_config(get_settings().transport)


def _default_margin() -> timedelta:
    return timedelta(milliseconds=get_settings().rate_limit.safety_margin_ms)


def _to_descriptor(value: Any) -> DiscoveryDescriptor | None:
    if value is None or isinstance(value, DiscoveryDescriptor):
        return value
    if isinstance(value, Mapping):
        return DiscoveryDescriptor.from_kwargs(value)
    msg = f"Expecting a discovery descriptor or mapping, got {type(value).__name__}"
    raise IllegalArgumentError(msg)


@attrs.define(frozen=False, slots=True)
class Requests(LoggerMixin):
    """Service client producing requests against one API endpoint.

    Attributes:
        base_url: Base url or url template (`{name}` placeholders). Replaced
            by the resolved template when `discovery` is given.
        oauth: Token source read at send time, `"me"` for the ambient token,
            or None for unauthenticated requests.
        discovery: Descriptor resolved at construction into `base_url`. A
            mapping with `name`, `version`, `resource` and `method` is
            validated and converted.
        transport: Transport used by every request of this client.
        discovery_cache: Cache used to resolve `discovery`. Created from
            settings when omitted.
        sticky_headers: Headers merged into every request, overridden by
            per-call headers.
        rate_limit_margin: Safety margin added to rate-limit waits.
    """

    base_url: str | None = None
    oauth: Any = None
    discovery: DiscoveryDescriptor | None = attrs.field(default=None, converter=_to_descriptor)
    transport: Transport = attrs.field(factory=_default_transport)
    discovery_cache: DiscoveryCache | None = None
    sticky_headers: dict[str, str] = attrs.field(factory=dict)
    rate_limit_margin: timedelta = attrs.field(factory=_default_margin)

    def __attrs_post_init__(self) -> None:
        if self.discovery is not None:
            if self.discovery_cache is None:
                self.discovery_cache = DiscoveryCache.from_config(get_settings().discovery, transport=self.transport)
            self.base_url = to_template(self.discovery_cache.resolve(self.discovery))

        if isinstance(self.oauth, str) and self.oauth == AMBIENT_OAUTH:
            self.oauth = EnvironmentTokenSource(get_settings().oauth.access_token_env)

    @classmethod
    def from_discovery(cls, *, oauth: Any = AMBIENT_OAUTH, **kwargs: Any) -> "Requests":
        """Create a client bound to one discovery-described API method.

        Args:
            oauth: Token source; defaults to the ambient token (`"me"`).
            **kwargs: `name`, `version`, `resource` and `method` of the
                descriptor, plus optional `transport`, `discovery_cache`
                and `sticky_headers`.

        Returns:
            A client whose `base_url` is the resolved url template.

        Raises:
            IllegalArgumentError: If descriptor fields are missing or unknown
                keywords are passed (all reported together).
            UnknownResourceOrMethodError: If the discovery document lacks the
                resource or method.
        """
        client_options = {
            key: kwargs.pop(key) for key in ("transport", "discovery_cache", "sticky_headers") if key in kwargs
        }
        descriptor = DiscoveryDescriptor.from_kwargs(kwargs)
        return cls(oauth=oauth, discovery=descriptor, **client_options)

    @staticmethod
    def oauth_service(service: str, config: OAuthConfig | None = None) -> ServiceAccountTokenSource:
        """Mint a signing-key based token source for use as `oauth`."""
        return oauth_service(service, config)

    def create_request(
        self,
        method: str,
        target: Mapping[str, Any] | None = None,
        *,
        url: str | None = None,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        extension: RequestExtension | None = None,
    ) -> Request:
        """Build a request for this client.

        Args:
            method: HTTP verb.
            target: Interpolation values for the base url template. A `"url"`
                key is taken as an explicit url instead.
            url: Explicit absolute url, used as-is.
            params: Query parameters.
            body: JSON body.
            headers: Per-call headers; override sticky headers on collision.
            extension: Optional collaborator invoked around each send.

        Returns:
            An unsent `Request`.

        Raises:
            IllegalArgumentError: If interpolation values are given together
                with a url, or without a base url template.
            MissingInterpolationValueError: If the template references a name
                that `target` does not supply.
        """
        interpolations = dict(target or {})
        explicit_url = interpolations.pop("url", None) or url

        if interpolations:
            if explicit_url:
                raise IllegalArgumentError("Expecting no url parameter for interpolation: url cannot be used")
            if not self.base_url:
                raise IllegalArgumentError("Expecting baseUrl for interpolation")
            self._logger.debug(  # type: ignore[attr-defined]
                "Interpolating base url",
                extra={"template": self.base_url, "names": sorted(interpolations)},
            )
            request_url = interpolate(self.base_url, interpolations)
        elif explicit_url:
            request_url = explicit_url
        elif self.base_url:
            request_url = self.base_url
        else:
            raise IllegalArgumentError("Expecting a url or a baseUrl to build a request")

        return Request(
            url=request_url,
            transport=self.transport,
            method=method,
            headers={**self.sticky_headers, **(headers or {})},
            body=dict(body or {}),
            params=dict(params or {}),
            oauth=self.oauth,
            extension=extension,
            rate_limit_margin=self.rate_limit_margin,
        )

    def get(self, target: Mapping[str, Any] | None = None, **options: Any) -> Request:
        return self.create_request("get", target, **options)

    def post(self, target: Mapping[str, Any] | None = None, **options: Any) -> Request:
        return self.create_request("post", target, **options)

    def put(self, target: Mapping[str, Any] | None = None, **options: Any) -> Request:
        return self.create_request("put", target, **options)

    def patch(self, target: Mapping[str, Any] | None = None, **options: Any) -> Request:
        return self.create_request("patch", target, **options)

    def delete(self, target: Mapping[str, Any] | None = None, **options: Any) -> Request:
        return self.create_request("delete", target, **options)
