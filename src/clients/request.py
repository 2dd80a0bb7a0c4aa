"""Request objects produced by the `Requests` facade.

A `Request` holds everything needed to perform one HTTP call: url, verb,
headers, body, query params, an optional fields projection and an optional
token source. It stays mutable until sent, so callers can refine the
projection or params before calling `send()`.

## Usage

```python
request = client.get({"name": "spaces/AAA"}, params={"pageSize": 10})
request.add_field("name")
request.add_field("displayName")
response = request.send_with_retry()
```
"""

import json
from datetime import timedelta
from typing import Any

import attrs

from core.exceptions import TransportError, UnauthorizedError
from core.models import SentRequest
from core.query import encode_query
from foundation.exceptions import UpstreamError
from foundation.rate_limiter import DEFAULT_SAFETY_MARGIN
from foundation.retry import RateLimitRetry

from .interfaces.extension import RequestExtension
from .interfaces.oauth import read_token
from .interfaces.transport import Transport
from .mixins import LoggerMixin
from .response import Response

FIELDS_PARAM = "fields"
AUTHORIZATION = "Authorization"


@attrs.define(frozen=False, slots=True)
class Request(LoggerMixin):
    """A single HTTP request, ready to be materialized and sent.

    Attributes:
        url: Absolute url without query string.
        transport: Transport the request is sent through.
        method: HTTP verb, lower case.
        headers: Request headers (sticky headers already merged in).
        body: JSON body; sent only when non-empty.
        params: Query parameters. List values repeat the key.
        oauth: Optional token source read at send time.
        extension: Optional collaborator whose hooks run around each send.
        rate_limit_margin: Safety margin added to rate-limit waits.
    """

    url: str
    transport: Transport
    method: str = "get"
    headers: dict[str, str] = attrs.field(factory=dict)
    body: dict[str, Any] = attrs.field(factory=dict)
    params: dict[str, Any] = attrs.field(factory=dict)
    oauth: Any = None
    extension: RequestExtension | None = None
    rate_limit_margin: timedelta = DEFAULT_SAFETY_MARGIN
    _fields: list[str] = attrs.field(init=False, factory=list)

    @property
    def fields(self) -> tuple[str, ...]:
        """Field names requested through the `fields` projection."""
        return tuple(self._fields)

    def add_field(self, name: str) -> "Request":
        """Append a field name to the projection. Returns self for chaining."""
        self._fields.append(name)
        return self

    def clear_fields(self) -> "Request":
        self._fields.clear()
        return self

    def query_params(self) -> dict[str, Any]:
        """Params as they will be encoded, including the fields projection."""
        if self._fields:
            return {**self.params, FIELDS_PARAM: ",".join(self._fields)}
        return dict(self.params)

    def _bearer_token(self) -> str:
        token = read_token(self.oauth)
        if token is None:
            raise UnauthorizedError("No authorization: token source did not provide an access token")
        return token

    def materialize(self, embed_url: bool = True, mute_exceptions: bool = True) -> tuple[str, dict[str, Any]]:
        """Build the final url and transport options.

        Args:
            embed_url: If True, the url is also included in the options.
            mute_exceptions: Passed to the transport; when True non-2xx
                statuses are returned instead of raised.

        Returns:
            Tuple of (url with query string, transport options).

        Raises:
            UnauthorizedError: If a token source is set but yields no token.
        """
        url = self.url + encode_query(self.query_params())

        if self.oauth is not None:
            token = self._bearer_token()
            for key in [key for key in self.headers if key.lower() == AUTHORIZATION.lower()]:
                del self.headers[key]
            self.headers[AUTHORIZATION] = f"Bearer {token}"

        options: dict[str, Any] = {
            "method": self.method,
            "headers": dict(self.headers),
            "mute_exceptions": mute_exceptions,
        }
        if embed_url:
            options["url"] = url
        if self.body:
            options["body"] = json.dumps(self.body)
            options["headers"]["Content-Type"] = "application/json"

        return url, options

    def send(self) -> Response:
        """Send the request once.

        Returns:
            The wrapped response, whatever its status.

        Raises:
            UnauthorizedError: If a token source is set but yields no token.
            TransportError: If the transport fails before a response arrives.
        """
        url, options = self.materialize(embed_url=False)
        if self.extension is not None:
            url, options = self.extension.before_send(self, url, options)

        try:
            raw = self.transport.execute(url, options)
        except UpstreamError as e:
            msg = f"Request to {url} failed: {e}"
            raise TransportError(msg, url=url, options=options) from e

        response = Response(
            raw=raw,
            request=SentRequest(url=url, options=options),
            rate_limit_margin=self.rate_limit_margin,
        )
        if self.extension is not None:
            response = self.extension.after_response(self, response)
        return response

    def send_with_retry(self) -> Response:
        """Send the request, sending it once more after a rate-limit wait.

        If the first response is rate limited (HTTP 429), the call blocks
        until the advertised reset and sends again. The second response is
        returned whatever its status.
        """
        retry: RateLimitRetry[Response] = RateLimitRetry(
            delay_of=lambda response: response.rate_limit_delay(),
            logger=self._logger,  # type: ignore[attr-defined]
        )
        return retry.call(self.send)

    def resolve(self) -> Any:
        """Send the request once and return the parsed JSON body."""
        return self.send().json
