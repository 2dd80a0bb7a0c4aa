"""Response wrapper for the request layer.

`Response` wraps the `RawResponse` returned by a transport together with the
request that produced it, and exposes status, headers, body text, lazily
parsed JSON and rate-limit classification.
"""

import json
from datetime import datetime, timedelta
from typing import Any

import attrs
from requests.structures import CaseInsensitiveDict

from core.exceptions import ParseError
from core.models import RawResponse, SentRequest
from foundation.rate_limiter import DEFAULT_SAFETY_MARGIN, classify_rate_limit, wait_for

from .mixins import LoggerMixin

_UNPARSED = object()


@attrs.define(frozen=False, slots=True)
class Response(LoggerMixin):
    """Result of sending a `Request`.

    Attributes:
        raw: Status, headers and body text as returned by the transport.
        request: Echo of the url and options that were sent.
        rate_limit_margin: Safety margin added to rate-limit waits.

    Example:
        ```python
        response = request.send()
        if response.ok:
            spaces = response.json["spaces"]
        ```
    """

    raw: RawResponse
    request: SentRequest | None = None
    rate_limit_margin: timedelta = DEFAULT_SAFETY_MARGIN
    _json: Any = attrs.field(init=False, default=_UNPARSED, repr=False)

    @property
    def text(self) -> str:
        return self.raw.text

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def ok(self) -> bool:
        """True only for HTTP 200; other 2xx statuses are not `ok`."""
        return self.status_code == 200

    @property
    def headers(self) -> CaseInsensitiveDict:
        return CaseInsensitiveDict(self.raw.headers)

    @property
    def json(self) -> Any:
        """Parsed JSON body, computed on first access.

        Raises:
            ParseError: If the body is not valid JSON. The raw body is kept on
                the error and logged.
        """
        if self._json is _UNPARSED:
            try:
                self._json = json.loads(self.text)
            except ValueError as e:
                self._logger.warning(  # type: ignore[attr-defined]
                    "Response body is not valid JSON",
                    extra={"status_code": self.status_code, "body": self.text},
                )
                msg = "Response did not return a parsable json object"
                raise ParseError(msg, text=self.text) from e
        return self._json

    def rate_limit_delay(self, now: datetime | None = None) -> timedelta | None:
        """Return how long to wait before retrying, or None if not rate limited."""
        return classify_rate_limit(self.status_code, self.headers, now=now, margin=self.rate_limit_margin)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    def wait_if_rate_limited(self) -> bool:
        """Block until the rate limit resets when this response is rate limited.

        Returns:
            True (after waiting) when the response is rate limited, False
            immediately otherwise.
        """
        delay = self.rate_limit_delay()
        if delay is None:
            return False
        wait_for(delay)
        return True
