"""HTTP transport backed by `requests`.

This module provides `RequestsTransport`, the default `Transport` used by the
request layer.

## Usage

```python
from clients.transport import RequestsTransport

transport = RequestsTransport(timeout_s=30)
raw = transport.execute(
    "https://www.googleapis.com/discovery/v1/apis/chat/v1/rest",
    {"method": "get", "headers": {}, "mute_exceptions": True},
)
raw.status_code  # 200
```
"""

from typing import Any

import attrs
import requests

from config import TransportConfig
from core.models import RawResponse
from foundation.exceptions import UpstreamError
from foundation.http import create_retry_session

from .interfaces.transport import Transport, TransportOptions
from .mixins import LoggerMixin


@attrs.define(frozen=False, slots=True)
class RequestsTransport(LoggerMixin, Transport):
    """Transport performing requests through a `requests.Session`.

    Attributes:
        timeout_s: Request timeout in seconds. None waits indefinitely.
        session: Optional requests.Session. If not provided, a session with
            connection retries disabled is created.
    """

    timeout_s: float | None = attrs.field(default=None)
    _session: requests.Session | None = attrs.field(default=None)

    def __attrs_post_init__(self) -> None:
        if self._session is None:
            self._session = create_retry_session()

    @property
    def session(self) -> requests.Session:
        assert self._session is not None
        return self._session

    def set_session(self, session: requests.Session) -> None:
        self._session = session

    @classmethod
    def from_config(cls, config: TransportConfig) -> "RequestsTransport":
        """Create a transport from `TransportConfig`."""
        session = create_retry_session(
            max_retries=config.max_retries,
            backoff_factor=config.backoff_factor,
        )
        return cls(timeout_s=config.timeout_s, session=session)

    def execute(self, url: str, options: TransportOptions | dict[str, Any]) -> RawResponse:
        """Perform one HTTP exchange.

        Raises:
            UpstreamError: If the connection fails, or if the status is not
                2xx and `mute_exceptions` is False.
        """
        method = str(options.get("method", "get")).upper()
        try:
            resp = self.session.request(
                method,
                url,
                headers=options.get("headers") or None,
                data=options.get("body"),
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            msg = f"{method} {url} failed: {e}"
            raise UpstreamError(msg) from e

        self._logger.debug(  # type: ignore[attr-defined]
            "HTTP exchange completed",
            extra={"request": {"url": url, "method": method, "status_code": resp.status_code}},
        )

        if not options.get("mute_exceptions", True) and not resp.ok:
            msg = f"{method} {url} returned {resp.status_code}: {resp.text}"
            raise UpstreamError(msg)

        return RawResponse(status_code=resp.status_code, headers=dict(resp.headers), text=resp.text)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
