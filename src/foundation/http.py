"""Shared HTTP session management.

`create_retry_session` builds the `requests.Session` used by the transport
and by the OAuth token provider, so both share one connection retry policy.

Only connection-level failures are retried here, and only when configured
(`HTTP_MAX_RETRIES`). Status codes are never retried at this level: HTTP 429
belongs to the request layer, and every other status is returned to the
caller as-is.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_MAX_RETRIES = 0
DEFAULT_BACKOFF_FACTOR = 0.5
DEFAULT_STATUS_FORCELIST: list[int] = []
# POST and PATCH are not idempotent
DEFAULT_ALLOWED_METHODS = ["GET", "PUT", "DELETE", "HEAD", "OPTIONS"]


def build_retry_policy(
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    status_forcelist: list[int] | None = None,
    allowed_methods: list[str] | None = None,
) -> Retry:
    """Build the urllib3 retry policy mounted on every session.

    `raise_on_status` is off, so a status retry that runs out of attempts
    hands back the last response instead of raising `MaxRetryError`.
    """
    return Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=DEFAULT_STATUS_FORCELIST if status_forcelist is None else status_forcelist,
        allowed_methods=DEFAULT_ALLOWED_METHODS if allowed_methods is None else allowed_methods,
        raise_on_status=False,
    )


def create_retry_session(
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    status_forcelist: list[int] | None = None,
    allowed_methods: list[str] | None = None,
) -> requests.Session:
    """Create a requests session with the shared retry policy on both schemes.

    Args:
        max_retries: Connection retry attempts (default: 0, no retries).
        backoff_factor: Base backoff in seconds between attempts.
        status_forcelist: Statuses to retry (default: none).
        allowed_methods: Methods eligible for retry (default: idempotent
            methods only).

    Returns:
        A `requests.Session` with the policy mounted for http and https.

    Example:
        ```python
        session = create_retry_session(max_retries=2)
        session.get("https://www.googleapis.com/discovery/v1/apis/chat/v1/rest")
        ```
    """
    adapter = HTTPAdapter(
        max_retries=build_retry_policy(max_retries, backoff_factor, status_forcelist, allowed_methods)
    )
    session = requests.Session()
    for scheme in ("http://", "https://"):
        session.mount(scheme, adapter)
    return session
