"""Rate-limit classification and waiting.

Rate-limited responses carry HTTP 429 and an `x-ratelimit-reset` header in the
form `"YYYY-MM-DD HH:MM:SS UTC"`. Handling is split in two steps so the
blocking stays visible at the call site:

- `classify_rate_limit()` is pure: it returns how long to wait, or None when
  the response is not rate limited.
- `wait_for()` blocks the calling thread for that duration.

## Usage

```python
from foundation.rate_limiter import classify_rate_limit, wait_for

delay = classify_rate_limit(response.status_code, response.headers)
if delay is not None:
    wait_for(delay)
    response = send_again()
```
"""

import logging
import time
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

logger = logging.getLogger("foundation.rate_limiter")

RATE_LIMIT_STATUS = 429
RESET_HEADER = "x-ratelimit-reset"
RESET_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_SAFETY_MARGIN = timedelta(milliseconds=10)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def parse_reset_header(value: str) -> datetime:
    """Parse an `x-ratelimit-reset` value into an aware UTC datetime.

    Args:
        value: Header value such as `"2020-04-11 10:15:30 UTC"`.

    Returns:
        The reset instant in UTC.

    Raises:
        ValueError: If the value does not match the expected format.
    """
    text = value.strip()
    if text.upper().endswith(" UTC"):
        text = text[: -len(" UTC")]
    return datetime.strptime(text, RESET_FORMAT).replace(tzinfo=timezone.utc)


def classify_rate_limit(
    status_code: int,
    headers: Mapping[str, str],
    *,
    now: datetime | None = None,
    margin: timedelta = DEFAULT_SAFETY_MARGIN,
) -> timedelta | None:
    """Decide whether a response is rate limited and how long to wait.

    Args:
        status_code: HTTP status code of the response.
        headers: Response headers (looked up case-insensitively).
        now: Current instant; defaults to the current UTC time.
        margin: Safety margin added to the computed wait.

    Returns:
        None when `status_code` is not 429. Otherwise the time until the reset
        instant plus `margin`, never negative. A missing or malformed reset
        header yields a zero wait.
    """
    if status_code != RATE_LIMIT_STATUS:
        return None

    raw_reset = _header(headers, RESET_HEADER)
    if raw_reset is None:
        logger.warning("Rate limited without reset header, retrying immediately")
        return timedelta(0)

    try:
        reset_at = parse_reset_header(raw_reset)
    except ValueError:
        logger.warning(
            "Unparseable rate limit reset header, retrying immediately",
            extra={"reset_header": raw_reset},
        )
        return timedelta(0)

    current = now or datetime.now(timezone.utc)
    delay = reset_at - current + margin
    return max(delay, timedelta(0))


def wait_for(duration: timedelta) -> None:
    """Block the calling thread for `duration`.

    Non-positive durations return immediately.
    """
    seconds = duration.total_seconds()
    if seconds <= 0:
        return
    logger.info("Sleeping until rate limit resets", extra={"wait_seconds": round(seconds, 3)})
    time.sleep(seconds)
