"""Single-retry policy for rate-limited calls, built on tenacity.

A call that returns a rate-limited result is retried exactly once after
waiting for the delay the result advertises. The second result is returned
whatever it is: there is no exponential backoff and no retry budget beyond
the one extra attempt. Exceptions raised by the call are never retried.

## Usage

```python
from foundation.retry import RateLimitRetry

retry = RateLimitRetry(delay_of=lambda response: response.rate_limit_delay())
response = retry.call(request.send)
```
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Generic, TypeVar

from tenacity import Retrying, stop_after_attempt

from foundation.rate_limiter import wait_for

T = TypeVar("T")

# One initial attempt plus one retry
MAX_ATTEMPTS = 2


def _sleep_seconds(seconds: float) -> None:
    wait_for(timedelta(seconds=seconds))


def _return_last_result(retry_state: Any) -> Any:
    return retry_state.outcome.result()


def create_retry_logger(
    logger: logging.Logger,
    message: str = "Rate limited, retrying once",
) -> Callable[[Any], None]:
    """Create a `before_sleep` callback that logs the upcoming retry.

    Args:
        logger: Logger instance to use for logging.
        message: Log message.

    Returns:
        Callback function for tenacity's before_sleep parameter.
    """

    def log_retry(retry_state: Any) -> None:
        wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            message,
            extra={
                "attempt": retry_state.attempt_number,
                "wait_seconds": round(wait_time, 3),
            },
        )

    return log_retry


class RateLimitRetry(Generic[T]):
    """Retry a call once when its result is rate limited.

    Attributes:
        delay_of: Classifier returning the wait before retrying, or None when
            the result is not rate limited.
        logger: Logger used for the retry warning.
        sleep: Function blocking for a number of seconds (default: the
            rate limiter's `wait_for`).
    """

    def __init__(
        self,
        delay_of: Callable[[T], timedelta | None],
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.delay_of = delay_of
        self.logger = logger or logging.getLogger("foundation.retry")
        self.sleep = sleep or _sleep_seconds

    def _classifier(self) -> tuple[Callable[[Any], bool], Callable[[Any], float]]:
        """Return the (retry, wait) pair for one call.

        Each result is classified once; the wait reuses the delay computed
        when the retry decision was made.
        """
        delays: dict[int, timedelta | None] = {}

        def is_rate_limited(retry_state: Any) -> bool:
            if retry_state.outcome.failed:
                return False
            delay = self.delay_of(retry_state.outcome.result())
            delays[retry_state.attempt_number] = delay
            return delay is not None

        def wait(retry_state: Any) -> float:
            delay = delays.get(retry_state.attempt_number)
            if delay is None:
                return 0.0
            return max(delay.total_seconds(), 0.0)

        return is_rate_limited, wait

    def call(self, func: Callable[[], T]) -> T:
        """Call `func`, calling it once more if the first result is rate limited.

        Args:
            func: Zero-argument callable producing a result.

        Returns:
            The first result if it is not rate limited, otherwise the second
            result, unconditionally.
        """
        is_rate_limited, wait = self._classifier()
        retrying = Retrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            retry=is_rate_limited,
            wait=wait,
            sleep=self.sleep,
            before_sleep=create_retry_logger(self.logger),
            retry_error_callback=_return_last_result,
        )
        return retrying(func)
