"""Fixed-interval retry for flaky remote interactions."""

import time
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

from .exceptions import ConditionNotMetError

T = TypeVar('T')

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_DELAY = 1.0


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    check: Optional[Callable[[T], Any]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run an operation until it succeeds or the attempt budget runs out.

    Args:
        operation: Zero-argument callable that may raise
        max_attempts: Maximum number of attempts
        delay: Seconds to sleep between attempts
        check: Optional predicate on the result; a falsy value counts as
            a failed attempt
        sleep: Sleep function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        The failure observed on the last attempt
    """
    if max_attempts <= 0:
        raise ValueError('max_attempts must be positive')

    last_error: Optional[BaseException] = None

    for attempt in range(1, max_attempts + 1):
        try:
            result = operation()
            if check is None or check(result):
                return result
            last_error = ConditionNotMetError(
                f'Check failed for result {result!r}'
            )
        except Exception as e:
            last_error = e

        logger.debug(f'Attempt {attempt}/{max_attempts} failed: {last_error}')
        if attempt < max_attempts:
            sleep(delay)

    logger.warning(f'Giving up after {max_attempts} attempts: {last_error}')
    raise last_error


class RetryPolicy:
    """Retry settings bound to a session."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize retry policy.

        Args:
            max_attempts: Maximum attempts per operation
            delay: Fixed delay between attempts in seconds
            sleep: Sleep function
        """
        if max_attempts <= 0:
            raise ValueError('max_attempts must be positive')
        if delay < 0:
            raise ValueError('delay must not be negative')

        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep

    def run(
        self,
        operation: Callable[[], T],
        check: Optional[Callable[[T], Any]] = None,
    ) -> T:
        """Run an operation under this policy."""
        return with_retry(
            operation,
            max_attempts=self.max_attempts,
            delay=self.delay,
            check=check,
            sleep=self._sleep,
        )
