"""
Retry decorator module
"""
from __future__ import annotations
import time
import random
from functools import wraps
from typing import Tuple, Type, Callable, Any, Optional

from botocore.exceptions import ClientError

# Error codes worth a second attempt; anything else fails fast.
THROTTLING_CODES = frozenset({
    "Throttling",
    "ThrottlingException",
    "ThrottledException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "ServiceUnavailable",
    "RequestTimeout",
})


def is_throttling_error(exc: BaseException) -> bool:
    """Return True when a botocore ClientError carries a throttling-class code."""
    if not isinstance(exc, ClientError):
        return False
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return code in THROTTLING_CODES


def retry_with_backoff(
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    tries: int = 5,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: bool = True,
    logger: Optional[Any] = None,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to retry a function with exponential backoff and optional jitter.

    Args:
        exceptions (tuple): Exceptions to catch and retry on.
        tries (int): Total attempts, including the first one.
        base_delay (float): Delay before the second attempt; doubled each time.
        max_delay (float): Upper bound for a single sleep (before jitter).
        jitter (bool): Whether to add random jitter to delay.
        should_retry (callable): Optional filter; a caught exception for which
            it returns False is re-raised immediately.
    """
    def _decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def _wrapped(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            delay = base_delay
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:  # pylint: disable=broad-except
                    if should_retry is not None and not should_retry(exc):
                        raise
                    attempt += 1
                    if attempt >= tries:
                        if logger:
                            logger.error("Retries exhausted for %s: %s", func.__name__, exc)
                        raise
                    sleep_for = min(delay, max_delay)
                    if jitter:
                        sleep_for += random.uniform(0, sleep_for / 2.0)
                    if logger:
                        logger.warning(
                            "Retrying %s in %.2fs (attempt %d/%d) due to: %s",
                            func.__name__, sleep_for, attempt, tries, exc
                        )
                    time.sleep(sleep_for)
                    delay *= 2.0
        return _wrapped
    return _decorate
