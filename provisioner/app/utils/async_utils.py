"""
Asynchronous utility helpers for the provisioner.

Provides retrying of async callables with exponential backoff. The
provisioning core never retries on its own; callers (the RPC client, tests
exercising concurrent requests) wrap calls with ``async_retry`` and decide
which failures are worth another attempt.
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def async_retry(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    retry_if: Optional[Callable[[BaseException], bool]] = None,
) -> Callable:
    """
    Decorator for async functions with automatic retry on failure.

    Implements exponential backoff between retries.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        delay: Initial delay between retries in seconds (default: 1.0)
        backoff: Multiplier for delay after each retry (default: 2.0)
        retry_if: Predicate deciding whether an exception is retryable.
            Exceptions it rejects are raised immediately. When omitted,
            every Exception is retried.

    Returns:
        Decorator function

    Raises:
        The last exception if all retries are exhausted

    Example:
        @async_retry(max_retries=5, delay=0.5,
                     retry_if=lambda e: getattr(e, "retryable", False))
        async def provision():
            return await service.provision_database(request)
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            current_delay = delay
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if retry_if is not None and not retry_if(e):
                        raise
                    last_exception = e
                    if attempt < max_retries:
                        logger.warning(
                            f"Attempt {attempt + 1} failed for {func.__name__}: "
                            f"{str(e)}. Retrying in {current_delay}s..."
                        )
                        await asyncio.sleep(current_delay)
                        current_delay *= backoff
                    else:
                        logger.error(
                            f"All {max_retries + 1} attempts failed for "
                            f"{func.__name__}: {str(e)}"
                        )

            raise last_exception

        return wrapper

    return decorator
