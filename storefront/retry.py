"""Caller-side retry policy for backend calls.

The gateway, cart store and session manager never retry. UI code that wants
automatic retries wraps its own calls:

    snapshot = await backend_retry(cart.add, item)
"""
import logging
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.errors import Unavailable
from storefront.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


async def backend_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    attempts: int = DEFAULT_ATTEMPTS,
    min_wait: float = 0.5,
    max_wait: float = 4,
    **kwargs: Any,
) -> T:
    """Await ``func(*args, **kwargs)``, retrying on ``Unavailable`` with exponential backoff.

    Other errors (ItemNotFound, AuthError, ...) are raised immediately. After the
    last attempt the final ``Unavailable`` is re-raised.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(Unavailable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return await retrying(func, *args, **kwargs)
