"""
Bounded store calls.

Every lookup the auth layer makes goes through `bounded` so that a slow or
unreachable store surfaces as StoreUnavailable instead of hanging the
request. Cancellation of the caller propagates into the wrapped call.
"""

import asyncio
from typing import Awaitable, TypeVar

from market_auth.errors import StoreUnavailable
from market_auth.observability import get_logger

T = TypeVar("T")

log = get_logger(__name__)

DEFAULT_STORE_TIMEOUT = 5.0


async def bounded(awaitable: Awaitable[T], timeout: float = DEFAULT_STORE_TIMEOUT, operation: str = "store") -> T:
    """
    Await a store call with a timeout.

    Args:
        awaitable: The store coroutine
        timeout: Seconds before giving up
        operation: Name used in logs

    Returns:
        The store call's result

    Raises:
        StoreUnavailable: On timeout or connection failure
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        log.warning("store_timeout", operation=operation, timeout=timeout)
        raise StoreUnavailable()
    except (ConnectionError, OSError) as e:
        log.warning("store_unreachable", operation=operation, error=str(e))
        raise StoreUnavailable() from e
