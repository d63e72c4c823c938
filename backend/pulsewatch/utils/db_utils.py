"""Database utility functions."""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError, InterfaceError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Substrings of driver errors worth another attempt
TRANSIENT_MESSAGES = (
    "database is locked",
    "connection refused",
    "connection reset",
    "connection closed",
    "server closed",
    "timeout",
    "too many clients",
)


def is_transient(error: Exception) -> bool:
    """Return True for lock contention and dropped-connection errors."""
    message = str(error).lower()
    return any(fragment in message for fragment in TRANSIENT_MESSAGES)


async def retry_on_lock(
    coro_func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 0.1,
) -> T:
    """Run a database operation, retrying transient errors with exponential backoff.

    Many check tasks write concurrently, so SQLite lock contention and pooled
    PostgreSQL connections dropping under load are expected now and then.

    Args:
        coro_func: Zero-argument callable returning a coroutine (e.g. session.commit)
        max_retries: Maximum number of attempts
        base_delay: Delay in seconds before the second attempt (doubles each time)

    Raises:
        OperationalError/InterfaceError: non-transient error, or the last
            transient error once attempts are exhausted
    """
    for attempt in range(1, max_retries + 1):
        try:
            return await coro_func()
        except (OperationalError, InterfaceError) as e:
            if attempt == max_retries or not is_transient(e):
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"Database transient error, retrying in {delay}s (attempt {attempt}/{max_retries})")
            await asyncio.sleep(delay)
    raise RuntimeError("retry_on_lock called with max_retries < 1")
