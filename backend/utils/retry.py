import asyncio
from functools import wraps
from typing import Callable, Tuple, Type, TypeVar

import structlog

T = TypeVar('T')

log = structlog.get_logger()


def with_retry(
    max_retries: int = 3,
    delay: float = 1.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)
):
    """Retry an async callable with linear back-off.

    Only used for start-up work (reaching the database); request handling
    never retries.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            attempts = max(1, max_retries)
            last_exception = None
            for attempt in range(attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < attempts - 1:
                        wait = delay * (attempt + 1)
                        log.warning(
                            "retrying after failure",
                            operation=func.__name__,
                            attempt=attempt + 1,
                            max_retries=attempts,
                            wait_seconds=wait,
                            error=str(e),
                        )
                        await asyncio.sleep(wait)
            raise last_exception
        return wrapper
    return decorator
