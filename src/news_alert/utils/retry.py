# news_alert/utils/retry.py
import logging
import time
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry(
    fn: Callable[[], T],
    max_retries: int = 3,
    delay: float = 1.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn until it succeeds, up to max_retries attempts, waiting
    delay * 2**attempt between tries. The last exception is re-raised.
    """
    attempts = max(1, max_retries)
    for attempt in range(attempts):
        try:
            return fn()
        except exceptions as e:
            if attempt == attempts - 1:
                raise
            wait = delay * (2 ** attempt)
            logger.debug(f"Attempt {attempt + 1}/{attempts} failed ({e}); retrying in {wait:.1f}s")
            sleep(wait)
    raise RuntimeError("unreachable")
