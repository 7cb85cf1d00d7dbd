import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number `attempt` (1-based): base, 2*base, 4*base ... capped."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "operation",
) -> T:
    """
    Call func() until it succeeds or max_attempts is reached.
    Re-raises the last exception once all attempts fail.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    last_exception = None
    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except Exception as e:
            last_exception = e
            if attempt < max_attempts:
                delay = backoff_delay(attempt, base_delay, max_delay)
                logger.warning(f"{label} attempt {attempt}/{max_attempts} failed, retrying in {delay:.1f}s: {e}")
                sleep(delay)
            else:
                logger.error(f"{label} failed after {max_attempts} attempts: {e}")
    raise last_exception
