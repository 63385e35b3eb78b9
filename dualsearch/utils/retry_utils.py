"""
Retry and Timing Utilities

Backoff retries are only applied inside collaborator adapters (the embedding
provider client); the retrieval engine itself never retries.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

TRANSIENT_MARKERS = ("rate limit", "rate_limit", "429", "capacity", "overloaded", "timeout")


@dataclass
class RetryConfig:
    """Exponential backoff settings"""
    max_retries: int = 3
    base_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 60.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


def is_transient_error(error: Exception, markers: Tuple[str, ...] = TRANSIENT_MARKERS) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in markers)


def with_retry(retry_config: Optional[RetryConfig] = None,
               transient_errors: Tuple[str, ...] = TRANSIENT_MARKERS,
               sleep: Callable[[float], None] = time.sleep):
    """Retry the wrapped call on transient errors with exponential backoff.

    Non-transient errors and the final failed attempt are re-raised as-is.
    """
    config = retry_config or RetryConfig()

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempts = max(1, config.max_retries)
            for attempt in range(attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt == attempts - 1 or not is_transient_error(e, transient_errors):
                        raise
                    delay = config.delay_for(attempt)
                    logger.warning(f"Transient error in {func.__name__} "
                                   f"(attempt {attempt + 1}/{attempts}): {e}")
                    logger.info(f"Retrying in {delay:.1f}s...")
                    sleep(delay)
        return wrapper
    return decorator


@contextmanager
def performance_timer(operation_name: str, stats_dict: Optional[Dict] = None):
    """Log how long the enclosed block took"""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start_time
        logger.info(f"{operation_name} completed in {duration:.2f}s")
        if stats_dict is not None:
            stats_dict.setdefault(operation_name, []).append(duration)


__all__ = ['RetryConfig', 'is_transient_error', 'with_retry', 'performance_timer']
