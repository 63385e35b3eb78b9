"""
Fork/Join Helpers

Thin wrappers over ``ThreadPoolExecutor`` for issuing independent blocking
calls (provider requests, space searches) at the same time and joining them.
Results come back in submission order; the first call to fail, in completion
order, cancels whatever has not started yet and is re-raised to the caller.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _join(futures: Sequence[Future]) -> List:
    for future in as_completed(futures):
        error = future.exception()
        if error is not None:
            cancelled = sum(1 for other in futures if other.cancel())
            logger.debug(f"Joined call failed, cancelled {cancelled} pending: {error}")
            raise error
    return [future.result() for future in futures]


def run_concurrently(*calls: Callable[[], T], max_workers: Optional[int] = None) -> List[T]:
    """Run zero-argument callables in parallel and return their results in order"""
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=max_workers or len(calls)) as executor:
        futures = [executor.submit(call) for call in calls]
        return _join(futures)


def map_concurrently(func: Callable[[T], R], items: Iterable[T],
                     max_workers: int = 8) -> List[R]:
    """Apply ``func`` to every item on a bounded pool; all-or-nothing"""
    items = list(items)
    if not items:
        return []
    workers = max(1, min(max_workers, len(items)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(func, item) for item in items]
        return _join(futures)


__all__ = ['run_concurrently', 'map_concurrently']
