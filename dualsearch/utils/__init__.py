"""
Shared Utilities

Configuration access, retry/timing helpers and fork/join helpers used across
the retrieval components.
"""

from .retry_utils import RetryConfig, with_retry, performance_timer
from .config_manager import ConfigManager
from .concurrency import run_concurrently, map_concurrently

__all__ = [
    'RetryConfig',
    'with_retry',
    'performance_timer',
    'ConfigManager',
    'run_concurrently',
    'map_concurrently',
]
