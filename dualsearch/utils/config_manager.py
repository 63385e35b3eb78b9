"""
Configuration Management

Wraps the static ``Config`` object (or any object / mapping exposing the same
upper-case keys) so components read their settings through one accessor and
tests can hand in a plain dict.
"""

from typing import Any, Mapping

from .retry_utils import RetryConfig


class ConfigManager:
    """Centralized configuration access"""

    def __init__(self, config: Any = None):
        self.config = config if config is not None else {}
        self._cache = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with caching; defaults are never cached"""
        if key not in self._cache:
            if isinstance(self.config, Mapping):
                value = self.config.get(key)
            else:
                value = getattr(self.config, key, None)
            if value is None:
                return default
            self._cache[key] = value
        return self._cache[key]

    def get_int(self, key: str, default: int) -> int:
        return int(self.get(key, default))

    def get_float(self, key: str, default: float) -> float:
        return float(self.get(key, default))

    def get_retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.get_int('MAX_RETRIES', 3),
            base_delay=self.get_float('RETRY_BASE_DELAY', 1.0),
            exponential_base=self.get_float('RETRY_EXPONENTIAL_BASE', 2.0),
            max_delay=self.get_float('RETRY_MAX_DELAY', 60.0)
        )


__all__ = ['ConfigManager']
