"""
Tests for retry, fork/join and configuration helpers.
"""

import threading
import time

import pytest

from dualsearch.utils import ConfigManager, RetryConfig, map_concurrently, run_concurrently, with_retry
from dualsearch.utils.retry_utils import is_transient_error, performance_timer


def test_retry_config_backoff_is_capped():
    config = RetryConfig(base_delay=1.0, exponential_base=2.0, max_delay=5.0)
    assert [config.delay_for(attempt) for attempt in range(4)] == [1.0, 2.0, 4.0, 5.0]


def test_with_retry_retries_transient_errors_then_succeeds():
    delays = []
    attempts = {"count": 0}

    @with_retry(RetryConfig(max_retries=3, base_delay=0.5), sleep=delays.append)
    def flaky():
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise RuntimeError("server overloaded")
        return "ok"

    assert flaky() == "ok"
    assert delays == [0.5, 1.0]


def test_with_retry_gives_up_after_max_retries():
    @with_retry(RetryConfig(max_retries=2, base_delay=0.0), sleep=lambda _: None)
    def always_limited():
        raise RuntimeError("429 rate limit")

    with pytest.raises(RuntimeError, match="rate limit"):
        always_limited()


def test_with_retry_does_not_retry_permanent_errors():
    calls = []

    @with_retry(RetryConfig(max_retries=5), sleep=lambda _: None)
    def broken():
        calls.append(1)
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        broken()
    assert len(calls) == 1


def test_is_transient_error():
    assert is_transient_error(Exception("Request timeout"))
    assert not is_transient_error(Exception("invalid model"))


def test_run_concurrently_preserves_order():
    assert run_concurrently(lambda: 1, lambda: 2, lambda: 3) == [1, 2, 3]
    assert run_concurrently() == []


def test_run_concurrently_runs_calls_in_parallel():
    barrier = threading.Barrier(2, timeout=5)

    def meet(value):
        barrier.wait()
        return value

    assert run_concurrently(lambda: meet("a"), lambda: meet("b")) == ["a", "b"]


def test_run_concurrently_raises_first_failure():
    def fail():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        run_concurrently(lambda: 1, fail)


def test_run_concurrently_raises_earliest_failure_not_first_submitted():
    first_failed = threading.Event()

    def slow_failure():
        first_failed.wait(timeout=5)
        time.sleep(0.2)
        raise KeyError("late")

    def fast_failure():
        try:
            raise ValueError("early")
        finally:
            first_failed.set()

    with pytest.raises(ValueError, match="early"):
        run_concurrently(slow_failure, fast_failure)


def test_map_concurrently():
    assert map_concurrently(lambda x: x * 2, range(10), max_workers=3) == [x * 2 for x in range(10)]
    assert map_concurrently(str, []) == []


def test_performance_timer_records_duration():
    stats = {}
    with performance_timer("step", stats):
        pass
    assert len(stats["step"]) == 1
    assert stats["step"][0] >= 0


def test_config_manager_reads_mappings_and_objects():
    class Settings:
        CHUNK_SIZE = "200"
        NLP_WEIGHT = None

    from_object = ConfigManager(Settings)
    assert from_object.get_int("CHUNK_SIZE", 1000) == 200
    assert from_object.get_float("NLP_WEIGHT", 0.6) == 0.6

    from_dict = ConfigManager({"MAX_RETRIES": 7})
    assert from_dict.get_retry_config().max_retries == 7
    assert from_dict.get("MISSING", "fallback") == "fallback"
    assert ConfigManager().get("ANY") is None


def test_config_manager_does_not_cache_defaults():
    manager = ConfigManager({"CHUNK_SIZE": 200})

    assert manager.get("NLP_WEIGHT", 0.6) == 0.6
    assert manager.get("NLP_WEIGHT", 0.9) == 0.9
    assert manager.get("NLP_WEIGHT") is None
    assert manager.get("CHUNK_SIZE", 1000) == 200
    assert manager.get("CHUNK_SIZE", 5) == 200
