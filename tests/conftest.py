"""Shared test configuration and fixtures for all tests."""

import threading
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest

from src.load_test import QueryPattern, QueryPatternResolver
from src.load_test.query_patterns import default_patterns
from .test_const import FIXED_LATENCY_MS, MOCK_QUERY_PAYLOAD, TOTAL_CALLS


class FixedStopwatch:
    """Stopwatch that always reports the same latency."""

    def __init__(self, latency_ms: float):
        self.latency_ms = latency_ms

    def elapsed_ms(self) -> float:
        return self.latency_ms


class FakeQueryClientBuilder:
    """Builder for fake query clients that count constructions and calls."""

    def __init__(self):
        self.payload = MOCK_QUERY_PAYLOAD
        self.fail_when: Optional[Callable[[int, int], bool]] = None
        self.error_message = "failed"
        self.on_query: Optional[Callable[[int], None]] = None
        self.clients_created = 0
        self.clients_closed = 0
        self.sizes = []
        self._lock = threading.Lock()

    def with_payload(self, payload):
        self.payload = payload
        return self

    def failing(self, message: str, when: Callable[[int, int], bool]):
        """Fail calls where when(size, invocation_number) is true; invocations count from 1."""
        self.error_message = message
        self.fail_when = when
        return self

    def with_hook(self, hook: Callable[[int], None]):
        self.on_query = hook
        return self

    def _query(self, size: int):
        with self._lock:
            self.sizes.append(size)
            invocation = len(self.sizes)
        if self.on_query is not None:
            self.on_query(size)
        if self.fail_when is not None and self.fail_when(size, invocation):
            raise RuntimeError(self.error_message)
        return self.payload

    def _close(self):
        with self._lock:
            self.clients_closed += 1

    def build(self):
        with self._lock:
            self.clients_created += 1
        client = MagicMock()
        client.query.side_effect = self._query
        client.close.side_effect = self._close
        return client

    def factory(self):
        return self.build


@pytest.fixture
def fake_client_builder():
    """Builder fixture for fake query clients."""
    return FakeQueryClientBuilder()


@pytest.fixture
def fixed_stopwatch():
    """Factory producing stopwatches that report a fixed latency."""
    def make(latency_ms: float = FIXED_LATENCY_MS):
        return lambda: FixedStopwatch(latency_ms)
    return make


@pytest.fixture
def indexed_resolver():
    """Resolver whose 'indexed' pattern maps call index N to size N."""
    patterns = default_patterns() + [
        QueryPattern("indexed", "Indexed", "size equals the 1-based call index",
                     tuple(range(1, TOTAL_CALLS + 1))),
    ]
    return QueryPatternResolver(patterns)


class ManualClock:
    """Clock that only moves when advanced."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self._lock = threading.Lock()

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds

    def __call__(self) -> float:
        with self._lock:
            return self.now


@pytest.fixture
def manual_clock():
    """Manually advanced clock for duration-based runs."""
    return ManualClock()
