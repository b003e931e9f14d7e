"""Handles individual call execution and timing."""
import time
import logging
from typing import Callable

from .connection_strategy import ConnectionStrategy
from .models import CallOutcome
from .query_client import measure_payload_bytes


# Configure logging
logger = logging.getLogger(__name__)


class Stopwatch:
    """Wall-clock timer started on construction."""

    def __init__(self):
        self._start = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0


class RequestExecutor:
    """Executes one call through a connection strategy and reports its outcome."""

    def __init__(self, strategy: ConnectionStrategy, stopwatch_factory: Callable[[], Stopwatch] = Stopwatch):
        self.strategy = strategy
        self.stopwatch_factory = stopwatch_factory

    def execute(self, index: int, size: int) -> CallOutcome:
        """
        Invoke the remote query once and measure it.

        Args:
            index: 1-based call number within the run.
            size: Result-size parameter for the query.

        Returns:
            CallOutcome; failures are captured, never raised.
        """
        stopwatch = self.stopwatch_factory()
        try:
            payload = self.strategy.query(size)
            latency_ms = stopwatch.elapsed_ms()
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.debug(f"Call #{index} failed: {message}")
            return CallOutcome.failed(index, size, message)

        return CallOutcome.succeeded(index, size, latency_ms, measure_payload_bytes(payload))
