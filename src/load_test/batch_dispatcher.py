"""Drives calls in concurrency-bounded batches."""
import logging
import time
import concurrent.futures
from typing import Callable, List, Optional

from .metrics_accumulator import RunStats
from .models import RunConfig
from .query_patterns import QueryPatternResolver
from .request_executor import RequestExecutor


# Configure logging
logger = logging.getLogger(__name__)


class BatchDispatcher:
    """Runs a workload as a sequence of joined batches.

    Every batch is submitted to a thread pool sized to the configured
    concurrency and fully drained before the next batch is launched, so at
    most `concurrency` calls are ever in flight.
    """

    def __init__(
        self,
        config: RunConfig,
        resolver: QueryPatternResolver,
        request_executor: RequestExecutor,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.resolver = resolver
        self.request_executor = request_executor
        self.clock = clock
        self.sleep = sleep

    @staticmethod
    def plan_batch_sizes(total_calls: int, concurrency: int) -> List[int]:
        """Partition a call count into batches of at most `concurrency`."""
        sizes = []
        remaining = total_calls
        while remaining > 0:
            size = min(concurrency, remaining)
            sizes.append(size)
            remaining -= size
        return sizes

    def _next_batch_size(self, issued: int) -> int:
        if self.config.is_duration_based:
            return self.config.concurrency
        return min(self.config.concurrency, self.config.total_calls - issued)

    def _should_continue(self, stats: RunStats, issued: int) -> bool:
        if self.config.is_duration_based:
            return self.clock() - stats.started_at < self.config.duration_seconds
        return issued < self.config.total_calls

    def _run_call(self, stats: RunStats, index: int) -> None:
        size = self.resolver.resolve(self.config.pattern, index - 1)
        stats.record(self.request_executor.execute(index, size))

    def _log_progress(self, stats: RunStats) -> None:
        elapsed = self.clock() - stats.started_at
        qps = stats.total_calls / elapsed if elapsed > 0 else 0.0
        logger.info(
            f"Calls: {stats.total_calls} | Elapsed: {elapsed:.1f}s | QPS: {qps:.1f} | "
            f"Avg Latency: {stats.average_latency:.0f}ms | "
            f"Success: {stats.success_count} | Failed: {stats.failure_count}"
        )

    def run(self, stats: Optional[RunStats] = None) -> RunStats:
        """
        Issue the configured workload and return the finished statistics.

        Args:
            stats: Accumulator to feed; a new one is created when omitted.

        Returns:
            The RunStats with start and end timestamps set.
        """
        stats = stats if stats is not None else RunStats()
        # Validate before anything is issued
        self.resolver.get(self.config.pattern)

        issued = 0
        stats.mark_started(self.clock())
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.concurrency) as executor:
            while self._should_continue(stats, issued):
                batch_size = self._next_batch_size(issued)
                futures = [
                    executor.submit(self._run_call, stats, issued + offset + 1)
                    for offset in range(batch_size)
                ]
                concurrent.futures.wait(futures)
                for future in futures:
                    # _run_call absorbs call failures; anything here is a bug
                    future.result()
                issued += batch_size
                stats.mark_batch_completed()
                self._log_progress(stats)

                if (self.config.delay_ms > 0 and not self.config.is_duration_based
                        and self._should_continue(stats, issued)):
                    self.sleep(self.config.delay_ms / 1000)

        stats.mark_finished(self.clock())
        logger.info(f"Run finished: {stats.total_calls} calls in {stats.batches_completed} batches")
        return stats
