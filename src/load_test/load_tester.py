"""Main class for running query endpoint load tests."""
import logging
from typing import Callable, Dict, Optional, Union

from .batch_dispatcher import BatchDispatcher
from .connection_strategy import ClientFactory, build_strategy
from .constants import LoadTestConstants
from .exceptions import MissingEndpointConfigError
from .latency_analyzer import LatencyAnalyzer
from .metrics_accumulator import RunStats
from .models import ComparisonResult, ConnectionMode, PerformanceReport, RunConfig
from .query_client import QueryClient
from .query_patterns import QueryPatternResolver
from .request_executor import RequestExecutor, Stopwatch
from .strategy_comparator import StrategyComparator


# Configure logging
logger = logging.getLogger(__name__)

LoadTestResult = Union[PerformanceReport, ComparisonResult]


def query_client_factory(
    endpoint_url: str,
    function_path: str = LoadTestConstants.DEFAULT_QUERY_FUNCTION,
    size_argument: str = LoadTestConstants.DEFAULT_SIZE_ARGUMENT,
    timeout: Optional[float] = LoadTestConstants.DEFAULT_CALL_TIMEOUT,
    max_retries: int = LoadTestConstants.DEFAULT_MAX_RETRIES,
) -> ClientFactory:
    """
    Build a factory producing QueryClients for one endpoint.

    Raises:
        MissingEndpointConfigError: If no endpoint URL is given.
    """
    if not endpoint_url:
        raise MissingEndpointConfigError(
            "Query endpoint URL is not configured (set LOAD_TEST_CONVEX_URL or NEXT_PUBLIC_CONVEX_URL)"
        )

    def factory() -> QueryClient:
        return QueryClient(endpoint_url, function_path, size_argument, timeout, max_retries)

    return factory


class LoadTester:
    """Validates a RunConfig and runs it under the selected connection mode(s)."""

    def __init__(
        self,
        client_factory: Optional[ClientFactory],
        resolver: Optional[QueryPatternResolver] = None,
        error_sample_size: int = LoadTestConstants.DEFAULT_ERROR_SAMPLE_SIZE,
        comparator: Optional[StrategyComparator] = None,
        stopwatch_factory: Callable[[], Stopwatch] = Stopwatch,
        dispatcher_options: Optional[Dict] = None,
    ):
        self.client_factory = client_factory
        self.resolver = resolver or QueryPatternResolver()
        self.error_sample_size = error_sample_size
        self.comparator = comparator or StrategyComparator()
        self.stopwatch_factory = stopwatch_factory
        self.dispatcher_options = dispatcher_options or {}
        self.last_stats: Dict[ConnectionMode, RunStats] = {}

    def validate(self, config: RunConfig) -> None:
        """
        Check configuration-level preconditions before any call is issued.

        Raises:
            UnknownPatternError: If the pattern is not registered.
            MissingEndpointConfigError: If no client factory is configured.
        """
        self.resolver.get(config.pattern)
        if self.client_factory is None:
            raise MissingEndpointConfigError("No query endpoint configured")

    def run(self, config: RunConfig) -> LoadTestResult:
        """
        Run the load test described by `config`.

        Returns:
            A PerformanceReport for shared/fresh mode, a ComparisonResult for both.
        """
        self.validate(config)
        self.last_stats = {}
        pattern = self.resolver.get(config.pattern)
        logger.info(
            f"Load test: pattern={pattern.name}, total_calls={config.total_calls}, "
            f"concurrency={config.concurrency}, duration={config.duration_seconds}s, "
            f"mode={config.connection_mode.value}"
        )

        if config.connection_mode == ConnectionMode.BOTH:
            return self.comparator.run(lambda mode: self.run_strategy(config, mode))
        return self.run_strategy(config, config.connection_mode)

    def run_strategy(self, config: RunConfig, mode: ConnectionMode) -> PerformanceReport:
        """Run the workload under a single connection strategy with its own accumulator."""
        strategy = build_strategy(mode, self.client_factory)
        stats = RunStats(self.error_sample_size)
        try:
            dispatcher = BatchDispatcher(
                config,
                self.resolver,
                RequestExecutor(strategy, self.stopwatch_factory),
                **self.dispatcher_options,
            )
            dispatcher.run(stats)
        finally:
            strategy.close()

        self.last_stats[mode] = stats
        report = LatencyAnalyzer.build_report(stats)
        logger.info(
            f"{mode.value} run complete: {report.total_calls} calls, "
            f"{report.success_rate:.1f}% success, avg latency {report.avg_latency:.2f}ms"
        )
        return report
