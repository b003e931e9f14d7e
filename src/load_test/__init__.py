"""Load test package initialization."""
from .models import (
    CallError,
    CallOutcome,
    ComparisonResult,
    ConnectionMode,
    MetricComparison,
    PerformanceReport,
    RunConfig,
    StrategyVerdict,
)
from .constants import LoadTestConstants
from .exceptions import CallFailure, LoadTestError, MissingEndpointConfigError, UnknownPatternError
from .query_patterns import QueryPattern, QueryPatternResolver, fixed_size_pattern
from .metrics_accumulator import RunStats
from .latency_analyzer import LatencyAnalyzer
from .query_client import QueryClient, RequestSessionManager
from .connection_strategy import ConnectionStrategy, FreshConnectionStrategy, SharedConnectionStrategy
from .request_executor import RequestExecutor
from .batch_dispatcher import BatchDispatcher
from .strategy_comparator import StrategyComparator
from .result_exporter import ResultExporter
from .load_tester import LoadTester, query_client_factory

__all__ = [
    'CallError',
    'CallOutcome',
    'ComparisonResult',
    'ConnectionMode',
    'MetricComparison',
    'PerformanceReport',
    'RunConfig',
    'StrategyVerdict',
    'LoadTestConstants',
    'CallFailure',
    'LoadTestError',
    'MissingEndpointConfigError',
    'UnknownPatternError',
    'QueryPattern',
    'QueryPatternResolver',
    'fixed_size_pattern',
    'RunStats',
    'LatencyAnalyzer',
    'QueryClient',
    'RequestSessionManager',
    'ConnectionStrategy',
    'FreshConnectionStrategy',
    'SharedConnectionStrategy',
    'RequestExecutor',
    'BatchDispatcher',
    'StrategyComparator',
    'ResultExporter',
    'LoadTester',
    'query_client_factory',
]
