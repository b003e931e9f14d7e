"""Compares the shared and fresh connection strategies on the same workload."""
import logging
import time
from typing import Callable, List, Optional

from .constants import LoadTestConstants
from .models import ComparisonResult, ConnectionMode, MetricComparison, PerformanceReport, StrategyVerdict


# Configure logging
logger = logging.getLogger(__name__)

# Runs the configured workload under one strategy and returns its report
SubRun = Callable[[ConnectionMode], PerformanceReport]

# (attribute, display name, unit, lower is better)
COMPARED_METRICS = [
    ("avg_latency", "Average Latency", "ms", True),
    ("median_latency", "Median Latency", "ms", True),
    ("p95_latency", "P95 Latency", "ms", True),
    ("p99_latency", "P99 Latency", "ms", True),
    ("min_latency", "Min Latency", "ms", True),
    ("max_latency", "Max Latency", "ms", True),
    ("qps", "Queries Per Second", "QPS", False),
    ("duration", "Total Duration", "s", True),
]


def improvement_pct(winner: float, other: float) -> float:
    """Gap between the winning and non-winning values, relative to the non-winner."""
    if other == 0:
        return 0.0
    return abs(other - winner) / abs(other) * 100


def compare_values(shared: float, fresh: float, lower_is_better: bool):
    """
    Pick the better strategy for one metric.

    Returns:
        Tuple of (winner or None on a tie, improvement percentage).
    """
    if shared == fresh:
        return None, 0.0
    shared_wins = shared < fresh if lower_is_better else shared > fresh
    if shared_wins:
        return ConnectionMode.SHARED, improvement_pct(shared, fresh)
    return ConnectionMode.FRESH, improvement_pct(fresh, shared)


class StrategyComparator:
    """Runs one workload under both strategies and derives a verdict."""

    def __init__(
        self,
        pause_seconds: float = LoadTestConstants.DEFAULT_COMPARISON_PAUSE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.pause_seconds = pause_seconds
        self.sleep = sleep

    def run(self, sub_run: SubRun) -> ComparisonResult:
        """
        Run the shared sub-run, pause, then the fresh sub-run.

        The two sub-runs never overlap so they do not compete for threads
        or sockets while being measured.
        """
        logger.info("Testing: SHARED CLIENT (connection reuse)")
        shared = sub_run(ConnectionMode.SHARED)

        if self.pause_seconds > 0:
            logger.info(f"Waiting {self.pause_seconds:g} seconds before next test...")
            self.sleep(self.pause_seconds)

        logger.info("Testing: FRESH CLIENT PER REQUEST (no connection reuse)")
        fresh = sub_run(ConnectionMode.FRESH)
        return self.compare(shared, fresh)

    @staticmethod
    def successful_strategy(shared: PerformanceReport, fresh: PerformanceReport) -> Optional[ConnectionMode]:
        """The only strategy with successful calls, or None when both or neither had any."""
        if shared.success_count and not fresh.success_count:
            return ConnectionMode.SHARED
        if fresh.success_count and not shared.success_count:
            return ConnectionMode.FRESH
        return None

    @staticmethod
    def compare(shared: PerformanceReport, fresh: PerformanceReport) -> ComparisonResult:
        """
        Derive the metric table and verdict from two finished reports.

        A report without successful calls has zeroed latencies, so it is never
        compared on value: the strategy that had successes wins every metric
        with a 0.0 % improvement, and neither wins when both failed entirely.
        """
        comparable = shared.success_count > 0 and fresh.success_count > 0
        survivor = StrategyComparator.successful_strategy(shared, fresh)

        def verdict_for(shared_value, fresh_value, lower_is_better):
            if comparable:
                return compare_values(shared_value, fresh_value, lower_is_better)
            return survivor, 0.0

        metrics: List[MetricComparison] = []
        for attribute, name, unit, lower_is_better in COMPARED_METRICS:
            shared_value = getattr(shared, attribute)
            fresh_value = getattr(fresh, attribute)
            winner, pct = verdict_for(shared_value, fresh_value, lower_is_better)
            metrics.append(MetricComparison(
                name=name,
                unit=unit,
                shared=shared_value,
                fresh=fresh_value,
                lower_is_better=lower_is_better,
                winner=winner,
                difference=abs(shared_value - fresh_value),
                difference_pct=pct,
            ))

        latency_winner, latency_pct = verdict_for(shared.avg_latency, fresh.avg_latency, True)
        throughput_winner, throughput_pct = verdict_for(shared.qps, fresh.qps, False)

        if comparable:
            recommendation = StrategyComparator._recommend(
                latency_winner, latency_pct, throughput_winner, throughput_pct
            )
        else:
            if survivor is None:
                logger.warning("Neither strategy had a successful call; no comparison possible")
            recommendation = survivor

        verdict = StrategyVerdict(
            latency_winner=latency_winner,
            latency_improvement_pct=latency_pct,
            throughput_winner=throughput_winner,
            throughput_improvement_pct=throughput_pct,
            recommendation=recommendation,
        )
        logger.info(
            f"Comparison verdict: latency winner={latency_winner.value if latency_winner else 'tie'} "
            f"({latency_pct:.1f}%), throughput winner="
            f"{throughput_winner.value if throughput_winner else 'tie'} ({throughput_pct:.1f}%)"
        )
        return ComparisonResult(shared=shared, fresh=fresh, verdict=verdict, metrics=metrics)

    @staticmethod
    def _recommend(
        latency_winner: Optional[ConnectionMode],
        latency_pct: float,
        throughput_winner: Optional[ConnectionMode],
        throughput_pct: float,
    ) -> Optional[ConnectionMode]:
        threshold = LoadTestConstants.SIGNIFICANT_IMPROVEMENT_PCT
        if latency_winner is not None and latency_pct > threshold:
            return latency_winner
        if throughput_winner is not None and throughput_pct > threshold:
            return throughput_winner
        return None
