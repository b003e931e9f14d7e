"""Analyzes and computes latency statistics."""
import logging
import math
from typing import Sequence

import numpy as np

from .constants import LoadTestConstants
from .metrics_accumulator import RunStats
from .models import PerformanceReport


# Configure logging
logger = logging.getLogger(__name__)


class LatencyAnalyzer:
    """Reduces a finished RunStats to a PerformanceReport."""

    @staticmethod
    def sort_latencies(latencies: Sequence[float]) -> np.ndarray:
        return np.sort(np.asarray(latencies, dtype=float))

    @staticmethod
    def median(sorted_latencies: Sequence[float]) -> float:
        """
        Median of an ascending-sorted sample.

        Even-length samples return the mean of the two central elements.
        """
        n = len(sorted_latencies)
        if n == 0:
            return 0.0
        mid = n // 2
        if n % 2 == 0:
            return (float(sorted_latencies[mid - 1]) + float(sorted_latencies[mid])) / 2
        return float(sorted_latencies[mid])

    @staticmethod
    def percentile_index(percentile: float, n: int) -> int:
        """Nearest-rank index `ceil(P/100 * n) - 1`, clamped to [0, n-1]."""
        if n <= 0:
            return 0
        # multiply before dividing so exact ranks (e.g. 95 * 20 / 100) stay exact
        index = math.ceil(percentile * n / 100) - 1
        return min(max(index, 0), n - 1)

    @classmethod
    def percentile(cls, sorted_latencies: Sequence[float], percentile: float) -> float:
        """
        Nearest-rank percentile of an ascending-sorted sample.

        No interpolation: the result is always one of the recorded values.
        """
        n = len(sorted_latencies)
        if n == 0:
            return 0.0
        return float(sorted_latencies[cls.percentile_index(percentile, n)])

    @classmethod
    def build_report(cls, stats: RunStats) -> PerformanceReport:
        """
        Compute the performance report for a finished run.

        Args:
            stats: Accumulated run statistics.

        Returns:
            PerformanceReport with latency fields set to 0 when nothing succeeded.
        """
        latencies = cls.sort_latencies(stats.latencies())
        duration = stats.elapsed_seconds
        total = stats.total_calls
        successes = stats.success_count

        if total == 0:
            logger.warning("Building report for a run with no calls")

        qps = total / duration if duration > 0 and total > 0 else 0.0
        success_rate = successes / total * 100 if total > 0 else 0.0

        return PerformanceReport(
            duration=duration,
            qps=qps,
            avg_latency=stats.average_latency,
            median_latency=cls.median(latencies),
            p95_latency=cls.percentile(latencies, 95),
            p99_latency=cls.percentile(latencies, 99),
            min_latency=stats.min_latency if stats.min_latency is not None else 0.0,
            max_latency=stats.max_latency if stats.max_latency is not None else 0.0,
            total_mb=stats.sum_bytes / LoadTestConstants.BYTES_PER_MB,
            success_rate=success_rate,
            latency_buckets=stats.latency_buckets,
            errors=stats.errors,
            total_calls=total,
            success_count=successes,
            failure_count=stats.failure_count,
            total_bytes=stats.sum_bytes,
        )
