"""Constants for the load testing system."""
from typing import Dict, List, Tuple


class LoadTestConstants:
    """Centralized constants for load test configuration."""
    DEFAULT_PATTERN = "medium"
    DEFAULT_TOTAL_CALLS = 100
    DEFAULT_CONCURRENCY = 10
    DEFAULT_DURATION_SECONDS = 0  # 0 = stop after total calls
    DEFAULT_DELAY_MS = 0
    DEFAULT_CALL_TIMEOUT = 30  # seconds, 0 = no timeout
    DEFAULT_MAX_RETRIES = 0
    DEFAULT_ERROR_SAMPLE_SIZE = 5
    DEFAULT_COMPARISON_PAUSE = 2.0  # seconds between shared and fresh sub-runs

    # Convex HTTP query API
    DEFAULT_QUERY_FUNCTION = "neighborhoods:listNeighborhoods"
    DEFAULT_SIZE_ARGUMENT = "limit"
    QUERY_API_PATH = "/api/query"
    RETRY_STATUS_CODES = [429, 500, 502, 503, 504]

    # Latency histogram: (name, lower bound ms, upper bound ms), half-open [lower, upper)
    LATENCY_BUCKETS: List[Tuple[str, float, float]] = [
        ("0-50ms", 0.0, 50.0),
        ("50-100ms", 50.0, 100.0),
        ("100-200ms", 100.0, 200.0),
        ("200-500ms", 200.0, 500.0),
        ("500ms+", 500.0, float("inf")),
    ]

    # Fixed result sizes per named pattern
    PATTERN_SIZES: Dict[str, int] = {
        "small": 1,
        "medium": 10,
        "large": 50,
        "xlarge": 100,
        "xxlarge": 250,
        "huge": 500,
        "massive": 1000,
    }
    MIXED_PATTERN = "mixed"
    MIXED_SIZES: List[int] = [1, 5, 10, 25, 50]
    CUSTOM_PATTERN = "custom"  # ad-hoc fixed size from --size

    # Comparison verdict
    SIGNIFICANT_IMPROVEMENT_PCT = 5.0

    # Free tier limits used for the impact estimate in text reports
    FREE_TIER_BANDWIDTH_MB = 1024
    FREE_TIER_FUNCTION_CALLS = 1_000_000
    SECONDS_PER_MONTH = 30 * 24 * 3600

    BYTES_PER_MB = 1024 * 1024
