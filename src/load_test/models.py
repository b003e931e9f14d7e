"""Data models for the load testing system."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .constants import LoadTestConstants


class ConnectionMode(str, Enum):
    """Connection strategy selector."""
    SHARED = "shared"
    FRESH = "fresh"
    BOTH = "both"

    @classmethod
    def _missing_(cls, value):
        # The dashboard API called the per-call strategy "new"
        if isinstance(value, str):
            value = value.lower()
            if value == "new":
                return cls.FRESH
            for member in cls:
                if member.value == value:
                    return member
        return None


@dataclass(frozen=True)
class RunConfig:
    """Configuration for a single load test invocation."""
    pattern: str = LoadTestConstants.DEFAULT_PATTERN
    total_calls: int = LoadTestConstants.DEFAULT_TOTAL_CALLS
    concurrency: int = LoadTestConstants.DEFAULT_CONCURRENCY
    duration_seconds: float = LoadTestConstants.DEFAULT_DURATION_SECONDS
    connection_mode: ConnectionMode = ConnectionMode.SHARED
    delay_ms: int = LoadTestConstants.DEFAULT_DELAY_MS

    def __post_init__(self):
        if self.total_calls < 0:
            raise ValueError(f"total_calls must be >= 0, got {self.total_calls}")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.duration_seconds < 0:
            raise ValueError(f"duration_seconds must be >= 0, got {self.duration_seconds}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if not isinstance(self.connection_mode, ConnectionMode):
            object.__setattr__(self, "connection_mode", ConnectionMode(self.connection_mode))

    @property
    def is_duration_based(self) -> bool:
        return self.duration_seconds > 0


@dataclass(frozen=True)
class CallOutcome:
    """Result of one query invocation."""
    index: int
    success: bool
    size_parameter: int = 0
    latency_ms: Optional[float] = None
    payload_bytes: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def succeeded(cls, index: int, size_parameter: int, latency_ms: float, payload_bytes: int) -> "CallOutcome":
        return cls(
            index=index,
            success=True,
            size_parameter=size_parameter,
            latency_ms=max(0.0, float(latency_ms)),
            payload_bytes=max(0, int(payload_bytes)),
        )

    @classmethod
    def failed(cls, index: int, size_parameter: int, error_message: str) -> "CallOutcome":
        return cls(index=index, success=False, size_parameter=size_parameter, error_message=error_message)


@dataclass(frozen=True)
class CallError:
    """A retained failure sample."""
    index: int
    error: str


@dataclass(frozen=True)
class PerformanceReport:
    """Read-only summary of a finished run."""
    duration: float
    qps: float
    avg_latency: float
    median_latency: float
    p95_latency: float
    p99_latency: float
    min_latency: float
    max_latency: float
    total_mb: float
    success_rate: float
    latency_buckets: Dict[str, int]
    errors: List[CallError] = field(default_factory=list)
    total_calls: int = 0
    success_count: int = 0
    failure_count: int = 0
    total_bytes: int = 0


@dataclass(frozen=True)
class MetricComparison:
    """One metric compared between the shared and fresh strategies."""
    name: str
    unit: str
    shared: float
    fresh: float
    lower_is_better: bool
    winner: Optional[ConnectionMode]
    difference: float
    difference_pct: float


@dataclass(frozen=True)
class StrategyVerdict:
    """Which strategy performed better on latency and throughput."""
    latency_winner: Optional[ConnectionMode]
    latency_improvement_pct: float
    throughput_winner: Optional[ConnectionMode]
    throughput_improvement_pct: float
    recommendation: Optional[ConnectionMode]


@dataclass(frozen=True)
class ComparisonResult:
    """Reports for both connection strategies plus the derived verdict."""
    shared: PerformanceReport
    fresh: PerformanceReport
    verdict: StrategyVerdict
    metrics: List[MetricComparison] = field(default_factory=list)
