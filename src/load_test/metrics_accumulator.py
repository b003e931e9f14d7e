"""Thread-safe accumulation of per-call outcomes for a single run."""
import threading
from typing import Dict, List, Optional

from .constants import LoadTestConstants
from .models import CallError, CallOutcome


class RunStats:
    """Running totals over the CallOutcomes of one run.

    One instance belongs to exactly one run (or one sub-run of a
    comparison). All mutation goes through `record` and the `mark_*`
    methods, which hold an internal lock so concurrent calls in a batch
    never lose updates.
    """

    def __init__(self, error_sample_size: int = LoadTestConstants.DEFAULT_ERROR_SAMPLE_SIZE):
        self._lock = threading.Lock()
        self._error_sample_size = max(0, error_sample_size)

        self.total_calls = 0
        self.success_count = 0
        self.failure_count = 0
        self.sum_latency = 0.0
        self.min_latency: Optional[float] = None
        self.max_latency: Optional[float] = None
        self.sum_bytes = 0
        self.batches_completed = 0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

        self._outcomes: List[CallOutcome] = []
        self._errors: List[CallError] = []
        self._buckets: Dict[str, int] = {name: 0 for name, _, _ in LoadTestConstants.LATENCY_BUCKETS}

    @staticmethod
    def bucket_for(latency_ms: float) -> str:
        """Return the histogram bucket name for a latency, using half-open ranges."""
        for name, lower, upper in LoadTestConstants.LATENCY_BUCKETS:
            if lower <= latency_ms < upper:
                return name
        return LoadTestConstants.LATENCY_BUCKETS[-1][0]

    def record(self, outcome: CallOutcome) -> None:
        """Fold one outcome into the running totals."""
        with self._lock:
            self.total_calls += 1
            if outcome.success:
                latency = outcome.latency_ms or 0.0
                self.success_count += 1
                self.sum_latency += latency
                self.sum_bytes += outcome.payload_bytes or 0
                if self.min_latency is None or latency < self.min_latency:
                    self.min_latency = latency
                if self.max_latency is None or latency > self.max_latency:
                    self.max_latency = latency
                self._outcomes.append(outcome)
                self._buckets[self.bucket_for(latency)] += 1
            else:
                self.failure_count += 1
                if len(self._errors) < self._error_sample_size:
                    self._errors.append(CallError(index=outcome.index, error=outcome.error_message or ""))

    def mark_started(self, timestamp: float) -> None:
        with self._lock:
            self.started_at = timestamp

    def mark_finished(self, timestamp: float) -> None:
        with self._lock:
            self.finished_at = timestamp

    def mark_batch_completed(self) -> None:
        with self._lock:
            self.batches_completed += 1

    @property
    def elapsed_seconds(self) -> float:
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return max(0.0, self.finished_at - self.started_at)

    @property
    def average_latency(self) -> float:
        with self._lock:
            return self.sum_latency / self.success_count if self.success_count else 0.0

    @property
    def errors(self) -> List[CallError]:
        with self._lock:
            return list(self._errors)

    @property
    def latency_buckets(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._buckets)

    def samples(self) -> List[CallOutcome]:
        """Successful outcomes in recording order."""
        with self._lock:
            return list(self._outcomes)

    def latencies(self) -> List[float]:
        with self._lock:
            return [outcome.latency_ms or 0.0 for outcome in self._outcomes]
