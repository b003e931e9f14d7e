"""Unit tests for batched call dispatch."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from src.load_test import (
    BatchDispatcher,
    ConnectionMode,
    QueryPatternResolver,
    RequestExecutor,
    RunConfig,
    RunStats,
    UnknownPatternError,
)
from src.load_test.connection_strategy import SharedConnectionStrategy
from ..test_const import CONCURRENCY, TOTAL_CALLS


class InFlightTracker:
    """Records call start/end events and the peak number of calls in flight."""

    def __init__(self, hold_seconds: float = 0.005):
        self.hold_seconds = hold_seconds
        self.events = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, size: int) -> None:
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            self.events.append(("start", size))
        time.sleep(self.hold_seconds)
        with self._lock:
            self.in_flight -= 1
            self.events.append(("end", size))


def make_dispatcher(config, resolver, builder, stopwatch, **kwargs):
    strategy = SharedConnectionStrategy(builder.factory())
    executor = RequestExecutor(strategy, stopwatch_factory=stopwatch)
    return BatchDispatcher(config, resolver, executor, **kwargs)


class TestPlanBatchSizes:
    """Test partitioning of call counts into batches."""

    @pytest.mark.parametrize("total,concurrency,expected", [
        (50, 10, [10, 10, 10, 10, 10]),
        (23, 10, [10, 10, 3]),
        (3, 10, [3]),
        (1, 1, [1]),
        (0, 5, []),
    ])
    def test_plan(self, total, concurrency, expected):
        """Test batch sizes sum to the total and never exceed concurrency."""
        sizes = BatchDispatcher.plan_batch_sizes(total, concurrency)
        assert sizes == expected
        assert sum(sizes) == total
        assert all(size <= concurrency for size in sizes)


class TestBatchDispatcher:
    """Test the dispatch loop for count- and duration-based runs."""

    def test_issues_exactly_total_calls(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test a count-based run issues exactly N calls in ceil(N/C) batches."""
        config = RunConfig(pattern="indexed", total_calls=23, concurrency=CONCURRENCY)
        dispatcher = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch())

        stats = dispatcher.run()

        assert stats.total_calls == 23
        assert stats.batches_completed == 3
        assert sorted(fake_client_builder.sizes) == list(range(1, 24))
        assert stats.started_at is not None
        assert stats.finished_at >= stats.started_at

    def test_call_indices_are_one_based(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test recorded outcomes carry indices 1..N."""
        config = RunConfig(pattern="indexed", total_calls=TOTAL_CALLS, concurrency=CONCURRENCY)
        stats = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run()
        assert sorted(o.index for o in stats.samples()) == list(range(1, TOTAL_CALLS + 1))

    def test_mixed_pattern_sizes(self, fake_client_builder, fixed_stopwatch):
        """Test the mixed pattern feeds sizes by call position."""
        config = RunConfig(pattern="mixed", total_calls=10, concurrency=1)
        make_dispatcher(config, QueryPatternResolver(), fake_client_builder, fixed_stopwatch()).run()
        assert fake_client_builder.sizes == [1, 5, 10, 25, 50, 1, 5, 10, 25, 50]

    def test_batches_never_overlap(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test no call of a batch starts before every call of the previous batch ended."""
        tracker = InFlightTracker()
        fake_client_builder.with_hook(tracker)
        concurrency = 4
        config = RunConfig(pattern="indexed", total_calls=14, concurrency=concurrency)

        make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run()

        assert tracker.peak <= concurrency
        position = {event: i for i, event in enumerate(tracker.events)}
        for size in range(concurrency + 1, 15):
            batch_start = ((size - 1) // concurrency) * concurrency
            previous = range(batch_start - concurrency + 1, batch_start + 1)
            assert all(position[("end", prev)] < position[("start", size)] for prev in previous)

    def test_concurrency_one_is_sequential(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test concurrency 1 runs calls strictly one after another."""
        tracker = InFlightTracker(hold_seconds=0)
        fake_client_builder.with_hook(tracker)
        config = RunConfig(pattern="indexed", total_calls=5, concurrency=1)

        make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run()

        assert tracker.peak == 1
        assert fake_client_builder.sizes == [1, 2, 3, 4, 5]

    def test_delay_between_batches(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test the inter-batch delay is applied between batches only."""
        sleep = MagicMock()
        config = RunConfig(pattern="indexed", total_calls=30, concurrency=CONCURRENCY, delay_ms=250)

        make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch(), sleep=sleep).run()

        assert sleep.call_count == 2
        sleep.assert_called_with(0.25)

    def test_no_delay_by_default(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test no sleep happens when delay is zero."""
        sleep = MagicMock()
        config = RunConfig(pattern="indexed", total_calls=30, concurrency=CONCURRENCY)

        make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch(), sleep=sleep).run()

        sleep.assert_not_called()

    def test_duration_mode_ignores_total(self, fake_client_builder, fixed_stopwatch, manual_clock):
        """Test a duration-based run issues full batches until the window closes."""
        fake_client_builder.with_hook(lambda size: manual_clock.advance(0.1))
        sleep = MagicMock()
        config = RunConfig(pattern="small", total_calls=0, concurrency=4,
                           duration_seconds=1.0, delay_ms=500)

        stats = make_dispatcher(config, QueryPatternResolver(), fake_client_builder, fixed_stopwatch(),
                                clock=manual_clock, sleep=sleep).run()

        assert stats.batches_completed == 3
        assert stats.total_calls == 12
        assert stats.elapsed_seconds == pytest.approx(1.2)
        sleep.assert_not_called()

    def test_zero_calls(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test a count-based run with zero calls issues nothing."""
        config = RunConfig(pattern="indexed", total_calls=0, concurrency=CONCURRENCY)
        stats = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run()
        assert stats.total_calls == 0
        assert stats.batches_completed == 0
        assert fake_client_builder.sizes == []

    def test_unknown_pattern_issues_nothing(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test an unknown pattern fails before any call is made."""
        config = RunConfig(pattern="gigantic", total_calls=10, concurrency=CONCURRENCY)
        dispatcher = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch())

        with pytest.raises(UnknownPatternError):
            dispatcher.run()
        assert fake_client_builder.sizes == []

    def test_failures_do_not_abort(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test failing calls are recorded and the run continues."""
        fake_client_builder.failing("boom", lambda size, invocation: size % 2 == 0)
        config = RunConfig(pattern="indexed", total_calls=20, concurrency=CONCURRENCY,
                           connection_mode=ConnectionMode.SHARED)

        stats = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run()

        assert stats.total_calls == 20
        assert stats.success_count == 10
        assert stats.failure_count == 10

    def test_feeds_given_stats(self, fake_client_builder, fixed_stopwatch, indexed_resolver):
        """Test the dispatcher records into a provided accumulator."""
        stats = RunStats(error_sample_size=1)
        config = RunConfig(pattern="indexed", total_calls=3, concurrency=CONCURRENCY)
        result = make_dispatcher(config, indexed_resolver, fake_client_builder, fixed_stopwatch()).run(stats)
        assert result is stats
        assert stats.total_calls == 3
