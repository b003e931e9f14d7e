"""Load test runner to orchestrate a command-line invocation."""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from src.const import EXIT_CONFIG_ERROR, EXIT_OK
from src.shared.config import Config
from src.shared.logging import LoggingManager

from .exceptions import LoadTestError
from .load_tester import LoadTester, query_client_factory
from .models import ComparisonResult, ConnectionMode, RunConfig
from .query_patterns import QueryPatternResolver, fixed_size_pattern
from .result_exporter import ResultExporter
from .strategy_comparator import StrategyComparator


logger = logging.getLogger(__name__)


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load test a remote query endpoint with controlled concurrency.",
    )
    parser.add_argument("--pattern", default=config.default_pattern,
                        help=f"query pattern ({', '.join(QueryPatternResolver().names)})")
    parser.add_argument("--size", type=int,
                        help="fixed result size per call; overrides --pattern")
    parser.add_argument("--total-calls", type=int, default=config.default_total_calls,
                        help="number of calls to issue (ignored when --duration > 0)")
    parser.add_argument("--concurrency", type=int, default=config.default_concurrency,
                        help="calls launched per batch")
    parser.add_argument("--duration", type=float, default=0,
                        help="run for N seconds instead of a fixed call count")
    parser.add_argument("--delay-ms", type=int, default=0,
                        help="pause between batches (count-based runs only)")
    parser.add_argument("--mode", default=ConnectionMode.SHARED.value,
                        choices=[mode.value for mode in ConnectionMode] + ["new"],
                        help="connection strategy; 'both' compares shared and fresh")
    parser.add_argument("--format", dest="output_format", choices=["text", "json"], default="text")
    parser.add_argument("--output", type=Path, help="also write the JSON report to this file")
    parser.add_argument("--samples-csv", type=Path, help="write per-call samples to this CSV file")
    parser.add_argument("--log-level", default=config.log_level)
    return parser


class LoadTestRunner:
    """Orchestrates a load test run and manages output."""

    def __init__(self, config: Optional[Config] = None, load_tester: Optional[LoadTester] = None,
                 stdout: TextIO = sys.stdout):
        self.config = config or Config()
        self.load_tester = load_tester
        self.stdout = stdout

    def _build_load_tester(self) -> LoadTester:
        factory = query_client_factory(
            self.config.convex_url,
            self.config.query_function,
            self.config.size_argument,
            self.config.call_timeout,
            self.config.max_retries,
        )
        return LoadTester(
            factory,
            error_sample_size=self.config.error_sample_size,
            comparator=StrategyComparator(pause_seconds=self.config.comparison_pause),
        )

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the complete load test process and return the process exit code."""
        args = build_parser(self.config).parse_args(argv)
        LoggingManager.setup_logging(args.log_level, self.config.library_log_levels)

        try:
            custom_pattern = fixed_size_pattern(args.size) if args.size is not None else None
            run_config = RunConfig(
                pattern=custom_pattern.key if custom_pattern else args.pattern,
                total_calls=args.total_calls,
                concurrency=args.concurrency,
                duration_seconds=args.duration,
                connection_mode=ConnectionMode(args.mode),
                delay_ms=args.delay_ms,
            )
            load_tester = self.load_tester or self._build_load_tester()
            if custom_pattern:
                load_tester.resolver.register(custom_pattern)
            result = load_tester.run(run_config)
        except (LoadTestError, ValueError) as e:
            logger.error(f"Load test failed: {e}")
            return EXIT_CONFIG_ERROR

        if args.output_format == "json":
            self.stdout.write(ResultExporter.to_json(result) + "\n")
        elif isinstance(result, ComparisonResult):
            self.stdout.write(ResultExporter.render_comparison_text(result) + "\n")
        else:
            self.stdout.write(ResultExporter.render_text(result) + "\n")

        if args.output:
            ResultExporter.save_json(result, args.output)
        if args.samples_csv:
            ResultExporter.save_samples_to_csv(load_tester.last_stats, args.samples_csv)

        logger.info("Load test completed successfully!")
        return EXIT_OK
