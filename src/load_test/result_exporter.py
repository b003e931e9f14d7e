"""Handles exporting load test results to various formats."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import pandas as pd

from .constants import LoadTestConstants
from .metrics_accumulator import RunStats
from .models import ComparisonResult, ConnectionMode, PerformanceReport


# Configure logging
logger = logging.getLogger(__name__)

SEPARATOR = "=" * 60
WIDE_SEPARATOR = "=" * 80


class ResultExporter:
    """Handles exporting load test results to various formats."""

    @staticmethod
    def report_to_dict(report: PerformanceReport) -> Dict[str, Any]:
        """Serialize a report using the public field names."""
        return {
            "duration": report.duration,
            "qps": report.qps,
            "avgLatency": report.avg_latency,
            "medianLatency": report.median_latency,
            "p95Latency": report.p95_latency,
            "p99Latency": report.p99_latency,
            "minLatency": report.min_latency,
            "maxLatency": report.max_latency,
            "totalMB": report.total_mb,
            "successRate": report.success_rate,
            "latencyBuckets": dict(report.latency_buckets),
            "errors": [{"index": err.index, "error": err.error} for err in report.errors],
        }

    @staticmethod
    def comparison_to_dict(result: ComparisonResult) -> Dict[str, Any]:
        verdict = result.verdict

        def mode_value(mode):
            return mode.value if mode is not None else None

        return {
            "shared": ResultExporter.report_to_dict(result.shared),
            "fresh": ResultExporter.report_to_dict(result.fresh),
            "verdict": {
                "latencyWinner": mode_value(verdict.latency_winner),
                "latencyImprovementPct": verdict.latency_improvement_pct,
                "throughputWinner": mode_value(verdict.throughput_winner),
                "throughputImprovementPct": verdict.throughput_improvement_pct,
                "recommendation": mode_value(verdict.recommendation),
            },
        }

    @staticmethod
    def to_dict(result: Union[PerformanceReport, ComparisonResult]) -> Dict[str, Any]:
        if isinstance(result, ComparisonResult):
            return ResultExporter.comparison_to_dict(result)
        return ResultExporter.report_to_dict(result)

    @staticmethod
    def to_json(result: Union[PerformanceReport, ComparisonResult]) -> str:
        return json.dumps(ResultExporter.to_dict(result), indent=2)

    @staticmethod
    def save_json(result: Union[PerformanceReport, ComparisonResult], output_path: Union[Path, str]) -> None:
        """
        Save a report or comparison as a JSON document.

        Args:
            result: Report or comparison to save.
            output_path: Path to save JSON.
        """
        Path(output_path).write_text(ResultExporter.to_json(result), encoding="utf-8")
        logger.info(f"JSON saved: {output_path}")

    @staticmethod
    def save_samples_to_csv(stats_by_mode: Mapping[ConnectionMode, RunStats], output_path: Union[Path, str]) -> None:
        """
        Save per-call samples of successful calls to CSV for spreadsheet analysis.

        Args:
            stats_by_mode: Finished run statistics keyed by connection strategy.
            output_path: Path to save CSV.
        """
        rows = []
        for mode, stats in stats_by_mode.items():
            for outcome in stats.samples():
                rows.append({
                    "index": outcome.index,
                    "size_parameter": outcome.size_parameter,
                    "latency_ms": outcome.latency_ms,
                    "payload_bytes": outcome.payload_bytes,
                    "strategy": mode.value,
                })

        if not rows:
            logger.warning("No successful calls available for samples CSV export")
            return

        df = pd.DataFrame(rows).sort_values(by=["strategy", "index"])
        df.to_csv(output_path, index=False)
        logger.info(f"Samples saved to CSV: {output_path}")

    @staticmethod
    def render_text(report: PerformanceReport, title: str = "Load Test Results") -> str:
        """Render a human-readable report."""
        lines: List[str] = [f"{title}", ""]
        lines.append("Performance Metrics:")
        lines.append(f"  Total Duration: {report.duration:.2f}s")
        lines.append(f"  Queries Per Second: {report.qps:.2f}")
        lines.append(f"  Average Latency: {report.avg_latency:.2f}ms")
        lines.append(f"  Median Latency: {report.median_latency:.0f}ms")
        lines.append(f"  P95 Latency: {report.p95_latency:.0f}ms")
        lines.append(f"  P99 Latency: {report.p99_latency:.0f}ms")
        lines.append(f"  Min Latency: {report.min_latency:.0f}ms")
        lines.append(f"  Max Latency: {report.max_latency:.0f}ms")

        lines.append("")
        lines.append("Latency Distribution:")
        for bucket, count in report.latency_buckets.items():
            percentage = count / report.success_count * 100 if report.success_count else 0.0
            bar = "#" * int(percentage // 2)
            lines.append(f"  {bucket:<12} {bar} {percentage:.1f}% ({count})")

        failure_rate = 100 - report.success_rate if report.total_calls else 0.0
        lines.append("")
        lines.append("Query Statistics:")
        lines.append(f"  Total Queries: {report.total_calls}")
        lines.append(f"  Successful: {report.success_count} ({report.success_rate:.1f}%)")
        lines.append(f"  Failed: {report.failure_count} ({failure_rate:.1f}%)")

        transfer_rate = report.total_mb / report.duration if report.duration > 0 else 0.0
        avg_kb = report.total_bytes / report.success_count / 1024 if report.success_count else 0.0
        lines.append("")
        lines.append("Bandwidth Usage:")
        lines.append(f"  Total Data Transferred: {report.total_mb:.2f} MB")
        lines.append(f"  Transfer Rate: {transfer_rate:.2f} MB/s")
        lines.append(f"  Average per Query: {avg_kb:.2f} KB")

        lines.append("")
        lines.extend(ResultExporter._free_tier_lines(report))

        if report.errors:
            lines.append("")
            lines.append("Errors:")
            for err in report.errors:
                lines.append(f"  Query #{err.index}: {err.error}")
            hidden = report.failure_count - len(report.errors)
            if hidden > 0:
                lines.append(f"  ... and {hidden} more errors")

        lines.append("")
        lines.append(SEPARATOR)
        return "\n".join(lines)

    @staticmethod
    def _free_tier_lines(report: PerformanceReport) -> List[str]:
        bandwidth_pct = report.total_mb / LoadTestConstants.FREE_TIER_BANDWIDTH_MB * 100
        calls_pct = report.total_calls / LoadTestConstants.FREE_TIER_FUNCTION_CALLS * 100
        lines = [
            "Free Tier Impact:",
            f"  Database Bandwidth: {bandwidth_pct:.3f}% of 1 GB/month limit",
            f"  Function Calls: {calls_pct:.3f}% of 1M/month limit",
        ]
        if report.duration > 0:
            scale = LoadTestConstants.SECONDS_PER_MONTH / report.duration
            lines.append("  Estimated monthly impact (if sustained):")
            lines.append(f"    Queries: {report.total_calls * scale / 1_000_000:.1f}M/month")
            lines.append(f"    Bandwidth: {report.total_mb * scale / 1024:.1f} GB/month")
        return lines

    @staticmethod
    def render_comparison_text(result: ComparisonResult) -> str:
        """Render both reports followed by the metric table and summary."""
        lines: List[str] = [
            ResultExporter.render_text(result.shared, "SHARED CLIENT (Connection Reuse) Results"),
            "",
            ResultExporter.render_text(result.fresh, "FRESH CLIENT PER REQUEST (No Connection Reuse) Results"),
            "",
            "COMPARISON: Shared Client vs Fresh Client Per Request",
            WIDE_SEPARATOR,
            "",
        ]
        for metric in result.metrics:
            if metric.winner is None:
                outcome = "No difference"
            elif metric.winner == ConnectionMode.SHARED:
                outcome = "Shared Client Better"
            else:
                outcome = "Fresh Client Better"
            lines.append(f"{metric.name}:")
            lines.append(f"  Shared Client:      {metric.shared:.2f} {metric.unit}")
            lines.append(f"  Fresh Client/Call:  {metric.fresh:.2f} {metric.unit}")
            lines.append(f"  Difference:         {metric.difference:.2f} {metric.unit} ({metric.difference_pct:.1f}%)")
            lines.append(f"  {outcome}")
            lines.append("")

        verdict = result.verdict
        lines.append("Summary:")
        labelled = (("Shared Client", result.shared), ("Fresh Client per request", result.fresh))
        failed = [label for label, report in labelled if report.success_count == 0]
        if failed:
            for label in failed:
                lines.append(f"  {label} had no successful calls; latency and throughput were not compared")
        else:
            lines.append(ResultExporter._verdict_line(
                verdict.latency_winner, verdict.latency_improvement_pct, "faster in average latency"))
            lines.append(ResultExporter._verdict_line(
                verdict.throughput_winner, verdict.throughput_improvement_pct, "higher throughput (QPS)"))
        lines.append("")
        lines.append("Recommendation:")
        if verdict.recommendation == ConnectionMode.SHARED:
            lines.append("  Use a SHARED CLIENT (connection reuse) for better performance.")
        elif verdict.recommendation == ConnectionMode.FRESH:
            lines.append("  A FRESH CLIENT per request performed better for this workload.")
        elif len(failed) == 2:
            lines.append("  Neither approach completed a call; check the endpoint and the errors above.")
        else:
            lines.append("  Both approaches have similar performance for this workload.")
        lines.append(WIDE_SEPARATOR)
        return "\n".join(lines)

    @staticmethod
    def _verdict_line(winner, pct: float, what: str) -> str:
        if winner is None:
            return f"  No improvement: neither strategy is {what}"
        label = "Shared Client" if winner == ConnectionMode.SHARED else "Fresh Client per request"
        return f"  {label} is {pct:.1f}% {what}"
