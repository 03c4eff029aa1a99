"""Markdown rendering of challenge results."""

from __future__ import annotations

import os
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, TextIO

from challengekit.report.history import _nanoseconds, format_duration

_PASSED = "passed"
_FOOTER = "\n---\n\n*Generated by Challenges Framework*\n"


def _status_text(status: Any) -> str:
    return str(getattr(status, "value", status))


def _rfc3339(moment: datetime | None) -> str:
    if moment is None:
        moment = datetime(1, 1, 1, tzinfo=timezone.utc)
    base = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    offset = moment.utcoffset()
    if not offset:
        return base + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{base}{sign}{hours:02d}:{mins:02d}"


def _short_time(moment: datetime | None) -> str:
    if moment is None:
        moment = datetime(1, 1, 1)
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


class MarkdownReporter:
    """Renders results as Markdown documents."""

    def __init__(self, output_dir: str | os.PathLike[str] = "") -> None:
        self.output_dir = output_dir

    def generate_report(self, result: Any) -> str:
        """Render a Markdown report for a single result."""
        lines: list[str] = []
        w = lines.append
        status = _status_text(result.status)

        w(f"# Challenge Report: {result.challenge_name}\n\n")
        w(f"**Challenge ID:** {result.challenge_id}\n\n")
        w(f"**Generated:** {_rfc3339(result.end_time)}\n\n")

        w("## Summary\n\n")
        w("| Metric | Value |\n")
        w("|--------|-------|\n")
        w(f"| Status | **{status.upper()}** |\n")
        w(f"| Start Time | {_rfc3339(result.start_time)} |\n")
        w(f"| End Time | {_rfc3339(result.end_time)} |\n")
        w(f"| Duration | {format_duration(result.duration)} |\n")
        if result.error:
            w(f"| Error | {result.error} |\n")

        self._metrics(w, result)
        self._assertions(w, result)
        self._outputs(w, result)
        self._logs(w, result)
        w(_FOOTER)
        return "".join(lines)

    @staticmethod
    def _metrics(w, result: Any) -> None:
        metrics = getattr(result, "metrics", None) or {}
        if not metrics:
            return
        w("\n## Metrics\n\n")
        w("| Metric | Value | Unit |\n")
        w("|--------|-------|------|\n")
        for key in sorted(metrics):
            metric = metrics[key]
            unit = metric.unit or "-"
            w(f"| {metric.name} | {metric.value:.2f} | {unit} |\n")

    @staticmethod
    def _assertions(w, result: Any) -> None:
        assertions = list(getattr(result, "assertions", None) or [])
        if not assertions:
            return
        w("\n## Assertions\n\n")
        w("| Type | Target | Passed | Message |\n")
        w("|------|--------|--------|---------|\n")
        passed = 0
        for a in assertions:
            if a.passed:
                passed += 1
            w(f"| {a.type} | {a.target} | {'Yes' if a.passed else 'No'} | {a.message} |\n")
        total = len(assertions)
        pct = passed / total * 100
        w(f"\n**Pass Rate:** {passed}/{total} ({pct:.0f}%)\n")

    @staticmethod
    def _outputs(w, result: Any) -> None:
        outputs = getattr(result, "outputs", None) or {}
        if not outputs:
            return
        w("\n## Output Files\n\n")
        w("| Name | Path |\n")
        w("|------|------|\n")
        for name, path in outputs.items():
            w(f"| {name} | `{path}` |\n")

    @staticmethod
    def _logs(w, result: Any) -> None:
        logs = result.logs
        w("\n## Log Files\n\n")
        w("| Log Type | Path |\n")
        w("|----------|------|\n")
        w(f"| Challenge Log | `{logs.challenge_log}` |\n")
        w(f"| Output Log | `{logs.output_log}` |\n")
        if logs.api_requests:
            w(f"| API Requests | `{logs.api_requests}` |\n")
        if logs.api_responses:
            w(f"| API Responses | `{logs.api_responses}` |\n")

    def write_report(self, stream: TextIO, result: Any) -> None:
        """Write the Markdown report for ``result`` to a text stream."""
        stream.write(self.generate_report(result))

    def generate_master_summary(self, results: Sequence[Any]) -> str:
        """Render an overview, statistics and details of many results."""
        results = list(results or [])
        lines: list[str] = []
        w = lines.append

        w("# Challenges Framework - Master Summary\n\n")
        w(f"**Generated:** {_rfc3339(datetime.now().astimezone())}\n\n")
        w("## Overview\n\n")
        w("| Challenge | Status | Duration | Last Run |\n")
        w("|-----------|--------|----------|----------|\n")

        passed = 0
        total_ns = 0
        for result in results:
            status = _status_text(result.status)
            if status == _PASSED:
                passed += 1
            total_ns += _nanoseconds(result.duration)
            w(
                f"| {result.challenge_name} | {status.upper()} | "
                f"{format_duration(result.duration)} | {_short_time(result.end_time)} |\n"
            )

        w("\n## Statistics\n\n")
        w("| Metric | Value |\n")
        w("|--------|-------|\n")
        w(f"| Total Challenges | {len(results)} |\n")
        w(f"| Passed | {passed} |\n")
        w(f"| Failed | {len(results) - passed} |\n")
        if results:
            w(f"| Pass Rate | {passed / len(results) * 100:.0f}% |\n")
        w(f"| Total Duration | {format_duration(total_ns)} |\n")

        w("\n## Challenge Details\n\n")
        for result in results:
            w(f"### {result.challenge_name}\n\n")
            w(f"- **Status:** {_status_text(result.status).upper()}\n")
            w(f"- **Duration:** {format_duration(result.duration)}\n")
            metrics = getattr(result, "metrics", None) or {}
            if metrics:
                w("- **Key Metrics:**\n")
                for metric in metrics.values():
                    w(f"  - {metric.name}: {metric.value:.2f} {metric.unit}\n")
            assertions = list(getattr(result, "assertions", None) or [])
            if assertions:
                ok = sum(1 for a in assertions if a.passed)
                w(f"- **Assertions:** {ok}/{len(assertions)} passed\n")
            if result.error:
                w(f"- **Error:** {result.error}\n")
            w("\n")

        w(_FOOTER)
        return "".join(lines)

    def save_report(self, result: Any, filename: str) -> None:
        """Write the report for ``result`` to ``filename`` in the output directory."""
        path = Path(self.output_dir) / filename
        path.write_text(self.generate_report(result), encoding="utf-8")

    def save_master_summary(self, results: Sequence[Any], filename: str) -> None:
        """Write the master summary to ``filename`` in the output directory."""
        path = Path(self.output_dir) / filename
        path.write_text(self.generate_master_summary(results), encoding="utf-8")