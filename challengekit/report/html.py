"""HTML rendering of challenge results."""

from __future__ import annotations

import io
import os
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, TextIO

from challengekit.report.history import _nanoseconds, format_duration
from challengekit.report.markdown import _rfc3339, _short_time, _status_text

_PASSED = "passed"

_ESCAPES = str.maketrans(
    {"&": "&amp;", "'": "&#39;", "<": "&lt;", ">": "&gt;", '"': "&#34;"}
)

_HEAD_START = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>"""

_HEAD_END = """</title>
<style>
body {
  font-family: -apple-system, BlinkMacSystemFont,
    "Segoe UI", Roboto, sans-serif;
  max-width: 960px;
  margin: 0 auto;
  padding: 20px;
  color: #333;
  background: #f9f9f9;
}
h1 { color: #2c3e50; border-bottom: 2px solid #3498db; padding-bottom: 10px; }
h2 { color: #2c3e50; margin-top: 30px; }
h3 { color: #34495e; }
table {
  border-collapse: collapse;
  width: 100%;
  margin: 10px 0;
  background: #fff;
}
th, td {
  border: 1px solid #ddd;
  padding: 8px 12px;
  text-align: left;
}
th { background: #3498db; color: #fff; }
tr:nth-child(even) { background: #f2f2f2; }
.status-passed { color: #27ae60; font-weight: bold; }
.status-failed { color: #e74c3c; font-weight: bold; }
code {
  background: #ecf0f1;
  padding: 2px 6px;
  border-radius: 3px;
  font-size: 0.9em;
}
footer {
  margin-top: 40px;
  padding-top: 10px;
  border-top: 1px solid #ddd;
  color: #7f8c8d;
  font-size: 0.9em;
}
</style>
</head>
<body>
"""

_FOOTER = (
    "<footer>\n"
    "<p>Generated by Challenges Framework</p>\n"
    "</footer>\n"
    "</body>\n"
    "</html>\n"
)

Writer = Callable[[str], Any]


def _escape(text: Any) -> str:
    return str(text).translate(_ESCAPES)


def _header(title: str) -> str:
    return _HEAD_START + _escape(title) + _HEAD_END


class HTMLReporter:
    """Renders results as standalone HTML pages."""

    def __init__(self, output_dir: str | os.PathLike[str] = "") -> None:
        self.output_dir = output_dir

    def generate_report(self, result: Any) -> str:
        """Render an HTML report for a single result."""
        buffer = io.StringIO()
        self.write_report(buffer, result)
        return buffer.getvalue()

    def write_report(self, stream: TextIO, result: Any) -> None:
        """Write the HTML report for ``result`` to a text stream."""
        w = stream.write
        name = result.challenge_name
        w(_header(f"Challenge Report: {name}"))
        w(f"<h1>Challenge Report: {_escape(name)}</h1>\n")
        w(f"<p><strong>Challenge ID:</strong> {_escape(result.challenge_id)}</p>\n")
        w(f"<p><strong>Generated:</strong> {_rfc3339(result.end_time)}</p>\n")
        self._summary_table(w, result)
        self._metrics(w, result)
        self._assertions(w, result)
        self._outputs(w, result)
        self._logs(w, result)
        w(_FOOTER)

    @staticmethod
    def _summary_table(w: Writer, result: Any) -> None:
        status = _status_text(result.status)
        cls = "status-passed" if status == _PASSED else "status-failed"
        w("<h2>Summary</h2>\n")
        w("<table>\n")
        w("<tr><th>Metric</th><th>Value</th></tr>\n")
        w(
            f'<tr><td>Status</td><td class="{cls}">'
            f"<strong>{status.upper()}</strong></td></tr>\n"
        )
        w(f"<tr><td>Start Time</td><td>{_rfc3339(result.start_time)}</td></tr>\n")
        w(f"<tr><td>End Time</td><td>{_rfc3339(result.end_time)}</td></tr>\n")
        w(f"<tr><td>Duration</td><td>{format_duration(result.duration)}</td></tr>\n")
        if result.error:
            w(
                '<tr><td>Error</td><td class="status-failed">'
                f"{_escape(result.error)}</td></tr>\n"
            )
        w("</table>\n")

    @staticmethod
    def _metrics(w: Writer, result: Any) -> None:
        metrics = getattr(result, "metrics", None) or {}
        if not metrics:
            return
        w("<h2>Metrics</h2>\n")
        w("<table>\n")
        w("<tr><th>Metric</th><th>Value</th><th>Unit</th></tr>\n")
        for metric in metrics.values():
            unit = metric.unit or "-"
            w(
                f"<tr><td>{_escape(metric.name)}</td><td>{metric.value:.2f}</td>"
                f"<td>{_escape(unit)}</td></tr>\n"
            )
        w("</table>\n")

    @staticmethod
    def _assertions(w: Writer, result: Any) -> None:
        assertions = list(getattr(result, "assertions", None) or [])
        if not assertions:
            return
        w("<h2>Assertions</h2>\n")
        w("<table>\n")
        w("<tr><th>Type</th><th>Target</th><th>Passed</th><th>Message</th></tr>\n")
        passed = 0
        for a in assertions:
            if a.passed:
                passed += 1
                label, cls = "Yes", "status-passed"
            else:
                label, cls = "No", "status-failed"
            w(
                f"<tr><td>{_escape(a.type)}</td><td>{_escape(a.target)}</td>"
                f'<td class="{cls}">{label}</td>'
                f"<td>{_escape(a.message)}</td></tr>\n"
            )
        w("</table>\n")
        total = len(assertions)
        pct = passed / total * 100
        w(f"<p><strong>Pass Rate:</strong> {passed}/{total} ({pct:.0f}%)</p>\n")

    @staticmethod
    def _outputs(w: Writer, result: Any) -> None:
        outputs = getattr(result, "outputs", None) or {}
        if not outputs:
            return
        w("<h2>Output Files</h2>\n")
        w("<table>\n")
        w("<tr><th>Name</th><th>Path</th></tr>\n")
        for name, path in outputs.items():
            w(f"<tr><td>{_escape(name)}</td><td><code>{_escape(path)}</code></td></tr>\n")
        w("</table>\n")

    @staticmethod
    def _logs(w: Writer, result: Any) -> None:
        logs = result.logs
        w("<h2>Log Files</h2>\n")
        w("<table>\n")
        w("<tr><th>Log Type</th><th>Path</th></tr>\n")
        w(
            "<tr><td>Challenge Log</td>"
            f"<td><code>{_escape(logs.challenge_log)}</code></td></tr>\n"
        )
        w(
            "<tr><td>Output Log</td>"
            f"<td><code>{_escape(logs.output_log)}</code></td></tr>\n"
        )
        if logs.api_requests:
            w(
                "<tr><td>API Requests</td>"
                f"<td><code>{_escape(logs.api_requests)}</code></td></tr>\n"
            )
        if logs.api_responses:
            w(
                "<tr><td>API Responses</td>"
                f"<td><code>{_escape(logs.api_responses)}</code></td></tr>\n"
            )
        w("</table>\n")

    def generate_master_summary(self, results: Sequence[Any]) -> str:
        """Render an HTML overview, statistics and details of many results."""
        results = list(results or [])
        buffer = io.StringIO()
        w = buffer.write
        w(_header("Challenges Framework - Master Summary"))
        w("<h1>Challenges Framework - Master Summary</h1>\n")
        w(f"<p><strong>Generated:</strong> {_rfc3339(datetime.now().astimezone())}</p>\n")
        self._master_overview(w, results)
        self._master_stats(w, results)
        self._master_details(w, results)
        w(_FOOTER)
        return buffer.getvalue()

    @staticmethod
    def _master_overview(w: Writer, results: list[Any]) -> None:
        w("<h2>Overview</h2>\n")
        w("<table>\n")
        w(
            "<tr><th>Challenge</th><th>Status</th>"
            "<th>Duration</th><th>Last Run</th></tr>\n"
        )
        for result in results:
            status = _status_text(result.status)
            cls = "status-passed" if status == _PASSED else "status-failed"
            w(
                f"<tr><td>{_escape(result.challenge_name)}</td>"
                f'<td class="{cls}">'
                f"{status.upper()}</td>"
                f"<td>{format_duration(result.duration)}</td>"
                f"<td>{_short_time(result.end_time)}</td></tr>\n"
            )
        w("</table>\n")

    @staticmethod
    def _master_stats(w: Writer, results: list[Any]) -> None:
        passed = sum(1 for r in results if _status_text(r.status) == _PASSED)
        total_ns = sum(_nanoseconds(r.duration) for r in results)
        w("<h2>Statistics</h2>\n")
        w("<table>\n")
        w("<tr><th>Metric</th><th>Value</th></tr>\n")
        w(f"<tr><td>Total Challenges</td><td>{len(results)}</td></tr>\n")
        w(f"<tr><td>Passed</td><td>{passed}</td></tr>\n")
        w(f"<tr><td>Failed</td><td>{len(results) - passed}</td></tr>\n")
        if results:
            pct = passed / len(results) * 100
            w(f"<tr><td>Pass Rate</td><td>{pct:.0f}%</td></tr>\n")
        w(f"<tr><td>Total Duration</td><td>{format_duration(total_ns)}</td></tr>\n")
        w("</table>\n")

    @staticmethod
    def _master_details(w: Writer, results: list[Any]) -> None:
        w("<h2>Challenge Details</h2>\n")
        for result in results:
            w(f"<h3>{_escape(result.challenge_name)}</h3>\n")
            w(f"<p><strong>Status:</strong> {_status_text(result.status).upper()}</p>\n")
            w(f"<p><strong>Duration:</strong> {format_duration(result.duration)}</p>\n")
            if result.error:
                w(f"<p><strong>Error:</strong> {_escape(result.error)}</p>\n")