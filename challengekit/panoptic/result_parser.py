"""Turning Panoptic run results into assertion values and metrics."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from challengekit.panoptic.types import PanopticRunResult

_MILLISECOND = timedelta(milliseconds=1)


@dataclass
class MetricValue:
    """A named measurement with its unit."""

    name: str
    value: float
    unit: str = ""


def _milliseconds(duration: timedelta) -> int:
    return duration // _MILLISECOND


def _file_exists(path: str) -> bool:
    return bool(path) and os.path.isfile(path)


def all_apps_passed(result: PanopticRunResult) -> bool:
    """Tell whether every app succeeded; with no apps, whether the exit code is 0."""
    if not result.apps:
        return result.exit_code == 0
    return all(app.success for app in result.apps)


def _count_passed(result: PanopticRunResult) -> int:
    return sum(1 for app in result.apps if app.success)


def _count_failed(result: PanopticRunResult) -> int:
    return sum(1 for app in result.apps if not app.success)


def _max_app_duration(result: PanopticRunResult) -> int:
    return max((app.duration_ms for app in result.apps), default=0)


def _ai_confidence(result: PanopticRunResult) -> float | None:
    if not _file_exists(result.ai_error_report):
        return None
    return 1.0 if result.exit_code == 0 else 0.5


def parse_result_to_assertion_values(
    result: PanopticRunResult | None,
) -> dict[str, Any]:
    """Map a run result onto the target names the evaluators use."""
    if result is None:
        return {}
    values: dict[str, Any] = {
        "exit_code": result.exit_code,
        "all_apps_passed": all_apps_passed(result),
        "app_count": len(result.apps),
        "passed_count": _count_passed(result),
        "failed_count": _count_failed(result),
        "total_screenshots": len(result.screenshots),
        "total_videos": len(result.videos),
        "total_duration_ms": _milliseconds(result.duration),
        "max_duration_ms": _max_app_duration(result),
        "report_html_exists": _file_exists(result.report_html),
        "report_json_exists": _file_exists(result.report_json),
        "screenshots": list(result.screenshots),
        "videos": list(result.videos),
        "stdout": result.stdout,
        "stderr": result.stderr,
        "ai_error_report": result.ai_error_report,
        "ai_generated_tests": result.ai_generated_tests,
        "vision_report": result.vision_report,
    }
    confidence = _ai_confidence(result)
    if confidence is not None:
        values["ai_confidence"] = confidence
    return values


def parse_result_to_metrics(
    result: PanopticRunResult | None,
) -> dict[str, MetricValue]:
    """Build the metrics of a run result, including one per app duration."""
    if result is None:
        return {}

    def metric(name: str, value: float, unit: str) -> MetricValue:
        return MetricValue(name=name, value=float(value), unit=unit)

    metrics = {
        "total_duration_ms": metric("total_duration_ms", _milliseconds(result.duration), "ms"),
        "app_count": metric("app_count", len(result.apps), "count"),
        "screenshot_count": metric("screenshot_count", len(result.screenshots), "count"),
        "video_count": metric("video_count", len(result.videos), "count"),
        "passed_count": metric("passed_count", _count_passed(result), "count"),
        "failed_count": metric("failed_count", _count_failed(result), "count"),
    }
    max_duration = _max_app_duration(result)
    if max_duration > 0:
        metrics["max_app_duration_ms"] = metric("max_app_duration_ms", max_duration, "ms")
    for index, app in enumerate(result.apps):
        key = f"app_{index}_duration_ms"
        metrics[key] = metric(key, app.duration_ms, "ms")
    return metrics