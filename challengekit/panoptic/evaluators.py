"""Assertion evaluators for the outcomes of Panoptic UI test runs.

Each evaluator takes an assertion definition (anything with a ``value``
attribute holding the expected value) and the actual value, and returns
a ``(passed, message)`` pair.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

Evaluator = Callable[[Any, Any], "tuple[bool, str]"]

_ERROR_INDICATORS = ('"errors":', '"error_count":', '"critical":', '"failures":')
_ZERO_ERROR_COUNTS = ('"error_count": 0', '"error_count":0')


def _expected(definition: Any) -> Any:
    return getattr(definition, "value", None)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_int(value: Any) -> int | None:
    return int(value) if _is_number(value) else None


def _to_float(value: Any) -> float | None:
    return float(value) if _is_number(value) else None


def _count_items(value: Any) -> int:
    if _is_number(value):
        return int(value)
    if isinstance(value, (list, tuple)):
        return len(value)
    return 0


def _minimum_count(definition: Any) -> int:
    minimum = _to_int(_expected(definition))
    return 1 if minimum is None else minimum


def evaluate_screenshot_exists(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when at least the expected number of screenshots (default 1) exist."""
    minimum = _minimum_count(definition)
    count = _count_items(value)
    if count >= minimum:
        return True, f"{count} screenshots captured (>= {minimum})"
    return False, f"{count} screenshots captured (< {minimum} required)"


def evaluate_video_exists(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when at least the expected number of videos (default 1) exist."""
    minimum = _minimum_count(definition)
    count = _count_items(value)
    if count >= minimum:
        return True, f"{count} videos recorded (>= {minimum})"
    return False, f"{count} videos recorded (< {minimum} required)"


def evaluate_no_ui_errors(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass unless the AI error report at the given path shows errors.

    A missing path or file counts as clean.
    """
    if not isinstance(value, str) or not value:
        return True, "no AI error report generated (assumed clean)"
    if not os.path.isfile(value):
        return True, "AI error report file not found (assumed clean)"
    try:
        data = Path(value).read_bytes()
    except OSError as exc:
        return False, f"failed to read AI error report: {exc}"

    content = data.decode("utf-8", errors="replace").lower()
    zero_errors = any(marker in content for marker in _ZERO_ERROR_COUNTS)
    for indicator in _ERROR_INDICATORS:
        if indicator in content and not zero_errors:
            return False, f"AI error report contains error indicator: {indicator}"
    return True, "no UI errors detected by AI"


def evaluate_ai_confidence_above(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when the AI confidence meets the threshold (default 0.75)."""
    threshold = _to_float(_expected(definition))
    if threshold is None:
        threshold = 0.75
    confidence = _to_float(value)
    if confidence is None:
        return False, "ai_confidence is not a number"
    if confidence >= threshold:
        return True, f"AI confidence {confidence:.2f} >= {threshold:.2f}"
    return False, f"AI confidence {confidence:.2f} < {threshold:.2f}"


def evaluate_all_apps_passed(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when the value is True."""
    if not isinstance(value, bool):
        return False, "all_apps_passed is not a boolean"
    if value:
        return True, "all apps passed"
    return False, "one or more apps failed"


def evaluate_max_duration(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when the longest app duration in ms is within the expected limit."""
    limit = _to_int(_expected(definition))
    if limit is None:
        return False, "expected value is not a number"
    actual = _to_int(value)
    if actual is None:
        return False, "max_duration_ms is not a number"
    if actual <= limit:
        return True, f"max duration {actual}ms <= {limit}ms limit"
    return False, f"max duration {actual}ms > {limit}ms limit"


def evaluate_report_exists(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when the value is True, meaning the report was generated."""
    if not isinstance(value, bool):
        return False, "report_exists value is not a boolean"
    if value:
        return True, "report was generated"
    return False, "report was not generated"


def evaluate_app_count(definition: Any, value: Any) -> tuple[bool, str]:
    """Pass when exactly the expected number of apps was tested."""
    expected = _to_int(_expected(definition))
    if expected is None:
        return False, "expected value is not a number"
    actual = _to_int(value)
    if actual is None:
        return False, "app_count is not a number"
    if actual == expected:
        return True, f"app count {actual} == {expected}"
    return False, f"app count {actual} != {expected}"


EVALUATORS: dict[str, Evaluator] = {
    "screenshot_exists": evaluate_screenshot_exists,
    "video_exists": evaluate_video_exists,
    "no_ui_errors": evaluate_no_ui_errors,
    "ai_confidence_above": evaluate_ai_confidence_above,
    "all_apps_passed": evaluate_all_apps_passed,
    "max_duration": evaluate_max_duration,
    "report_exists": evaluate_report_exists,
    "app_count": evaluate_app_count,
}


def register_evaluators(engine: Any) -> None:
    """Register all eight Panoptic evaluators with ``engine.register``.

    Raises ValueError naming the evaluator that could not be registered.
    """
    for name, evaluator in EVALUATORS.items():
        try:
            engine.register(name, evaluator)
        except Exception as exc:
            raise ValueError(f"register evaluator {name}: {exc}") from exc