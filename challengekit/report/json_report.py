"""JSON rendering of challenge results."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, TextIO

from challengekit.report.history import _nanoseconds

_PASSED = "passed"


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return _jsonable(value.value)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return _nanoseconds(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    if hasattr(value, "__dict__"):
        return {
            key: _jsonable(item)
            for key, item in vars(value).items()
            if not key.startswith("_")
        }
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def _status_text(status: Any) -> str:
    return str(getattr(status, "value", status))


class JSONReporter:
    """Renders results as JSON, indented when ``pretty`` is set.

    Durations are written as nanoseconds, timestamps in ISO 8601.
    """

    def __init__(self, output_dir: str = "", pretty: bool = False) -> None:
        self.output_dir = output_dir
        self.pretty = pretty

    def _dump(self, obj: Any) -> str:
        data = _jsonable(obj)
        if self.pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    def generate_report(self, result: Any) -> str:
        """Render a single result as JSON."""
        return self._dump(result)

    def generate_master_summary(self, results: Sequence[Any]) -> str:
        """Render counts, total duration and all results as JSON."""
        results = list(results or [])
        passed = sum(1 for r in results if _status_text(r.status) == _PASSED)
        total_ns = sum(_nanoseconds(getattr(r, "duration", None)) for r in results)
        summary = {
            "generated_at": datetime.now().astimezone(),
            "total_challenges": len(results),
            "passed": passed,
            "failed": len(results) - passed,
            "total_duration": total_ns,
            "results": results,
        }
        return self._dump(summary)

    def write_report(self, stream: TextIO, result: Any) -> None:
        """Write the JSON report for ``result`` to a text stream."""
        stream.write(self.generate_report(result))