"""The reporter interface and the append-only history of challenge runs."""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol, TextIO, runtime_checkable

_NS_PER_SECOND = 10**9


@runtime_checkable
class Reporter(Protocol):
    """Something that renders challenge results as a report."""

    def generate_report(self, result: Any) -> str:
        """Render a report for a single challenge result."""

    def generate_master_summary(self, results: Sequence[Any]) -> str:
        """Render a summary of many challenge results."""

    def write_report(self, stream: TextIO, result: Any) -> None:
        """Write the report for a single result to a text stream."""


def _nanoseconds(duration: timedelta | int | None) -> int:
    if duration is None:
        return 0
    if isinstance(duration, timedelta):
        whole_seconds = duration.days * 86_400 + duration.seconds
        return whole_seconds * _NS_PER_SECOND + duration.microseconds * 1000
    if isinstance(duration, int) and not isinstance(duration, bool):
        return duration
    raise TypeError(f"unsupported duration type: {type(duration).__name__}")


def _with_fraction(value: int, digits: int) -> str:
    whole, fraction = divmod(value, 10**digits)
    fraction_text = f"{fraction:0{digits}d}".rstrip("0")
    return f"{whole}.{fraction_text}" if fraction_text else str(whole)


def format_duration(duration: timedelta | int | None) -> str:
    """Format a duration like "1h2m3.5s", "250ms" or "0s".

    Integers are taken as nanoseconds.
    """
    ns = _nanoseconds(duration)
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1000:
        return f"{sign}{ns}ns"
    if ns < 10**6:
        return f"{sign}{_with_fraction(ns, 3)}\u00b5s"
    if ns < _NS_PER_SECOND:
        return f"{sign}{_with_fraction(ns, 6)}ms"
    hours, rest = divmod(ns, 3600 * _NS_PER_SECOND)
    minutes, rest = divmod(rest, 60 * _NS_PER_SECOND)
    seconds = _with_fraction(rest, 9) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds


def _status_text(status: Any) -> str:
    return str(getattr(status, "value", status))


@dataclass
class HistoricalEntry:
    """One challenge run as recorded in the history log."""

    timestamp: datetime | None = None
    challenge_id: str = ""
    status: str = ""
    duration: str = ""
    assertions_passed: int = 0
    assertions_total: int = 0
    results_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the entry."""
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "challenge_id": self.challenge_id,
            "status": self.status,
            "duration": self.duration,
            "assertions_passed": self.assertions_passed,
            "assertions_total": self.assertions_total,
            "results_path": self.results_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoricalEntry:
        """Build an entry from its decoded JSON form."""
        raw_time = data.get("timestamp")
        timestamp = datetime.fromisoformat(raw_time) if raw_time else None
        return cls(
            timestamp=timestamp,
            challenge_id=data.get("challenge_id", ""),
            status=data.get("status", ""),
            duration=data.get("duration", ""),
            assertions_passed=int(data.get("assertions_passed", 0)),
            assertions_total=int(data.get("assertions_total", 0)),
            results_path=data.get("results_path", ""),
        )


def append_to_history(
    history_path: str | os.PathLike[str], result: Any, results_path: str
) -> HistoricalEntry:
    """Append one JSON line describing ``result`` to the history file."""
    assertions = list(getattr(result, "assertions", None) or [])
    entry = HistoricalEntry(
        timestamp=getattr(result, "end_time", None),
        challenge_id=str(result.challenge_id),
        status=_status_text(result.status),
        duration=format_duration(getattr(result, "duration", None)),
        assertions_passed=sum(1 for a in assertions if a.passed),
        assertions_total=len(assertions),
        results_path=str(results_path),
    )
    line = json.dumps(entry.to_dict(), ensure_ascii=False)

    try:
        handle = open(history_path, "a", encoding="utf-8")
    except OSError as exc:
        raise OSError(
            exc.errno,
            f"failed to open history file: {exc.strerror}",
            str(history_path),
        ) from exc
    with handle:
        handle.write(line + "\n")
    return entry