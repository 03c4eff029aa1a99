import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from challengekit.report.history import (
    HistoricalEntry,
    append_to_history,
    format_duration,
)


@dataclass
class Assertion:
    type: str
    target: str
    passed: bool
    message: str = ""


@dataclass
class Result:
    challenge_id: str
    challenge_name: str
    status: str
    end_time: datetime
    duration: timedelta
    assertions: list = field(default_factory=list)


def make_result():
    return Result(
        challenge_id="test-001",
        challenge_name="Test Challenge",
        status="passed",
        end_time=datetime(2026, 1, 1, 0, 0, 5, tzinfo=timezone.utc),
        duration=timedelta(seconds=5),
        assertions=[
            Assertion("not_empty", "response", True, "response is not empty"),
            Assertion("contains", "body", False, "body missing keyword"),
        ],
    )


@pytest.mark.parametrize(
    "duration, expected",
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=5), "5s"),
        (timedelta(seconds=1, milliseconds=500), "1.5s"),
        (timedelta(milliseconds=100), "100ms"),
        (timedelta(minutes=2, seconds=3), "2m3s"),
        (timedelta(hours=1), "1h0m0s"),
        (1500, "1.5\u00b5s"),
        (999, "999ns"),
        (timedelta(seconds=-5), "-5s"),
        (None, "0s"),
    ],
)
def test_format_duration(duration, expected):
    assert format_duration(duration) == expected


def test_format_duration_rejects_strings():
    with pytest.raises(TypeError):
        format_duration("5s")


def test_historical_entry_round_trip():
    now = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    entry = HistoricalEntry(
        timestamp=now,
        challenge_id="challenge-abc",
        status="failed",
        duration="10.5s",
        assertions_passed=2,
        assertions_total=5,
        results_path="/results/abc",
    )
    decoded = HistoricalEntry.from_dict(json.loads(json.dumps(entry.to_dict())))
    assert decoded == entry


def test_historical_entry_json_keys():
    entry = HistoricalEntry(
        timestamp=datetime.now(timezone.utc),
        challenge_id="test-json",
        status="passed",
        duration="1s",
        assertions_passed=1,
        assertions_total=1,
        results_path="/results",
    )
    assert set(entry.to_dict()) == {
        "timestamp",
        "challenge_id",
        "status",
        "duration",
        "assertions_passed",
        "assertions_total",
        "results_path",
    }


def test_historical_entry_zero_values():
    assert HistoricalEntry().to_dict() == {
        "timestamp": None,
        "challenge_id": "",
        "status": "",
        "duration": "",
        "assertions_passed": 0,
        "assertions_total": 0,
        "results_path": "",
    }


def test_append_to_history(tmp_path):
    history = tmp_path / "history.jsonl"
    result = make_result()
    append_to_history(history, result, "/tmp/results")
    result.challenge_id = "test-002"
    append_to_history(history, result, "/tmp/results2")

    lines = [line for line in history.read_text().split("\n") if line]
    assert len(lines) == 2

    first = HistoricalEntry.from_dict(json.loads(lines[0]))
    assert first.challenge_id == "test-001"
    assert first.status == "passed"
    assert first.duration == "5s"
    assert first.assertions_passed == 1
    assert first.assertions_total == 2
    assert first.results_path == "/tmp/results"
    assert first.timestamp == result.end_time

    second = json.loads(lines[1])
    assert second["challenge_id"] == "test-002"
    assert second["results_path"] == "/tmp/results2"


def test_append_to_history_returns_entry(tmp_path):
    entry = append_to_history(tmp_path / "h.jsonl", make_result(), "/r")
    assert entry.assertions_passed == 1
    assert entry.assertions_total == 2


def test_append_to_history_open_error(tmp_path):
    with pytest.raises(OSError, match="failed to open history file"):
        append_to_history(tmp_path, make_result(), "/tmp/results")