import io
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from challengekit.report.markdown import MarkdownReporter


@dataclass
class Assertion:
    type: str
    target: str
    passed: bool
    message: str = ""


@dataclass
class Metric:
    name: str
    value: float
    unit: str = ""


@dataclass
class Logs:
    challenge_log: str = ""
    output_log: str = ""
    api_requests: str = ""
    api_responses: str = ""


@dataclass
class Result:
    challenge_id: str
    challenge_name: str
    status: str
    start_time: datetime
    end_time: datetime
    duration: timedelta
    assertions: list = field(default_factory=list)
    metrics: dict = field(default_factory=dict)
    outputs: dict = field(default_factory=dict)
    logs: Logs = field(default_factory=Logs)
    error: str = ""


def at(second):
    return datetime(2026, 1, 1, 0, 0, second, tzinfo=timezone.utc)


def make_result():
    return Result(
        challenge_id="test-001",
        challenge_name="Test Challenge",
        status="passed",
        start_time=at(0),
        end_time=at(5),
        duration=timedelta(seconds=5),
        assertions=[
            Assertion("not_empty", "response", True, "response is not empty"),
            Assertion("contains", "body", False, "body missing keyword"),
        ],
        metrics={"latency": Metric("latency", 120.5, "ms")},
        outputs={"result": "/tmp/result.json"},
        logs=Logs("/tmp/challenge.log", "/tmp/output.log", "/tmp/api_req.log", "/tmp/api_resp.log"),
    )


def make_results():
    return [
        make_result(),
        Result(
            challenge_id="test-002",
            challenge_name="Another Challenge",
            status="failed",
            start_time=at(6),
            end_time=at(8),
            duration=timedelta(seconds=2),
            error="connection refused",
            logs=Logs("/tmp/ch2.log", "/tmp/out2.log"),
        ),
    ]


def test_generate_report_content():
    content = MarkdownReporter().generate_report(make_result())
    assert content.startswith("# Challenge Report: Test Challenge\n")
    assert "**Challenge ID:** test-001" in content
    assert "**Generated:** 2026-01-01T00:00:05Z" in content
    assert "| Status | **PASSED** |" in content
    assert "| Start Time | 2026-01-01T00:00:00Z |" in content
    assert "| Duration | 5s |" in content
    assert "## Metrics" in content
    assert "| latency | 120.50 | ms |" in content
    assert "## Assertions" in content
    assert "1/2 (50%)" in content
    assert "## Output Files" in content
    assert "| result | `/tmp/result.json` |" in content
    assert "## Log Files" in content
    assert "| API Requests | `/tmp/api_req.log` |" in content
    assert "Challenges Framework" in content
    assert "HelixAgent" not in content


def test_generate_report_no_metrics():
    result = make_result()
    result.metrics = None
    assert "## Metrics" not in MarkdownReporter().generate_report(result)


def test_generate_report_with_error():
    result = make_result()
    result.status = "failed"
    result.error = "something broke"
    content = MarkdownReporter().generate_report(result)
    assert "| Error | something broke |" in content
    assert "| Status | **FAILED** |" in content


def test_write_report():
    buf = io.StringIO()
    MarkdownReporter().write_report(buf, make_result())
    assert buf.getvalue().startswith("#")
    assert buf.getvalue() == MarkdownReporter().generate_report(make_result())


def test_generate_master_summary_content():
    content = MarkdownReporter().generate_master_summary(make_results())
    assert "Challenges Framework - Master Summary" in content
    assert "| Test Challenge | PASSED | 5s | 2026-01-01 00:00:05 |" in content
    assert "| Another Challenge | FAILED | 2s | 2026-01-01 00:00:08 |" in content
    assert "## Statistics" in content
    assert "| Total Challenges | 2 |" in content
    assert "| Pass Rate | 50% |" in content
    assert "| Total Duration | 7s |" in content
    assert "- **Assertions:** 1/2 passed" in content
    assert "- **Error:** connection refused" in content
    assert "  - latency: 120.50 ms" in content
    assert "Generated by Challenges Framework" in content


def test_generate_master_summary_empty_has_no_pass_rate():
    content = MarkdownReporter().generate_master_summary([])
    assert "| Total Challenges | 0 |" in content
    assert "Pass Rate" not in content


def test_save_report(tmp_path):
    MarkdownReporter(tmp_path).save_report(make_result(), "report.md")
    assert "Test Challenge" in (tmp_path / "report.md").read_text()


def test_save_master_summary(tmp_path):
    MarkdownReporter(tmp_path).save_master_summary(make_results(), "summary.md")
    assert "Master Summary" in (tmp_path / "summary.md").read_text()


def test_save_report_write_error(tmp_path):
    reporter = MarkdownReporter(tmp_path / "missing" / "dir")
    with pytest.raises(OSError):
        reporter.save_report(make_result(), "report.md")


def test_save_master_summary_write_error(tmp_path):
    reporter = MarkdownReporter(tmp_path / "missing" / "dir")
    with pytest.raises(OSError):
        reporter.save_master_summary(make_results(), "summary.md")


def test_generate_report_no_assertions():
    result = make_result()
    result.assertions = None
    assert "## Assertions" not in MarkdownReporter().generate_report(result)


def test_generate_report_no_outputs():
    result = make_result()
    result.outputs = None
    assert "## Output Files" not in MarkdownReporter().generate_report(result)


def test_generate_report_metric_with_empty_unit():
    result = make_result()
    result.metrics["nounit"] = Metric("nounit", 100.0, "")
    content = MarkdownReporter().generate_report(result)
    assert "| nounit | 100.00 | - |" in content
    assert content.index("| latency |") < content.index("| nounit |")


def test_generate_report_omits_empty_api_logs():
    content = MarkdownReporter().generate_report(make_results()[1])
    assert "API Requests" not in content
    assert "| Challenge Log | `/tmp/ch2.log` |" in content