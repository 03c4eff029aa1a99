import io
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from challengekit.report.html import HTMLReporter


@dataclass
class Metric:
    name: str
    value: float
    unit: str = ""


@dataclass
class Assertion:
    type: str
    target: str
    passed: bool
    message: str = ""


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


def make_result() -> Result:
    return Result(
        challenge_id="test-001",
        challenge_name="Test Challenge",
        status="passed",
        start_time=datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        end_time=datetime(2026, 1, 1, 0, 0, 5, tzinfo=timezone.utc),
        duration=timedelta(seconds=5),
        assertions=[
            Assertion("not_empty", "response", True, "response is not empty"),
            Assertion("contains", "body", False, "body missing keyword"),
        ],
        metrics={"latency": Metric("latency", 120.5, "ms")},
        outputs={"result": "/tmp/result.json"},
        logs=Logs(
            "/tmp/challenge.log", "/tmp/output.log", "/tmp/api_req.log", "/tmp/api_resp.log"
        ),
    )


def make_results() -> list:
    return [
        make_result(),
        Result(
            challenge_id="test-002",
            challenge_name="Another Challenge",
            status="failed",
            start_time=datetime(2026, 1, 1, 0, 0, 6, tzinfo=timezone.utc),
            end_time=datetime(2026, 1, 1, 0, 0, 8, tzinfo=timezone.utc),
            duration=timedelta(seconds=2),
            error="connection refused",
            logs=Logs("/tmp/ch2.log", "/tmp/out2.log"),
        ),
    ]


def test_generate_report_content(tmp_path):
    content = HTMLReporter(tmp_path).generate_report(make_result())
    for fragment in (
        "<!DOCTYPE html>",
        "<title>",
        "Test Challenge",
        "PASSED",
        "status-passed",
        "latency",
        "120.50",
        "</html>",
        "Challenges Framework",
    ):
        assert fragment in content


def test_generate_report_summary_rows(tmp_path):
    content = HTMLReporter(tmp_path).generate_report(make_result())
    assert "<tr><td>Duration</td><td>5s</td></tr>" in content
    assert "<tr><td>Start Time</td><td>2026-01-01T00:00:00Z</td></tr>" in content
    assert "<p><strong>Challenge ID:</strong> test-001</p>" in content


def test_generate_report_pass_rate(tmp_path):
    content = HTMLReporter(tmp_path).generate_report(make_result())
    assert "<p><strong>Pass Rate:</strong> 1/2 (50%)</p>" in content


def test_generate_report_failed_status(tmp_path):
    result = make_result()
    result.status = "failed"
    result.error = "timeout exceeded"
    content = HTMLReporter(tmp_path).generate_report(result)
    assert "status-failed" in content
    assert "timeout exceeded" in content
    assert "<strong>FAILED</strong>" in content


def test_write_report(tmp_path):
    stream = io.StringIO()
    HTMLReporter(tmp_path).write_report(stream, make_result())
    assert stream.getvalue().startswith("<!DOCTYPE")


def test_generate_master_summary(tmp_path):
    content = HTMLReporter(tmp_path).generate_master_summary(make_results())
    assert "Master Summary" in content
    assert "Test Challenge" in content
    assert "Another Challenge" in content
    assert "Statistics" in content
    assert "50%" in content
    assert "<tr><td>Total Duration</td><td>7s</td></tr>" in content
    assert "<p><strong>Error:</strong> connection refused</p>" in content


def test_master_summary_empty_has_no_pass_rate(tmp_path):
    content = HTMLReporter(tmp_path).generate_master_summary([])
    assert "<tr><td>Total Challenges</td><td>0</td></tr>" in content
    assert "Pass Rate" not in content


def test_escapes_html(tmp_path):
    result = make_result()
    result.challenge_name = "<script>alert('xss')</script>"
    content = HTMLReporter(tmp_path).generate_report(result)
    assert "<script>" not in content
    assert "&lt;script&gt;" in content
    assert "&#39;xss&#39;" in content


def test_no_metrics(tmp_path):
    result = make_result()
    result.metrics = {}
    assert "<h2>Metrics</h2>" not in HTMLReporter(tmp_path).generate_report(result)


def test_no_assertions(tmp_path):
    result = make_result()
    result.assertions = []
    assert "<h2>Assertions</h2>" not in HTMLReporter(tmp_path).generate_report(result)


def test_no_outputs(tmp_path):
    result = make_result()
    result.outputs = {}
    assert "<h2>Output Files</h2>" not in HTMLReporter(tmp_path).generate_report(result)


def test_metrics_with_empty_unit(tmp_path):
    result = make_result()
    result.metrics["nounit"] = Metric("nounit", 42.0, "")
    content = HTMLReporter(tmp_path).generate_report(result)
    assert "<tr><td>nounit</td><td>42.00</td><td>-</td></tr>" in content


def test_optional_log_rows(tmp_path):
    reporter = HTMLReporter(tmp_path)
    full = reporter.generate_report(make_result())
    assert "API Requests" in full
    result = make_result()
    result.logs = Logs("/tmp/c.log", "/tmp/o.log")
    reduced = reporter.generate_report(result)
    assert "API Requests" not in reduced
    assert "API Responses" not in reduced