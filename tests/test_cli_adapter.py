import json
import os
from pathlib import Path

import pytest

from challengekit.panoptic.cli_adapter import (
    CLIAdapter,
    PanopticError,
    guess_output_dir,
    parse_json_report,
    parse_stdout_apps,
    scan_artifacts,
)
from challengekit.panoptic.types import PanopticRunResult, RunOptions


def _script(directory: Path, body: str) -> Path:
    path = directory / "panoptic"
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)
    return path


def _config(directory: Path, text: str) -> Path:
    path = directory / "test.yaml"
    path.write_text(text)
    return path


def test_new_adapter_defaults():
    adapter = CLIAdapter("/usr/bin/panoptic")
    assert adapter.binary_path == "/usr/bin/panoptic"
    assert adapter.env == {}
    assert adapter.work_dir == ""


def test_env_attribute():
    adapter = CLIAdapter("/bin/test")
    adapter.env["FOO"] = "bar"
    assert adapter.env["FOO"] == "bar"


def test_available_missing():
    assert CLIAdapter("/nonexistent/panoptic").available() is False


def test_available_exists(tmp_path):
    binary = _script(tmp_path, "")
    assert CLIAdapter(binary).available() is True


def test_available_not_executable(tmp_path):
    path = tmp_path / "panoptic"
    path.write_text("data")
    path.chmod(0o644)
    assert CLIAdapter(path).available() is False


def test_available_directory(tmp_path):
    assert CLIAdapter(tmp_path).available() is False


def test_run_success(tmp_path):
    binary = _script(tmp_path, 'echo "panoptic output"')
    config = _config(tmp_path, f"name: test\noutput: {tmp_path}\n")
    result = CLIAdapter(binary).run(config)
    assert result.exit_code == 0
    assert "panoptic output" in result.stdout


def test_run_with_options(tmp_path):
    binary = _script(tmp_path, 'echo "$@"')
    config = _config(tmp_path, "name: t\n")
    out_dir = tmp_path / "out"
    result = CLIAdapter(binary).run(
        config,
        RunOptions(output_dir=str(out_dir), verbose=True, timeout=300),
    )
    assert result.stdout == f"run {config} --verbose --output {out_dir}"


def test_run_failure_is_not_an_error(tmp_path):
    binary = _script(tmp_path, "exit 3")
    result = CLIAdapter(binary).run("nonexistent.yaml")
    assert result.exit_code == 3


def test_run_missing_binary_raises():
    with pytest.raises(PanopticError, match="panoptic execution failed"):
        CLIAdapter("/nonexistent/panoptic").run("nonexistent.yaml")


def test_run_passes_environment(tmp_path):
    binary = _script(tmp_path, 'echo "$FOO-$BAR"')
    adapter = CLIAdapter(binary)
    adapter.env["FOO"] = "bar"
    result = adapter.run("none.yaml", RunOptions(env={"BAR": "baz"}))
    assert result.stdout == "bar-baz"


def test_run_uses_work_dir(tmp_path):
    binary = _script(tmp_path, "pwd")
    work = tmp_path / "work"
    work.mkdir()
    result = CLIAdapter(binary, work_dir=work).run("none.yaml")
    assert os.path.realpath(result.stdout) == os.path.realpath(work)


def test_run_timeout_reports_killed(tmp_path):
    binary = _script(tmp_path, "exec sleep 5")
    result = CLIAdapter(binary).run("none.yaml", RunOptions(timeout=0.3))
    assert result.exit_code == -1


def test_run_parses_json_report(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "report.json").write_text(
        json.dumps([{"app_name": "Admin", "success": True, "duration_ms": 1200}])
    )
    binary = _script(tmp_path, "echo done")
    config = _config(tmp_path, f"name: t\noutput: '{out}'\n")
    result = CLIAdapter(binary).run(config)
    assert result.report_json == str(out / "report.json")
    assert [(a.name, a.success, a.duration_ms) for a in result.apps] == [
        ("Admin", True, 1200)
    ]


def test_run_falls_back_to_stdout_apps(tmp_path):
    binary = _script(
        tmp_path,
        'echo "INFO Processing application: Admin (web)"; '
        'echo "ERROR Failed app: Admin - timeout"',
    )
    result = CLIAdapter(binary).run("none.yaml")
    assert len(result.apps) == 1
    assert result.apps[0].name == "Admin"
    assert result.apps[0].success is False
    assert result.apps[0].error == "timeout"


def test_version(tmp_path):
    binary = _script(tmp_path, 'echo "panoptic v1.2.3"')
    assert CLIAdapter(binary).version() == "panoptic v1.2.3"


def test_version_failure(tmp_path):
    binary = _script(tmp_path, "exit 1")
    with pytest.raises(PanopticError, match="failed to get panoptic version"):
        CLIAdapter(binary).version()


def test_scan_artifacts(tmp_path):
    shots = tmp_path / "screenshots"
    shots.mkdir()
    (shots / "login.png").write_text("png")
    (tmp_path / "session.mp4").write_text("mp4")
    (tmp_path / "report.html").write_text("<html>")
    (tmp_path / "report.json").write_text("[]")
    (tmp_path / "ai_error_report.json").write_text("{}")
    (tmp_path / "ai_tests.yaml").write_text("")
    (tmp_path / "vision.json").write_text("{}")

    result = PanopticRunResult()
    scan_artifacts(tmp_path, result)

    assert result.screenshots == [str(shots / "login.png")]
    assert result.videos == [str(tmp_path / "session.mp4")]
    assert result.report_html == str(tmp_path / "report.html")
    assert result.report_json == str(tmp_path / "report.json")
    assert result.ai_error_report == str(tmp_path / "ai_error_report.json")
    assert result.ai_generated_tests == str(tmp_path / "ai_tests.yaml")
    assert result.vision_report == str(tmp_path / "vision.json")


def test_scan_artifacts_missing_dir(tmp_path):
    result = PanopticRunResult()
    scan_artifacts(tmp_path / "absent", result)
    assert result.screenshots == [] and result.report_html == ""


def test_guess_output_dir(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text('name: test\noutput: "./reports/qa/test"\n')
    assert guess_output_dir(config) == "./reports/qa/test"


def test_guess_output_dir_no_output(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("name: test\n")
    assert guess_output_dir(config) == ""


def test_guess_output_dir_missing_file(tmp_path):
    assert guess_output_dir(tmp_path / "absent.yaml") == ""


def test_parse_json_report_single(tmp_path):
    report = tmp_path / "report.json"
    report.write_text(json.dumps({"app_name": "Web", "app_type": "web", "success": False}))
    result = PanopticRunResult(report_json=str(report))
    parse_json_report(result)
    assert [(a.name, a.type, a.success) for a in result.apps] == [("Web", "web", False)]


def test_parse_json_report_invalid(tmp_path):
    report = tmp_path / "report.json"
    report.write_text("{not json")
    result = PanopticRunResult(report_json=str(report))
    parse_json_report(result)
    assert result.apps == []


def test_parse_stdout_apps_multiple():
    result = PanopticRunResult(
        stdout="\n".join(
            [
                "Processing application: Admin (web)",
                "Processing application: Shop",
                "Processing application: Admin (web)",
                "Failed app: Shop - button missing",
                "Failed app: Unknown - ignored",
            ]
        )
    )
    parse_stdout_apps(result)
    by_name = {a.name: a for a in result.apps}
    assert set(by_name) == {"Admin", "Shop"}
    assert by_name["Admin"].success is True
    assert by_name["Shop"].success is False
    assert by_name["Shop"].error == "button missing"