"""Running Panoptic as a subprocess and collecting what it produced."""

from __future__ import annotations

import json
import os
import stat
import subprocess
import time
from collections.abc import Iterator
from datetime import timedelta
from pathlib import Path

from challengekit.panoptic.types import AppResult, PanopticRunResult, RunOptions

_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg"}
_VIDEO_EXTENSIONS = {".mp4", ".webm"}
_PROCESSING_MARKER = "Processing application:"
_FAILED_MARKER = "Failed app:"


class PanopticError(Exception):
    """Raised when the Panoptic binary cannot be run."""


def _text(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CLIAdapter:
    """Runs a Panoptic binary as a subprocess.

    ``work_dir`` sets the directory the binary runs in; ``env`` holds extra
    environment variables passed to every run.
    """

    def __init__(
        self,
        binary_path: str | os.PathLike[str],
        work_dir: str | os.PathLike[str] = "",
        env: dict[str, str] | None = None,
    ) -> None:
        self.binary_path = str(binary_path)
        self.work_dir = str(work_dir) if work_dir else ""
        self.env: dict[str, str] = dict(env or {})

    def run(
        self, config_path: str | os.PathLike[str], options: RunOptions | None = None
    ) -> PanopticRunResult:
        """Run ``panoptic run <config_path>`` and gather results and artifacts.

        A non-zero exit status is reported in the result, not raised.
        """
        options = options or RunOptions()
        config_path = str(config_path)

        args = [self.binary_path, "run", config_path]
        if options.verbose:
            args.append("--verbose")
        if options.output_dir:
            args += ["--output", options.output_dir]

        env = dict(os.environ)
        env.update(self.env)
        env.update(options.env)

        start = time.monotonic()
        try:
            completed = subprocess.run(
                args,
                cwd=self.work_dir or None,
                env=env,
                capture_output=True,
                timeout=options.effective_timeout,
                check=False,
            )
            stdout, stderr = _text(completed.stdout), _text(completed.stderr)
            exit_code = completed.returncode
        except subprocess.TimeoutExpired as exc:
            stdout, stderr = _text(exc.stdout), _text(exc.stderr)
            exit_code = -1
        except OSError as exc:
            raise PanopticError(f"panoptic execution failed: {exc}") from exc
        elapsed = time.monotonic() - start

        result = PanopticRunResult(
            exit_code=exit_code,
            stdout=stdout.strip(),
            stderr=stderr.strip(),
            duration=timedelta(seconds=elapsed),
        )

        output_dir = options.output_dir or guess_output_dir(config_path)
        if output_dir:
            scan_artifacts(output_dir, result)
        if result.report_json:
            parse_json_report(result)
        if not result.apps:
            parse_stdout_apps(result)
        return result

    def version(self) -> str:
        """Return the output of ``panoptic --version``."""
        try:
            completed = subprocess.run(
                [self.binary_path, "--version"],
                capture_output=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise PanopticError(f"failed to get panoptic version: {exc}") from exc
        return _text(completed.stdout).strip()

    def available(self) -> bool:
        """Tell whether the binary exists, is a file and is executable."""
        try:
            info = os.stat(self.binary_path)
        except OSError:
            return False
        return not stat.S_ISDIR(info.st_mode) and bool(info.st_mode & 0o111)


def guess_output_dir(config_path: str | os.PathLike[str]) -> str:
    """Return the value of the first ``output:`` line of a config, or ""."""
    try:
        text = Path(config_path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""
    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed.startswith("output:"):
            return trimmed[len("output:"):].strip().strip("\"'")
    return ""


def _walk_files(directory: str) -> Iterator[tuple[str, str]]:
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError:
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(entry.path)
        else:
            yield entry.path, entry.name


def scan_artifacts(directory: str | os.PathLike[str], result: PanopticRunResult) -> None:
    """Record screenshots, videos and reports found under ``directory``."""
    for path, name in _walk_files(str(directory)):
        ext = os.path.splitext(name)[1].lower()
        if ext in _IMAGE_EXTENSIONS:
            result.screenshots.append(path)
        elif ext in _VIDEO_EXTENSIONS:
            result.videos.append(path)
        elif name == "report.html":
            result.report_html = path
        elif name == "report.json":
            result.report_json = path
        elif "ai_error" in name:
            result.ai_error_report = path
        elif "ai_test" in name:
            result.ai_generated_tests = path
        elif "vision" in name:
            result.vision_report = path


def parse_json_report(result: PanopticRunResult) -> None:
    """Fill ``result.apps`` from the JSON report: a list of apps or one app."""
    try:
        data = json.loads(Path(result.report_json).read_bytes())
    except (OSError, ValueError):
        return
    try:
        if data is None:
            result.apps = []
        elif isinstance(data, list):
            result.apps = [AppResult.from_dict(item) for item in data]
        elif isinstance(data, dict):
            result.apps = [AppResult.from_dict(data)]
    except ValueError:
        return


def parse_stdout_apps(result: PanopticRunResult) -> None:
    """Add app results taken from the processing and failure lines of stdout."""
    apps: dict[str, AppResult] = {}
    for line in result.stdout.split("\n"):
        idx = line.find(_PROCESSING_MARKER)
        if idx >= 0:
            name = line[idx + len(_PROCESSING_MARKER):].strip()
            paren = name.find(" (")
            if paren >= 0:
                name = name[:paren]
            apps.setdefault(name, AppResult(name=name, success=True))
        idx = line.find(_FAILED_MARKER)
        if idx >= 0:
            rest = line[idx + len(_FAILED_MARKER):].strip()
            dash = rest.find(" - ")
            if dash >= 0:
                app = apps.get(rest[:dash].strip())
                if app is not None:
                    app.success = False
                    app.error = rest[dash + 3:].strip()
    result.apps.extend(apps.values())