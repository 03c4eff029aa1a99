"""Aggregated summaries of challenge runs, saved as JSON and Markdown."""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from challengekit.report.history import _nanoseconds, format_duration
from challengekit.report.markdown import _rfc3339, _status_text

_PASSED = "passed"
_STAMP = "%Y%m%d_%H%M%S"


def _as_timedelta(duration: Any) -> timedelta:
    if isinstance(duration, timedelta):
        return duration
    return timedelta(microseconds=_nanoseconds(duration) // 1000)


@dataclass
class ChallengeSummary:
    """The outcome of one challenge within a master summary."""

    challenge_id: str
    challenge_name: str
    status: str
    duration: timedelta = field(default_factory=timedelta)
    assertions_passed: int = 0
    assertions_total: int = 0
    results_path: str = ""


@dataclass
class MasterSummary:
    """Aggregated outcome of many challenge runs."""

    id: str
    generated_at: datetime
    challenges: list[ChallengeSummary] = field(default_factory=list)
    total_challenges: int = 0
    passed_challenges: int = 0
    failed_challenges: int = 0
    total_duration: timedelta = field(default_factory=timedelta)
    average_pass_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form; durations are in nanoseconds."""
        return {
            "id": self.id,
            "generated_at": self.generated_at.isoformat(),
            "challenges": [
                {
                    "challenge_id": c.challenge_id,
                    "challenge_name": c.challenge_name,
                    "status": c.status,
                    "duration": _nanoseconds(c.duration),
                    "assertions_passed": c.assertions_passed,
                    "assertions_total": c.assertions_total,
                    "results_path": c.results_path,
                }
                for c in self.challenges
            ],
            "total_challenges": self.total_challenges,
            "passed_challenges": self.passed_challenges,
            "failed_challenges": self.failed_challenges,
            "total_duration": _nanoseconds(self.total_duration),
            "average_pass_rate": self.average_pass_rate,
        }


def build_master_summary(results: Sequence[Any] | None) -> MasterSummary:
    """Aggregate challenge results into a master summary."""
    now = datetime.now().astimezone()
    summary = MasterSummary(id=f"summary_{now.strftime(_STAMP)}", generated_at=now)

    for result in results or []:
        assertions = list(getattr(result, "assertions", None) or [])
        status = _status_text(result.status)
        duration = _as_timedelta(getattr(result, "duration", None))
        summary.challenges.append(
            ChallengeSummary(
                challenge_id=str(result.challenge_id),
                challenge_name=result.challenge_name,
                status=status,
                duration=duration,
                assertions_passed=sum(1 for a in assertions if a.passed),
                assertions_total=len(assertions),
            )
        )
        summary.total_challenges += 1
        summary.total_duration += duration
        if status == _PASSED:
            summary.passed_challenges += 1
        else:
            summary.failed_challenges += 1

    if summary.total_challenges:
        summary.average_pass_rate = summary.passed_challenges / summary.total_challenges
    return summary


def _write(path: Path, text: str, what: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OSError(
            exc.errno, f"failed to write {what} summary: {exc.strerror}", str(path)
        ) from exc


def save_master_summary(
    summary: MasterSummary, output_dir: str | os.PathLike[str]
) -> tuple[Path, Path]:
    """Write the summary as timestamped JSON and Markdown files.

    Also points ``latest_summary.json`` and ``latest_summary.md`` at them
    with symlinks where the platform allows. Returns the two file paths.
    """
    directory = Path(output_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(
            exc.errno,
            f"failed to create output directory: {exc.strerror}",
            str(directory),
        ) from exc

    stamp = summary.generated_at.strftime(_STAMP)
    json_path = directory / f"master_summary_{stamp}.json"
    try:
        json_text = json.dumps(summary.to_dict(), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to marshal summary: {exc}") from exc
    _write(json_path, json_text, "JSON")

    md_path = directory / f"master_summary_{stamp}.md"
    _write(md_path, summary_markdown(summary), "Markdown")

    for target, link_name in (
        (json_path, "latest_summary.json"),
        (md_path, "latest_summary.md"),
    ):
        link = directory / link_name
        with contextlib.suppress(OSError):
            link.unlink()
        with contextlib.suppress(OSError):
            os.symlink(target.name, link)

    return json_path, md_path


def summary_markdown(summary: MasterSummary) -> str:
    """Render a master summary as Markdown."""
    lines = [
        "# Challenges Framework - Master Summary\n\n",
        f"**Summary ID:** {summary.id}\n\n",
        f"**Generated:** {_rfc3339(summary.generated_at)}\n\n",
        "## Overview\n\n",
        "| Challenge | Status | Duration | Assertions |\n",
        "|-----------|--------|----------|------------|\n",
    ]
    for c in summary.challenges:
        lines.append(
            f"| {c.challenge_name} | {c.status.upper()} | "
            f"{format_duration(c.duration)} | "
            f"{c.assertions_passed}/{c.assertions_total} |\n"
        )
    lines += [
        "\n## Statistics\n\n",
        "| Metric | Value |\n",
        "|--------|-------|\n",
        f"| Total Challenges | {summary.total_challenges} |\n",
        f"| Passed | {summary.passed_challenges} |\n",
        f"| Failed | {summary.failed_challenges} |\n",
        f"| Pass Rate | {summary.average_pass_rate * 100:.0f}% |\n",
        f"| Total Duration | {format_duration(summary.total_duration)} |\n",
        "\n---\n\n",
        "*Generated by Challenges Framework*\n",
    ]
    return "".join(lines)