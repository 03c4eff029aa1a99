# challengekit

Building blocks for running suites of *challenges*: self-contained checks
that depend on one another, produce assertions and metrics, and end up in
human- and machine-readable reports. It also drives the Panoptic UI-testing
binary and turns its runs into assertion values and metrics.

Install with `pip install .` (add `.[test]` for pytest).

## What is in the package

- `challengekit.plugins`: `PluginRegistry` registers plugins by name and
  initialises each one at most once; `PluginLoader` registers and
  initialises in one step. A plugin is any object with `name`, `version`
  and `init(ctx)`; `PluginContext` carries a `config` dict. Failures raise
  `PluginError`.
- `challengekit.registry`: `ChallengeRegistry` stores challenges (any object
  with an `id` and a sequence of `dependencies`) and definitions (any object
  with an `id` and a `category`), and `DEFAULT_REGISTRY` is a shared
  instance. The module also offers `topological_sort`, `detect_cycle` and
  `sorted_dependencies`.
- `challengekit.bank_loader`: `ChallengeDefinition` and functions that load
  definition banks into a registry.
- `challengekit.report`: `MarkdownReporter`, `JSONReporter` and
  `HTMLReporter`; master summaries (`summary`); a JSON-lines run history and
  `format_duration` (`history`).
- `challengekit.panoptic`: data types, a `ConfigBuilder` for Panoptic YAML
  configurations, a `CLIAdapter` that runs the binary, result parsers,
  eight assertion evaluators and `PanopticPlugin`.

## Registering challenges and ordering them

```python
from challengekit.registry import ChallengeRegistry, CircularDependencyError, RegistryError
from challengekit.bank_loader import load_definitions_from_dir

registry = ChallengeRegistry()
registry.register(login_challenge)        # needs .id and .dependencies
registry.register(checkout_challenge)     # RegistryError if the id is taken

registry.validate_dependencies()          # RegistryError on an unregistered dependency

try:
    for challenge in registry.dependency_order():
        ...
except CircularDependencyError as exc:
    print(exc.cycle)

load_definitions_from_dir(registry, "challenges/")
core = registry.list_by_category("core")
```

`dependency_order` puts each challenge after its dependencies and breaks
ties by ID. When no order exists it raises `CircularDependencyError`; this
also happens when a challenge depends on one that is not registered, in
which case the cycle text may be `"unknown cycle"`. `list_challenges`,
`list_definitions` and `list_by_category` return entries sorted by ID;
`list_by_category` leaves out challenges that have no definition. `get`
and `get_definition` raise `RegistryError` for unknown IDs; `clear` empties
the registry and `len(registry)` counts challenges.

## Definition banks

A bank is a JSON object with an optional `"version"` string and a
`"challenges"` list. Each entry becomes a `ChallengeDefinition` with `id`,
`name`, `description`, `category`, `dependencies`, `assertions` and
`metrics`; other keys are ignored.

- `load_definitions_from_file(registry, path)`
- `load_definitions_from_bytes(registry, data, source)`
- `load_definitions_from_dir(registry, directory)` reads every `.json`,
  `.yaml` and `.yml` file directly in the directory, in name order, without
  descending into subdirectories.

Every bank file is parsed as JSON, whatever its extension; YAML syntax is
not understood. Unreadable files, bad JSON and duplicate IDs raise
`RegistryError`.

## Writing reports

The reporters work with result objects you supply. A result needs
`challenge_id`, `challenge_name`, `status` (a string or an enum whose value
is one; `"passed"` counts as passing), `start_time`, `end_time`
(`datetime`), `duration` (`timedelta` or integer nanoseconds), `error`,
`assertions` (items with `type`, `target`, `passed`, `message`), `metrics`
(a mapping of items with `name`, `value`, `unit`), `outputs` (a name-to-path
mapping) and `logs` (with `challenge_log`, `output_log`, `api_requests`,
`api_responses`).

```python
from challengekit.report.markdown import MarkdownReporter
from challengekit.report.json_report import JSONReporter
from challengekit.report.html import HTMLReporter
from challengekit.report.summary import build_master_summary, save_master_summary
from challengekit.report.history import append_to_history

reporter = MarkdownReporter("results")
reporter.save_report(result, "report.md")
reporter.save_master_summary(results, "summary.md")

text = JSONReporter(pretty=True).generate_report(result)
page = HTMLReporter().generate_master_summary(results)

summary = build_master_summary(results)
json_path, md_path = save_master_summary(summary, "results/summaries")

entry = append_to_history("results/history.jsonl", result, "results/run-001")
```

All three reporters have `generate_report`, `write_report(stream, result)`
and `generate_master_summary`, returning text. `JSONReporter` writes
durations as nanoseconds and timestamps in ISO 8601; `HTMLReporter` escapes
every user-supplied value. `save_master_summary` creates the directory,
writes `master_summary_<timestamp>.json` and `.md`, and points
`latest_summary.json` and `latest_summary.md` at them with symlinks where
the platform allows. `append_to_history` appends one JSON line per call and
returns the `HistoricalEntry` it wrote.

## Building a Panoptic configuration

```python
from challengekit.panoptic.config_builder import ConfigBuilder
from challengekit.panoptic.types import AITestingOpts

builder = ConfigBuilder("Smoke", "./reports/smoke")
(
    builder.add_web_app("Admin", "http://localhost:3001", 60)
    .navigate("login", "http://localhost:3001/login")
    .fill("user", "input[name='username']", "admin")
    .click("submit", "button[type='submit']")
    .wait("load", 3)
    .screenshot("dashboard", "dashboard.png")
    .done()
)
builder.set_headless(True).set_window_size(1280, 720)
builder.enable_ai_testing(AITestingOpts(error_detection=True, confidence_threshold=0.8))
builder.write_yaml("generated/panoptic.yaml")
```

Defaults: PNG screenshots, MP4 video, quality 90, headless, a 1920x1080
window, metrics on and log level `info`. `build()` returns an independent
`PanopticConfig`; `write_yaml` creates parent directories. Desktop and
mobile targets come from `add_desktop_app` and `add_mobile_app`; further
steps are `record`, `ai_error_detection`, `ai_test_generation`,
`vision_report` and `submit`.

## Running Panoptic

```python
from challengekit.panoptic.cli_adapter import CLIAdapter, PanopticError
from challengekit.panoptic.types import RunOptions
from challengekit.panoptic.result_parser import (
    parse_result_to_assertion_values,
    parse_result_to_metrics,
)

adapter = CLIAdapter("/usr/local/bin/panoptic", work_dir="qa", env={"MODE": "ci"})
if adapter.available():
    run = adapter.run("generated/panoptic.yaml", RunOptions(verbose=True, timeout=300))
    values = parse_result_to_assertion_values(run)
    metrics = parse_result_to_metrics(run)
```

`run` starts `panoptic run <config>` (with `--verbose` and `--output` when
asked), captures stdout and stderr, and scans the output directory (the
option, or else the `output:` line of the config) for screenshots, videos,
`report.html`, `report.json` and AI reports. Per-application results come
from `report.json` when present and from the binary's log lines otherwise.
A non-zero exit code is recorded in the result rather than raised; a run
that exceeds its timeout (ten minutes by default) gets exit code `-1`.
Failing to start the binary raises `PanopticError`, as does a failing
`version()`.

## Evaluators and the plugin

`challengekit.panoptic.evaluators` provides `screenshot_exists`,
`video_exists`, `no_ui_errors`, `ai_confidence_above`, `all_apps_passed`,
`max_duration`, `report_exists` and `app_count`. Each takes a definition
(whose `value` attribute holds the expectation) and the actual value, and
returns `(passed, message)`. `register_evaluators(engine)` calls
`engine.register(name, evaluator)` for all eight and raises `ValueError`
if one fails. `PanopticPlugin(engine)` does the same from its `init`, so it
can be loaded through a `PluginRegistry`.

## What the package does not do

- It has no challenge base class, result type or assertion engine; the
  registry, reporters and plugin work with objects you provide that have
  the attributes described above.
- It has no ready-made challenge that runs Panoptic and evaluates its
  assertions; combine `CLIAdapter`, the result parsers and your assertion
  engine yourself.
- It has no command-line program.