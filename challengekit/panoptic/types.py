"""Data types for runs, results and configuration of the Panoptic UI tester."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

DEFAULT_RUN_TIMEOUT = 600.0

_MISSING = object()


def _field(data: dict[str, Any], key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        return default
    bad_bool = isinstance(value, bool) and kind in (int, float, (int, float))
    if bad_bool or not isinstance(value, kind):
        raise ValueError(f"field {key!r} has the wrong type")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = _field(data, key, list, [])
    if not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must be a list of strings")
    return list(value)


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a mapping")
    return data


@dataclass
class AppResult:
    """The outcome of testing a single application."""

    name: str = ""
    type: str = ""
    success: bool = False
    duration: timedelta = field(default_factory=timedelta)
    duration_ms: int = 0
    screenshots: list[str] = field(default_factory=list)
    videos: list[str] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppResult:
        """Build a result from a decoded JSON report entry.

        The ``duration`` key holds nanoseconds.
        """
        data = _require_mapping(data, "app result")
        nanoseconds = _field(data, "duration", int, 0)
        return cls(
            name=_field(data, "app_name", str, ""),
            type=_field(data, "app_type", str, ""),
            success=_field(data, "success", bool, False),
            duration=timedelta(microseconds=nanoseconds // 1000),
            duration_ms=_field(data, "duration_ms", int, 0),
            screenshots=_str_list(data, "screenshots"),
            videos=_str_list(data, "videos"),
            error=_field(data, "error", str, ""),
        )


@dataclass
class PanopticRunResult:
    """Everything one Panoptic run produced: apps, artifacts and reports."""

    exit_code: int = 0
    apps: list[AppResult] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    videos: list[str] = field(default_factory=list)
    report_html: str = ""
    report_json: str = ""
    ai_error_report: str = ""
    ai_generated_tests: str = ""
    vision_report: str = ""
    stdout: str = ""
    stderr: str = ""
    duration: timedelta = field(default_factory=timedelta)


@dataclass
class PanopticAction:
    """A single test step of an application."""

    name: str = ""
    type: str = ""
    url: str = ""
    target: str = ""
    value: str = ""
    selector: str = ""
    wait_time: int = 0
    duration: int = 0
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML-ready form; empty optional fields are left out."""
        out: dict[str, Any] = {"name": self.name, "type": self.type}
        optional = (
            ("url", self.url),
            ("target", self.target),
            ("value", self.value),
            ("selector", self.selector),
            ("wait_time", self.wait_time),
            ("duration", self.duration),
            ("parameters", dict(self.parameters)),
        )
        out.update((key, value) for key, value in optional if value)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanopticAction:
        """Build an action from its decoded YAML form."""
        data = _require_mapping(data, "action")
        return cls(
            name=_field(data, "name", str, ""),
            type=_field(data, "type", str, ""),
            url=_field(data, "url", str, ""),
            target=_field(data, "target", str, ""),
            value=_field(data, "value", str, ""),
            selector=_field(data, "selector", str, ""),
            wait_time=_field(data, "wait_time", int, 0),
            duration=_field(data, "duration", int, 0),
            parameters=dict(_field(data, "parameters", dict, {})),
        )


@dataclass
class PanopticApp:
    """One application to test, with its actions."""

    name: str = ""
    type: str = ""
    url: str = ""
    path: str = ""
    platform: str = ""
    timeout: int = 0
    environment: dict[str, str] = field(default_factory=dict)
    actions: list[PanopticAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML-ready form; empty optional fields are left out."""
        out: dict[str, Any] = {"name": self.name, "type": self.type}
        for key, value in (("url", self.url), ("path", self.path), ("platform", self.platform)):
            if value:
                out[key] = value
        out["timeout"] = self.timeout
        if self.environment:
            out["environment"] = dict(self.environment)
        out["actions"] = [action.to_dict() for action in self.actions]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanopticApp:
        """Build an application from its decoded YAML form."""
        data = _require_mapping(data, "app")
        environment = _field(data, "environment", dict, {})
        return cls(
            name=_field(data, "name", str, ""),
            type=_field(data, "type", str, ""),
            url=_field(data, "url", str, ""),
            path=_field(data, "path", str, ""),
            platform=_field(data, "platform", str, ""),
            timeout=_field(data, "timeout", int, 0),
            environment={str(k): str(v) for k, v in environment.items()},
            actions=[
                PanopticAction.from_dict(item)
                for item in _field(data, "actions", list, [])
            ],
        )


@dataclass
class AITestingSettings:
    """Switches for Panoptic's AI testing features."""

    enable_error_detection: bool = False
    enable_test_generation: bool = False
    enable_vision_analysis: bool = False
    confidence_threshold: float = 0.0


@dataclass
class PanopticSettings:
    """Execution settings of a Panoptic run."""

    screenshot_format: str = ""
    video_format: str = ""
    quality: int = 0
    headless: bool = False
    window_width: int = 0
    window_height: int = 0
    enable_metrics: bool = False
    log_level: str = ""
    ai_testing: AITestingSettings | None = None
    cloud: dict[str, Any] = field(default_factory=dict)
    enterprise: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML-ready form; only ``headless`` is always present."""
        out: dict[str, Any] = {}

        def put(key: str, value: Any) -> None:
            if value:
                out[key] = value

        put("screenshot_format", self.screenshot_format)
        put("video_format", self.video_format)
        put("quality", self.quality)
        out["headless"] = self.headless
        put("window_width", self.window_width)
        put("window_height", self.window_height)
        put("enable_metrics", self.enable_metrics)
        put("log_level", self.log_level)
        if self.ai_testing is not None:
            ai = self.ai_testing
            ai_dict: dict[str, Any] = {
                "enable_error_detection": ai.enable_error_detection,
                "enable_test_generation": ai.enable_test_generation,
                "enable_vision_analysis": ai.enable_vision_analysis,
            }
            if ai.confidence_threshold:
                ai_dict["confidence_threshold"] = ai.confidence_threshold
            out["ai_testing"] = ai_dict
        put("cloud", dict(self.cloud))
        put("enterprise", dict(self.enterprise))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanopticSettings:
        """Build settings from their decoded YAML form."""
        data = _require_mapping(data, "settings")
        ai_raw = _field(data, "ai_testing", dict, None)
        ai_testing = None
        if ai_raw is not None:
            ai_testing = AITestingSettings(
                enable_error_detection=_field(ai_raw, "enable_error_detection", bool, False),
                enable_test_generation=_field(ai_raw, "enable_test_generation", bool, False),
                enable_vision_analysis=_field(ai_raw, "enable_vision_analysis", bool, False),
                confidence_threshold=float(
                    _field(ai_raw, "confidence_threshold", (int, float), 0.0)
                ),
            )
        return cls(
            screenshot_format=_field(data, "screenshot_format", str, ""),
            video_format=_field(data, "video_format", str, ""),
            quality=_field(data, "quality", int, 0),
            headless=_field(data, "headless", bool, False),
            window_width=_field(data, "window_width", int, 0),
            window_height=_field(data, "window_height", int, 0),
            enable_metrics=_field(data, "enable_metrics", bool, False),
            log_level=_field(data, "log_level", str, ""),
            ai_testing=ai_testing,
            cloud=dict(_field(data, "cloud", dict, {})),
            enterprise=dict(_field(data, "enterprise", dict, {})),
        )


@dataclass
class PanopticConfig:
    """A complete Panoptic configuration file."""

    name: str = ""
    output: str = ""
    apps: list[PanopticApp] = field(default_factory=list)
    actions: list[PanopticAction] = field(default_factory=list)
    settings: PanopticSettings = field(default_factory=PanopticSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML-ready form of the configuration."""
        out: dict[str, Any] = {
            "name": self.name,
            "output": self.output,
            "apps": [app.to_dict() for app in self.apps],
        }
        if self.actions:
            out["actions"] = [action.to_dict() for action in self.actions]
        out["settings"] = self.settings.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PanopticConfig:
        """Build a configuration from its decoded YAML form."""
        data = _require_mapping(data, "config")
        return cls(
            name=_field(data, "name", str, ""),
            output=_field(data, "output", str, ""),
            apps=[PanopticApp.from_dict(item) for item in _field(data, "apps", list, [])],
            actions=[
                PanopticAction.from_dict(item)
                for item in _field(data, "actions", list, [])
            ],
            settings=PanopticSettings.from_dict(_field(data, "settings", dict, {})),
        )


@dataclass
class RunOptions:
    """Options for one Panoptic run. ``timeout`` is in seconds."""

    output_dir: str = ""
    verbose: bool = False
    timeout: float | None = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def effective_timeout(self) -> float:
        """The timeout to use, falling back to ten minutes."""
        return self.timeout if self.timeout else DEFAULT_RUN_TIMEOUT


@runtime_checkable
class PanopticAdapter(Protocol):
    """Something that can execute Panoptic configurations."""

    def run(self, config_path: str, options: RunOptions | None = None) -> PanopticRunResult:
        """Execute a config file and return the aggregated result."""

    def version(self) -> str:
        """Return the Panoptic version string."""

    def available(self) -> bool:
        """Tell whether Panoptic can be run."""


@dataclass
class AITestingOpts:
    """Options for enabling AI testing in a generated config."""

    error_detection: bool = False
    test_generation: bool = False
    vision_analysis: bool = False
    confidence_threshold: float = 0.0


@dataclass
class CloudOpts:
    """Options for cloud integration in a generated config."""

    provider: str = ""
    bucket: str = ""
    enable_sync: bool = False


@dataclass
class EnterpriseOpts:
    """Options for enterprise features in a generated config."""

    config_path: str = ""