"""A fluent builder for Panoptic configuration files."""

from __future__ import annotations

import copy
import os
from pathlib import Path

import yaml

from challengekit.panoptic.types import (
    AITestingOpts,
    AITestingSettings,
    CloudOpts,
    EnterpriseOpts,
    PanopticAction,
    PanopticApp,
    PanopticConfig,
    PanopticSettings,
)


class ConfigBuilder:
    """Builds a PanopticConfig step by step, with sensible default settings."""

    def __init__(self, name: str, output_dir: str) -> None:
        self._config = PanopticConfig(
            name=name,
            output=output_dir,
            settings=PanopticSettings(
                screenshot_format="png",
                video_format="mp4",
                quality=90,
                headless=True,
                window_width=1920,
                window_height=1080,
                enable_metrics=True,
                log_level="info",
            ),
        )
        self._apps: list[AppBuilder] = []

    def _add_app(self, app: PanopticApp) -> AppBuilder:
        builder = AppBuilder(self, app)
        self._apps.append(builder)
        return builder

    def add_web_app(self, name: str, url: str, timeout: int) -> AppBuilder:
        """Add a web application and return its builder."""
        return self._add_app(PanopticApp(name=name, type="web", url=url, timeout=timeout))

    def add_desktop_app(self, name: str, path: str, platform: str, timeout: int) -> AppBuilder:
        """Add a desktop application and return its builder."""
        return self._add_app(
            PanopticApp(name=name, type="desktop", path=path, platform=platform, timeout=timeout)
        )

    def add_mobile_app(self, name: str, platform: str, timeout: int) -> AppBuilder:
        """Add a mobile application and return its builder."""
        return self._add_app(
            PanopticApp(name=name, type="mobile", platform=platform, timeout=timeout)
        )

    def set_headless(self, headless: bool) -> ConfigBuilder:
        """Choose whether to run headless."""
        self._config.settings.headless = headless
        return self

    def set_quality(self, quality: int) -> ConfigBuilder:
        """Set screenshot and video quality (1-100)."""
        self._config.settings.quality = quality
        return self

    def set_window_size(self, width: int, height: int) -> ConfigBuilder:
        """Set the browser window size."""
        self._config.settings.window_width = width
        self._config.settings.window_height = height
        return self

    def set_log_level(self, level: str) -> ConfigBuilder:
        """Set the logging level."""
        self._config.settings.log_level = level
        return self

    def enable_ai_testing(self, opts: AITestingOpts) -> ConfigBuilder:
        """Turn on AI testing features."""
        self._config.settings.ai_testing = AITestingSettings(
            enable_error_detection=opts.error_detection,
            enable_test_generation=opts.test_generation,
            enable_vision_analysis=opts.vision_analysis,
            confidence_threshold=opts.confidence_threshold,
        )
        return self

    def enable_cloud(self, opts: CloudOpts) -> ConfigBuilder:
        """Turn on cloud integration."""
        self._config.settings.cloud = {
            "provider": opts.provider,
            "bucket": opts.bucket,
            "enable_sync": opts.enable_sync,
        }
        return self

    def enable_enterprise(self, opts: EnterpriseOpts) -> ConfigBuilder:
        """Turn on enterprise features."""
        self._config.settings.enterprise = {"config_path": opts.config_path}
        return self

    def build(self) -> PanopticConfig:
        """Return an independent copy of the configuration built so far."""
        config = copy.deepcopy(self._config)
        config.apps = [copy.deepcopy(builder.app) for builder in self._apps]
        return config

    def write_yaml(self, path: str | os.PathLike[str]) -> None:
        """Write the configuration as YAML, creating parent directories."""
        text = yaml.safe_dump(self.build().to_dict(), sort_keys=False, allow_unicode=True)
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")


class AppBuilder:
    """Adds actions to one application of a ConfigBuilder."""

    def __init__(self, parent: ConfigBuilder, app: PanopticApp) -> None:
        self.parent = parent
        self.app = app

    def _add(self, action: PanopticAction) -> AppBuilder:
        self.app.actions.append(action)
        return self

    def navigate(self, name: str, url: str) -> AppBuilder:
        """Add a navigation step."""
        return self._add(PanopticAction(name=name, type="navigate", url=url))

    def fill(self, name: str, selector: str, value: str) -> AppBuilder:
        """Add a form fill step."""
        return self._add(PanopticAction(name=name, type="fill", selector=selector, value=value))

    def click(self, name: str, selector: str) -> AppBuilder:
        """Add a click step."""
        return self._add(PanopticAction(name=name, type="click", selector=selector))

    def wait(self, name: str, seconds: int) -> AppBuilder:
        """Add a wait step."""
        return self._add(PanopticAction(name=name, type="wait", wait_time=seconds))

    def screenshot(self, name: str, filename: str) -> AppBuilder:
        """Add a screenshot step."""
        return self._add(
            PanopticAction(name=name, type="screenshot", parameters={"filename": filename})
        )

    def record(self, name: str, filename: str, duration_sec: int) -> AppBuilder:
        """Add a video recording step."""
        return self._add(
            PanopticAction(
                name=name,
                type="record",
                duration=duration_sec,
                parameters={"filename": filename},
            )
        )

    def ai_error_detection(self, name: str, output: str) -> AppBuilder:
        """Add an AI error detection step."""
        return self._add(
            PanopticAction(name=name, type="smart_error_detection", parameters={"output": output})
        )

    def ai_test_generation(self, name: str, output: str) -> AppBuilder:
        """Add an AI test generation step."""
        return self._add(
            PanopticAction(name=name, type="ai_test_generation", parameters={"output": output})
        )

    def vision_report(self, name: str, output: str) -> AppBuilder:
        """Add a computer vision analysis step."""
        return self._add(
            PanopticAction(name=name, type="vision_report", parameters={"output": output})
        )

    def submit(self, name: str, selector: str) -> AppBuilder:
        """Add a form submit step."""
        return self._add(PanopticAction(name=name, type="submit", selector=selector))

    def done(self) -> ConfigBuilder:
        """Return to the parent ConfigBuilder."""
        return self.parent