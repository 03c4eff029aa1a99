"""The plugin that adds Panoptic assertion evaluators to the framework."""

from __future__ import annotations

from typing import Any

from challengekit.panoptic.evaluators import register_evaluators
from challengekit.plugins import PluginContext, PluginError

PLUGIN_NAME = "panoptic"
PLUGIN_VERSION = "1.0.0"


class PanopticPlugin:
    """Registers the Panoptic evaluators with an assertion engine on init."""

    name = PLUGIN_NAME
    version = PLUGIN_VERSION

    def __init__(self, engine: Any) -> None:
        self.engine = engine

    def init(self, ctx: PluginContext | None) -> None:
        """Register the evaluators; the context is not used."""
        if self.engine is None:
            raise PluginError("panoptic plugin: assertion engine is None")
        register_evaluators(self.engine)