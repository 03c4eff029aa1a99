"""Plugin registration and initialisation for the challenge framework."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


class PluginError(Exception):
    """Raised when a plugin cannot be registered, found or initialised."""


@dataclass
class PluginContext:
    """Framework state handed to plugins while they initialise."""

    config: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Plugin(Protocol):
    """An extension of the challenge framework."""

    name: str
    version: str

    def init(self, ctx: PluginContext) -> None:
        """Initialise the plugin; raise on failure."""


class PluginRegistry:
    """Keeps registered plugins and tracks which were initialised.

    Safe for use from several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._plugins: dict[str, Plugin] = {}
        self._loaded: set[str] = set()

    def register(self, plugin: Plugin) -> None:
        """Add a plugin; its name must be non-empty and unused."""
        if plugin is None:
            raise PluginError("plugin cannot be None")
        name = plugin.name
        if not name:
            raise PluginError("plugin name cannot be empty")
        with self._lock:
            if name in self._plugins:
                raise PluginError(f"plugin {name!r} already registered")
            self._plugins[name] = plugin

    def get(self, name: str) -> Plugin | None:
        """Return the plugin registered under ``name``, or None."""
        with self._lock:
            return self._plugins.get(name)

    def _init_one(self, name: str, plugin: Plugin, ctx: PluginContext) -> None:
        try:
            plugin.init(ctx)
        except Exception as exc:
            raise PluginError(f"init plugin {name!r}: {exc}") from exc
        self._loaded.add(name)

    def init_all(self, ctx: PluginContext) -> None:
        """Initialise every registered plugin not yet initialised."""
        with self._lock:
            for name, plugin in list(self._plugins.items()):
                if name not in self._loaded:
                    self._init_one(name, plugin, ctx)

    def init(self, name: str, ctx: PluginContext) -> None:
        """Initialise one plugin by name; a loaded plugin is left alone."""
        with self._lock:
            plugin = self._plugins.get(name)
            if plugin is None:
                raise PluginError(f"plugin {name!r} not found")
            if name not in self._loaded:
                self._init_one(name, plugin, ctx)

    def names(self) -> list[str]:
        """Return the names of all registered plugins."""
        with self._lock:
            return list(self._plugins)

    def is_loaded(self, name: str) -> bool:
        """Tell whether the named plugin has been initialised."""
        with self._lock:
            return name in self._loaded

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)


class PluginLoader:
    """Registers plugins with a registry and initialises them."""

    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    def load_and_init(self, plugins: Iterable[Plugin], ctx: PluginContext) -> None:
        """Register all given plugins, then initialise every pending one."""
        for plugin in plugins:
            try:
                self.registry.register(plugin)
            except PluginError as exc:
                raise PluginError(f"load plugin: {exc}") from exc
        self.registry.init_all(ctx)

    def load_one(self, plugin: Plugin, ctx: PluginContext) -> None:
        """Register and initialise a single plugin."""
        try:
            self.registry.register(plugin)
        except PluginError as exc:
            raise PluginError(f"load plugin: {exc}") from exc
        self.registry.init(plugin.name, ctx)