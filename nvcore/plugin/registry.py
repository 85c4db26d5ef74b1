"""
Plugin Registry.

This module provides plugin registration and lifecycle management.

Key features:
- Plugin registry keyed by unique name
- Dependency resolution with depth-first cycle detection
- Lifecycle events (before_load, loaded, configured, error)
- Lazy-load metadata carried for the host's loading layer
- Querying with loaded/lazy filters (always returns copies)

A plugin moves from registered to loaded exactly once. A failed load
leaves it registered and loadable again; a loaded plugin cannot be
unregistered.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from nvcore.core.event_bus import EventBus
from nvcore.core.notify import LogSink, Severity, logging_sink
from nvcore.core.result import Result
from nvcore.lib.utils import deep_copy, is_array


BEFORE_LOAD_EVENT = "plugin:before_load"
LOADED_EVENT = "plugin:loaded"
CONFIGURED_EVENT = "plugin:configured"
ERROR_EVENT = "plugin:error"


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class RegistrationError(PluginError):
    """Raised when a plugin cannot be registered or unregistered."""

    pass


class PluginNotFoundError(PluginError):
    """Raised when a plugin name is not registered."""

    pass


class DependencyError(PluginError):
    """Raised when dependency resolution fails."""

    pass


class CircularDependencyError(DependencyError):
    """Raised when the dependency graph contains a cycle."""

    pass


class PluginConfigError(PluginError):
    """Raised when a plugin's config callback fails."""

    pass


class PluginState(Enum):
    """Plugin state enumeration."""

    REGISTERED = "registered"
    LOADED = "loaded"


@dataclass
class PluginSpec:
    """
    Registered plugin specification.

    Attributes:
        name: Unique plugin name
        dependencies: Names of plugins that must load first
        config: Zero-argument callback run once at load time
        lazy: Whether the host should defer loading
        trigger_event: Host event that triggers a lazy load
        trigger_command: Host command that triggers a lazy load
        trigger_filetypes: File types that trigger a lazy load
        description: Plugin description
        author: Plugin author
        version: Plugin version
        url: Plugin URL
        loaded: Whether the plugin has been loaded
    """

    name: str
    dependencies: list[str] = field(default_factory=list)
    config: Callable[[], Any] | None = None
    lazy: bool = False
    trigger_event: str | list[str] | None = None
    trigger_command: str | list[str] | None = None
    trigger_filetypes: list[str] | None = None
    description: str | None = None
    author: str | None = None
    version: str | None = None
    url: str | None = None
    loaded: bool = False

    @property
    def state(self) -> PluginState:
        return PluginState.LOADED if self.loaded else PluginState.REGISTERED

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> "PluginSpec":
        """
        Build a spec from a registration mapping.

        Lazy-load triggers may be given as event/cmd/ft (short form) or
        trigger_event/trigger_command/trigger_filetypes.

        Args:
            name: Plugin name
            data: Registration mapping

        Returns:
            New, unloaded PluginSpec

        Raises:
            RegistrationError: If the mapping is malformed
        """
        if not isinstance(data, Mapping) or is_array(data):
            raise RegistrationError(f"Plugin '{name}': spec must be a mapping")

        dependencies = data.get("dependencies")
        if dependencies is None:
            dependencies = []
        elif isinstance(dependencies, str) or not is_array(dependencies):
            raise RegistrationError(f"Plugin '{name}': dependencies must be a list")
        else:
            if isinstance(dependencies, Mapping):
                dependencies = [dependencies[i] for i in range(1, len(dependencies) + 1)]
            for dep in dependencies:
                if not isinstance(dep, str) or not dep:
                    raise RegistrationError(
                        f"Plugin '{name}': dependency names must be non-empty strings"
                    )

        config = data.get("config")
        if config is not None and not callable(config):
            raise RegistrationError(f"Plugin '{name}': config must be callable")

        return cls(
            name=name,
            dependencies=list(dependencies),
            config=config,
            lazy=bool(data.get("lazy", False)),
            trigger_event=deep_copy(data.get("trigger_event", data.get("event"))),
            trigger_command=deep_copy(data.get("trigger_command", data.get("cmd"))),
            trigger_filetypes=deep_copy(data.get("trigger_filetypes", data.get("ft"))),
            description=data.get("description"),
            author=data.get("author"),
            version=data.get("version"),
            url=data.get("url"),
        )

    def copy(self) -> "PluginSpec":
        """Return a snapshot that shares no mutable state with this spec."""
        return replace(
            self,
            dependencies=list(self.dependencies),
            trigger_event=deep_copy(self.trigger_event),
            trigger_command=deep_copy(self.trigger_command),
            trigger_filetypes=deep_copy(self.trigger_filetypes),
        )


class PluginRegistry:
    """
    Plugin lifecycle manager.

    Manages plugin registration, dependency-ordered loading and the
    lifecycle events emitted on the event bus.
    """

    def __init__(self, events: EventBus | None = None, sink: LogSink | None = None):
        """
        Initialize PluginRegistry.

        Args:
            events: Bus receiving lifecycle events (default: a private bus)
            sink: Diagnostic sink (default: logging)
        """
        self._sink = sink or logging_sink
        self.events = events if events is not None else EventBus(sink=self._sink)
        self._plugins: dict[str, PluginSpec] = {}

    def register(self, name: str, spec: Mapping[str, Any]) -> Result:
        """
        Register a plugin.

        Args:
            name: Plugin name (must be unique)
            spec: Registration mapping with the keys dependencies, config,
                lazy, event, cmd, ft, description, author, version, url

        Returns:
            Result, failed with RegistrationError on a bad name, malformed
            spec or duplicate name
        """
        if not isinstance(name, str) or not name:
            return Result.failure(RegistrationError("Plugin name must be a non-empty string"))

        if name in self._plugins:
            return Result.failure(RegistrationError(f"Plugin '{name}' already registered"))

        try:
            plugin = PluginSpec.from_mapping(name, spec)
        except RegistrationError as e:
            return Result.failure(e)

        self._plugins[name] = plugin
        return Result.success(name)

    def load(self, name: str) -> Result:
        """
        Load a plugin and its dependencies.

        The whole dependency chain is resolved before anything loads, so a
        missing or circular dependency leaves every plugin in the chain
        unloaded.

        Args:
            name: Plugin name

        Returns:
            Result, failed with PluginNotFoundError, DependencyError,
            CircularDependencyError or PluginConfigError
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            error = PluginNotFoundError(f"Plugin not found: {name}")
            self._sink(f"Failed to load plugin: {error}", Severity.WARN)
            return Result.failure(error)

        if plugin.loaded:
            return Result.success(name)

        try:
            load_order = self._resolve_dependencies(name)
        except DependencyError as e:
            self._sink(f"Failed to load plugin '{name}': {e}", Severity.WARN)
            return Result.failure(e)

        for plugin_name in load_order:
            result = self._load_single_plugin(plugin_name)
            if not result:
                return result

        return Result.success(name)

    def load_order(self, name: str) -> Result:
        """
        Resolve the order in which load() would load plugins.

        Args:
            name: Plugin name

        Returns:
            Result holding not-yet-loaded plugin names, dependencies first
        """
        if name not in self._plugins:
            return Result.failure(PluginNotFoundError(f"Plugin not found: {name}"))
        try:
            return Result.success(self._resolve_dependencies(name))
        except DependencyError as e:
            return Result.failure(e)

    def _resolve_dependencies(self, plugin_name: str) -> list[str]:
        """
        Depth-first dependency resolution.

        Nodes on the current path are tracked in a stack set; reaching one of
        them again is a cycle. Fully processed nodes go to a visited set.

        Returns:
            Unloaded plugin names in load order (dependencies first)

        Raises:
            DependencyError: If a dependency is not registered
            CircularDependencyError: If a cycle is found
        """
        order: list[str] = []
        visited: set[str] = set()
        path: list[str] = []
        on_path: set[str] = set()

        def visit(name: str, required_by: str | None) -> None:
            if name in on_path:
                cycle = path[path.index(name):] + [name]
                raise CircularDependencyError(
                    f"Circular dependency detected: {' -> '.join(cycle)}"
                )
            if name in visited:
                return

            plugin = self._plugins.get(name)
            if plugin is None:
                raise DependencyError(
                    f"Plugin '{required_by}' depends on '{name}', but it is not registered"
                )

            if not plugin.loaded:
                path.append(name)
                on_path.add(name)
                for dep_name in plugin.dependencies:
                    visit(dep_name, name)
                path.pop()
                on_path.discard(name)
                order.append(name)

            visited.add(name)

        visit(plugin_name, None)
        return order

    def _load_single_plugin(self, name: str) -> Result:
        """
        Load one plugin whose dependencies are already loaded.

        The config callback runs inside a failure boundary: an exception is
        reported, emitted as plugin:error and returned as a failed Result.
        """
        plugin = self._plugins[name]
        if plugin.loaded:
            return Result.success(name)

        self.events.emit(BEFORE_LOAD_EVENT, {"name": name})
        self.events.emit(LOADED_EVENT, {"name": name})

        if plugin.config is not None:
            try:
                plugin.config()
            except Exception as e:
                self._sink(f"Error configuring plugin '{name}': {e}", Severity.ERROR)
                self.events.emit(ERROR_EVENT, {"name": name, "error": e})
                error = PluginConfigError(f"Plugin '{name}' config failed: {e}")
                error.__cause__ = e
                return Result.failure(error)

            self.events.emit(CONFIGURED_EVENT, {"name": name})

        plugin.loaded = True
        return Result.success(name)

    def get(self, name: str) -> PluginSpec | None:
        """
        Get plugin information.

        Args:
            name: Plugin name

        Returns:
            Copy of the plugin spec, or None if not found
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            return None
        return plugin.copy()

    def list(self, *, loaded: bool | None = None, lazy: bool | None = None) -> list[PluginSpec]:
        """
        List plugins in registration order.

        Args:
            loaded: Only plugins with this loaded status (None = any)
            lazy: Only plugins with this lazy flag (None = any)

        Returns:
            Copies of the matching plugin specs
        """
        return [
            plugin.copy()
            for plugin in self._plugins.values()
            if (loaded is None or plugin.loaded == loaded)
            and (lazy is None or plugin.lazy == lazy)
        ]

    def is_loaded(self, name: str) -> bool:
        plugin = self._plugins.get(name)
        return plugin is not None and plugin.loaded

    def unregister(self, name: str) -> Result:
        """
        Unregister a plugin.

        Args:
            name: Plugin name

        Returns:
            Result, failed if the plugin does not exist or is already loaded
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            return Result.failure(PluginNotFoundError(f"Plugin not found: {name}"))

        if plugin.loaded:
            return Result.failure(
                RegistrationError(f"Plugin '{name}' is loaded and cannot be unregistered")
            )

        del self._plugins[name]
        return Result.success(name)
