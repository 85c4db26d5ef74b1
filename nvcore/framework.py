"""
Framework - Wiring of the core registries and the setup entry point.

A Framework owns one event bus, one plugin registry (publishing on that
bus), one schema registry and one module loader, all reporting through
the same log sink. Framework settings are declared as the "framework"
schema and applied by setup().

Example:
    fw = Framework()
    fw.plugins.register("git", {"config": configure_git})
    fw.setup({"plugins": ["git"], "log_level": "debug"})
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from nvcore.config.schema import ConfigSchema
from nvcore.config.toml_handler import TOMLError, read_toml
from nvcore.core.event_bus import EventBus
from nvcore.core.notify import LogSink, Severity, configure_logging, level_names, logging_sink
from nvcore.lib.utils import deep_copy
from nvcore.plugin.loader import LoaderError, ModuleLoader, ModuleResolver
from nvcore.plugin.registry import PluginRegistry

FRAMEWORK_SCHEMA = "framework"

SETUP_COMPLETE_EVENT = "setup:complete"
SETUP_FAILED_EVENT = "setup:failed"


def _check_level(value: str) -> tuple[bool, str | None]:
    if value.lower() in level_names():
        return True, None
    return False, f"Log level must be one of {', '.join(level_names())}"


def framework_fields() -> dict[str, dict[str, Any]]:
    """Field definitions of the "framework" settings schema."""
    return {
        "log_level": {
            "type": "string",
            "default": "info",
            "validator": _check_level,
            "description": "Threshold of the nvcore logger",
        },
        "modules": {
            "type": "array",
            "items": {"type": "string"},
            "default": [],
            "description": "Feature modules loaded (and set up) during setup",
        },
        "plugins": {
            "type": "array",
            "items": {"type": "string"},
            "default": [],
            "description": "Plugins loaded during setup, dependencies first",
        },
        "plugin_specs": {
            "type": "table",
            "default": {},
            "description": "Plugin name -> registration data for plugins declared in config",
        },
    }


class Framework:
    """Container for one instance of every core component."""

    def __init__(self, sink: LogSink | None = None, resolver: ModuleResolver | None = None):
        """
        Initialize Framework.

        Args:
            sink: Diagnostic sink shared by all components (default: logging)
            resolver: Module resolver for the loader (default: importlib)
        """
        self.sink = sink or logging_sink
        self.events = EventBus(sink=self.sink)
        self.plugins = PluginRegistry(self.events, sink=self.sink)
        self.schemas = ConfigSchema()
        self.modules = ModuleLoader(resolver, sink=self.sink)
        self.schemas.define(FRAMEWORK_SCHEMA, framework_fields()).unwrap()
        self._settings: dict[str, Any] = self.schemas.merge(FRAMEWORK_SCHEMA, {})

    @property
    def settings(self) -> dict[str, Any]:
        """Copy of the settings applied by the last successful setup()."""
        return deep_copy(self._settings)

    def setup(self, config: Mapping[str, Any] | None = None) -> bool:
        """
        Initialize the framework from a settings mapping.

        Validates the settings, registers declared plugin specs, loads the
        listed modules (calling their setup()) and plugins, then emits
        setup:complete. Every failure is reported through the sink and
        emitted as setup:failed.

        Args:
            config: Settings matching the "framework" schema

        Returns:
            True if initialization succeeded
        """
        resolved = self.schemas.resolve(FRAMEWORK_SCHEMA, config or {})
        if not resolved:
            for path, message in resolved.error.errors.items():
                self.sink(f"Invalid framework setting '{path}': {message}", Severity.ERROR)
            return self._fail(str(resolved.error))

        settings = resolved.value

        for name, spec in settings["plugin_specs"].items():
            if self.plugins.get(name) is not None:
                continue
            registered = self.plugins.register(name, spec)
            if not registered:
                return self._fail(registered.message)

        loaded_modules = []
        for module_name in settings["modules"]:
            try:
                self.modules.load(module_name, call_setup=True)
            except LoaderError as e:
                return self._fail(str(e))
            loaded_modules.append(module_name)

        loaded_plugins = []
        for plugin_name in settings["plugins"]:
            loaded = self.plugins.load(plugin_name)
            if not loaded:
                return self._fail(loaded.message)
            loaded_plugins.append(plugin_name)

        configure_logging(settings["log_level"])
        self._settings = settings
        self.events.emit(
            SETUP_COMPLETE_EVENT,
            {"modules": loaded_modules, "plugins": loaded_plugins},
        )
        return True

    def load_config_file(self, file_path: Path) -> bool:
        """
        Run setup() with the [framework] table of a TOML file.

        A file without a [framework] table sets up with defaults.

        Args:
            file_path: Path to the TOML file

        Returns:
            True if initialization succeeded
        """
        try:
            data = read_toml(Path(file_path))
        except TOMLError as e:
            return self._fail(str(e))
        return self.setup(data.get(FRAMEWORK_SCHEMA, {}))

    def _fail(self, message: str) -> bool:
        self.sink(f"Framework initialization failed: {message}", Severity.ERROR)
        self.events.emit(SETUP_FAILED_EVENT, {"error": message})
        return False
