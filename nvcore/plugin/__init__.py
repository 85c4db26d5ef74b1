"""
nvcore Plugin System - Plugin registration, loading and module loading.

This module handles:
- Plugin registration with dependencies and lazy-load metadata
- Dependency-ordered loading with cycle detection
- Lifecycle events on the event bus
- Cached module loading with optional setup() calls
"""

from nvcore.plugin.loader import (
    ImportlibResolver,
    LoaderError,
    MappingResolver,
    ModuleLoader,
)
from nvcore.plugin.registry import (
    CircularDependencyError,
    DependencyError,
    PluginConfigError,
    PluginError,
    PluginNotFoundError,
    PluginRegistry,
    PluginSpec,
    PluginState,
    RegistrationError,
)

__all__ = [
    "CircularDependencyError",
    "DependencyError",
    "ImportlibResolver",
    "LoaderError",
    "MappingResolver",
    "ModuleLoader",
    "PluginConfigError",
    "PluginError",
    "PluginNotFoundError",
    "PluginRegistry",
    "PluginSpec",
    "PluginState",
    "RegistrationError",
]
