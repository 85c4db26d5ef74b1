"""
Module Loader.

This module provides cached, tracked loading of feature modules.

Key features:
- Explicit store of modules loaded through the loader (name -> module)
- Pluggable resolvers: importlib/sys.modules, or an in-memory table
- Forced reload by evicting from the resolver's cache first
- Optional setup() call after loading (the feature-module convention)
"""

import importlib
import re
import sys
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

from nvcore.core.notify import LogSink, Severity, logging_sink


class LoaderError(Exception):
    """Base exception for loader-related errors."""

    pass


class ModuleResolver(Protocol):
    """Host module-resolution mechanism the loader delegates to."""

    def resolve(self, name: str) -> Any: ...

    def evict(self, name: str) -> None: ...

    def is_cached(self, name: str) -> bool: ...

    def cached_names(self) -> Iterable[str]: ...


class ImportlibResolver:
    """Resolver backed by importlib and the sys.modules cache."""

    def resolve(self, name: str) -> Any:
        return importlib.import_module(name)

    def evict(self, name: str) -> None:
        sys.modules.pop(name, None)

    def is_cached(self, name: str) -> bool:
        return name in sys.modules

    def cached_names(self) -> Iterable[str]:
        return list(sys.modules)


class MappingResolver:
    """
    Resolver backed by an explicit table of module factories.

    Each factory is called once per resolution that misses the cache;
    the result is cached until evicted.

    Example:
        resolver = MappingResolver({"features.git": lambda: GitFeature()})
    """

    def __init__(self, factories: Mapping[str, Callable[[], Any]] | None = None):
        self._factories: dict[str, Callable[[], Any]] = dict(factories or {})
        self._cache: dict[str, Any] = {}

    def add(self, name: str, factory: Callable[[], Any]) -> None:
        self._factories[name] = factory

    def resolve(self, name: str) -> Any:
        if name in self._cache:
            return self._cache[name]
        if name not in self._factories:
            raise ModuleNotFoundError(f"No module named '{name}'")
        module = self._factories[name]()
        self._cache[name] = module
        return module

    def evict(self, name: str) -> None:
        self._cache.pop(name, None)

    def is_cached(self, name: str) -> bool:
        return name in self._cache

    def cached_names(self) -> Iterable[str]:
        return list(self._cache)


def _check_name(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise LoaderError("Module name must be a non-empty string")


class ModuleLoader:
    """
    Loads modules through a resolver and tracks what it loaded.

    The tracked store only reflects loads performed through this loader;
    is_loaded() and pattern queries look at the resolver's cache instead.
    """

    def __init__(self, resolver: ModuleResolver | None = None, sink: LogSink | None = None):
        """
        Initialize ModuleLoader.

        Args:
            resolver: Module resolver (default: ImportlibResolver)
            sink: Diagnostic sink (default: logging)
        """
        self.resolver = resolver if resolver is not None else ImportlibResolver()
        self._sink = sink or logging_sink
        self._modules: dict[str, Any] = {}

    def load(
        self,
        name: str,
        *,
        force: bool = False,
        silent: bool = False,
        call_setup: bool = False,
    ) -> Any:
        """
        Load a module.

        Args:
            name: Module name (e.g. "features.git")
            force: Evict from the resolver cache before loading
            silent: Suppress the debug notification
            call_setup: Call module.setup() if it exists

        Returns:
            The loaded module

        Raises:
            LoaderError: If the name is invalid, the module cannot be loaded,
                or its setup() raises
        """
        _check_name(name)

        if force:
            self.resolver.evict(name)

        try:
            module = self.resolver.resolve(name)
        except Exception as e:
            raise LoaderError(f'Failed to load module "{name}": {e}') from e

        # Re-inserting keeps first-load order while refreshing the value
        self._modules[name] = module

        if call_setup:
            self._call_setup(name, module)

        if not silent:
            self._sink(f"Module loaded: {name}", Severity.DEBUG)

        return module

    def _call_setup(self, name: str, module: Any) -> None:
        # Mapping-shaped modules expose setup as a key
        if isinstance(module, Mapping):
            setup = module.get("setup")
        else:
            setup = getattr(module, "setup", None)
        if not callable(setup):
            return

        try:
            outcome = setup()
        except Exception as e:
            raise LoaderError(f'Module setup failed for "{name}": {e}') from e

        if outcome is False:
            self._sink(f"Module setup reported failure: {name}", Severity.WARN)

    def reload(
        self,
        name: str,
        *,
        silent: bool = False,
        call_setup: bool = False,
    ) -> Any:
        """
        Reload a module by evicting it and loading it again.

        Raises:
            LoaderError: If the name is invalid, the module cannot be loaded,
                or its setup() raises
        """
        _check_name(name)

        self.resolver.evict(name)

        if not silent:
            self._sink(f"Reloading module: {name}", Severity.DEBUG)

        return self.load(name, silent=silent, call_setup=call_setup)

    def is_loaded(self, name: str) -> bool:
        """Check the resolver's cache for a module."""
        if not isinstance(name, str) or not name:
            return False
        return self.resolver.is_cached(name)

    def get(self, name: str) -> Any | None:
        """Get a module loaded through this loader, or None."""
        return self._modules.get(name)

    def get_loaded_modules(self, pattern: str | None = None) -> list[str]:
        """
        List loaded module names.

        Args:
            pattern: Regular expression searched in every cached module name.
                When given, the whole resolver cache is scanned, not only
                modules loaded through this loader.

        Returns:
            Module names

        Raises:
            LoaderError: If pattern is not a valid regular expression
        """
        if pattern is not None:
            try:
                regex = re.compile(pattern)
            except re.error as e:
                raise LoaderError(f"Invalid module pattern {pattern!r}: {e}") from e
            return [
                name
                for name in self.resolver.cached_names()
                if isinstance(name, str) and regex.search(name)
            ]

        return list(self._modules)
