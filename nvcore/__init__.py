"""
nvcore - Plugin, event and configuration core for editor configurations.

This is the main package that exports the public API. The namespaces
below forward to a process-wide default Framework; every component can
also be instantiated on its own.
"""

__version__ = "0.1.0"

from types import SimpleNamespace

from nvcore.core.result import Result
from nvcore.framework import Framework

# Process-wide default instance
default = Framework()

# Event bus API namespace
events = SimpleNamespace(
    on=default.events.on,
    emit=default.events.emit,
    off=default.events.off,
    clear=default.events.clear,
    get_subscribers=default.events.get_subscribers,
    subscriber=default.events.subscriber,
)

# Plugin registry API namespace
plugins = SimpleNamespace(
    register=default.plugins.register,
    load=default.plugins.load,
    get=default.plugins.get,
    list=default.plugins.list,
    unregister=default.plugins.unregister,
    is_loaded=default.plugins.is_loaded,
    load_order=default.plugins.load_order,
)

# Configuration schema API namespace
schemas = SimpleNamespace(
    define=default.schemas.define,
    validate=default.schemas.validate,
    apply_defaults=default.schemas.apply_defaults,
    merge=default.schemas.merge,
    get=default.schemas.get,
)

# Module loader API namespace
modules = SimpleNamespace(
    load=default.modules.load,
    reload=default.modules.reload,
    is_loaded=default.modules.is_loaded,
    get_loaded_modules=default.modules.get_loaded_modules,
)

setup = default.setup

__all__ = [
    "__version__",
    "Framework",
    "Result",
    "default",
    "events",
    "modules",
    "plugins",
    "schemas",
    "setup",
]
