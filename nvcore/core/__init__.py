"""
nvcore Core - Runtime building blocks of the framework.

This module contains:
- Result: Success/failure return type for definition and dependency paths
- Notify: Logging sink through which every component reports diagnostics
- Event Bus: Priority-ordered pub/sub with one-shot subscriptions
"""

__all__ = []
