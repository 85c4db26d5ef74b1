"""
nvcore Libraries - Stateless helpers shared by the core components.

- utils: Structural helpers (deep_copy, deep_merge, is_array, is_empty)
- validator: Type and field validation against FieldSchema descriptors
"""

__all__ = []
