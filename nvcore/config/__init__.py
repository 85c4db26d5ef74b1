"""
nvcore Configuration - Schema declaration, validation and merging.

This module provides:
- ConfigSchema: Registry of write-once named schemas
- FieldSchema / FieldType: Field descriptors
- TOML input and commented TOML generation

Example usage:
    from nvcore.config import ConfigSchema

    schemas = ConfigSchema()
    schemas.define("server", {
        "port": {
            "type": "number",
            "required": True,
            "validator": lambda v: (1 <= v <= 65535, "Port must be between 1 and 65535"),
        },
    })

    result = schemas.validate("server", {"port": 99999})
    result.error.errors  # {"port": "Port must be between 1 and 65535"}
"""

from nvcore.config.schema import ConfigSchema, ValidationError
from nvcore.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    parse_toml,
    read_toml,
)
from nvcore.lib.validator import DefinitionError, FieldSchema, FieldType, SchemaError

__all__ = [
    "ConfigSchema",
    "DefinitionError",
    "FieldSchema",
    "FieldType",
    "SchemaError",
    "TOMLError",
    "ValidationError",
    "generate_toml_from_schema",
    "parse_toml",
    "read_toml",
]
