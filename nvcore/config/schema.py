"""
Configuration Schema Engine.

This module provides named, write-once configuration schemas.

Key features:
- Schema declaration from FieldSchema objects or plain mappings
- Validation reporting every violation, keyed by field path
- Recursive default application
- Merging of user configuration over declared defaults (records merge,
  arrays are replaced whole)

Schemas are permissive: fields present in a configuration but absent from
the schema are ignored.
"""

from collections.abc import Mapping
from typing import Any

from nvcore.core.result import Result
from nvcore.lib.utils import deep_copy, deep_merge
from nvcore.lib.validator import (
    DefinitionError,
    FieldSchema,
    FieldType,
    SchemaError,
    coerce_fields,
    validate_field,
)


class ValidationError(SchemaError):
    """
    Raised (or carried by a Result) when a configuration is invalid.

    Attributes:
        errors: Field path -> error message
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{path}: {message}" for path, message in self.errors.items())
        super().__init__(f"Invalid configuration: {details}")


def _apply_defaults(schema_def: dict[str, FieldSchema], config: Mapping) -> dict:
    result = deep_copy(config)

    for field_name, field_schema in schema_def.items():
        if result.get(field_name) is None and field_schema.default is not None:
            result[field_name] = deep_copy(field_schema.default)

        nested = result.get(field_name)
        if (
            field_schema.type is FieldType.TABLE
            and field_schema.fields
            and isinstance(nested, Mapping)
        ):
            result[field_name] = _apply_defaults(field_schema.fields, nested)

    return result


class ConfigSchema:
    """
    Registry of named configuration schemas.

    Example:
        schemas = ConfigSchema()
        schemas.define("lsp", {
            "enabled": {"type": "boolean", "default": True},
            "servers": {"type": "array", "items": {"type": "string"},
                        "default": ["lua_ls", "pyright"]},
        })
        schemas.merge("lsp", {"enabled": False})
        # {"enabled": False, "servers": ["lua_ls", "pyright"]}
    """

    def __init__(self):
        self._schemas: dict[str, dict[str, FieldSchema]] = {}

    def define(self, name: str, schema_def: Mapping[str, Any]) -> Result:
        """
        Define a configuration schema.

        Args:
            name: Schema name (must be unique)
            schema_def: Field name -> FieldSchema (or mapping with the keys
                type, required, default, fields, items, validator, description)

        Returns:
            Result, failed with DefinitionError on a bad name, a malformed
            definition, or a duplicate name
        """
        if not isinstance(name, str) or not name:
            return Result.failure(DefinitionError("Schema name must be a non-empty string"))

        if name in self._schemas:
            return Result.failure(DefinitionError(f"Schema '{name}' already defined"))

        try:
            fields = coerce_fields(schema_def)
        except DefinitionError as e:
            return Result.failure(DefinitionError(f"Schema '{name}': {e}"))

        self._schemas[name] = {field_name: f.copy() for field_name, f in fields.items()}
        return Result.success(name)

    def validate(self, schema_name: str, config: Any) -> Result:
        """
        Validate a configuration against a schema.

        Args:
            schema_name: Name of the schema to validate against
            config: Configuration mapping

        Returns:
            Result, failed with a ValidationError whose errors map holds
            every violation found
        """
        schema_def = self._schemas.get(schema_name)
        if schema_def is None:
            return Result.failure(
                ValidationError({"_schema": f"Schema not found: {schema_name}"})
            )

        if not isinstance(config, Mapping):
            return Result.failure(ValidationError({"_config": "Config must be a table"}))

        errors: dict[str, str] = {}

        for field_name, field_schema in schema_def.items():
            value = config.get(field_name)

            if value is None:
                if field_schema.required:
                    errors[field_name] = "Required field is missing"
                continue

            validate_field(value, field_schema, field_name, errors)

        if errors:
            return Result.failure(ValidationError(errors))
        return Result.success()

    def apply_defaults(self, schema_name: str, config: Mapping | None) -> dict:
        """
        Fill in default values for absent fields, including nested tables.

        Args:
            schema_name: Name of the schema
            config: User configuration (not modified)

        Returns:
            New configuration with defaults applied. Unknown schemas return
            a copy of config.
        """
        config = config or {}
        schema_def = self._schemas.get(schema_name)
        if schema_def is None:
            return deep_copy(dict(config))
        return _apply_defaults(schema_def, config)

    def merge(self, schema_name: str, user_config: Mapping | None) -> dict:
        """
        Merge user configuration over the schema's top-level defaults.

        Args:
            schema_name: Name of the schema
            user_config: User configuration (not modified)

        Returns:
            New merged configuration (user values win at any depth)
        """
        user_config = user_config or {}
        schema_def = self._schemas.get(schema_name)
        if schema_def is None:
            return deep_copy(dict(user_config))

        defaults = {
            field_name: deep_copy(field_schema.default)
            for field_name, field_schema in schema_def.items()
            if field_schema.default is not None
        }
        return deep_merge(defaults, user_config)

    def resolve(self, schema_name: str, user_config: Mapping | None) -> Result:
        """
        Validate a configuration and, when valid, merge it over defaults.

        Returns:
            Result holding the merged configuration, or the validation failure
        """
        validation = self.validate(schema_name, user_config or {})
        if not validation:
            return validation
        return Result.success(self.merge(schema_name, user_config))

    def get(self, name: str) -> dict[str, FieldSchema] | None:
        """
        Get a schema definition.

        Args:
            name: Schema name

        Returns:
            Copy of the field definitions, or None if not found
        """
        schema_def = self._schemas.get(name)
        if schema_def is None:
            return None
        return {field_name: f.copy() for field_name, f in schema_def.items()}

    def has(self, name: str) -> bool:
        return name in self._schemas

    def names(self) -> list[str]:
        return list(self._schemas)
