"""
Type Validator - Field-level validation against declared schemas.

This module provides:
- FieldType: Closed set of field kinds a schema may declare
- FieldSchema: Immutable descriptor for one configuration field
- validate_type: Single value vs. single kind check
- validate_field: Recursive validation accumulating path-keyed errors

Errors are never raised for invalid values. They are collected into an
errors dictionary keyed by field path ("user.name", "tags[2]") so a single
pass reports every problem.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from nvcore.lib.utils import deep_copy, is_array


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class DefinitionError(SchemaError):
    """Raised when a schema or field definition is malformed."""

    pass


class FieldType(Enum):
    """Field kinds supported by FieldSchema."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TABLE = "table"
    FUNCTION = "function"
    ANY = "any"
    ARRAY = "array"

    @classmethod
    def _missing_(cls, value):
        if value == "record":
            return cls.TABLE
        return None


Validator = Callable[[Any], "bool | tuple[bool, str | None]"]


def kind_of(value: Any) -> str:
    """
    Get the kind name of a value, as used in validation messages.

    Args:
        value: Value to classify

    Returns:
        One of nil, boolean, number, string, table, function, or the
        Python type name for anything else
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (Mapping, list, tuple)):
        return "table"
    if callable(value):
        return "function"
    return type(value).__name__


@dataclass(frozen=True)
class FieldSchema:
    """
    Declared shape of one configuration field.

    Attributes:
        type: Expected kind of the value
        required: Whether the field must be present
        default: Default value (None means no default)
        fields: Nested field schemas (TABLE only)
        items: Element schema (ARRAY only)
        validator: Custom check returning bool or (bool, message)
        description: Human-readable description
    """

    type: FieldType
    required: bool = False
    default: Any = None
    fields: dict[str, "FieldSchema"] | None = None
    items: "FieldSchema | None" = None
    validator: Validator | None = None
    description: str = ""

    def __post_init__(self):
        """Coerce nested definitions and check field invariants."""
        try:
            object.__setattr__(self, "type", FieldType(self.type))
        except ValueError as e:
            raise DefinitionError(f"Unknown field type: {self.type!r}") from e

        if self.fields is not None:
            if self.type is not FieldType.TABLE:
                raise DefinitionError(
                    f"Nested fields only supported for table type. Got {self.type.value}"
                )
            object.__setattr__(self, "fields", coerce_fields(self.fields))

        if self.items is not None:
            if self.type is not FieldType.ARRAY:
                raise DefinitionError(
                    f"Item schema only supported for array type. Got {self.type.value}"
                )
            object.__setattr__(self, "items", FieldSchema.coerce(self.items))

        if self.validator is not None and not callable(self.validator):
            raise DefinitionError("validator must be callable")

        if self.default is not None:
            valid, err = validate_type(self.default, self.type)
            if not valid:
                raise DefinitionError(f"Default value {self.default!r}: {err}")

    @classmethod
    def coerce(cls, value: "FieldSchema | Mapping[str, Any]") -> "FieldSchema":
        """
        Build a FieldSchema from a FieldSchema or a plain mapping.

        Args:
            value: Existing FieldSchema, or mapping with the same keys

        Returns:
            FieldSchema instance

        Raises:
            DefinitionError: If the mapping is malformed
        """
        if isinstance(value, FieldSchema):
            return value
        if not isinstance(value, Mapping):
            raise DefinitionError(
                f"Field schema must be a mapping, got {kind_of(value)}"
            )
        if "type" not in value:
            raise DefinitionError("Field schema is missing 'type'")

        unknown = set(value) - {
            "type", "required", "default", "fields", "items", "validator", "description",
        }
        if unknown:
            raise DefinitionError(f"Unknown field schema keys: {sorted(unknown)}")

        return cls(**value)

    def copy(self) -> "FieldSchema":
        """Return an independent copy (validators are shared)."""
        return FieldSchema(
            type=self.type,
            required=self.required,
            default=deep_copy(self.default),
            fields=(
                {name: nested.copy() for name, nested in self.fields.items()}
                if self.fields is not None
                else None
            ),
            items=self.items.copy() if self.items is not None else None,
            validator=self.validator,
            description=self.description,
        )


def coerce_fields(fields: Mapping[str, Any]) -> dict[str, FieldSchema]:
    """
    Coerce a mapping of field definitions into FieldSchema instances.

    Raises:
        DefinitionError: If any field definition is malformed
    """
    if not isinstance(fields, Mapping):
        raise DefinitionError(f"Schema fields must be a mapping, got {kind_of(fields)}")

    result = {}
    for name, definition in fields.items():
        if not isinstance(name, str) or not name:
            raise DefinitionError(f"Field name must be a non-empty string, got {name!r}")
        try:
            result[name] = FieldSchema.coerce(definition)
        except DefinitionError as e:
            raise DefinitionError(f"Field '{name}': {e}") from e
    return result


def validate_type(value: Any, expected_type: FieldType | str) -> tuple[bool, str | None]:
    """
    Validate a value against a single type.

    Args:
        value: Value to validate
        expected_type: Expected kind

    Returns:
        (True, None) if valid, (False, "Expected X, got Y") otherwise
    """
    expected = FieldType(expected_type)

    if expected is FieldType.ANY:
        return True, None

    if expected is FieldType.ARRAY:
        if is_array(value):
            return True, None
        return False, f"Expected array, got {kind_of(value)}"

    actual = kind_of(value)
    if actual == expected.value:
        return True, None
    return False, f"Expected {expected.value}, got {actual}"


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key)
    return None


def _run_validator(field_schema: FieldSchema, value: Any) -> tuple[bool, str | None]:
    outcome = field_schema.validator(value)
    if isinstance(outcome, tuple):
        valid = outcome[0]
        message = outcome[1] if len(outcome) > 1 else None
    else:
        valid, message = outcome, None
    return bool(valid), message


def validate_field(
    value: Any,
    field_schema: FieldSchema,
    field_path: str,
    errors: dict[str, str],
) -> bool:
    """
    Validate a value against a field schema.

    Array items and nested table fields are all checked even after a
    failure, so errors holds every violation when this returns.

    Args:
        value: Value to validate
        field_schema: Field schema definition
        field_path: Path to the field, used as the error key
        errors: Accumulated errors (modified in place)

    Returns:
        True if valid
    """
    field_type = field_schema.type

    if field_type is FieldType.ANY:
        return True

    if field_type is FieldType.ARRAY:
        if not is_array(value):
            errors[field_path] = f"Expected array, got {kind_of(value)}"
            return False

        if field_schema.items is not None:
            items = (
                [value[index] for index in range(1, len(value) + 1)]
                if isinstance(value, Mapping)
                else value
            )
            all_valid = True
            for index, item in enumerate(items, start=1):
                item_path = f"{field_path}[{index}]"
                if not validate_field(item, field_schema.items, item_path, errors):
                    all_valid = False
            if not all_valid:
                return False

    else:
        type_valid, type_err = validate_type(value, field_type)
        if not type_valid:
            errors[field_path] = type_err
            return False

        if field_type is FieldType.TABLE and field_schema.fields:
            all_valid = True
            for nested_name, nested_schema in field_schema.fields.items():
                nested_path = f"{field_path}.{nested_name}"
                nested_value = _lookup(value, nested_name)

                if nested_value is None:
                    if nested_schema.required:
                        errors[nested_path] = "Required field is missing"
                        all_valid = False
                    continue

                if not validate_field(nested_value, nested_schema, nested_path, errors):
                    all_valid = False

            if not all_valid:
                return False

    if field_schema.validator is not None:
        valid, message = _run_validator(field_schema, value)
        if not valid:
            errors[field_path] = message or "Custom validation failed"
            return False

    return True
