"""
TOML Handler.

This module provides TOML input for configuration files and TOML output
for documenting schemas.

Key features:
- Parse TOML files and strings using tomllib (Python 3.11+)
- Generate commented TOML from a schema using tomlkit
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit

from nvcore.lib.validator import FieldSchema, FieldType


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Args:
        file_path: Path to the TOML file

    Returns:
        Parsed TOML data as dictionary

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def parse_toml(text: str) -> dict[str, Any]:
    """
    Parse TOML text.

    Raises:
        TOMLError: If the text is not valid TOML
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML: {e}") from e


def _describe(field: FieldSchema) -> str:
    parts = [f"type: {field.type.value}"]
    if field.type is FieldType.ARRAY and field.items is not None:
        parts[0] = f"type: array of {field.items.type.value}"
    if field.required:
        parts.append("required")
    return ", ".join(parts)


def _add_fields(
    table: Any, fields: Mapping[str, FieldSchema], values: Mapping[str, Any]
) -> None:
    for field_name, field in fields.items():
        # Callables have no TOML representation
        if field.type is FieldType.FUNCTION:
            continue

        if field.description:
            table.add(tomlkit.comment(field.description))
        table.add(tomlkit.comment(_describe(field)))

        value = values.get(field_name, field.default)

        if field.type is FieldType.TABLE and field.fields:
            nested = tomlkit.table()
            _add_fields(
                nested, field.fields, value if isinstance(value, Mapping) else {}
            )
            table.add(field_name, nested)
        elif value is None:
            table.add(tomlkit.comment(f"{field_name} = <no default>"))
        else:
            table.add(field_name, value)

        table.add(tomlkit.nl())


def generate_toml_from_schema(
    schema_name: str,
    fields: Mapping[str, FieldSchema],
    values: Mapping[str, Any] | None = None,
) -> str:
    """
    Generate TOML content from a schema with descriptive comments.

    Args:
        schema_name: Name of the schema (used as section header)
        fields: Field definitions
        values: Values to render instead of defaults (optional)

    Returns:
        TOML string with comments
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment(f"Configuration for {schema_name}"))
    doc.add(tomlkit.nl())

    section = tomlkit.table()
    _add_fields(section, fields, values or {})
    doc.add(schema_name, section)

    return tomlkit.dumps(doc)
