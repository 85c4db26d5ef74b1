"""
Tests for Configuration Schema Engine.

This test suite covers:
1. Schema definition (write-once, malformed definitions)
2. Validation completeness and required fields
3. Default application (nested) and merging
4. Schema introspection returning copies
5. TOML parsing and generation from schema
"""

import pytest

from nvcore.config import (
    ConfigSchema,
    DefinitionError,
    FieldSchema,
    FieldType,
    TOMLError,
    ValidationError,
    generate_toml_from_schema,
    parse_toml,
    read_toml,
)


@pytest.fixture
def schemas():
    return ConfigSchema()


@pytest.fixture
def lsp_schemas(schemas):
    schemas.define("lsp", {
        "enabled": {"type": "boolean", "default": True},
        "servers": {
            "type": "array",
            "items": {"type": "string"},
            "default": ["lua_ls", "pyright"],
        },
        "timeout": {
            "type": "number",
            "default": 5000,
            "validator": lambda v: (v > 0, "Timeout must be positive"),
        },
        "diagnostics": {
            "type": "table",
            "default": {"virtual_text": True, "signs": True},
            "fields": {
                "virtual_text": {"type": "boolean", "default": True},
                "severity": {"type": "string", "default": "warn"},
            },
        },
    })
    return schemas


class TestDefine:
    """Test schema definition."""

    def test_define_success(self, schemas):
        """A valid schema should be defined."""
        result = schemas.define("editor", {"tabstop": {"type": "number", "default": 4}})
        assert result
        assert result.value == "editor"
        assert schemas.has("editor")

    def test_define_duplicate_rejected(self, schemas):
        """Defining the same name twice should fail and keep the first."""
        schemas.define("editor", {"tabstop": {"type": "number", "default": 4}})

        result = schemas.define("editor", {"tabstop": {"type": "number", "default": 8}})

        assert not result
        assert isinstance(result.error, DefinitionError)
        assert schemas.merge("editor", {}) == {"tabstop": 4}

    def test_define_invalid_name(self, schemas):
        """Empty or non-string names should be rejected."""
        assert not schemas.define("", {})
        assert not schemas.define(None, {})

    def test_define_malformed_field(self, schemas):
        """A malformed field should reject the whole schema."""
        result = schemas.define("bad", {
            "ok": {"type": "string"},
            "broken": {"type": "whatever"},
        })
        assert not result
        assert "broken" in result.message
        assert not schemas.has("bad")

    def test_define_non_mapping(self, schemas):
        """A schema definition must be a mapping."""
        assert not schemas.define("bad", ["type", "string"])

    def test_define_accepts_field_schema_objects(self, schemas):
        """FieldSchema instances and mappings may be mixed."""
        assert schemas.define("mixed", {
            "a": FieldSchema(type=FieldType.STRING),
            "b": {"type": "number"},
        })

    def test_definition_is_isolated_from_input(self, schemas):
        """Mutating the definition after define() should not change the schema."""
        default = ["a"]
        schemas.define("iso", {"items": {"type": "array", "default": default}})

        default.append("b")

        assert schemas.merge("iso", {}) == {"items": ["a"]}


class TestValidate:
    """Test configuration validation."""

    def test_reports_every_error(self, schemas):
        """All invalid fields should be reported in one call."""
        schemas.define("person", {
            "name": {"type": "string"},
            "age": {"type": "number"},
        })

        result = schemas.validate("person", {"name": 123, "age": "x"})

        assert not result
        assert isinstance(result.error, ValidationError)
        assert result.error.errors == {
            "name": "Expected string, got number",
            "age": "Expected number, got string",
        }

    def test_required_field_scenario(self, schemas):
        """Required fields and range validators should behave as declared."""
        schemas.define("server", {
            "port": {
                "type": "number",
                "required": True,
                "validator": lambda v: (1 <= v <= 65535, "Port must be between 1 and 65535"),
            },
        })

        missing = schemas.validate("server", {})
        assert not missing
        assert missing.error.errors == {"port": "Required field is missing"}

        assert schemas.validate("server", {"port": 8080})

        out_of_range = schemas.validate("server", {"port": 99999})
        assert not out_of_range
        assert out_of_range.error.errors == {"port": "Port must be between 1 and 65535"}

    def test_unknown_fields_ignored(self, lsp_schemas):
        """Fields absent from the schema should be ignored."""
        assert lsp_schemas.validate("lsp", {"enabled": False, "extra": object()})

    def test_nested_paths(self, lsp_schemas):
        """Nested errors should be keyed by dotted path."""
        result = lsp_schemas.validate("lsp", {
            "diagnostics": {"virtual_text": "yes"},
            "servers": ["lua_ls", 3],
        })
        assert result.error.errors == {
            "diagnostics.virtual_text": "Expected boolean, got string",
            "servers[2]": "Expected string, got number",
        }

    def test_unknown_schema(self, schemas):
        """Validating against an undefined schema should fail."""
        result = schemas.validate("missing", {})
        assert result.error.errors == {"_schema": "Schema not found: missing"}

    def test_config_must_be_mapping(self, lsp_schemas):
        """A non-mapping config should fail."""
        result = lsp_schemas.validate("lsp", "enabled")
        assert result.error.errors == {"_config": "Config must be a table"}

    def test_validation_error_message(self, schemas):
        """The error message should list each path."""
        schemas.define("s", {"a": {"type": "string", "required": True}})
        result = schemas.validate("s", {})
        assert str(result.error) == "Invalid configuration: a: Required field is missing"
        with pytest.raises(ValidationError):
            result.unwrap()


class TestDefaultsAndMerge:
    """Test apply_defaults() and merge()."""

    def test_merge_fills_defaults(self, lsp_schemas):
        """Merging an empty config should yield every default."""
        assert lsp_schemas.merge("lsp", {}) == {
            "enabled": True,
            "servers": ["lua_ls", "pyright"],
            "timeout": 5000,
            "diagnostics": {"virtual_text": True, "signs": True},
        }

    def test_merge_user_wins(self, lsp_schemas):
        """User values should override defaults at any depth."""
        merged = lsp_schemas.merge("lsp", {
            "enabled": False,
            "diagnostics": {"signs": False},
        })
        assert merged["enabled"] is False
        assert merged["diagnostics"] == {"virtual_text": True, "signs": False}

    def test_merge_replaces_arrays(self, lsp_schemas):
        """A user array should replace the default array whole."""
        merged = lsp_schemas.merge("lsp", {"servers": ["gopls"]})
        assert merged["servers"] == ["gopls"]

    def test_merge_is_idempotent(self, lsp_schemas):
        """Merging an already merged config should change nothing."""
        once = lsp_schemas.merge("lsp", {"timeout": 100, "servers": ["gopls"]})
        assert lsp_schemas.merge("lsp", once) == once

    def test_merge_does_not_alias(self, lsp_schemas):
        """Mutating a merge result should not affect defaults or input."""
        user = {"diagnostics": {"signs": False}}

        merged = lsp_schemas.merge("lsp", user)
        merged["servers"].append("tsserver")
        merged["diagnostics"]["signs"] = True

        assert user == {"diagnostics": {"signs": False}}
        assert lsp_schemas.merge("lsp", {})["servers"] == ["lua_ls", "pyright"]

    def test_merge_unknown_schema_copies(self, schemas):
        """An unknown schema should return a copy of the user config."""
        user = {"a": [1]}
        merged = schemas.merge("missing", user)
        assert merged == user
        assert merged["a"] is not user["a"]

    def test_apply_defaults_nested(self, lsp_schemas):
        """apply_defaults should descend into nested table fields."""
        result = lsp_schemas.apply_defaults("lsp", {"diagnostics": {"virtual_text": False}})
        assert result["diagnostics"] == {"virtual_text": False, "severity": "warn"}
        assert result["enabled"] is True

    def test_apply_defaults_does_not_mutate(self, lsp_schemas):
        """apply_defaults should leave its input untouched."""
        config = {"diagnostics": {}}
        lsp_schemas.apply_defaults("lsp", config)
        assert config == {"diagnostics": {}}

    def test_resolve(self, lsp_schemas):
        """resolve should merge valid configs and fail invalid ones."""
        assert lsp_schemas.resolve("lsp", {"timeout": 10}).value["timeout"] == 10
        assert not lsp_schemas.resolve("lsp", {"timeout": -1})


class TestGet:
    """Test schema introspection."""

    def test_get_returns_copy(self, lsp_schemas):
        """Mutating the returned schema should not change the registry."""
        schema = lsp_schemas.get("lsp")
        schema["servers"].default.append("tsserver")
        del schema["enabled"]

        assert lsp_schemas.merge("lsp", {})["servers"] == ["lua_ls", "pyright"]
        assert "enabled" in lsp_schemas.get("lsp")

    def test_get_unknown(self, schemas):
        """An unknown schema should return None."""
        assert schemas.get("missing") is None


class TestTOML:
    """Test TOML input and generation."""

    def test_parse_toml(self):
        """TOML text should parse into dictionaries."""
        data = parse_toml('[framework]\nlog_level = "debug"\nplugins = ["git"]\n')
        assert data == {"framework": {"log_level": "debug", "plugins": ["git"]}}

    def test_parse_invalid_toml(self):
        """Invalid TOML should raise TOMLError."""
        with pytest.raises(TOMLError, match="Failed to parse TOML"):
            parse_toml("not = = toml")

    def test_read_missing_file(self, tmp_path):
        """A missing file should raise TOMLError."""
        with pytest.raises(TOMLError, match="not found"):
            read_toml(tmp_path / "missing.toml")

    def test_read_file(self, tmp_path):
        """A TOML file should be read into a dictionary."""
        path = tmp_path / "settings.toml"
        path.write_text('[lsp]\ntimeout = 100\n')
        assert read_toml(path) == {"lsp": {"timeout": 100}}

    def test_generate_from_schema(self, lsp_schemas):
        """Generated TOML should carry defaults and describe each field."""
        content = generate_toml_from_schema("lsp", lsp_schemas.get("lsp"))

        assert "# Configuration for lsp" in content
        assert "[lsp]" in content
        assert "# type: array of string" in content
        assert "timeout = 5000" in content

        data = parse_toml(content)
        assert data["lsp"]["servers"] == ["lua_ls", "pyright"]
        assert data["lsp"]["diagnostics"] == {"virtual_text": True, "severity": "warn"}

    def test_generate_skips_functions_and_marks_no_default(self, schemas):
        """Function fields are skipped and fields without default are commented."""
        schemas.define("hooks", {
            "on_attach": {"type": "function"},
            "name": {"type": "string", "required": True},
        })

        content = generate_toml_from_schema("hooks", schemas.get("hooks"))

        assert "on_attach" not in content
        assert "# name = <no default>" in content
        assert "# type: string, required" in content
