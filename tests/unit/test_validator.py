"""Tests for relational schema validation."""

import pytest

from schemabridge.core import ir
from schemabridge.core.errors import SchemaValidationError
from schemabridge.core.validator import (
    ensure_valid,
    validate_entities,
    validate_enums,
    validate_names,
    validate_schema,
)


def id_field() -> ir.FieldSpec:
    return ir.FieldSpec(name="id", type=ir.scalar("Int"), attributes=[ir.IdAttr()])


def text_field(name: str) -> ir.FieldSpec:
    return ir.FieldSpec(name=name, type=ir.scalar("String"))


class TestValidateEntities:
    """Tests for entity checks."""

    def test_valid_schema(self, blog_schema):
        errors, warnings = validate_schema(blog_schema)
        assert errors == []
        assert warnings == []

    def test_entity_without_fields(self):
        schema = ir.RelationalSchema(entities=[ir.EntitySpec(name="Empty")])
        errors, _ = validate_entities(schema)
        assert errors == ["Entity 'Empty' has no fields"]

    def test_duplicate_field_names(self):
        schema = ir.RelationalSchema(
            entities=[
                ir.EntitySpec(
                    name="User", fields=[id_field(), text_field("email"), text_field("email")]
                )
            ]
        )
        errors, _ = validate_entities(schema)
        assert errors == ["Entity 'User' has duplicate field names: email"]

    def test_unknown_relation_key(self):
        author = ir.FieldSpec(
            name="author",
            type=ir.EntityRef(name="User"),
            attributes=[
                ir.RelationAttr(relation=ir.RelationInfo(fields=["authorId"], references=["id"]))
            ],
        )
        schema = ir.RelationalSchema(entities=[ir.EntitySpec(name="Post", fields=[id_field(), author])])

        errors, _ = validate_entities(schema)
        assert len(errors) == 1
        assert "unknown local field 'authorId'" in errors[0]

    def test_unknown_entity_attribute_field(self):
        schema = ir.RelationalSchema(
            entities=[
                ir.EntitySpec(
                    name="User",
                    fields=[id_field()],
                    attributes=[ir.IndexAttr(fields=["email"])],
                )
            ]
        )
        errors, _ = validate_entities(schema)
        assert errors == ["Entity 'User' @@index references unknown field 'email'"]

    def test_missing_primary_key_is_a_warning(self):
        schema = ir.RelationalSchema(entities=[ir.EntitySpec(name="Log", fields=[text_field("line")])])
        errors, warnings = validate_entities(schema)
        assert errors == []
        assert warnings == ["Entity 'Log' has no primary key"]

    def test_composite_id_counts_as_primary_key(self):
        schema = ir.RelationalSchema(
            entities=[
                ir.EntitySpec(
                    name="Membership",
                    fields=[text_field("userId"), text_field("teamId")],
                    attributes=[ir.CompositeIdAttr(fields=["userId", "teamId"])],
                )
            ]
        )
        assert validate_entities(schema) == ([], [])


class TestValidateEnumsAndNames:
    """Tests for enum and name checks."""

    def test_enum_without_values(self):
        schema = ir.RelationalSchema(enums=[ir.EnumSpec(name="Role")])
        errors, _ = validate_enums(schema)
        assert errors == ["Enum 'Role' has no values"]

    def test_duplicate_enum_values(self):
        schema = ir.RelationalSchema(enums=[ir.EnumSpec(name="Role", values=["A", "B", "A"])])
        errors, _ = validate_enums(schema)
        assert errors == ["Enum 'Role' has duplicate values: A"]

    def test_duplicate_names_across_entities_and_enums(self):
        schema = ir.RelationalSchema(
            entities=[ir.EntitySpec(name="Status", fields=[id_field()])],
            enums=[ir.EnumSpec(name="Status", values=["OPEN"])],
        )
        errors, _ = validate_names(schema)
        assert errors == ["Duplicate entity or enum name 'Status'"]


class TestEnsureValid:
    """Tests for the raising entry point."""

    def test_all_errors_reported_together(self):
        schema = ir.RelationalSchema(
            entities=[
                ir.EntitySpec(name="Empty"),
                ir.EntitySpec(name="User", fields=[id_field(), text_field("a"), text_field("a")]),
            ],
            enums=[ir.EnumSpec(name="Role")],
        )

        with pytest.raises(SchemaValidationError) as exc_info:
            ensure_valid(schema)

        error = exc_info.value
        assert len(error.errors) == 3
        assert "Schema validation failed with 3 error(s):" in str(error)
        assert "Entity 'Empty' has no fields" in str(error)

    def test_returns_warnings(self):
        schema = ir.RelationalSchema(entities=[ir.EntitySpec(name="Log", fields=[text_field("line")])])
        assert ensure_valid(schema) == ["Entity 'Log' has no primary key"]

    def test_valid_schema_passes(self, blog_schema):
        assert ensure_valid(blog_schema) == []
