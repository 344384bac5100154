"""Tests for relational <-> validation type mapping."""

import pytest

from schemabridge.core import ir
from schemabridge.core.type_mapping import (
    infer_id_default,
    static_default,
    to_field_type,
    to_validation_type,
)

INT = ir.NumberType(checks=[ir.NumberCheck(kind="int")])


class TestForwardMapping:
    """Tests for relational -> validation leaves."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("String", ir.StringType()),
            ("Int", INT),
            ("BigInt", ir.BigIntType()),
            ("Float", ir.NumberType()),
            ("Decimal", ir.NumberType()),
            ("Boolean", ir.BooleanType()),
            ("DateTime", ir.DateType()),
            ("Json", ir.UnknownType()),
            ("Bytes", ir.UnknownType()),
        ],
    )
    def test_scalar_table(self, name, expected):
        assert to_validation_type(ir.scalar(name)) == expected

    def test_unrecognised_scalar(self):
        assert to_validation_type(ir.scalar("Geometry")) == ir.UnknownType()

    def test_references(self):
        assert to_validation_type(ir.EnumRef(name="Role")) == ir.EnumTypeRef(name="Role")
        assert to_validation_type(ir.EntityRef(name="User")) == ir.ObjectRef(name="User")

    def test_static_default(self):
        assert static_default(ir.LiteralDefault(value=5)) == 5
        assert static_default(ir.LiteralDefault(value=False)) is False
        assert static_default(ir.NowDefault()) is None
        assert static_default(None) is None


class TestReverseMapping:
    """Tests for validation -> relational field types."""

    @pytest.mark.parametrize(
        "vtype,expected",
        [
            (ir.StringType(), "String"),
            (INT, "Int"),
            (ir.NumberType(), "Float"),
            (ir.BigIntType(), "BigInt"),
            (ir.BooleanType(), "Boolean"),
            (ir.DateType(), "DateTime"),
            (ir.UnknownType(), "Json"),
            (ir.NullType(), "Json"),
            (ir.UndefinedType(), "Json"),
            (ir.NaNType(), "Json"),
            (ir.TupleType(items=[ir.StringType()]), "Json"),
            (ir.RecordType(key_type=ir.StringType(), value_type=ir.UnknownType()), "Json"),
            (ir.LiteralType(value=True), "Boolean"),
            (ir.LiteralType(value=3), "Int"),
            (ir.LiteralType(value=2.5), "Float"),
            (ir.LiteralType(value="draft"), "String"),
        ],
    )
    def test_leaves(self, vtype, expected):
        assert to_field_type(vtype) == ir.scalar(expected)

    def test_wrappers_are_unwrapped(self):
        vtype = ir.OptionalType(inner=ir.ArrayType(element=ir.NullableType(inner=ir.StringType())))
        assert to_field_type(vtype) == ir.scalar("String")

    def test_union_takes_first_option(self):
        vtype = ir.UnionType(options=[ir.StringType(), ir.NumberType()])
        assert to_field_type(vtype) == ir.scalar("String")

    def test_empty_union(self):
        assert to_field_type(ir.UnionType()) == ir.scalar("Json")

    def test_union_of_object_refs(self):
        vtype = ir.UnionType(options=[ir.ObjectRef(name="User"), ir.NullType()])
        assert to_field_type(vtype) == ir.EntityRef(name="User")

    def test_references(self):
        assert to_field_type(ir.ObjectRef(name="User")) == ir.EntityRef(name="User")
        assert to_field_type(ir.EnumTypeRef(name="Role")) == ir.EnumRef(name="Role")


class TestNumericRoundTrip:
    """Integer-ness survives a round trip; plain numbers come back as Float."""

    def test_plain_number_becomes_float(self):
        field_type = to_field_type(ir.NumberType())
        assert field_type == ir.scalar("Float")

        back = to_validation_type(field_type)
        assert isinstance(back, ir.NumberType)
        assert not back.is_int

    def test_int_survives(self):
        assert to_field_type(to_validation_type(ir.scalar("Int"))) == ir.scalar("Int")


class TestInferIdDefault:
    """Tests for primary-key generator inference."""

    @pytest.mark.parametrize(
        "check,expected",
        [
            ("cuid", ir.CuidDefault()),
            ("cuid2", ir.CuidDefault()),
            ("uuid", ir.UuidDefault()),
            ("ulid", ir.UlidDefault()),
            ("nanoid", ir.NanoidDefault()),
        ],
    )
    def test_string_formats(self, check, expected):
        vtype = ir.StringType(checks=[ir.StringCheck(kind=check)])
        assert infer_id_default(vtype) == expected

    def test_integer(self):
        assert infer_id_default(INT) == ir.AutoIncrementDefault()

    def test_wrapped(self):
        vtype = ir.OptionalType(inner=ir.StringType(checks=[ir.StringCheck(kind="uuid")]))
        assert infer_id_default(vtype) == ir.UuidDefault()

    @pytest.mark.parametrize(
        "vtype",
        [ir.StringType(), ir.NumberType(), ir.BooleanType()],
    )
    def test_nothing_to_infer(self, vtype):
        assert infer_id_default(vtype) is None
