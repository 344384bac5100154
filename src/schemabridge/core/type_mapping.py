"""
Type and default-value mapping between the relational and validation trees.

The forward table is total. The reverse direction is lossy: numbers without
an integer refinement become ``Float``, unions collapse to their first
option, and unstructured leaves all become ``Json``.
"""

from __future__ import annotations

from typing import Any

from .ir.relational import (
    AutoIncrementDefault,
    CuidDefault,
    DefaultValue,
    EntityRef,
    EnumRef,
    FieldType,
    LiteralDefault,
    NanoidDefault,
    Scalar,
    ScalarType,
    UlidDefault,
    UuidDefault,
    scalar,
)
from .ir.validation import (
    BigIntType,
    BooleanType,
    DateType,
    EnumTypeRef,
    LiteralType,
    NaNType,
    NullType,
    NumberCheck,
    NumberType,
    ObjectRef,
    RecordType,
    StringType,
    TupleType,
    UndefinedType,
    UnionType,
    UnknownType,
    ValidationType,
    unwrap,
)

# =============================================================================
# Forward: relational -> validation
# =============================================================================

_FORWARD_SCALARS: dict[str, ValidationType] = {
    Scalar.STRING: StringType(),
    Scalar.INT: NumberType(checks=[NumberCheck(kind="int")]),
    Scalar.BIGINT: BigIntType(),
    Scalar.FLOAT: NumberType(),
    Scalar.DECIMAL: NumberType(),
    Scalar.BOOLEAN: BooleanType(),
    Scalar.DATETIME: DateType(),
    Scalar.JSON: UnknownType(),
    Scalar.BYTES: UnknownType(),
}


def to_validation_type(field_type: FieldType) -> ValidationType:
    """
    Map a relational field type to its validation leaf.

    Scalars follow the fixed table (unrecognised names map to ``unknown``);
    enum and entity references map to the corresponding named references.
    """
    if isinstance(field_type, EnumRef):
        return EnumTypeRef(name=field_type.name)
    if isinstance(field_type, EntityRef):
        return ObjectRef(name=field_type.name)
    return _FORWARD_SCALARS.get(field_type.name, UnknownType())


def static_default(default: DefaultValue | None) -> Any:
    """
    Return the static value of a default, or None.

    Only literal defaults have one; generated defaults (autoincrement, now(),
    uuid()...) have no validation-side equivalent.
    """
    if isinstance(default, LiteralDefault):
        return default.value
    return None


# =============================================================================
# Reverse: validation -> relational
# =============================================================================

_JSON_LEAVES = (UnknownType, NullType, UndefinedType, NaNType, TupleType, RecordType)


def to_field_type(vtype: ValidationType) -> FieldType:
    """
    Map a validation type to a relational field type.

    Wrappers (optional, nullable, default, array) are unwrapped first; the
    caller tracks the modifiers they imply.
    """
    leaf = unwrap(vtype)

    if isinstance(leaf, UnionType):
        if not leaf.options:
            return scalar(Scalar.JSON)
        return to_field_type(leaf.options[0])
    if isinstance(leaf, ObjectRef):
        return EntityRef(name=leaf.name)
    if isinstance(leaf, EnumTypeRef):
        return EnumRef(name=leaf.name)
    return _scalar_for(leaf)


def _scalar_for(leaf: ValidationType) -> ScalarType:
    if isinstance(leaf, StringType):
        return scalar(Scalar.STRING)
    if isinstance(leaf, NumberType):
        return scalar(Scalar.INT if leaf.is_int else Scalar.FLOAT)
    if isinstance(leaf, BigIntType):
        return scalar(Scalar.BIGINT)
    if isinstance(leaf, BooleanType):
        return scalar(Scalar.BOOLEAN)
    if isinstance(leaf, DateType):
        return scalar(Scalar.DATETIME)
    if isinstance(leaf, LiteralType):
        return _literal_scalar(leaf.value)
    if isinstance(leaf, _JSON_LEAVES):
        return scalar(Scalar.JSON)
    raise TypeError(f"Unsupported validation type: {leaf.kind}")


def _literal_scalar(value: bool | int | float | str) -> ScalarType:
    # bool is a subclass of int
    if isinstance(value, bool):
        return scalar(Scalar.BOOLEAN)
    if isinstance(value, int):
        return scalar(Scalar.INT)
    if isinstance(value, float):
        return scalar(Scalar.FLOAT)
    return scalar(Scalar.STRING)


def infer_id_default(vtype: ValidationType) -> DefaultValue | None:
    """
    Infer the identifier generator of a primary-key field from its refinements.

    Examples:
        - string with cuid/cuid2 -> cuid()
        - string with uuid -> uuid()
        - number with int -> autoincrement()
    """
    leaf = unwrap(vtype)
    if isinstance(leaf, StringType):
        if leaf.has_check("cuid") or leaf.has_check("cuid2"):
            return CuidDefault()
        if leaf.has_check("uuid"):
            return UuidDefault()
        if leaf.has_check("ulid"):
            return UlidDefault()
        if leaf.has_check("nanoid"):
            return NanoidDefault()
        return None
    if isinstance(leaf, NumberType) and leaf.is_int:
        return AutoIncrementDefault()
    return None
