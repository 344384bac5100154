"""
schemabridge Intermediate Representation (IR) types.

This package contains the immutable tree types of both schema
representations plus the relation-inference result types.

All types are re-exported from this package.
"""

# Relation inference results
from .inference import (
    FieldResolution,
    MatchStrategy,
    RelationMatch,
)

# Relational model
from .relational import (
    AutoDefault,
    AutoIncrementDefault,
    CompositeIdAttr,
    CompositeUniqueAttr,
    CuidDefault,
    DbGeneratedDefault,
    DefaultAttr,
    DefaultValue,
    EntityAttribute,
    EntityIgnoreAttr,
    EntityRef,
    EntitySpec,
    EnumRef,
    EnumSpec,
    FieldAttribute,
    FieldModifier,
    FieldSpec,
    FieldType,
    FullTextAttr,
    IdAttr,
    IgnoreAttr,
    IndexAttr,
    LiteralDefault,
    MapAttr,
    NanoidDefault,
    NativeTypeAttr,
    NowDefault,
    ReferentialAction,
    RelationalSchema,
    RelationAttr,
    RelationInfo,
    Scalar,
    ScalarType,
    SequenceDefault,
    SequenceOptions,
    TableMapAttr,
    UlidDefault,
    UniqueAttr,
    UpdatedAtAttr,
    UuidDefault,
    scalar,
)

# Validation model
from .validation import (
    ID_FORMAT_CHECKS,
    ArrayType,
    BigIntType,
    BooleanType,
    DateType,
    DefaultedType,
    EnumTypeRef,
    LiteralType,
    NaNType,
    NullableType,
    NullType,
    NumberCheck,
    NumberType,
    ObjectFieldSpec,
    ObjectRef,
    ObjectSpec,
    OptionalType,
    RecordType,
    StringCheck,
    StringType,
    TupleType,
    UndefinedType,
    UnionType,
    UnknownType,
    ValidationEnumSpec,
    ValidationSchema,
    ValidationType,
    WRAPPER_TYPES,
    unwrap,
)

__all__ = [
    # Relation inference results
    "FieldResolution",
    "MatchStrategy",
    "RelationMatch",
    # Relational model
    "AutoDefault",
    "AutoIncrementDefault",
    "CompositeIdAttr",
    "CompositeUniqueAttr",
    "CuidDefault",
    "DbGeneratedDefault",
    "DefaultAttr",
    "DefaultValue",
    "EntityAttribute",
    "EntityIgnoreAttr",
    "EntityRef",
    "EntitySpec",
    "EnumRef",
    "EnumSpec",
    "FieldAttribute",
    "FieldModifier",
    "FieldSpec",
    "FieldType",
    "FullTextAttr",
    "IdAttr",
    "IgnoreAttr",
    "IndexAttr",
    "LiteralDefault",
    "MapAttr",
    "NanoidDefault",
    "NativeTypeAttr",
    "NowDefault",
    "ReferentialAction",
    "RelationalSchema",
    "RelationAttr",
    "RelationInfo",
    "Scalar",
    "ScalarType",
    "SequenceDefault",
    "SequenceOptions",
    "TableMapAttr",
    "UlidDefault",
    "UniqueAttr",
    "UpdatedAtAttr",
    "UuidDefault",
    "scalar",
    # Validation model
    "ID_FORMAT_CHECKS",
    "ArrayType",
    "BigIntType",
    "BooleanType",
    "DateType",
    "DefaultedType",
    "EnumTypeRef",
    "LiteralType",
    "NaNType",
    "NullableType",
    "NullType",
    "NumberCheck",
    "NumberType",
    "ObjectFieldSpec",
    "ObjectRef",
    "ObjectSpec",
    "OptionalType",
    "RecordType",
    "StringCheck",
    "StringType",
    "TupleType",
    "UndefinedType",
    "UnionType",
    "UnknownType",
    "ValidationEnumSpec",
    "ValidationSchema",
    "ValidationType",
    "WRAPPER_TYPES",
    "unwrap",
]
