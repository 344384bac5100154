"""
Runtime-validation schema types for schemabridge IR.

Composable type descriptors (primitive leaves, composites, named references
and wrappers) describing how values are validated at runtime, plus the
objects and enums that own them.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Refinements
# =============================================================================


class StringCheck(BaseModel):
    """
    A refinement on a string leaf.

    Examples:
        - min length 3: StringCheck(kind="min_length", value=3)
        - identifier format: StringCheck(kind="cuid")
        - pattern: StringCheck(kind="regex", value="^[a-z]+$")
    """

    kind: Literal[
        "min_length",
        "max_length",
        "length",
        "email",
        "url",
        "uuid",
        "cuid",
        "cuid2",
        "ulid",
        "nanoid",
        "datetime",
        "ip",
        "regex",
        "emoji",
        "base64",
        "trim",
        "to_lower_case",
        "to_upper_case",
        "starts_with",
        "ends_with",
        "includes",
    ]
    value: int | str | None = None

    model_config = ConfigDict(frozen=True)


class NumberCheck(BaseModel):
    """A refinement on a number leaf (``int`` marks an integer-only number)."""

    kind: Literal[
        "min",
        "max",
        "gt",
        "gte",
        "lt",
        "lte",
        "int",
        "positive",
        "nonnegative",
        "negative",
        "nonpositive",
        "multiple_of",
        "step",
        "finite",
        "safe",
    ]
    value: int | float | None = None

    model_config = ConfigDict(frozen=True)


# Identifier-format refinements that imply a generated primary key
ID_FORMAT_CHECKS = frozenset({"uuid", "cuid", "cuid2", "ulid", "nanoid"})


# =============================================================================
# Primitive leaves
# =============================================================================


class StringType(BaseModel):
    kind: Literal["string"] = "string"
    checks: list[StringCheck] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def has_check(self, kind: str) -> bool:
        return any(c.kind == kind for c in self.checks)


class NumberType(BaseModel):
    kind: Literal["number"] = "number"
    checks: list[NumberCheck] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_int(self) -> bool:
        return any(c.kind == "int" for c in self.checks)


class BigIntType(BaseModel):
    kind: Literal["bigint"] = "bigint"

    model_config = ConfigDict(frozen=True)


class BooleanType(BaseModel):
    kind: Literal["boolean"] = "boolean"

    model_config = ConfigDict(frozen=True)


class DateType(BaseModel):
    kind: Literal["date"] = "date"

    model_config = ConfigDict(frozen=True)


class NullType(BaseModel):
    kind: Literal["null"] = "null"

    model_config = ConfigDict(frozen=True)


class UndefinedType(BaseModel):
    kind: Literal["undefined"] = "undefined"

    model_config = ConfigDict(frozen=True)


class NaNType(BaseModel):
    kind: Literal["nan"] = "nan"

    model_config = ConfigDict(frozen=True)


class UnknownType(BaseModel):
    kind: Literal["unknown"] = "unknown"

    model_config = ConfigDict(frozen=True)


class LiteralType(BaseModel):
    kind: Literal["literal"] = "literal"
    value: bool | int | float | str

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Composites, references and wrappers
# =============================================================================


class ArrayType(BaseModel):
    kind: Literal["array"] = "array"
    element: ValidationType

    model_config = ConfigDict(frozen=True)


class TupleType(BaseModel):
    kind: Literal["tuple"] = "tuple"
    items: list[ValidationType] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class UnionType(BaseModel):
    kind: Literal["union"] = "union"
    options: list[ValidationType] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RecordType(BaseModel):
    kind: Literal["record"] = "record"
    key_type: ValidationType
    value_type: ValidationType

    model_config = ConfigDict(frozen=True)


class ObjectRef(BaseModel):
    """Reference to a named validation object (the entity-reference leaf)."""

    kind: Literal["object"] = "object"
    name: str

    model_config = ConfigDict(frozen=True)


class EnumTypeRef(BaseModel):
    """Reference to a named validation enum."""

    kind: Literal["enum"] = "enum"
    name: str

    model_config = ConfigDict(frozen=True)


class OptionalType(BaseModel):
    kind: Literal["optional"] = "optional"
    inner: ValidationType

    model_config = ConfigDict(frozen=True)


class NullableType(BaseModel):
    kind: Literal["nullable"] = "nullable"
    inner: ValidationType

    model_config = ConfigDict(frozen=True)


class DefaultedType(BaseModel):
    """
    A wrapper supplying a static default.

    ``value`` is None when the source default had no static equivalent.
    """

    kind: Literal["default"] = "default"
    inner: ValidationType
    value: Any = None

    model_config = ConfigDict(frozen=True)


ValidationType = Annotated[
    Union[
        StringType,
        NumberType,
        BigIntType,
        BooleanType,
        DateType,
        NullType,
        UndefinedType,
        NaNType,
        UnknownType,
        LiteralType,
        ArrayType,
        TupleType,
        UnionType,
        RecordType,
        ObjectRef,
        EnumTypeRef,
        OptionalType,
        NullableType,
        DefaultedType,
    ],
    Field(discriminator="kind"),
]

WRAPPER_TYPES = (OptionalType, NullableType, DefaultedType, ArrayType)


def unwrap(vtype: ValidationType) -> ValidationType:
    """Strip optional/nullable/default/array layers down to the leaf type."""
    while isinstance(vtype, WRAPPER_TYPES):
        vtype = vtype.element if isinstance(vtype, ArrayType) else vtype.inner
    return vtype


# =============================================================================
# Objects, enums and the schema
# =============================================================================


class ObjectFieldSpec(BaseModel):
    """
    A field of a validation object.

    ``documentation`` is free text that may carry annotation fragments such as
    ``@relation(fields: [authorId], references: [id])``.
    """

    name: str
    type: ValidationType
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)


class ObjectSpec(BaseModel):
    """A named validation object with ordered fields."""

    name: str
    fields: list[ObjectFieldSpec] = Field(default_factory=list)
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)


class ValidationEnumSpec(BaseModel):
    """A named validation enum."""

    name: str
    values: list[str] = Field(default_factory=list)
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)


class ValidationSchema(BaseModel):
    """Named maps of validation objects and enums (insertion ordered)."""

    objects: dict[str, ObjectSpec] = Field(default_factory=dict)
    enums: dict[str, ValidationEnumSpec] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(
        cls,
        objects: list[ObjectSpec] | None = None,
        enums: list[ValidationEnumSpec] | None = None,
    ) -> ValidationSchema:
        """Create a schema keyed by each object's and enum's own name."""
        return cls(
            objects={o.name: o for o in objects or []},
            enums={e.name: e for e in enums or []},
        )


ArrayType.model_rebuild()
TupleType.model_rebuild()
UnionType.model_rebuild()
RecordType.model_rebuild()
OptionalType.model_rebuild()
NullableType.model_rebuild()
DefaultedType.model_rebuild()
ObjectFieldSpec.model_rebuild()
ObjectSpec.model_rebuild()
ValidationSchema.model_rebuild()
