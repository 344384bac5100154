"""
Relational-model schema types for schemabridge IR.

Entities, fields, field/entity attributes, default values and relation
metadata. Every node is an immutable value; transformations build new trees.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Scalar(StrEnum):
    """Scalar type names of the relational vocabulary."""

    STRING = "String"
    INT = "Int"
    BIGINT = "BigInt"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    JSON = "Json"
    BYTES = "Bytes"


class ReferentialAction(StrEnum):
    """Delete/update behaviour of a relation."""

    CASCADE = "Cascade"
    RESTRICT = "Restrict"
    NO_ACTION = "NoAction"
    SET_NULL = "SetNull"
    SET_DEFAULT = "SetDefault"


# =============================================================================
# Field types
# =============================================================================


class ScalarType(BaseModel):
    """A named scalar (``String``, ``Int``...). Unknown names pass through."""

    kind: Literal["scalar"] = "scalar"
    name: str

    model_config = ConfigDict(frozen=True)


class EnumRef(BaseModel):
    """Reference to an enum declared in the same schema."""

    kind: Literal["enum"] = "enum"
    name: str

    model_config = ConfigDict(frozen=True)


class EntityRef(BaseModel):
    """Reference to another entity (a relation field)."""

    kind: Literal["entity"] = "entity"
    name: str

    model_config = ConfigDict(frozen=True)


FieldType = Annotated[Union[ScalarType, EnumRef, EntityRef], Field(discriminator="kind")]


def scalar(name: str | Scalar) -> ScalarType:
    """Shorthand for ``ScalarType(name=...)``."""
    return ScalarType(name=str(name))


# =============================================================================
# Default values
# =============================================================================


class LiteralDefault(BaseModel):
    kind: Literal["literal"] = "literal"
    value: bool | int | float | str

    model_config = ConfigDict(frozen=True)


class AutoIncrementDefault(BaseModel):
    kind: Literal["autoincrement"] = "autoincrement"

    model_config = ConfigDict(frozen=True)


class AutoDefault(BaseModel):
    """Database-assigned identifier (``auto()``)."""

    kind: Literal["auto"] = "auto"

    model_config = ConfigDict(frozen=True)


class SequenceOptions(BaseModel):
    start: int | None = None
    increment: int | None = None
    min_value: int | None = None
    max_value: int | None = None
    cache: int | None = None

    model_config = ConfigDict(frozen=True)


class SequenceDefault(BaseModel):
    kind: Literal["sequence"] = "sequence"
    options: SequenceOptions = Field(default_factory=SequenceOptions)

    model_config = ConfigDict(frozen=True)


class NowDefault(BaseModel):
    kind: Literal["now"] = "now"

    model_config = ConfigDict(frozen=True)


class UuidDefault(BaseModel):
    kind: Literal["uuid"] = "uuid"

    model_config = ConfigDict(frozen=True)


class CuidDefault(BaseModel):
    """Collision-resistant identifier."""

    kind: Literal["cuid"] = "cuid"

    model_config = ConfigDict(frozen=True)


class UlidDefault(BaseModel):
    """Lexicographically sortable identifier."""

    kind: Literal["ulid"] = "ulid"

    model_config = ConfigDict(frozen=True)


class NanoidDefault(BaseModel):
    """Short random identifier, optionally of a fixed length."""

    kind: Literal["nanoid"] = "nanoid"
    length: int | None = None

    model_config = ConfigDict(frozen=True)


class DbGeneratedDefault(BaseModel):
    """Database expression evaluated on insert."""

    kind: Literal["dbgenerated"] = "dbgenerated"
    expression: str = ""

    model_config = ConfigDict(frozen=True)


DefaultValue = Annotated[
    Union[
        LiteralDefault,
        AutoIncrementDefault,
        AutoDefault,
        SequenceDefault,
        NowDefault,
        UuidDefault,
        CuidDefault,
        UlidDefault,
        NanoidDefault,
        DbGeneratedDefault,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Relations and field attributes
# =============================================================================


class RelationInfo(BaseModel):
    """
    Relation metadata attached to a reference field.

    A relation with both ``fields`` and ``references`` populated is the owning
    side (it holds the foreign key). With both empty it is an inverse side,
    identified only by ``name`` (or by nothing, for unambiguous pairs).
    """

    name: str | None = None
    fields: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)
    on_delete: ReferentialAction | None = None
    on_update: ReferentialAction | None = None
    map: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_owning(self) -> bool:
        return bool(self.fields) and bool(self.references)


class DefaultAttr(BaseModel):
    kind: Literal["default"] = "default"
    value: DefaultValue

    model_config = ConfigDict(frozen=True)


class UniqueAttr(BaseModel):
    kind: Literal["unique"] = "unique"

    model_config = ConfigDict(frozen=True)


class IdAttr(BaseModel):
    kind: Literal["id"] = "id"

    model_config = ConfigDict(frozen=True)


class UpdatedAtAttr(BaseModel):
    kind: Literal["updated_at"] = "updated_at"

    model_config = ConfigDict(frozen=True)


class IgnoreAttr(BaseModel):
    kind: Literal["ignore"] = "ignore"

    model_config = ConfigDict(frozen=True)


class MapAttr(BaseModel):
    kind: Literal["map"] = "map"
    name: str

    model_config = ConfigDict(frozen=True)


class RelationAttr(BaseModel):
    kind: Literal["relation"] = "relation"
    relation: RelationInfo = Field(default_factory=RelationInfo)

    model_config = ConfigDict(frozen=True)


class NativeTypeAttr(BaseModel):
    """Storage-level type hint, kept verbatim (``@db.VarChar(255)``)."""

    kind: Literal["native"] = "native"
    value: str

    model_config = ConfigDict(frozen=True)


FieldAttribute = Annotated[
    Union[
        DefaultAttr,
        UniqueAttr,
        IdAttr,
        UpdatedAtAttr,
        IgnoreAttr,
        MapAttr,
        RelationAttr,
        NativeTypeAttr,
    ],
    Field(discriminator="kind"),
]


class FieldModifier(StrEnum):
    """Modifiers that can be applied to fields."""

    OPTIONAL = "optional"
    LIST = "list"
    UNIQUE = "unique"


class FieldSpec(BaseModel):
    """
    Specification for a single field in an entity.

    Attributes:
        name: Field identifier, unique within its entity
        type: Scalar, enum reference or entity reference
        modifiers: Optional / list / unique flags
        attributes: Ordered field attributes
        documentation: Free text, may carry annotation fragments
    """

    name: str
    type: FieldType
    modifiers: list[FieldModifier] = Field(default_factory=list)
    attributes: list[FieldAttribute] = Field(default_factory=list)
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_optional(self) -> bool:
        return FieldModifier.OPTIONAL in self.modifiers

    @property
    def is_list(self) -> bool:
        return FieldModifier.LIST in self.modifiers

    @property
    def is_unique(self) -> bool:
        return FieldModifier.UNIQUE in self.modifiers or any(
            isinstance(a, UniqueAttr) for a in self.attributes
        )

    @property
    def is_primary_key(self) -> bool:
        return any(isinstance(a, IdAttr) for a in self.attributes)

    @property
    def is_excluded(self) -> bool:
        return any(isinstance(a, IgnoreAttr) for a in self.attributes)

    @property
    def default(self) -> DefaultValue | None:
        """The declared default value, if any."""
        for attr in self.attributes:
            if isinstance(attr, DefaultAttr):
                return attr.value
        return None

    @property
    def relation(self) -> RelationInfo | None:
        """Relation metadata, if the field carries a relation attribute."""
        for attr in self.attributes:
            if isinstance(attr, RelationAttr):
                return attr.relation
        return None

    @property
    def is_relation(self) -> bool:
        """True for fields typed as an entity reference or carrying relation metadata."""
        return isinstance(self.type, EntityRef) or self.relation is not None


# =============================================================================
# Entity-level attributes
# =============================================================================


class CompositeIdAttr(BaseModel):
    kind: Literal["id"] = "id"
    fields: list[str]

    model_config = ConfigDict(frozen=True)


class CompositeUniqueAttr(BaseModel):
    kind: Literal["unique"] = "unique"
    fields: list[str]
    name: str | None = None

    model_config = ConfigDict(frozen=True)


class IndexAttr(BaseModel):
    kind: Literal["index"] = "index"
    fields: list[str]
    name: str | None = None

    model_config = ConfigDict(frozen=True)


class FullTextAttr(BaseModel):
    kind: Literal["fulltext"] = "fulltext"
    fields: list[str]
    name: str | None = None
    map: str | None = None

    model_config = ConfigDict(frozen=True)


class TableMapAttr(BaseModel):
    kind: Literal["map"] = "map"
    name: str

    model_config = ConfigDict(frozen=True)


class EntityIgnoreAttr(BaseModel):
    kind: Literal["ignore"] = "ignore"

    model_config = ConfigDict(frozen=True)


EntityAttribute = Annotated[
    Union[
        CompositeIdAttr,
        CompositeUniqueAttr,
        IndexAttr,
        FullTextAttr,
        TableMapAttr,
        EntityIgnoreAttr,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Entities, enums and the schema
# =============================================================================


class EntitySpec(BaseModel):
    """
    A relational entity (table).

    Attributes:
        name: Entity name, unique within the schema
        fields: Ordered fields
        attributes: Entity-level attributes (composite keys, indexes, mapping)
        documentation: Optional documentation text
    """

    name: str
    fields: list[FieldSpec] = Field(default_factory=list)
    attributes: list[EntityAttribute] = Field(default_factory=list)
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_excluded(self) -> bool:
        return any(isinstance(a, EntityIgnoreAttr) for a in self.attributes)

    def get_field(self, name: str) -> FieldSpec | None:
        """Get a field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None


class EnumSpec(BaseModel):
    """A relational enum with ordered value names."""

    name: str
    values: list[str] = Field(default_factory=list)
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)


class RelationalSchema(BaseModel):
    """A complete relational schema: entities and enums."""

    entities: list[EntitySpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_entity(self, name: str) -> EntitySpec | None:
        """Get an entity by name."""
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_enum(self, name: str) -> EnumSpec | None:
        """Get an enum by name."""
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None
