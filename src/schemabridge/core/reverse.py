"""
Reverse transformer - reconstructs a RelationalSchema from a ValidationSchema.

Per field, wrapper layers are peeled into modifiers and literal defaults,
naming conventions and documentation annotations supply attributes, and
reference fields are resolved by the relation inference engine. Key
inference and back-relation synthesis then run once over the whole schema.

Inference is advisory: every reference field gets a target, tagged with the
confidence and strategy recorded in ``ReverseResult.resolutions``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from . import ir
from .annotations import parse_entity_annotations, parse_field_annotations
from .relations import (
    MatcherIndex,
    build_matcher_index,
    infer_keys,
    resolve_relation,
    self_relation_name,
    synthesize_back_relations,
)
from .type_mapping import infer_id_default, to_field_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReverseResult:
    """
    Output of a reverse transform.

    Attributes:
        schema: The reconstructed relational schema
        resolutions: One record per reference field, in schema order
    """

    schema: ir.RelationalSchema
    resolutions: list[ir.FieldResolution] = field(default_factory=list)


@dataclass
class _Unwrapped:
    leaf: ir.ValidationType
    is_optional: bool = False
    is_list: bool = False
    default: Any = None


def _unwrap_field(vtype: ir.ValidationType) -> _Unwrapped:
    """Peel wrappers, tracking optional/list flags and the first literal default."""
    result = _Unwrapped(leaf=vtype)
    while isinstance(result.leaf, ir.WRAPPER_TYPES):
        leaf = result.leaf
        if isinstance(leaf, (ir.OptionalType, ir.NullableType)):
            result.is_optional = True
            result.leaf = leaf.inner
        elif isinstance(leaf, ir.ArrayType):
            result.is_list = True
            result.leaf = leaf.element
        else:
            if result.default is None and isinstance(leaf.value, (bool, int, float, str)):
                result.default = leaf.value
            result.leaf = leaf.inner
    return result


def _convert_field(
    obj: ir.ObjectSpec, obj_field: ir.ObjectFieldSpec, index: MatcherIndex
) -> tuple[ir.FieldSpec, ir.RelationMatch | None]:
    unwrapped = _unwrap_field(obj_field.type)
    leaf = unwrapped.leaf
    annotations = parse_field_annotations(obj_field.documentation)
    attributes: list[ir.FieldAttribute] = []

    default: ir.DefaultValue | None = None
    if unwrapped.default is not None:
        default = ir.LiteralDefault(value=unwrapped.default)
    elif annotations.default is not None:
        default = annotations.default

    if obj_field.name == "id" or annotations.is_id:
        attributes.append(ir.IdAttr())
        if default is None:
            default = infer_id_default(leaf)

    if obj_field.name == "createdAt" and isinstance(leaf, ir.DateType) and default is None:
        default = ir.NowDefault()

    if default is not None:
        attributes.append(ir.DefaultAttr(value=default))

    if annotations.is_updated_at or (
        obj_field.name == "updatedAt" and isinstance(leaf, ir.DateType)
    ):
        attributes.append(ir.UpdatedAtAttr())
    if annotations.is_unique:
        attributes.append(ir.UniqueAttr())
    if annotations.map_name:
        attributes.append(ir.MapAttr(name=annotations.map_name))
    if annotations.native_type:
        attributes.append(ir.NativeTypeAttr(value=annotations.native_type))
    if annotations.is_ignored:
        attributes.append(ir.IgnoreAttr())

    field_type = to_field_type(leaf)
    match: ir.RelationMatch | None = None
    if isinstance(field_type, ir.EntityRef):
        relation = annotations.relation or ir.RelationInfo()
        match = resolve_relation(
            index,
            obj.name,
            obj_field.name,
            obj_field.type,
            relation,
            [f.name for f in obj.fields],
        )
        if match.target_entity == obj.name and not relation.name:
            relation = relation.model_copy(update={"name": self_relation_name(obj.name)})
        field_type = ir.EntityRef(name=match.target_entity)
        attributes.append(ir.RelationAttr(relation=relation))

    modifiers: list[ir.FieldModifier] = []
    if unwrapped.is_list:
        modifiers.append(ir.FieldModifier.LIST)
    elif unwrapped.is_optional:
        # List fields cannot be optional in the relational model
        modifiers.append(ir.FieldModifier.OPTIONAL)
    if annotations.is_unique:
        modifiers.append(ir.FieldModifier.UNIQUE)

    spec = ir.FieldSpec(
        name=obj_field.name,
        type=field_type,
        modifiers=modifiers,
        attributes=attributes,
        documentation=obj_field.documentation,
    )
    return spec, match


def _convert_object(
    obj: ir.ObjectSpec, index: MatcherIndex
) -> tuple[ir.EntitySpec, list[tuple[str, ir.RelationMatch]]]:
    fields: list[ir.FieldSpec] = []
    matches: list[tuple[str, ir.RelationMatch]] = []
    for obj_field in obj.fields:
        spec, match = _convert_field(obj, obj_field, index)
        fields.append(spec)
        if match is not None:
            matches.append((obj_field.name, match))

    entity = ir.EntitySpec(
        name=obj.name,
        fields=fields,
        attributes=parse_entity_annotations(obj.documentation).to_attributes(),
        documentation=obj.documentation,
    )
    return entity, matches


def reverse_transform(schema: ir.ValidationSchema) -> ReverseResult:
    """
    Convert a validation schema to a relational schema, inferring relations.

    Args:
        schema: Validation schema (objects and enums)

    Returns:
        ReverseResult with the relational schema and per-field resolutions
    """
    index = build_matcher_index(schema)

    entities: list[ir.EntitySpec] = []
    pending: list[tuple[str, str, ir.RelationMatch]] = []
    for obj in schema.objects.values():
        entity, matches = _convert_object(obj, index)
        entities.append(entity)
        pending.extend((obj.name, name, match) for name, match in matches)

    enums = [
        ir.EnumSpec(name=e.name, values=list(e.values), documentation=e.documentation)
        for e in schema.enums.values()
    ]

    relational = ir.RelationalSchema(entities=entities, enums=enums)
    relational = synthesize_back_relations(infer_keys(relational))

    resolutions: list[ir.FieldResolution] = []
    for entity_name, field_name, match in pending:
        entity = relational.get_entity(entity_name)
        spec = entity.get_field(field_name) if entity else None
        resolutions.append(
            ir.FieldResolution(
                entity=entity_name,
                field=field_name,
                match=match,
                relation=spec.relation if spec else None,
                is_self_relation=match.target_entity == entity_name,
            )
        )

    fallbacks = sum(1 for r in resolutions if r.match.is_fallback)
    if fallbacks:
        logger.warning(f"{fallbacks} reference field(s) fell back to a guessed target")
    logger.info(
        f"Reverse transform produced {len(entities)} entities, "
        f"resolved {len(resolutions)} reference field(s)"
    )
    return ReverseResult(schema=relational, resolutions=resolutions)


def validation_to_relational(schema: ir.ValidationSchema) -> ir.RelationalSchema:
    """Convert a validation schema to a relational schema, discarding resolution details."""
    return reverse_transform(schema).schema


def low_confidence(result: ReverseResult, threshold: float = 0.6) -> list[ir.FieldResolution]:
    """Resolutions whose confidence is below ``threshold``, for human review."""
    return [r for r in result.resolutions if r.match.confidence < threshold]
