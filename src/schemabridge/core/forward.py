"""
Forward transformer - converts a RelationalSchema into a ValidationSchema.

The forward direction is a structural map: scalar, enum, list, optional and
literal-default information is carried over; relation fields and excluded
fields or entities have no validation counterpart and are dropped.
"""

from __future__ import annotations

import logging

from . import ir
from .errors import UnknownReferenceError
from .type_mapping import static_default, to_validation_type

logger = logging.getLogger(__name__)


def _check_references(entity: ir.EntitySpec, schema: ir.RelationalSchema) -> None:
    """Raise if a kept field names an enum or entity missing from the schema."""
    for field in entity.fields:
        if field.is_excluded:
            continue
        if isinstance(field.type, ir.EnumRef) and schema.get_enum(field.type.name) is None:
            raise UnknownReferenceError(entity.name, field.name, field.type.name, kind="enum")
        if isinstance(field.type, ir.EntityRef) and schema.get_entity(field.type.name) is None:
            raise UnknownReferenceError(entity.name, field.name, field.type.name)


def field_to_validation(field: ir.FieldSpec) -> ir.ObjectFieldSpec:
    """
    Map one scalar or enum field.

    List fields become arrays. A literal default wraps the type in a default
    layer; otherwise an optional field wraps it in an optional layer.
    Generated defaults are omitted.
    """
    vtype: ir.ValidationType = to_validation_type(field.type)

    if field.is_list:
        vtype = ir.ArrayType(element=vtype)

    literal = static_default(field.default)
    if literal is not None:
        vtype = ir.DefaultedType(inner=vtype, value=literal)
    elif field.is_optional:
        vtype = ir.OptionalType(inner=vtype)

    return ir.ObjectFieldSpec(name=field.name, type=vtype, documentation=field.documentation)


def entity_to_object(entity: ir.EntitySpec) -> ir.ObjectSpec:
    """Map an entity, dropping relation and excluded fields."""
    fields = [
        field_to_validation(f) for f in entity.fields if not f.is_relation and not f.is_excluded
    ]
    return ir.ObjectSpec(name=entity.name, fields=fields, documentation=entity.documentation)


def enum_to_validation(enum: ir.EnumSpec) -> ir.ValidationEnumSpec:
    return ir.ValidationEnumSpec(
        name=enum.name, values=list(enum.values), documentation=enum.documentation
    )


def relational_to_validation(schema: ir.RelationalSchema) -> ir.ValidationSchema:
    """
    Convert a relational schema to a validation schema.

    Args:
        schema: Relational schema (assumed structurally valid)

    Returns:
        ValidationSchema with one object per kept entity and one enum per enum

    Raises:
        UnknownReferenceError: If a kept field references an unknown enum or entity
    """
    objects: list[ir.ObjectSpec] = []
    for entity in schema.entities:
        if entity.is_excluded:
            logger.debug(f"Skipping excluded entity {entity.name}")
            continue
        _check_references(entity, schema)
        objects.append(entity_to_object(entity))

    enums = [enum_to_validation(e) for e in schema.enums]
    logger.info(f"Forward transform produced {len(objects)} object(s), {len(enums)} enum(s)")
    return ir.ValidationSchema.build(objects=objects, enums=enums)
