"""
Pre-transformation validation for relational schemas.

Problems are collected across the whole schema and reported together, so a
caller sees every issue in one pass.
"""

import logging

from . import ir
from .errors import SchemaValidationError

logger = logging.getLogger(__name__)


def _duplicates(names: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


def validate_entities(schema: ir.RelationalSchema) -> tuple[list[str], list[str]]:
    """
    Validate all entities.

    Checks:
    - Every entity has at least one field
    - No duplicate field names
    - Relation key lists and entity-level attributes name existing fields
    - Every entity has a primary key (warning)

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for entity in schema.entities:
        if not entity.fields:
            errors.append(f"Entity '{entity.name}' has no fields")
            continue

        field_names = [f.name for f in entity.fields]
        duplicates = _duplicates(field_names)
        if duplicates:
            errors.append(
                f"Entity '{entity.name}' has duplicate field names: {', '.join(duplicates)}"
            )

        for field in entity.fields:
            relation = field.relation
            if relation is None:
                continue
            for key in relation.fields:
                if key not in field_names:
                    errors.append(
                        f"Entity '{entity.name}' field '{field.name}' relation "
                        f"references unknown local field '{key}'"
                    )

        for attr in entity.attributes:
            for name in getattr(attr, "fields", []):
                if name not in field_names:
                    errors.append(
                        f"Entity '{entity.name}' @@{attr.kind} references unknown field '{name}'"
                    )

        has_composite_id = any(isinstance(a, ir.CompositeIdAttr) for a in entity.attributes)
        if not has_composite_id and not any(f.is_primary_key for f in entity.fields):
            warnings.append(f"Entity '{entity.name}' has no primary key")

    return errors, warnings


def validate_enums(schema: ir.RelationalSchema) -> tuple[list[str], list[str]]:
    """
    Validate all enums.

    Checks:
    - Every enum has at least one value
    - No duplicate values

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for enum in schema.enums:
        if not enum.values:
            errors.append(f"Enum '{enum.name}' has no values")
            continue
        duplicates = _duplicates(enum.values)
        if duplicates:
            errors.append(f"Enum '{enum.name}' has duplicate values: {', '.join(duplicates)}")

    return errors, warnings


def validate_names(schema: ir.RelationalSchema) -> tuple[list[str], list[str]]:
    """Check that entity and enum names are unique across the schema."""
    errors: list[str] = []
    names = [e.name for e in schema.entities] + [e.name for e in schema.enums]
    for name in _duplicates(names):
        errors.append(f"Duplicate entity or enum name '{name}'")
    return errors, []


def validate_schema(schema: ir.RelationalSchema) -> tuple[list[str], list[str]]:
    """
    Run every validation check.

    Returns:
        Tuple of (errors, warnings) collected across the whole schema
    """
    errors: list[str] = []
    warnings: list[str] = []
    for check in (validate_names, validate_entities, validate_enums):
        check_errors, check_warnings = check(schema)
        errors.extend(check_errors)
        warnings.extend(check_warnings)
    return errors, warnings


def ensure_valid(schema: ir.RelationalSchema) -> list[str]:
    """
    Validate a schema, raising on errors.

    Returns:
        Warnings found (also logged)

    Raises:
        SchemaValidationError: With every error found
    """
    errors, warnings = validate_schema(schema)
    for warning in warnings:
        logger.warning(warning)
    if errors:
        raise SchemaValidationError(errors)
    return warnings
