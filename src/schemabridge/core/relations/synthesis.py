"""
Schema-wide relation passes run after every field has been resolved.

- ``infer_keys`` gives owning-side reference fields their local/foreign key
  lists from ``<field>Id`` style sibling columns.
- ``synthesize_back_relations`` pairs every owning field with exactly one
  inverse field on its target entity, generating the inverse when missing.

Both passes are pure: they return a new RelationalSchema.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from .. import ir
from ..strings import capitalize, lower_first, pluralize, tokenize

logger = logging.getLogger(__name__)

# Documentation marker carried by generated inverse fields
GENERATED_MARKER = "@generated back-relation"

# Key suffixes tried for ``<field><suffix>`` sibling columns, in order
LOCAL_KEY_SUFFIXES = ("Id", "ID", "_id", "_ID")

# Inverse names for well-known self-relation roles
SELF_RELATION_ROLES = {
    "parent": "children",
    "manager": "employees",
    "supervisor": "subordinates",
}


def self_relation_name(entity_name: str) -> str:
    """Deterministic name for an unnamed self-relation (``"CategoryToCategory"``)."""
    return f"{entity_name}To{entity_name}"


def _target_of(field: ir.FieldSpec) -> str | None:
    return field.type.name if isinstance(field.type, ir.EntityRef) else None


def _with_relation(field: ir.FieldSpec, relation: ir.RelationInfo) -> ir.FieldSpec:
    """Replace (or add) the field's relation attribute."""
    attributes = [a for a in field.attributes if not isinstance(a, ir.RelationAttr)]
    attributes.append(ir.RelationAttr(relation=relation))
    return field.model_copy(update={"attributes": attributes})


def _mark_unique(field: ir.FieldSpec) -> ir.FieldSpec:
    if field.is_unique:
        return field
    return field.model_copy(
        update={
            "modifiers": [*field.modifiers, ir.FieldModifier.UNIQUE],
            "attributes": [*field.attributes, ir.UniqueAttr()],
        }
    )


def _key_column(field: ir.FieldSpec, names: set[str]) -> str | None:
    """The ``<field><suffix>`` sibling column backing a reference field, if present."""
    candidates = (f"{field.name}{suffix}" for suffix in LOCAL_KEY_SUFFIXES)
    return next((name for name in candidates if name in names), None)


def _find_inverse(
    schema: ir.RelationalSchema, source: str, owning: ir.FieldSpec
) -> ir.FieldSpec | None:
    """
    First field on the owning field's target that points back under the same relation name.

    Fields that own a relation themselves, through key lists or a key column,
    are not inverses.
    """
    target = schema.get_entity(_target_of(owning) or "")
    if target is None:
        return None
    name = owning.relation.name if owning.relation else None
    target_names = {f.name for f in target.fields}
    for candidate in target.fields:
        if _target_of(candidate) != source:
            continue
        if target.name == source and candidate.name == owning.name:
            continue
        if candidate.relation is not None and candidate.relation.is_owning:
            continue
        if not candidate.is_list and _key_column(candidate, target_names) is not None:
            continue
        candidate_name = candidate.relation.name if candidate.relation else None
        if candidate_name == name:
            return candidate
    return None


# =============================================================================
# Local/foreign key inference
# =============================================================================


def infer_keys(schema: ir.RelationalSchema) -> ir.RelationalSchema:
    """
    Assign key lists to to-one reference fields backed by a sibling key column.

    A reference field ``author`` without keys, next to a field ``authorId``
    (or ``authorID``, ``author_id``, ``author_ID``), gets
    ``fields: [authorId], references: [id]``. When the inverse side is also
    to-one, the key column is marked unique.
    """
    entities: list[ir.EntitySpec] = []
    inferred = 0

    for entity in schema.entities:
        names = {f.name for f in entity.fields}
        updated: dict[str, ir.FieldSpec] = {}

        for field in entity.fields:
            relation = field.relation
            if _target_of(field) is None or field.is_list:
                continue
            if relation is not None and relation.fields:
                continue

            key_name = _key_column(field, names)
            if key_name is None:
                continue

            relation = (relation or ir.RelationInfo()).model_copy(
                update={"fields": [key_name], "references": ["id"]}
            )
            updated[field.name] = _with_relation(field, relation)
            inferred += 1

            inverse = _find_inverse(schema, entity.name, updated[field.name])
            if inverse is not None and not inverse.is_list:
                key_field = updated.get(key_name) or entity.get_field(key_name)
                if key_field is not None:
                    updated[key_name] = _mark_unique(key_field)

        fields = [updated.get(f.name, f) for f in entity.fields]
        entities.append(entity.model_copy(update={"fields": fields}))

    logger.debug(f"Key inference assigned keys to {inferred} field(s)")
    return schema.model_copy(update={"entities": entities})


# =============================================================================
# Back-relation synthesis
# =============================================================================


@dataclass
class _Owning:
    source: str
    field: ir.FieldSpec
    target: str
    inverse: ir.FieldSpec | None = None

    @property
    def relation_name(self) -> str | None:
        return self.field.relation.name if self.field.relation else None

    @property
    def is_unnamed(self) -> bool:
        """No relation name, or only the default name given to a self-relation."""
        name = self.relation_name
        if name is None:
            return True
        return self.source == self.target and name == self_relation_name(self.source)


def _collect_owning(schema: ir.RelationalSchema) -> list[_Owning]:
    owning: list[_Owning] = []
    for entity in schema.entities:
        for field in entity.fields:
            target = _target_of(field)
            relation = field.relation
            if target is None or relation is None or not relation.is_owning:
                continue
            if schema.get_entity(target) is None:
                logger.debug(f"Not synthesizing for {entity.name}.{field.name}: unknown {target}")
                continue
            owning.append(_Owning(source=entity.name, field=field, target=target))
    return owning


def _pair_inverses(schema: ir.RelationalSchema, owning: list[_Owning]) -> None:
    """Claim one existing inverse field per owning field, in schema order."""
    claimed: set[tuple[str, str]] = set()
    for item in owning:
        target = schema.get_entity(item.target)
        if target is None:
            continue
        for candidate in target.fields:
            key = (item.target, candidate.name)
            if key in claimed or key == (item.source, item.field.name):
                continue
            if _target_of(candidate) != item.source:
                continue
            relation = candidate.relation
            if relation is not None and relation.is_owning:
                continue
            if (relation.name if relation else None) != item.relation_name:
                continue
            claimed.add(key)
            item.inverse = candidate
            break


def back_relation_name(
    source: str,
    owning_field: str,
    target_field_names: set[str],
    *,
    is_self: bool = False,
    disambiguate: bool = False,
) -> str:
    """
    Name the generated inverse of ``source.owning_field``.

    The base name is the pluralized source entity (``posts``). Tokens of the
    owning field that are not part of the source name are appended when the
    relation must be told apart from others (``postsReviewer``). Self-relations
    use the role table where it applies. Remaining clashes get a numeric suffix.
    """
    if is_self and owning_field in SELF_RELATION_ROLES:
        name = SELF_RELATION_ROLES[owning_field]
    else:
        name = lower_first(pluralize(source))
        if is_self or disambiguate or name in target_field_names:
            source_tokens = set(tokenize(source))
            descriptor = [t for t in tokenize(owning_field) if t not in source_tokens]
            name += "".join(capitalize(t) for t in descriptor)

    candidate = name
    counter = 2
    while candidate in target_field_names:
        candidate = f"{name}{counter}"
        counter += 1
    return candidate


def synthesize_back_relations(schema: ir.RelationalSchema) -> ir.RelationalSchema:
    """
    Ensure every owning reference field has exactly one inverse field.

    Existing inverses are paired first (each can satisfy one owning field).
    Unnamed relations that occur more than once between the same two entities
    are named ``<Source><Field>`` on both sides so the pairs stay apart. A
    self-relation still carrying its default ``<E>To<E>`` name counts as unnamed.
    Missing inverses are generated as list fields carrying the relation name
    and the ``@generated back-relation`` marker. Running the pass again on its
    own output adds nothing.
    """
    owning = _collect_owning(schema)
    _pair_inverses(schema, owning)

    pair_counts = Counter((o.source, o.target) for o in owning)
    renamed: dict[tuple[str, str], ir.RelationInfo] = {}

    for item in owning:
        if item.is_unnamed and pair_counts[(item.source, item.target)] > 1:
            relation_name = f"{item.source}{capitalize(item.field.name)}"
            relation = item.field.relation.model_copy(update={"name": relation_name})
            renamed[(item.source, item.field.name)] = relation
            item.field = _with_relation(item.field, relation)
            if item.inverse is not None:
                inverse_relation = (item.inverse.relation or ir.RelationInfo()).model_copy(
                    update={"name": relation_name}
                )
                renamed[(item.target, item.inverse.name)] = inverse_relation

    added: dict[str, list[ir.FieldSpec]] = {}
    taken: dict[str, set[str]] = {e.name: {f.name for f in e.fields} for e in schema.entities}

    for item in owning:
        if item.inverse is not None:
            continue
        name = back_relation_name(
            item.source,
            item.field.name,
            taken[item.target],
            is_self=item.source == item.target,
            disambiguate=pair_counts[(item.source, item.target)] > 1,
        )
        taken[item.target].add(name)
        added.setdefault(item.target, []).append(
            ir.FieldSpec(
                name=name,
                type=ir.EntityRef(name=item.source),
                modifiers=[ir.FieldModifier.LIST],
                attributes=[ir.RelationAttr(relation=ir.RelationInfo(name=item.relation_name))],
                documentation=GENERATED_MARKER,
            )
        )
        logger.debug(f"Synthesized {item.target}.{name} for {item.source}.{item.field.name}")

    entities: list[ir.EntitySpec] = []
    for entity in schema.entities:
        fields = [
            _with_relation(f, renamed[(entity.name, f.name)])
            if (entity.name, f.name) in renamed
            else f
            for f in entity.fields
        ]
        fields.extend(added.get(entity.name, []))
        entities.append(entity.model_copy(update={"fields": fields}))

    total = sum(len(v) for v in added.values())
    logger.info(f"Back-relation synthesis added {total} field(s)")
    return schema.model_copy(update={"entities": entities})
