"""
Matcher index for relation inference.

``build_matcher_index`` scans a validation schema once and returns an
immutable ``MatcherIndex``: tokenized entity names, token statistics, and the
relation patterns learned from field annotations. Every resolution of the
same reverse run reads from the one index.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .. import ir
from ..annotations import parse_field_annotations
from ..strings import strip_key_suffix, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatcherIndex:
    """
    Per-schema lookup tables used by the resolver.

    Attributes:
        entity_names: Known entity names in schema order
        lowercase: Lowercased entity name -> entity name
        tokens: Entity name -> lowercase word tokens
        token_frequencies: Token -> occurrences across all entity names
        transitions: Token -> {next token -> probability} within entity names
        field_patterns: Field or key name -> entity, learned from annotations
        relation_participants: Relation name -> entities taking part in it
    """

    entity_names: tuple[str, ...]
    lowercase: Mapping[str, str] = field(default_factory=dict)
    tokens: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    token_frequencies: Mapping[str, int] = field(default_factory=dict)
    transitions: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    field_patterns: Mapping[str, str] = field(default_factory=dict)
    relation_participants: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def has_entity(self, name: str) -> bool:
        return name in self.tokens

    def transition(self, current: str, following: str) -> float:
        """Probability that ``following`` comes after ``current`` in an entity name."""
        return self.transitions.get(current, {}).get(following, 0.0)

    def compound_prefix(self, relation_name: str, current_entity: str | None = None) -> str | None:
        """
        Find the entity a compound relation name starts with.

        The longest entity name that is a literal prefix of ``relation_name``
        wins. If it is the current entity and text remains, the remainder is
        tried as well (``"CategoryParentCategory"`` style names).

        Examples:
            With entities ``User`` and ``UserProfile``:
            ``"UserProfileOwner"`` -> ``"UserProfile"``
        """
        prefix = self._longest_prefix(relation_name)
        if prefix is None:
            return None
        remainder = relation_name[len(prefix) :]
        if prefix == current_entity and remainder:
            return self._longest_prefix(remainder) or prefix
        return prefix

    def _longest_prefix(self, text: str) -> str | None:
        best: str | None = None
        for name in self.entity_names:
            if text.startswith(name) and (best is None or len(name) > len(best)):
                best = name
        return best

    def participant_target(self, relation_name: str, current_entity: str) -> str | None:
        """
        Resolve a relation name through the participant graph.

        One participant means a self-relation. With several, the lexically
        first participant other than ``current_entity`` is taken.
        """
        participants = self.relation_participants.get(relation_name)
        if not participants:
            return None
        if len(participants) == 1:
            return next(iter(participants))
        others = sorted(p for p in participants if p != current_entity)
        return others[0] if others else None


def direct_reference(vtype: ir.ValidationType) -> str | None:
    """
    Name of the object a field type references, if any.

    Wrappers are looked through; a union counts when its first option is a
    reference.
    """
    leaf = ir.unwrap(vtype)
    while isinstance(leaf, ir.UnionType) and leaf.options:
        leaf = ir.unwrap(leaf.options[0])
    if isinstance(leaf, ir.ObjectRef):
        return leaf.name
    return None


def _transition_table(token_lists: list[tuple[str, ...]]) -> dict[str, dict[str, float]]:
    counts: dict[str, Counter[str]] = {}
    for tokens in token_lists:
        for current, following in zip(tokens, tokens[1:]):
            counts.setdefault(current, Counter())[following] += 1

    table: dict[str, dict[str, float]] = {}
    for current, followers in counts.items():
        total = sum(followers.values())
        table[current] = {token: count / total for token, count in followers.items()}
    return table


def build_matcher_index(schema: ir.ValidationSchema) -> MatcherIndex:
    """
    Build the matcher index for one validation schema.

    Besides the name statistics, this runs the learned-pattern pre-pass: for
    every field annotated with a relation name or local keys, the field name
    and each key name (with and without its key suffix) are mapped to the
    relation's target. The first recording of a name wins.

    Args:
        schema: Validation schema being reverse-transformed

    Returns:
        Frozen MatcherIndex
    """
    names = tuple(schema.objects)
    tokens = {name: tokenize(name) for name in names}
    frequencies = Counter(t for name_tokens in tokens.values() for t in name_tokens)
    lowercase: dict[str, str] = {}
    for name in names:
        lowercase.setdefault(name.lower(), name)

    # Prefix lookups during the pre-pass only need the names
    partial = MatcherIndex(entity_names=names, tokens=tokens)

    patterns: dict[str, str] = {}
    participants: dict[str, set[str]] = {}

    for obj in schema.objects.values():
        for obj_field in obj.fields:
            relation = parse_field_annotations(obj_field.documentation).relation
            if relation is None or not (relation.name or relation.fields):
                continue

            direct = direct_reference(obj_field.type)
            if direct is not None and not partial.has_entity(direct):
                direct = None

            if relation.name:
                members = participants.setdefault(relation.name, set())
                members.add(obj.name)
                if direct is not None:
                    members.add(direct)

            target = direct
            if target is None and relation.name:
                target = partial.compound_prefix(relation.name, obj.name)
            if target is None:
                continue

            keys = [obj_field.name]
            for key in relation.fields:
                keys.append(key)
                base = strip_key_suffix(key)
                if base:
                    keys.append(base)
            for key in keys:
                patterns.setdefault(key, target)

    logger.debug(
        f"Matcher index: {len(names)} entities, {len(patterns)} learned patterns, "
        f"{len(participants)} named relations"
    )

    return MatcherIndex(
        entity_names=names,
        lowercase=MappingProxyType(lowercase),
        tokens=MappingProxyType(tokens),
        token_frequencies=MappingProxyType(dict(frequencies)),
        transitions=MappingProxyType(_transition_table(list(tokens.values()))),
        field_patterns=MappingProxyType(patterns),
        relation_participants=MappingProxyType(
            {name: frozenset(members) for name, members in participants.items()}
        ),
    )
