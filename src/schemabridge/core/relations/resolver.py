"""
Relation target resolution.

``resolve_relation`` decides which entity a reference field points at. The
strategies run strongest first and the first success wins:

1. direct reference (1.0)
2. learned field pattern (0.95)
3. relation-name participant graph (0.95)
4. compound relation-name prefix (0.9)
5. foreign-key suffix stripping (0.95 exact or case-insensitive, scored variant capped at 0.94)
6. token-aligned structural scoring (capped at 0.94)
7. fuzzy nearest neighbour (similarity >= 0.6, capped at 0.94)
8. fallback to the capitalized field name (0.1)

Resolution never raises; unresolved fields get the fallback tier.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from difflib import SequenceMatcher

from .. import ir
from ..strings import KEY_SUFFIXES, capitalize, strip_key_suffix, tokenize
from .index import MatcherIndex, direct_reference

logger = logging.getLogger(__name__)

# =============================================================================
# Confidence tiers
# =============================================================================

DIRECT_CONFIDENCE = 1.0
LEARNED_CONFIDENCE = 0.95
GRAPH_CONFIDENCE = 0.95
COMPOUND_CONFIDENCE = 0.9
KEY_SUFFIX_CONFIDENCE = 0.95
SCORED_CAP = 0.94
FALLBACK_CONFIDENCE = 0.1

STRUCTURAL_THRESHOLD = 0.5
FUZZY_THRESHOLD = 0.6

EQUAL_TOKEN_WEIGHT = 2.0
SIMILAR_TOKEN_WEIGHT = 1.3
TRANSITION_WEIGHT = 0.7


# =============================================================================
# Structural scoring
# =============================================================================


def similar_tokens(a: str, b: str) -> bool:
    """
    Whether two tokens share enough leading and trailing characters.

    Common prefix plus common suffix length must reach 1.2x the shorter
    token's length (``"bookk"`` ~ ``"book"``).
    """
    if a == b:
        return True
    shortest = min(len(a), len(b))
    prefix = 0
    while prefix < shortest and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while suffix < shortest and a[-1 - suffix] == b[-1 - suffix]:
        suffix += 1
    return prefix + suffix >= shortest * 1.2


def structural_score(
    index: MatcherIndex, field_tokens: Sequence[str], entity_tokens: Sequence[str]
) -> float:
    """
    Score how well field tokens align with an entity's name tokens.

    Aligned positions earn 2.0 for equal tokens or 1.3 for similar ones, plus
    0.7x the learned probability of the entity's next token following the
    field token. The sum is normalized by the longer token count and reduced
    by up to 50% for a length mismatch.
    """
    longest = max(len(field_tokens), len(entity_tokens))
    if longest == 0:
        return 0.0

    score = 0.0
    for i, (f, e) in enumerate(zip(field_tokens, entity_tokens)):
        if f == e:
            score += EQUAL_TOKEN_WEIGHT
        elif similar_tokens(f, e):
            score += SIMILAR_TOKEN_WEIGHT
        if i + 1 < len(field_tokens) and i + 1 < len(entity_tokens):
            score += index.transition(f, entity_tokens[i + 1]) * TRANSITION_WEIGHT

    length_penalty = abs(len(field_tokens) - len(entity_tokens)) / longest
    return (score / longest) * (1 - length_penalty * 0.5)


def specificity(index: MatcherIndex, entity_name: str) -> float:
    """Sum of inverse token frequencies: names built from rarer tokens score higher."""
    return sum(1 / index.token_frequencies[t] for t in index.tokens[entity_name])


def best_structural_match(
    index: MatcherIndex, field_tokens: Sequence[str]
) -> tuple[str, float] | None:
    """
    Best-scoring entity for the tokens, or None below the acceptance threshold.

    Equal scores go to the more specific entity name, then to schema order.
    """
    best_name: str | None = None
    best_score = 0.0
    for name in index.entity_names:
        score = structural_score(index, field_tokens, index.tokens[name])
        if score > best_score or (
            best_name is not None
            and score == best_score
            and specificity(index, name) > specificity(index, best_name)
        ):
            best_name, best_score = name, score
    if best_name is None or best_score < STRUCTURAL_THRESHOLD:
        return None
    return best_name, best_score


def fuzzy_match(index: MatcherIndex, field_name: str) -> tuple[str, float] | None:
    """Closest entity name by ``difflib`` similarity, or None below the threshold."""
    needle = field_name.lower()
    best_name: str | None = None
    best_ratio = 0.0
    for name in index.entity_names:
        ratio = SequenceMatcher(None, needle, name.lower()).ratio()
        if ratio > best_ratio:
            best_name, best_ratio = name, ratio
    if best_name is None or best_ratio < FUZZY_THRESHOLD:
        return None
    return best_name, best_ratio


# =============================================================================
# Resolution
# =============================================================================


def _key_suffix_base(field_name: str, sibling_names: Sequence[str]) -> str | None:
    base = strip_key_suffix(field_name)
    if base:
        return base
    if any(f"{field_name}{suffix}" in sibling_names for suffix in KEY_SUFFIXES):
        return field_name
    return None


def _match(target: str, confidence: float, strategy: ir.MatchStrategy) -> ir.RelationMatch:
    return ir.RelationMatch(
        target_entity=target, confidence=min(confidence, 1.0), strategy=strategy
    )


def resolve_relation(
    index: MatcherIndex,
    entity_name: str,
    field_name: str,
    field_type: ir.ValidationType,
    relation: ir.RelationInfo | None = None,
    sibling_names: Sequence[str] = (),
) -> ir.RelationMatch:
    """
    Resolve the target entity of a reference field.

    Args:
        index: Matcher index of the schema being transformed
        entity_name: Entity owning the field
        field_name: The reference field's name
        field_type: The field's validation type (wrappers allowed)
        relation: Relation metadata parsed from the field's annotation
        sibling_names: Names of all fields of the owning entity

    Returns:
        RelationMatch tagged with the strategy that produced it
    """
    match = _resolve(index, entity_name, field_name, field_type, relation, sibling_names)
    logger.debug(
        f"{entity_name}.{field_name} -> {match.target_entity} "
        f"({match.strategy.value}, {match.confidence:.2f})"
    )
    return match


def _resolve(
    index: MatcherIndex,
    entity_name: str,
    field_name: str,
    field_type: ir.ValidationType,
    relation: ir.RelationInfo | None,
    sibling_names: Sequence[str],
) -> ir.RelationMatch:
    direct = direct_reference(field_type)
    if direct is not None and index.has_entity(direct):
        return _match(direct, DIRECT_CONFIDENCE, ir.MatchStrategy.DIRECT)

    learned = index.field_patterns.get(field_name)
    if learned is not None:
        return _match(learned, LEARNED_CONFIDENCE, ir.MatchStrategy.LEARNED_PATTERN)

    relation_name = relation.name if relation else None
    if relation_name:
        target = index.participant_target(relation_name, entity_name)
        if target is not None:
            return _match(target, GRAPH_CONFIDENCE, ir.MatchStrategy.RELATION_GRAPH)

        target = index.compound_prefix(relation_name, entity_name)
        if target is not None:
            return _match(target, COMPOUND_CONFIDENCE, ir.MatchStrategy.COMPOUND_PREFIX)

    base = _key_suffix_base(field_name, sibling_names)
    if base:
        candidate: str | None = capitalize(base)
        if not index.has_entity(candidate):
            candidate = index.lowercase.get(base.replace("_", "").lower())
        if candidate is not None:
            return _match(candidate, KEY_SUFFIX_CONFIDENCE, ir.MatchStrategy.FOREIGN_KEY_SUFFIX)
        scored = best_structural_match(index, tokenize(base))
        if scored is not None:
            target, score = scored
            return _match(target, min(score, SCORED_CAP), ir.MatchStrategy.FOREIGN_KEY_SUFFIX)

    scored = best_structural_match(index, tokenize(field_name))
    if scored is not None:
        target, score = scored
        return _match(target, min(score, SCORED_CAP), ir.MatchStrategy.STRUCTURAL)

    fuzzy = fuzzy_match(index, field_name)
    if fuzzy is not None:
        target, ratio = fuzzy
        return _match(target, min(ratio, SCORED_CAP), ir.MatchStrategy.FUZZY)

    return _match(capitalize(field_name), FALLBACK_CONFIDENCE, ir.MatchStrategy.FALLBACK)
