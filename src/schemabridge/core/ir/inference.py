"""
Relation inference result types.

Every reference field resolved by the reverse transformer yields a
``RelationMatch`` tagged with the strategy that produced it, so reviewers can
flag low-confidence guesses.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .relational import RelationInfo


class MatchStrategy(StrEnum):
    """Resolution strategies, strongest first."""

    DIRECT = "direct"
    LEARNED_PATTERN = "learned_pattern"
    RELATION_GRAPH = "relation_graph"
    COMPOUND_PREFIX = "compound_prefix"
    FOREIGN_KEY_SUFFIX = "foreign_key_suffix"
    STRUCTURAL = "structural"
    FUZZY = "fuzzy"
    FALLBACK = "fallback"


class RelationMatch(BaseModel):
    """
    Resolved target of a reference field.

    Attributes:
        target_entity: Name of the entity the field points at
        confidence: Certainty in [0, 1]
        strategy: Strategy that produced the match
    """

    target_entity: str
    confidence: float = Field(ge=0.0, le=1.0)
    strategy: MatchStrategy

    model_config = ConfigDict(frozen=True)

    @property
    def is_fallback(self) -> bool:
        return self.strategy == MatchStrategy.FALLBACK


class FieldResolution(BaseModel):
    """Resolution record for one reference field of the reverse transform."""

    entity: str
    field: str
    match: RelationMatch
    relation: RelationInfo | None = None
    is_self_relation: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_name(self) -> str:
        return f"{self.entity}.{self.field}"
