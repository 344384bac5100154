"""
Relation inference engine.

- index: immutable per-schema matcher index and its builder
- resolver: tiered target resolution for reference fields
- synthesis: key inference and back-relation synthesis passes
"""

from .index import MatcherIndex, build_matcher_index, direct_reference
from .resolver import resolve_relation
from .synthesis import (
    GENERATED_MARKER,
    back_relation_name,
    infer_keys,
    self_relation_name,
    synthesize_back_relations,
)

__all__ = [
    "MatcherIndex",
    "build_matcher_index",
    "direct_reference",
    "resolve_relation",
    "GENERATED_MARKER",
    "back_relation_name",
    "infer_keys",
    "self_relation_name",
    "synthesize_back_relations",
]
