"""Core schemabridge functionality: IR, transformers, relation inference and clustering."""

from . import ir
from .annotations import (
    EntityAnnotations,
    FieldAnnotations,
    format_relation,
    parse_attribute,
    parse_entity_annotations,
    parse_field_annotations,
    scan_annotations,
)
from .clustering import DomainAssignment, DomainConfig, DomainGroup, group_by_domain
from .errors import (
    AnnotationSyntaxError,
    ConfigError,
    ErrorContext,
    IntrospectionError,
    ParseError,
    SchemaBridgeError,
    SchemaValidationError,
    TransformError,
    UnknownReferenceError,
)
from .forward import relational_to_validation
from .introspection import introspect_models, load_namespace
from .manifest import ProjectManifest, find_manifest, load_manifest
from .relations import build_matcher_index, resolve_relation
from .reverse import ReverseResult, low_confidence, reverse_transform, validation_to_relational
from .validator import ensure_valid, validate_schema

__all__ = [
    "ir",
    # Errors
    "SchemaBridgeError",
    "ParseError",
    "AnnotationSyntaxError",
    "TransformError",
    "UnknownReferenceError",
    "SchemaValidationError",
    "ConfigError",
    "IntrospectionError",
    "ErrorContext",
    # Annotations
    "EntityAnnotations",
    "FieldAnnotations",
    "format_relation",
    "parse_attribute",
    "parse_entity_annotations",
    "parse_field_annotations",
    "scan_annotations",
    # Transformers
    "relational_to_validation",
    "reverse_transform",
    "validation_to_relational",
    "low_confidence",
    "ReverseResult",
    # Relation inference
    "build_matcher_index",
    "resolve_relation",
    # Clustering
    "DomainAssignment",
    "DomainConfig",
    "DomainGroup",
    "group_by_domain",
    # Validation
    "ensure_valid",
    "validate_schema",
    # Introspection
    "introspect_models",
    "load_namespace",
    # Manifest
    "ProjectManifest",
    "find_manifest",
    "load_manifest",
]
