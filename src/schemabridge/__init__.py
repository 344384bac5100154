"""
schemabridge - convert between relational-model schemas and runtime-validation
schemas, inferring relations in the reverse direction.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import (
    ParseError,
    SchemaBridgeError,
    SchemaValidationError,
    TransformError,
)
from .core.forward import relational_to_validation
from .core.reverse import ReverseResult, reverse_transform, validation_to_relational

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "SchemaBridgeError",
    "ParseError",
    "TransformError",
    "SchemaValidationError",
    "relational_to_validation",
    "reverse_transform",
    "validation_to_relational",
    "ReverseResult",
]
