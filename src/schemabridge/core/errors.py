"""
Error types for schemabridge annotation parsing, transformation, and validation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class SchemaBridgeError(Exception):
    """Base exception for all schemabridge errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(SchemaBridgeError):
    """
    Raised when annotation text cannot be parsed.

    Examples:
    - Unterminated string literal
    - Unbalanced brackets in an argument list
    - Unexpected tokens after an attribute name
    """

    pass


class AnnotationSyntaxError(ParseError):
    """Raised by the strict annotation parser for malformed attribute fragments."""

    pass


class TransformError(SchemaBridgeError):
    """
    Raised when a schema tree cannot be transformed into the other representation.

    Examples:
    - Field referencing an enum that is not declared
    - Field referencing an entity that is not declared
    """

    pass


class UnknownReferenceError(TransformError):
    """A field names an entity or enum that does not exist in the schema."""

    def __init__(self, entity: str, field: str, reference: str, kind: str = "entity"):
        self.entity = entity
        self.field = field
        self.reference = reference
        self.kind = kind
        super().__init__(f"Field '{entity}.{field}' references unknown {kind} '{reference}'")


class SchemaValidationError(SchemaBridgeError):
    """
    Raised when a relational schema fails pre-transformation validation.

    All problems found across the schema are collected in ``errors``.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        summary = f"Schema validation failed with {len(self.errors)} error(s):"
        super().__init__("\n".join([summary, *(f"  - {e}" for e in self.errors)]))


class ConfigError(SchemaBridgeError):
    """Raised when schemabridge.toml cannot be read or contains invalid values."""

    pass


class IntrospectionError(SchemaBridgeError):
    """Raised when validation models cannot be loaded for introspection."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        file: Optional path of the file the text came from
        snippet: Optional text showing the error location
        owner: Optional ``Entity.field`` the annotation belongs to
    """

    line: int
    column: int
    file: Path | None = None
    snippet: str | None = None
    owner: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "schema.json:1:14 in Post.author"
        """
        location = f"{self.line}:{self.column}"
        if self.file:
            location = f"{self.file}:{location}"
        if self.owner:
            location += f" in {self.owner}"

        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the offending line with an error marker under the column."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        index = min(max(self.line - 1, 0), len(lines) - 1)
        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^^^"
        return f"{prefix}{lines[index]}\n{marker}"


def make_parse_error(
    message: str,
    line: int,
    column: int,
    snippet: str | None = None,
    owner: str | None = None,
) -> AnnotationSyntaxError:
    """
    Helper to create an AnnotationSyntaxError with context.

    Args:
        message: Error description
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional annotation text
        owner: Optional ``Entity.field`` owning the annotation

    Returns:
        AnnotationSyntaxError with context attached
    """
    context = ErrorContext(line=line, column=column, snippet=snippet, owner=owner)
    return AnnotationSyntaxError(message, context)
