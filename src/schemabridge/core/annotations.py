"""
Annotation micro-language for schemabridge.

Field and object documentation may carry relational attributes written as
free-text fragments::

    The post author. @relation("PostAuthor", fields: [authorId], references: [id])
    @@index([email], name: "user_email_idx")

This module provides a small lexer and recursive-descent parser for one
attribute fragment, a lenient scanner that pulls every fragment out of
arbitrary prose, and typed interpretations (``FieldAnnotations`` and
``EntityAnnotations``) consumed by the reverse transformer.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .errors import AnnotationSyntaxError, make_parse_error
from .ir.relational import (
    AutoDefault,
    AutoIncrementDefault,
    CompositeIdAttr,
    CompositeUniqueAttr,
    CuidDefault,
    DbGeneratedDefault,
    DefaultValue,
    EntityAttribute,
    EntityIgnoreAttr,
    FullTextAttr,
    IndexAttr,
    LiteralDefault,
    NanoidDefault,
    NowDefault,
    ReferentialAction,
    RelationInfo,
    SequenceDefault,
    SequenceOptions,
    TableMapAttr,
    UlidDefault,
    UuidDefault,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Tokens
# =============================================================================


class TokenType(Enum):
    """Token types of the annotation micro-language."""

    AT = "@"
    AT_AT = "@@"
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    COLON = ":"
    EOF = "EOF"


_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}


@dataclass
class Token:
    """
    A single token of an annotation fragment.

    Attributes:
        type: Type of token
        value: String value of the token
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Converts annotation text into a stream of tokens."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def error(self, message: str, line: int, column: int) -> AnnotationSyntaxError:
        return make_parse_error(message, line, column, snippet=self.text)

    def read_string(self) -> str:
        """Read a quoted string."""
        start_line = self.line
        start_col = self.column
        quote = self.current_char()
        self.advance()

        chars = []
        while True:
            current = self.current_char()
            if not current or current == quote:
                break

            if current == "\\":
                self.advance()
                escape_char = self.current_char()
                if escape_char == "n":
                    chars.append("\n")
                elif escape_char == "t":
                    chars.append("\t")
                elif escape_char:
                    chars.append(escape_char)
                self.advance()
            else:
                chars.append(current)
                self.advance()

        if self.current_char() != quote:
            raise self.error("Unterminated string literal", start_line, start_col)

        self.advance()
        return "".join(chars)

    def read_number(self) -> str:
        """Read an integer or decimal, with an optional leading minus."""
        chars = []
        if self.current_char() == "-":
            chars.append("-")
            self.advance()
        current = self.current_char()
        while current and (current.isdigit() or current == "."):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_identifier(self) -> str:
        """Read an identifier; dots join segments (``db.VarChar``)."""
        chars = []
        current = self.current_char()
        while current and (current.isalnum() or current in "_."):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars).rstrip(".")

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire text.

        Returns:
            List of tokens, terminated by an EOF token

        Raises:
            AnnotationSyntaxError: On unterminated strings or stray characters
        """
        while (char := self.current_char()) is not None:
            line, column = self.line, self.column

            if char.isspace():
                self.advance()
            elif char == "@":
                self.advance()
                if self.current_char() == "@":
                    self.advance()
                    self.tokens.append(Token(TokenType.AT_AT, "@@", line, column))
                else:
                    self.tokens.append(Token(TokenType.AT, "@", line, column))
            elif char in ('"', "'"):
                value = self.read_string()
                self.tokens.append(Token(TokenType.STRING, value, line, column))
            elif char.isdigit() or (char == "-" and (self.peek_char() or "").isdigit()):
                value = self.read_number()
                self.tokens.append(Token(TokenType.NUMBER, value, line, column))
            elif char.isalpha() or char == "_":
                value = self.read_identifier()
                self.tokens.append(Token(TokenType.IDENTIFIER, value, line, column))
            elif char in _PUNCTUATION:
                self.advance()
                self.tokens.append(Token(_PUNCTUATION[char], char, line, column))
            else:
                raise self.error(f"Unexpected character {char!r}", line, column)

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return self.tokens


# =============================================================================
# Parsed values
# =============================================================================


@dataclass(frozen=True)
class Identifier:
    """A bare identifier argument (``Cascade``, ``authorId``, ``true``)."""

    name: str


@dataclass(frozen=True)
class Call:
    """A function-style argument (``now()``, ``nanoid(16)``)."""

    name: str
    args: tuple[Argument, ...] = ()


ArgumentValue = Union[str, int, float, Identifier, Call, list]


@dataclass(frozen=True)
class Argument:
    """An attribute argument, positional when ``name`` is None."""

    value: ArgumentValue
    name: str | None = None


@dataclass(frozen=True)
class Attribute:
    """
    One parsed attribute fragment.

    Attributes:
        name: Attribute name without prefix (``relation``, ``db.VarChar``)
        args: Parsed arguments in source order
        block: True for entity-level (``@@``) attributes
        source: The fragment text as written
    """

    name: str
    args: tuple[Argument, ...] = ()
    block: bool = False
    source: str = ""

    def positional(self, index: int = 0) -> ArgumentValue | None:
        """Return the ``index``-th positional argument, if present."""
        values = [a.value for a in self.args if a.name is None]
        return values[index] if index < len(values) else None

    def named(self, name: str) -> ArgumentValue | None:
        """Return the value of a named argument, if present."""
        for arg in self.args:
            if arg.name == name:
                return arg.value
        return None


class AnnotationParser:
    """Recursive-descent parser for a single attribute fragment."""

    def __init__(self, tokens: list[Token], text: str):
        self.tokens = tokens
        self.text = text
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            AnnotationSyntaxError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            raise make_parse_error(
                f"Expected {token_type.value}, got {token.type.value}",
                token.line,
                token.column,
                snippet=self.text,
            )
        return self.advance()

    def parse_attribute(self) -> Attribute:
        """attribute := ('@' | '@@') dotted_ident [ '(' [arg {',' arg}] ')' ]"""
        block = self.match(TokenType.AT_AT)
        if block:
            self.advance()
        else:
            self.expect(TokenType.AT)
        name = self.expect(TokenType.IDENTIFIER).value

        args: list[Argument] = []
        if self.match(TokenType.LPAREN):
            args = self.parse_arguments()
        return Attribute(name=name, args=tuple(args), block=block, source=self.text.strip())

    def parse_arguments(self) -> list[Argument]:
        self.expect(TokenType.LPAREN)
        args: list[Argument] = []
        while not self.match(TokenType.RPAREN):
            args.append(self.parse_argument())
            if not self.match(TokenType.RPAREN):
                self.expect(TokenType.COMMA)
        self.expect(TokenType.RPAREN)
        return args

    def parse_argument(self) -> Argument:
        """arg := [ident ':'] value"""
        if self.match(TokenType.IDENTIFIER) and self.tokens[self.pos + 1].type == TokenType.COLON:
            name = self.advance().value
            self.advance()
            return Argument(value=self.parse_value(), name=name)
        return Argument(value=self.parse_value())

    def parse_value(self) -> ArgumentValue:
        """value := string | number | ident [call] | '[' [value {',' value}] ']'"""
        token = self.current_token()

        if token.type == TokenType.STRING:
            self.advance()
            return token.value

        if token.type == TokenType.NUMBER:
            self.advance()
            try:
                return float(token.value) if "." in token.value else int(token.value)
            except ValueError:
                raise make_parse_error(
                    f"Invalid number {token.value!r}", token.line, token.column, snippet=self.text
                ) from None

        if token.type == TokenType.IDENTIFIER:
            self.advance()
            if self.match(TokenType.LPAREN):
                return Call(name=token.value, args=tuple(self.parse_arguments()))
            return Identifier(token.value)

        if token.type == TokenType.LBRACKET:
            self.advance()
            items: list[ArgumentValue] = []
            while not self.match(TokenType.RBRACKET):
                items.append(self.parse_value())
                if not self.match(TokenType.RBRACKET):
                    self.expect(TokenType.COMMA)
            self.expect(TokenType.RBRACKET)
            return items

        raise make_parse_error(
            f"Unexpected {token.type.value} in attribute arguments",
            token.line,
            token.column,
            snippet=self.text,
        )


def parse_attribute(text: str) -> Attribute:
    """
    Parse exactly one attribute fragment.

    Args:
        text: Fragment such as ``@relation(fields: [authorId], references: [id])``

    Returns:
        The parsed Attribute

    Raises:
        AnnotationSyntaxError: If the text is not a single well-formed attribute
    """
    tokens = Lexer(text).tokenize()
    parser = AnnotationParser(tokens, text)
    attribute = parser.parse_attribute()
    parser.expect(TokenType.EOF)
    return attribute


# =============================================================================
# Lenient scanning
# =============================================================================

# An '@' at the start of a word; e-mail addresses and '@' inside words are prose
_ATTRIBUTE_START = re.compile(r"(?<![\w@.])@@?[A-Za-z_]")


def _fragment_end(text: str, start: int) -> int | None:
    """
    Find where the attribute fragment starting at ``start`` ends.

    Returns None if an argument list is never closed.
    """
    pos = start
    while pos < len(text) and text[pos] == "@":
        pos += 1
    while pos < len(text) and (text[pos].isalnum() or text[pos] in "_."):
        pos += 1
    # Sentence punctuation after the name is prose
    while text[pos - 1] == ".":
        pos -= 1
    if pos >= len(text) or text[pos] != "(":
        return pos

    depth = 0
    quote: str | None = None
    while pos < len(text):
        char = text[pos]
        if quote:
            if char == "\\":
                pos += 1
            elif char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
            if depth == 0:
                return pos + 1
        pos += 1
    return None


def scan_annotations(text: str | None) -> list[Attribute]:
    """
    Extract every well-formed attribute fragment from free text.

    Fragments that fail to parse are skipped; this function never raises.

    Examples:
        >>> text = "Owner. @relation(fields: [ownerId], references: [id]) @unique"
        >>> [a.name for a in scan_annotations(text)]
        ['relation', 'unique']
        >>> scan_annotations("contact admin@example.com")
        []
    """
    if not text:
        return []

    attributes: list[Attribute] = []
    pos = 0
    while match := _ATTRIBUTE_START.search(text, pos):
        start = match.start()
        end = _fragment_end(text, start)
        if end is None:
            logger.debug(f"Skipping unterminated annotation at offset {start}")
            pos = match.end()
            continue

        fragment = text[start:end]
        try:
            attributes.append(parse_attribute(fragment))
        except AnnotationSyntaxError as e:
            logger.debug(f"Skipping malformed annotation {fragment!r}: {e.message}")
        pos = end

    return attributes


# =============================================================================
# Typed interpretation
# =============================================================================


def _names(value: ArgumentValue | None) -> list[str]:
    """Normalize ``[a, b]`` / ``a`` / ``"a"`` to a list of names."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    names: list[str] = []
    for item in items:
        if isinstance(item, Identifier):
            names.append(item.name)
        elif isinstance(item, str):
            names.append(item)
        elif isinstance(item, Call):
            # Index fields may carry sort options: ``title(sort: Desc)``
            names.append(item.name)
    return names


def _string(value: ArgumentValue | None) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, Identifier):
        return value.name
    return None


def _action(value: ArgumentValue | None) -> ReferentialAction | None:
    name = _string(value)
    if name is None:
        return None
    try:
        return ReferentialAction(name)
    except ValueError:
        logger.debug(f"Ignoring unknown referential action {name!r}")
        return None


def relation_from_attribute(attribute: Attribute) -> RelationInfo:
    """Build RelationInfo from a parsed ``@relation(...)`` attribute."""
    return RelationInfo(
        name=_string(attribute.named("name") or attribute.positional()),
        fields=_names(attribute.named("fields")),
        references=_names(attribute.named("references")),
        on_delete=_action(attribute.named("onDelete")),
        on_update=_action(attribute.named("onUpdate")),
        map=_string(attribute.named("map")),
    )


def default_from_value(value: ArgumentValue) -> DefaultValue | None:
    """Interpret the argument of ``@default(...)``."""
    if isinstance(value, Call):
        first = value.args[0].value if value.args else None
        if value.name == "autoincrement":
            return AutoIncrementDefault()
        if value.name == "auto":
            return AutoDefault()
        if value.name == "now":
            return NowDefault()
        if value.name == "uuid":
            return UuidDefault()
        if value.name in ("cuid", "cuid2"):
            return CuidDefault()
        if value.name == "ulid":
            return UlidDefault()
        if value.name == "nanoid":
            return NanoidDefault(length=first if isinstance(first, int) else None)
        if value.name == "dbgenerated":
            return DbGeneratedDefault(expression=first if isinstance(first, str) else "")
        if value.name == "sequence":
            options = {
                a.name: a.value
                for a in value.args
                if a.name is not None and isinstance(a.value, int)
            }
            return SequenceDefault(
                options=SequenceOptions(
                    start=options.get("start"),
                    increment=options.get("increment"),
                    min_value=options.get("minValue"),
                    max_value=options.get("maxValue"),
                    cache=options.get("cache"),
                )
            )
        logger.debug(f"Ignoring unknown default function {value.name}()")
        return None

    if isinstance(value, Identifier):
        if value.name in ("true", "false"):
            return LiteralDefault(value=value.name == "true")
        # Enum member names
        return LiteralDefault(value=value.name)

    if isinstance(value, (str, int, float)):
        return LiteralDefault(value=value)
    return None


@dataclass
class FieldAnnotations:
    """Field-level attributes found in a field's documentation."""

    is_id: bool = False
    is_unique: bool = False
    is_updated_at: bool = False
    is_ignored: bool = False
    relation: RelationInfo | None = None
    map_name: str | None = None
    native_type: str | None = None
    default: DefaultValue | None = None


@dataclass
class EntityAnnotations:
    """Entity-level (``@@``) attributes found in an object's documentation."""

    id_fields: list[str] = field(default_factory=list)
    unique_constraints: list[CompositeUniqueAttr] = field(default_factory=list)
    indexes: list[IndexAttr] = field(default_factory=list)
    fulltext_indexes: list[FullTextAttr] = field(default_factory=list)
    map_name: str | None = None
    is_ignored: bool = False

    def to_attributes(self) -> list[EntityAttribute]:
        """Entity attributes in declaration-kind order."""
        attributes: list[EntityAttribute] = []
        if self.id_fields:
            attributes.append(CompositeIdAttr(fields=self.id_fields))
        attributes.extend(self.unique_constraints)
        attributes.extend(self.indexes)
        attributes.extend(self.fulltext_indexes)
        if self.map_name:
            attributes.append(TableMapAttr(name=self.map_name))
        if self.is_ignored:
            attributes.append(EntityIgnoreAttr())
        return attributes


def parse_field_annotations(text: str | None) -> FieldAnnotations:
    """Interpret the field-level attributes found in ``text``."""
    result = FieldAnnotations()
    for attribute in scan_annotations(text):
        if attribute.block:
            continue
        if attribute.name == "id":
            result.is_id = True
        elif attribute.name == "unique":
            result.is_unique = True
        elif attribute.name == "updatedAt":
            result.is_updated_at = True
        elif attribute.name == "ignore":
            result.is_ignored = True
        elif attribute.name == "relation":
            result.relation = relation_from_attribute(attribute)
        elif attribute.name == "map":
            result.map_name = _string(attribute.named("name") or attribute.positional())
        elif attribute.name == "default":
            value = attribute.positional()
            if value is not None:
                result.default = default_from_value(value)
        elif attribute.name.startswith("db."):
            result.native_type = attribute.source
    return result


def parse_entity_annotations(text: str | None) -> EntityAnnotations:
    """Interpret the entity-level (``@@``) attributes found in ``text``."""
    result = EntityAnnotations()
    for attribute in scan_annotations(text):
        if not attribute.block:
            continue
        fields = _names(attribute.named("fields") or attribute.positional())
        name = _string(attribute.named("name"))
        if attribute.name == "id":
            result.id_fields = fields
        elif attribute.name == "unique":
            result.unique_constraints.append(CompositeUniqueAttr(fields=fields, name=name))
        elif attribute.name == "index":
            result.indexes.append(IndexAttr(fields=fields, name=name))
        elif attribute.name == "fulltext":
            result.fulltext_indexes.append(
                FullTextAttr(fields=fields, name=name, map=_string(attribute.named("map")))
            )
        elif attribute.name == "map":
            result.map_name = _string(attribute.named("name") or attribute.positional())
        elif attribute.name == "ignore":
            result.is_ignored = True
    return result


def format_relation(info: RelationInfo) -> str:
    """
    Render relation metadata as an annotation fragment.

    Examples:
        >>> format_relation(RelationInfo(fields=["authorId"], references=["id"]))
        '@relation(fields: [authorId], references: [id])'
        >>> format_relation(RelationInfo(name="CategoryTree"))
        '@relation("CategoryTree")'
    """
    args: list[str] = []
    if info.name:
        args.append(f'"{info.name}"')
    if info.fields:
        args.append(f"fields: [{', '.join(info.fields)}]")
    if info.references:
        args.append(f"references: [{', '.join(info.references)}]")
    if info.on_delete:
        args.append(f"onDelete: {info.on_delete.value}")
    if info.on_update:
        args.append(f"onUpdate: {info.on_update.value}")
    if info.map:
        args.append(f'map: "{info.map}"')
    if not args:
        return "@relation"
    return f"@relation({', '.join(args)})"
