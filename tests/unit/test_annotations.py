"""Tests for the annotation lexer, parser, scanner and interpretation."""

import pytest

from schemabridge.core import ir
from schemabridge.core.annotations import (
    Argument,
    Call,
    Identifier,
    Lexer,
    TokenType,
    format_relation,
    parse_attribute,
    parse_entity_annotations,
    parse_field_annotations,
    scan_annotations,
)
from schemabridge.core.errors import AnnotationSyntaxError, ParseError

# ============================================================================
# Lexer
# ============================================================================


class TestLexer:
    """Tests for tokenizing annotation fragments."""

    def test_relation_tokens(self):
        tokens = Lexer('@relation("A", fields: [aId])').tokenize()
        types = [t.type for t in tokens]
        assert types == [
            TokenType.AT,
            TokenType.IDENTIFIER,
            TokenType.LPAREN,
            TokenType.STRING,
            TokenType.COMMA,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.LBRACKET,
            TokenType.IDENTIFIER,
            TokenType.RBRACKET,
            TokenType.RPAREN,
            TokenType.EOF,
        ]
        assert tokens[3].value == "A"

    def test_block_prefix(self):
        tokens = Lexer("@@index").tokenize()
        assert tokens[0].type == TokenType.AT_AT
        assert tokens[1].value == "index"

    def test_dotted_identifier(self):
        tokens = Lexer("@db.VarChar(255)").tokenize()
        assert tokens[1].value == "db.VarChar"
        assert tokens[3].type == TokenType.NUMBER
        assert tokens[3].value == "255"

    def test_negative_number(self):
        tokens = Lexer("@default(-1)").tokenize()
        assert tokens[3].value == "-1"

    def test_positions(self):
        tokens = Lexer("@id\n@unique").tokenize()
        unique = tokens[3]
        assert unique.value == "unique"
        assert (unique.line, unique.column) == (2, 2)

    def test_unterminated_string(self):
        with pytest.raises(AnnotationSyntaxError) as exc_info:
            Lexer('@map("users').tokenize()

        assert exc_info.value.context.line == 1
        assert exc_info.value.context.column == 6

    def test_unexpected_character(self):
        with pytest.raises(AnnotationSyntaxError, match="Unexpected character"):
            Lexer("@map(users!)").tokenize()


# ============================================================================
# Strict parser
# ============================================================================


class TestParseAttribute:
    """Tests for parsing a single attribute fragment."""

    def test_bare_attribute(self):
        attribute = parse_attribute("@id")
        assert attribute.name == "id"
        assert attribute.args == ()
        assert attribute.block is False

    def test_relation_named_arguments(self):
        attribute = parse_attribute("@relation(fields: [authorId], references: [id])")
        assert attribute.name == "relation"
        assert attribute.named("fields") == [Identifier("authorId")]
        assert attribute.named("references") == [Identifier("id")]
        assert attribute.named("onDelete") is None

    def test_positional_string(self):
        attribute = parse_attribute('@relation("PostAuthor", fields: [authorId])')
        assert attribute.positional() == "PostAuthor"
        assert attribute.positional(1) is None

    def test_block_attribute(self):
        attribute = parse_attribute('@@index([email, createdAt], name: "idx")')
        assert attribute.block is True
        assert attribute.name == "index"
        assert attribute.positional() == [Identifier("email"), Identifier("createdAt")]
        assert attribute.named("name") == "idx"

    def test_native_type(self):
        attribute = parse_attribute("@db.VarChar(255)")
        assert attribute.name == "db.VarChar"
        assert attribute.positional() == 255
        assert attribute.source == "@db.VarChar(255)"

    def test_call_arguments(self):
        attribute = parse_attribute("@default(nanoid(16))")
        assert attribute.positional() == Call("nanoid", (Argument(16),))

    def test_float_argument(self):
        assert parse_attribute("@default(2.5)").positional() == 2.5

    def test_trailing_comma_in_list(self):
        attribute = parse_attribute("@@id([a, b,])")
        assert attribute.positional() == [Identifier("a"), Identifier("b")]

    def test_unclosed_list(self):
        with pytest.raises(AnnotationSyntaxError, match="Expected"):
            parse_attribute("@relation(fields: [a")

    def test_trailing_tokens_rejected(self):
        with pytest.raises(AnnotationSyntaxError):
            parse_attribute("@unique extra")

    def test_missing_prefix(self):
        with pytest.raises(AnnotationSyntaxError):
            parse_attribute("relation()")

    def test_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_attribute("@relation(,)")

    def test_error_message_shows_snippet(self):
        with pytest.raises(AnnotationSyntaxError) as exc_info:
            parse_attribute("@relation(fields: [a")

        assert "@relation(fields: [a" in str(exc_info.value)


# ============================================================================
# Lenient scanning
# ============================================================================


class TestScanAnnotations:
    """Tests for extracting fragments from free text."""

    def test_fragments_in_prose(self):
        text = "The author. @relation(fields: [authorId], references: [id]) @unique"
        assert [a.name for a in scan_annotations(text)] == ["relation", "unique"]

    def test_email_is_not_an_annotation(self):
        assert scan_annotations("Contact admin@example.com for access") == []

    def test_empty_text(self):
        assert scan_annotations(None) == []
        assert scan_annotations("") == []

    def test_trailing_sentence_dot(self):
        attributes = scan_annotations("Must be distinct. @unique.")
        assert [a.name for a in attributes] == ["unique"]

    def test_malformed_fragment_skipped(self):
        attributes = scan_annotations("@relation(fields: [a,,]) @id")
        assert [a.name for a in attributes] == ["id"]

    def test_unterminated_fragment_skipped(self):
        attributes = scan_annotations("Broken @relation(fields: [a, ) then @id")
        assert [a.name for a in attributes] == ["id"]

    def test_strings_may_contain_parentheses(self):
        attributes = scan_annotations('@default(dbgenerated("gen_random_uuid()")) @db.Uuid')
        assert [a.name for a in attributes] == ["default", "db.Uuid"]

    def test_multiline_documentation(self):
        text = 'Owner of the account.\n@relation("Owner", fields: [ownerId], references: [id])\n'
        attributes = scan_annotations(text)
        assert len(attributes) == 1
        assert attributes[0].positional() == "Owner"


# ============================================================================
# Typed interpretation
# ============================================================================


class TestFieldAnnotations:
    """Tests for field-level interpretation."""

    def test_flags(self):
        annotations = parse_field_annotations(
            '@id @default(uuid()) @map("user_id") @db.Uuid @unique @updatedAt @ignore'
        )
        assert annotations.is_id
        assert annotations.is_unique
        assert annotations.is_updated_at
        assert annotations.is_ignored
        assert annotations.map_name == "user_id"
        assert annotations.native_type == "@db.Uuid"
        assert annotations.default == ir.UuidDefault()

    def test_no_annotations(self):
        annotations = parse_field_annotations("Just a description")
        assert not annotations.is_id
        assert annotations.relation is None
        assert annotations.default is None

    def test_full_relation(self):
        annotations = parse_field_annotations(
            '@relation("PostAuthor", fields: [authorId], references: [id], '
            'onDelete: Cascade, onUpdate: Restrict, map: "fk_author")'
        )
        assert annotations.relation == ir.RelationInfo(
            name="PostAuthor",
            fields=["authorId"],
            references=["id"],
            on_delete=ir.ReferentialAction.CASCADE,
            on_update=ir.ReferentialAction.RESTRICT,
            map="fk_author",
        )

    def test_named_relation_name_argument(self):
        annotations = parse_field_annotations('@relation(name: "Tree")')
        assert annotations.relation.name == "Tree"
        assert not annotations.relation.is_owning

    def test_unknown_referential_action_ignored(self):
        annotations = parse_field_annotations(
            "@relation(fields: [aId], references: [id], onDelete: Explode)"
        )
        assert annotations.relation.on_delete is None
        assert annotations.relation.is_owning

    def test_block_attributes_ignored(self):
        annotations = parse_field_annotations('@@map("users")')
        assert annotations.map_name is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("@default(autoincrement())", ir.AutoIncrementDefault()),
            ("@default(auto())", ir.AutoDefault()),
            ("@default(now())", ir.NowDefault()),
            ("@default(cuid())", ir.CuidDefault()),
            ("@default(cuid2())", ir.CuidDefault()),
            ("@default(ulid())", ir.UlidDefault()),
            ("@default(nanoid())", ir.NanoidDefault()),
            ("@default(nanoid(16))", ir.NanoidDefault(length=16)),
            ('@default("draft")', ir.LiteralDefault(value="draft")),
            ("@default(true)", ir.LiteralDefault(value=True)),
            ("@default(false)", ir.LiteralDefault(value=False)),
            ("@default(42)", ir.LiteralDefault(value=42)),
            ("@default(-1)", ir.LiteralDefault(value=-1)),
            ("@default(ACTIVE)", ir.LiteralDefault(value="ACTIVE")),
            (
                '@default(dbgenerated("gen_random_uuid()"))',
                ir.DbGeneratedDefault(expression="gen_random_uuid()"),
            ),
            (
                "@default(sequence(start: 10, increment: 5))",
                ir.SequenceDefault(options=ir.SequenceOptions(start=10, increment=5)),
            ),
        ],
    )
    def test_defaults(self, text, expected):
        assert parse_field_annotations(text).default == expected

    def test_unknown_default_function(self):
        assert parse_field_annotations("@default(random())").default is None


class TestEntityAnnotations:
    """Tests for entity-level interpretation."""

    def test_all_block_attributes(self):
        annotations = parse_entity_annotations(
            "@@id([a, b]) "
            '@@unique([email, tenant], name: "uniq") '
            "@@index([createdAt]) "
            '@@fulltext([title, body], map: "ft") '
            '@@map("users") '
            "@@ignore"
        )
        assert annotations.id_fields == ["a", "b"]
        assert annotations.unique_constraints == [
            ir.CompositeUniqueAttr(fields=["email", "tenant"], name="uniq")
        ]
        assert annotations.indexes == [ir.IndexAttr(fields=["createdAt"])]
        assert annotations.fulltext_indexes == [
            ir.FullTextAttr(fields=["title", "body"], map="ft")
        ]
        assert annotations.map_name == "users"
        assert annotations.is_ignored

    def test_to_attributes(self):
        annotations = parse_entity_annotations('@@id([a, b]) @@index([a]) @@map("t")')
        assert annotations.to_attributes() == [
            ir.CompositeIdAttr(fields=["a", "b"]),
            ir.IndexAttr(fields=["a"]),
            ir.TableMapAttr(name="t"),
        ]

    def test_index_with_sort_options(self):
        annotations = parse_entity_annotations("@@index([title(sort: Desc), createdAt])")
        assert annotations.indexes[0].fields == ["title", "createdAt"]

    def test_field_attributes_ignored(self):
        annotations = parse_entity_annotations("@id @unique")
        assert annotations.to_attributes() == []


class TestFormatRelation:
    """Tests for rendering relation metadata."""

    def test_owning_side(self):
        info = ir.RelationInfo(fields=["authorId"], references=["id"])
        assert format_relation(info) == "@relation(fields: [authorId], references: [id])"

    def test_empty(self):
        assert format_relation(ir.RelationInfo()) == "@relation"

    def test_parses_back(self):
        info = ir.RelationInfo(
            name="PostAuthor",
            fields=["authorId"],
            references=["id"],
            on_delete=ir.ReferentialAction.SET_NULL,
            map="fk_author",
        )
        assert parse_field_annotations(format_relation(info)).relation == info
