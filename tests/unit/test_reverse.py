"""Tests for the validation -> relational transformer."""

from schemabridge.core import ir
from schemabridge.core.reverse import (
    ReverseResult,
    low_confidence,
    reverse_transform,
    validation_to_relational,
)

INT = ir.NumberType(checks=[ir.NumberCheck(kind="int")])


def single(*fields: ir.ObjectFieldSpec, documentation: str | None = None) -> ir.EntitySpec:
    """Reverse-transform a one-object schema and return its entity."""
    obj = ir.ObjectSpec(name="Item", fields=list(fields), documentation=documentation)
    schema = reverse_transform(ir.ValidationSchema.build(objects=[obj])).schema
    return schema.get_entity("Item")


def field(name: str, vtype: ir.ValidationType, doc: str | None = None) -> ir.ObjectFieldSpec:
    return ir.ObjectFieldSpec(name=name, type=vtype, documentation=doc)


class TestFieldConversion:
    """Tests for per-field type, modifier and attribute reconstruction."""

    def test_plain_number_becomes_float(self):
        price = single(field("price", ir.NumberType())).get_field("price")
        assert price.type == ir.scalar("Float")
        assert price.modifiers == []

    def test_optional_and_nullable(self):
        entity = single(
            field("nickname", ir.OptionalType(inner=ir.StringType())),
            field("bio", ir.NullableType(inner=ir.StringType())),
        )
        assert entity.get_field("nickname").is_optional
        assert entity.get_field("bio").is_optional

    def test_optional_list_is_only_a_list(self):
        tags = single(
            field("tags", ir.OptionalType(inner=ir.ArrayType(element=ir.StringType())))
        ).get_field("tags")
        assert tags.modifiers == [ir.FieldModifier.LIST]

    def test_literal_default(self):
        active = single(
            field("active", ir.DefaultedType(inner=ir.BooleanType(), value=False))
        ).get_field("active")
        assert active.type == ir.scalar("Boolean")
        assert active.default == ir.LiteralDefault(value=False)
        assert not active.is_optional

    def test_default_without_static_value(self):
        stamp = single(field("stamp", ir.DefaultedType(inner=ir.StringType()))).get_field("stamp")
        assert stamp.default is None

    def test_enum_reference(self):
        obj = ir.ObjectSpec(name="User", fields=[field("role", ir.EnumTypeRef(name="Role"))])
        schema = validation_to_relational(
            ir.ValidationSchema.build(
                objects=[obj], enums=[ir.ValidationEnumSpec(name="Role", values=["USER"])]
            )
        )
        assert schema.get_entity("User").get_field("role").type == ir.EnumRef(name="Role")
        assert schema.get_enum("Role") == ir.EnumSpec(name="Role", values=["USER"])


class TestNamingConventions:
    """Tests for attributes inferred from field names."""

    def test_cuid_id(self):
        id_field = single(
            field("id", ir.StringType(checks=[ir.StringCheck(kind="cuid")]))
        ).get_field("id")
        assert id_field.is_primary_key
        assert id_field.default == ir.CuidDefault()

    def test_uuid_id(self):
        id_field = single(
            field("id", ir.StringType(checks=[ir.StringCheck(kind="uuid")]))
        ).get_field("id")
        assert id_field.default == ir.UuidDefault()

    def test_integer_id(self):
        id_field = single(field("id", INT)).get_field("id")
        assert id_field.type == ir.scalar("Int")
        assert id_field.default == ir.AutoIncrementDefault()

    def test_plain_string_id_has_no_default(self):
        id_field = single(field("id", ir.StringType())).get_field("id")
        assert id_field.is_primary_key
        assert id_field.default is None

    def test_created_at(self):
        created = single(field("createdAt", ir.DateType())).get_field("createdAt")
        assert created.default == ir.NowDefault()

    def test_created_at_must_be_a_date(self):
        created = single(field("createdAt", ir.StringType())).get_field("createdAt")
        assert created.default is None

    def test_updated_at(self):
        updated = single(field("updatedAt", ir.DateType())).get_field("updatedAt")
        assert any(isinstance(a, ir.UpdatedAtAttr) for a in updated.attributes)
        assert updated.default is None


class TestAnnotations:
    """Tests for attributes recovered from documentation."""

    def test_field_annotations(self):
        entity = single(
            field("key", ir.StringType(), "@id @default(uuid())"),
            field("email", ir.StringType(), 'Login. @unique @map("email_address")'),
            field("name", ir.StringType(), "@db.VarChar(255)"),
            field("touched", ir.DateType(), "@updatedAt"),
            field("legacy", ir.StringType(), "@ignore"),
        )

        key = entity.get_field("key")
        assert key.is_primary_key
        assert key.default == ir.UuidDefault()

        email = entity.get_field("email")
        assert email.is_unique
        assert ir.FieldModifier.UNIQUE in email.modifiers
        assert ir.MapAttr(name="email_address") in email.attributes
        assert email.documentation == 'Login. @unique @map("email_address")'

        name = entity.get_field("name")
        assert ir.NativeTypeAttr(value="@db.VarChar(255)") in name.attributes

        assert ir.UpdatedAtAttr() in entity.get_field("touched").attributes
        assert entity.get_field("legacy").is_excluded

    def test_annotation_default(self):
        status = single(field("status", ir.StringType(), '@default("draft")')).get_field("status")
        assert status.default == ir.LiteralDefault(value="draft")

    def test_static_default_wins_over_annotation(self):
        status = single(
            field("status", ir.DefaultedType(inner=ir.StringType(), value="live"), '@default("draft")')
        ).get_field("status")
        assert status.default == ir.LiteralDefault(value="live")

    def test_entity_annotations(self):
        entity = single(
            field("a", ir.StringType()),
            field("b", ir.StringType()),
            documentation='Join table. @@id([a, b]) @@index([b]) @@map("items")',
        )
        assert entity.attributes == [
            ir.CompositeIdAttr(fields=["a", "b"]),
            ir.IndexAttr(fields=["b"]),
            ir.TableMapAttr(name="items"),
        ]
        assert entity.documentation == 'Join table. @@id([a, b]) @@index([b]) @@map("items")'

    def test_relation_annotation_carried(self, blog_validation):
        schema = validation_to_relational(blog_validation)
        author = schema.get_entity("Post").get_field("author")

        assert author.type == ir.EntityRef(name="User")
        assert author.relation == ir.RelationInfo(fields=["authorId"], references=["id"])


class TestReverseTransform:
    """Tests for whole-schema behaviour and resolution reporting."""

    def test_resolutions(self, blog_validation):
        result = reverse_transform(blog_validation)

        assert isinstance(result, ReverseResult)
        assert len(result.resolutions) == 1
        resolution = result.resolutions[0]
        assert resolution.qualified_name == "Post.author"
        assert resolution.match.target_entity == "User"
        assert resolution.match.strategy == ir.MatchStrategy.DIRECT
        assert resolution.relation == ir.RelationInfo(fields=["authorId"], references=["id"])
        assert not resolution.is_self_relation

    def test_entities_in_object_order(self, blog_validation):
        schema = validation_to_relational(blog_validation)
        assert [e.name for e in schema.entities] == ["User", "Post"]

    def test_deterministic(self, blog_validation):
        assert reverse_transform(blog_validation) == reverse_transform(blog_validation)

    def test_fallback_is_low_confidence(self):
        obj = ir.ObjectSpec(
            name="Post",
            fields=[field("id", INT), field("zzz", ir.ObjectRef(name="Nested"))],
        )
        result = reverse_transform(ir.ValidationSchema.build(objects=[obj]))

        flagged = low_confidence(result)
        assert [r.qualified_name for r in flagged] == ["Post.zzz"]
        assert flagged[0].match.is_fallback
        assert result.schema.get_entity("Post").get_field("zzz").type == ir.EntityRef(name="Zzz")

    def test_low_confidence_threshold(self, blog_validation):
        result = reverse_transform(blog_validation)
        assert low_confidence(result) == []
        assert low_confidence(result, threshold=1.01) == result.resolutions

    def test_empty_schema(self):
        result = reverse_transform(ir.ValidationSchema())
        assert result.schema == ir.RelationalSchema()
        assert result.resolutions == []
