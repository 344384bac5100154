"""Shared pytest fixtures for schemabridge tests."""

import pytest

from schemabridge.core import ir


def _int() -> ir.NumberType:
    return ir.NumberType(checks=[ir.NumberCheck(kind="int")])


@pytest.fixture
def blog_schema() -> ir.RelationalSchema:
    """Return a small relational schema: users writing posts."""
    user = ir.EntitySpec(
        name="User",
        fields=[
            ir.FieldSpec(
                name="id",
                type=ir.scalar("Int"),
                attributes=[ir.IdAttr(), ir.DefaultAttr(value=ir.AutoIncrementDefault())],
            ),
            ir.FieldSpec(
                name="email",
                type=ir.scalar("String"),
                modifiers=[ir.FieldModifier.UNIQUE],
                attributes=[ir.UniqueAttr()],
            ),
            ir.FieldSpec(
                name="name",
                type=ir.scalar("String"),
                modifiers=[ir.FieldModifier.OPTIONAL],
            ),
            ir.FieldSpec(
                name="role",
                type=ir.EnumRef(name="Role"),
                attributes=[ir.DefaultAttr(value=ir.LiteralDefault(value="USER"))],
            ),
            ir.FieldSpec(
                name="posts",
                type=ir.EntityRef(name="Post"),
                modifiers=[ir.FieldModifier.LIST],
                attributes=[ir.RelationAttr()],
            ),
        ],
    )
    post = ir.EntitySpec(
        name="Post",
        fields=[
            ir.FieldSpec(
                name="id",
                type=ir.scalar("Int"),
                attributes=[ir.IdAttr(), ir.DefaultAttr(value=ir.AutoIncrementDefault())],
            ),
            ir.FieldSpec(name="title", type=ir.scalar("String"), documentation="Headline"),
            ir.FieldSpec(
                name="views",
                type=ir.scalar("Int"),
                attributes=[ir.DefaultAttr(value=ir.LiteralDefault(value=0))],
            ),
            ir.FieldSpec(
                name="tags",
                type=ir.scalar("String"),
                modifiers=[ir.FieldModifier.LIST],
            ),
            ir.FieldSpec(name="authorId", type=ir.scalar("Int")),
            ir.FieldSpec(
                name="author",
                type=ir.EntityRef(name="User"),
                attributes=[
                    ir.RelationAttr(
                        relation=ir.RelationInfo(fields=["authorId"], references=["id"])
                    )
                ],
            ),
        ],
    )
    return ir.RelationalSchema(
        entities=[user, post],
        enums=[ir.EnumSpec(name="Role", values=["USER", "ADMIN"])],
    )


@pytest.fixture
def blog_validation() -> ir.ValidationSchema:
    """Return the validation-side blog: Post.author points at User, no inverse declared."""
    user = ir.ObjectSpec(
        name="User",
        fields=[
            ir.ObjectFieldSpec(
                name="id", type=ir.StringType(checks=[ir.StringCheck(kind="cuid")])
            ),
            ir.ObjectFieldSpec(name="email", type=ir.StringType(), documentation="@unique"),
            ir.ObjectFieldSpec(name="createdAt", type=ir.DateType()),
        ],
    )
    post = ir.ObjectSpec(
        name="Post",
        fields=[
            ir.ObjectFieldSpec(name="id", type=_int()),
            ir.ObjectFieldSpec(name="title", type=ir.StringType()),
            ir.ObjectFieldSpec(name="authorId", type=ir.StringType()),
            ir.ObjectFieldSpec(
                name="author",
                type=ir.ObjectRef(name="User"),
                documentation="@relation(fields: [authorId], references: [id])",
            ),
        ],
    )
    return ir.ValidationSchema.build(objects=[user, post])
