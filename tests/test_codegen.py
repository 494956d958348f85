"""
tests/test_codegen.py
Unit tests for the generator contract and shared helpers in uvg.codegen.
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from uvg.codegen import (
    Generator,
    GeneratorKind,
    UnknownGeneratorError,
    column_foreign_key,
    emitted_indexes,
    get_generator,
    has_unique_constraint,
    is_constraint_backed_index,
    render_body,
    render_fk_actions,
    render_foreign_key,
    render_identity,
    render_index,
    render_reference,
)
from uvg.declarative import DeclarativeGenerator
from uvg.models import (
    ColumnInfo,
    Dialect,
    ForeignKeyInfo,
    IndexInfo,
    IntrospectedSchema,
    TableInfo,
)
from uvg.tables import TablesGenerator


def _fk(**extra: Any) -> ForeignKeyInfo:
    data: Dict[str, Any] = {"ref_schema": "public", "ref_table": "users", "ref_columns": ["id"]}
    data.update(extra)
    return ForeignKeyInfo(**data)


# ===========================================================================
# Generator selection
# ===========================================================================


class TestGeneratorSelection:
    def test_get_generator(self) -> None:
        assert isinstance(get_generator("declarative"), DeclarativeGenerator)
        assert isinstance(get_generator(GeneratorKind.TABLES), TablesGenerator)
        assert isinstance(get_generator(" Tables "), TablesGenerator)

    def test_unknown_generator(self) -> None:
        with pytest.raises(UnknownGeneratorError, match="declarative, tables"):
            get_generator("dataclasses")

    def test_unknown_generator_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            GeneratorKind.parse("sqlmodels")

    def test_generators_share_interface(self) -> None:
        for kind in GeneratorKind:
            generator = get_generator(kind)
            assert isinstance(generator, Generator)
            assert generator.kind is kind
            assert generator.generate(IntrospectedSchema()).endswith("\n")


# ===========================================================================
# Constraint queries
# ===========================================================================


class TestConstraintQueries:
    def test_unique_single_column_only(self, blog_schema: IntrospectedSchema) -> None:
        tags: TableInfo = blog_schema.get_table("public", "tags")
        assert not has_unique_constraint(tags, "label")
        users: TableInfo = blog_schema.get_table("public", "users")
        assert has_unique_constraint(users, "email")

    def test_column_foreign_key(self, blog_schema: IntrospectedSchema) -> None:
        posts: TableInfo = blog_schema.get_table("public", "posts")
        assert column_foreign_key(posts, "user_id").name == "posts_user_id_fkey"
        assert column_foreign_key(posts, "title") is None

    def test_column_with_two_foreign_keys_is_not_column_level(self) -> None:
        fk: Dict[str, Any] = {"ref_schema": "public", "ref_table": "a", "ref_columns": ["id"]}
        table = TableInfo.model_validate(
            {
                "name": "t",
                "columns": [{"name": "x", "ordinal_position": 1, "udt_name": "int4"}],
                "constraints": [
                    {"name": "fk1", "constraint_type": "FOREIGN KEY", "columns": ["x"], "foreign_key": fk},
                    {"name": "fk2", "constraint_type": "FOREIGN KEY", "columns": ["x"],
                     "foreign_key": dict(fk, ref_table="b")},
                ],
            }
        )
        assert column_foreign_key(table, "x") is None

    def test_constraint_backed_index(self, users_schema: IntrospectedSchema) -> None:
        users = users_schema.tables[0]
        assert is_constraint_backed_index(users, users.indexes[0])
        assert emitted_indexes(users) == []

    def test_column_order_matters(self) -> None:
        table = TableInfo.model_validate(
            {
                "name": "t",
                "columns": [
                    {"name": "a", "ordinal_position": 1, "udt_name": "int4"},
                    {"name": "b", "ordinal_position": 2, "udt_name": "int4"},
                ],
                "constraints": [
                    {"name": "uq", "constraint_type": "UNIQUE", "columns": ["a", "b"]}
                ],
                "indexes": [{"name": "ix", "columns": ["b", "a"], "is_unique": True}],
            }
        )
        assert not is_constraint_backed_index(table, table.indexes[0])

    def test_non_unique_index_always_emitted(self, blog_schema: IntrospectedSchema) -> None:
        posts: TableInfo = blog_schema.get_table("public", "posts")
        assert [i.name for i in emitted_indexes(posts)] == ["ix_posts_title"]


# ===========================================================================
# Rendering
# ===========================================================================


class TestRendering:
    def test_reference(self) -> None:
        assert render_reference(_fk(), "id", Dialect.POSTGRES) == "'users.id'"
        assert render_reference(_fk(ref_schema="auth"), "id", Dialect.POSTGRES) == "'auth.users.id'"
        assert render_reference(_fk(ref_schema="dbo"), "id", Dialect.MSSQL) == "'users.id'"
        assert render_reference(_fk(), "id", Dialect.MSSQL) == "'public.users.id'"

    def test_actions(self) -> None:
        assert render_fk_actions(_fk()) == []
        assert render_fk_actions(_fk(delete_rule="cascade", update_rule="SET NULL")) == [
            "ondelete='CASCADE'",
            "onupdate='SET NULL'",
        ]
        assert render_fk_actions(_fk(delete_rule="")) == []

    def test_foreign_key(self) -> None:
        assert (
            render_foreign_key(_fk(delete_rule="RESTRICT"), Dialect.POSTGRES)
            == "ForeignKey('users.id', ondelete='RESTRICT')"
        )

    def test_index(self) -> None:
        assert render_index(IndexInfo(name="ix", columns=["a", "b"])) == "Index('ix', 'a', 'b')"
        assert (
            render_index(IndexInfo(name="ux", columns=["a"], is_unique=True))
            == "Index('ux', 'a', unique=True)"
        )

    def test_identity(self) -> None:
        plain = ColumnInfo(name="id", ordinal_position=1, udt_name="int4")
        assert render_identity(plain, Dialect.POSTGRES) is None

        bare = ColumnInfo(
            name="id", ordinal_position=1, udt_name="int4",
            is_identity=True, identity_generation="BY DEFAULT",
        )
        assert render_identity(bare, Dialect.POSTGRES) == "Identity()"

        seeded = ColumnInfo(
            name="id", ordinal_position=1, udt_name="int",
            is_identity=True, identity={"start": 100, "increment": 5},
        )
        assert render_identity(seeded, Dialect.MSSQL) == "Identity(start=100, increment=5)"

    def test_body_commas(self) -> None:
        assert render_body(["a", "b", "c"]) == ["    a,", "    b,", "    c"]
        assert render_body([]) == []
