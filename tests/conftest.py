"""
tests/conftest.py
Shared fixtures for the uvg test suite.

Schemas are written as the raw dictionaries an introspection dump would
contain and validated through the pydantic models, so every fixture also
exercises the loader's input format.  Real file I/O happens inside pytest's
tmp_path directories.
"""

from __future__ import annotations

import copy
import json
import logging
import pathlib
from typing import Any, Dict, Iterator, List, Optional

import pytest
import yaml

from uvg.models import IntrospectedSchema


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_uvg_logger() -> Iterator[None]:
    """The CLI reconfigures the 'uvg' logger; undo it after every test."""
    yield
    uvg_logger: logging.Logger = logging.getLogger("uvg")
    uvg_logger.handlers.clear()
    uvg_logger.setLevel(logging.NOTSET)
    uvg_logger.propagate = True


# ---------------------------------------------------------------------------
# Raw dict builders
# ---------------------------------------------------------------------------


def column(
    name: str,
    position: int,
    udt_name: str,
    *,
    nullable: bool = True,
    data_type: str = "",
    **extra: Any,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": name,
        "ordinal_position": position,
        "is_nullable": nullable,
        "data_type": data_type,
        "udt_name": udt_name,
    }
    data.update(extra)
    return data


def primary_key(name: str, *columns: str) -> Dict[str, Any]:
    return {"name": name, "constraint_type": "PRIMARY KEY", "columns": list(columns)}


def unique(name: str, *columns: str) -> Dict[str, Any]:
    return {"name": name, "constraint_type": "UNIQUE", "columns": list(columns)}


def foreign_key(
    name: str,
    columns: List[str],
    ref_table: str,
    ref_columns: List[str],
    *,
    ref_schema: str = "public",
    delete_rule: str = "NO ACTION",
    update_rule: str = "NO ACTION",
) -> Dict[str, Any]:
    return {
        "name": name,
        "constraint_type": "FOREIGN KEY",
        "columns": columns,
        "foreign_key": {
            "ref_schema": ref_schema,
            "ref_table": ref_table,
            "ref_columns": ref_columns,
            "delete_rule": delete_rule,
            "update_rule": update_rule,
        },
    }


def table(
    name: str,
    columns: List[Dict[str, Any]],
    *,
    schema: str = "public",
    constraints: Optional[List[Dict[str, Any]]] = None,
    indexes: Optional[List[Dict[str, Any]]] = None,
    comment: Optional[str] = None,
    table_type: str = "BASE TABLE",
) -> Dict[str, Any]:
    return {
        "schema": schema,
        "name": name,
        "table_type": table_type,
        "comment": comment,
        "columns": columns,
        "constraints": constraints or [],
        "indexes": indexes or [],
    }


# ---------------------------------------------------------------------------
# users table
# ---------------------------------------------------------------------------


def _users_table() -> Dict[str, Any]:
    return table(
        "users",
        [
            column("id", 1, "int4", nullable=False, data_type="integer"),
            column(
                "name", 2, "varchar", nullable=False,
                data_type="character varying", character_maximum_length=100,
            ),
            column(
                "email", 3, "varchar", nullable=False,
                data_type="character varying", character_maximum_length=255,
            ),
            column("bio", 4, "text", data_type="text"),
            column(
                "created_at", 5, "timestamptz",
                data_type="timestamp with time zone", column_default="now()",
            ),
        ],
        constraints=[
            primary_key("users_pkey", "id"),
            unique("users_email_key", "email"),
        ],
        indexes=[
            {"name": "users_email_key", "columns": ["email"], "is_unique": True},
        ],
    )


@pytest.fixture()
def users_schema_dict() -> Dict[str, Any]:
    """The single ``users`` table used throughout the generator tests."""
    return {"dialect": "postgresql", "tables": [_users_table()]}


@pytest.fixture()
def users_schema(users_schema_dict: Dict[str, Any]) -> IntrospectedSchema:
    return IntrospectedSchema.model_validate(users_schema_dict)


# ---------------------------------------------------------------------------
# Blog schema: several tables, FKs, composite keys, a second schema
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def _blog_schema_dict() -> Dict[str, Any]:
    posts: Dict[str, Any] = table(
        "posts",
        [
            column("id", 1, "int4", nullable=False, data_type="integer",
                   column_default="nextval('posts_id_seq'::regclass)"),
            column("user_id", 2, "int4", nullable=False, data_type="integer"),
            column("title", 3, "varchar", nullable=False,
                   character_maximum_length=200, comment="Post's headline"),
            column("body", 4, "text"),
            column("published", 5, "bool", nullable=False, column_default="false"),
            column("score", 6, "numeric", numeric_precision=10, numeric_scale=2),
            column("public_id", 7, "uuid", nullable=False,
                   column_default="gen_random_uuid()"),
            column("status", 8, "varchar", character_maximum_length=20,
                   column_default="'draft'::character varying"),
        ],
        constraints=[
            primary_key("posts_pkey", "id"),
            foreign_key("posts_user_id_fkey", ["user_id"], "users", ["id"],
                        delete_rule="CASCADE"),
        ],
        indexes=[{"name": "ix_posts_title", "columns": ["title"], "is_unique": False}],
        comment="Blog posts",
    )
    tags: Dict[str, Any] = table(
        "tags",
        [
            column("id", 1, "int4", nullable=False),
            column("label", 2, "varchar", nullable=False, character_maximum_length=50),
            column("lang", 3, "bpchar", nullable=False, character_maximum_length=2),
        ],
        constraints=[
            primary_key("tags_pkey", "id"),
            unique("tags_label_lang_key", "label", "lang"),
        ],
        indexes=[
            {"name": "tags_label_lang_key", "columns": ["label", "lang"], "is_unique": True},
        ],
    )
    post_tags: Dict[str, Any] = table(
        "post_tags",
        [
            column("post_id", 1, "int4", nullable=False),
            column("tag_id", 2, "int4", nullable=False),
        ],
        constraints=[
            primary_key("post_tags_pkey", "post_id", "tag_id"),
            foreign_key("post_tags_post_id_fkey", ["post_id"], "posts", ["id"]),
            foreign_key("post_tags_tag_id_fkey", ["tag_id"], "tags", ["id"]),
        ],
    )
    audit_log: Dict[str, Any] = table(
        "log",
        [
            column(
                "id", 1, "int8", nullable=False, is_identity=True,
                identity_generation="ALWAYS",
                identity={
                    "start": 1, "increment": 1, "min_value": 1,
                    "max_value": 9223372036854775807, "cache": 1, "cycle": False,
                },
            ),
            column("ts", 2, "timestamptz", nullable=False),
            column("detail", 3, "text"),
            column("actor_id", 4, "int4"),
        ],
        schema="audit",
        constraints=[
            primary_key("log_pkey", "id"),
            foreign_key("log_actor_id_fkey", ["actor_id"], "users", ["id"],
                        delete_rule="SET NULL"),
        ],
        comment="Audit trail",
    )
    return {
        "dialect": "postgresql",
        "tables": [posts, _users_table(), tags, post_tags, audit_log],
    }


@pytest.fixture()
def blog_schema_dict(_blog_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(_blog_schema_dict)


@pytest.fixture()
def blog_schema(blog_schema_dict: Dict[str, Any]) -> IntrospectedSchema:
    return IntrospectedSchema.model_validate(blog_schema_dict)


@pytest.fixture()
def blog_yaml_path(blog_schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the blog schema to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(blog_schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def blog_json_path(blog_schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(blog_schema_dict, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Foreign key cycle
# ---------------------------------------------------------------------------


@pytest.fixture()
def cycle_schema() -> IntrospectedSchema:
    """departments ⇄ employees, plus projects → employees."""
    return IntrospectedSchema.model_validate(
        {
            "tables": [
                table(
                    "projects",
                    [column("id", 1, "int4", nullable=False), column("lead_id", 2, "int4")],
                    constraints=[
                        primary_key("projects_pkey", "id"),
                        foreign_key("projects_lead_fkey", ["lead_id"], "employees", ["id"]),
                    ],
                ),
                table(
                    "departments",
                    [column("id", 1, "int4", nullable=False), column("head_id", 2, "int4")],
                    constraints=[
                        primary_key("departments_pkey", "id"),
                        foreign_key("departments_head_fkey", ["head_id"], "employees", ["id"]),
                    ],
                ),
                table(
                    "employees",
                    [
                        column("id", 1, "int4", nullable=False),
                        column("department_id", 2, "int4"),
                        column("manager_id", 3, "int4"),
                    ],
                    constraints=[
                        primary_key("employees_pkey", "id"),
                        foreign_key("employees_dept_fkey", ["department_id"], "departments", ["id"]),
                        foreign_key("employees_manager_fkey", ["manager_id"], "employees", ["id"]),
                    ],
                ),
            ]
        }
    )


# ---------------------------------------------------------------------------
# SQL Server
# ---------------------------------------------------------------------------


@pytest.fixture()
def mssql_schema() -> IntrospectedSchema:
    return IntrospectedSchema.model_validate(
        {
            "dialect": "mssql",
            "tables": [
                table(
                    "orders",
                    [
                        column("id", 1, "int", nullable=False, is_identity=True,
                               identity={"start": 1, "increment": 1}),
                        column("code", 2, "nvarchar", nullable=False,
                               character_maximum_length=20),
                        column("notes", 3, "nvarchar", character_maximum_length=-1),
                        column("qty", 4, "int", nullable=False, column_default="((0))"),
                        column("placed_at", 5, "datetime2", column_default="(getdate())"),
                        column("seq", 6, "bigint",
                               column_default="(NEXT VALUE FOR [dbo].[order_seq])"),
                    ],
                    schema="dbo",
                    constraints=[primary_key("PK_orders", "id")],
                ),
                table(
                    "archive",
                    [column("id", 1, "uniqueidentifier", nullable=False)],
                    schema="sales",
                    constraints=[primary_key("PK_archive", "id")],
                ),
            ],
        }
    )
