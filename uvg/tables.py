# File: uvg/tables.py
"""
uvg - Tables Generator
======================
Renders one ``Table(...)`` assignment per table against a shared
``MetaData``, with every constraint declared inline::

    t_users = Table(
        'users', metadata,
        Column('id', Integer, primary_key=True),
        Column('name', String(100), nullable=False),
        PrimaryKeyConstraint('id', name='users_pkey')
    )

Tables are emitted in dependency order (referenced tables first).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from uvg.codegen import (
    Generator,
    GeneratorKind,
    emitted_indexes,
    is_primary_key_column,
    non_default_schema,
    render_body,
    render_comment,
    render_foreign_key_constraint,
    render_identity,
    render_index,
    render_primary_key_constraint,
    render_unique_constraint,
)
from uvg.dependencies import sort_tables
from uvg.formatting import server_default_for
from uvg.imports import ImportCollector
from uvg.models import (
    ColumnInfo,
    ConstraintType,
    Dialect,
    GeneratorOptions,
    IntrospectedSchema,
    TableInfo,
)
from uvg.typemap import MappedType, map_column_type
from uvg.utils import count_lines, find_free_name, quote, table_to_variable_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.tables")

_METADATA: str = "metadata = MetaData()"


class TablesGenerator(Generator):
    """Core ``Table`` objects bound to a module-level ``MetaData``."""

    kind = GeneratorKind.TABLES

    def generate(
        self,
        schema: IntrospectedSchema,
        options: Optional[GeneratorOptions] = None,
    ) -> str:
        options = options or GeneratorOptions()
        imports: ImportCollector = ImportCollector()
        imports.add("sqlalchemy", "MetaData")
        imports.add("sqlalchemy", "Table")
        imports.add("sqlalchemy", "Column")

        taken: Set[str] = set()
        blocks: List[str] = []
        for table in sort_tables(schema.tables):
            variable: str = find_free_name(table_to_variable_name(table.name), taken)
            block: str = self._render_table(
                table, variable, schema.dialect, options, imports
            )
            logger.debug(
                "Rendered %s for %s (%d lines).",
                variable,
                table.qualified_name,
                count_lines(block),
            )
            blocks.append(block)

        sections: List[str] = [imports.render(), _METADATA] + blocks
        return "\n\n".join(sections) + "\n"

    # -----------------------------------------------------------------
    # Table body
    # -----------------------------------------------------------------

    def _render_table(
        self,
        table: TableInfo,
        variable: str,
        dialect: Dialect,
        options: GeneratorOptions,
        imports: ImportCollector,
    ) -> str:
        items: List[str] = [
            self._render_column(table, column, dialect, options, imports)
            for column in table.columns
        ]

        if not options.noconstraints:
            for constraint in table.constraints_of(ConstraintType.FOREIGN_KEY):
                imports.add("sqlalchemy", "ForeignKeyConstraint")
                items.append(render_foreign_key_constraint(constraint, dialect))
            for constraint in table.constraints_of(ConstraintType.PRIMARY_KEY):
                imports.add("sqlalchemy", "PrimaryKeyConstraint")
                items.append(render_primary_key_constraint(constraint))
            for constraint in table.constraints_of(ConstraintType.UNIQUE):
                imports.add("sqlalchemy", "UniqueConstraint")
                items.append(render_unique_constraint(constraint))

        if not options.noindexes:
            for index in emitted_indexes(table):
                imports.add("sqlalchemy", "Index")
                items.append(render_index(index))

        if not options.nocomments and table.comment is not None:
            items.append(render_comment(table.comment))

        schema_name: Optional[str] = non_default_schema(table, dialect)
        if schema_name is not None:
            items.append(f"schema={quote(schema_name)}")

        # trailing comma only when more arguments follow
        header: str = f"    {quote(table.name)}, metadata"
        lines: List[str] = [f"{variable} = Table("]
        lines.append(f"{header}," if items else header)
        lines.extend(render_body(items))
        lines.append(")")
        return "\n".join(lines)

    def _render_column(
        self,
        table: TableInfo,
        column: ColumnInfo,
        dialect: Dialect,
        options: GeneratorOptions,
        imports: ImportCollector,
    ) -> str:
        mapped: MappedType = map_column_type(column, dialect)
        imports.add_many(mapped.imports)

        args: List[str] = [quote(column.name), mapped.sa_type]

        identity: Optional[str] = render_identity(column, dialect)
        if identity is not None:
            imports.add("sqlalchemy", "Identity")
            args.append(identity)

        primary_key: bool = is_primary_key_column(table, column.name)
        if primary_key:
            args.append("primary_key=True")
        elif not column.is_nullable:
            args.append("nullable=False")

        server_default: Optional[str] = server_default_for(column, dialect)
        if server_default is not None:
            imports.add("sqlalchemy", "text")
            args.append(f"server_default={server_default}")

        if not options.nocomments:
            comment: Optional[str] = render_comment(column.comment)
            if comment is not None:
                args.append(comment)

        return f"Column({', '.join(args)})"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TablesGenerator",
]
