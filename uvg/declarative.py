# File: uvg/declarative.py
"""
uvg - Declarative Generator
===========================
Renders one ``DeclarativeBase`` subclass per table, in schema order::

    class Users(Base):
        __tablename__ = 'users'

        id: Mapped[int] = mapped_column(Integer, primary_key=True)
        bio: Mapped[Optional[str]] = mapped_column(Text)

Column-level foreign keys are plain strings (``ForeignKey('users.id')``)
resolved by SQLAlchemy at mapper configuration time, so classes do not
need to be dependency-ordered.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional, Set

from uvg.codegen import (
    Generator,
    GeneratorKind,
    column_foreign_key,
    emitted_indexes,
    has_unique_constraint,
    is_primary_key_column,
    non_default_schema,
    render_comment,
    render_foreign_key,
    render_foreign_key_constraint,
    render_index,
    render_unique_constraint,
)
from uvg.formatting import server_default_for
from uvg.imports import ImportCollector
from uvg.models import (
    ColumnInfo,
    ConstraintInfo,
    ConstraintType,
    Dialect,
    GeneratorOptions,
    IntrospectedSchema,
    TableInfo,
)
from uvg.typemap import TYPE_SYMBOLS, MappedType, map_column_type
from uvg.utils import (
    column_to_attribute_name,
    count_lines,
    find_free_name,
    quote,
    table_to_class_name,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.declarative")

_INDENT: str = "    "

_BASE_CLASS: str = "class Base(DeclarativeBase):\n    pass"

# Module-level names a generated class must not shadow
_RESERVED_CLASS_NAMES: FrozenSet[str] = TYPE_SYMBOLS | frozenset(
    {
        "Base",
        "DeclarativeBase",
        "Mapped",
        "mapped_column",
        "ForeignKey",
        "ForeignKeyConstraint",
        "UniqueConstraint",
        "Index",
        "Optional",
        "Any",
        "text",
    }
)

# Attribute names must also leave the bare stdlib modules used in annotations
_RESERVED_ATTRIBUTE_NAMES: FrozenSet[str] = _RESERVED_CLASS_NAMES | frozenset(
    {"datetime", "decimal", "uuid"}
)


class DeclarativeGenerator(Generator):
    """SQLAlchemy 2.0 declarative classes with ``Mapped[]`` annotations."""

    kind = GeneratorKind.DECLARATIVE

    def generate(
        self,
        schema: IntrospectedSchema,
        options: Optional[GeneratorOptions] = None,
    ) -> str:
        options = options or GeneratorOptions()
        imports: ImportCollector = ImportCollector()
        imports.add("sqlalchemy.orm", "DeclarativeBase")
        imports.add("sqlalchemy.orm", "Mapped")
        imports.add("sqlalchemy.orm", "mapped_column")

        taken: Set[str] = set(_RESERVED_CLASS_NAMES)
        blocks: List[str] = []
        for table in schema.tables:
            class_name: str = find_free_name(
                table_to_class_name(table.name, options.use_inflect), taken
            )
            if not table.primary_key_columns:
                logger.warning(
                    "Class %s for %s has no primary key; SQLAlchemy will refuse "
                    "to map it until one is declared.",
                    class_name,
                    table.qualified_name,
                )
            block: str = self._render_class(
                table, class_name, schema.dialect, options, imports
            )
            logger.debug(
                "Rendered class %s for %s (%d lines).",
                class_name,
                table.qualified_name,
                count_lines(block),
            )
            blocks.append(block)

        sections: List[str] = [imports.render(), _BASE_CLASS] + blocks
        return "\n\n".join(sections) + "\n"

    # -----------------------------------------------------------------
    # Class body
    # -----------------------------------------------------------------

    def _render_class(
        self,
        table: TableInfo,
        class_name: str,
        dialect: Dialect,
        options: GeneratorOptions,
        imports: ImportCollector,
    ) -> str:
        lines: List[str] = [
            f"class {class_name}(Base):",
            f"{_INDENT}__tablename__ = {quote(table.name)}",
        ]

        table_args: Optional[str] = self._render_table_args(
            table, dialect, options, imports
        )
        if table_args is not None:
            lines.append(f"{_INDENT}__table_args__ = {table_args}")

        if table.columns:
            lines.append("")

        attribute_names: Set[str] = set(_RESERVED_ATTRIBUTE_NAMES)
        for column in table.columns:
            lines.append(
                self._render_column(
                    table, column, attribute_names, dialect, options, imports
                )
            )

        return "\n".join(lines)

    def _render_table_args(
        self,
        table: TableInfo,
        dialect: Dialect,
        options: GeneratorOptions,
        imports: ImportCollector,
    ) -> Optional[str]:
        """
        ``__table_args__`` tuple, or ``None`` when there is nothing to say.

        Order: foreign keys not rendered on a column, multi-column unique
        constraints, explicit indexes, then one keyword dictionary for the
        comment and schema.
        """
        args: List[str] = []

        if not options.noconstraints:
            for constraint in table.constraints_of(ConstraintType.FOREIGN_KEY):
                if self._is_column_level_fk(table, constraint):
                    continue
                imports.add("sqlalchemy", "ForeignKeyConstraint")
                args.append(render_foreign_key_constraint(constraint, dialect))

            for constraint in table.constraints_of(ConstraintType.UNIQUE):
                if len(constraint.columns) > 1:
                    imports.add("sqlalchemy", "UniqueConstraint")
                    args.append(render_unique_constraint(constraint))

        if not options.noindexes:
            for index in emitted_indexes(table):
                imports.add("sqlalchemy", "Index")
                args.append(render_index(index))

        keywords: Dict[str, str] = {}
        if not options.nocomments and table.comment is not None:
            keywords["comment"] = table.comment
        schema_name: Optional[str] = non_default_schema(table, dialect)
        if schema_name is not None:
            keywords["schema"] = schema_name
        if keywords:
            pairs: str = ", ".join(
                f"{quote(key)}: {quote(value)}" for key, value in keywords.items()
            )
            args.append(f"{{{pairs}}}")

        if not args:
            return None
        if len(args) == 1:
            return f"({args[0]},)"
        return f"({', '.join(args)})"

    @staticmethod
    def _is_column_level_fk(table: TableInfo, constraint: ConstraintInfo) -> bool:
        if len(constraint.columns) != 1:
            return False
        return column_foreign_key(table, constraint.columns[0]) is constraint

    # -----------------------------------------------------------------
    # Column
    # -----------------------------------------------------------------

    def _render_column(
        self,
        table: TableInfo,
        column: ColumnInfo,
        attribute_names: Set[str],
        dialect: Dialect,
        options: GeneratorOptions,
        imports: ImportCollector,
    ) -> str:
        attribute: str = find_free_name(
            column_to_attribute_name(column.name), attribute_names
        )
        mapped: MappedType = map_column_type(column, dialect)
        imports.add_many(mapped.imports)
        self._register_python_imports(mapped, imports)

        primary_key: bool = is_primary_key_column(table, column.name)
        annotation: str = mapped.python_type
        if column.is_nullable and not primary_key:
            imports.add("typing", "Optional")
            annotation = f"Optional[{annotation}]"

        args: List[str] = []
        if attribute != column.name:
            args.append(quote(column.name))
        args.append(mapped.sa_type)

        if not options.noconstraints:
            fk_constraint: Optional[ConstraintInfo] = column_foreign_key(
                table, column.name
            )
            if fk_constraint is not None:
                imports.add("sqlalchemy", "ForeignKey")
                args.append(render_foreign_key(fk_constraint.foreign_key, dialect))

        if primary_key:
            args.append("primary_key=True")

        if not options.noconstraints and has_unique_constraint(table, column.name):
            args.append("unique=True")

        server_default: Optional[str] = server_default_for(column, dialect)
        if server_default is not None:
            imports.add("sqlalchemy", "text")
            args.append(f"server_default={server_default}")

        if not options.nocomments:
            comment: Optional[str] = render_comment(column.comment)
            if comment is not None:
                args.append(comment)

        return (
            f"{_INDENT}{attribute}: Mapped[{annotation}] = "
            f"mapped_column({', '.join(args)})"
        )

    @staticmethod
    def _register_python_imports(mapped: MappedType, imports: ImportCollector) -> None:
        """Standard-library modules referenced by the annotation."""
        if mapped.needs_datetime:
            imports.add_bare("datetime")
        if mapped.needs_decimal:
            imports.add_bare("decimal")
        if mapped.needs_uuid:
            imports.add_bare("uuid")
        if mapped.needs_any:
            imports.add("typing", "Any")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DeclarativeGenerator",
]
