# File: uvg/codegen.py
"""
uvg - Generator Contract & Shared Rendering Helpers
===================================================
Both output styles implement the same one-method interface::

    Generator.generate(schema, options) -> str

and are selected through the closed ``GeneratorKind`` enumeration.  The
helpers below answer the constraint questions both styles ask about a
table (is this column part of the primary key, which foreign key targets
it, which indexes are already covered by a unique constraint...) and render
the SQLAlchemy constraint objects whose shape is identical in both.
"""

from __future__ import annotations

import abc
import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Union

from uvg.models import (
    ColumnInfo,
    ConstraintInfo,
    ConstraintType,
    Dialect,
    ForeignKeyInfo,
    GeneratorOptions,
    IndexInfo,
    IntrospectedSchema,
    TableInfo,
)
from uvg.utils import quote, quote_all

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.codegen")

_INDENT: str = "    "

# Referential actions that are the database default and need no keyword
_DEFAULT_ACTIONS: FrozenSet[str] = frozenset({"", "NO ACTION"})


# ---------------------------------------------------------------------------
# Generator selection
# ---------------------------------------------------------------------------


class UnknownGeneratorError(ValueError):
    """The requested output style is not one of ``GeneratorKind``."""


class GeneratorKind(str, Enum):
    """Supported output styles."""

    DECLARATIVE = "declarative"
    TABLES = "tables"

    @classmethod
    def parse(cls, value: Union[str, "GeneratorKind"]) -> "GeneratorKind":
        if isinstance(value, GeneratorKind):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid: str = ", ".join(kind.value for kind in cls)
            raise UnknownGeneratorError(
                f"Unknown generator '{value}'. Valid choices: {valid}."
            ) from None


class Generator(abc.ABC):
    """Renders a complete Python module from an introspected schema."""

    kind: GeneratorKind

    @abc.abstractmethod
    def generate(
        self,
        schema: IntrospectedSchema,
        options: Optional[GeneratorOptions] = None,
    ) -> str:
        """Return the module source, ending with exactly one newline."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value}>"


def get_generator(kind: Union[str, GeneratorKind]) -> Generator:
    """
    Instantiate the generator for *kind*.

    Raises:
        UnknownGeneratorError: if *kind* names no supported style.
    """
    from uvg.declarative import DeclarativeGenerator
    from uvg.tables import TablesGenerator

    registry: Dict[GeneratorKind, type] = {
        GeneratorKind.DECLARATIVE: DeclarativeGenerator,
        GeneratorKind.TABLES: TablesGenerator,
    }
    resolved: GeneratorKind = GeneratorKind.parse(kind)
    logger.debug("Selected generator: %s", resolved.value)
    return registry[resolved]()


# ---------------------------------------------------------------------------
# Constraint queries
# ---------------------------------------------------------------------------


def is_primary_key_column(table: TableInfo, column_name: str) -> bool:
    return column_name in table.primary_key_columns


def has_unique_constraint(table: TableInfo, column_name: str) -> bool:
    """True when a UNIQUE constraint covers exactly this one column."""
    return any(
        c.columns == (column_name,) for c in table.constraints_of(ConstraintType.UNIQUE)
    )


def column_foreign_key(table: TableInfo, column_name: str) -> Optional[ConstraintInfo]:
    """
    The foreign key to render on the column itself: only when exactly one
    single-column foreign key uses this column.
    """
    matches: List[ConstraintInfo] = [
        c
        for c in table.constraints_of(ConstraintType.FOREIGN_KEY)
        if c.columns == (column_name,)
    ]
    if len(matches) == 1:
        return matches[0]
    return None


def is_constraint_backed_index(table: TableInfo, index: IndexInfo) -> bool:
    """
    True when *index* is the index the database created to enforce a
    UNIQUE or PRIMARY KEY constraint with the same columns.
    """
    if not index.is_unique:
        return False
    return any(
        c.columns == index.columns
        for c in table.constraints
        if c.constraint_type in (ConstraintType.UNIQUE, ConstraintType.PRIMARY_KEY)
    )


def emitted_indexes(table: TableInfo) -> List[IndexInfo]:
    """Indexes that must be declared explicitly, in declaration order."""
    return [i for i in table.indexes if not is_constraint_backed_index(table, i)]


def non_default_schema(table: TableInfo, dialect: Dialect) -> Optional[str]:
    """The table's schema when it must be spelled out, else ``None``."""
    if table.schema_name != dialect.default_schema:
        return table.schema_name
    return None


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def render_reference(fk: ForeignKeyInfo, ref_column: str, dialect: Dialect) -> str:
    """``'users.id'`` or ``'auth.users.id'`` outside the default schema."""
    if fk.ref_schema != dialect.default_schema:
        return quote(f"{fk.ref_schema}.{fk.ref_table}.{ref_column}")
    return quote(f"{fk.ref_table}.{ref_column}")


def render_fk_actions(fk: ForeignKeyInfo) -> List[str]:
    """``ondelete=`` / ``onupdate=`` keywords for non-default actions."""
    args: List[str] = []
    if fk.delete_rule.upper() not in _DEFAULT_ACTIONS:
        args.append(f"ondelete={quote(fk.delete_rule.upper())}")
    if fk.update_rule.upper() not in _DEFAULT_ACTIONS:
        args.append(f"onupdate={quote(fk.update_rule.upper())}")
    return args


def render_foreign_key(fk: ForeignKeyInfo, dialect: Dialect) -> str:
    """Column-level ``ForeignKey(...)`` for a single-column foreign key."""
    args: List[str] = [render_reference(fk, fk.ref_columns[0], dialect)]
    args.extend(render_fk_actions(fk))
    return f"ForeignKey({', '.join(args)})"


def render_foreign_key_constraint(constraint: ConstraintInfo, dialect: Dialect) -> str:
    fk: ForeignKeyInfo = constraint.foreign_key
    local: str = ", ".join(quote_all(constraint.columns))
    remote: str = ", ".join(render_reference(fk, c, dialect) for c in fk.ref_columns)
    args: List[str] = [f"[{local}]", f"[{remote}]"]
    args.extend(render_fk_actions(fk))
    args.append(f"name={quote(constraint.name)}")
    return f"ForeignKeyConstraint({', '.join(args)})"


def render_primary_key_constraint(constraint: ConstraintInfo) -> str:
    args: List[str] = quote_all(constraint.columns) + [f"name={quote(constraint.name)}"]
    return f"PrimaryKeyConstraint({', '.join(args)})"


def render_unique_constraint(constraint: ConstraintInfo) -> str:
    args: List[str] = quote_all(constraint.columns) + [f"name={quote(constraint.name)}"]
    return f"UniqueConstraint({', '.join(args)})"


def render_index(index: IndexInfo) -> str:
    args: List[str] = [quote(index.name)] + quote_all(index.columns)
    if index.is_unique:
        args.append("unique=True")
    return f"Index({', '.join(args)})"


def render_identity(column: ColumnInfo, dialect: Dialect) -> Optional[str]:
    """
    ``Identity(...)`` for an identity column.

    PostgreSQL carries the full sequence description; SQL Server only knows
    seed and increment.
    """
    if not column.is_identity:
        return None

    args: List[str] = []
    if (column.identity_generation or "").upper() == "ALWAYS":
        args.append("always=True")

    identity = column.identity
    if identity is not None:
        args.append(f"start={identity.start}")
        args.append(f"increment={identity.increment}")
        if dialect == Dialect.POSTGRES:
            args.append(f"minvalue={identity.min_value}")
            args.append(f"maxvalue={identity.max_value}")
            args.append(f"cycle={identity.cycle}")
            args.append(f"cache={identity.cache}")

    return f"Identity({', '.join(args)})"


def render_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    return f"comment={quote(comment)}"


def render_body(items: Sequence[str], indent: str = _INDENT) -> List[str]:
    """One line per item; every line but the last ends with a comma."""
    last: int = len(items) - 1
    return [
        f"{indent}{item}," if i < last else f"{indent}{item}"
        for i, item in enumerate(items)
    ]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "UnknownGeneratorError",
    "GeneratorKind",
    "Generator",
    "get_generator",
    "is_primary_key_column",
    "has_unique_constraint",
    "column_foreign_key",
    "is_constraint_backed_index",
    "emitted_indexes",
    "non_default_schema",
    "render_reference",
    "render_fk_actions",
    "render_foreign_key",
    "render_foreign_key_constraint",
    "render_primary_key_constraint",
    "render_unique_constraint",
    "render_index",
    "render_identity",
    "render_comment",
    "render_body",
]
