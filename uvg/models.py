# File: uvg/models.py
"""
uvg - Schema Model
==================
Pydantic V2 models describing an introspected relational schema.  These
models are the single source of truth for the whole pipeline:

    Schema dump / introspection → IntrospectedSchema → Generator → text

Every model is frozen: a schema is built once, handed to exactly one
generation pass and never mutated afterwards.  Sequences are stored as
tuples so that nothing inside a model can be changed in place either.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.models")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class Dialect(str, Enum):
    """Database engines whose metadata the generators understand."""

    POSTGRES = "postgresql"
    MSSQL = "mssql"

    @property
    def default_schema(self) -> str:
        """Schema that needs no explicit qualification in generated code."""
        return _DEFAULT_SCHEMAS[self]


_DEFAULT_SCHEMAS: Dict[Dialect, str] = {
    Dialect.POSTGRES: "public",
    Dialect.MSSQL: "dbo",
}


class TableType(str, Enum):
    """information_schema.tables.table_type values we care about."""

    TABLE = "BASE TABLE"
    VIEW = "VIEW"


class ConstraintType(str, Enum):
    """Constraint kinds (information_schema.table_constraints.constraint_type)."""

    PRIMARY_KEY = "PRIMARY KEY"
    UNIQUE = "UNIQUE"
    FOREIGN_KEY = "FOREIGN KEY"
    CHECK = "CHECK"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Column-level primitives
# ---------------------------------------------------------------------------


class IdentityInfo(BaseModel):
    """Sequence options of an identity column."""

    model_config = _SHARED_CONFIG

    start: int = Field(default=1, description="START WITH value.")
    increment: int = Field(default=1, description="INCREMENT BY value.")
    min_value: int = Field(default=1, description="MINVALUE.")
    max_value: int = Field(default=2147483647, description="MAXVALUE.")
    cache: int = Field(default=1, ge=1, description="CACHE size.")
    cycle: bool = Field(default=False, description="CYCLE flag.")


class ColumnInfo(BaseModel):
    """
    One column, as reported by ``information_schema.columns``.

    ``data_type`` is the SQL-standard description (``character varying``,
    ``ARRAY``, ``USER-DEFINED``...) while ``udt_name`` is the underlying
    type name (``varchar``, ``_int4``, ``mood``...).  The type mapping
    engine works primarily off ``udt_name``.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    ordinal_position: int = Field(..., ge=1, description="1-based position.")
    is_nullable: bool = Field(default=True, description="Whether NULL is allowed.")
    data_type: str = Field(default="", description="SQL data type description.")
    udt_name: str = Field(..., min_length=1, description="Underlying type name.")
    character_maximum_length: Optional[int] = Field(
        default=None, description="Length of bounded character/binary types."
    )
    numeric_precision: Optional[int] = Field(
        default=None, ge=0, description="Precision for NUMERIC / DECIMAL."
    )
    numeric_scale: Optional[int] = Field(
        default=None, ge=0, description="Scale for NUMERIC / DECIMAL."
    )
    column_default: Optional[str] = Field(
        default=None, description="Raw SQL default expression."
    )
    is_identity: bool = Field(default=False, description="Identity column?")
    identity_generation: Optional[str] = Field(
        default=None, description="'ALWAYS' or 'BY DEFAULT'."
    )
    identity: Optional[IdentityInfo] = Field(
        default=None, description="Identity sequence options."
    )
    comment: Optional[str] = Field(default=None, description="Column comment.")
    enum_values: Optional[Tuple[str, ...]] = Field(
        default=None, description="Labels when the column is an enum (or enum array)."
    )

    @property
    def is_array(self) -> bool:
        return self.data_type.upper() == "ARRAY" or self.udt_name.startswith("_")

    @model_validator(mode="after")
    def _identity_implies_flag(self) -> "ColumnInfo":
        if self.identity is not None and not self.is_identity:
            raise ValueError(
                f"Column '{self.name}' carries identity options but is_identity is false."
            )
        return self

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.is_nullable else " NOT NULL"
        return f"<Column {self.name} {self.udt_name}{null_flag}>"


# ---------------------------------------------------------------------------
# Constraints & indexes
# ---------------------------------------------------------------------------


class ForeignKeyInfo(BaseModel):
    """Target side of a FOREIGN KEY constraint."""

    model_config = _SHARED_CONFIG

    ref_schema: str = Field(..., min_length=1, description="Referenced schema.")
    ref_table: str = Field(..., min_length=1, description="Referenced table.")
    ref_columns: Tuple[str, ...] = Field(
        ..., min_length=1, description="Referenced columns, in constraint order."
    )
    update_rule: str = Field(default="NO ACTION", description="ON UPDATE action.")
    delete_rule: str = Field(default="NO ACTION", description="ON DELETE action.")

    def __repr__(self) -> str:
        cols: str = ", ".join(self.ref_columns)
        return f"<FK → {self.ref_schema}.{self.ref_table}({cols})>"


class ConstraintInfo(BaseModel):
    """A named table constraint."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Constraint name.")
    constraint_type: ConstraintType = Field(..., description="Constraint kind.")
    columns: Tuple[str, ...] = Field(
        default=(), description="Participating columns, in order."
    )
    foreign_key: Optional[ForeignKeyInfo] = Field(
        default=None, description="Present iff constraint_type is FOREIGN KEY."
    )

    @model_validator(mode="after")
    def _validate_foreign_key_presence(self) -> "ConstraintInfo":
        is_fk: bool = self.constraint_type == ConstraintType.FOREIGN_KEY
        if is_fk and self.foreign_key is None:
            raise ValueError(
                f"Foreign key constraint '{self.name}' has no referenced table."
            )
        if not is_fk and self.foreign_key is not None:
            raise ValueError(
                f"Constraint '{self.name}' of type {self.constraint_type.value} "
                f"must not carry foreign key info."
            )
        if is_fk and len(self.foreign_key.ref_columns) != len(self.columns):
            raise ValueError(
                f"Foreign key '{self.name}' maps {len(self.columns)} column(s) "
                f"onto {len(self.foreign_key.ref_columns)} referenced column(s)."
            )
        return self

    def __repr__(self) -> str:
        return f"<Constraint {self.name} {self.constraint_type.value} {list(self.columns)}>"


class IndexInfo(BaseModel):
    """A (possibly composite) index."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Index name.")
    columns: Tuple[str, ...] = Field(
        ..., min_length=1, description="Ordered list of column names."
    )
    is_unique: bool = Field(default=False, description="UNIQUE index?")

    @field_validator("columns")
    @classmethod
    def _no_duplicate_columns(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(v) != len(set(v)):
            raise ValueError(f"Duplicate columns in index: {list(v)}")
        return v


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TableInfo(BaseModel):
    """
    Complete representation of a single table or view.

    Primary key columns are never stored on the columns themselves; they
    are derived from the PRIMARY KEY constraint so there is exactly one
    place that states them.
    """

    model_config = _SHARED_CONFIG

    schema_name: str = Field(
        default="public", alias="schema", description="Owning schema."
    )
    name: str = Field(..., min_length=1, description="Table name.")
    table_type: TableType = Field(default=TableType.TABLE, description="Table or view.")
    comment: Optional[str] = Field(default=None, description="Table comment.")
    columns: Tuple[ColumnInfo, ...] = Field(
        default=(), description="Columns in declaration order."
    )
    constraints: Tuple[ConstraintInfo, ...] = Field(
        default=(), description="PK / UNIQUE / FK / CHECK constraints."
    )
    indexes: Tuple[IndexInfo, ...] = Field(default=(), description="Indexes.")

    # -- Computed helpers ---------------------------------------------------

    @property
    def primary_key_columns(self) -> Tuple[str, ...]:
        for constraint in self.constraints:
            if constraint.constraint_type == ConstraintType.PRIMARY_KEY:
                return constraint.columns
        return ()

    @property
    def is_view(self) -> bool:
        return self.table_type == TableType.VIEW

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    def constraints_of(self, constraint_type: ConstraintType) -> List[ConstraintInfo]:
        """Constraints of one kind, in declaration order."""
        return [c for c in self.constraints if c.constraint_type == constraint_type]

    def get_column(self, name: str) -> Optional[ColumnInfo]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    # -- Validators ---------------------------------------------------------

    @model_validator(mode="after")
    def _validate_ordinal_positions(self) -> "TableInfo":
        previous: int = 0
        for column in self.columns:
            if column.ordinal_position <= previous:
                raise ValueError(
                    f"Table '{self.name}': column '{column.name}' has ordinal "
                    f"position {column.ordinal_position}, expected > {previous}."
                )
            previous = column.ordinal_position
        return self

    @model_validator(mode="after")
    def _validate_constraint_columns_exist(self) -> "TableInfo":
        col_set: Set[str] = set(self.column_names)
        for constraint in self.constraints:
            missing: List[str] = [c for c in constraint.columns if c not in col_set]
            if missing:
                raise ValueError(
                    f"Constraint '{constraint.name}' on table '{self.name}' "
                    f"references non-existent columns: {missing}"
                )
        return self

    def __repr__(self) -> str:
        return (
            f"<Table {self.qualified_name} "
            f"({len(self.columns)} cols, {len(self.constraints)} constraints, "
            f"{len(self.indexes)} indexes)>"
        )


# ---------------------------------------------------------------------------
# IntrospectedSchema: top-level container
# ---------------------------------------------------------------------------


class IntrospectedSchema(BaseModel):
    """
    The root value handed to a generator: every table plus the dialect they
    were read from.
    """

    model_config = _SHARED_CONFIG

    dialect: Dialect = Field(default=Dialect.POSTGRES, description="Source dialect.")
    tables: Tuple[TableInfo, ...] = Field(
        default=(), description="Tables in introspection order."
    )

    @model_validator(mode="after")
    def _validate_unique_table_names(self) -> "IntrospectedSchema":
        seen: Set[Tuple[str, str]] = set()
        for table in self.tables:
            key: Tuple[str, str] = (table.schema_name, table.name)
            if key in seen:
                raise ValueError(f"Duplicate table: {table.qualified_name}")
            seen.add(key)
        return self

    def get_table(self, schema_name: str, name: str) -> Optional[TableInfo]:
        for table in self.tables:
            if table.schema_name == schema_name and table.name == name:
                return table
        return None

    def filter(
        self,
        *,
        schemas: Optional[Sequence[str]] = None,
        tables: Optional[Sequence[str]] = None,
        noviews: bool = False,
    ) -> "IntrospectedSchema":
        """
        Return a new schema restricted to the given schemas / table names.

        Empty or ``None`` filters keep everything.
        """
        schema_set: FrozenSet[str] = frozenset(schemas or ())
        table_set: FrozenSet[str] = frozenset(tables or ())
        kept: List[TableInfo] = [
            t
            for t in self.tables
            if (not schema_set or t.schema_name in schema_set)
            and (not table_set or t.name in table_set)
            and not (noviews and t.is_view)
        ]
        logger.debug(
            "Schema filter kept %d of %d tables.", len(kept), len(self.tables)
        )
        return self.model_copy(update={"tables": tuple(kept)})

    @property
    def table_count(self) -> int:
        return len(self.tables)

    def __repr__(self) -> str:
        return f"<IntrospectedSchema {self.dialect.value} {self.table_count} tables>"


# ---------------------------------------------------------------------------
# Generator options
# ---------------------------------------------------------------------------


class GeneratorOptions(BaseModel):
    """
    Closed set of generator flags.

    ``use_inflect`` singularizes declarative class names; ``nojoined`` and
    ``nobidi`` are accepted for command-line compatibility and currently
    change nothing because no relationships are synthesized.
    """

    model_config = _SHARED_CONFIG

    noindexes: bool = Field(default=False, description="Skip index emission.")
    noconstraints: bool = Field(
        default=False, description="Skip FK / unique / PK constraint emission."
    )
    nocomments: bool = Field(default=False, description="Skip comments.")
    use_inflect: bool = Field(default=False, description="Singular class names.")
    nojoined: bool = Field(default=False, description="No joined-table inheritance.")
    nobidi: bool = Field(default=False, description="No bidirectional relationships.")

    @classmethod
    def parse(cls, text: Optional[str]) -> "GeneratorOptions":
        """
        Build options from a comma-delimited string such as
        ``"noindexes, nocomments"``.  Unknown tokens are logged and ignored.
        """
        flags: Dict[str, bool] = {}
        for token in (text or "").split(","):
            token = token.strip()
            if not token:
                continue
            if token in cls.model_fields:
                flags[token] = True
            else:
                logger.warning("Unknown generator option: %s", token)
        return cls(**flags)

    def __repr__(self) -> str:
        enabled: List[str] = [name for name, value in self if value]
        return f"<GeneratorOptions {','.join(enabled) or '-'}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "Dialect",
    "TableType",
    "ConstraintType",
    "IdentityInfo",
    "ColumnInfo",
    "ForeignKeyInfo",
    "ConstraintInfo",
    "IndexInfo",
    "TableInfo",
    "IntrospectedSchema",
    "GeneratorOptions",
]
