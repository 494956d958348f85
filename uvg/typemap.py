# File: uvg/typemap.py
"""
uvg - Type Mapping Engine
=========================
Maps one introspected column to the SQLAlchemy type expression used in the
generated source, the Python type used in ``Mapped[...]`` annotations and
the imports both of them need.

Lookups are keyed on the underlying type name (``udt_name``), falling back
to the SQL-standard ``data_type`` description for dumps that only carry
the latter.  Anything not in the tables degrades to ``NullType`` / ``Any``
so that one exotic column never blocks a whole schema.

    >>> col = ColumnInfo(name="name", ordinal_position=1,
    ...                  udt_name="varchar", character_maximum_length=100)
    >>> map_column_type(col, Dialect.POSTGRES).sa_type
    'String(100)'
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from uvg.models import ColumnInfo, Dialect
from uvg.utils import quote, quote_all

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.typemap")

# ---------------------------------------------------------------------------
# Import locations
# ---------------------------------------------------------------------------

_SA: str = "sqlalchemy"
_PG: str = "sqlalchemy.dialects.postgresql"
_MS: str = "sqlalchemy.dialects.mssql"

# SQL Server reports ``(max)`` lengths as -1
_MSSQL_MAX_LENGTH: int = -1

_ANY_RE: re.Pattern[str] = re.compile(r"\bAny\b")


# ---------------------------------------------------------------------------
# MappedType
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MappedType:
    """
    Result of mapping a single column.

    ``imports`` lists every ``(module, name)`` pair that must be imported
    for ``sa_type`` to resolve in the generated module; it already includes
    the imports of ``element`` where ``element`` is part of the expression.
    """

    sa_type: str
    python_type: str
    imports: Tuple[Tuple[str, str], ...] = ()
    element: Optional["MappedType"] = None
    is_fallback: bool = False

    @property
    def needs_datetime(self) -> bool:
        return "datetime." in self.python_type

    @property
    def needs_decimal(self) -> bool:
        return "decimal." in self.python_type

    @property
    def needs_uuid(self) -> bool:
        return "uuid." in self.python_type

    @property
    def needs_any(self) -> bool:
        return bool(_ANY_RE.search(self.python_type))


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------


class _TypeSpec(NamedTuple):
    """One row of a dialect type table."""

    sa_name: str
    module: str
    python_type: str
    # "" (no arguments), "length" or "numeric"
    params: str = ""
    # literal constructor arguments, e.g. "(True)" for timezone-aware types
    fixed_args: str = ""


_POSTGRES_TYPES: Dict[str, _TypeSpec] = {
    "int2": _TypeSpec("SmallInteger", _SA, "int"),
    "int4": _TypeSpec("Integer", _SA, "int"),
    "int8": _TypeSpec("BigInteger", _SA, "int"),
    "oid": _TypeSpec("OID", _PG, "int"),
    "float4": _TypeSpec("REAL", _SA, "float"),
    "float8": _TypeSpec("Double", _SA, "float", fixed_args="(53)"),
    "numeric": _TypeSpec("Numeric", _SA, "decimal.Decimal", params="numeric"),
    "money": _TypeSpec("MONEY", _PG, "str"),
    "bool": _TypeSpec("Boolean", _SA, "bool"),
    "varchar": _TypeSpec("String", _SA, "str", params="length"),
    "bpchar": _TypeSpec("CHAR", _SA, "str", params="length"),
    "text": _TypeSpec("Text", _SA, "str"),
    "citext": _TypeSpec("CITEXT", _PG, "str"),
    "bytea": _TypeSpec("LargeBinary", _SA, "bytes"),
    "date": _TypeSpec("Date", _SA, "datetime.date"),
    "time": _TypeSpec("Time", _SA, "datetime.time"),
    "timetz": _TypeSpec("Time", _SA, "datetime.time", fixed_args="(True)"),
    "timestamp": _TypeSpec("DateTime", _SA, "datetime.datetime"),
    "timestamptz": _TypeSpec("DateTime", _SA, "datetime.datetime", fixed_args="(True)"),
    "interval": _TypeSpec("INTERVAL", _PG, "datetime.timedelta"),
    "uuid": _TypeSpec("Uuid", _SA, "uuid.UUID"),
    "json": _TypeSpec("JSON", _SA, "dict"),
    "jsonb": _TypeSpec("JSONB", _PG, "dict"),
    "hstore": _TypeSpec("HSTORE", _PG, "dict"),
    "inet": _TypeSpec("INET", _PG, "str"),
    "cidr": _TypeSpec("CIDR", _PG, "str"),
    "macaddr": _TypeSpec("MACADDR", _PG, "str"),
    "macaddr8": _TypeSpec("MACADDR8", _PG, "str"),
    "tsvector": _TypeSpec("TSVECTOR", _PG, "str"),
}

# information_schema.columns.data_type spellings → udt_name
_POSTGRES_ALIASES: Dict[str, str] = {
    "smallint": "int2",
    "integer": "int4",
    "bigint": "int8",
    "real": "float4",
    "double precision": "float8",
    "decimal": "numeric",
    "boolean": "bool",
    "character varying": "varchar",
    "character": "bpchar",
    "time without time zone": "time",
    "time with time zone": "timetz",
    "timestamp without time zone": "timestamp",
    "timestamp with time zone": "timestamptz",
}

_MSSQL_TYPES: Dict[str, _TypeSpec] = {
    "tinyint": _TypeSpec("TINYINT", _MS, "int"),
    "smallint": _TypeSpec("SmallInteger", _SA, "int"),
    "int": _TypeSpec("Integer", _SA, "int"),
    "bigint": _TypeSpec("BigInteger", _SA, "int"),
    "bit": _TypeSpec("Boolean", _SA, "bool"),
    "decimal": _TypeSpec("Numeric", _SA, "decimal.Decimal", params="numeric"),
    "numeric": _TypeSpec("Numeric", _SA, "decimal.Decimal", params="numeric"),
    "money": _TypeSpec("MONEY", _MS, "decimal.Decimal"),
    "smallmoney": _TypeSpec("SMALLMONEY", _MS, "decimal.Decimal"),
    "float": _TypeSpec("Float", _SA, "float", fixed_args="(53)"),
    "real": _TypeSpec("REAL", _SA, "float"),
    "date": _TypeSpec("Date", _SA, "datetime.date"),
    "time": _TypeSpec("TIME", _MS, "datetime.time"),
    "datetime": _TypeSpec("DATETIME", _SA, "datetime.datetime"),
    "datetime2": _TypeSpec("DATETIME2", _MS, "datetime.datetime"),
    "smalldatetime": _TypeSpec("SMALLDATETIME", _MS, "datetime.datetime"),
    "datetimeoffset": _TypeSpec("DATETIMEOFFSET", _MS, "datetime.datetime"),
    "char": _TypeSpec("CHAR", _SA, "str", params="length"),
    "varchar": _TypeSpec("String", _SA, "str", params="length"),
    "nchar": _TypeSpec("NCHAR", _SA, "str", params="length"),
    "nvarchar": _TypeSpec("NVARCHAR", _SA, "str", params="length"),
    "text": _TypeSpec("Text", _SA, "str"),
    "ntext": _TypeSpec("NTEXT", _MS, "str"),
    "binary": _TypeSpec("BINARY", _SA, "bytes", params="length"),
    "varbinary": _TypeSpec("VARBINARY", _SA, "bytes", params="length"),
    "image": _TypeSpec("IMAGE", _MS, "bytes"),
    "uniqueidentifier": _TypeSpec("Uuid", _SA, "uuid.UUID"),
    "xml": _TypeSpec("XML", _MS, "str"),
}

# Every name a type expression may import into the generated module
TYPE_SYMBOLS: FrozenSet[str] = frozenset(
    [spec.sa_name for spec in _POSTGRES_TYPES.values()]
    + [spec.sa_name for spec in _MSSQL_TYPES.values()]
    + ["ARRAY", "Enum", "String", "NullType"]
)

_FALLBACK: MappedType = MappedType(
    sa_type="NullType",
    python_type="Any",
    imports=(("sqlalchemy.sql.sqltypes", "NullType"),),
    is_fallback=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render_args(spec: _TypeSpec, column: ColumnInfo) -> str:
    """Constructor arguments for *spec* given the column's size facts."""
    if spec.fixed_args:
        return spec.fixed_args

    if spec.params == "length":
        length: Optional[int] = column.character_maximum_length
        if length is None or length == _MSSQL_MAX_LENGTH or length <= 0:
            return ""
        return f"({length})"

    if spec.params == "numeric":
        precision: Optional[int] = column.numeric_precision
        scale: Optional[int] = column.numeric_scale
        if precision is None:
            return ""
        if scale is None:
            return f"({precision})"
        return f"({precision}, {scale})"

    return ""


def _from_spec(spec: _TypeSpec, column: ColumnInfo) -> MappedType:
    return MappedType(
        sa_type=f"{spec.sa_name}{_render_args(spec, column)}",
        python_type=spec.python_type,
        imports=((spec.module, spec.sa_name),),
    )


def _map_enum(column: ColumnInfo, type_name: str) -> MappedType:
    labels: List[str] = quote_all(column.enum_values or ())
    labels.append(f"name={quote(type_name)}")
    label_type: MappedType = MappedType(
        sa_type="String",
        python_type="str",
        imports=((_SA, "String"),),
    )
    return MappedType(
        sa_type=f"Enum({', '.join(labels)})",
        python_type="str",
        imports=((_SA, "Enum"),),
        element=label_type,
    )


def _map_postgres(column: ColumnInfo) -> MappedType:
    udt: str = column.udt_name.lower()

    if column.is_array:
        element_udt: str = udt[1:] if udt.startswith("_") else udt
        element_column: ColumnInfo = column.model_copy(
            update={"udt_name": element_udt, "data_type": ""}
        )
        element: MappedType = _map_postgres(element_column)
        return MappedType(
            sa_type=f"ARRAY({element.sa_type})",
            python_type=f"list[{element.python_type}]",
            imports=((_PG, "ARRAY"),) + element.imports,
            element=element,
            is_fallback=element.is_fallback,
        )

    if column.enum_values is not None:
        return _map_enum(column, column.udt_name)

    spec: Optional[_TypeSpec] = _POSTGRES_TYPES.get(udt)
    if spec is None:
        alias: Optional[str] = _POSTGRES_ALIASES.get(column.data_type.lower())
        if alias is not None:
            spec = _POSTGRES_TYPES[alias]
    if spec is None:
        return _FALLBACK
    return _from_spec(spec, column)


def _map_mssql(column: ColumnInfo) -> MappedType:
    spec: Optional[_TypeSpec] = _MSSQL_TYPES.get(column.udt_name.lower())
    if spec is None:
        spec = _MSSQL_TYPES.get(column.data_type.lower())
    if spec is None:
        return _FALLBACK
    return _from_spec(spec, column)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def map_column_type(column: ColumnInfo, dialect: Dialect) -> MappedType:
    """
    Map *column* to its SQLAlchemy / Python representation under *dialect*.

    Never raises for unknown types; those come back as ``NullType`` with an
    ``Any`` annotation and ``is_fallback`` set.
    """
    if dialect == Dialect.MSSQL:
        mapped: MappedType = _map_mssql(column)
    else:
        mapped = _map_postgres(column)

    if mapped.is_fallback:
        logger.debug(
            "No mapping for column %s (%s / %s); using NullType.",
            column.name,
            column.data_type,
            column.udt_name,
        )
    return mapped


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MappedType",
    "TYPE_SYMBOLS",
    "map_column_type",
]
