# File: uvg/__init__.py
"""
uvg - SQLAlchemy Model Code Generator
=====================================

Turns an introspected relational schema (tables, columns, constraints,
indexes) into SQLAlchemy source code in one of two styles:

- ``declarative``: SQLAlchemy 2.0 ``DeclarativeBase`` classes with
  ``Mapped[]`` annotations
- ``tables``: core ``Table`` objects on a shared ``MetaData``

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────────┐
    │  CLI / Entry │────▶│ ModelGenerator │────▶│ Declarative / Tables │
    │   (cli.py)   │     │ (generator.py) │     │  (declarative.py,    │
    └──────────────┘     └───────┬────────┘     │   tables.py)         │
                                 │              └──────────┬───────────┘
                    ┌────────────┼────────────┐            │
                    ▼            ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌──────────┐ ┌─────────────────┐
             │validators│ │  models   │ │  loader  │ │ typemap, imports│
             │  (.py)   │ │  (.py)    │ │  (.py)   │ │ dependencies,   │
             └──────────┘ └───────────┘ └──────────┘ │ formatting      │
                                                     └─────────────────┘

Usage::

    # As a library
    from uvg import ModelGenerator, GeneratorOptions
    report = ModelGenerator("tables", GeneratorOptions.parse("noindexes")).generate(schema)
    print(report.output)

    # From the command line
    python -m uvg schema.yaml --generator declarative -o models.py
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from uvg.models import (
    ColumnInfo,
    ConstraintInfo,
    ConstraintType,
    Dialect,
    ForeignKeyInfo,
    GeneratorOptions,
    IdentityInfo,
    IndexInfo,
    IntrospectedSchema,
    TableInfo,
    TableType,
)
from uvg.codegen import (
    Generator,
    GeneratorKind,
    UnknownGeneratorError,
    get_generator,
)
from uvg.declarative import DeclarativeGenerator
from uvg.tables import TablesGenerator
from uvg.typemap import MappedType, map_column_type
from uvg.dependencies import find_cycles, sort_tables
from uvg.imports import ImportCollector
from uvg.validators import ValidationResult, validate_full
from uvg.loader import load_schema, load_schema_file, parse_raw_schema
from uvg.generator import GenerationReport, ModelGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Orchestrator
    "ModelGenerator",
    "GenerationReport",
    # Schema model
    "ColumnInfo",
    "ConstraintInfo",
    "ConstraintType",
    "Dialect",
    "ForeignKeyInfo",
    "GeneratorOptions",
    "IdentityInfo",
    "IndexInfo",
    "IntrospectedSchema",
    "TableInfo",
    "TableType",
    # Generators
    "Generator",
    "GeneratorKind",
    "UnknownGeneratorError",
    "get_generator",
    "DeclarativeGenerator",
    "TablesGenerator",
    # Building blocks
    "MappedType",
    "map_column_type",
    "sort_tables",
    "find_cycles",
    "ImportCollector",
    # Validation
    "validate_full",
    "ValidationResult",
    # Loading
    "load_schema",
    "load_schema_file",
    "parse_raw_schema",
]
