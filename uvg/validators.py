# File: uvg/validators.py
"""
uvg - Schema Validators
=======================
Cross-entity checks on an ``IntrospectedSchema`` that pydantic's per-model
validators cannot express.  Nothing here blocks generation: every finding
is a warning or an informational note that the orchestrator logs and
attaches to its report.

Checks:
    - foreign keys whose target table / column is not part of the schema
    - column types with no mapping (rendered with ``NullType``)
    - tables without a primary key
    - index columns missing from their table
    - foreign key cycles between tables

Usage:
    from uvg.validators import validate_full
    result = validate_full(schema)
    for issue in result.warnings:
        print(issue)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from uvg.dependencies import find_cycles
from uvg.models import ConstraintType, IntrospectedSchema, TableInfo
from uvg.typemap import MappedType, map_column_type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight finding descriptor."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_warning]

    @property
    def has_warnings(self) -> bool:
        return any(i.is_warning for i in self._items)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self._items if i.is_warning)

    def codes(self) -> Set[str]:
        return {i.code for i in self._items}

    def summary(self) -> str:
        return (
            f"Validation: {self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and not item.is_warning:
                continue
            prefix: str = "⚠️" if item.is_warning else "ℹ️"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_foreign_key_targets(schema: IntrospectedSchema) -> ValidationResult:
    """
    Foreign keys must point at a table (and columns) present in the schema,
    otherwise SQLAlchemy cannot resolve them when the generated module is
    used on its own.

    Complexity: O(T + F).
    """
    result: ValidationResult = ValidationResult()
    tables: Dict[Tuple[str, str], TableInfo] = {
        (t.schema_name, t.name): t for t in schema.tables
    }

    for table in schema.tables:
        for constraint in table.constraints_of(ConstraintType.FOREIGN_KEY):
            fk = constraint.foreign_key
            target_name: str = f"{fk.ref_schema}.{fk.ref_table}"
            ctx: Dict[str, Any] = {
                "table": table.qualified_name,
                "constraint": constraint.name,
                "target": target_name,
            }
            target: Optional[TableInfo] = tables.get((fk.ref_schema, fk.ref_table))
            if target is None:
                result.add_warning(
                    "FK_TARGET_UNRESOLVED",
                    f"Foreign key '{constraint.name}' on '{table.qualified_name}' "
                    f"references '{target_name}', which is not in the schema.",
                    ctx,
                )
                continue

            missing: List[str] = [
                c for c in fk.ref_columns if target.get_column(c) is None
            ]
            if missing:
                result.add_warning(
                    "FK_TARGET_COLUMN_MISSING",
                    f"Foreign key '{constraint.name}' on '{table.qualified_name}' "
                    f"references missing column(s) {missing} of '{target_name}'.",
                    ctx,
                )

    return result


def validate_column_types(schema: IntrospectedSchema) -> ValidationResult:
    """
    Flag columns whose type has no mapping.

    Complexity: O(C).
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        for column in table.columns:
            mapped: MappedType = map_column_type(column, schema.dialect)
            if mapped.is_fallback:
                result.add_warning(
                    "UNSUPPORTED_COLUMN_TYPE",
                    f"Column '{table.qualified_name}.{column.name}' has "
                    f"unsupported type '{column.udt_name}'; rendered as {mapped.sa_type}.",
                    {
                        "table": table.qualified_name,
                        "column": column.name,
                        "udt_name": column.udt_name,
                    },
                )
    return result


def validate_primary_keys(schema: IntrospectedSchema) -> ValidationResult:
    """
    Declarative classes need a primary key to be mapped.  Views rarely have
    one, so those are only noted.

    Complexity: O(T).
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        if table.primary_key_columns:
            continue
        ctx: Dict[str, Any] = {"table": table.qualified_name}
        if table.is_view:
            result.add_info(
                "VIEW_WITHOUT_PRIMARY_KEY",
                f"View '{table.qualified_name}' has no primary key; its "
                f"declarative class cannot be mapped as-is.",
                ctx,
            )
        else:
            result.add_warning(
                "MISSING_PRIMARY_KEY",
                f"Table '{table.qualified_name}' has no primary key; its "
                f"declarative class cannot be mapped as-is.",
                ctx,
            )
    return result


def validate_indexes(schema: IntrospectedSchema) -> ValidationResult:
    """
    Index columns must exist in the table (expression indexes report
    pseudo-column names that do not).

    Complexity: O(I).
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        col_set: Set[str] = set(table.column_names)
        for index in table.indexes:
            missing: List[str] = [c for c in index.columns if c not in col_set]
            if missing:
                result.add_warning(
                    "INDEX_COLUMN_NOT_FOUND",
                    f"Index '{index.name}' on '{table.qualified_name}' uses "
                    f"unknown column(s) {missing}.",
                    {"table": table.qualified_name, "index": index.name},
                )
    return result


def validate_circular_dependencies(schema: IntrospectedSchema) -> ValidationResult:
    """
    Report foreign key cycles.  Output is still produced; the tables of a
    cycle are emitted in their original order.

    Complexity: O(T + F).
    """
    result: ValidationResult = ValidationResult()
    for cycle in find_cycles(schema.tables):
        names: List[str] = [t.qualified_name for t in cycle]
        result.add_warning(
            "CIRCULAR_DEPENDENCY",
            f"Circular foreign key dependency: {' → '.join(names)} → {names[0]}.",
            {"tables": names},
        )
    return result


# ---------------------------------------------------------------------------
# Master entry point
# ---------------------------------------------------------------------------


def validate_full(schema: IntrospectedSchema) -> ValidationResult:
    """
    Run every check and merge the findings.

    Complexity: O(T + C + F + I), linear in total schema entities.
    """
    logger.info(
        "Starting validation: %d tables, dialect=%s",
        schema.table_count,
        schema.dialect.value,
    )

    result: ValidationResult = ValidationResult()

    validators: List[Callable[[IntrospectedSchema], ValidationResult]] = [
        validate_foreign_key_targets,
        validate_column_types,
        validate_primary_keys,
        validate_indexes,
        validate_circular_dependencies,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(schema))

    logger.info("Validation complete. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_foreign_key_targets",
    "validate_column_types",
    "validate_primary_keys",
    "validate_indexes",
    "validate_circular_dependencies",
    "validate_full",
]
