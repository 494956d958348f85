# File: uvg/loader.py
"""
uvg - Schema Dump Loader
========================
Reads an introspection dump (JSON or YAML) and turns it into a validated
``IntrospectedSchema``.

Accepted top-level shapes::

    {"dialect": "postgresql", "tables": [...]}
    {"schema": {"dialect": "postgresql", "tables": [...]}}
    {"tables": [...]}                      # dialect defaults to postgresql
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from uvg.models import IntrospectedSchema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.loader")


# ---------------------------------------------------------------------------
# File parsing
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema dump file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".json":
        return _load_json_file(path)
    else:
        # YAML is a superset of JSON
        logger.info("Unknown extension '%s'; parsing as YAML.", suffix)
        return _load_yaml_file(path)


# ---------------------------------------------------------------------------
# Model construction
# ---------------------------------------------------------------------------


def parse_raw_schema(raw: Dict[str, Any]) -> IntrospectedSchema:
    """
    Validate a raw dictionary into an ``IntrospectedSchema``.

    Raises:
        ValueError: If no tables are found or model validation fails.
    """
    schema_data: Optional[Dict[str, Any]] = None
    nested: Any = raw.get("schema")
    if isinstance(nested, dict):
        schema_data = nested
    elif "tables" in raw:
        schema_data = raw

    if schema_data is None:
        raise ValueError(
            "Cannot find schema in input. "
            "Expected a top-level 'tables' list or a 'schema' mapping."
        )

    try:
        schema: IntrospectedSchema = IntrospectedSchema.model_validate(schema_data)
    except ValidationError as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc

    logger.info(
        "Parsed schema: %d tables, dialect=%s.",
        schema.table_count,
        schema.dialect.value,
    )
    return schema


def load_schema(path: Path) -> IntrospectedSchema:
    """``load_schema_file`` followed by ``parse_raw_schema``."""
    return parse_raw_schema(load_schema_file(path))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "load_schema_file",
    "parse_raw_schema",
    "load_schema",
]
