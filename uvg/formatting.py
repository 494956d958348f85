# File: uvg/formatting.py
"""
uvg - Server Default Formatting
===============================
Turns raw SQL default expressions, exactly as the catalog reports them,
into ``text('...')`` server defaults.

PostgreSQL reports literal defaults with a trailing cast
(``'hello'::character varying``, ``0::integer``) which is noise in generated
models, so the trailing cast is removed.  Casts nested inside a function call
or a string literal (``nextval('seq'::regclass)``) are part of the
expression and stay.  SQL Server wraps defaults in redundant parentheses
(``((0))``, ``(getdate())``) which are removed the same way.

Anything that cannot be scanned cleanly (unbalanced quotes or parentheses)
is passed through untouched.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from uvg.models import ColumnInfo, Dialect
from uvg.utils import quote

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.formatting")

# What may follow "::" for it to count as a trailing cast:
# ``integer``, ``character varying(20)``, ``integer[]``, ``"MyType"``, ``public.mood``
_CAST_TARGET_RE: re.Pattern[str] = re.compile(r'^[\w\s."\[\](),]+$')

_SEQUENCE_PREFIXES: Dict[Dialect, Tuple[str, ...]] = {
    Dialect.POSTGRES: ("nextval(",),
    Dialect.MSSQL: ("next value for ",),
}


# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------


def find_typecast_pos(expr: str) -> Optional[int]:
    """
    Return the index of the last ``::`` outside quotes and parentheses.

    Returns ``None`` when there is no such cast or when the expression is
    malformed (unbalanced quotes or parentheses).
    """
    in_quotes: bool = False
    depth: int = 0
    last_cast: Optional[int] = None
    i: int = 0
    length: int = len(expr)

    while i < length:
        ch: str = expr[i]
        if ch == "'":
            in_quotes = not in_quotes
        elif not in_quotes:
            if ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    return None
                depth -= 1
            elif ch == ":" and depth == 0 and i + 1 < length and expr[i + 1] == ":":
                last_cast = i
                i += 1
        i += 1

    if in_quotes or depth != 0:
        logger.debug("Unbalanced default expression left as-is: %s", expr)
        return None
    return last_cast


def strip_typecast(expr: str) -> str:
    """
    Remove trailing ``::type`` casts.

        >>> strip_typecast("0::integer")
        '0'
        >>> strip_typecast("nextval('seq'::regclass)")
        "nextval('seq'::regclass)"
    """
    result: str = expr.strip()
    while True:
        pos: Optional[int] = find_typecast_pos(result)
        if pos is None or not _CAST_TARGET_RE.match(result[pos + 2:]):
            return result
        result = result[:pos].rstrip()


def _enclosing_parens(expr: str) -> bool:
    """True when the first ``(`` closes at the very last character."""
    if not (expr.startswith("(") and expr.endswith(")")):
        return False
    in_quotes: bool = False
    depth: int = 0
    for i, ch in enumerate(expr):
        if ch == "'":
            in_quotes = not in_quotes
        elif not in_quotes:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return i == len(expr) - 1
    return False


def strip_outer_parens(expr: str) -> str:
    """
    Remove parentheses that wrap the whole expression.

        >>> strip_outer_parens("((0))")
        '0'
        >>> strip_outer_parens("(a) + (b)")
        '(a) + (b)'
    """
    result: str = expr.strip()
    while _enclosing_parens(result):
        result = result[1:-1].strip()
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def clean_default(expr: str, dialect: Dialect) -> str:
    """Dialect-specific cleanup of a raw default expression."""
    if dialect == Dialect.MSSQL:
        return strip_outer_parens(expr)
    return strip_typecast(expr)


def is_sequence_default(expr: str, dialect: Dialect) -> bool:
    """True if the default just advances a sequence (serial / auto-increment)."""
    lowered: str = strip_outer_parens(expr).lower()
    return lowered.startswith(_SEQUENCE_PREFIXES[dialect])


def format_server_default(expr: str, dialect: Dialect) -> str:
    """Render a raw default as ``text('...')``."""
    return f"text({quote(clean_default(expr, dialect))})"


def server_default_for(column: ColumnInfo, dialect: Dialect) -> Optional[str]:
    """
    The ``text(...)`` server default to emit for *column*, if any.

    Sequence-advance defaults and defaults of identity columns are skipped:
    the database generates those values itself.
    """
    default: Optional[str] = column.column_default
    if default is None or not default.strip():
        return None
    if column.is_identity or is_sequence_default(default, dialect):
        return None
    return format_server_default(default, dialect)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "find_typecast_pos",
    "strip_typecast",
    "strip_outer_parens",
    "clean_default",
    "is_sequence_default",
    "format_server_default",
    "server_default_for",
]
