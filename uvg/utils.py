# File: uvg/utils.py
"""
uvg - Utility Functions & Helpers
=================================
String transformation, Python-literal escaping and file I/O helpers used
throughout the generation pipeline.

- Naming functions are decorated with ``@lru_cache(maxsize=None)``: the same
  table and column names are converted over and over during one run.
- File output uses write-to-temp then rename so a failed run never leaves a
  half-written module behind.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import keyword
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_NON_WORD_RE: re.Pattern[str] = re.compile(r"\W")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)

# Attribute names that would shadow DeclarativeBase machinery
_RESERVED_ATTRIBUTES: FrozenSet[str] = frozenset({"metadata", "registry"})

# Irregular plurals common in table names, plural → singular
_IRREGULAR_SINGULARS: Dict[str, str] = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
    "mice": "mouse",
    "geese": "goose",
    "teeth": "tooth",
    "feet": "foot",
    "data": "datum",
    "indices": "index",
    "matrices": "matrix",
    "vertices": "vertex",
    "axes": "axis",
    "crises": "crisis",
    "analyses": "analysis",
    "statuses": "status",
    "addresses": "address",
}

_PYTHON_ESCAPES: Dict[str, str] = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Returns a tuple (hashable for LRU cache) of lowercase word strings.
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """
    Naive English singularisation sufficient for class names.

    Words that only look plural (``status``, ``address``, ``analysis``)
    are left alone.
    """
    if not name:
        return ""

    lower: str = name.lower()

    if lower in _IRREGULAR_SINGULARS:
        singular: str = _IRREGULAR_SINGULARS[lower]
        if name[0].isupper():
            return singular[0].upper() + singular[1:]
        return singular

    if lower.endswith(("ss", "us", "is")):
        return name
    if lower.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lower.endswith("ves"):
        return name[:-3] + "f"
    if lower.endswith("oes") and len(name) > 3:
        return name[:-2]
    if lower.endswith(("sses", "xes", "zes", "ches", "shes")):
        return name[:-2]
    if lower.endswith("s"):
        return name[:-1]

    return name


@functools.lru_cache(maxsize=None)
def table_to_class_name(table_name: str, use_inflect: bool = False) -> str:
    """
    Convert a table name to a PascalCase class name.

    ``user_profiles`` → ``UserProfiles``, or ``UserProfile`` when
    *use_inflect* is set (only the last word is singularised).
    """
    words: List[str] = list(_extract_words(table_name))
    if use_inflect and words:
        words[-1] = to_singular(words[-1])
    class_name: str = "".join(w.capitalize() for w in words)
    if not class_name:
        return "Table"
    if class_name[0].isdigit():
        return f"T{class_name}"
    return class_name


@functools.lru_cache(maxsize=None)
def table_to_variable_name(table_name: str) -> str:
    """Module-level variable for the tables generator (``users`` → ``t_users``)."""
    return f"t_{_NON_WORD_RE.sub('_', table_name)}"


@functools.lru_cache(maxsize=None)
def column_to_attribute_name(column_name: str) -> str:
    """
    Return a safe Python attribute name for a column.

    Valid names pass through untouched.  Otherwise illegal characters become
    underscores, a leading digit gets an underscore prefix, and keywords or
    declarative reserved names get a trailing underscore.
    """
    if (
        column_name.isidentifier()
        and not keyword.iskeyword(column_name)
        and column_name not in _RESERVED_ATTRIBUTES
    ):
        return column_name

    result: str = _NON_WORD_RE.sub("_", column_name) or "_"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result) or result in _RESERVED_ATTRIBUTES:
        result = f"{result}_"
    return result


def find_free_name(name: str, taken: Set[str]) -> str:
    """Append underscores to *name* until it is not in *taken*, then claim it."""
    while name in taken:
        name = f"{name}_"
    taken.add(name)
    return name


# ---------------------------------------------------------------------------
# Python literal helpers
# ---------------------------------------------------------------------------


def escape_python_string(value: str) -> str:
    """Escape *value* for embedding in a single-quoted Python literal."""
    return "".join(_PYTHON_ESCAPES.get(ch, ch) for ch in value)


def quote(value: str) -> str:
    """Render *value* as a single-quoted Python string literal."""
    return f"'{escape_python_string(value)}'"


def quote_all(values: Sequence[str]) -> List[str]:
    """Quote every value, preserving order."""
    return [quote(v) for v in values]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str) -> int:
    """
    Atomically write *content* to *path*.

    The text is written to a temporary file in the target directory and
    then renamed over *path*.  Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    fd: int
    tmp_path: str
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("render declarative") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_singular",
    "table_to_class_name",
    "table_to_variable_name",
    "column_to_attribute_name",
    "find_free_name",
    "escape_python_string",
    "quote",
    "quote_all",
    "ensure_directory",
    "write_file",
    "count_lines",
    "Timer",
]
