# File: uvg/imports.py
"""
uvg - Import Collector
======================
Accumulates the imports a generated module needs while it is being
rendered, then prints them as one stable block::

    from sqlalchemy import Integer, String
    from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
    import datetime

``from`` imports come first, sorted by module with sorted names, followed
by the sorted bare ``import`` lines.  A collector belongs to exactly one
generation pass.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.imports")


class ImportCollector:
    """
    Exclusively-owned accumulator of ``from module import name`` pairs and
    bare ``import module`` references.

    Usage::

        imports = ImportCollector()
        imports.add("sqlalchemy", "Integer")
        imports.add_bare("datetime")
        header = imports.render()
    """

    __slots__ = ("_from_imports", "_bare_imports")

    def __init__(self) -> None:
        self._from_imports: Dict[str, Set[str]] = {}
        self._bare_imports: Set[str] = set()

    def add(self, module: str, name: str) -> None:
        """Record ``from module import name``."""
        self._from_imports.setdefault(module, set()).add(name)

    def add_many(self, pairs: Iterable[Tuple[str, str]]) -> None:
        """Record several ``(module, name)`` pairs."""
        for module, name in pairs:
            self.add(module, name)

    def add_bare(self, module: str) -> None:
        """Record ``import module``."""
        self._bare_imports.add(module)

    def contains(self, module: str, name: str) -> bool:
        return name in self._from_imports.get(module, ())

    def __len__(self) -> int:
        return sum(len(names) for names in self._from_imports.values()) + len(
            self._bare_imports
        )

    def render(self) -> str:
        """
        Render the import block (no trailing newline).

        Complexity: O(M log M + N log N) where M = modules, N = total names.
        """
        lines: List[str] = []
        for module in sorted(self._from_imports):
            names: str = ", ".join(sorted(self._from_imports[module]))
            lines.append(f"from {module} import {names}")
        for module in sorted(self._bare_imports):
            lines.append(f"import {module}")
        logger.debug(
            "Rendered %d import line(s) for %d name(s).", len(lines), len(self)
        )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"<ImportCollector {len(self._from_imports)} modules, "
            f"{len(self._bare_imports)} bare>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ImportCollector",
]
