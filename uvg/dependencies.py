# File: uvg/dependencies.py
"""
uvg - Table Dependency Resolver
===============================
Orders tables so that every table referenced through a foreign key is
emitted before the tables that reference it.

Algorithm::

    1. Build "A depends on B" edges from FOREIGN KEY constraints whose
       target is part of the table list (self-references ignored).
    2. Collapse strongly connected components (Tarjan, iterative) so that
       every foreign key cycle becomes a single node.
    3. Depth-first post-order walk over the resulting DAG, starting roots
       and dependencies in original table order.

Tables inside one cycle keep their original relative order.  Every tie is
broken by original position, never by hashing, so the same input always
produces the same output.

Complexity: O(T + F) where T = tables, F = foreign keys.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Sequence, Set, Tuple

from uvg.models import ConstraintType, TableInfo

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg.dependencies")


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------


def _build_dependencies(tables: Sequence[TableInfo]) -> List[List[int]]:
    """For each table index, the sorted indexes of the tables it references."""
    index_of: Dict[Tuple[str, str], int] = {
        (table.schema_name, table.name): i for i, table in enumerate(tables)
    }
    deps: List[List[int]] = []
    for i, table in enumerate(tables):
        targets: Set[int] = set()
        for constraint in table.constraints_of(ConstraintType.FOREIGN_KEY):
            fk = constraint.foreign_key
            target: int = index_of.get((fk.ref_schema, fk.ref_table), -1)
            if target >= 0 and target != i:
                targets.add(target)
        deps.append(sorted(targets))
    return deps


def _strongly_connected(deps: List[List[int]]) -> List[int]:
    """Component id for every node (iterative Tarjan)."""
    count: int = len(deps)
    index: List[int] = [-1] * count
    low: List[int] = [0] * count
    on_stack: List[bool] = [False] * count
    component: List[int] = [-1] * count
    stack: List[int] = []
    counter: int = 0
    component_count: int = 0

    for root in range(count):
        if index[root] != -1:
            continue

        index[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True
        work: List[Tuple[int, Iterator[int]]] = [(root, iter(deps[root]))]

        while work:
            node, children = work[-1]
            descended: bool = False
            for child in children:
                if index[child] == -1:
                    index[child] = low[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack[child] = True
                    work.append((child, iter(deps[child])))
                    descended = True
                    break
                if on_stack[child]:
                    low[node] = min(low[node], index[child])
            if descended:
                continue

            work.pop()
            if work:
                parent: int = work[-1][0]
                low[parent] = min(low[parent], low[node])

            if low[node] == index[node]:
                while True:
                    member: int = stack.pop()
                    on_stack[member] = False
                    component[member] = component_count
                    if member == node:
                        break
                component_count += 1

    return component


def _group_components(component: List[int]) -> Dict[int, List[int]]:
    """Component id → member indexes in original order."""
    members: Dict[int, List[int]] = {}
    for node, comp in enumerate(component):
        members.setdefault(comp, []).append(node)
    return members


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def sort_tables(tables: Sequence[TableInfo]) -> List[TableInfo]:
    """
    Return *tables* reordered so that referenced tables come first.

    Members of a foreign key cycle are emitted together, in their original
    relative order, at the position of the cycle as a whole.
    """
    deps: List[List[int]] = _build_dependencies(tables)
    component: List[int] = _strongly_connected(deps)
    members: Dict[int, List[int]] = _group_components(component)

    component_deps: Dict[int, List[int]] = {}
    for comp, nodes in members.items():
        targets: Set[int] = {component[d] for n in nodes for d in deps[n]}
        targets.discard(comp)
        component_deps[comp] = sorted(targets, key=lambda c: members[c][0])

    visited: Set[int] = set()
    order: List[int] = []

    for node in range(len(tables)):
        start: int = component[node]
        if start in visited:
            continue
        visited.add(start)
        work: List[Tuple[int, Iterator[int]]] = [
            (start, iter(component_deps[start]))
        ]
        while work:
            current, pending = work[-1]
            for dep in pending:
                if dep not in visited:
                    visited.add(dep)
                    work.append((dep, iter(component_deps[dep])))
                    break
            else:
                work.pop()
                order.extend(members[current])

    logger.debug(
        "Resolved order: %s", ", ".join(tables[i].name for i in order)
    )
    return [tables[i] for i in order]


def find_cycles(tables: Sequence[TableInfo]) -> List[List[TableInfo]]:
    """
    Foreign key cycles between distinct tables, each listed in original
    order, ordered by their first member.
    """
    deps: List[List[int]] = _build_dependencies(tables)
    members: Dict[int, List[int]] = _group_components(_strongly_connected(deps))
    cycles: List[List[int]] = sorted(
        (nodes for nodes in members.values() if len(nodes) > 1),
        key=lambda nodes: nodes[0],
    )
    return [[tables[i] for i in nodes] for nodes in cycles]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "sort_tables",
    "find_cycles",
]
