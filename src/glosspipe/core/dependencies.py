# src/glosspipe/core/dependencies.py
"""Dependency resolution for extension lists.

Computes a deterministic linear execution order honouring each extension's
declared ``dependencies``. Wraps a NetworkX DiGraph whose edges run from a
dependency to its dependent.

Rules:
- A dependency that is not part of the input list is treated as already
  satisfied. The resolver has no registry access, so it cannot tell a
  missing extension from one applied in an earlier run.
- Ties between ready extensions are broken by original input order, so the
  same input always yields the same order.
- A cycle (including an extension depending on itself) fails resolution as
  a whole. Nothing is partially ordered.
"""

from __future__ import annotations

from collections.abc import Sequence

import networkx as nx

from glosspipe.contracts.errors import DependencyCycleError, DuplicateExtensionError
from glosspipe.contracts.extension import Extension


def _index_by_id(extensions: Sequence[Extension]) -> dict[str, int]:
    positions: dict[str, int] = {}
    for position, extension in enumerate(extensions):
        if extension.id in positions:
            raise DuplicateExtensionError(extension.id)
        positions[extension.id] = position
    return positions


def build_dependency_graph(extensions: Sequence[Extension]) -> nx.DiGraph[str]:
    """Build the dependency graph for an extension list.

    Nodes are extension ids carrying ``position`` (input index) and
    ``extension`` attributes. An edge ``d -> e`` means ``d`` must run before
    ``e``. Dependencies absent from the list produce no node and no edge.

    Raises:
        DuplicateExtensionError: If an id appears more than once
    """
    positions = _index_by_id(extensions)
    graph: nx.DiGraph[str] = nx.DiGraph()
    for extension in extensions:
        graph.add_node(extension.id, position=positions[extension.id], extension=extension)
    for extension in extensions:
        for dependency_id in extension.dependencies:
            if dependency_id in positions:
                graph.add_edge(dependency_id, extension.id)
    return graph


def _cycle_ids(graph: nx.DiGraph[str]) -> list[str]:
    """Return the ids of one cycle, starting at the earliest listed member."""
    try:
        edges = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:  # pragma: no cover - only called for cyclic graphs
        return []
    ids = [edge[0] for edge in edges]
    start = min(range(len(ids)), key=lambda i: graph.nodes[ids[i]]["position"])
    return ids[start:] + ids[:start]


def resolve_order(extensions: Sequence[Extension]) -> list[Extension]:
    """Order extensions so that every present dependency runs first.

    Args:
        extensions: Extensions in caller order

    Returns:
        The same extension objects in execution order

    Raises:
        DuplicateExtensionError: If an id appears more than once
        DependencyCycleError: If the dependencies form a cycle
    """
    graph = build_dependency_graph(extensions)
    try:
        ordered_ids = list(
            nx.lexicographical_topological_sort(graph, key=lambda node_id: graph.nodes[node_id]["position"]),
        )
    except nx.NetworkXUnfeasible:
        raise DependencyCycleError(_cycle_ids(graph)) from None
    return [graph.nodes[node_id]["extension"] for node_id in ordered_ids]


def find_missing_dependencies(extensions: Sequence[Extension]) -> dict[str, list[str]]:
    """Report declared dependencies that are absent from the list.

    Diagnostic only: absent dependencies do not fail resolution.

    Returns:
        extension_id -> missing dependency ids, for extensions with any
    """
    present = {extension.id for extension in extensions}
    missing: dict[str, list[str]] = {}
    for extension in extensions:
        absent = [dep for dep in extension.dependencies if dep not in present]
        if absent:
            missing[extension.id] = absent
    return missing
