"""Topology queries behind hover highlighting and path tracing."""

from __future__ import annotations

from typing import Optional

from .graph import SchemaGraph
from .shortestpaths import Calculator


def neighbors_of(graph: SchemaGraph, node_id: str) -> set[str]:
    """
    The node itself plus every node one edge away.

    Pure and cheap, but callers driving it from pointer movement should
    throttle the calls themselves. Unknown ids give an empty set.
    """
    adjacency = graph.adjacency()
    if node_id not in adjacency:
        return set()
    return {node_id, *adjacency[node_id]}


def shortest_path(graph: SchemaGraph, from_id: str, to_id: str) -> Optional[list[str]]:
    """
    Fewest-hops chain of node ids from from_id to to_id, both included.

    Returns:
        The chain, or None when either id is unknown or the nodes are
        not connected
    """
    if from_id not in graph or to_id not in graph:
        return None
    calc = Calculator(len(graph), graph.force_pairs())
    path = calc.path_from_node_to_node(graph.index_of(from_id), graph.index_of(to_id))
    if path is None:
        return None
    return [graph.nodes[i].id for i in path]
