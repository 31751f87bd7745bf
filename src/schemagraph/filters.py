"""
Diagram filters.

Filtering happens before layout: the kept tables and the relationships
between them form a new SchemaGraph which is then laid out from scratch.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .graph import Cardinality, Classification, Edge, Node, SchemaGraph


@dataclass(frozen=True)
class FilterState:
    """
    Attributes:
        search_term: Case-insensitive substring of the id or display name
        table_types: Classifications to keep
        relationship_types: Cardinalities of relationships to keep
        min_relationships: Lower bound on a table's relationship count
        max_relationships: Upper bound on a table's relationship count
        show_empty_tables: Keep tables without records
    """
    search_term: str = ''
    table_types: frozenset[Classification] = field(default_factory=lambda: frozenset(Classification))
    relationship_types: frozenset[Cardinality] = field(default_factory=lambda: frozenset(Cardinality))
    min_relationships: int = 0
    max_relationships: int = 100
    show_empty_tables: bool = True

    def accepts_node(self, node: Node) -> bool:
        if node.classification not in self.table_types:
            return False
        if not self.min_relationships <= node.relationship_count <= self.max_relationships:
            return False
        if not self.show_empty_tables and node.record_count == 0:
            return False
        term = self.search_term.strip().lower()
        if term and term not in node.id.lower() and term not in node.display_name.lower():
            return False
        return True

    def accepts_edge(self, edge: Edge) -> bool:
        return edge.cardinality in self.relationship_types


def apply_filters(graph: SchemaGraph, filters: FilterState) -> SchemaGraph:
    """
    Subgraph of the tables that pass the filters.

    Relationships survive when both ends are kept and their cardinality is
    allowed. Node values, positions included, are carried over unchanged.
    """
    nodes = [n for n in graph.nodes if filters.accepts_node(n)]
    kept = {n.id for n in nodes}
    edges = [
        e for e in graph.edges
        if e.source in kept and e.target in kept and filters.accepts_edge(e)
    ]
    return SchemaGraph(nodes, edges, graph.config)
