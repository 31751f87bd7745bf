"""
Schema graph model.

This module provides:
- Node (table) and Edge (relationship) value types
- Table classification and size derivation from complexity metrics
- SchemaGraph, which validates loader input and caches derived topology
  (adjacency lists and the collapsed force pairs)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, Optional, TypedDict, Union
import logging
import math
import re

import numpy as np

from .config import DEFAULT_CONFIG, LayoutConfig
from .rectangle import Rectangle

logger = logging.getLogger(__name__)

_LOOKUP_NAME = re.compile(r"type", re.IGNORECASE)


class Classification(str, Enum):
    """Role of a table inferred from its shape."""
    core = 'core'
    lookup = 'lookup'
    junction = 'junction'
    data = 'data'


class Cardinality(str, Enum):
    """Relationship cardinality."""
    one_to_one = '1:1'
    one_to_many = '1:many'
    many_to_many = 'many:many'


class NodeInput(TypedDict, total=False):
    """
    Table description produced by the schema loader.

    Attributes:
        id: Unique table identifier, normally the table name
        display_name: Human readable name, derived from id when missing
        record_count: Number of rows
        column_count: Number of columns
        relationship_count: Number of foreign-key relationships; counted
            from the edge list when missing
        foreign_key_count: Number of foreign-key columns
    """
    id: str
    display_name: str
    record_count: int
    column_count: int
    relationship_count: int
    foreign_key_count: int


class EdgeInput(TypedDict, total=False):
    """
    Relationship description produced by the schema loader.

    Attributes:
        source: Referencing table id
        target: Referenced table id
        cardinality: One of '1:1', '1:many', 'many:many'
        constraint_name: Name of the foreign-key constraint
    """
    source: str
    target: str
    cardinality: str
    constraint_name: str


def classify(
    name: str,
    column_count: int,
    relationship_count: int,
    foreign_key_count: int = 0
) -> Classification:
    """
    Classify a table from its shape.

    Rules are tried in order:
    - more than 5 relationships and more than 8 columns: core
    - at most 4 columns and a name containing "type": lookup
    - at least 2 foreign keys and at most 6 columns: junction
    - anything else: data
    """
    if relationship_count > 5 and column_count > 8:
        return Classification.core
    if column_count <= 4 and _LOOKUP_NAME.search(name):
        return Classification.lookup
    if foreign_key_count >= 2 and column_count <= 6:
        return Classification.junction
    return Classification.data


def size_of(
    record_count: int,
    column_count: int,
    relationship_count: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> tuple[float, float]:
    """
    Card size for a table, monotonic in complexity and clamped to the max size.

    Returns:
        (width, height)
    """
    f = (
        math.log10(max(record_count, 1)) * 0.1
        + column_count * 0.02
        + relationship_count * 0.05
    )
    f = max(f, 0.0)
    width = min(config.base_width * (1 + f), config.max_width)
    height = min(config.base_height * (1 + f * 0.5), config.max_height)
    return width, height


def format_display_name(table_name: str) -> str:
    """Turn 'job_type' into 'Job Type'."""
    return ' '.join(word[:1].upper() + word[1:] for word in table_name.split('_') if word)


def parse_cardinality(value: Any) -> Cardinality:
    """
    Read a cardinality from loader input.

    The loader cannot currently tell relationship shapes apart, so anything
    missing or unrecognised is treated as one-to-many.
    """
    if isinstance(value, Cardinality):
        return value
    if value is not None:
        try:
            return Cardinality(str(value).strip().lower())
        except ValueError:
            logger.debug("Unrecognised cardinality %r, assuming 1:many", value)
    return Cardinality.one_to_many


@dataclass(frozen=True)
class Node:
    """
    Positioned table.

    x and y are the centre of the node's card. Size and classification are
    derived from the counts; build nodes through Node.create or with_counts
    so they never go stale.
    """
    id: str
    display_name: str
    record_count: int = 0
    column_count: int = 0
    relationship_count: int = 0
    foreign_key_count: int = 0
    classification: Classification = Classification.data
    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_CONFIG.base_width
    height: float = DEFAULT_CONFIG.base_height
    selected: bool = False
    highlighted: bool = False

    @classmethod
    def create(
        cls,
        id: str,
        display_name: Optional[str] = None,
        record_count: int = 0,
        column_count: int = 0,
        relationship_count: int = 0,
        foreign_key_count: int = 0,
        x: float = 0.0,
        y: float = 0.0,
        config: LayoutConfig = DEFAULT_CONFIG
    ) -> Node:
        """Build a node, deriving classification and size from the counts."""
        width, height = size_of(record_count, column_count, relationship_count, config)
        return cls(
            id=id,
            display_name=display_name or format_display_name(id),
            record_count=record_count,
            column_count=column_count,
            relationship_count=relationship_count,
            foreign_key_count=foreign_key_count,
            classification=classify(id, column_count, relationship_count, foreign_key_count),
            x=x,
            y=y,
            width=width,
            height=height,
        )

    def with_counts(self, config: LayoutConfig = DEFAULT_CONFIG, **counts: int) -> Node:
        """Copy with changed counts; classification and size are recomputed."""
        current = {
            'record_count': self.record_count,
            'column_count': self.column_count,
            'relationship_count': self.relationship_count,
            'foreign_key_count': self.foreign_key_count,
        }
        unknown = set(counts) - set(current)
        if unknown:
            raise TypeError(f"unknown count fields: {sorted(unknown)}")
        current.update(counts)
        width, height = size_of(
            current['record_count'], current['column_count'],
            current['relationship_count'], config
        )
        return replace(
            self,
            classification=classify(
                self.id, current['column_count'],
                current['relationship_count'], current['foreign_key_count']
            ),
            width=width,
            height=height,
            **current
        )

    def moved_to(self, x: float, y: float) -> Node:
        return replace(self, x=float(x), y=float(y))

    def bounds(self) -> Rectangle:
        return Rectangle.around(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Edge:
    """Directed relationship from the referencing table to the referenced one."""
    source: str
    target: str
    cardinality: Cardinality = Cardinality.one_to_many
    constraint_name: str = ''

    def is_self_loop(self) -> bool:
        return self.source == self.target


def _field(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first present field from a mapping or attribute-style object."""
    for name in names:
        if isinstance(obj, dict):
            if obj.get(name) is not None:
                return obj[name]
        elif getattr(obj, name, None) is not None:
            return getattr(obj, name)
    return default


def _to_edge(e: Union[Edge, EdgeInput, Any]) -> Optional[Edge]:
    if isinstance(e, Edge):
        return e
    source = _field(e, 'source', 'sourceId', 'source_id', 'sourceTable')
    target = _field(e, 'target', 'targetId', 'target_id', 'targetTable')
    if source is None or target is None:
        logger.warning("Dropping relationship without source or target: %r", e)
        return None
    return Edge(
        source=str(source),
        target=str(target),
        cardinality=parse_cardinality(_field(e, 'cardinality', 'relationshipType')),
        constraint_name=str(_field(e, 'constraint_name', 'constraintName', default='')),
    )


def _number(node_id: str, value: Any, cast: Callable[[Any], Any], name: str) -> Any:
    """Convert a numeric loader field, falling back to 0 for garbage."""
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Table %r has non-numeric %s %r, using 0", node_id, name, value)
        return cast(0)


def _to_node(
    n: Union[Node, NodeInput, Any],
    degree: dict[str, int],
    config: LayoutConfig
) -> Optional[Node]:
    if isinstance(n, Node):
        # derived fields of caller-built nodes may be stale
        return n.with_counts(config)
    node_id = _field(n, 'id', 'name')
    if node_id is None:
        logger.warning("Dropping table without an id: %r", n)
        return None
    node_id = str(node_id)
    relationship_count = _field(n, 'relationship_count', 'relationshipCount')
    if relationship_count is None:
        relationship_count = degree.get(node_id, 0)
    return Node.create(
        node_id,
        display_name=_field(n, 'display_name', 'displayName'),
        record_count=_number(
            node_id, _field(n, 'record_count', 'recordCount', default=0), int, 'record_count'
        ),
        column_count=_number(
            node_id, _field(n, 'column_count', 'columnCount', default=0), int, 'column_count'
        ),
        relationship_count=_number(node_id, relationship_count, int, 'relationship_count'),
        foreign_key_count=_number(
            node_id, _field(n, 'foreign_key_count', 'foreignKeyCount', default=0), int,
            'foreign_key_count'
        ),
        x=_number(node_id, _field(n, 'x', default=0.0), float, 'x'),
        y=_number(node_id, _field(n, 'y', default=0.0), float, 'y'),
        config=config,
    )


class SchemaGraph:
    """
    Validated set of tables and relationships.

    Edges referencing unknown tables are dropped with a logged warning so a
    single bad relationship never blanks the whole diagram. Derived topology
    is cached and shared with graphs built by with_nodes, which keep the
    same edge set.
    """

    def __init__(
        self,
        nodes: Iterable[Union[Node, NodeInput, Any]] = (),
        edges: Iterable[Union[Edge, EdgeInput, Any]] = (),
        config: LayoutConfig = DEFAULT_CONFIG
    ):
        raw_edges = [edge for edge in (_to_edge(e) for e in edges) if edge is not None]

        degree: dict[str, int] = {}
        for edge in raw_edges:
            degree[edge.source] = degree.get(edge.source, 0) + 1
            if not edge.is_self_loop():
                degree[edge.target] = degree.get(edge.target, 0) + 1

        built: list[Node] = []
        index: dict[str, int] = {}
        for n in nodes:
            node = _to_node(n, degree, config)
            if node is None:
                continue
            if node.id in index:
                logger.warning("Dropping duplicate table %r", node.id)
                continue
            index[node.id] = len(built)
            built.append(node)

        valid: list[Edge] = []
        for edge in raw_edges:
            missing = [end for end in (edge.source, edge.target) if end not in index]
            if missing:
                logger.warning(
                    "Dropping relationship %s (%s -> %s): unknown table %s",
                    edge.constraint_name or '<unnamed>', edge.source, edge.target,
                    ', '.join(repr(m) for m in missing)
                )
                continue
            valid.append(edge)

        self._nodes: tuple[Node, ...] = tuple(built)
        self._edges: tuple[Edge, ...] = tuple(valid)
        self._index = index
        self._adjacency: Optional[dict[str, tuple[str, ...]]] = None
        self._pairs: Optional[np.ndarray] = None
        self.config = config

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def index_of(self, node_id: str) -> int:
        """Index of a node in nodes; raises KeyError for unknown ids."""
        return self._index[node_id]

    def node(self, node_id: str) -> Node:
        return self._nodes[self._index[node_id]]

    def with_nodes(self, nodes: Iterable[Node]) -> SchemaGraph:
        """
        Graph with replaced node values and the same edges.

        The ids and their order must be unchanged; derived topology caches
        are shared.
        """
        nodes = tuple(nodes)
        if [n.id for n in nodes] != [n.id for n in self._nodes]:
            raise ValueError("with_nodes requires the same node ids in the same order")
        g = object.__new__(SchemaGraph)
        g._nodes = nodes
        g._edges = self._edges
        g._index = self._index
        g._adjacency = self.adjacency()
        g._pairs = self.force_pairs()
        g.config = self.config
        return g

    def adjacency(self) -> dict[str, tuple[str, ...]]:
        """
        Undirected neighbour lists keyed by node id.

        Every node has an entry, isolated ones map to an empty tuple.
        Neighbours appear once each, in edge order.
        """
        if self._adjacency is None:
            neighbours: dict[str, dict[str, None]] = {n.id: {} for n in self._nodes}
            for edge in self._edges:
                if edge.is_self_loop():
                    continue
                neighbours[edge.source][edge.target] = None
                neighbours[edge.target][edge.source] = None
            self._adjacency = {k: tuple(v) for k, v in neighbours.items()}
        return self._adjacency

    def force_pairs(self) -> np.ndarray:
        """
        Index pairs (i, j), i < j, one per connected unordered node pair.

        Parallel and reversed duplicates collapse into one pair and self-loops
        are skipped.

        Returns:
            Integer array of shape (m, 2)
        """
        if self._pairs is None:
            seen: dict[tuple[int, int], None] = {}
            for edge in self._edges:
                if edge.is_self_loop():
                    continue
                i = self._index[edge.source]
                j = self._index[edge.target]
                seen[(min(i, j), max(i, j))] = None
            pairs = np.array(list(seen), dtype=np.intp)
            self._pairs = pairs.reshape(-1, 2)
        return self._pairs

    def positions(self) -> np.ndarray:
        """Node centres as a (2, n) array."""
        x = np.array([[n.x for n in self._nodes], [n.y for n in self._nodes]], dtype=float)
        return x.reshape(2, len(self._nodes))

    def sizes(self) -> np.ndarray:
        """Node widths and heights as a (2, n) array."""
        s = np.array([[n.width for n in self._nodes], [n.height for n in self._nodes]], dtype=float)
        return s.reshape(2, len(self._nodes))

    def with_positions(self, x: np.ndarray) -> SchemaGraph:
        """Graph whose node centres are taken from a (2, n) array."""
        return self.with_nodes(
            n.moved_to(x[0, i], x[1, i]) for i, n in enumerate(self._nodes)
        )
