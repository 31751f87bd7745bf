"""
Distance tiering and radial seeding.

Every node gets a ring index, its BFS hop count from the hub, and is seeded
on a circle whose radius grows with the ring. The seed is a pure function of
the graph, the hub, the config and the jitter source.
"""

from __future__ import annotations

from typing import Optional, Protocol
import math

import numpy as np

from .config import DEFAULT_CONFIG, LayoutConfig
from .graph import Classification, SchemaGraph
from .shortestpaths import Calculator


class JitterSource(Protocol):
    """Anything that can produce uniform reals in a range."""

    def get_next_between(self, min_val: float, max_val: float) -> float: ...


class PseudoRandom:
    """Linear congruential pseudo random number generator."""

    def __init__(self, seed: int = 1):
        self.seed = seed
        self.a = 214013
        self.c = 2531011
        self.m = 2147483648
        self.range = 32767

    def get_next(self) -> float:
        """Get random real between 0 and 1."""
        self.seed = (self.seed * self.a + self.c) % self.m
        return (self.seed >> 16) / self.range

    def get_next_between(self, min_val: float, max_val: float) -> float:
        """Get random real between min and max."""
        return min_val + self.get_next() * (max_val - min_val)


def find_hub(graph: SchemaGraph, preferred: Optional[str] = None) -> Optional[str]:
    """
    Pick the anchor node.

    The preferred id wins when it is in the graph. Otherwise the core table
    with the most relationships, otherwise the table with the most
    relationships. Ties go to the earliest node.

    Returns:
        Node id, or None for an empty graph
    """
    if preferred is not None and preferred in graph:
        return preferred
    if len(graph) == 0:
        return None
    core = [n for n in graph.nodes if n.classification == Classification.core]
    candidates = core or list(graph.nodes)
    best = candidates[0]
    for n in candidates[1:]:
        if n.relationship_count > best.relationship_count:
            best = n
    return best.id


def compute_rings(graph: SchemaGraph, hub: Optional[str], max_ring: int = DEFAULT_CONFIG.max_ring) -> np.ndarray:
    """
    Ring index of every node.

    Rings are hop counts from the hub capped at max_ring; nodes that cannot
    reach the hub get max_ring + 1.

    Returns:
        Integer array aligned with graph.nodes
    """
    n = len(graph)
    if n == 0 or hub is None:
        return np.full(n, max_ring + 1, dtype=int)
    calc = Calculator(n, graph.force_pairs())
    d = calc.distances_from_node(graph.index_of(hub))
    rings = np.full(n, max_ring + 1, dtype=int)
    reachable = np.isfinite(d)
    rings[reachable] = np.minimum(d[reachable], max_ring).astype(int)
    return rings


def seed_positions(
    graph: SchemaGraph,
    hub: Optional[str],
    centre: tuple[float, float],
    rng: Optional[JitterSource] = None,
    config: LayoutConfig = DEFAULT_CONFIG
) -> np.ndarray:
    """
    Initial node centres.

    The hub sits on the centre. Node i of n sits at
    angle = i / n * 2pi + ring * 0.5 and radius = base_radius + ring * ring_spacing,
    with unreachable nodes placed on the outermost ring, plus jitter in
    [-seed_jitter, seed_jitter] on each axis.

    Args:
        graph: Graph to seed
        hub: Anchor id, or None
        centre: (x, y) of the hub
        rng: Jitter source, a fresh PseudoRandom() when omitted
        config: Seeding radii and jitter

    Returns:
        (2, n) array of positions
    """
    if rng is None:
        rng = PseudoRandom()
    n = len(graph)
    x = np.zeros((2, n))
    rings = np.minimum(compute_rings(graph, hub, config.max_ring), config.max_ring)
    hub_index = graph.index_of(hub) if hub is not None else -1
    cx, cy = centre
    jitter = config.seed_jitter
    for i in range(n):
        if i == hub_index:
            x[0, i] = cx
            x[1, i] = cy
            continue
        ring = int(rings[i])
        angle = (i / n) * 2 * math.pi + ring * 0.5
        radius = config.base_radius + ring * config.ring_spacing
        x[0, i] = cx + math.cos(angle) * radius + rng.get_next_between(-jitter, jitter)
        x[1, i] = cy + math.sin(angle) * radius + rng.get_next_between(-jitter, jitter)
    return x
