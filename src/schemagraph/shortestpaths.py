"""
Hop-count shortest paths over the schema graph.

Breadth-first search is delegated to scipy.sparse.csgraph, which works on
a symmetric sparse adjacency matrix built once per edge set.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import breadth_first_order, shortest_path

# scipy marks "no predecessor" with this value
_NO_PREDECESSOR = -9999


class Calculator:
    """
    Unweighted shortest paths between node indices.

    Args:
        n: Number of nodes
        pairs: Integer array of shape (m, 2) with undirected index pairs
    """

    def __init__(self, n: int, pairs: np.ndarray):
        self.n = n
        pairs = np.asarray(pairs, dtype=np.intp).reshape(-1, 2)
        rows = np.concatenate([pairs[:, 0], pairs[:, 1]])
        cols = np.concatenate([pairs[:, 1], pairs[:, 0]])
        data = np.ones(len(rows), dtype=float)
        self.graph = csr_matrix((data, (rows, cols)), shape=(n, n))

    def distances_from_node(self, start: int) -> np.ndarray:
        """
        Hop distance from start to every node.

        Returns:
            Float array of length n, inf for unreachable nodes
        """
        if self.n == 0:
            return np.zeros(0)
        d = shortest_path(self.graph, directed=False, unweighted=True, indices=start)
        return np.asarray(d).reshape(self.n)

    def path_from_node_to_node(self, start: int, end: int) -> Optional[list[int]]:
        """
        Indices on a shortest path from start to end, both included.

        Returns:
            The path, [start] when start == end, None when end is unreachable
        """
        if start == end:
            return [start]
        _, predecessors = breadth_first_order(
            self.graph, start, directed=False, return_predecessors=True
        )
        if predecessors[end] == _NO_PREDECESSOR:
            return None
        path = [end]
        while path[-1] != start:
            path.append(int(predecessors[path[-1]]))
        path.reverse()
        return path
