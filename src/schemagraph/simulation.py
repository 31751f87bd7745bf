"""
Force simulation for schema layout.

Positions are (2, n) arrays. Each tick is a pure function from one position
array to the next:

1. springs pull the ends of every collapsed edge pair together while the
   pair is longer than the optimal edge length, and never push
2. every pair of nodes repels with strength / distance^2
3. the accumulated force, scaled by damping and a per-node movement factor,
   moves each node
4. one overlap-removal sweep separates cards that still collide

The run length is a fixed iteration count, there is no convergence test.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional
import logging

import numpy as np

from .config import DEFAULT_CONFIG, LayoutConfig
from .overlap import resolve_overlaps

logger = logging.getLogger(__name__)

TickListener = Callable[[int, np.ndarray], None]


class Locks:
    """
    Movement factors of nodes that must not move freely.

    The hub is damped to a fraction of normal movement; pinned nodes do not
    move at all. Both are immovable for overlap removal.
    """

    def __init__(self, n: int):
        self.n = n
        self.factors: dict[int, float] = {}

    def add(self, id: int, factor: float = 0.0) -> None:
        """
        Lock the node at index id.

        Args:
            id: Node index
            factor: Movement factor, 0 pins the node completely
        """
        self.factors[id] = min(self.factors.get(id, factor), factor)

    def clear(self) -> None:
        self.factors = {}

    def is_empty(self) -> bool:
        return len(self.factors) == 0

    def movement(self) -> np.ndarray:
        """Per-node movement factors, 1 for unlocked nodes."""
        m = np.ones(self.n)
        for i, factor in self.factors.items():
            m[i] = factor
        return m

    def immovable(self) -> np.ndarray:
        """Boolean mask of locked nodes."""
        mask = np.zeros(self.n, dtype=bool)
        for i in self.factors:
            mask[i] = True
        return mask


def make_locks(
    n: int,
    hub_index: Optional[int],
    pinned: Iterable[int] = (),
    config: LayoutConfig = DEFAULT_CONFIG
) -> Locks:
    """Locks for a hub anchor plus any pinned nodes."""
    locks = Locks(n)
    if hub_index is not None:
        locks.add(hub_index, config.hub_movement)
    for i in pinned:
        locks.add(i, 0.0)
    return locks


def compute_forces(x: np.ndarray, pairs: np.ndarray, config: LayoutConfig = DEFAULT_CONFIG) -> np.ndarray:
    """
    Net spring and repulsion force on every node.

    Distances are floored to 1 before they are used as divisors.

    Args:
        x: (2, n) node centres
        pairs: (m, 2) collapsed edge index pairs
        config: Force strengths and optimal edge length

    Returns:
        (2, n) force array
    """
    n = x.shape[1]
    f = np.zeros((2, n))
    if n == 0:
        return f

    pairs = np.asarray(pairs, dtype=np.intp).reshape(-1, 2)
    if len(pairs):
        s = pairs[:, 0]
        t = pairs[:, 1]
        dx = x[0, t] - x[0, s]
        dy = x[1, t] - x[1, s]
        d = np.maximum(np.hypot(dx, dy), 1.0)
        stretch = d - config.optimal_edge_length
        pull = np.where(stretch > 0, config.attraction_strength * stretch / d, 0.0)
        fx = dx / d * pull
        fy = dy / d * pull
        np.add.at(f[0], s, fx)
        np.add.at(f[1], s, fy)
        np.add.at(f[0], t, -fx)
        np.add.at(f[1], t, -fy)

    # dx[i, j] points from i to j
    dx = x[0][None, :] - x[0][:, None]
    dy = x[1][None, :] - x[1][:, None]
    d = np.maximum(np.hypot(dx, dy), 1.0)
    push = config.repulsion_strength / (d * d)
    np.fill_diagonal(push, 0.0)
    f[0] -= (dx / d * push).sum(axis=1)
    f[1] -= (dy / d * push).sum(axis=1)
    return f


def tick(
    x: np.ndarray,
    pairs: np.ndarray,
    widths: np.ndarray,
    locks: Optional[Locks] = None,
    config: LayoutConfig = DEFAULT_CONFIG
) -> np.ndarray:
    """
    Advance the simulation by one iteration.

    Args:
        x: (2, n) node centres, not modified
        pairs: (m, 2) collapsed edge index pairs
        widths: Length n node widths for overlap removal
        locks: Hub and pinned node movement factors
        config: Simulation parameters

    Returns:
        New (2, n) array of centres
    """
    n = x.shape[1]
    if locks is None:
        locks = Locks(n)
    f = compute_forces(x, pairs, config)
    moved = x + f * config.damping * locks.movement()
    return resolve_overlaps(moved, widths, config.min_separation, locks.immovable())


def simulate(
    x: np.ndarray,
    pairs: np.ndarray,
    widths: np.ndarray,
    locks: Optional[Locks] = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    iterations: Optional[int] = None,
    on_tick: Optional[TickListener] = None
) -> np.ndarray:
    """
    Run a fixed number of ticks from the given positions.

    Args:
        x: (2, n) starting centres, not modified
        pairs: (m, 2) collapsed edge index pairs
        widths: Length n node widths
        locks: Hub and pinned node movement factors
        config: Simulation parameters
        iterations: Tick count, config.iterations when omitted
        on_tick: Called with (iteration, positions) after every tick

    Returns:
        Final (2, n) array of centres
    """
    if iterations is None:
        iterations = config.iterations
    x = np.array(x, dtype=float, copy=True)
    for k in range(iterations):
        x = tick(x, pairs, widths, locks, config)
        if on_tick is not None:
            on_tick(k, x)
    logger.debug("Simulated %d nodes, %d edge pairs for %d ticks", x.shape[1], len(pairs), iterations)
    return x
