"""
Overlap removal between node cards.

A single relaxation sweep over all node pairs. Each push is applied
immediately so later pairs in the sweep see it; one sweep per simulation
tick leaves small residual overlaps that later ticks keep reducing.
"""

from __future__ import annotations

from typing import Optional
import math

import numpy as np

from .config import DEFAULT_CONFIG


def resolve_overlaps(
    x: np.ndarray,
    widths: np.ndarray,
    margin: float = DEFAULT_CONFIG.min_separation,
    immovable: Optional[np.ndarray] = None,
    passes: int = 1
) -> np.ndarray:
    """
    Push apart nodes whose centres are closer than (w_i + w_j) / 2 + margin.

    Both nodes move by half the shortfall along the line between their
    centres. An immovable node never moves and its partner takes the whole
    push; two immovable nodes are left alone. Coincident centres are split
    along the x axis.

    Args:
        x: (2, n) array of node centres, not modified
        widths: Length n array of node widths
        margin: Minimum gap between cards
        immovable: Optional boolean mask of nodes that must not move
        passes: Number of sweeps

    Returns:
        New (2, n) array of centres
    """
    x = np.array(x, dtype=float, copy=True)
    n = x.shape[1]
    if immovable is None:
        immovable = np.zeros(n, dtype=bool)
    px = x[0]
    py = x[1]
    w = [float(v) for v in widths]
    fixed = [bool(v) for v in immovable]

    for _ in range(passes):
        moved = False
        for i in range(n):
            for j in range(i + 1, n):
                if fixed[i] and fixed[j]:
                    continue
                dx = px[j] - px[i]
                dy = py[j] - py[i]
                distance = math.sqrt(dx * dx + dy * dy)
                min_distance = (w[i] + w[j]) / 2 + margin
                if distance >= min_distance:
                    continue
                if distance == 0:
                    ux, uy = 1.0, 0.0
                else:
                    ux, uy = dx / distance, dy / distance
                shortfall = min_distance - distance
                if fixed[i]:
                    push_i, push_j = 0.0, shortfall
                elif fixed[j]:
                    push_i, push_j = shortfall, 0.0
                else:
                    push_i = push_j = shortfall / 2
                px[i] -= ux * push_i
                py[i] -= uy * push_i
                px[j] += ux * push_j
                py[j] += uy * push_j
                moved = True
        if not moved:
            break
    return x


def count_overlaps(
    x: np.ndarray,
    widths: np.ndarray,
    margin: float = DEFAULT_CONFIG.min_separation,
    eps: float = 1e-6
) -> int:
    """Number of node pairs closer than the required separation."""
    x = np.asarray(x, dtype=float)
    n = x.shape[1]
    if n < 2:
        return 0
    d = np.hypot(x[0][:, None] - x[0][None, :], x[1][:, None] - x[1][None, :])
    w = np.asarray(widths, dtype=float)
    required = (w[:, None] + w[None, :]) / 2 + margin
    close = d < required - eps
    return int(np.count_nonzero(np.triu(close, k=1)))
