"""
Axis-aligned rectangles for node bounds.

Provides the bounding-box arithmetic used by fit-to-view and the
border-clipped edge endpoints handed to the renderer for arrowheads.
"""

from __future__ import annotations

from typing import Optional
import math


class Point:
    """2D point."""

    def __init__(self, x: float = 0.0, y: float = 0.0):
        self.x = x
        self.y = y

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __repr__(self) -> str:
        return f"Point({self.x!r}, {self.y!r})"


class Rectangle:
    """Axis-aligned rectangle."""

    def __init__(self, x: float, X: float, y: float, Y: float):
        """
        Initialize rectangle.

        Args:
            x: Left edge
            X: Right edge
            y: Top edge (smaller y, screen convention)
            Y: Bottom edge
        """
        self.x = x
        self.X = X
        self.y = y
        self.Y = Y

    @staticmethod
    def empty() -> Rectangle:
        """Create an empty rectangle, the identity for union."""
        inf = float('inf')
        return Rectangle(inf, -inf, inf, -inf)

    @staticmethod
    def around(cx: float, cy: float, width: float, height: float) -> Rectangle:
        """Rectangle of the given size centred on (cx, cy)."""
        hw = width / 2.0
        hh = height / 2.0
        return Rectangle(cx - hw, cx + hw, cy - hh, cy + hh)

    def is_empty(self) -> bool:
        return self.x > self.X or self.y > self.Y

    def cx(self) -> float:
        """Get x center."""
        return (self.x + self.X) / 2.0

    def cy(self) -> float:
        """Get y center."""
        return (self.y + self.Y) / 2.0

    def width(self) -> float:
        return self.X - self.x

    def height(self) -> float:
        return self.Y - self.y

    def union(self, r: Rectangle) -> Rectangle:
        """Get union with another rectangle."""
        return Rectangle(
            min(self.x, r.x),
            max(self.X, r.X),
            min(self.y, r.y),
            max(self.Y, r.Y)
        )

    def inflate(self, pad: float) -> Rectangle:
        """Grow the rectangle by pad on every side."""
        return Rectangle(self.x - pad, self.X + pad, self.y - pad, self.Y + pad)

    def contains(self, r: Rectangle, eps: float = 1e-9) -> bool:
        """Check whether r lies entirely inside this rectangle."""
        return (
            self.x - eps <= r.x and r.X <= self.X + eps
            and self.y - eps <= r.y and r.Y <= self.Y + eps
        )

    def line_intersections(self, x1: float, y1: float, x2: float, y2: float) -> list[Point]:
        """
        Find intersections between a line segment and the rectangle sides.

        Args:
            x1, y1: First point of line
            x2, y2: Second point of line

        Returns:
            List of intersection points
        """
        sides = [
            (self.x, self.y, self.X, self.y),
            (self.X, self.y, self.X, self.Y),
            (self.X, self.Y, self.x, self.Y),
            (self.x, self.Y, self.x, self.y)
        ]
        intersections = []
        for side in sides:
            p = Rectangle.line_intersection(x1, y1, x2, y2, *side)
            if p is not None:
                intersections.append(p)
        return intersections

    def ray_intersection(self, x2: float, y2: float) -> Optional[Point]:
        """First intersection of the ray from the centre towards (x2, y2) with the border."""
        ints = self.line_intersections(self.cx(), self.cy(), x2, y2)
        return ints[0] if len(ints) > 0 else None

    @staticmethod
    def line_intersection(
        x1: float, y1: float, x2: float, y2: float,
        x3: float, y3: float, x4: float, y4: float
    ) -> Optional[Point]:
        """
        Find intersection of two line segments.

        Returns:
            Intersection point or None
        """
        dx12 = x2 - x1
        dx34 = x4 - x3
        dy12 = y2 - y1
        dy34 = y4 - y3
        denominator = dy34 * dx12 - dx34 * dy12

        if denominator == 0:
            return None

        dx31 = x1 - x3
        dy31 = y1 - y3
        a = (dx34 * dy31 - dy34 * dx31) / denominator
        b = (dx12 * dy31 - dy12 * dx31) / denominator

        if 0 <= a <= 1 and 0 <= b <= 1:
            return Point(x1 + a * dx12, y1 + a * dy12)

        return None


def make_edge_between(source: Rectangle, target: Rectangle, ah: float) -> dict[str, Point]:
    """
    Clip the centre-to-centre segment of an edge to both node borders.

    Args:
        source: Source node bounds
        target: Target node bounds
        ah: Arrow head length

    Returns:
        Dict with 'source', 'target' (border points) and 'arrow_start',
        the point ah units before the target border
    """
    si = source.ray_intersection(target.cx(), target.cy())
    if si is None:
        si = Point(source.cx(), source.cy())

    ti = target.ray_intersection(source.cx(), source.cy())
    if ti is None:
        ti = Point(target.cx(), target.cy())

    dx = ti.x - si.x
    dy = ti.y - si.y
    l = math.sqrt(dx * dx + dy * dy)
    if l == 0:
        return {'source': si, 'target': ti, 'arrow_start': Point(ti.x, ti.y)}

    al = max(l - ah, 0.0)
    return {
        'source': si,
        'target': ti,
        'arrow_start': Point(si.x + al * dx / l, si.y + al * dy / l)
    }
