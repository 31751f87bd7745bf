"""
Viewport transforms between world (layout) and screen coordinates.

screen = (world - pan) * zoom, so pan is the world point shown at the
top-left corner of the container.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from .config import DEFAULT_CONFIG, LayoutConfig
from .graph import Node
from .rectangle import Point, Rectangle


@dataclass(frozen=True)
class Viewport:
    """
    Attributes:
        zoom: Screen pixels per world unit
        pan_x: World x at the container's left edge
        pan_y: World y at the container's top edge
        width: Container width in pixels
        height: Container height in pixels
    """
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    width: float = DEFAULT_CONFIG.viewport_width
    height: float = DEFAULT_CONFIG.viewport_height

    @property
    def pan(self) -> Point:
        return Point(self.pan_x, self.pan_y)

    def centre(self) -> tuple[float, float]:
        """World point at the middle of the container."""
        return (self.pan_x + self.width / (2 * self.zoom), self.pan_y + self.height / (2 * self.zoom))

    def visible_rect(self) -> Rectangle:
        """World rectangle currently on screen."""
        return Rectangle(
            self.pan_x, self.pan_x + self.width / self.zoom,
            self.pan_y, self.pan_y + self.height / self.zoom
        )

    def world_to_screen(self, x: float, y: float) -> Point:
        return Point((x - self.pan_x) * self.zoom, (y - self.pan_y) * self.zoom)

    def screen_to_world(self, sx: float, sy: float) -> Point:
        return Point(sx / self.zoom + self.pan_x, sy / self.zoom + self.pan_y)

    def as_dict(self) -> dict:
        return {
            'zoom': self.zoom,
            'pan': {'x': self.pan_x, 'y': self.pan_y},
            'bounds': {'width': self.width, 'height': self.height},
        }


def _clamp_zoom(zoom: float, config: LayoutConfig) -> float:
    return max(config.min_zoom, min(zoom, config.max_zoom))


def zoom_in(viewport: Viewport, config: LayoutConfig = DEFAULT_CONFIG) -> Viewport:
    """Zoom in by one step, clamped to max_zoom."""
    return replace(viewport, zoom=_clamp_zoom(viewport.zoom * config.zoom_step, config))


def zoom_out(viewport: Viewport, config: LayoutConfig = DEFAULT_CONFIG) -> Viewport:
    """Zoom out by one step, clamped to min_zoom."""
    return replace(viewport, zoom=_clamp_zoom(viewport.zoom / config.zoom_step, config))


def reset_view(viewport: Viewport) -> Viewport:
    """Zoom 1 and no pan, keeping the container size."""
    return replace(viewport, zoom=1.0, pan_x=0.0, pan_y=0.0)


def pan_by(viewport: Viewport, dx: float, dy: float) -> Viewport:
    """
    Drag the view by a screen-space delta.

    Content follows the pointer, so the world origin moves opposite to it.
    """
    return replace(
        viewport,
        pan_x=viewport.pan_x - dx / viewport.zoom,
        pan_y=viewport.pan_y - dy / viewport.zoom
    )


def content_bounds(nodes: Iterable[Node]) -> Rectangle:
    """Union of all node cards, empty for no nodes."""
    bounds = Rectangle.empty()
    for n in nodes:
        bounds = bounds.union(n.bounds())
    return bounds


def fit_to_view(
    viewport: Viewport,
    nodes: Iterable[Node],
    container: Optional[tuple[float, float]] = None,
    config: LayoutConfig = DEFAULT_CONFIG
) -> Viewport:
    """
    Show all nodes, never zooming past 100%.

    The padded bounding box of every card decides the scale,
    min(container_w / w, container_h / h, 1), and its top-left corner
    becomes the pan.

    Args:
        viewport: Current viewport
        nodes: Nodes to show
        container: (width, height) override of the viewport's container size
        config: Fit padding

    Returns:
        New viewport, a reset one when there are no nodes; the viewport
        unchanged when the container has no area
    """
    if container is not None:
        if container[0] <= 0 or container[1] <= 0:
            return viewport
        viewport = replace(viewport, width=float(container[0]), height=float(container[1]))
    if viewport.width <= 0 or viewport.height <= 0:
        return viewport
    bounds = content_bounds(nodes)
    if bounds.is_empty():
        return reset_view(viewport)
    bounds = bounds.inflate(config.fit_padding)
    scale = min(viewport.width / bounds.width(), viewport.height / bounds.height(), 1.0)
    return replace(viewport, zoom=scale, pan_x=bounds.x, pan_y=bounds.y)
