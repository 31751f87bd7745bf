"""
Layout configuration.

All tunable constants of the engine live on one frozen dataclass so a
caller can derive variants without touching shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace, fields


@dataclass(frozen=True)
class LayoutConfig:
    """
    Tunable parameters for seeding, simulation, overlap removal and viewport.

    Attributes:
        iterations: Number of simulation ticks for a full layout
        drag_iterations: Number of ticks re-run after a manual drag
        attraction_strength: Spring constant along edges
        repulsion_strength: Numerator of the inverse-square repulsion
        damping: Scale applied to accumulated force before it moves a node
        optimal_edge_length: Edges shorter than this never pull
        hub_movement: Movement factor of the hub during simulation
        min_separation: Margin kept between node boxes by the overlap resolver
        max_ring: Cap on BFS ring index used for seeding
        base_radius: Seed radius of ring 0
        ring_spacing: Radial distance between consecutive rings
        seed_jitter: Maximum absolute seed jitter on each axis
        zoom_step: Multiplier for one zoom in/out step
        min_zoom: Lower zoom clamp
        max_zoom: Upper zoom clamp
        fit_padding: Padding around content for fit-to-view
        base_width: Width of the smallest node
        base_height: Height of the smallest node
        max_width: Width cap for large nodes
        max_height: Height cap for large nodes
        level_spacing: Vertical spacing between rows in hierarchical mode
        card_spacing: Horizontal spacing between nodes in hierarchical mode
        viewport_width: Default viewport width
        viewport_height: Default viewport height
    """

    iterations: int = 100
    drag_iterations: int = 20
    attraction_strength: float = 2.0
    repulsion_strength: float = 8000.0
    damping: float = 0.85
    optimal_edge_length: float = 250.0
    hub_movement: float = 0.1
    min_separation: float = 50.0
    max_ring: int = 4
    base_radius: float = 200.0
    ring_spacing: float = 150.0
    seed_jitter: float = 50.0
    zoom_step: float = 1.2
    min_zoom: float = 0.1
    max_zoom: float = 3.0
    fit_padding: float = 100.0
    base_width: float = 200.0
    base_height: float = 120.0
    max_width: float = 350.0
    max_height: float = 200.0
    level_spacing: float = 250.0
    card_spacing: float = 300.0
    viewport_width: float = 1200.0
    viewport_height: float = 800.0

    def __post_init__(self):
        if self.iterations < 0 or self.drag_iterations < 0:
            raise ValueError("iteration counts must be non-negative")
        if self.max_ring < 0:
            raise ValueError(f"max_ring must be non-negative, got {self.max_ring}")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must lie in [0, 1], got {self.damping}")
        if not 0.0 <= self.hub_movement <= 1.0:
            raise ValueError(f"hub_movement must lie in [0, 1], got {self.hub_movement}")
        if not 0.0 < self.min_zoom <= self.max_zoom:
            raise ValueError(
                f"zoom bounds must satisfy 0 < min_zoom <= max_zoom, "
                f"got [{self.min_zoom}, {self.max_zoom}]"
            )
        if self.zoom_step <= 1.0:
            raise ValueError(f"zoom_step must be greater than 1, got {self.zoom_step}")
        if self.base_width > self.max_width or self.base_height > self.max_height:
            raise ValueError("base node size must not exceed max node size")
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")

    def replace(self, **changes) -> LayoutConfig:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


DEFAULT_CONFIG = LayoutConfig()
