"""
schemagraph: layout engine for database schema diagrams

Tables and foreign-key relationships in, a readable non-overlapping 2D
layout out, plus the viewport and topology queries an interactive
diagram needs.
"""

__version__ = "0.1.0"

from .config import LayoutConfig, DEFAULT_CONFIG
from .graph import (
    Cardinality, Classification, Edge, EdgeInput, Node, NodeInput, SchemaGraph,
    classify, format_display_name, size_of
)
from .analysis import IntegrityIssue, MissingLink, check_integrity, detect_missing_links
from .filters import FilterState, apply_filters
from .layout import (
    EventType, LayoutEngine, LayoutMode, LayoutResult, LayoutState, RenderableEdge,
    apply_mode, build_layout, clear_highlight, drag_node, filter_layout, fit_to_view,
    highlight_neighbors, pan_by, relax, release, reset_view, select_node, to_result,
    trace_path, zoom_in, zoom_out
)
from .queries import neighbors_of, shortest_path
from .tiering import PseudoRandom, compute_rings, find_hub, seed_positions
from .viewport import Viewport

__all__ = [
    "Cardinality",
    "Classification",
    "DEFAULT_CONFIG",
    "Edge",
    "EdgeInput",
    "EventType",
    "FilterState",
    "IntegrityIssue",
    "LayoutConfig",
    "LayoutEngine",
    "LayoutMode",
    "LayoutResult",
    "LayoutState",
    "MissingLink",
    "Node",
    "NodeInput",
    "PseudoRandom",
    "RenderableEdge",
    "SchemaGraph",
    "Viewport",
    "apply_filters",
    "apply_mode",
    "build_layout",
    "check_integrity",
    "classify",
    "clear_highlight",
    "compute_rings",
    "detect_missing_links",
    "drag_node",
    "filter_layout",
    "find_hub",
    "fit_to_view",
    "format_display_name",
    "highlight_neighbors",
    "neighbors_of",
    "pan_by",
    "relax",
    "release",
    "reset_view",
    "seed_positions",
    "select_node",
    "shortest_path",
    "size_of",
    "to_result",
    "trace_path",
    "zoom_in",
    "zoom_out",
]
