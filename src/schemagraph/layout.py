"""
Schema layout state and engine.

This module provides:
- LayoutState, an immutable snapshot of one laid-out schema
- Pure update functions: full layout per mode, drag and re-simulate,
  selection, hover and path highlighting, viewport commands
- LayoutResult, the renderer-facing view of a state
- LayoutEngine, a fluent front end with start/tick/end events that pushes
  a fresh snapshot to listeners on every tick
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Callable, Iterable, Optional, TypedDict, Union
import logging
import math

import numpy as np

from .config import DEFAULT_CONFIG, LayoutConfig
from .graph import Cardinality, Edge, Node, SchemaGraph
from .filters import FilterState, apply_filters
from .overlap import resolve_overlaps
from .queries import neighbors_of, shortest_path
from .rectangle import Point, make_edge_between
from .simulation import make_locks, simulate
from .tiering import JitterSource, PseudoRandom, compute_rings, find_hub, seed_positions
from . import viewport as vp
from .viewport import Viewport

logger = logging.getLogger(__name__)

PositionsListener = Callable[[int, np.ndarray], None]

ARROW_HEAD = 10.0


class LayoutMode(str, Enum):
    """Layout strategies."""
    force = 'force'
    hierarchical = 'hierarchical'
    circular = 'circular'


class EventType(IntEnum):
    """
    The layout process fires three events:
    - start: a layout run started
    - tick: fired once per simulation iteration with the new snapshot
    - end: the run finished, the event carries the final snapshot
    """
    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event dictionary passed to event listeners."""
    type: EventType
    iteration: int
    state: LayoutState


@dataclass(frozen=True)
class LayoutState:
    """
    One laid-out schema.

    Attributes:
        graph: Nodes with positions and flags, and the valid edges
        hub: Anchor node id, None for an empty schema
        mode: Strategy used for the last full layout
        viewport: Current view transform
        config: Parameters used by every update
        pinned: Ids held in place by re-simulation
        highlighted_edges: Unordered id pairs of the highlighted relationships
    """
    graph: SchemaGraph
    hub: Optional[str]
    mode: LayoutMode = LayoutMode.force
    viewport: Viewport = field(default_factory=Viewport)
    config: LayoutConfig = DEFAULT_CONFIG
    pinned: frozenset[str] = frozenset()
    highlighted_edges: frozenset[frozenset[str]] = frozenset()

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self.graph.nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self.graph.edges

    def node(self, node_id: str) -> Node:
        return self.graph.node(node_id)

    def rings(self) -> dict[str, int]:
        """Ring index of every node, relative to the hub."""
        rings = compute_rings(self.graph, self.hub, self.config.max_ring)
        return {n.id: int(r) for n, r in zip(self.graph.nodes, rings)}

    def neighbors_of(self, node_id: str) -> set[str]:
        return neighbors_of(self.graph, node_id)

    def shortest_path(self, from_id: str, to_id: str) -> Optional[list[str]]:
        return shortest_path(self.graph, from_id, to_id)


@dataclass(frozen=True)
class RenderableEdge:
    """
    Edge geometry for the renderer.

    start and end are the points where the centre line crosses the source
    and target cards; the arrowhead spans arrow_start to end. path is an SVG
    cubic bezier between the card centres.
    """
    source: str
    target: str
    cardinality: Cardinality
    constraint_name: str
    start: Point
    end: Point
    arrow_start: Point
    path: str
    highlighted: bool = False


@dataclass(frozen=True)
class LayoutResult:
    nodes: tuple[Node, ...]
    edges: tuple[RenderableEdge, ...]
    viewport: Viewport
    mode: LayoutMode = LayoutMode.force
    hub: Optional[str] = None


def connection_path(source: Node, target: Node) -> str:
    """Horizontal-tangent cubic bezier between two card centres."""
    dx = target.x - source.x
    cp1x = source.x + dx * 0.3
    cp2x = target.x - dx * 0.3
    return (
        f"M {source.x:g} {source.y:g} "
        f"C {cp1x:g} {source.y:g}, {cp2x:g} {target.y:g}, {target.x:g} {target.y:g}"
    )


def _with_positions(state: LayoutState, x: np.ndarray) -> LayoutState:
    return replace(state, graph=state.graph.with_positions(x))


def _hub_index(state: LayoutState) -> Optional[int]:
    return state.graph.index_of(state.hub) if state.hub is not None else None


def _locks(state: LayoutState):
    pinned = [state.graph.index_of(p) for p in state.pinned if p in state.graph]
    return make_locks(len(state.graph), _hub_index(state), pinned, state.config)


def _force_positions(
    state: LayoutState,
    rng: JitterSource,
    on_tick: Optional[PositionsListener]
) -> np.ndarray:
    graph = state.graph
    x = seed_positions(graph, state.hub, state.viewport.centre(), rng, state.config)
    return simulate(
        x, graph.force_pairs(), graph.sizes()[0], _locks(state), state.config,
        on_tick=on_tick
    )


def _hierarchical_positions(state: LayoutState) -> np.ndarray:
    """
    Rows by ring, hub on top, each row centred under the hub.

    Row and column spacing grow with the widest card so that neighbouring
    cards already satisfy the minimum separation.
    """
    graph = state.graph
    config = state.config
    n = len(graph)
    x = np.zeros((2, n))
    rings = compute_rings(graph, state.hub, config.max_ring)
    widest = float(graph.sizes()[0].max())
    gap = widest + config.min_separation
    column = max(config.card_spacing, gap)
    row = max(config.level_spacing, gap)
    levels = sorted(set(int(r) for r in rings))
    cx, cy = state.viewport.centre()
    top = cy - (len(levels) - 1) * row / 2
    for k, level in enumerate(levels):
        members = [i for i in range(n) if rings[i] == level]
        left = cx - (len(members) - 1) * column / 2
        for j, i in enumerate(members):
            x[0, i] = left + j * column
            x[1, i] = top + k * row
    return x


def _circular_positions(state: LayoutState) -> np.ndarray:
    """
    Hub at the centre, every other node on one circle ordered by ring.

    The radius is the largest of the seeding radius of ring 1, the radius
    at which neighbouring cards stop colliding and the radius clearing the
    hub card.
    """
    graph = state.graph
    config = state.config
    n = len(graph)
    x = np.zeros((2, n))
    cx, cy = state.viewport.centre()
    hub = _hub_index(state)
    rings = compute_rings(graph, state.hub, config.max_ring)
    others = sorted((i for i in range(n) if i != hub), key=lambda i: (rings[i], i))
    if hub is not None:
        x[:, hub] = (cx, cy)
    if not others:
        return x
    widths = graph.sizes()[0]
    widest = float(widths[others].max())
    radius = config.base_radius + config.ring_spacing
    if len(others) > 1:
        radius = max(radius, (widest + config.min_separation) / (2 * math.sin(math.pi / len(others))))
    if hub is not None:
        radius = max(radius, (widths[hub] + widest) / 2 + config.min_separation)
    for k, i in enumerate(others):
        angle = k / len(others) * 2 * math.pi
        x[0, i] = cx + math.cos(angle) * radius
        x[1, i] = cy + math.sin(angle) * radius
    return x


def apply_mode(
    state: LayoutState,
    mode: Union[LayoutMode, str, None] = None,
    rng: Optional[JitterSource] = None,
    seed: int = 1,
    on_tick: Optional[PositionsListener] = None
) -> LayoutState:
    """
    Full layout from scratch in the given mode.

    Every position is reseeded and pins are released. Force mode seeds
    by ring and simulates, hierarchical and circular place nodes
    directly and finish with one overlap sweep.

    Args:
        state: State to lay out
        mode: Target mode, the state's current mode when omitted
        rng: Jitter source for force seeding, PseudoRandom(seed) when omitted
        seed: Seed of the default jitter source
        on_tick: Receives (iteration, positions) after every simulation tick
    """
    mode = LayoutMode(mode) if mode is not None else state.mode
    state = replace(state, mode=mode, pinned=frozenset())
    if len(state.graph) == 0:
        return state
    if mode == LayoutMode.force:
        x = _force_positions(state, rng or PseudoRandom(seed), on_tick)
    else:
        if mode == LayoutMode.hierarchical:
            x = _hierarchical_positions(state)
        else:
            x = _circular_positions(state)
        locks = _locks(state)
        x = resolve_overlaps(x, state.graph.sizes()[0], state.config.min_separation, locks.immovable())
    logger.debug("Applied %s layout to %d tables", mode.value, len(state.graph))
    return _with_positions(state, x)


def build_layout(
    nodes: Iterable[Any],
    edges: Iterable[Any],
    mode: Union[LayoutMode, str] = LayoutMode.force,
    hub: Optional[str] = None,
    config: LayoutConfig = DEFAULT_CONFIG,
    viewport: Optional[Viewport] = None,
    rng: Optional[JitterSource] = None,
    seed: int = 1,
    on_tick: Optional[PositionsListener] = None
) -> LayoutState:
    """
    Lay out a freshly loaded schema.

    Args:
        nodes: NodeInput mappings, objects with the same fields, or Nodes
        edges: EdgeInput mappings, objects with the same fields, or Edges
        mode: Layout strategy
        hub: Preferred hub id; picked from the graph when omitted or unknown
        config: Layout parameters
        viewport: Initial view, a default-sized one when omitted
        rng: Jitter source for force seeding
        seed: Seed of the default jitter source
        on_tick: Receives (iteration, positions) after every simulation tick

    Returns:
        Laid-out state; an empty one for an empty schema
    """
    graph = SchemaGraph(nodes, edges, config)
    if viewport is None:
        viewport = Viewport(width=config.viewport_width, height=config.viewport_height)
    state = LayoutState(
        graph=graph,
        hub=find_hub(graph, hub),
        mode=LayoutMode(mode),
        viewport=viewport,
        config=config,
    )
    return apply_mode(state, rng=rng, seed=seed, on_tick=on_tick)


def filter_layout(
    state: LayoutState,
    filters: FilterState,
    rng: Optional[JitterSource] = None,
    seed: int = 1,
    on_tick: Optional[PositionsListener] = None
) -> LayoutState:
    """
    Lay out the subset of a schema that passes the filters.

    The hub is kept when it survives the filters and picked again otherwise.
    """
    graph = apply_filters(state.graph, filters)
    filtered = replace(state, graph=graph, hub=find_hub(graph, state.hub), pinned=frozenset())
    return apply_mode(filtered, rng=rng, seed=seed, on_tick=on_tick)


def drag_node(state: LayoutState, node_id: str, x: float, y: float, pin: bool = True) -> LayoutState:
    """
    Move one node's centre, optionally pinning it for later re-simulation.

    Unknown ids leave the state unchanged.
    """
    if node_id not in state.graph:
        logger.warning("Ignoring drag of unknown table %r", node_id)
        return state
    graph = state.graph
    nodes = tuple(n.moved_to(x, y) if n.id == node_id else n for n in graph.nodes)
    pinned = state.pinned | {node_id} if pin else state.pinned
    return replace(state, graph=graph.with_nodes(nodes), pinned=pinned)


def release(state: LayoutState, node_id: Optional[str] = None) -> LayoutState:
    """Unpin one node, or every node when node_id is None."""
    if node_id is None:
        return replace(state, pinned=frozenset())
    return replace(state, pinned=state.pinned - {node_id})


def relax(
    state: LayoutState,
    iterations: Optional[int] = None,
    on_tick: Optional[PositionsListener] = None
) -> LayoutState:
    """
    Re-simulate from the current positions without reseeding.

    In force mode this runs drag_iterations ticks (or iterations when
    given); the other modes only get one overlap sweep so their structure
    survives. Pinned nodes and the hub stay put during overlap removal.
    """
    if len(state.graph) == 0:
        return state
    x = state.graph.positions()
    widths = state.graph.sizes()[0]
    locks = _locks(state)
    if state.mode == LayoutMode.force:
        if iterations is None:
            iterations = state.config.drag_iterations
        x = simulate(
            x, state.graph.force_pairs(), widths, locks, state.config,
            iterations=iterations, on_tick=on_tick
        )
    else:
        x = resolve_overlaps(x, widths, state.config.min_separation, locks.immovable())
    return _with_positions(state, x)


def _set_flags(state: LayoutState, selected=None, highlighted=None, edges=None) -> LayoutState:
    nodes = []
    for n in state.graph.nodes:
        changes = {}
        if selected is not None:
            changes['selected'] = n.id in selected
        if highlighted is not None:
            changes['highlighted'] = n.id in highlighted
        nodes.append(replace(n, **changes) if changes else n)
    state = replace(state, graph=state.graph.with_nodes(nodes))
    if edges is not None:
        state = replace(state, highlighted_edges=frozenset(edges))
    return state


def select_node(state: LayoutState, node_id: Optional[str]) -> LayoutState:
    """Mark one node selected, or clear the selection with None."""
    return _set_flags(state, selected={node_id} if node_id is not None else set())


def highlight_neighbors(state: LayoutState, node_id: Optional[str]) -> LayoutState:
    """
    Highlight a hovered node, its direct neighbours and the relationships
    touching it; None clears.
    """
    if node_id is None:
        return clear_highlight(state)
    touching = (
        frozenset((e.source, e.target)) for e in state.graph.edges
        if node_id in (e.source, e.target)
    )
    return _set_flags(state, highlighted=neighbors_of(state.graph, node_id), edges=touching)


def trace_path(state: LayoutState, from_id: str, to_id: str) -> tuple[LayoutState, Optional[list[str]]]:
    """
    Highlight the shortest chain between two nodes.

    Returns:
        (new state, path); when there is no path highlighting is cleared
        and path is None
    """
    path = shortest_path(state.graph, from_id, to_id)
    steps = [frozenset(pair) for pair in zip(path, path[1:])] if path else []
    return _set_flags(state, highlighted=set(path or ()), edges=steps), path


def clear_highlight(state: LayoutState) -> LayoutState:
    return _set_flags(state, highlighted=set(), edges=())


def zoom_in(state: LayoutState) -> LayoutState:
    return replace(state, viewport=vp.zoom_in(state.viewport, state.config))


def zoom_out(state: LayoutState) -> LayoutState:
    return replace(state, viewport=vp.zoom_out(state.viewport, state.config))


def pan_by(state: LayoutState, dx: float, dy: float) -> LayoutState:
    return replace(state, viewport=vp.pan_by(state.viewport, dx, dy))


def reset_view(state: LayoutState) -> LayoutState:
    return replace(state, viewport=vp.reset_view(state.viewport))


def fit_to_view(state: LayoutState, container: Optional[tuple[float, float]] = None) -> LayoutState:
    """Fit every node into the viewport's container, or into container."""
    return replace(state, viewport=vp.fit_to_view(state.viewport, state.graph.nodes, container, state.config))


def to_result(state: LayoutState) -> LayoutResult:
    """Renderer view of a state: positioned nodes, edge geometry and viewport."""
    edges = []
    for e in state.graph.edges:
        source = state.graph.node(e.source)
        target = state.graph.node(e.target)
        ends = make_edge_between(source.bounds(), target.bounds(), ARROW_HEAD)
        edges.append(RenderableEdge(
            source=e.source,
            target=e.target,
            cardinality=e.cardinality,
            constraint_name=e.constraint_name,
            start=ends['source'],
            end=ends['target'],
            arrow_start=ends['arrow_start'],
            path=connection_path(source, target),
            highlighted=frozenset((e.source, e.target)) in state.highlighted_edges,
        ))
    return LayoutResult(
        nodes=state.graph.nodes,
        edges=tuple(edges),
        viewport=state.viewport,
        mode=state.mode,
        hub=state.hub,
    )


class LayoutEngine:
    """
    Fluent front end over the pure layout functions.

    The engine owns the current LayoutState and replaces it after every
    operation. Listeners registered with on() get start, tick and end
    events; tick events carry a snapshot of the state after that tick.
    """

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG):
        self._config = config
        self._nodes: list[Any] = []
        self._edges: list[Any] = []
        self._mode = LayoutMode.force
        self._hub: Optional[str] = None
        self._seed = 1
        self._container = (config.viewport_width, config.viewport_height)
        self._state: Optional[LayoutState] = None

        # Event system - can be overridden by subclasses
        self.event: Optional[dict] = None

    def on(self, e: Union[EventType, str], listener: Callable[[Event], None]) -> LayoutEngine:
        """
        Subscribe a listener to an event.

        Args:
            e: Event type (EventType enum or string name)
            listener: Function to call when event fires

        Returns:
            self for method chaining
        """
        if self.event is None:
            self.event = {}
        if isinstance(e, str):
            e = EventType[e]
        self.event[e] = listener
        return self

    def trigger(self, e: Event) -> None:
        """Call the listener registered for the event's type, if any."""
        if self.event and e['type'] in self.event:
            self.event[e['type']](e)

    def _option(self, name: str, v: Any) -> Any:
        if v is None:
            return getattr(self, name)
        setattr(self, name, v)
        return self

    def nodes(self, v: Optional[list] = None) -> Union[list, LayoutEngine]:
        """Get or set the loader's table list."""
        return self._option('_nodes', None if v is None else list(v))

    def edges(self, v: Optional[list] = None) -> Union[list, LayoutEngine]:
        """Get or set the loader's relationship list."""
        return self._option('_edges', None if v is None else list(v))

    def mode(self, v: Union[LayoutMode, str, None] = None) -> Union[LayoutMode, LayoutEngine]:
        """Get or set the layout mode used by start()."""
        return self._option('_mode', None if v is None else LayoutMode(v))

    def hub(self, v: Optional[str] = None) -> Union[Optional[str], LayoutEngine]:
        """Get or set the preferred hub id."""
        return self._option('_hub', v)

    def seed(self, v: Optional[int] = None) -> Union[int, LayoutEngine]:
        """Get or set the jitter seed."""
        return self._option('_seed', v)

    def config(self, v: Optional[LayoutConfig] = None) -> Union[LayoutConfig, LayoutEngine]:
        """Get or set the layout parameters."""
        return self._option('_config', v)

    def size(self, v: Optional[tuple[float, float]] = None) -> Union[tuple[float, float], LayoutEngine]:
        """Get or set the container size in pixels."""
        return self._option('_container', None if v is None else (float(v[0]), float(v[1])))

    @property
    def state(self) -> Optional[LayoutState]:
        return self._state

    def _tick_listener(self, state: LayoutState) -> Optional[PositionsListener]:
        if not self.event or EventType.tick not in self.event:
            return None

        def on_tick(iteration: int, x: np.ndarray) -> None:
            self.trigger({'type': EventType.tick, 'iteration': iteration, 'state': _with_positions(state, x)})

        return on_tick

    def _run(self, state: LayoutState, step: Callable[[Optional[PositionsListener]], LayoutState]) -> LayoutState:
        self.trigger({'type': EventType.start, 'iteration': 0, 'state': state})
        self._state = step(self._tick_listener(state))
        self.trigger({'type': EventType.end, 'iteration': 0, 'state': self._state})
        return self._state

    def start(self) -> LayoutState:
        """Build the graph from the current inputs and lay it out from scratch."""
        graph = SchemaGraph(self._nodes, self._edges, self._config)
        state = LayoutState(
            graph=graph,
            hub=find_hub(graph, self._hub),
            mode=self._mode,
            viewport=Viewport(width=self._container[0], height=self._container[1]),
            config=self._config,
        )
        return self._run(state, lambda on_tick: apply_mode(state, seed=self._seed, on_tick=on_tick))

    def _require_state(self) -> LayoutState:
        if self._state is None:
            raise RuntimeError("Must call start() before updating the layout")
        return self._state

    def set_mode(self, mode: Union[LayoutMode, str]) -> LayoutState:
        """Switch mode and reseed every position."""
        state = self._require_state()
        self._mode = LayoutMode(mode)
        return self._run(state, lambda on_tick: apply_mode(state, self._mode, seed=self._seed, on_tick=on_tick))

    def drag(self, node_id: str, x: float, y: float) -> LayoutState:
        """Move a node, pin it, and re-simulate around it."""
        state = self._require_state()
        if node_id not in state.graph:
            return drag_node(state, node_id, x, y)
        state = drag_node(state, node_id, x, y)
        return self._run(state, lambda on_tick: relax(state, on_tick=on_tick))

    def apply_filters(self, filters: FilterState) -> LayoutState:
        """
        Lay out only the loaded tables that pass the filters.

        Filtering always starts from the loaded tables and the hub start()
        would pick, so clearing the filters restores the unfiltered layout.
        """
        graph = SchemaGraph(self._nodes, self._edges, self._config)
        state = replace(self._require_state(), graph=graph, hub=find_hub(graph, self._hub))
        return self._run(
            state, lambda on_tick: filter_layout(state, filters, seed=self._seed, on_tick=on_tick)
        )

    def result(self) -> LayoutResult:
        return to_result(self._require_state())
