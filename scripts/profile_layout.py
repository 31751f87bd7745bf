"""
Profiling script for schemagraph layout performance analysis.

Profiles the layout modes and the drag re-run on random schemas to find
bottlenecks.
"""

import cProfile
import pstats
import io
from pstats import SortKey
import time

import numpy as np
from schemagraph import (
    FilterState, LayoutConfig, LayoutEngine, build_layout, drag_node, relax
)


def create_schema(n_tables, n_relationships, seed=42):
    """Create a random schema with n tables and about n_relationships foreign keys."""
    rng = np.random.default_rng(seed)
    nodes = [
        {
            'id': f"table_{i}",
            'record_count': int(rng.integers(0, 100000)),
            'column_count': int(rng.integers(2, 30)),
        }
        for i in range(n_tables)
    ]

    edges = []
    for k in range(n_relationships):
        source = int(rng.integers(0, n_tables))
        target = int(rng.integers(0, n_tables))
        if source != target:
            edges.append({
                'source': f"table_{source}",
                'target': f"table_{target}",
                'constraint_name': f"fk_{k}",
            })

    return nodes, edges


def profile_small_schema():
    """Profile a small schema (20 tables, 30 relationships)."""
    nodes, edges = create_schema(20, 30)
    build_layout(nodes, edges)


def profile_medium_schema():
    """Profile a medium schema (100 tables, 200 relationships)."""
    nodes, edges = create_schema(100, 200)
    build_layout(nodes, edges)


def profile_large_schema():
    """Profile a large schema (300 tables, 600 relationships)."""
    nodes, edges = create_schema(300, 600)
    build_layout(nodes, edges, config=LayoutConfig(iterations=30))


def profile_modes():
    """Profile hierarchical and circular placement."""
    nodes, edges = create_schema(100, 200)
    build_layout(nodes, edges, mode='hierarchical')
    build_layout(nodes, edges, mode='circular')


def profile_drag():
    """Profile repeated drags with re-simulation."""
    nodes, edges = create_schema(60, 100)
    state = build_layout(nodes, edges)
    for k in range(10):
        state = relax(drag_node(state, f"table_{k}", 100.0 * k, 50.0 * k))


def profile_engine():
    """Profile the engine with a tick listener and a filter pass."""
    nodes, edges = create_schema(80, 150)
    ticks = []
    engine = LayoutEngine().nodes(nodes).edges(edges).on('tick', ticks.append)
    engine.start()
    engine.apply_filters(FilterState(min_relationships=2))


def benchmark_scenario(name, func):
    """Benchmark a scenario and print timing."""
    print(f"\n{'='*60}")
    print(f"Profiling: {name}")
    print('='*60)

    # Create profiler
    profiler = cProfile.Profile()

    # Run with profiling
    start_time = time.time()
    profiler.enable()
    func()
    profiler.disable()
    elapsed = time.time() - start_time

    print(f"\nTotal time: {elapsed:.3f}s")

    # Print stats
    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats(SortKey.CUMULATIVE)
    ps.print_stats(20)  # Top 20 functions

    print("\nTop 20 functions by cumulative time:")
    print(s.getvalue())

    return profiler


def main():
    """Run all profiling scenarios."""
    print("schemagraph Performance Profiling")
    print("=" * 60)

    scenarios = [
        ("Small Schema (20 tables, 30 relationships)", profile_small_schema),
        ("Medium Schema (100 tables, 200 relationships)", profile_medium_schema),
        ("Large Schema (300 tables, 600 relationships)", profile_large_schema),
        ("Hierarchical and Circular (100 tables)", profile_modes),
        ("Drag Re-runs (60 tables, 10 drags)", profile_drag),
        ("Engine with Filters (80 tables)", profile_engine),
    ]

    profilers = {}
    for name, func in scenarios:
        profilers[name] = benchmark_scenario(name, func)

    # Save detailed profiles
    print("\n" + "="*60)
    print("Saving detailed profiles...")
    print("="*60)

    for name, profiler in profilers.items():
        filename = f"profile_{name.lower().replace(' ', '_').replace('(', '').replace(')', '').replace(',', '')}.prof"
        profiler.dump_stats(filename)
        print(f"Saved: {filename}")

    print("\nTo view detailed profile, use:")
    print("  python -m pstats <profile_file>")
    print("  then type 'stats' or 'sort cumulative' and 'stats 50'")


if __name__ == "__main__":
    main()
