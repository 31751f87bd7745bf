"""Tests for distance tiering and seeding."""

import math

import pytest
import numpy as np
from schemagraph.config import DEFAULT_CONFIG
from schemagraph.graph import Node, SchemaGraph
from schemagraph.tiering import PseudoRandom, compute_rings, find_hub, seed_positions


def chain(*ids):
    """Graph of tables connected one after another."""
    nodes = [{'id': i} for i in ids]
    edges = [{'source': a, 'target': b} for a, b in zip(ids, ids[1:])]
    return SchemaGraph(nodes, edges)


class ZeroJitter:
    """Jitter source that never jitters."""

    def __init__(self):
        self.calls = 0

    def get_next_between(self, min_val, max_val):
        self.calls += 1
        return 0.0


class TestPseudoRandom:
    """Test PseudoRandom class."""

    def test_create_prng(self):
        """Test PRNG creation."""
        prng = PseudoRandom(seed=42)
        assert prng.seed == 42

    def test_deterministic_sequence(self):
        """Test that same seed produces same sequence."""
        prng1 = PseudoRandom(seed=42)
        prng2 = PseudoRandom(seed=42)

        for _ in range(10):
            assert prng1.get_next() == prng2.get_next()

    def test_get_next_between(self):
        """Test get_next_between range."""
        prng = PseudoRandom()

        for _ in range(100):
            val = prng.get_next_between(-50.0, 50.0)
            assert -50.0 <= val <= 50.0


class TestFindHub:
    """Test hub selection."""

    def test_preferred(self):
        """Test an explicit hub wins."""
        g = chain('a', 'b', 'c')
        assert find_hub(g, 'c') == 'c'

    def test_unknown_preferred_ignored(self):
        """Test an unknown preferred id falls back to the heuristics."""
        g = SchemaGraph([{'id': 'a', 'relationship_count': 1},
                         {'id': 'b', 'relationship_count': 3}], [])
        assert find_hub(g, 'zzz') == 'b'

    def test_core_preferred_over_busier_data_table(self):
        """Test a core table beats a data table with more relationships."""
        g = SchemaGraph([
            {'id': 'busy', 'column_count': 5, 'relationship_count': 9},
            {'id': 'core', 'column_count': 10, 'relationship_count': 6},
        ], [])
        assert find_hub(g) == 'core'

    def test_most_relationships(self):
        """Test the busiest table is the hub when none is core."""
        g = SchemaGraph([
            {'id': 'a', 'relationship_count': 1},
            {'id': 'b', 'relationship_count': 4},
            {'id': 'c', 'relationship_count': 4},
        ], [])
        assert find_hub(g) == 'b'

    def test_empty(self):
        """Test no hub for no tables."""
        assert find_hub(SchemaGraph()) is None


class TestComputeRings:
    """Test BFS ring assignment."""

    def test_chain(self):
        """Test rings along A-B-C-D from A."""
        g = chain('A', 'B', 'C', 'D')
        assert list(compute_rings(g, 'A')) == [0, 1, 2, 3]

    def test_hub_in_middle(self):
        """Test rings from an inner hub."""
        g = chain('A', 'B', 'C', 'D')
        assert list(compute_rings(g, 'C')) == [2, 1, 0, 1]

    def test_capped(self):
        """Test rings stop growing at max_ring."""
        g = chain('a', 'b', 'c', 'd', 'e', 'f', 'g')
        assert list(compute_rings(g, 'a', max_ring=4)) == [0, 1, 2, 3, 4, 4, 4]

    def test_unreachable(self):
        """Test isolated tables get max_ring + 1."""
        g = SchemaGraph([{'id': 'a'}, {'id': 'b'}, {'id': 'lonely'}],
                        [{'source': 'a', 'target': 'b'}])
        assert list(compute_rings(g, 'a')) == [0, 1, 5]

    def test_no_hub(self):
        """Test every node is unreachable without a hub."""
        g = chain('a', 'b')
        assert list(compute_rings(g, None)) == [5, 5]

    def test_duplicate_edges_do_not_shorten(self):
        """Test collapsed duplicates still count as one hop."""
        g = SchemaGraph([{'id': 'a'}, {'id': 'b'}],
                        [{'source': 'a', 'target': 'b'}, {'source': 'b', 'target': 'a'}])
        assert list(compute_rings(g, 'a')) == [0, 1]


class TestSeedPositions:
    """Test radial seeding."""

    def test_hub_at_centre(self):
        """Test the hub is placed exactly on the centre."""
        g = chain('a', 'b', 'c')
        x = seed_positions(g, 'b', (600.0, 400.0), PseudoRandom(7))
        assert (x[0, 1], x[1, 1]) == (600.0, 400.0)

    def test_ring_geometry(self):
        """Test angle and radius without jitter."""
        g = chain('hub', 'n1', 'n2')
        x = seed_positions(g, 'hub', (0.0, 0.0), ZeroJitter())

        # node 1 of 3, ring 1
        angle = (1 / 3) * 2 * math.pi + 0.5
        radius = 200 + 150
        assert x[0, 1] == pytest.approx(math.cos(angle) * radius)
        assert x[1, 1] == pytest.approx(math.sin(angle) * radius)

        # node 2 of 3, ring 2
        angle = (2 / 3) * 2 * math.pi + 1.0
        radius = 200 + 300
        assert x[0, 2] == pytest.approx(math.cos(angle) * radius)
        assert x[1, 2] == pytest.approx(math.sin(angle) * radius)

    def test_unreachable_on_outer_ring(self):
        """Test unreachable nodes use the outermost ring radius."""
        g = SchemaGraph([{'id': 'hub'}, {'id': 'lonely'}], [])
        x = seed_positions(g, 'hub', (0.0, 0.0), ZeroJitter())
        radius = math.hypot(x[0, 1], x[1, 1])
        assert radius == pytest.approx(200 + 4 * 150)

    def test_jitter_bounded(self):
        """Test jitter stays within seed_jitter on each axis."""
        g = chain('hub', 'n1', 'n2', 'n3')
        plain = seed_positions(g, 'hub', (0.0, 0.0), ZeroJitter())
        jittered = seed_positions(g, 'hub', (0.0, 0.0), PseudoRandom(3))
        assert np.all(np.abs(jittered - plain) <= DEFAULT_CONFIG.seed_jitter + 1e-9)

    def test_jitter_source_injected(self):
        """Test every non-hub node draws two jitter values."""
        g = chain('hub', 'n1', 'n2')
        rng = ZeroJitter()
        seed_positions(g, 'hub', (0.0, 0.0), rng)
        assert rng.calls == 4

    def test_deterministic(self):
        """Test the same seed reproduces the same layout."""
        g = chain('a', 'b', 'c', 'd', 'e')
        x1 = seed_positions(g, 'a', (600.0, 400.0), PseudoRandom(11))
        x2 = seed_positions(g, 'a', (600.0, 400.0), PseudoRandom(11))
        np.testing.assert_array_equal(x1, x2)

    def test_seed_changes_layout(self):
        """Test different seeds give different jitter."""
        g = chain('a', 'b', 'c')
        x1 = seed_positions(g, 'a', (0.0, 0.0), PseudoRandom(1))
        x2 = seed_positions(g, 'a', (0.0, 0.0), PseudoRandom(2))
        assert not np.array_equal(x1, x2)

    def test_empty(self):
        """Test seeding no nodes."""
        x = seed_positions(SchemaGraph(), None, (0.0, 0.0))
        assert x.shape == (2, 0)

    def test_input_nodes_untouched(self):
        """Test seeding does not alter the graph."""
        g = SchemaGraph([Node('a', 'A', x=5, y=6), Node('b', 'B')], [{'source': 'a', 'target': 'b'}])
        seed_positions(g, 'a', (0.0, 0.0))
        assert (g.node('a').x, g.node('a').y) == (5, 6)
