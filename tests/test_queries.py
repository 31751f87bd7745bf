"""Tests for neighbour and path queries."""

from schemagraph.graph import SchemaGraph
from schemagraph.queries import neighbors_of, shortest_path


def chain():
    """A - B - C - D plus an isolated E."""
    return SchemaGraph(
        [{'id': i} for i in 'ABCDE'],
        [{'source': 'A', 'target': 'B'}, {'source': 'C', 'target': 'B'},
         {'source': 'C', 'target': 'D'}]
    )


class TestNeighborsOf:
    """Test hover neighbourhoods."""

    def test_includes_self(self):
        """Test the neighbourhood holds the node and both sides."""
        assert neighbors_of(chain(), 'B') == {'A', 'B', 'C'}

    def test_direction_ignored(self):
        """Test incoming edges count as neighbours."""
        assert neighbors_of(chain(), 'C') == {'B', 'C', 'D'}

    def test_isolated(self):
        """Test an isolated node is its own neighbourhood."""
        assert neighbors_of(chain(), 'E') == {'E'}

    def test_unknown(self):
        """Test an unknown id gives the empty set."""
        assert neighbors_of(chain(), 'Z') == set()


class TestShortestPath:
    """Test path tracing."""

    def test_chain(self):
        """Test the path runs along the chain."""
        assert shortest_path(chain(), 'A', 'D') == ['A', 'B', 'C', 'D']

    def test_reverse(self):
        """Test paths ignore edge direction."""
        assert shortest_path(chain(), 'D', 'A') == ['D', 'C', 'B', 'A']

    def test_same_node(self):
        """Test a node reaches itself in zero hops."""
        assert shortest_path(chain(), 'B', 'B') == ['B']

    def test_unreachable(self):
        """Test disconnected nodes have no path."""
        assert shortest_path(chain(), 'A', 'E') is None

    def test_unknown(self):
        """Test unknown ids have no path."""
        assert shortest_path(chain(), 'A', 'Z') is None
        assert shortest_path(chain(), 'Z', 'A') is None

    def test_fewest_hops(self):
        """Test a shortcut beats the long way round."""
        g = SchemaGraph(
            [{'id': i} for i in 'ABCD'],
            [{'source': 'A', 'target': 'B'}, {'source': 'B', 'target': 'C'},
             {'source': 'C', 'target': 'D'}, {'source': 'A', 'target': 'D'}]
        )
        assert shortest_path(g, 'A', 'D') == ['A', 'D']
