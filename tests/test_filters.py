"""Tests for diagram filters."""

import numpy as np
from schemagraph.config import LayoutConfig
from schemagraph.filters import FilterState, apply_filters
from schemagraph.graph import Cardinality, Classification, SchemaGraph


def schema():
    return SchemaGraph(
        [
            {'id': 'orders', 'record_count': 100, 'column_count': 10, 'relationship_count': 6},
            {'id': 'job_type', 'record_count': 5, 'column_count': 3},
            {'id': 'user_roles', 'record_count': 20, 'column_count': 5, 'foreign_key_count': 2},
            {'id': 'notes', 'record_count': 0, 'column_count': 4},
        ],
        [
            {'source': 'orders', 'target': 'job_type', 'cardinality': '1:1'},
            {'source': 'user_roles', 'target': 'orders', 'cardinality': 'many:many'},
        ]
    )


def ids(graph):
    return [n.id for n in graph.nodes]


class TestFilterState:
    """Test FilterState class."""

    def test_fixture_classifications(self):
        """Test the sample schema covers every classification."""
        assert [n.classification for n in schema().nodes] == [
            Classification.core, Classification.lookup, Classification.junction, Classification.data
        ]

    def test_default_keeps_everything(self):
        """Test the default filter keeps all tables and relationships."""
        g = apply_filters(schema(), FilterState())
        assert ids(g) == ['orders', 'job_type', 'user_roles', 'notes']
        assert len(g.edges) == 2


class TestApplyFilters:
    """Test filtering a schema graph."""

    def test_table_types(self):
        """Test only the chosen classifications survive."""
        g = apply_filters(schema(), FilterState(
            table_types=frozenset({Classification.core, Classification.lookup})
        ))
        assert ids(g) == ['orders', 'job_type']
        assert [(e.source, e.target) for e in g.edges] == [('orders', 'job_type')]

    def test_relationship_types(self):
        """Test relationships of other cardinalities are hidden, tables kept."""
        g = apply_filters(schema(), FilterState(relationship_types=frozenset({Cardinality.many_to_many})))
        assert len(g) == 4
        assert [e.cardinality for e in g.edges] == [Cardinality.many_to_many]

    def test_search_id(self):
        """Test search matches ids case-insensitively."""
        assert ids(apply_filters(schema(), FilterState(search_term='ORD'))) == ['orders']

    def test_search_display_name(self):
        """Test search also matches display names."""
        assert ids(apply_filters(schema(), FilterState(search_term='job t'))) == ['job_type']

    def test_blank_search(self):
        """Test whitespace-only search keeps everything."""
        assert len(apply_filters(schema(), FilterState(search_term='  '))) == 4

    def test_relationship_range(self):
        """Test the relationship count range."""
        g = apply_filters(schema(), FilterState(min_relationships=1, max_relationships=2))
        assert ids(g) == ['job_type', 'user_roles']

    def test_hide_empty_tables(self):
        """Test tables without records can be hidden."""
        assert 'notes' not in apply_filters(schema(), FilterState(show_empty_tables=False))

    def test_positions_carried_over(self):
        """Test kept nodes keep their positions."""
        g = schema().with_positions(np.array([[1.0, 2.0, 3.0, 4.0], [5.0, 6.0, 7.0, 8.0]]))
        kept = apply_filters(g, FilterState(search_term='roles'))
        assert (kept.node('user_roles').x, kept.node('user_roles').y) == (3.0, 7.0)

    def test_source_untouched(self):
        """Test filtering builds a new graph."""
        g = schema()
        apply_filters(g, FilterState(search_term='zzz'))
        assert len(g) == 4

    def test_no_matches(self):
        """Test filtering everything out gives an empty graph."""
        g = apply_filters(schema(), FilterState(search_term='zzz'))
        assert len(g) == 0
        assert g.edges == ()

    def test_config_carried_over(self):
        """Test kept tables keep sizes derived from the graph's config."""
        config = LayoutConfig(base_width=100, base_height=60, max_width=120, max_height=70)
        g = SchemaGraph([{'id': 'a', 'column_count': 3}, {'id': 'b'}], [], config)
        kept = apply_filters(g, FilterState(search_term='a'))
        assert kept.config is config
        assert (kept.node('a').width, kept.node('a').height) == (g.node('a').width, g.node('a').height)
