"""Tests for layout configuration."""

import pytest
from schemagraph.config import DEFAULT_CONFIG, LayoutConfig


class TestLayoutConfig:
    """Test LayoutConfig defaults and validation."""

    def test_simulation_defaults(self):
        """Test force simulation defaults."""
        assert DEFAULT_CONFIG.iterations == 100
        assert DEFAULT_CONFIG.attraction_strength == 2.0
        assert DEFAULT_CONFIG.repulsion_strength == 8000.0
        assert DEFAULT_CONFIG.damping == 0.85
        assert DEFAULT_CONFIG.optimal_edge_length == 250.0
        assert DEFAULT_CONFIG.hub_movement == 0.1

    def test_layout_defaults(self):
        """Test overlap, tiering and viewport defaults."""
        assert DEFAULT_CONFIG.min_separation == 50.0
        assert DEFAULT_CONFIG.max_ring == 4
        assert DEFAULT_CONFIG.min_zoom == 0.1
        assert DEFAULT_CONFIG.max_zoom == 3.0
        assert DEFAULT_CONFIG.zoom_step == 1.2
        assert DEFAULT_CONFIG.fit_padding == 100.0

    def test_replace(self):
        """Test deriving a variant leaves the original alone."""
        config = DEFAULT_CONFIG.replace(iterations=5)
        assert config.iterations == 5
        assert DEFAULT_CONFIG.iterations == 100

    def test_frozen(self):
        """Test configs are immutable."""
        with pytest.raises(Exception):
            DEFAULT_CONFIG.iterations = 1

    @pytest.mark.parametrize('changes', [
        {'iterations': -1},
        {'damping': 1.5},
        {'hub_movement': -0.1},
        {'max_ring': -1},
        {'min_zoom': 0.0},
        {'min_zoom': 4.0},
        {'zoom_step': 1.0},
        {'base_width': 400.0},
        {'min_separation': -5.0},
    ])
    def test_invalid_values(self, changes):
        """Test nonsensical parameters are rejected."""
        with pytest.raises(ValueError):
            LayoutConfig(**changes)
