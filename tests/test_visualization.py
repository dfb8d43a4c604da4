"""
Unit tests for surface sampling and plotting.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose

from watfTNURCC.visualization import sample_tmesh_surface, plot_control_net, TmeshVisualizer

from test_tspline import make_grid_tmesh


class TestSampling:
    """Tests for sample_tmesh_surface (no matplotlib needed)."""

    def test_shapes(self):
        """Parameter and point grids."""
        params, points = sample_tmesh_surface(make_grid_tmesh(), n_points=5)

        assert params.shape == (5, 5, 2)
        assert points.shape == (5, 5, 3)
        assert np.all(np.isfinite(points))

    def test_plane(self):
        """The plane is sampled at its own parameters."""
        params, points = sample_tmesh_surface(make_grid_tmesh(), n_points=5)
        inner = (slice(1, 4), slice(1, 4))
        assert_allclose(points[inner][..., :2], params[inner], atol=1e-12)

    def test_coverage(self):
        """Every sample of the regular grid is covered."""
        viz = TmeshVisualizer(make_grid_tmesh(), n_points=6)
        stats = viz.get_coverage_stats()

        assert stats['n_samples'] == 36.0
        assert stats['fraction'] == 1.0


class TestPlots:
    """Smoke tests for the matplotlib figures."""

    @pytest.fixture(autouse=True)
    def agg_backend(self):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        yield
        import matplotlib.pyplot as plt
        plt.close("all")

    def test_control_net(self, cube, tmp_path):
        """The control net plot is written to disk."""
        path = tmp_path / "net.png"
        fig = plot_control_net(cube, save_path=str(path), show=False)

        assert fig is not None
        assert path.exists()

    def test_control_net_needs_3d(self):
        """2D control points cannot be drawn as a net."""
        from watfTNURCC.discretization.tnurcc import Tnurcc

        mesh = Tnurcc()
        mesh.add_control_point([0.0, 0.0])
        with pytest.raises(ValueError):
            plot_control_net(mesh, show=False)

    def test_layout_and_surface(self, tmp_path):
        """Layout and surface figures for a 3D T-mesh."""
        viz = TmeshVisualizer(make_grid_tmesh(), n_points=5)

        viz.plot_layout(save_path=str(tmp_path / "layout.png"), show=False)
        viz.plot_surface(save_path=str(tmp_path / "surface.png"), show=False)

        assert (tmp_path / "layout.png").exists()
        assert (tmp_path / "surface.png").exists()
