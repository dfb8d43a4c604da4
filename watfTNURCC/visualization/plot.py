"""
Plotting of T-NURCC control nets and T-spline surfaces.

This module provides:
1. Sampling of a TSplineMesh over the unit parameter square
2. 3D plots of a T-NURCC control net (edges and extraordinary points)
3. 2D plots of a T-mesh layout (knot coordinates and connections)

Sampling has no matplotlib dependency; matplotlib is imported only by the
plotting methods.

Example:
    from watfTNURCC.geometry.primitives import make_tnurcc_cube
    from watfTNURCC.visualization import TmeshVisualizer, plot_control_net

    cube = make_tnurcc_cube()
    plot_control_net(cube, save_path="cube_net.png", show=False)

    viz = TmeshVisualizer(cube.to_tmesh(), n_points=40)
    viz.plot_layout(save_path="layout.png", show=False)
    viz.plot_surface(save_path="surface.png", show=False)
"""

from typing import TYPE_CHECKING, Dict, Optional, Tuple
import numpy as np

from ..geometry.tspline import TmeshDirection

if TYPE_CHECKING:
    from ..discretization.tnurcc import Tnurcc
    from ..geometry.tspline import TSplineMesh

__all__ = [
    'sample_tmesh_surface',
    'plot_control_net',
    'TmeshVisualizer',
]


def sample_tmesh_surface(tmesh: 'TSplineMesh', n_points: int = 20) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate a T-spline over a uniform grid of the unit square.

    Parameters where no basis function is supported are filled with NaN.

    Parameters:
        tmesh: T-mesh evaluator
        n_points: Samples per direction

    Returns:
        (params, points) with shapes (n_points, n_points, 2) and
        (n_points, n_points, n_dim)
    """
    grid = np.linspace(0.0, 1.0, n_points)
    S, T = np.meshgrid(grid, grid)
    params = np.stack([S, T], axis=-1)

    points = np.full((n_points, n_points, tmesh.n_dim), np.nan)
    for i in range(n_points):
        for j in range(n_points):
            try:
                points[i, j] = tmesh.eval_point(S[i, j], T[i, j])
            except ValueError:
                continue
    return params, points


def plot_control_net(
    mesh: 'Tnurcc',
    save_path: Optional[str] = None,
    show: bool = True
):
    """
    Plot the edges of a 3D T-NURCC control net.

    Extraordinary points (valence other than 4) are highlighted.

    Parameters:
        mesh: T-NURCC with 3D control points
        save_path: If provided, save figure to this path
        show: Whether to call plt.show()

    Returns:
        matplotlib Figure object
    """
    import matplotlib.pyplot as plt

    positions = mesh.point_positions()
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(f"Control net plot needs 3D points, got shape {positions.shape}")

    fig = plt.figure(figsize=(6, 6))
    ax = fig.add_subplot(111, projection='3d')

    for edge in mesh.edges:
        segment = positions[[edge.origin, edge.dest]]
        ax.plot(segment[:, 0], segment[:, 1], segment[:, 2], color='gray', linewidth=0.8)

    ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2], s=8, color='black')
    extraordinary = mesh.extraordinary_control_points
    if extraordinary:
        ep = positions[extraordinary]
        ax.scatter(ep[:, 0], ep[:, 1], ep[:, 2], s=30, color='red', label='extraordinary')
        ax.legend()

    ax.set_title(f"T-NURCC control net ({mesh.n_control_points} points, {mesh.n_faces} faces)")
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_zlabel('z')

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    if show:
        plt.show()

    return fig


class TmeshVisualizer:
    """
    Sample and plot a T-spline surface and its T-mesh layout.

    Example:
        viz = TmeshVisualizer(tmesh, n_points=50)
        print(viz.get_coverage_stats())
        viz.plot_surface(save_path="surface.png")
    """

    def __init__(self, tmesh: 'TSplineMesh', n_points: int = 30):
        """
        Initialize the visualizer.

        Parameters:
            tmesh: T-mesh evaluator
            n_points: Number of evaluation points per direction
        """
        self.tmesh = tmesh
        self.n_points = n_points

        # Cache for sampled surface
        self._params: Optional[np.ndarray] = None
        self._points: Optional[np.ndarray] = None

    def sample(self) -> Tuple[np.ndarray, np.ndarray]:
        """Sampled (params, points), evaluated once and cached."""
        if self._points is None:
            self._params, self._points = sample_tmesh_surface(self.tmesh, self.n_points)
        return self._params, self._points

    def get_coverage_stats(self) -> Dict[str, float]:
        """Fraction of samples covered by at least one basis function."""
        _, points = self.sample()
        covered = ~np.isnan(points).any(axis=-1)
        return {
            'n_samples': float(covered.size),
            'covered': float(covered.sum()),
            'fraction': float(covered.mean()),
        }

    def plot_layout(
        self,
        save_path: Optional[str] = None,
        show: bool = True
    ):
        """
        Plot control points at their knot coordinates with their connections.

        Edge conditions (directions without a neighbour) are drawn as short
        dashed stubs of the stored knot interval.

        Parameters:
            save_path: If provided, save figure to this path
            show: Whether to call plt.show()

        Returns:
            matplotlib Figure object
        """
        import matplotlib.pyplot as plt

        fig, ax = plt.subplots(figsize=(6, 6))

        for cp in self.tmesh.control_points:
            s, t = cp.knot_coordinates
            for direction, (neighbour, weight) in enumerate(cp.connections):
                if neighbour is not None:
                    ns, nt = self.tmesh.control_points[neighbour].knot_coordinates
                    ax.plot([s, ns], [t, nt], color='gray', linewidth=0.6)
                elif weight > 0.0:
                    end = TmeshDirection(direction).mutate_knot_coordinates(
                        cp.knot_coordinates, weight)
                    ax.plot([s, end[0]], [t, end[1]], color='tab:orange',
                            linewidth=0.6, linestyle='--')

        knots = np.array([cp.knot_coordinates for cp in self.tmesh.control_points])
        ax.scatter(knots[:, 0], knots[:, 1], s=6, color='black')

        ax.set_xlim(-0.05, 1.05)
        ax.set_ylim(-0.05, 1.05)
        ax.set_aspect('equal')
        ax.set_xlabel('s')
        ax.set_ylabel('t')
        ax.set_title(f"T-mesh layout ({self.tmesh.n_control_points} control points)")

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

    def plot_surface(
        self,
        save_path: Optional[str] = None,
        show: bool = True
    ):
        """
        Plot the sampled T-spline surface (3D control points only).

        Parameters:
            save_path: If provided, save figure to this path
            show: Whether to call plt.show()

        Returns:
            matplotlib Figure object
        """
        import matplotlib.pyplot as plt

        if self.tmesh.n_dim != 3:
            raise ValueError(f"Surface plot needs 3D control points, got {self.tmesh.n_dim}D")

        _, points = self.sample()

        fig = plt.figure(figsize=(6, 6))
        ax = fig.add_subplot(111, projection='3d')
        ax.plot_surface(points[..., 0], points[..., 1], points[..., 2],
                        cmap='viridis', alpha=0.8, edgecolor='none')

        ctrl = np.array([cp.point for cp in self.tmesh.control_points])
        ax.scatter(ctrl[:, 0], ctrl[:, 1], ctrl[:, 2], s=4, color='black')

        stats = self.get_coverage_stats()
        ax.set_title(f"T-spline surface (coverage {stats['fraction']:.0%})")
        ax.set_xlabel('x')
        ax.set_ylabel('y')
        ax.set_zlabel('z')

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

