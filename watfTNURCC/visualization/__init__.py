"""
Visualization module for T-NURCC control nets and T-spline surfaces.

Key classes:
- TmeshVisualizer: Sample a T-spline over [0, 1]^2 and plot it

Usage:
    from watfTNURCC.visualization import plot_control_net, TmeshVisualizer

    plot_control_net(mesh, save_path="net.png")
    TmeshVisualizer(mesh.to_tmesh()).plot_layout(save_path="layout.png")
"""

from .plot import (
    sample_tmesh_surface,
    plot_control_net,
    TmeshVisualizer,
)

__all__ = [
    'sample_tmesh_surface',
    'plot_control_net',
    'TmeshVisualizer',
]
