"""
T-NURCC - Non-Uniform Rational Catmull-Clark surfaces with T-junctions

A research-grade implementation of T-NURCC control meshes: construction
from boundary-run face lists, non-uniform Catmull-Clark refinement, and
re-parametrization of the refined net into a T-spline evaluator.

Key modules:
- discretization: Control mesh records, Tnurcc, subdivision, parametrization
- geometry: Local knot vectors, cubic basis, T-mesh evaluator, primitives
- visualization: Control net and T-spline surface plots
- config: Numeric tolerance
- errors: Exception taxonomy

Quick start:
    from watfTNURCC.geometry.primitives import make_tnurcc_cube

    # Closed cube with 8 extraordinary corners
    cube = make_tnurcc_cube()

    # Two levels of refinement on a copy
    fine = cube.clone().subdivide(2)
    fine.verify()
    print(fine)  # Tnurcc(n_control_points=98, n_edges=192, n_faces=96)

    # Evaluate the limit surface through a T-mesh
    tmesh = cube.to_tmesh(subdivisions=2)
    x = tmesh.eval_point(0.5, 0.5)

Quick start (custom faces with a T-junction):
    from watfTNURCC import Tnurcc

    # Each face: 4 anticlockwise boundary runs (start, [(next, interval), ...])
    faces = [
        [(0, [(8, 0.5)]), (8, [(9, 1.0)]), (9, [(1, 0.5)]), (1, [(0, 1.0)])],
        ...
    ]
    mesh = Tnurcc.try_new(points, faces)
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience
from .discretization.tnurcc import Tnurcc
from .discretization.parametrization import to_tmesh
from .geometry.tspline import TSplineMesh, TSplineControlPoint, TmeshDirection
from .geometry.primitives import make_tnurcc_cube, make_tnurcc_box, quad_mesh_to_faces
from .config import get_tolerance, set_tolerance
from .logging_config import setup_logging
