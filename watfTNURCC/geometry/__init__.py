"""
Geometry module for T-spline evaluation and primitive T-NURCCs.
"""

from .knot_vector import LocalKnotVector
from .bspline import eval_local_basis, eval_local_basis_array
from .tspline import TSplineMesh, TSplineControlPoint, TmeshDirection
from .primitives import make_tnurcc_cube, make_tnurcc_box, quad_mesh_to_faces
