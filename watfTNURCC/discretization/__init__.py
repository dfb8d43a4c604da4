"""
Discretization module for T-NURCCs.

Provides:
- TnurccControlPoint, TnurccEdge, TnurccFace: Arena records linked by handles
- Tnurcc: Control mesh with construction, navigation and refinement
- global_subdivide: Non-uniform Catmull-Clark refinement
- to_tmesh: Re-parametrization into a T-spline evaluator
"""

from .control_point import TnurccControlPoint, create_control_points_from_array
from .edge import TnurccEdge, Connection, VertexEnd, FaceSide, SharedFace, SharedPoint
from .face import TnurccFace
from .tnurcc import Tnurcc
from .subdivision import global_subdivide
from .parametrization import to_tmesh
