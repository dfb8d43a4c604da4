"""
Primitive T-NURCC factory functions.

This module provides factory functions for closed control meshes used in
tests and examples:
- Unit cube and axis-aligned boxes
- Conversion of plain quad lists into the boundary-run face format

Face lists are given anticlockwise as seen from outside the solid.
"""

import numpy as np
from typing import List, Sequence, Tuple

from ..discretization.tnurcc import Tnurcc


# Corner order shared by the cube and box factories
_BOX_CORNERS = np.array([
    [0.0, 0.0, 0.0],
    [0.0, 0.0, 1.0],
    [1.0, 0.0, 1.0],
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 1.0, 1.0],
    [1.0, 1.0, 1.0],
    [1.0, 1.0, 0.0],
])

_BOX_QUADS = [
    [0, 3, 2, 1],  # front  (y = 0)
    [0, 1, 5, 4],  # left   (x = 0)
    [1, 2, 6, 5],  # top    (z = 1)
    [4, 5, 6, 7],  # back   (y = 1)
    [2, 3, 7, 6],  # right  (x = 1)
    [0, 4, 7, 3],  # bottom (z = 0)
]


def quad_mesh_to_faces(quads: Sequence[Sequence[int]],
                       knot_intervals=None) -> List[List[Tuple[int, List[Tuple[int, float]]]]]:
    """
    Convert quads into the boundary-run face format of Tnurcc.try_new.

    Parameters:
        quads: Faces as 4 point indices each, anticlockwise
        knot_intervals: Optional per-quad sequence of 4 intervals, one per
            side (side i runs from quad[i] to quad[i+1]). Defaults to 1.0.

    Returns:
        Face list with one single-edge run per side
    """
    faces = []
    for q, quad in enumerate(quads):
        if len(quad) != 4:
            raise ValueError(f"Quad {q} has {len(quad)} corners, expected 4")
        intervals = [1.0] * 4 if knot_intervals is None else list(knot_intervals[q])
        faces.append([
            (quad[i], [(quad[(i + 1) % 4], float(intervals[i]))])
            for i in range(4)
        ])
    return faces


def make_tnurcc_cube(size: float = 1.0, origin=(0.0, 0.0, 0.0)) -> Tnurcc:
    """
    Create a closed cube T-NURCC with every knot interval 1.

    Eight extraordinary (valence 3) corners, 12 edges, 6 faces.

    Parameters:
        size: Edge length of the cube
        origin: Position of corner 0

    Returns:
        Tnurcc
    """
    points = _BOX_CORNERS * size + np.asarray(origin, dtype=np.float64)
    return Tnurcc.try_new(points, quad_mesh_to_faces(_BOX_QUADS))


def make_tnurcc_box(dims=(1.0, 1.0, 1.0), origin=(0.0, 0.0, 0.0)) -> Tnurcc:
    """
    Create a closed box T-NURCC whose knot intervals equal its edge lengths.

    Parameters:
        dims: (lx, ly, lz) box dimensions
        origin: Position of corner 0

    Returns:
        Tnurcc
    """
    dims = np.asarray(dims, dtype=np.float64)
    if dims.shape != (3,) or np.any(dims <= 0.0):
        raise ValueError(f"Box dimensions must be 3 positive values, got {dims}")

    points = _BOX_CORNERS * dims + np.asarray(origin, dtype=np.float64)

    intervals = []
    for quad in _BOX_QUADS:
        sides = []
        for i in range(4):
            a, b = quad[i], quad[(i + 1) % 4]
            axis = int(np.argmax(np.abs(_BOX_CORNERS[b] - _BOX_CORNERS[a])))
            sides.append(dims[axis])
        intervals.append(sides)

    return Tnurcc.try_new(points, quad_mesh_to_faces(_BOX_QUADS, intervals))
