"""
Conversion of a T-NURCC into a T-mesh evaluator.

The control net of a T-NURCC has no global parametrization; the T-mesh
needs every control point placed in a (s, t) plane. The conversion:

1. Refines a clone of the mesh `subdivisions` times, so that every face is
   a 4-cycle of edges.
2. Unfolds the faces breadth-first, starting from face 0, whose corners are
   fixed to the rectangle spanned by its first two knot intervals:

       v3 (0, k1) ------- v2 (k0, k1)
        |                   |
       v0 (0, 0)  ------- v1 (k0, 0)

   A face reached over a placed edge a -> b (oriented anticlockwise around
   the new face) places its two other corners perpendicular to that edge:

       d = a + n * k(d, a)      c = b + n * k(b, c)

   with n the direction of a -> b snapped to an axis and turned 90 degrees
   anticlockwise. A point keeps the first position it receives.
3. Rescales both axes affinely to [0, 1].
4. Turns every axis-aligned incident edge into a T-mesh connection whose
   knot interval is the normalized distance. Edges that are not axis-aligned
   after unfolding cross a seam of the layout and are dropped.
5. Fills each empty direction by casting a ray to the nearest point along
   that axis. If the ray leaves the layout, the direction becomes an edge
   condition reaching the border of [0, 1]^2; on the border itself the
   interval is borrowed from the opposite, clockwise or anticlockwise
   direction.
"""

import logging
import numpy as np
from collections import deque
from typing import List, Optional, TYPE_CHECKING

from .edge import FaceSide
from ..config import get_tolerance
from ..errors import MalformedMeshError
from ..geometry.tspline import TSplineMesh, TSplineControlPoint, TmeshDirection

if TYPE_CHECKING:
    from .tnurcc import Tnurcc

logger = logging.getLogger(__name__)


_DIRECTION_VECTORS = {
    TmeshDirection.UP: np.array([0.0, 1.0]),
    TmeshDirection.RIGHT: np.array([1.0, 0.0]),
    TmeshDirection.DOWN: np.array([0.0, -1.0]),
    TmeshDirection.LEFT: np.array([-1.0, 0.0]),
}


def _snap_to_axis(u: np.ndarray) -> np.ndarray:
    """Unit axis vector closest to u; horizontal wins ties."""
    tol = get_tolerance()
    dx, dy = u
    if tol.so_small(dx) and tol.so_small(dy):
        return np.array([1.0, 0.0])
    if abs(dx) >= abs(dy):
        return np.array([np.sign(dx), 0.0])
    return np.array([0.0, np.sign(dy)])


def unfold_knot_coordinates(mesh: 'Tnurcc') -> np.ndarray:
    """
    Place every control point of `mesh` in the parameter plane.

    Parameters:
        mesh: T-NURCC whose face 0 is a 4-cycle

    Returns:
        Array of shape (n_control_points, 2), not normalized

    Raises:
        MalformedMeshError: Face 0 is not a 4-cycle, or a point was not reached
    """
    seed_edges = mesh.border_edges(0)
    if len(seed_edges) != 4:
        raise MalformedMeshError(
            f"Face 0 must be bounded by 4 edges, found {len(seed_edges)}"
        )

    coords = np.full((mesh.n_control_points, 2), np.nan)
    assigned = np.zeros(mesh.n_control_points, dtype=bool)

    def place(p: int, position: np.ndarray) -> None:
        if not assigned[p]:
            coords[p] = position
            assigned[p] = True

    v0, v1, v2, v3 = mesh.boundary_vertices(0)
    k0 = mesh.edges[seed_edges[0]].knot_interval
    k1 = mesh.edges[seed_edges[1]].knot_interval
    place(v0, np.array([0.0, 0.0]))
    place(v1, np.array([k0, 0.0]))
    place(v2, np.array([k0, k1]))
    place(v3, np.array([0.0, k1]))

    visited = {0}
    queue = deque([0])
    skipped = 0
    while queue:
        f = queue.popleft()
        for e in mesh.border_edges(f):
            edge = mesh.edges[e]
            g = edge.face_right if edge.face_left == f else edge.face_left
            if g is None or g in visited:
                continue

            side = edge.face_side(g)
            a, b = (edge.origin, edge.dest) if side is FaceSide.LEFT else (edge.dest, edge.origin)
            if not (assigned[a] and assigned[b]):
                continue
            visited.add(g)
            queue.append(g)

            ring = list(mesh.iter_face_edges(g, start=e))
            if len(ring) != 4:
                skipped += 1
                continue

            direction = _snap_to_axis(coords[b] - coords[a])
            normal = np.array([-direction[1], direction[0]])

            _, e1, _, e3 = ring
            c = mesh.edges[e1].other_point(b)
            d = mesh.edges[e3].other_point(a)
            if c is None or d is None:
                raise MalformedMeshError(f"Face {g} is not a 4-cycle around edge {e}")
            place(c, coords[b] + normal * mesh.edges[e1].knot_interval)
            place(d, coords[a] + normal * mesh.edges[e3].knot_interval)

    if skipped:
        logger.debug(f"Unfolding skipped {skipped} faces that are not 4-cycles")

    missing = np.flatnonzero(~assigned)
    if missing.size:
        raise MalformedMeshError(
            f"{missing.size} control points could not be placed (first: {missing[0]})"
        )

    logger.debug(f"Unfolded {mesh.n_control_points} points over {len(visited)} faces")
    return coords


def normalize_coordinates(coords: np.ndarray) -> np.ndarray:
    """Rescale each column affinely to [0, 1] (constant columns map to 0)."""
    tol = get_tolerance()
    lo = coords.min(axis=0)
    span = coords.max(axis=0) - lo
    span = np.where(np.abs(span) < tol.absolute, 1.0, span)
    return (coords - lo) / span


def _cast_ray(coords: np.ndarray, p: int, direction: TmeshDirection) -> Optional[int]:
    """Nearest other point straight along `direction` from point p."""
    tol = get_tolerance()
    axis = 1 if direction.vertical else 0
    other = 1 - axis
    sign = 1.0 if direction.knot_delta_positive else -1.0

    along = (coords[:, axis] - coords[p, axis]) * sign
    aligned = np.abs(coords[:, other] - coords[p, other]) < tol.absolute
    candidates = np.flatnonzero(aligned & (along > tol.absolute))
    if candidates.size == 0:
        return None
    return int(candidates[np.argmin(along[candidates])])


def _distance_to_border(position: np.ndarray, direction: TmeshDirection) -> float:
    axis = 1 if direction.vertical else 0
    if direction.knot_delta_positive:
        return float(1.0 - position[axis])
    return float(position[axis])


def build_connections(mesh: 'Tnurcc', coords: np.ndarray) -> List[List]:
    """
    T-mesh connections of every point from normalized knot coordinates.

    Returns:
        Per point, a list of 4 (neighbour or None, interval) pairs indexed
        by TmeshDirection
    """
    tol = get_tolerance()
    connections = []
    dropped = 0

    for p in range(mesh.n_control_points):
        found: List[Optional[tuple]] = [None] * 4

        for e in mesh.radial_edges(p):
            q = mesh.edges[e].other_point(p)
            delta = coords[q] - coords[p]
            dx, dy = delta
            if tol.so_small(dy) and not tol.so_small(dx):
                direction = TmeshDirection.RIGHT if dx > 0 else TmeshDirection.LEFT
                distance = abs(dx)
            elif tol.so_small(dx) and not tol.so_small(dy):
                direction = TmeshDirection.UP if dy > 0 else TmeshDirection.DOWN
                distance = abs(dy)
            else:
                dropped += 1
                continue

            current = found[direction]
            if current is None or distance < current[1]:
                found[direction] = (q, distance)

        # Empty directions: nearest point along the axis, else an edge condition
        for direction in TmeshDirection:
            if found[direction] is not None:
                continue
            q = _cast_ray(coords, p, direction)
            if q is not None:
                found[direction] = (q, float(np.abs(coords[q] - coords[p]).max()))
            else:
                found[direction] = (None, _distance_to_border(coords[p], direction))

        # On the border of the domain, borrow an interval from a neighbour direction
        for direction in TmeshDirection:
            neighbour, weight = found[direction]
            if neighbour is not None or not tol.so_small(weight):
                continue
            for donor in (direction.flip(), direction.clockwise(), direction.anti_clockwise()):
                if not tol.so_small(found[donor][1]):
                    found[direction] = (None, found[donor][1])
                    break

        connections.append(found)

    if dropped:
        # Every edge is seen from both ends
        logger.warning(f"Dropped {dropped // 2} seam edges that are not axis-aligned after unfolding")

    return connections


def to_tmesh(mesh: 'Tnurcc', subdivisions: int = 2) -> TSplineMesh:
    """
    Convert a T-NURCC into a T-spline evaluator.

    The input mesh is not modified; refinement runs on a clone.

    Parameters:
        mesh: Closed T-NURCC
        subdivisions: Number of global refinement levels applied first

    Returns:
        TSplineMesh with knot coordinates in [0, 1]^2

    Raises:
        MalformedMeshError: Empty mesh, face 0 not a 4-cycle, or points
            that cannot be placed
    """
    if mesh.n_control_points == 0 or mesh.n_faces == 0:
        raise MalformedMeshError("Cannot parametrize an empty mesh")

    work = mesh.clone()
    work.subdivide(subdivisions)

    coords = normalize_coordinates(unfold_knot_coordinates(work))
    connections = build_connections(work, coords)

    control_points = [
        TSplineControlPoint(
            point=cp.coordinates.copy(),
            knot_coordinates=(coords[cp.id, 0], coords[cp.id, 1]),
            connections=connections[cp.id],
        )
        for cp in work.control_points
    ]

    logger.debug(f"Converted T-NURCC to T-mesh with {len(control_points)} control points")
    return TSplineMesh(control_points)
