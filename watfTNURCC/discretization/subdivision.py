"""
Global refinement of a T-NURCC (non-uniform Catmull-Clark subdivision).

One call of global_subdivide replaces every face by as many quadrilaterals as
it has border edges, halving every knot interval. New geometry follows
Sederberg et al. 1998, with every quantity computed from the mesh as it was
before the call:

Face point (eq. 11):
    F = sum_i w_i P_i / sum_i w_i over the boundary points P_i of the face,
    w_i = (d_{i+1,i}^0 + d^{+2} + d^{-2} + d_{i-2,i-1}^0 + d^{+2} + d^{-2})
        * (d_{i-1,i}^0 + d^{+2} + d^{-2} + d_{i+2,i+1}^0 + d^{+2} + d^{-2})
    where d^{+-2} is the knot interval two edges away (anti)clockwise.

Edge point (eqs. 13-15), for edge P_o -> P_d with interval d:
    a_od = (d_left_acw + d_left_cw) / (2 sum of the 4 neighbour intervals)
    a_do = (d_right_acw + d_right_cw) / (same)
    M    = (P_o (d + d_o^{+2} + d_o^{-2}) + P_d (d + d_d^{+2} + d_d^{-2}))
           / (sum of both weights)
    E    = M (1 - a_od - a_do) + a_od F_left + a_do F_right

Vertex point (eqs. 16-19), valence n, incident edges i:
    P' = (n - 3)/n P + 3 sum_i (m_i M_i + f_i F_i) / (n sum_i (m_i + f_i))
    m_i = (d_{i-1} + d_{i+1})(d_{i-2} + d_{i+2}) / 2
    f_i = d_{i-1} d_{i+1}
    The sum runs over the weighted midpoints M_i, not the final edge points
    E_i. Summing E_i would count the face points twice; with M_i a uniform
    mesh reproduces classic Catmull-Clark (a unit cube corner moves to 2/9,
    not 5/18).

Topology:
    Each border edge is split at its edge point (once, by whichever of its
    faces comes first), a face point is inserted and joined to every split
    point by a radial edge. The radial edge towards border edge i gets half
    the original length of the border edges on either side of it.

Counts for a mesh with V points, E edges and F faces whose faces have n_f
border edges:
    points: V + E + F, edges: 2E + sum n_f, faces: sum n_f
"""

import logging
import numpy as np
from typing import List, TYPE_CHECKING

from .edge import TnurccEdge, Connection, FaceSide
from .face import TnurccFace
from ..config import get_tolerance
from ..errors import (
    BadConnectionConditionsError,
    MalformedFaceError,
    TopologyInvariantError,
)

if TYPE_CHECKING:
    from .tnurcc import Tnurcc

logger = logging.getLogger(__name__)


def _nth_acw_interval(mesh: 'Tnurcc', e: int, p: int, n: int) -> float:
    target = mesh.nth_acw_edge_from_point(e, p, n)
    if target is None:
        raise TopologyInvariantError(f"Edge {e} does not rotate around point {p}")
    return mesh.edges[target].knot_interval


def _nth_cw_interval(mesh: 'Tnurcc', e: int, p: int, n: int) -> float:
    target = mesh.nth_cw_edge_from_point(e, p, n)
    if target is None:
        raise TopologyInvariantError(f"Edge {e} does not rotate around point {p}")
    return mesh.edges[target].knot_interval


def _spread(mesh: 'Tnurcc', e: int, p: int) -> float:
    """Interval of `e` plus the intervals two steps either way around `p`."""
    return (mesh.edges[e].knot_interval
            + _nth_acw_interval(mesh, e, p, 2)
            + _nth_cw_interval(mesh, e, p, 2))


def _edge_between(mesh: 'Tnurcc', a: int, b: int) -> int:
    e = mesh.edge_from_opposing_point(a, b)
    if e is None:
        raise TopologyInvariantError(f"Boundary points {a} and {b} are not joined by an edge")
    return e


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------

def compute_face_points(mesh: 'Tnurcc') -> List[np.ndarray]:
    """
    Knot-interval weighted centroid of every face.

    Raises:
        MalformedFaceError: A face without boundary points
    """
    tol = get_tolerance()
    face_points = []

    for face in mesh.faces:
        ring = mesh.boundary_vertices(face.id)
        if not ring:
            raise MalformedFaceError(f"Face {face.id} has no boundary points")

        # Wrap so every boundary point is the centre of one window of 5
        n = len(ring)
        ring = ring + [ring[i % n] for i in range(4)]

        weights = []
        positions = []
        for i in range(n):
            win = ring[i:i + 5]
            edges = [_edge_between(mesh, win[j], win[j + 1]) for j in range(4)]

            first_sum = _spread(mesh, edges[2], win[3]) + _spread(mesh, edges[0], win[0])
            second_sum = _spread(mesh, edges[1], win[1]) + _spread(mesh, edges[3], win[4])

            weights.append(first_sum * second_sum)
            positions.append(mesh.control_points[win[2]].coordinates)

        weights = np.array(weights)
        positions = np.array(positions)
        total = weights.sum()
        if tol.so_small(total):
            face_points.append(positions.mean(axis=0))
        else:
            face_points.append(weights @ positions / total)

    return face_points


def compute_edge_points(mesh: 'Tnurcc', face_points: List[np.ndarray]):
    """
    New split point of every edge, and the weighted midpoint it is built on.

    Returns:
        (edge_points, midpoints), both indexed by edge handle
    """
    tol = get_tolerance()
    edge_points = []
    midpoints = []

    for edge in mesh.edges:
        if edge.face_left is None or edge.face_right is None:
            raise TopologyInvariantError(f"Edge {edge.id} does not border two faces")
        f_left = face_points[edge.face_left]
        f_right = face_points[edge.face_right]

        k = [mesh.edges[edge.connection(con)].knot_interval for con in Connection]
        a_denom = 2.0 * sum(k)
        if tol.so_small(a_denom):
            a_od = a_do = 0.0
        else:
            a_od = (k[Connection.LEFT_ACW] + k[Connection.LEFT_CW]) / a_denom
            a_do = (k[Connection.RIGHT_ACW] + k[Connection.RIGHT_CW]) / a_denom

        origin = mesh.control_points[edge.origin].coordinates
        dest = mesh.control_points[edge.dest].coordinates
        w_origin = _spread(mesh, edge.id, edge.origin)
        w_dest = _spread(mesh, edge.id, edge.dest)
        m_denom = w_origin + w_dest
        if tol.so_small(m_denom):
            m = 0.5 * (origin + dest)
        else:
            m = (origin * w_origin + dest * w_dest) / m_denom

        midpoints.append(m)
        edge_points.append(m * (1.0 - a_do - a_od) + f_left * a_od + f_right * a_do)

    return edge_points, midpoints


def compute_vertex_points(mesh: 'Tnurcc', face_points: List[np.ndarray],
                          midpoints: List[np.ndarray]) -> List[np.ndarray]:
    """
    Relocated position of every existing point.

    Raises:
        MalformedFaceError: A point without incident edges
    """
    tol = get_tolerance()
    vertex_points = []

    for cp in mesh.control_points:
        v = cp.id
        radial = mesh.radial_edges(v)
        if not radial:
            raise MalformedFaceError(f"Point {v} has no incident edges")
        radial.append(radial[0])

        acc = np.zeros_like(cp.coordinates)
        weight = 0.0
        for a, b in zip(radial[:-1], radial[1:]):
            face = mesh.edges[a].common_face(mesh.edges[b])
            if face is None:
                raise TopologyInvariantError(
                    f"Consecutive edges {a} and {b} around point {v} share no face"
                )

            f_scalar = _nth_acw_interval(mesh, a, v, 1) * _nth_cw_interval(mesh, b, v, 1)
            m_scalar = (0.5
                        * (_nth_acw_interval(mesh, a, v, 1) + _nth_cw_interval(mesh, a, v, 1))
                        * (_nth_acw_interval(mesh, a, v, 2) + _nth_cw_interval(mesh, a, v, 2)))

            acc = acc + midpoints[a] * m_scalar + face_points[face] * f_scalar
            weight += m_scalar + f_scalar

        n = float(cp.valence)
        if tol.so_small(weight):
            vertex_points.append(cp.coordinates.copy())
        else:
            vertex_points.append((n - 3.0) / n * cp.coordinates + 3.0 * acc / (n * weight))

    return vertex_points


# -----------------------------------------------------------------------------
# Topology
# -----------------------------------------------------------------------------

def _connect(mesh: 'Tnurcc', first: int, other: int) -> None:
    try:
        mesh.connect(first, other)
    except BadConnectionConditionsError as err:
        raise TopologyInvariantError(f"Refinement produced unpairable edges: {err}") from err


def _refine_face(mesh: 'Tnurcc', face_i: int, face_point: np.ndarray,
                 edge_points: List[np.ndarray], split: List[bool]) -> None:
    """Split the border of one original face and fan it into quadrilaterals."""
    n_original_edges = len(split)

    # Only edges of the input mesh; conjugates from earlier splits are skipped
    perim = [e for e in mesh.border_edges(face_i) if e < n_original_edges]
    if not perim:
        raise MalformedFaceError(f"Face {face_i} has no border edges")
    n = len(perim)

    sides = []
    for e in perim:
        side = mesh.edges[e].face_side(face_i)
        if side is None:
            raise TopologyInvariantError(f"Edge {e} does not border face {face_i}")
        sides.append(side)
    original_k = [mesh.edges[e].knot_interval * (2.0 if split[e] else 1.0) for e in perim]

    f_cp = mesh.add_control_point(face_point)

    # Sub-face 0 takes over the id of the face being refined
    new_ids = [face_i] + [mesh.n_faces + j for j in range(n - 1)]
    new_faces = [TnurccFace(id=fid, corners=[f_cp, None, None, None]) for fid in new_ids]

    conjugates = []
    mids = []
    for idx, e in enumerate(perim):
        edge = mesh.edges[e]
        if split[e]:
            if sides[idx] is FaceSide.LEFT:
                conjugates.append(edge.connection(Connection.LEFT_ACW))
            else:
                conjugates.append(edge.connection(Connection.RIGHT_CW))
            mids.append(edge.dest)
        else:
            split[e] = True
            mids.append(mesh.split_edge(e, edge_points[e], 0.5))
            conjugates.append(mesh.n_edges - 1)

    radials = []
    for idx, e in enumerate(perim):
        nxt = (idx + 1) % n
        prv = (idx - 1) % n
        edge = mesh.edges[e]
        conj = mesh.edges[conjugates[idx]]

        if sides[idx] is FaceSide.LEFT:
            new_faces[idx].corners[2] = edge.origin
            new_faces[idx].corners[3] = edge.dest
            new_faces[nxt].corners[1] = edge.dest
            new_faces[idx].edge = e
            edge.face_left = new_ids[idx]
            conj.face_left = new_ids[nxt]
        else:
            new_faces[idx].corners[2] = conj.dest
            new_faces[idx].corners[3] = conj.origin
            new_faces[nxt].corners[1] = conj.origin
            new_faces[idx].edge = conj.id
            edge.face_right = new_ids[nxt]
            conj.face_right = new_ids[idx]

        r = mesh.n_edges
        mesh.edges.append(TnurccEdge(
            id=r,
            knot_interval=0.25 * (original_k[nxt] + original_k[prv]),
            origin=f_cp,
            dest=mids[idx],
            face_left=new_ids[nxt],
            face_right=new_ids[idx],
            connections=[e] * 4,
        ))
        radials.append(r)

    for idx, e in enumerate(perim):
        nxt = (idx + 1) % n
        _connect(mesh, e, radials[idx])
        _connect(mesh, conjugates[idx], radials[idx])
        _connect(mesh, radials[nxt], radials[idx])
        mesh.control_points[mids[idx]].valence += 1

    mesh.control_points[f_cp].valence = n
    mesh.control_points[f_cp].incoming_edge = radials[-1]

    mesh.faces[face_i] = new_faces[0]
    mesh.faces.extend(new_faces[1:])


def global_subdivide(mesh: 'Tnurcc') -> None:
    """
    Refine `mesh` in place by one level.

    Parameters:
        mesh: Closed, validated T-NURCC

    Raises:
        MalformedFaceError: A face or point that cannot be traversed. The
            mesh is left partially refined and must be discarded.
    """
    n_faces = mesh.n_faces

    face_points = compute_face_points(mesh)
    edge_points, midpoints = compute_edge_points(mesh, face_points)
    vertex_points = compute_vertex_points(mesh, face_points, midpoints)

    for cp, position in zip(mesh.control_points, vertex_points):
        cp.coordinates = position

    split = [False] * mesh.n_edges
    for face_i in range(n_faces):
        _refine_face(mesh, face_i, face_points[face_i], edge_points, split)

    logger.debug(
        f"global_subdivide: {mesh.n_control_points} points, {mesh.n_edges} edges, "
        f"{mesh.n_faces} faces"
    )
