"""
T-NURCC control mesh.

A T-NURCC (Non-Uniform Rational Catmull-Clark surface with T-junctions) is a
closed quadrilateral control mesh whose edges carry knot intervals. Faces
must be rectangular in knot space: the intervals along opposite sides of a
face sum to the same value, even when T-junctions put extra points on a side.

Storage model:
    The Tnurcc owns three lists (control_points, edges, faces). Every record
    knows its own position in its list (`id`) and refers to other records by
    position only. Records are never removed; refinement appends new records
    and rewrites existing ones in place.

Orientation:
    Faces are described anticlockwise (seen from outside the surface). The
    first face to describe an edge owns its left side, the second its right.
    Every edge is linked to its rotational neighbours through four slots
    (see edge.py), so all adjacency queries are answered by following slots:

        rotation around a point  -> iter_point_edges / radial_edges
        rotation around a face   -> iter_face_edges / border_edges

Input format (try_new):
    points: array-like (n_points, n_dim)
    faces:  list of faces, each face 4 boundary runs in anticlockwise order,
            each run `(start, [(next, knot_interval), ...])`. A run ends at
            the start of the following run.

Example (unit square face, one run per side):
    [(0, [(1, 1.0)]), (1, [(2, 1.0)]), (2, [(3, 1.0)]), (3, [(0, 1.0)])]

References:
- Sederberg, Zheng, Sewell, Sabin: "Non-uniform recursive subdivision
  surfaces" (1998)
- Sederberg, Zheng, Bakenov, Nasri: "T-splines and T-NURCCs" (2003)
"""

import logging
import numpy as np
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from .control_point import TnurccControlPoint
from .edge import TnurccEdge, Connection, VertexEnd, FaceSide
from .face import TnurccFace
from ..config import get_tolerance
from ..errors import (
    NonRectangularFaceError,
    EdgeTripleFaceError,
    IncompleteFaceEdgeError,
    NegativeKnotIntervalError,
    PointIndexError,
    MissingFaceError,
    BadConnectionConditionsError,
    MalformedFaceError,
    TopologyInvariantError,
)

logger = logging.getLogger(__name__)


FaceRun = Tuple[int, List[Tuple[int, float]]]


class Tnurcc:
    """
    Closed T-NURCC control mesh.

    Attributes:
        control_points: Point records, control_points[i].id == i
        edges: Edge records, edges[i].id == i
        faces: Face records, faces[i].id == i
    """

    def __init__(self,
                 control_points: Optional[List[TnurccControlPoint]] = None,
                 edges: Optional[List[TnurccEdge]] = None,
                 faces: Optional[List[TnurccFace]] = None):
        self.control_points: List[TnurccControlPoint] = control_points if control_points is not None else []
        self.edges: List[TnurccEdge] = edges if edges is not None else []
        self.faces: List[TnurccFace] = faces if faces is not None else []

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def try_new(cls, points, faces: Sequence[Sequence[FaceRun]]) -> 'Tnurcc':
        """
        Build a validated, fully connected T-NURCC.

        Parameters:
            points: Control point coordinates, array-like (n_points, n_dim)
            faces: Face descriptions, 4 anticlockwise boundary runs each

        Returns:
            New Tnurcc

        Raises:
            NonRectangularFaceError: Face without 4 runs, runs that do not
                join, or opposite sides with different knot lengths
            IncompleteFaceEdgeError: Boundary run with fewer than 2 points
            PointIndexError: Run start or step outside the point list
            NegativeKnotIntervalError: Step with a knot interval below zero
            EdgeTripleFaceError: Edge described by a third face
            MissingFaceError: Edge bordering only one face
            BadConnectionConditionsError: Adjacent boundary edges that
                cannot be paired
        """
        tol = get_tolerance()
        mesh = cls()

        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        for coord in points:
            mesh.add_control_point(coord)
        n_points = mesh.n_control_points

        edge_lookup: Dict[FrozenSet[int], int] = {}

        for face_index, runs in enumerate(faces):
            if len(runs) != 4:
                raise NonRectangularFaceError(
                    face_index, f"expected 4 boundary runs, got {len(runs)}"
                )

            sides = []
            for run_index, (start, steps) in enumerate(runs):
                if len(steps) == 0:
                    raise IncompleteFaceEdgeError(face_index, run_index)
                for idx in [start] + [nxt for nxt, _ in steps]:
                    if not 0 <= idx < n_points:
                        raise PointIndexError(face_index, idx, n_points)
                for _, k in steps:
                    if k < 0.0:
                        raise NegativeKnotIntervalError(face_index, run_index, k)
                sides.append(sum(k for _, k in steps))

                run_end = steps[-1][0]
                next_start = runs[(run_index + 1) % 4][0]
                if run_end != next_start:
                    raise NonRectangularFaceError(
                        face_index,
                        f"run {run_index} ends at point {run_end} "
                        f"but the next run starts at point {next_start}"
                    )

            if not tol.near(sides[0], sides[2]) or not tol.near(sides[1], sides[3]):
                raise NonRectangularFaceError(
                    face_index, f"side knot lengths {sides}"
                )

            # Points in boundary order, closed: seq[0] == seq[-1]
            seq = [runs[0][0]]
            intervals = []
            for _, steps in runs:
                for nxt, k in steps:
                    seq.append(nxt)
                    intervals.append(float(k))

            face = mesh.add_face()
            mesh.faces[face].corners = [run[0] for run in runs]

            face_edges = []
            for i in range(len(intervals)):
                origin, dest = seq[i], seq[i + 1]
                key = frozenset((origin, dest))

                if key in edge_lookup:
                    e = edge_lookup[key]
                    edge = mesh.edges[e]
                    if edge.face_right is not None:
                        raise EdgeTripleFaceError(origin, dest)
                    edge.face_right = face
                else:
                    e = mesh.add_edge(intervals[i], origin, dest)
                    mesh.edges[e].face_left = face
                    edge_lookup[key] = e

                if mesh.faces[face].edge is None:
                    mesh.faces[face].edge = e

                if face_edges:
                    mesh.connect(e, face_edges[-1])
                face_edges.append(e)

            mesh.connect(face_edges[0], face_edges[-1])

        for edge in mesh.edges:
            if edge.face_left is None or edge.face_right is None:
                raise MissingFaceError(edge.origin, edge.dest)

        logger.debug(
            f"Built T-NURCC: {mesh.n_control_points} points, {mesh.n_edges} edges, "
            f"{mesh.n_faces} faces, {len(mesh.extraordinary_control_points)} extraordinary"
        )
        return mesh

    @classmethod
    def new(cls, points, faces: Sequence[Sequence[FaceRun]]) -> 'Tnurcc':
        """Same as try_new (errors propagate unchanged)."""
        return cls.try_new(points, faces)

    @classmethod
    def from_quad_mesh(cls, points, quads: Sequence[Sequence[int]]) -> 'Tnurcc':
        """
        Build a T-NURCC from a closed quad mesh, every knot interval 1.

        Parameters:
            points: Control point coordinates, array-like (n_points, n_dim)
            quads: Faces as 4 point indices each, anticlockwise

        Returns:
            New Tnurcc

        Raises:
            NonRectangularFaceError: A quad without exactly 4 indices
            MissingFaceError: The mesh is open
            EdgeTripleFaceError: The mesh is non-manifold
            PointIndexError: A corner index outside the point list
        """
        from ..geometry.primitives import quad_mesh_to_faces

        counts: Dict[FrozenSet[int], int] = {}
        ends: Dict[FrozenSet[int], Tuple[int, int]] = {}
        for quad_index, quad in enumerate(quads):
            if len(quad) != 4:
                raise NonRectangularFaceError(
                    quad_index, f"quad has {len(quad)} corners"
                )
            for i in range(4):
                a, b = quad[i], quad[(i + 1) % 4]
                key = frozenset((a, b))
                counts[key] = counts.get(key, 0) + 1
                ends.setdefault(key, (a, b))

        for key, count in counts.items():
            if count < 2:
                raise MissingFaceError(*ends[key])
            if count > 2:
                raise EdgeTripleFaceError(*ends[key])

        return cls.try_new(points, quad_mesh_to_faces(quads))

    # -------------------------------------------------------------------------
    # Record creation
    # -------------------------------------------------------------------------

    def add_control_point(self, coordinates) -> int:
        """Append a point with valence 0 and return its handle."""
        index = len(self.control_points)
        self.control_points.append(TnurccControlPoint(id=index, coordinates=coordinates))
        return index

    def add_edge(self, knot_interval: float, origin: int, dest: int) -> int:
        """
        Append an edge from `origin` to `dest` and return its handle.

        Both endpoints gain one valence and take the new edge as their
        incoming edge. All four slots point at the edge itself and no faces
        are assigned.
        """
        index = len(self.edges)
        self.edges.append(TnurccEdge(
            id=index, knot_interval=float(knot_interval), origin=origin, dest=dest
        ))
        for p in (origin, dest):
            self.control_points[p].valence += 1
            self.control_points[p].incoming_edge = index
        return index

    def add_face(self, edge: Optional[int] = None) -> int:
        """Append a face without corners and return its handle."""
        index = len(self.faces)
        self.faces.append(TnurccFace(id=index, edge=edge))
        return index

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    @property
    def n_control_points(self) -> int:
        return len(self.control_points)

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def extraordinary_control_points(self) -> List[int]:
        """Handles of points whose valence differs from 4."""
        return [cp.id for cp in self.control_points if cp.is_extraordinary]

    def point_positions(self) -> np.ndarray:
        """Control point coordinates, shape (n_control_points, n_dim)."""
        if not self.control_points:
            return np.zeros((0, 0))
        return np.array([cp.coordinates for cp in self.control_points])

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def nth_acw_edge_from_point(self, e: int, p: int, n: int) -> Optional[int]:
        """
        Edge reached after `n` anticlockwise steps around point `p`, starting
        from edge `e`. None if `p` is not an endpoint along the way.
        """
        for _ in range(n):
            nxt = self.edges[e].acw_edge_from_point(p)
            if nxt is None:
                return None
            e = nxt
        return e

    def nth_cw_edge_from_point(self, e: int, p: int, n: int) -> Optional[int]:
        """Clockwise counterpart of nth_acw_edge_from_point."""
        for _ in range(n):
            nxt = self.edges[e].cw_edge_from_point(p)
            if nxt is None:
                return None
            e = nxt
        return e

    def iter_point_edges(self, p: int, start: Optional[int] = None) -> Iterator[int]:
        """
        Edges around point `p` in anticlockwise order.

        Starts from `start` (default: the point's incoming edge) and stops
        before returning to it. Yields nothing for an isolated point.
        """
        if start is None:
            start = self.control_points[p].incoming_edge
        if start is None:
            return

        e = start
        for _ in range(len(self.edges)):
            yield e
            nxt = self.edges[e].acw_edge_from_point(p)
            if nxt is None:
                raise TopologyInvariantError(
                    f"Edge {e} reached while rotating around point {p} does not touch it"
                )
            if nxt == start:
                return
            e = nxt
        raise TopologyInvariantError(f"Rotation around point {p} does not close")

    def iter_face_edges(self, f: int, start: Optional[int] = None) -> Iterator[int]:
        """
        Edges bordering face `f` in anticlockwise order.

        Starts from `start` (default: the face's reference edge) and stops
        before returning to it. Yields nothing if the face has no edge.
        """
        if start is None:
            start = self.faces[f].edge
        if start is None:
            return

        e = start
        for _ in range(len(self.edges)):
            yield e
            nxt = self.edges[e].acw_edge_from_face(f)
            if nxt is None:
                raise TopologyInvariantError(
                    f"Edge {e} reached while rotating around face {f} does not border it"
                )
            if nxt == start:
                return
            e = nxt
        raise TopologyInvariantError(f"Rotation around face {f} does not close")

    def radial_edges(self, p: int) -> List[int]:
        """All edges incident to `p`, anticlockwise from its incoming edge."""
        return list(self.iter_point_edges(p))

    def border_edges(self, f: int) -> List[int]:
        """All edges bordering `f`, anticlockwise from its reference edge."""
        return list(self.iter_face_edges(f))

    def boundary_vertices(self, f: int) -> List[int]:
        """
        Points on the boundary of `f`, anticlockwise, starting from the
        first point of its reference edge (as seen from inside the face).
        """
        vertices = []
        for e in self.iter_face_edges(f):
            edge = self.edges[e]
            if edge.face_side(f) is FaceSide.LEFT:
                vertices.append(edge.origin)
            else:
                vertices.append(edge.dest)
        return vertices

    def edge_from_opposing_point(self, center: int, op: int) -> Optional[int]:
        """Edge joining `center` and `op`, or None if they are not adjacent."""
        for e in self.iter_point_edges(center):
            if self.edges[e].point_end(op) is not None:
                return e
        return None

    def fill_face_corners(self, f: int) -> List[int]:
        """
        Corners of face `f`, filling them from its boundary if unknown.

        Only faces with exactly 4 boundary points can be filled by traversal;
        faces built by try_new or subdivision always carry their corners.
        """
        face = self.faces[f]
        if all(c is not None for c in face.corners):
            return list(face.corners)

        vertices = self.boundary_vertices(f)
        if len(vertices) != 4:
            raise MalformedFaceError(
                f"Cannot infer corners of face {f} from {len(vertices)} boundary points"
            )
        face.corners = vertices
        return list(vertices)

    # -------------------------------------------------------------------------
    # Topology editing
    # -------------------------------------------------------------------------

    def connect(self, first: int, other: int) -> None:
        """
        Pair two edges that share a face and an endpoint.

        The slots to write are derived from how the faces and endpoints are
        shared, regardless of the current slot contents. One slot pair is
        written for a single shared face, two for edges sharing both faces.

        Raises:
            BadConnectionConditionsError: No consistent slot pair exists
        """
        a, b = self.edges[first], self.edges[other]
        pairs = a.pairing_slots(b)
        if not pairs:
            raise BadConnectionConditionsError(first, other)
        for first_slot, other_slot in pairs:
            a.set_connection(other, first_slot)
            b.set_connection(first, other_slot)

    def split_edge(self, e: int, position, ratio: float) -> int:
        """
        Split edge `e` at a new point.

        Edge `e` keeps its origin and now ends at the new point with
        interval ratio * k. A conjugate edge runs from the new point to the
        old destination with interval (1 - ratio) * k and borders the same
        faces. Neighbours at the old destination are re-paired with the
        conjugate, and `e` is paired with the conjugate.

        Parameters:
            e: Edge to split
            position: Coordinates of the new point
            ratio: Split ratio in (0, 1)

        Returns:
            Handle of the new point (the conjugate is the last edge)

        Raises:
            MalformedFaceError: Neighbours could not be re-paired
        """
        if not 0.0 < ratio < 1.0:
            raise ValueError(f"Split ratio must be in (0, 1), got {ratio}")

        edge = self.edges[e]
        dest = edge.dest

        point = self.add_control_point(position)
        conj = self.add_edge((1.0 - ratio) * edge.knot_interval, point, dest)

        # dest only traded one edge for another
        self.control_points[dest].valence -= 1

        conjugate = self.edges[conj]
        conjugate.face_left = edge.face_left
        conjugate.face_right = edge.face_right

        edge.dest = point
        edge.knot_interval *= ratio

        self.control_points[point].valence = 2
        self.control_points[point].incoming_edge = e

        try:
            for con in (Connection.LEFT_ACW, Connection.RIGHT_CW):
                neighbour = edge.connection(con)
                if neighbour in (e, conj):
                    continue
                self.connect(neighbour, conj)
            self.connect(e, conj)
        except BadConnectionConditionsError as err:
            raise MalformedFaceError(
                f"Could not re-attach neighbours while splitting edge {e}: {err}"
            ) from err

        return point

    # -------------------------------------------------------------------------
    # Refinement and conversion
    # -------------------------------------------------------------------------

    def global_subdivide(self) -> None:
        """One level of non-uniform Catmull-Clark refinement, in place."""
        from .subdivision import global_subdivide
        global_subdivide(self)

    def subdivide(self, levels: int = 1) -> 'Tnurcc':
        """
        Apply global_subdivide `levels` times, in place.

        A failure leaves the mesh partially refined; keep a clone() if the
        original is still needed.

        Returns:
            self, for chaining
        """
        if levels < 0:
            raise ValueError(f"levels must be non-negative, got {levels}")
        for level in range(levels):
            self.global_subdivide()
            logger.debug(
                f"Subdivision level {level + 1}: {self.n_control_points} points, "
                f"{self.n_edges} edges, {self.n_faces} faces"
            )
        return self

    def to_tmesh(self, subdivisions: int = 2):
        """
        Convert to a T-mesh evaluator (see parametrization.to_tmesh).

        Works on a clone; this mesh is left untouched.
        """
        from .parametrization import to_tmesh
        return to_tmesh(self, subdivisions=subdivisions)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def clone(self) -> 'Tnurcc':
        """Deep copy; handles stay valid because they are list positions."""
        return Tnurcc(
            control_points=[cp.copy() for cp in self.control_points],
            edges=[e.copy() for e in self.edges],
            faces=[f.copy() for f in self.faces],
        )

    def clear(self) -> None:
        """Drop every record."""
        self.control_points.clear()
        self.edges.clear()
        self.faces.clear()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def verify(self) -> None:
        """
        Check the topological invariants of the mesh.

        - Point closure: rotating around every point returns to the start
          after exactly `valence` steps, and the valence matches the number
          of edges using the point.
        - Edge reciprocity: every slot neighbour shares the implied face and
          point, and rotating back from it returns to the edge.
        - Face closure: anticlockwise and clockwise traversal of every face
          returns to the start in the same number of steps.

        Raises:
            TopologyInvariantError: On the first violation found
        """
        usage = [0] * len(self.control_points)
        for edge in self.edges:
            usage[edge.origin] += 1
            usage[edge.dest] += 1

        for i, cp in enumerate(self.control_points):
            if cp.id != i:
                raise TopologyInvariantError(f"Point at position {i} has id {cp.id}")
            if cp.valence != usage[i]:
                raise TopologyInvariantError(
                    f"Point {i} has valence {cp.valence} but {usage[i]} incident edges"
                )
            if cp.incoming_edge is None:
                if cp.valence != 0:
                    raise TopologyInvariantError(f"Point {i} has no incoming edge")
                continue
            if self.edges[cp.incoming_edge].point_end(i) is None:
                raise TopologyInvariantError(
                    f"Incoming edge {cp.incoming_edge} of point {i} does not touch it"
                )
            steps = len(self.radial_edges(i))
            if steps != cp.valence:
                raise TopologyInvariantError(
                    f"Rotation around point {i} takes {steps} steps, valence is {cp.valence}"
                )

        for i, edge in enumerate(self.edges):
            if edge.id != i:
                raise TopologyInvariantError(f"Edge at position {i} has id {edge.id}")
            if edge.face_left is None or edge.face_right is None:
                raise TopologyInvariantError(f"Edge {i} does not border two faces")
            self._verify_edge_reciprocity(edge)

        for i, face in enumerate(self.faces):
            if face.id != i:
                raise TopologyInvariantError(f"Face at position {i} has id {face.id}")
            if face.edge is None:
                raise TopologyInvariantError(f"Face {i} has no reference edge")
            acw_steps = len(self.border_edges(i))
            cw_steps = self._count_cw_face_steps(i)
            if acw_steps != cw_steps:
                raise TopologyInvariantError(
                    f"Face {i}: anticlockwise traversal takes {acw_steps} steps, "
                    f"clockwise takes {cw_steps}"
                )

    def _verify_edge_reciprocity(self, edge: TnurccEdge) -> None:
        # slot -> (face side shared, vertex end shared, back-rotation around point is acw)
        expectations = {
            Connection.LEFT_CW: (FaceSide.LEFT, VertexEnd.ORIGIN, False),
            Connection.LEFT_ACW: (FaceSide.LEFT, VertexEnd.DEST, True),
            Connection.RIGHT_CW: (FaceSide.RIGHT, VertexEnd.DEST, False),
            Connection.RIGHT_ACW: (FaceSide.RIGHT, VertexEnd.ORIGIN, True),
        }
        for con, (side, end, back_acw) in expectations.items():
            n = edge.connection(con)
            neighbour = self.edges[n]
            face = edge.face_from_side(side)
            point = edge.point_at_end(end)

            if neighbour.face_side(face) is None:
                raise TopologyInvariantError(
                    f"Edge {edge.id} {con.name} neighbour {n} does not border face {face}"
                )
            if neighbour.point_end(point) is None:
                raise TopologyInvariantError(
                    f"Edge {edge.id} {con.name} neighbour {n} does not touch point {point}"
                )

            if back_acw:
                around_point = neighbour.acw_edge_from_point(point)
                around_face = neighbour.cw_edge_from_face(face)
            else:
                around_point = neighbour.cw_edge_from_point(point)
                around_face = neighbour.acw_edge_from_face(face)
            if around_point != edge.id or around_face != edge.id:
                raise TopologyInvariantError(
                    f"Edge {edge.id} {con.name} neighbour {n} does not point back"
                )

    def _count_cw_face_steps(self, f: int) -> int:
        start = self.faces[f].edge
        e = start
        for steps in range(1, len(self.edges) + 1):
            nxt = self.edges[e].cw_edge_from_face(f)
            if nxt is None:
                raise TopologyInvariantError(
                    f"Edge {e} reached while rotating around face {f} does not border it"
                )
            if nxt == start:
                return steps
            e = nxt
        raise TopologyInvariantError(f"Clockwise rotation around face {f} does not close")

    def __repr__(self) -> str:
        return (f"Tnurcc(n_control_points={self.n_control_points}, "
                f"n_edges={self.n_edges}, n_faces={self.n_faces})")
