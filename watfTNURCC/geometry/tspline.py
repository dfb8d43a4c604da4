"""
T-spline surfaces on a T-mesh.

T-splines generalize NURBS by allowing T-junctions in the control mesh,
enabling local refinement without propagating knot lines globally.

Key concepts:
1. Local knot vectors: Each control point has its own local knot vectors
2. T-junctions: Knot lines can terminate within the mesh
3. Edge conditions: A direction without a neighbour repeats its last interval

The T-spline basis function for control point i is:
    B_i(s, t) = N[S_i](s) * N[T_i](t)

where S_i and T_i are local knot vectors specific to control point i,
obtained by walking two knot intervals from the point in each direction
(see knot_vector.LocalKnotVector). The surface is evaluated in rational form:

    S(s, t) = sum_i B_i(s, t) P_i / sum_i B_i(s, t)

Mesh representation:
    Each TSplineControlPoint stores its knot coordinates (s, t) and, for each
    of the 4 directions, a (neighbour index or None, knot interval) pair.
    A None neighbour marks an edge condition.

References:
- Sederberg et al., "T-splines and T-NURCCs"
- Scott et al., "Isogeometric analysis using T-splines"
"""

import numpy as np
from enum import IntEnum
from typing import List, Optional, Tuple
from dataclasses import dataclass, field

from .knot_vector import LocalKnotVector
from .bspline import eval_local_basis
from ..config import get_tolerance


class TmeshDirection(IntEnum):
    """Direction in the (s, t) parameter plane, clockwise from UP."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def clockwise(self) -> 'TmeshDirection':
        """Quarter turn clockwise."""
        return TmeshDirection((self + 1) % 4)

    def anti_clockwise(self) -> 'TmeshDirection':
        """Quarter turn anticlockwise."""
        return TmeshDirection((self + 3) % 4)

    def flip(self) -> 'TmeshDirection':
        """Half turn."""
        return TmeshDirection((self + 2) % 4)

    @property
    def vertical(self) -> bool:
        return self in (TmeshDirection.UP, TmeshDirection.DOWN)

    @property
    def horizontal(self) -> bool:
        return self in (TmeshDirection.LEFT, TmeshDirection.RIGHT)

    @property
    def knot_delta_positive(self) -> bool:
        """True if moving this way increases the knot coordinate."""
        return self in (TmeshDirection.UP, TmeshDirection.RIGHT)

    def mutate_knot_coordinates(self, coords: Tuple[float, float],
                                delta: float) -> Tuple[float, float]:
        """Move `coords` a distance `delta` in this direction."""
        s, t = coords
        if self is TmeshDirection.UP:
            return s, t + delta
        if self is TmeshDirection.DOWN:
            return s, t - delta
        if self is TmeshDirection.LEFT:
            return s - delta, t
        return s + delta, t


Connection = Tuple[Optional[int], float]


@dataclass
class TSplineControlPoint:
    """
    Control point of a T-mesh.

    Attributes:
        point: Physical coordinates
        knot_coordinates: (s, t) position in the parameter plane
        connections: (neighbour index or None, knot interval) per
            TmeshDirection
    """
    point: np.ndarray
    knot_coordinates: Tuple[float, float]
    connections: List[Connection] = field(
        default_factory=lambda: [(None, 0.0) for _ in TmeshDirection]
    )

    def __post_init__(self):
        self.point = np.asarray(self.point, dtype=np.float64)
        self.knot_coordinates = (float(self.knot_coordinates[0]),
                                 float(self.knot_coordinates[1]))
        if len(self.connections) != 4:
            raise ValueError(f"Expected 4 connections, got {len(self.connections)}")
        for _, weight in self.connections:
            if weight < 0.0:
                raise ValueError(f"Knot intervals must be non-negative, got {weight}")

    def connection(self, direction: TmeshDirection) -> Connection:
        return self.connections[direction]

    def set_connection(self, direction: TmeshDirection,
                       neighbour: Optional[int], weight: float) -> None:
        if weight < 0.0:
            raise ValueError(f"Knot intervals must be non-negative, got {weight}")
        self.connections[direction] = (neighbour, float(weight))


class TSplineMesh:
    """
    T-mesh with cubic local basis functions.

    Local knot vectors are built lazily on first evaluation and cached;
    call invalidate() after editing control points or connections.

    Attributes:
        control_points: List of TSplineControlPoint
    """

    def __init__(self, control_points: List[TSplineControlPoint]):
        self.control_points = list(control_points)
        self._knot_vectors: Optional[List[Tuple[LocalKnotVector, LocalKnotVector]]] = None
        self._points: Optional[np.ndarray] = None
        self._validate()

    def _validate(self):
        n = len(self.control_points)
        for i, cp in enumerate(self.control_points):
            for direction in TmeshDirection:
                neighbour, _ = cp.connection(direction)
                if neighbour is not None and not 0 <= neighbour < n:
                    raise ValueError(
                        f"Control point {i} connects {direction.name} to missing point {neighbour}"
                    )

    @property
    def n_control_points(self) -> int:
        return len(self.control_points)

    @property
    def n_dim(self) -> int:
        """Physical dimension of the control points."""
        if not self.control_points:
            return 0
        return len(self.control_points[0].point)

    # -------------------------------------------------------------------------
    # Local knot vectors
    # -------------------------------------------------------------------------

    def _walk(self, index: int, direction: TmeshDirection, steps: int = 2) -> List[float]:
        """Knot intervals met walking `steps` times from point `index`."""
        intervals = []
        current = index
        while len(intervals) < steps:
            neighbour, weight = self.control_points[current].connection(direction)
            intervals.append(weight)
            if neighbour is None:
                # Edge condition: repeat the last interval
                intervals.extend([weight] * (steps - len(intervals)))
                break
            current = neighbour
        return intervals

    def point_knot_vectors(self, index: int) -> Tuple[LocalKnotVector, LocalKnotVector]:
        """(s, t) local knot vectors of one control point."""
        s, t = self.control_points[index].knot_coordinates
        s_kv = LocalKnotVector.from_intervals(
            s,
            backward=self._walk(index, TmeshDirection.LEFT),
            forward=self._walk(index, TmeshDirection.RIGHT),
        )
        t_kv = LocalKnotVector.from_intervals(
            t,
            backward=self._walk(index, TmeshDirection.DOWN),
            forward=self._walk(index, TmeshDirection.UP),
        )
        return s_kv, t_kv

    def knot_vectors(self) -> List[Tuple[LocalKnotVector, LocalKnotVector]]:
        """Local knot vectors of every control point (cached)."""
        if self._knot_vectors is None:
            self._knot_vectors = [
                self.point_knot_vectors(i) for i in range(self.n_control_points)
            ]
        return self._knot_vectors

    def points(self) -> np.ndarray:
        """Control point positions as an (n_control_points, n_dim) array (cached)."""
        if self._points is None:
            self._points = np.array([cp.point for cp in self.control_points])
        return self._points

    def invalidate(self) -> None:
        """Drop the cached knot vectors and control point array."""
        self._knot_vectors = None
        self._points = None

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def eval_basis(self, s: float, t: float) -> np.ndarray:
        """Values of all basis functions at (s, t), shape (n_control_points,)."""
        return np.array([
            eval_local_basis(s_kv, s) * eval_local_basis(t_kv, t)
            for s_kv, t_kv in self.knot_vectors()
        ])

    def eval_point(self, s: float, t: float) -> np.ndarray:
        """
        Evaluate the surface at (s, t).

        Parameters:
            s: Horizontal parameter
            t: Vertical parameter

        Returns:
            Physical point, shape (n_dim,)

        Raises:
            ValueError: If no basis function is supported at (s, t)
        """
        basis = self.eval_basis(s, t)
        denominator = basis.sum()
        if get_tolerance().so_small(denominator):
            raise ValueError(f"Parameter ({s}, {t}) lies outside every basis function support")

        return basis @ self.points() / denominator

    def eval_points(self, params) -> np.ndarray:
        """
        Evaluate the surface at several parameters.

        Parameters:
            params: Array-like of shape (n, 2) with (s, t) rows

        Returns:
            Array of shape (n, n_dim)
        """
        params = np.asarray(params, dtype=np.float64).reshape(-1, 2)
        return np.array([self.eval_point(s, t) for s, t in params])

    def __repr__(self) -> str:
        return f"TSplineMesh(n_control_points={self.n_control_points})"
