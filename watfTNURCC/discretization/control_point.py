"""
Control point record of a T-NURCC.

A T-NURCC control point carries:
- Physical coordinates (any dimension)
- Valence: the number of edges having this point as an endpoint
- A single back-reference (incoming_edge) into the edge graph, from which
  every other incident edge is reached by rotating around the point

Records live in the owning Tnurcc's control_points list; `id` is the
record's position in that list and every cross-reference to a point is
that integer handle.

Key invariant (must always hold for a valid mesh):
    valence == number of edges with this point as origin or dest
            == steps of a full anticlockwise rotation from incoming_edge
"""

import numpy as np
from typing import Optional, List
from dataclasses import dataclass


@dataclass
class TnurccControlPoint:
    """
    Control point of a T-NURCC.

    Attributes:
        id: Handle of the point (index in Tnurcc.control_points)
        coordinates: Physical coordinates (x, y) or (x, y, z)
        valence: Number of incident edges
        incoming_edge: Handle of one incident edge, None until an edge is attached
    """
    id: int
    coordinates: np.ndarray
    valence: int = 0
    incoming_edge: Optional[int] = None

    def __post_init__(self):
        """Ensure coordinates is a float numpy array."""
        self.coordinates = np.asarray(self.coordinates, dtype=np.float64)

    @property
    def n_dim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.coordinates)

    @property
    def is_extraordinary(self) -> bool:
        """True if the valence differs from 4."""
        return self.valence != 4

    def copy(self) -> 'TnurccControlPoint':
        """Independent copy (coordinates are copied)."""
        return TnurccControlPoint(
            id=self.id,
            coordinates=self.coordinates.copy(),
            valence=self.valence,
            incoming_edge=self.incoming_edge,
        )

    def __repr__(self) -> str:
        return (f"TnurccControlPoint(id={self.id}, coord={self.coordinates}, "
                f"valence={self.valence}, incoming_edge={self.incoming_edge})")


def create_control_points_from_array(coordinates) -> List[TnurccControlPoint]:
    """
    Create TnurccControlPoint records from a coordinate array.

    Parameters:
        coordinates: Array-like of shape (n_points, n_dim)

    Returns:
        List of control points with ids 0..n_points-1, valence 0 and
        no incoming edge
    """
    coordinates = np.asarray(coordinates, dtype=np.float64)
    if coordinates.ndim == 1:
        coordinates = coordinates.reshape(-1, 1)

    return [
        TnurccControlPoint(id=i, coordinates=coordinates[i].copy())
        for i in range(coordinates.shape[0])
    ]
