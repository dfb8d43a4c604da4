"""
Local knot vectors for T-spline basis functions.

In a T-spline every control point carries its own pair of local knot
vectors instead of sharing global ones. For a cubic basis function each
local knot vector has exactly 5 knots, centred on the knot coordinate of
the control point:

    [s - d_L2 - d_L1, s - d_L1, s, s + d_R1, s + d_R2]

where d_L1, d_L2 are the first two knot intervals to the left and d_R1, d_R2
the first two to the right. The basis function is non-zero on the open
interval (knots[0], knots[4]).

At an edge condition (no further neighbour) the last known interval is
repeated, so the knots stay non-decreasing; zero intervals give repeated
knots, exactly like the end of an open knot vector.
"""

import numpy as np
from typing import Sequence, Tuple
from dataclasses import dataclass


LOCAL_DEGREE = 3
N_LOCAL_KNOTS = LOCAL_DEGREE + 2


@dataclass
class LocalKnotVector:
    """
    Local knot vector of one cubic T-spline basis function.

    Attributes:
        knots: 5 non-decreasing knot values
    """
    knots: np.ndarray

    def __post_init__(self):
        self.knots = np.asarray(self.knots, dtype=np.float64)
        self._validate()

    def _validate(self):
        """Validate length and ordering."""
        if self.knots.shape != (N_LOCAL_KNOTS,):
            raise ValueError(
                f"Local knot vector needs exactly {N_LOCAL_KNOTS} knots, got {self.knots.shape}"
            )
        if not np.all(np.diff(self.knots) >= 0):
            raise ValueError("Local knot vector must be non-decreasing.")

    @classmethod
    def from_intervals(cls, center: float,
                       backward: Sequence[float],
                       forward: Sequence[float]) -> 'LocalKnotVector':
        """
        Build a knot vector from the intervals walked either way from `center`.

        Parameters:
            center: Knot coordinate of the control point
            backward: (d_1, d_2) intervals towards smaller values
            forward: (d_1, d_2) intervals towards larger values

        Returns:
            LocalKnotVector
        """
        b1, b2 = backward
        f1, f2 = forward
        return cls(np.array([
            center - b1 - b2,
            center - b1,
            center,
            center + f1,
            center + f1 + f2,
        ]))

    @property
    def degree(self) -> int:
        return LOCAL_DEGREE

    @property
    def center(self) -> float:
        """Knot coordinate of the owning control point."""
        return float(self.knots[2])

    @property
    def support(self) -> Tuple[float, float]:
        """Interval outside which the basis function vanishes."""
        return float(self.knots[0]), float(self.knots[-1])

    @property
    def intervals(self) -> np.ndarray:
        """The 4 knot intervals, shape (4,)."""
        return np.diff(self.knots)

    def contains(self, xi: float) -> bool:
        """True if xi lies in the half-open support [knots[0], knots[4])."""
        return self.knots[0] <= xi < self.knots[-1]

    def __repr__(self) -> str:
        return f"LocalKnotVector({self.knots.tolist()})"
