"""
Numerical tolerance configuration.

Every "within tolerance" comparison in the package goes through this module:
- rectangular-face check during T-NURCC construction
- zero denominators in the refinement weights
- seam detection during T-mesh parametrization

The default can be overridden process-wide with set_tolerance(), e.g.
for meshes whose knot intervals are very small or very large:

    from watfTNURCC.config import set_tolerance
    set_tolerance(1e-9)
"""

from dataclasses import dataclass

import numpy as np


TOLERANCE = 1.0e-6


@dataclass(frozen=True)
class Tolerance:
    """
    Absolute tolerance for floating point comparisons.

    Attributes:
        absolute: Values with magnitude below this are treated as zero
    """
    absolute: float = TOLERANCE

    def __post_init__(self):
        if self.absolute <= 0.0:
            raise ValueError(f"Tolerance must be positive, got {self.absolute}")

    def so_small(self, value: float) -> bool:
        """True if |value| is below the tolerance."""
        return abs(value) < self.absolute

    def near(self, a, b) -> bool:
        """True if a and b (scalars or arrays) agree component-wise within tolerance."""
        return bool(np.all(np.abs(np.asarray(a) - np.asarray(b)) < self.absolute))


_default = Tolerance()


def get_tolerance() -> Tolerance:
    """Current process-wide tolerance."""
    return _default


def set_tolerance(value: float) -> Tolerance:
    """
    Override the process-wide tolerance.

    Parameters:
        value: New absolute tolerance (must be positive)

    Returns:
        The previous Tolerance, so callers can restore it
    """
    global _default
    previous = _default
    _default = Tolerance(absolute=value)
    return previous


def so_small(value: float) -> bool:
    """Shorthand for get_tolerance().so_small(value)."""
    return _default.so_small(value)
