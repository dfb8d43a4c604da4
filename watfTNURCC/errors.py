"""
Exception taxonomy for T-NURCC construction, refinement and parametrization.

All validation failures derive from TnurccError, itself a ValueError, so
callers that already guard against bad input with `except ValueError`
keep working. None of these are retried internally: a failure is reported
to the direct caller and construction / refinement is abandoned.

TopologyInvariantError is different: it signals a broken internal
invariant (an edge that should share a face with its neighbour does not,
a point missing where the topology guarantees one). It indicates a bug or
a mesh mutated outside the public API and is never caught by the package.
"""


class TnurccError(ValueError):
    """Base class for T-NURCC validation failures."""


class NonRectangularFaceError(TnurccError):
    """A face is not rectangular in knot space (or is not 4-sided)."""

    def __init__(self, face_index: int, detail: str = ""):
        self.face_index = face_index
        msg = f"Face {face_index} is not parametrically rectangular"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class EdgeTripleFaceError(TnurccError):
    """An edge was described by more than two faces."""

    def __init__(self, origin: int, dest: int):
        self.origin = origin
        self.dest = dest
        super().__init__(
            f"Edge between points {origin} and {dest} borders more than two faces"
        )


class IncompleteFaceEdgeError(TnurccError):
    """A boundary run of a face contains fewer than 2 points."""

    def __init__(self, face_index: int, run_index: int):
        self.face_index = face_index
        self.run_index = run_index
        super().__init__(
            f"Boundary run {run_index} of face {face_index} has fewer than 2 points"
        )


class NegativeKnotIntervalError(TnurccError):
    """A boundary run of a face carries a negative knot interval."""

    def __init__(self, face_index: int, run_index: int, knot_interval: float):
        self.face_index = face_index
        self.run_index = run_index
        self.knot_interval = knot_interval
        super().__init__(
            f"Boundary run {run_index} of face {face_index} has negative "
            f"knot interval {knot_interval}"
        )


class PointIndexError(TnurccError):
    """A face refers to a control point that does not exist."""

    def __init__(self, face_index: int, point_index: int, n_points: int):
        self.face_index = face_index
        self.point_index = point_index
        super().__init__(
            f"Face {face_index} refers to point {point_index}, "
            f"valid indices are 0..{n_points - 1}"
        )


class MissingFaceError(TnurccError):
    """An edge borders fewer than two faces (the mesh is open)."""

    def __init__(self, origin: int, dest: int):
        self.origin = origin
        self.dest = dest
        super().__init__(
            f"Edge between points {origin} and {dest} borders fewer than two faces"
        )


class BadConnectionConditionsError(TnurccError):
    """Two edges do not share a face and an endpoint in a consistent orientation."""

    def __init__(self, first: int, other: int):
        self.first = first
        self.other = other
        super().__init__(f"Edges {first} and {other} cannot be connected")


class MalformedFaceError(TnurccError):
    """A face (or a point) could not be traversed during splitting or refinement."""


class MalformedMeshError(TnurccError):
    """The mesh cannot be parametrized into a T-mesh."""


class TopologyInvariantError(RuntimeError):
    """An internal topological invariant of the T-NURCC is violated."""
