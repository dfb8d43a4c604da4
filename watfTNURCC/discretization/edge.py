"""
Directed edge record of a T-NURCC.

An edge runs from `origin` to `dest` and carries a knot interval (its
parametric length). Faces are named relative to that direction: with the
edge pointing "up", face_left lies to the left and face_right to the right.

Each edge keeps four neighbour slots (connections). Because the mesh is
planar-orientable, every slot serves two rotations at once:

    slot        next edge around ...
    ---------   --------------------------------------------------
    LEFT_CW     left face, clockwise    == origin, anticlockwise
    LEFT_ACW    left face, anticlockwise == dest, clockwise
    RIGHT_CW    right face, clockwise   == dest, anticlockwise
    RIGHT_ACW   right face, anticlockwise == origin, clockwise

    LEFT_ACW -----+----- RIGHT_CW
                  ^  dest
         left     |     right
                  |  origin
    LEFT_CW  -----+----- RIGHT_ACW

A freshly created edge points every slot at itself.

Edge pairing (connect) only needs the shared face and shared endpoint of
two edges; the slot pair to write is looked up in PAIRING_TABLE.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..errors import TopologyInvariantError


class Connection(IntEnum):
    """Neighbour slot of an edge (index into TnurccEdge.connections)."""
    LEFT_CW = 0
    LEFT_ACW = 1
    RIGHT_CW = 2
    RIGHT_ACW = 3


class VertexEnd(Enum):
    """End of an edge."""
    ORIGIN = 0
    DEST = 1


class FaceSide(Enum):
    """Side of an edge, relative to origin -> dest."""
    LEFT = 0
    RIGHT = 1


class SharedFace(Enum):
    """How a face is shared between edges `first` and `other`."""
    LEFT_LEFT = 0     # first.face_left  == other.face_left
    RIGHT_RIGHT = 1   # first.face_right == other.face_right
    LEFT_RIGHT = 2    # first.face_left  == other.face_right
    RIGHT_LEFT = 3    # first.face_right == other.face_left


class SharedPoint(Enum):
    """How an endpoint is shared between edges `first` and `other`."""
    ORIGIN_DEST = 0   # first.origin == other.dest
    DEST_ORIGIN = 1   # first.dest   == other.origin
    ORIGIN_ORIGIN = 2  # first.origin == other.origin
    DEST_DEST = 3     # first.dest   == other.dest


# (shared face, shared point) -> (slot on first, slot on other).
# Edges sharing a face on equal sides must run head to tail; edges sharing a
# face on opposite sides must share the same end. Every other combination is
# geometrically inconsistent and absent from the table.
PAIRING_TABLE: Dict[Tuple[SharedFace, SharedPoint], Tuple[Connection, Connection]] = {
    (SharedFace.LEFT_LEFT, SharedPoint.ORIGIN_DEST): (Connection.LEFT_CW, Connection.LEFT_ACW),
    (SharedFace.LEFT_LEFT, SharedPoint.DEST_ORIGIN): (Connection.LEFT_ACW, Connection.LEFT_CW),
    (SharedFace.RIGHT_RIGHT, SharedPoint.ORIGIN_DEST): (Connection.RIGHT_ACW, Connection.RIGHT_CW),
    (SharedFace.RIGHT_RIGHT, SharedPoint.DEST_ORIGIN): (Connection.RIGHT_CW, Connection.RIGHT_ACW),
    (SharedFace.LEFT_RIGHT, SharedPoint.ORIGIN_ORIGIN): (Connection.LEFT_CW, Connection.RIGHT_ACW),
    (SharedFace.LEFT_RIGHT, SharedPoint.DEST_DEST): (Connection.LEFT_ACW, Connection.RIGHT_CW),
    (SharedFace.RIGHT_LEFT, SharedPoint.ORIGIN_ORIGIN): (Connection.RIGHT_ACW, Connection.LEFT_CW),
    (SharedFace.RIGHT_LEFT, SharedPoint.DEST_DEST): (Connection.RIGHT_CW, Connection.LEFT_ACW),
}


@dataclass
class TnurccEdge:
    """
    Directed edge of a T-NURCC.

    Attributes:
        id: Handle of the edge (index in Tnurcc.edges)
        knot_interval: Parametric length (>= 0)
        origin: Handle of the start point
        dest: Handle of the end point
        face_left: Handle of the face to the left, None if not yet assigned
        face_right: Handle of the face to the right, None if not yet assigned
        connections: Four neighbour edge handles, indexed by Connection
    """
    id: int
    knot_interval: float
    origin: int
    dest: int
    face_left: Optional[int] = None
    face_right: Optional[int] = None
    connections: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.connections:
            self.connections = [self.id] * 4
        if len(self.connections) != 4:
            raise TopologyInvariantError(
                f"Edge {self.id} must have 4 connection slots, got {len(self.connections)}"
            )

    # -------------------------------------------------------------------------
    # Slots
    # -------------------------------------------------------------------------

    def connection(self, con: Connection) -> int:
        """Edge handle stored in slot `con`."""
        edge = self.connections[con]
        if edge is None:
            raise TopologyInvariantError(f"Edge {self.id} has an empty {con.name} slot")
        return edge

    def set_connection(self, other: int, con: Connection) -> int:
        """Store `other` in slot `con` and return the previous occupant."""
        previous = self.connection(con)
        self.connections[con] = other
        return previous

    def connection_orientation(self, other: int) -> List[Connection]:
        """All slots currently pointing at edge `other`."""
        return [con for con in Connection if self.connections[con] == other]

    # -------------------------------------------------------------------------
    # Endpoints and faces
    # -------------------------------------------------------------------------

    def point_end(self, point: int) -> Optional[VertexEnd]:
        """End at which `point` sits, or None if it is not an endpoint."""
        if self.origin == point:
            return VertexEnd.ORIGIN
        if self.dest == point:
            return VertexEnd.DEST
        return None

    def point_at_end(self, end: VertexEnd) -> int:
        return self.origin if end is VertexEnd.ORIGIN else self.dest

    def other_point(self, point: int) -> Optional[int]:
        """Endpoint opposite to `point`, or None if `point` is not an endpoint."""
        end = self.point_end(point)
        if end is None:
            return None
        return self.dest if end is VertexEnd.ORIGIN else self.origin

    def face_side(self, face: int) -> Optional[FaceSide]:
        """Side on which `face` lies, or None if the edge does not border it."""
        if self.face_left is not None and self.face_left == face:
            return FaceSide.LEFT
        if self.face_right is not None and self.face_right == face:
            return FaceSide.RIGHT
        return None

    def face_from_side(self, side: FaceSide) -> Optional[int]:
        return self.face_left if side is FaceSide.LEFT else self.face_right

    def common_point(self, other: 'TnurccEdge') -> Optional[int]:
        """Endpoint shared with `other` (origin checked first)."""
        if self.origin in (other.origin, other.dest):
            return self.origin
        if self.dest in (other.origin, other.dest):
            return self.dest
        return None

    def common_face(self, other: 'TnurccEdge') -> Optional[int]:
        """Face shared with `other` (left face checked first)."""
        for face in (self.face_left, self.face_right):
            if face is not None and face in (other.face_left, other.face_right):
                return face
        return None

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def acw_edge_from_end(self, end: VertexEnd) -> int:
        """Next edge anticlockwise around the point at `end`."""
        if end is VertexEnd.ORIGIN:
            return self.connection(Connection.LEFT_CW)
        return self.connection(Connection.RIGHT_CW)

    def cw_edge_from_end(self, end: VertexEnd) -> int:
        """Next edge clockwise around the point at `end`."""
        if end is VertexEnd.ORIGIN:
            return self.connection(Connection.RIGHT_ACW)
        return self.connection(Connection.LEFT_ACW)

    def acw_edge_from_side(self, side: FaceSide) -> int:
        """Next edge anticlockwise around the face on `side`."""
        if side is FaceSide.LEFT:
            return self.connection(Connection.LEFT_ACW)
        return self.connection(Connection.RIGHT_ACW)

    def cw_edge_from_side(self, side: FaceSide) -> int:
        """Next edge clockwise around the face on `side`."""
        if side is FaceSide.LEFT:
            return self.connection(Connection.LEFT_CW)
        return self.connection(Connection.RIGHT_CW)

    def acw_edge_from_point(self, point: int) -> Optional[int]:
        end = self.point_end(point)
        return None if end is None else self.acw_edge_from_end(end)

    def cw_edge_from_point(self, point: int) -> Optional[int]:
        end = self.point_end(point)
        return None if end is None else self.cw_edge_from_end(end)

    def acw_edge_from_face(self, face: int) -> Optional[int]:
        side = self.face_side(face)
        return None if side is None else self.acw_edge_from_side(side)

    def cw_edge_from_face(self, face: int) -> Optional[int]:
        side = self.face_side(face)
        return None if side is None else self.cw_edge_from_side(side)

    # -------------------------------------------------------------------------
    # Pairing
    # -------------------------------------------------------------------------

    def shared_faces(self, other: 'TnurccEdge') -> List[SharedFace]:
        """Every face-sharing configuration between self and `other`."""
        shapes = []
        if self.face_left is not None:
            if self.face_left == other.face_left:
                shapes.append(SharedFace.LEFT_LEFT)
            if self.face_left == other.face_right:
                shapes.append(SharedFace.LEFT_RIGHT)
        if self.face_right is not None:
            if self.face_right == other.face_left:
                shapes.append(SharedFace.RIGHT_LEFT)
            if self.face_right == other.face_right:
                shapes.append(SharedFace.RIGHT_RIGHT)
        return shapes

    def shared_point(self, other: 'TnurccEdge') -> Optional[SharedPoint]:
        """First matching endpoint-sharing configuration, or None."""
        if self.origin == other.dest:
            return SharedPoint.ORIGIN_DEST
        if self.dest == other.origin:
            return SharedPoint.DEST_ORIGIN
        if self.origin == other.origin:
            return SharedPoint.ORIGIN_ORIGIN
        if self.dest == other.dest:
            return SharedPoint.DEST_DEST
        return None

    def pairing_slots(self, other: 'TnurccEdge') -> List[Tuple[Connection, Connection]]:
        """
        Slot pairs that must point at each other between self and `other`.

        Determined purely from shared faces and endpoints; the current slot
        contents are ignored. One pair for a single shared face, two for
        colinear edges sharing both faces, none if the edges cannot meet.
        """
        point = self.shared_point(other)
        if point is None:
            return []
        return [
            PAIRING_TABLE[(face, point)]
            for face in self.shared_faces(other)
            if (face, point) in PAIRING_TABLE
        ]

    def copy(self) -> 'TnurccEdge':
        return TnurccEdge(
            id=self.id,
            knot_interval=self.knot_interval,
            origin=self.origin,
            dest=self.dest,
            face_left=self.face_left,
            face_right=self.face_right,
            connections=list(self.connections),
        )

    def __repr__(self) -> str:
        return (f"TnurccEdge(id={self.id}, {self.origin}->{self.dest}, "
                f"k={self.knot_interval}, faces=({self.face_left}, {self.face_right}), "
                f"connections={self.connections})")
