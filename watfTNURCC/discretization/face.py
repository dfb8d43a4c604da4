"""
Face record of a T-NURCC.

A face is a quadrilateral cell in knot space. Its boundary may consist of
more than four edges (T-junctions put extra points on a side), but the
boundary always forms four parametrically straight runs.

The face stores only one reference edge; the full boundary is recovered by
rotating anticlockwise around the face from that edge. The four corners
are filled lazily (Tnurcc.fill_face_corners) or explicitly by subdivision,
where corner 0 is always the new face point.
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class TnurccFace:
    """
    Quadrilateral face of a T-NURCC.

    Attributes:
        id: Handle of the face (index in Tnurcc.faces)
        edge: Handle of one bordering edge, None until assigned
        corners: Four corner point handles, None until known
    """
    id: int
    edge: Optional[int] = None
    corners: List[Optional[int]] = field(default_factory=lambda: [None] * 4)

    @property
    def is_complete(self) -> bool:
        """True if the reference edge and all four corners are known."""
        return self.edge is not None and all(c is not None for c in self.corners)

    def copy(self) -> 'TnurccFace':
        return TnurccFace(id=self.id, edge=self.edge, corners=list(self.corners))

    def __repr__(self) -> str:
        return f"TnurccFace(id={self.id}, edge={self.edge}, corners={self.corners})"
