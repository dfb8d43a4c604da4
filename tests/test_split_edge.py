"""
Unit tests for Tnurcc.split_edge.

Local configuration around the split edge e0 (A -> B, interval 2.5):

            C
            ^  e1 (face 0 | face 2)
            |
    face 0  B  face 2
            ^ \\
         e0 |  \\ e2 (D -> B, face 1 | face 2)
            |   D
            A
         face 1 on the right of e0
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfTNURCC.discretization.edge import Connection
from watfTNURCC.discretization.tnurcc import Tnurcc
from watfTNURCC.errors import MalformedFaceError


A, B, C, D = 0, 1, 2, 3


@pytest.fixture
def star():
    mesh = Tnurcc()
    for coords in ([0.0, 0.0], [0.0, 1.0], [0.0, 2.0], [1.0, 0.5]):
        mesh.add_control_point(coords)

    e0 = mesh.add_edge(2.5, A, B)
    e1 = mesh.add_edge(1.0, B, C)
    e2 = mesh.add_edge(1.0, D, B)

    mesh.edges[e0].face_left, mesh.edges[e0].face_right = 0, 1
    mesh.edges[e1].face_left, mesh.edges[e1].face_right = 0, 2
    mesh.edges[e2].face_left, mesh.edges[e2].face_right = 1, 2

    mesh.connect(e0, e1)
    mesh.connect(e0, e2)
    return mesh


class TestSplitEdge:
    """Tests for splitting one edge."""

    def test_setup_links(self, star):
        """The neighbours at B are linked before splitting."""
        e0 = star.edges[0]
        assert e0.connection(Connection.LEFT_ACW) == 1
        assert e0.connection(Connection.RIGHT_CW) == 2
        assert star.edges[1].connection(Connection.LEFT_CW) == 0
        assert star.edges[2].connection(Connection.LEFT_ACW) == 0

    def test_intervals(self, star):
        """The interval is shared out by the ratio."""
        point = star.split_edge(0, [0.0, 0.25], 0.25)
        conj = star.edges[-1]

        assert point == 4
        assert star.edges[0].knot_interval == pytest.approx(0.625)
        assert conj.knot_interval == pytest.approx(1.875)
        assert_array_almost_equal(star.control_points[point].coordinates, [0.0, 0.25])

    def test_endpoints_and_faces(self, star):
        """Edge ends at the new point, the conjugate continues to the old end."""
        point = star.split_edge(0, [0.0, 0.25], 0.25)
        edge = star.edges[0]
        conj = star.edges[-1]

        assert conj.id == 3
        assert edge.origin == A
        assert edge.dest == point
        assert conj.origin == point
        assert conj.dest == B
        assert (conj.face_left, conj.face_right) == (edge.face_left, edge.face_right)

    def test_valences(self, star):
        """The new point has valence 2, B keeps its valence."""
        point = star.split_edge(0, [0.0, 0.25], 0.25)

        assert star.control_points[point].valence == 2
        assert star.control_points[point].incoming_edge == 0
        assert star.control_points[A].valence == 1
        assert star.control_points[B].valence == 3

    def test_neighbours_redirected(self, star):
        """Edges at B now link to the conjugate instead of the split edge."""
        star.split_edge(0, [0.0, 0.25], 0.25)
        conj = 3

        assert star.edges[1].connection(Connection.LEFT_CW) == conj
        assert star.edges[2].connection(Connection.LEFT_ACW) == conj
        assert star.edges[conj].connection(Connection.LEFT_ACW) == 1
        assert star.edges[conj].connection(Connection.RIGHT_CW) == 2

    def test_halves_linked(self, star):
        """The two halves point at each other on both faces."""
        star.split_edge(0, [0.0, 0.25], 0.25)
        edge = star.edges[0]
        conj = star.edges[3]

        assert edge.connection(Connection.LEFT_ACW) == 3
        assert edge.connection(Connection.RIGHT_CW) == 3
        assert conj.connection(Connection.LEFT_CW) == 0
        assert conj.connection(Connection.RIGHT_ACW) == 0

    def test_rotation_around_new_point(self, star):
        """The new point has exactly the two halves around it."""
        point = star.split_edge(0, [0.0, 0.25], 0.25)
        assert sorted(star.radial_edges(point)) == [0, 3]

    def test_invalid_ratio(self, star):
        """Ratios outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            star.split_edge(0, [0.0, 0.0], 1.0)
        with pytest.raises(ValueError):
            star.split_edge(0, [0.0, 0.0], 0.0)

    def test_unrepairable_neighbour(self, star):
        """A neighbour that no longer shares a face is reported as a malformed face."""
        star.edges[1].face_left = 7
        with pytest.raises(MalformedFaceError):
            star.split_edge(0, [0.0, 0.25], 0.25)


class TestSplitCubeEdge:
    """Splitting inside a closed mesh keeps the mesh consistent."""

    def test_counts(self, cube):
        """One more point and edge, valences add up."""
        point = cube.split_edge(0, [0.5, 0.0, 0.0], 0.5)

        assert cube.n_control_points == 9
        assert cube.n_edges == 13
        assert cube.control_points[point].valence == 2
        assert sum(cp.valence for cp in cube.control_points) == 2 * cube.n_edges

    def test_faces_grow_by_one_edge(self, cube):
        """Both faces of the split edge now have 5 border edges."""
        edge = cube.edges[0]
        left, right = edge.face_left, edge.face_right
        cube.split_edge(0, [0.5, 0.0, 0.0], 0.5)

        assert len(cube.border_edges(left)) == 5
        assert len(cube.border_edges(right)) == 5
        cube.verify()
