"""
Unit tests for T-NURCC construction, navigation and validation.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfTNURCC.discretization.edge import Connection
from watfTNURCC.discretization.tnurcc import Tnurcc
from watfTNURCC.geometry.primitives import quad_mesh_to_faces, make_tnurcc_box
from watfTNURCC.errors import (
    TnurccError,
    NonRectangularFaceError,
    EdgeTripleFaceError,
    IncompleteFaceEdgeError,
    NegativeKnotIntervalError,
    PointIndexError,
    MissingFaceError,
    MalformedFaceError,
    TopologyInvariantError,
)

from conftest import CUBE_POINTS, CUBE_QUADS


class TestConstruction:
    """Tests for building a T-NURCC from faces."""

    def test_cube_counts(self, cube):
        """8 points, 12 edges, 6 faces, all corners of valence 3."""
        assert cube.n_control_points == 8
        assert cube.n_edges == 12
        assert cube.n_faces == 6
        assert all(cp.valence == 3 for cp in cube.control_points)
        assert cube.extraordinary_control_points == list(range(8))

    def test_cube_is_valid(self, cube):
        """All topological invariants hold."""
        cube.verify()

    def test_every_edge_has_two_faces(self, cube):
        """Closed meshes assign both sides of every edge."""
        for edge in cube.edges:
            assert edge.face_left is not None
            assert edge.face_right is not None
            assert edge.face_left != edge.face_right

    def test_knot_intervals(self, cube):
        """Unit intervals are stored unchanged."""
        assert all(edge.knot_interval == 1.0 for edge in cube.edges)

    def test_first_face_edges(self, cube):
        """Edges are created in boundary order of the first face."""
        assert (cube.edges[0].origin, cube.edges[0].dest) == (0, 3)
        assert (cube.edges[1].origin, cube.edges[1].dest) == (3, 2)
        assert cube.edges[0].face_left == 0
        assert cube.faces[0].edge == 0
        assert cube.faces[0].corners == [0, 3, 2, 1]

    def test_positions(self, cube):
        """Coordinates are kept as given."""
        assert_array_almost_equal(cube.point_positions(), CUBE_POINTS)

    def test_new_alias(self):
        """new builds the same mesh as try_new."""
        mesh = Tnurcc.new(CUBE_POINTS, quad_mesh_to_faces(CUBE_QUADS))
        assert mesh.n_edges == 12

    def test_t_junction_mesh(self, split_cube):
        """Faces with a T-junction on one side have 5 border edges."""
        assert split_cube.n_control_points == 10
        assert split_cube.n_edges == 15
        assert split_cube.n_faces == 7
        assert split_cube.control_points[8].valence == 3
        assert split_cube.control_points[9].valence == 3
        assert len(split_cube.border_edges(3)) == 5
        assert len(split_cube.border_edges(6)) == 5
        split_cube.verify()

    def test_box(self):
        """Box intervals follow the edge lengths."""
        box = make_tnurcc_box((2.0, 1.0, 3.0))
        box.verify()

        positions = box.point_positions()
        for edge in box.edges:
            length = np.linalg.norm(positions[edge.dest] - positions[edge.origin])
            assert edge.knot_interval == pytest.approx(length)

    def test_box_rejects_bad_dims(self):
        """Box dimensions must be positive."""
        with pytest.raises(ValueError):
            make_tnurcc_box((1.0, 0.0, 1.0))


class TestConstructionErrors:
    """Tests for rejected inputs."""

    def test_non_rectangular(self):
        """Opposite sides with different knot lengths."""
        intervals = [[1.0, 1.0, 2.0, 1.0]] + [[1.0] * 4] * 5
        faces = quad_mesh_to_faces(CUBE_QUADS, intervals)

        with pytest.raises(NonRectangularFaceError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, faces)
        assert excinfo.value.face_index == 0

    def test_three_runs(self):
        """A face needs exactly four boundary runs."""
        faces = quad_mesh_to_faces(CUBE_QUADS)
        faces[2] = faces[2][:3]

        with pytest.raises(NonRectangularFaceError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, faces)
        assert excinfo.value.face_index == 2

    def test_runs_do_not_join(self):
        """Each run must end where the next one starts."""
        faces = quad_mesh_to_faces(CUBE_QUADS)
        faces[0][1] = (3, [(6, 1.0)])

        with pytest.raises(NonRectangularFaceError):
            Tnurcc.try_new(CUBE_POINTS, faces)

    def test_incomplete_run(self):
        """A run with a single point."""
        faces = quad_mesh_to_faces(CUBE_QUADS)
        faces[0][3] = (1, [])

        with pytest.raises(IncompleteFaceEdgeError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, faces)
        assert excinfo.value.face_index == 0
        assert excinfo.value.run_index == 3

    def test_negative_knot_interval(self):
        """Knot intervals below zero are rejected before any refinement."""
        faces = quad_mesh_to_faces(CUBE_QUADS, [[-1.0] * 4] * 6)

        with pytest.raises(NegativeKnotIntervalError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, faces)
        assert excinfo.value.face_index == 0
        assert excinfo.value.run_index == 0
        assert excinfo.value.knot_interval == -1.0

    def test_single_negative_step(self):
        """One negative step inside an otherwise valid run."""
        faces = quad_mesh_to_faces(CUBE_QUADS)
        faces[4][2] = (7, [(6, -1.0)])

        with pytest.raises(NegativeKnotIntervalError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, faces)
        assert excinfo.value.face_index == 4
        assert excinfo.value.run_index == 2

    def test_negative_point_index(self):
        """A negative index does not wrap onto the last point."""
        quads = [[-1 if p == 7 else p for p in quad] for quad in CUBE_QUADS]

        with pytest.raises(PointIndexError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, quad_mesh_to_faces(quads))
        assert excinfo.value.face_index == 3
        assert excinfo.value.point_index == -1

    def test_point_index_past_end(self):
        """An index past the point list is a construction error, not an IndexError."""
        quads = [[8 if p == 7 else p for p in quad] for quad in CUBE_QUADS]

        with pytest.raises(PointIndexError) as excinfo:
            Tnurcc.try_new(CUBE_POINTS, quad_mesh_to_faces(quads))
        assert excinfo.value.point_index == 8
        assert isinstance(excinfo.value, TnurccError)

    def test_point_index_from_quad_mesh(self):
        """The quad-mesh shorthand reports bad indices the same way."""
        quads = [[-1 if p == 7 else p for p in quad] for quad in CUBE_QUADS]

        with pytest.raises(PointIndexError):
            Tnurcc.from_quad_mesh(CUBE_POINTS, quads)

    def test_edge_with_three_faces(self):
        """A face described twice puts a third face on its edges."""
        faces = quad_mesh_to_faces(CUBE_QUADS + [CUBE_QUADS[0]])

        with pytest.raises(EdgeTripleFaceError):
            Tnurcc.try_new(CUBE_POINTS, faces)

    def test_open_mesh(self):
        """An open box leaves one-sided edges."""
        faces = quad_mesh_to_faces(CUBE_QUADS[:5])

        with pytest.raises(MissingFaceError):
            Tnurcc.try_new(CUBE_POINTS, faces)

    def test_errors_share_base(self):
        """Construction errors are TnurccErrors and ValueErrors."""
        faces = quad_mesh_to_faces(CUBE_QUADS[:5])

        with pytest.raises(TnurccError):
            Tnurcc.try_new(CUBE_POINTS, faces)
        with pytest.raises(ValueError):
            Tnurcc.try_new(CUBE_POINTS, faces)


class TestFromQuadMesh:
    """Tests for the quad mesh shortcut."""

    def test_cube(self):
        """Closed quads build the cube."""
        mesh = Tnurcc.from_quad_mesh(CUBE_POINTS, CUBE_QUADS)
        assert (mesh.n_control_points, mesh.n_edges, mesh.n_faces) == (8, 12, 6)
        mesh.verify()

    def test_open(self):
        """Open quad meshes are rejected before construction."""
        with pytest.raises(MissingFaceError):
            Tnurcc.from_quad_mesh(CUBE_POINTS, CUBE_QUADS[:5])

    def test_non_manifold(self):
        """An edge used by three quads."""
        with pytest.raises(EdgeTripleFaceError):
            Tnurcc.from_quad_mesh(CUBE_POINTS, CUBE_QUADS + [CUBE_QUADS[0]])

    def test_triangle(self):
        """Only quads are accepted."""
        with pytest.raises(NonRectangularFaceError):
            Tnurcc.from_quad_mesh(CUBE_POINTS, CUBE_QUADS[:5] + [[0, 4, 7]])


class TestNavigation:
    """Tests for rotation around points and faces."""

    def test_point_rotation_closes(self, cube):
        """A full rotation takes `valence` steps."""
        for cp in cube.control_points:
            radial = cube.radial_edges(cp.id)
            assert len(radial) == cp.valence
            assert len(set(radial)) == cp.valence
            for e in radial:
                assert cube.edges[e].point_end(cp.id) is not None
            start = cp.incoming_edge
            assert cube.nth_acw_edge_from_point(start, cp.id, cp.valence) == start
            assert cube.nth_cw_edge_from_point(start, cp.id, cp.valence) == start

    def test_cw_undoes_acw(self, cube):
        """One clockwise step reverses one anticlockwise step."""
        for edge in cube.edges:
            for p in (edge.origin, edge.dest):
                nxt = cube.nth_acw_edge_from_point(edge.id, p, 1)
                assert cube.nth_cw_edge_from_point(nxt, p, 1) == edge.id

    def test_not_an_endpoint(self, cube):
        """Rotating around a point the edge does not touch gives None."""
        assert cube.nth_acw_edge_from_point(0, 6, 1) is None

    def test_face_rotation_closes(self, cube):
        """Every face is bounded by 4 edges and 4 points."""
        for face in cube.faces:
            assert len(cube.border_edges(face.id)) == 4
            assert len(cube.boundary_vertices(face.id)) == 4

    def test_boundary_vertices(self, cube):
        """Boundary order follows the input order."""
        assert cube.boundary_vertices(0) == [0, 3, 2, 1]
        assert cube.boundary_vertices(3) == [4, 5, 6, 7]

    def test_iterators_with_start(self, cube):
        """Iteration can start from any incident edge."""
        radial = cube.radial_edges(0)
        rotated = list(cube.iter_point_edges(0, start=radial[1]))
        assert rotated == radial[1:] + radial[:1]

        border = cube.border_edges(0)
        rotated = list(cube.iter_face_edges(0, start=border[2]))
        assert rotated == border[2:] + border[:2]

    def test_edge_from_opposing_point(self, cube):
        """Edge lookup between adjacent points."""
        e = cube.edge_from_opposing_point(0, 3)
        assert {cube.edges[e].origin, cube.edges[e].dest} == {0, 3}
        assert cube.edge_from_opposing_point(0, 6) is None

    def test_fill_face_corners(self, cube):
        """Unknown corners are recovered from the boundary."""
        cube.faces[1].corners = [None] * 4
        assert cube.fill_face_corners(1) == [0, 1, 5, 4]
        assert cube.faces[1].corners == [0, 1, 5, 4]

    def test_fill_face_corners_t_junction(self, split_cube):
        """Five boundary points are ambiguous."""
        split_cube.faces[6].corners = [None] * 4
        with pytest.raises(MalformedFaceError):
            split_cube.fill_face_corners(6)

    def test_isolated_point(self):
        """A point without edges has no rotation."""
        mesh = Tnurcc()
        mesh.add_control_point([0.0, 0.0])
        assert mesh.radial_edges(0) == []


class TestLifecycle:
    """Tests for clone, clear and verify."""

    def test_clone_is_independent(self, cube):
        """Refining a clone leaves the original alone."""
        dup = cube.clone()
        dup.subdivide()

        assert cube.n_control_points == 8
        assert cube.n_edges == 12
        assert_array_almost_equal(cube.point_positions(), CUBE_POINTS)
        cube.verify()

    def test_clone_equal_records(self, cube):
        """A clone carries the same handles."""
        dup = cube.clone()
        for a, b in zip(cube.edges, dup.edges):
            assert a.connections == b.connections
            assert (a.origin, a.dest, a.face_left, a.face_right) == \
                (b.origin, b.dest, b.face_left, b.face_right)
            assert a is not b

    def test_clear(self, cube):
        """Clear drops every record."""
        cube.clear()
        assert (cube.n_control_points, cube.n_edges, cube.n_faces) == (0, 0, 0)
        assert cube.point_positions().size == 0

    def test_verify_valence(self, cube):
        """A wrong valence is detected."""
        cube.control_points[0].valence = 4
        with pytest.raises(TopologyInvariantError):
            cube.verify()

    def test_verify_slot(self, cube):
        """A slot pointing at an unrelated edge is detected."""
        far = next(e.id for e in cube.edges
                   if cube.edges[0].common_point(e) is None)
        cube.edges[0].connections[Connection.LEFT_CW] = far
        with pytest.raises(TopologyInvariantError):
            cube.verify()

    def test_repr(self, cube):
        """Repr shows the counts."""
        assert repr(cube) == "Tnurcc(n_control_points=8, n_edges=12, n_faces=6)"
