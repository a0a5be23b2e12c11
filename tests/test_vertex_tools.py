"""Tests for welding, snapping, soft selection, shading normals and plane cuts."""

import math

import pytest

from yapmesh.edit_mesh import Edge, EditMesh
from yapmesh.normals import auto_smooth_normals, flat_normals, toggle_hard_edge
from yapmesh.plane_cut import plane_cut
from yapmesh.snap import (
    SnapMode,
    apply_snap,
    snap_faces_to_grid,
    snap_to_edge_midpoint,
    snap_to_grid,
    snap_to_vertex,
    snap_vertices_to_grid,
)
from yapmesh.soft_select import FalloffCurve, apply_soft_displacement, compute_soft_weights
from yapmesh.weld import weld_vertices

from mesh_samples import indices_valid, make_cube, make_grid, make_quad, make_triangle, open_edge_count


def _split_quad():
    """Two triangles that meet along an edge but do not share vertices."""

    positions = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0),
                 (1.0, 0.0, 0.001), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)]
    return EditMesh(positions, [(0.0, 0.0, 1.0)] * 6, [(0.0, 0.0)] * 6, [(0, 1, 2), (3, 4, 5)])


class TestWeld:

    def test_weld_coincident_vertices(self):
        mesh = _split_quad()
        result = weld_vertices(mesh, range(6), 0.01)
        assert result.triangles == [(0, 1, 2), (1, 4, 2)]
        assert result.positions[1] == pytest.approx((1.0, 0.0, 0.0005))
        assert result.positions[2] == pytest.approx((0.0, 1.0, 0.0))
        assert open_edge_count(result) == 4

    def test_weld_only_selected(self):
        mesh = _split_quad()
        result = weld_vertices(mesh, [2, 5], 0.01)
        assert result.triangles == [(0, 1, 2), (3, 4, 2)]

    def test_collapsed_triangles_are_dropped(self):
        result = weld_vertices(make_triangle(), [0, 1, 2], 2.0)
        assert result.face_count == 0

    def test_nothing_to_weld(self):
        mesh = _split_quad()
        assert weld_vertices(mesh, [0], 1.0).triangles == mesh.triangles
        assert weld_vertices(mesh, range(6), 0.0).triangles == mesh.triangles
        assert weld_vertices(mesh, [0, 4], 0.01).triangles == mesh.triangles

    def test_weld_large_double_layer(self):
        grid = make_grid(99)
        n = grid.vertex_count
        positions = grid.positions + [(x, y, z + 1e-4) for x, y, z in grid.positions]
        triangles = grid.triangles + [(a + n, b + n, c + n) for a, b, c in grid.triangles]
        mesh = EditMesh(positions, grid.normals * 2, grid.uvs * 2, triangles)
        result = weld_vertices(mesh, range(2 * n), 1e-3)
        # every upper vertex lands on the lower one beneath it
        assert max(max(t) for t in result.triangles) < n
        assert result.face_count == 2 * grid.face_count
        assert result.positions[n - 1] == pytest.approx((1.0, 1.0, 5e-5))


class TestSnap:

    def test_snap_to_grid(self):
        assert snap_to_grid((0.26, -0.74, 1.1), 0.5) == pytest.approx((0.5, -0.5, 1.0))
        assert snap_to_grid((0.26, -0.74, 1.1), 0.0) == (0.26, -0.74, 1.1)

    def test_snap_to_vertex(self):
        quad = make_quad()
        assert snap_to_vertex((0.1, 0.95, 0.0), quad, set(), 0.5) == (0.0, 1.0, 0.0)
        assert snap_to_vertex((0.1, 0.95, 0.0), quad, {0}, 0.5) is None

    def test_snap_to_edge_midpoint(self):
        quad = make_quad()
        assert snap_to_edge_midpoint((0.5, 1.05, 0.0), quad, 0.5) == pytest.approx((0.5, 1.0, 0.0))
        assert snap_to_edge_midpoint((5.0, 5.0, 5.0), quad, 0.5) is None

    def test_apply_snap_modes(self):
        quad = make_quad()
        pos = (0.1, 0.95, 0.0)
        assert apply_snap(pos, SnapMode.NONE, 0.25, quad) == pos
        assert apply_snap(pos, "grid", 0.25, quad) == pytest.approx((0.0, 1.0, 0.0))
        assert apply_snap(pos, SnapMode.VERTEX, 0.25, quad) == (0.0, 1.0, 0.0)
        # nothing else within twice the grid size
        assert apply_snap(pos, SnapMode.VERTEX, 0.25, quad, exclude=[0]) == pos
        assert apply_snap((0.5, 1.05, 0.0), SnapMode.EDGE_MIDPOINT, 0.25, quad) == pytest.approx((0.5, 1.0, 0.0))

    def test_snap_selection_to_grid(self):
        quad = make_quad()
        quad.positions[3] = (1.1, 0.05, 0.0)
        quad.positions[0] = (0.1, 0.9, 0.0)
        result = snap_faces_to_grid(quad, [1], 0.5)
        assert result.positions[3] == pytest.approx((1.0, 0.0, 0.0))
        # vertex 0 is not on face 1
        assert result.positions[0] == (0.1, 0.9, 0.0)
        moved = snap_vertices_to_grid(quad, [0], 0.5)
        assert moved.positions[0] == pytest.approx((0.0, 1.0, 0.0))
        assert quad.positions[3] == (1.1, 0.05, 0.0)

    def test_display_names(self):
        assert SnapMode.EDGE_MIDPOINT.display_name == "Edge Mid"
        assert SnapMode.GRID.display_name == "Grid"


class TestSoftSelect:

    def test_curve_endpoints(self):
        for curve in FalloffCurve:
            assert curve.weight(0.0) == pytest.approx(1.0)
            assert curve.weight(1.0) == pytest.approx(0.0)
            assert curve.weight(2.0) == pytest.approx(0.0)

    def test_curve_shapes(self):
        assert FalloffCurve.LINEAR.weight(0.25) == pytest.approx(0.75)
        assert FalloffCurve.SMOOTH.weight(0.5) == pytest.approx(0.5)
        assert FalloffCurve.SHARP.weight(0.5) == pytest.approx(0.25)
        assert FalloffCurve.ROOT.weight(0.75) == pytest.approx(0.5)

    def test_weights_on_grid(self):
        mesh = make_grid(2)
        weights = compute_soft_weights(mesh, [0], 1.0, FalloffCurve.LINEAR)
        assert weights[0] == 1.0
        assert weights[1] == pytest.approx(0.5)
        assert weights[4] == pytest.approx(1.0 - math.sqrt(0.5))
        # at or beyond the radius
        assert weights[2] == 0.0
        assert weights[8] == 0.0

    def test_weights_from_large_selection(self):
        mesh = make_grid(100)
        # the lower half of the grid, rows 0 to 49
        weights = compute_soft_weights(mesh, range(50 * 101), 0.045, FalloffCurve.LINEAR)
        assert weights[49 * 101 + 7] == 1.0
        assert weights[52 * 101] == pytest.approx(1.0 / 3.0)
        assert weights[52 * 101 + 100] == pytest.approx(1.0 / 3.0)
        assert weights[55 * 101 + 3] == 0.0
        assert sum(1 for w in weights if 0.0 < w < 1.0) == 4 * 101

    def test_zero_radius(self):
        weights = compute_soft_weights(make_grid(2), [4], 0.0)
        assert weights == [0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0]

    def test_displacement(self):
        mesh = make_grid(2)
        weights = compute_soft_weights(mesh, [0], 1.0, "linear")
        result = apply_soft_displacement(mesh, weights, (0.0, 0.0, 2.0))
        assert result.positions[0] == pytest.approx((0.0, 0.0, 2.0))
        assert result.positions[1] == pytest.approx((0.5, 0.0, 1.0))
        assert result.positions[8] == mesh.positions[8]


class TestNormals:

    def test_auto_smooth_splits_cube_sides(self):
        result = auto_smooth_normals(make_cube(), 30.0)
        assert result.face_count == 12
        assert result.vertex_count == 24
        for fi in range(result.face_count):
            n = result.face_normal(fi)
            for v in result.triangles[fi]:
                assert result.normals[v] == pytest.approx(n)

    def test_auto_smooth_wide_angle_keeps_vertices_shared(self):
        result = auto_smooth_normals(make_cube(), 100.0)
        assert result.vertex_count == 8

    def test_explicit_hard_edges(self):
        mesh = make_grid(2)
        result = auto_smooth_normals(mesh, 180.0, hard_edges=[(4, 1), Edge(4, 7)])
        assert result.vertex_count == 12
        assert result.face_count == 8
        assert indices_valid(result)

    def test_flat_normals(self):
        result = flat_normals(make_cube())
        assert result.vertex_count == 36
        assert result.normals[0] == pytest.approx((0.0, 0.0, 1.0))

    def test_toggle_hard_edge(self):
        hard = set()
        assert toggle_hard_edge(hard, 3, 1) is True
        assert Edge(1, 3) in hard
        assert toggle_hard_edge(hard, 1, 3) is False
        assert hard == set()


class TestPlaneCut:

    def test_cut_cube_in_half(self):
        front, back = plane_cut(make_cube(), (0.0, 0.0, 0.0), (0.0, 0.0, 2.0))
        assert front.face_count == 14
        assert back.face_count == 14
        assert front.vertex_count == 12
        assert all(p[2] >= -1e-9 for p in front.positions)
        assert all(p[2] <= 1e-9 for p in back.positions)
        area = sum(front.face_area(fi) for fi in range(front.face_count))
        assert area == pytest.approx(3.0)

    def test_plane_missing_the_mesh(self):
        front, back = plane_cut(make_cube(), (0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert front.is_empty()
        assert back.face_count == 12
        assert back.vertex_count == 8

    def test_vertices_on_plane_do_not_split(self):
        # the plane passes through vertices 0 and 2
        front, back = plane_cut(make_quad(), (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert front.face_count == 2
        assert back.is_empty()

    def test_split_quad_is_welded(self):
        front, back = plane_cut(make_quad(), (0.5, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert front.face_count == 3
        assert back.face_count == 3
        # both triangles crossing the diagonal share its crossing vertex
        assert front.vertex_count == 2 + 3
        # the diagonal crossing splits the cut side in two
        assert open_edge_count(front) == 5
