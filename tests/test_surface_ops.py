"""Tests for subdivision, smoothing, simplification, remeshing and hole filling."""

import pytest

from yapmesh.catmull_clark import catmull_clark
from yapmesh.edit_mesh import EditMesh
from yapmesh.fill_hole import fill_holes, find_holes, triangulate_hole
from yapmesh.remesh import remesh
from yapmesh.simplify import Quadric, simplify_mesh
from yapmesh.smooth import smooth_mesh, subdivide_mesh

from mesh_samples import (
    CUBE_TOP,
    indices_valid,
    make_cube,
    make_grid,
    make_quad,
    open_edge_count,
    signed_volume,
)


def _open_cube():
    mesh = make_cube()
    mesh.triangles = [tri for fi, tri in enumerate(mesh.triangles) if fi not in CUBE_TOP]
    return mesh


class TestCatmullClark:

    def test_cube_face_and_vertex_counts(self):
        result = catmull_clark(make_cube())
        assert result.face_count == 72
        # one vertex per original vertex, edge and face
        assert result.vertex_count == 8 + 18 + 12
        assert open_edge_count(result) == 0

    def test_cube_shrinks_toward_limit_surface(self):
        result = catmull_clark(make_cube())
        volume = signed_volume(result)
        assert 0.0 < volume < 1.0
        for p in result.positions:
            assert all(abs(c) <= 0.5 + 1e-9 for c in p)

    def test_can_subdivide_twice(self):
        result = catmull_clark(catmull_clark(make_cube()))
        assert result.face_count == 72 * 6
        assert open_edge_count(result) == 0

    def test_open_mesh_keeps_boundary_in_plane(self):
        result = catmull_clark(make_quad())
        assert result.face_count == 12
        for p in result.positions:
            assert p[2] == pytest.approx(0.0)

    def test_empty(self):
        assert catmull_clark(EditMesh()).is_empty()


class TestSmoothAndSubdivide:

    def test_smooth_pulls_vertex_to_neighbour_mean(self):
        mesh = make_grid(2)
        mesh.positions[4] = (0.5, 0.5, 1.0)
        result = smooth_mesh(mesh, 1, 1.0)
        assert result.positions[4] == pytest.approx((0.5, 0.5, 0.0))
        # rim vertices are pinned
        assert result.positions[:4] == mesh.positions[:4]
        assert mesh.positions[4] == (0.5, 0.5, 1.0)

    def test_smooth_factor_blends(self):
        mesh = make_grid(2)
        mesh.positions[4] = (0.5, 0.5, 1.0)
        result = smooth_mesh(mesh, 1, 0.25)
        assert result.positions[4][2] == pytest.approx(0.75)

    def test_smooth_zero_iterations(self):
        mesh = make_cube()
        assert smooth_mesh(mesh, 0, 0.5).positions == mesh.positions

    def test_smooth_closed_mesh_shrinks(self):
        result = smooth_mesh(make_cube(), 2, 0.5)
        assert signed_volume(result) < 1.0

    def test_subdivide_counts(self):
        result = subdivide_mesh(make_cube())
        assert result.face_count == 48
        assert result.vertex_count == 8 + 18
        assert open_edge_count(result) == 0
        assert signed_volume(result) == pytest.approx(1.0)

    def test_subdivide_midpoints(self):
        mesh = make_quad()
        result = subdivide_mesh(mesh)
        assert result.face_count == 8
        assert result.vertex_count == 9
        assert (0.5, 0.5, 0.0) in result.positions
        assert indices_valid(result)


class TestSimplify:

    def test_quadric_distance(self):
        q = Quadric.from_plane(0.0, 0.0, 1.0, -1.0)
        assert q.evaluate((3.0, 4.0, 1.0)) == pytest.approx(0.0)
        assert q.evaluate((0.0, 0.0, 3.0)) == pytest.approx(4.0)
        assert (q + q).evaluate((0.0, 0.0, 0.0)) == pytest.approx(2.0)

    def test_ratio_one_is_a_copy(self):
        mesh = make_cube()
        result = simplify_mesh(mesh, 1.0)
        assert result.triangles == mesh.triangles

    def test_flat_grid_stays_flat(self):
        mesh = make_grid(4)
        result = simplify_mesh(mesh, 0.5)
        assert 0 < result.face_count <= 16
        assert result.vertex_count < mesh.vertex_count
        assert indices_valid(result)
        for p in result.positions:
            assert p[2] == pytest.approx(0.0)

    def test_fewer_triangles_with_lower_ratio(self):
        mesh = make_grid(4)
        counts = [simplify_mesh(mesh, r).face_count for r in (1.0, 0.75, 0.5, 0.25)]
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 32

    def test_cube(self):
        result = simplify_mesh(make_cube(), 0.5)
        assert 0 < result.face_count <= 6
        assert indices_valid(result)


class TestRemesh:

    def test_non_positive_target_is_a_copy(self):
        mesh = make_grid(2)
        assert remesh(mesh, 0.0).triangles == mesh.triangles
        assert remesh(mesh, -1.0).positions == mesh.positions

    def test_refines_flat_grid(self):
        mesh = make_grid(2)
        result = remesh(mesh, 0.2)
        assert result.face_count > mesh.face_count
        assert indices_valid(result)
        for p in result.positions:
            assert p[2] == pytest.approx(0.0)

    def test_empty(self):
        assert remesh(EditMesh(), 1.0).is_empty()


class TestFillHoles:

    def test_closed_mesh_has_no_holes(self):
        assert find_holes(make_cube()) == []

    def test_find_hole_in_open_cube(self):
        loops = find_holes(_open_cube())
        assert len(loops) == 1
        assert sorted(loops[0]) == [2, 3, 6, 7]

    def test_fill_open_cube(self):
        result = fill_holes(_open_cube())
        assert result.face_count == 12
        assert open_edge_count(result) == 0
        assert signed_volume(result) == pytest.approx(1.0)

    def test_triangulate_concave_loop(self):
        positions = [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (2.0, 1.0, 0.0),
                     (1.0, 1.0, 0.0), (1.0, 2.0, 0.0), (0.0, 2.0, 0.0)]
        tris = triangulate_hole(list(range(6)), positions)
        assert len(tris) == 4
        mesh = EditMesh(positions, [(0.0, 0.0, 0.0)] * 6, [(0.0, 0.0)] * 6, tris)
        assert sum(mesh.face_area(fi) for fi in range(4)) == pytest.approx(3.0)
        for fi in range(4):
            assert mesh.face_normal(fi) == pytest.approx((0.0, 0.0, 1.0))

    def test_triangle_loop(self):
        assert triangulate_hole([4, 5, 6], []) == [(4, 5, 6)]
        assert triangulate_hole([1, 2], []) == []
