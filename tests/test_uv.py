"""Tests for UV seams, projection and unwrapping."""

import math

import numpy as np
import pytest

from yapmesh.edit_mesh import Edge
from yapmesh.half_edge import HalfEdgeMesh
from yapmesh.uv_project import ProjectionAxis, UvProjection, project_uvs
from yapmesh.uv_seam import is_seam, seam_key, toggle_seam, toggle_seam_half_edge
from yapmesh.uv_unwrap import find_islands, flatten_island, pack_islands, unwrap_uvs

from mesh_samples import make_cube, make_grid, make_quad


CUBE_TOP_RIM = [Edge.of(7, 6), Edge.of(6, 2), Edge.of(2, 3), Edge.of(3, 7)]


def _in_unit_square(uvs):
    return all(-1e-9 <= c <= 1.0 + 1e-9 for uv in uvs for c in uv)


class TestSeams:

    def test_toggle_seam(self):
        seams = set()
        assert toggle_seam(seams, 4, 2) is True
        assert seams == {Edge(2, 4)}
        assert is_seam(seams, 2, 4)
        assert is_seam(seams, 4, 2)
        assert toggle_seam(seams, 2, 4) is False
        assert seams == set()

    def test_seam_key(self):
        assert seam_key(9, 3) == Edge(3, 9)

    def test_toggle_by_half_edge(self):
        he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
        seams = set()
        assert toggle_seam_half_edge(seams, he_mesh, 1)
        assert is_seam(seams, 1, 2)
        # the twin names the same edge
        assert not toggle_seam_half_edge(seams, he_mesh, he_mesh.half_edges[1].twin)


class TestProjection:

    def test_planar_z(self):
        mesh = make_grid(2)
        result = project_uvs(mesh, UvProjection.PLANAR, ProjectionAxis.Z)
        for p, uv in zip(result.positions, result.uvs):
            assert uv == pytest.approx((p[0], p[1]))

    def test_planar_scale(self):
        result = project_uvs(make_grid(2), "planar", "z", scale=2.0)
        assert result.uvs[8] == pytest.approx((2.0, 2.0))

    def test_zero_scale_means_one(self):
        result = project_uvs(make_grid(2), UvProjection.PLANAR, ProjectionAxis.Z, scale=0.0)
        assert result.uvs[8] == pytest.approx((1.0, 1.0))

    def test_box_picks_dominant_axis(self):
        mesh = make_quad()
        mesh.uvs = [(9.0, 9.0)] * 4
        result = project_uvs(mesh, UvProjection.BOX)
        assert result.uvs[3] == pytest.approx((1.0, 0.0))
        assert result.uvs[0] == pytest.approx((0.0, 1.0))

    def test_box_side_face(self):
        cube = make_cube()
        # face 4 lies on x = +0.5, so (y, z) become the UVs
        result = project_uvs(cube, UvProjection.BOX, faces=[4])
        for v in cube.triangles[4]:
            p = cube.positions[v]
            assert result.uvs[v] == pytest.approx((p[1], p[2]))

    def test_cylindrical_y(self):
        mesh = make_quad()
        result = project_uvs(mesh, UvProjection.CYLINDRICAL, ProjectionAxis.Y)
        # vertex 3 is (1, 0, 0): a quarter turn from +z
        assert result.uvs[3] == pytest.approx((0.75, 0.0))
        assert result.uvs[1] == pytest.approx((0.75, 1.0))

    def test_only_selected_faces_change(self):
        mesh = make_grid(2)
        mesh.uvs = [(-1.0, -1.0)] * mesh.vertex_count
        result = project_uvs(mesh, UvProjection.PLANAR, ProjectionAxis.Z, faces=[0])
        touched = set(mesh.triangles[0])
        for v in range(mesh.vertex_count):
            if v in touched:
                assert result.uvs[v] != (-1.0, -1.0)
            else:
                assert result.uvs[v] == (-1.0, -1.0)

    def test_display_names(self):
        assert UvProjection.CYLINDRICAL.display_name == "Cylindrical"
        assert ProjectionAxis.X.display_name == "X"


class TestUnwrap:

    def test_islands_without_seams(self):
        assert find_islands(make_cube()) == [list(range(12))]

    def test_islands_split_by_seams(self):
        islands = find_islands(make_cube(), CUBE_TOP_RIM)
        assert sorted(islands, key=len) == [[8, 9], [0, 1, 2, 3, 4, 5, 6, 7, 10, 11]]

    def test_flatten_planar_island_keeps_distances(self):
        mesh = make_grid(2)
        verts, uv = flatten_island(mesh, list(range(mesh.face_count)))
        assert verts == list(range(9))
        assert np.linalg.norm(uv[8] - uv[0]) == pytest.approx(math.sqrt(2.0))
        assert np.linalg.norm(uv[2] - uv[0]) == pytest.approx(1.0)

    def test_pack_islands(self):
        islands = [
            ([0, 1], np.array([[0.0, 0.0], [1.0, 0.5]])),
            ([2, 3], np.array([[0.0, 0.0], [0.5, 1.0]])),
        ]
        packed = pack_islands(islands)
        assert set(packed) == {0, 1, 2, 3}
        assert _in_unit_square(packed.values())
        # the taller island is placed first, the wide one on the next row
        assert packed[2] == pytest.approx((0.0, 0.0))
        assert packed[0] == pytest.approx((0.0, 1.02 / 1.52))

    def test_pack_nothing(self):
        assert pack_islands([]) == {}

    def test_unwrap_flat_grid(self):
        mesh = make_grid(2)
        mesh.uvs = [(5.0, 5.0)] * mesh.vertex_count
        result = unwrap_uvs(mesh)
        assert _in_unit_square(result.uvs)
        assert math.dist(result.uvs[0], result.uvs[8]) == pytest.approx(math.sqrt(2.0))
        assert mesh.uvs[0] == (5.0, 5.0)

    def test_unwrap_cube_with_seams(self):
        result = unwrap_uvs(make_cube(), set(CUBE_TOP_RIM))
        assert _in_unit_square(result.uvs)
        assert result.triangles == make_cube().triangles
