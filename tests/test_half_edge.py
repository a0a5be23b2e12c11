"""Tests for half-edge construction, traversal and round trips."""

import pytest

from yapmesh.edit_mesh import EditMesh
from yapmesh.half_edge import INVALID, HalfEdgeMesh

from mesh_samples import make_cube, make_quad, make_triangle


def _check_links(he_mesh):
    for i, he in enumerate(he_mesh.half_edges):
        assert he.twin != INVALID
        assert he_mesh.half_edges[he.twin].twin == i
        if he.next != INVALID:
            assert he_mesh.half_edges[he.next].prev == i


def test_round_trip_single_triangle():
    mesh = make_triangle()
    back = HalfEdgeMesh.from_edit_mesh(mesh).to_edit_mesh()
    assert back.triangles == [(0, 1, 2)]
    assert back.positions == mesh.positions
    assert back.uvs == mesh.uvs


def test_round_trip_cube():
    mesh = make_cube()
    back = HalfEdgeMesh.from_edit_mesh(mesh).to_edit_mesh()
    assert back.triangles == mesh.triangles
    assert back.positions == mesh.positions
    assert back.normals == mesh.normals


def test_single_triangle_has_boundary_loop():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_triangle())
    assert len(he_mesh.half_edges) == 6
    _check_links(he_mesh)
    boundary = he_mesh.boundary_half_edges()
    assert boundary == [3, 4, 5]
    # boundary half-edges chain into one loop
    start = boundary[0]
    seen = [start]
    current = he_mesh.half_edges[start].next
    while current != start:
        seen.append(current)
        current = he_mesh.half_edges[current].next
    assert sorted(seen) == boundary


def test_twin_linkage_on_quad():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    _check_links(he_mesh)
    # edge 1->2 of face 0 pairs with 2->1 of face 1
    twin = he_mesh.half_edges[1].twin
    assert he_mesh.half_edges[twin].face == 1
    assert he_mesh.edge_vertices(1) == (1, 2)
    assert he_mesh.edge_vertices(twin) == (2, 1)
    assert he_mesh.edge_count() == 5


def test_cube_topology():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_cube())
    assert len(he_mesh.vertices) == 8
    assert len(he_mesh.faces) == 12
    assert len(he_mesh.half_edges) == 36
    assert he_mesh.boundary_half_edges() == []
    _check_links(he_mesh)
    assert he_mesh.edge_count() == 18
    assert len(he_mesh.unique_edges()) == 18


def test_face_traversal_closes():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_cube())
    for fi in range(len(he_mesh.faces)):
        hes = he_mesh.face_half_edges(fi)
        assert len(hes) == 3
        assert he_mesh.face_vertices(fi) == list(make_cube().triangles[fi])


def test_vertex_fan():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_cube())
    # vertex 0 sits on one -z triangle and two each on -x and -y
    assert sorted(he_mesh.vertex_faces(0)) == [2, 6, 7, 10, 11]
    assert sorted(he_mesh.vertex_neighbors(0)) == [1, 3, 4, 5, 7]
    for he in he_mesh.vertex_half_edges(0):
        assert he_mesh.half_edges[he].vertex == 0


def test_vertex_fan_on_open_corner():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    assert sorted(he_mesh.vertex_neighbors(1)) == [0, 2, 3]
    assert sorted(he_mesh.vertex_faces(1)) == [0, 1]
    assert sorted(he_mesh.vertex_neighbors(0)) == [1, 2]


def test_canonical_edge_is_lower_id():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    for i, he in enumerate(he_mesh.half_edges):
        canon = he_mesh.canonical_edge(i)
        assert canon == min(i, he.twin)
        assert he_mesh.canonical_edge(he.twin) == canon


def test_boundary_edge_queries():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    assert not he_mesh.is_boundary_edge(1)
    assert he_mesh.is_boundary_edge(0)
    assert not he_mesh.is_boundary(0)
    assert he_mesh.is_boundary(he_mesh.half_edges[0].twin)


def test_face_geometry():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    assert he_mesh.face_area(0) == pytest.approx(0.5)
    assert he_mesh.face_normal(0) == pytest.approx((0.0, 0.0, -1.0))
    assert he_mesh.face_center(0) == pytest.approx((1.0 / 3.0, 2.0 / 3.0, 0.0))
    assert he_mesh.edge_midpoint(1) == pytest.approx((0.5, 0.5, 0.0))


def test_add_face_then_rebuild_twins():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_triangle())
    d = he_mesh.add_vertex((1.0, 1.0, 0.0))
    he_mesh.add_face(1, d, 2)
    he_mesh.rebuild_twins()
    _check_links(he_mesh)
    assert len(he_mesh.faces) == 2
    assert len(he_mesh.boundary_half_edges()) == 4
    assert he_mesh.to_edit_mesh().triangles == [(0, 1, 2), (1, 3, 2)]


def test_copy_is_independent():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    dup = he_mesh.copy()
    dup.vertices[0].position = (5.0, 5.0, 5.0)
    dup.half_edges[0].twin = INVALID
    assert he_mesh.vertices[0].position == (0.0, 1.0, 0.0)
    assert he_mesh.half_edges[0].twin != INVALID


def test_empty_mesh():
    he_mesh = HalfEdgeMesh.from_edit_mesh(EditMesh())
    assert he_mesh.half_edges == []
    assert he_mesh.to_edit_mesh().triangles == []


def test_recompute_normals():
    he_mesh = HalfEdgeMesh.from_edit_mesh(make_quad())
    for v in he_mesh.vertices:
        v.normal = (0.0, 0.0, 0.0)
    he_mesh.recompute_normals()
    for v in he_mesh.vertices:
        assert v.normal == pytest.approx((0.0, 0.0, -1.0))
