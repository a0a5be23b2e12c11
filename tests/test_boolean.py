"""Tests for mesh booleans (native BSP engine and engine dispatch)."""

import pytest

from yapmesh.boolean import ENGINE_REGISTRY, BooleanOp, get_engine, mesh_boolean
from yapmesh.boolean.bsp import Side, build_bsp, classify_point
from yapmesh.edit_mesh import EditMesh

from mesh_samples import make_cube, open_edge_count, signed_volume


def _cube_tree():
    cube = make_cube()
    return build_bsp([cube.face_positions(fi) for fi in range(cube.face_count)])


def test_operation_parsing():
    assert BooleanOp.parse("union") is BooleanOp.UNION
    assert BooleanOp.parse("Difference") is BooleanOp.SUBTRACT
    assert BooleanOp.parse("intersection") is BooleanOp.INTERSECT
    assert BooleanOp.SUBTRACT.display_name == "Subtract"
    with pytest.raises(ValueError):
        BooleanOp.parse("xor")


def test_classify_point_against_cube():
    tree = _cube_tree()
    assert classify_point(tree, (0.0, 0.0, 0.0)) is Side.INSIDE
    assert classify_point(tree, (2.0, 0.0, 0.0)) is Side.OUTSIDE
    assert classify_point(tree, (0.0, -3.0, 0.25)) is Side.OUTSIDE
    # on the +z face, facing along or against it
    assert classify_point(tree, (0.1, 0.1, 0.5), (0.0, 0.0, 1.0)) is Side.ON_SAME
    assert classify_point(tree, (0.1, 0.1, 0.5), (0.0, 0.0, -1.0)) is Side.ON_OPPOSITE


def test_empty_tree_is_outside():
    assert build_bsp([]) is None
    assert classify_point(None, (0.0, 0.0, 0.0)) is Side.OUTSIDE


def test_intersect_with_itself():
    cube = make_cube()
    result = mesh_boolean(cube, cube, "intersect")
    assert result.face_count == 12
    assert signed_volume(result) == pytest.approx(1.0)


def test_union_with_itself_keeps_one_copy():
    cube = make_cube()
    assert mesh_boolean(cube, cube, BooleanOp.UNION).face_count == 12


def test_subtract_itself_is_empty():
    cube = make_cube()
    assert mesh_boolean(cube, cube, "subtract").is_empty()


def test_empty_operands():
    cube = make_cube()
    empty = EditMesh()
    assert mesh_boolean(cube, empty, "union").face_count == 12
    assert mesh_boolean(cube, empty, "subtract").face_count == 12
    assert mesh_boolean(cube, empty, "intersect").is_empty()
    assert mesh_boolean(empty, cube, "union").face_count == 12
    assert mesh_boolean(empty, cube, "subtract").is_empty()


def test_disjoint_cubes():
    a = make_cube()
    b = make_cube(offset=(3.0, 0.0, 0.0))
    union = mesh_boolean(a, b, "union")
    assert union.face_count == 24
    assert signed_volume(union) == pytest.approx(2.0)
    assert open_edge_count(union) == 0
    assert mesh_boolean(a, b, "intersect").is_empty()
    assert mesh_boolean(a, b, "subtract").face_count == 12


def test_nested_cubes():
    outer = make_cube()
    inner = make_cube(size=0.5)
    assert signed_volume(mesh_boolean(outer, inner, "union")) == pytest.approx(1.0)
    assert signed_volume(mesh_boolean(outer, inner, "intersect")) == pytest.approx(0.125)
    hollow = mesh_boolean(outer, inner, "subtract")
    assert hollow.face_count == 24
    # the inner shell is turned inside out
    assert signed_volume(hollow) == pytest.approx(0.875)


def test_inputs_are_untouched():
    a = make_cube()
    b = make_cube(size=0.5)
    mesh_boolean(a, b, "subtract")
    assert a.face_count == 12
    assert b.triangles == make_cube(size=0.5).triangles


def test_engine_registry():
    assert get_engine("native") is ENGINE_REGISTRY["native"]
    assert get_engine("nope") is None
    with pytest.raises(ValueError):
        mesh_boolean(make_cube(), make_cube(), "union", engine="nope")


def test_trimesh_engine_round_trip():
    pytest.importorskip("trimesh")
    from yapmesh.boolean import trimesh_engine

    cube = make_cube()
    back = trimesh_engine.from_trimesh(trimesh_engine.to_trimesh(cube))
    assert back.face_count == 12
    assert back.vertex_count == 8
    assert signed_volume(back) == pytest.approx(1.0)


def test_trimesh_engine_union():
    pytest.importorskip("trimesh")
    from yapmesh.boolean import trimesh_engine

    if not trimesh_engine.is_available():
        pytest.skip("no trimesh boolean backend installed")
    result = mesh_boolean(make_cube(), make_cube(offset=(0.5, 0.0, 0.0)), "union", engine="trimesh")
    assert signed_volume(result) == pytest.approx(1.5, rel=1e-6)
