import yapmesh
from yapmesh import INVALID, Edge, EditMesh, HalfEdgeMesh


def test_version_is_a_string():
    assert isinstance(yapmesh.__version__, str)


def test_public_names():
    for name in yapmesh.__all__:
        assert hasattr(yapmesh, name)
    assert INVALID == -1
    assert EditMesh().is_empty()
    assert HalfEdgeMesh.from_edit_mesh(EditMesh()).half_edges == []
    assert Edge.of(5, 2) == Edge(2, 5)
