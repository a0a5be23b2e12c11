"""Mirroring a mesh across an axis-aligned plane through the origin."""

from __future__ import annotations

from enum import Enum

from yapmesh.edit_mesh import EditMesh


class MirrorAxis(Enum):
    X = "x"
    Y = "y"
    Z = "z"

    @property
    def index(self) -> int:
        return "xyz".index(self.value)

    @property
    def display_name(self) -> str:
        return self.value.upper()


def _reflect(v, k):
    return tuple(-c if i == k else c for i, c in enumerate(v))


def mirror_mesh(mesh: EditMesh, axis) -> EditMesh:
    """Return ``mesh`` plus its reflection across the plane normal to ``axis``.

    Reflected triangles have their winding reversed so they still face
    outward.  The two halves are not welded along the mirror plane.
    """

    if not isinstance(axis, MirrorAxis):
        axis = MirrorAxis(str(axis).lower())
    k = axis.index
    offset = mesh.vertex_count

    result = mesh.copy()
    for p, n, uv in zip(mesh.positions, mesh.normals, mesh.uvs):
        result.add_vertex(_reflect(p, k), _reflect(n, k), uv)
    result.triangles.extend((a + offset, c + offset, b + offset) for a, b, c in mesh.triangles)
    return result


__all__ = ["MirrorAxis", "mirror_mesh"]
