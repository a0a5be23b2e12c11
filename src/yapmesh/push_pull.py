"""Moving faces along their normals without building side walls."""

from __future__ import annotations

from typing import Dict, Iterable, List

from yapmesh.edit_mesh import EditMesh, FaceIndex
from yapmesh.geom import ZERO3, add, normalize, scale3


def push_pull_faces(mesh: EditMesh, selected: Iterable[FaceIndex], distance: float) -> EditMesh:
    """Offset the selected faces by ``distance`` along their normals.

    A vertex moves along the normalised mean of the normals of the
    selected faces that use it.  Vertices on the rim of the selection are
    duplicated first, so unselected neighbours keep their shape and the
    selection comes loose rather than dragging them along.  An empty
    selection or ``|distance| < 1e-6`` returns a copy.
    """

    selected = sorted(fi for fi in set(selected) if 0 <= fi < mesh.face_count)
    if not selected or abs(distance) < 1e-6:
        return mesh.copy()

    normal_sum: Dict[int, tuple] = {}
    for fi in selected:
        n = mesh.face_normal(fi)
        for v in mesh.triangles[fi]:
            normal_sum[v] = add(normal_sum.get(v, ZERO3), n)
    offsets = {v: scale3(normalize(n), distance) for v, n in normal_sum.items()}

    rim = mesh.boundary_vertices(selected)
    result = mesh.copy()
    duplicate: Dict[int, int] = {}
    for v in sorted(rim):
        duplicate[v] = result.add_vertex(add(mesh.positions[v], offsets[v]), mesh.normals[v], mesh.uvs[v])
    for v, off in offsets.items():
        if v not in rim:
            result.positions[v] = add(mesh.positions[v], off)

    triangles: List = list(result.triangles)
    for fi in selected:
        triangles[fi] = tuple(duplicate.get(v, v) for v in mesh.triangles[fi])
    result.triangles = triangles
    result.recompute_normals()
    return result


__all__ = ["push_pull_faces"]
