"""Separating a face selection from the rest of a mesh."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from yapmesh.edit_mesh import EditMesh, FaceIndex


def extract_faces(mesh: EditMesh, faces: Iterable[FaceIndex]) -> EditMesh:
    """A compact mesh holding only ``faces``, in their original order.

    Vertices are renumbered in order of first use; unused ones are left
    out.
    """

    wanted = set(faces)
    result = EditMesh()
    vertex_map: Dict[int, int] = {}
    for fi, tri in enumerate(mesh.triangles):
        if fi not in wanted:
            continue
        new_tri = []
        for v in tri:
            if v not in vertex_map:
                vertex_map[v] = result.add_vertex(mesh.positions[v], mesh.normals[v], mesh.uvs[v])
            new_tri.append(vertex_map[v])
        result.triangles.append(tuple(new_tri))
    return result


def cut_faces(mesh: EditMesh, faces: Iterable[FaceIndex]) -> Tuple[EditMesh, EditMesh]:
    """Split into ``(remaining, cut_out)``.

    The remaining mesh keeps the full vertex buffer so vertex indices held
    by the caller stay valid; the cut-out part is compact.  The parts
    share no vertices.
    """

    selected = {fi for fi in faces if 0 <= fi < mesh.face_count}
    if not selected:
        return mesh.copy(), EditMesh()

    remaining = mesh.copy()
    remaining.triangles = [tri for fi, tri in enumerate(mesh.triangles) if fi not in selected]
    remaining.recompute_normals()

    cut_out = extract_faces(mesh, selected)
    cut_out.recompute_normals()
    return remaining, cut_out


__all__ = ["cut_faces", "extract_faces"]
