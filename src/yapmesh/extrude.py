"""Face extrusion along the selection's average normal."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Tuple

from yapmesh.edit_mesh import EditMesh, FaceIndex, weighted_face_normal
from yapmesh.geom import add, scale3

logger = logging.getLogger(__name__)


def extrude_faces(mesh: EditMesh, selected: Iterable[FaceIndex], distance: float,
                  angle: float = 0.0) -> EditMesh:
    """Extrude ``selected`` faces by ``distance`` and return a new mesh.

    The offset direction is the area-weighted average normal of the
    selection.  Vertices on the selection rim are duplicated so the
    originals stay put as the base of the side walls; interior vertices
    move in place.  ``angle`` is accepted for tilted extrusion but is
    not applied yet.
    """

    selected = {f for f in selected if 0 <= f < mesh.face_count}
    if not selected or abs(distance) < 1e-6:
        return mesh.copy()

    result = mesh.copy()
    offset = scale3(weighted_face_normal(mesh, selected), distance)

    boundary_verts = mesh.boundary_vertices(selected)
    selected_verts = mesh.selected_vertices(selected)

    dup_map: Dict[int, int] = {}
    for v in sorted(boundary_verts):
        dup_map[v] = result.add_vertex(add(mesh.positions[v], offset), mesh.normals[v], mesh.uvs[v])

    for v in selected_verts - boundary_verts:
        result.positions[v] = add(result.positions[v], offset)

    for fi in selected:
        result.triangles[fi] = tuple(dup_map.get(i, i) for i in mesh.triangles[fi])

    adjacency = mesh.build_adjacency()
    for edge in mesh.boundary_edges(selected):
        owner = next((f for f in adjacency[edge] if f in selected), None)
        if owner is not None:
            ea, eb = _find_edge_in_face(mesh.triangles[owner], edge.a, edge.b)
        else:
            ea, eb = edge.a, edge.b
        # wind the wall like the owning face so it faces outward
        result.triangles.append((ea, eb, dup_map[eb]))
        result.triangles.append((ea, dup_map[eb], dup_map[ea]))

    logger.debug("extruded %d faces, %d rim vertices duplicated", len(selected), len(dup_map))
    result.recompute_normals()
    return result


def _find_edge_in_face(tri: Tuple[int, int, int], a: int, b: int) -> Tuple[int, int]:
    for i in range(3):
        v0 = tri[i]
        v1 = tri[(i + 1) % 3]
        if (v0 == a and v1 == b) or (v0 == b and v1 == a):
            return v0, v1
    return a, b


__all__ = ["extrude_faces"]
