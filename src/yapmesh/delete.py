"""Face deletion and edge/vertex dissolve."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set

from yapmesh.edit_mesh import EditMesh, FaceIndex
from yapmesh.half_edge import INVALID, HalfEdgeMesh

logger = logging.getLogger(__name__)


def delete_faces(mesh: EditMesh, selected: Iterable[FaceIndex]) -> EditMesh:
    """Drop ``selected`` triangles.  Vertices are left in place, orphaned."""

    selected = set(selected)
    if not selected:
        return mesh.copy()
    result = mesh.copy()
    result.triangles = [tri for fi, tri in enumerate(mesh.triangles) if fi not in selected]
    result.recompute_normals()
    return result


def dissolve_edges(mesh: HalfEdgeMesh, selected_edges: Iterable[int]) -> HalfEdgeMesh:
    """Remove the edges named by half-edge ids, merging their two faces.

    The two triangles on either side of an interior edge are replaced by a
    quad over the same four vertices, split along the other diagonal.  An
    edge with a face on one side only just deletes that face.  Edges whose
    faces were already consumed by an earlier edge are skipped.
    """

    selected_edges = list(selected_edges)
    if not selected_edges:
        return mesh.copy()

    edit = mesh.to_edit_mesh()
    removed: Set[int] = set()
    new_tris = []

    for he_id in selected_edges:
        if not 0 <= he_id < len(mesh.half_edges):
            continue
        he = mesh.half_edges[he_id]
        twin_face = mesh.half_edges[he.twin].face if he.twin != INVALID else INVALID
        face_a, face_b = he.face, twin_face

        if face_a == INVALID or face_b == INVALID:
            for face in (face_a, face_b):
                if face != INVALID:
                    removed.add(face)
            continue
        if face_a in removed or face_b in removed or face_a == face_b:
            continue

        v_from, v_to = mesh.edge_vertices(he_id)
        apex_a = _apex(mesh.face_vertices(face_a), v_from, v_to)
        apex_b = _apex(mesh.face_vertices(face_b), v_from, v_to)
        if apex_a is None or apex_b is None:
            continue

        removed.add(face_a)
        removed.add(face_b)
        # quad cycle is from -> apex_b -> to -> apex_a
        new_tris.append((v_from, apex_b, apex_a))
        new_tris.append((v_to, apex_a, apex_b))

    edit.triangles = [tri for fi, tri in enumerate(edit.triangles) if fi not in removed] + new_tris
    edit.recompute_normals()
    logger.debug("dissolved edges: %d faces removed, %d added", len(removed), len(new_tris))
    return HalfEdgeMesh.from_edit_mesh(edit)


def _apex(face_verts: List[int], a: int, b: int):
    for v in face_verts:
        if v != a and v != b:
            return v
    return None


def dissolve_vertices(mesh: HalfEdgeMesh, selected_verts: Iterable[int]) -> HalfEdgeMesh:
    """Remove vertices and fan-fill the holes they leave.

    All triangles touching a dissolved vertex are dropped and the ring of
    their remaining vertices is re-triangulated as a fan rooted at the
    first ring vertex.
    """

    selected_verts = list(selected_verts)
    if not selected_verts:
        return mesh.copy()

    edit = mesh.to_edit_mesh()
    for vert in selected_verts:
        touching = [tri for tri in edit.triangles if vert in tri]
        if not touching:
            continue
        ring = _ordered_ring(touching, vert)
        remaining = [tri for tri in edit.triangles if vert not in tri]
        if len(ring) >= 3:
            hub = ring[0]
            for i in range(1, len(ring) - 1):
                remaining.append((hub, ring[i], ring[i + 1]))
        edit.triangles = remaining

    edit.recompute_normals()
    return HalfEdgeMesh.from_edit_mesh(edit)


def _ordered_ring(triangles, center: int) -> List[int]:
    """Order the link vertices of ``center`` following the fan's winding.

    Each triangle ``(center, x, y)`` contributes a link edge ``x -> y``;
    chaining the link edges gives the ring in the same orientation as the
    removed faces.  Open fans (boundary vertices) start at the free end.
    """

    links: Dict[int, int] = {}
    for tri in triangles:
        i = tri.index(center)
        links[tri[(i + 1) % 3]] = tri[(i + 2) % 3]

    targets = set(links.values())
    starts = [v for v in links if v not in targets]
    start = starts[0] if starts else next(iter(links))

    ring = [start]
    seen = {start}
    current = start
    while current in links:
        current = links[current]
        if current in seen:
            break
        seen.add(current)
        ring.append(current)

    # vertices from a non-manifold fan that the chain missed
    for tri in triangles:
        for v in tri:
            if v != center and v not in seen:
                seen.add(v)
                ring.append(v)
    return ring


__all__ = ["delete_faces", "dissolve_edges", "dissolve_vertices"]
