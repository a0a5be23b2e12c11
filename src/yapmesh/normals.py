"""Auto-smooth, flat shading and hard-edge marking."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Set, Tuple

from yapmesh.edit_mesh import Edge, EditMesh, FaceIndex
from yapmesh.geom import dot


def _smoothing_groups(mesh: EditMesh, hard: Set[Edge], adj) -> List[List[FaceIndex]]:
    visited: Set[FaceIndex] = set()
    groups = []
    for start in range(mesh.face_count):
        if start in visited:
            continue
        group = []
        frontier = [start]
        visited.add(start)
        while frontier:
            face = frontier.pop()
            group.append(face)
            for edge in mesh.face_edges(face):
                if edge in hard:
                    continue
                for n in adj.get(edge, ()):
                    if n not in visited:
                        visited.add(n)
                        frontier.append(n)
        groups.append(sorted(group))
    return groups


def auto_smooth_normals(mesh: EditMesh, angle_degrees: float,
                        hard_edges: Optional[Iterable[Edge]] = None) -> EditMesh:
    """Shade smoothly except across sharp or explicitly hard edges.

    An edge is hard when its two faces' normals differ by more than
    ``angle_degrees`` or when it is listed in ``hard_edges``.  Faces
    connected without crossing a hard edge form a smoothing group, and a
    vertex used by several groups is duplicated once per group.  Face
    order is kept; the vertex buffer is rebuilt.
    """

    threshold_cos = math.cos(math.radians(angle_degrees))
    adj = mesh.build_adjacency()
    hard = {Edge.of(*e) for e in (hard_edges or ())}
    for edge, faces in adj.items():
        if len(faces) == 2 and dot(mesh.face_normal(faces[0]), mesh.face_normal(faces[1])) < threshold_cos:
            hard.add(edge)

    group_of: Dict[FaceIndex, int] = {}
    for gi, group in enumerate(_smoothing_groups(mesh, hard, adj)):
        for fi in group:
            group_of[fi] = gi

    result = EditMesh()
    vertex_map: Dict[Tuple[int, int], int] = {}
    for fi, tri in enumerate(mesh.triangles):
        new_tri = []
        for vi in tri:
            key = (vi, group_of[fi])
            if key not in vertex_map:
                vertex_map[key] = result.add_vertex(mesh.positions[vi], uv=mesh.uvs[vi])
            new_tri.append(vertex_map[key])
        result.triangles.append(tuple(new_tri))
    result.recompute_normals()
    return result


def flat_normals(mesh: EditMesh) -> EditMesh:
    """Give every triangle its own three vertices carrying the face normal."""

    result = EditMesh()
    for fi, tri in enumerate(mesh.triangles):
        n = mesh.face_normal(fi)
        corners = tuple(result.add_vertex(mesh.positions[vi], n, mesh.uvs[vi]) for vi in tri)
        result.triangles.append(corners)
    return result


def toggle_hard_edge(hard_edges: Set[Edge], a: int, b: int) -> bool:
    """Flip the hard flag on edge ``a``-``b``; True if it is now hard."""

    edge = Edge.of(a, b)
    if edge in hard_edges:
        hard_edges.discard(edge)
        return False
    hard_edges.add(edge)
    return True


__all__ = ["auto_smooth_normals", "flat_normals", "toggle_hard_edge"]
