"""Laplacian smoothing and midpoint (1-to-4) subdivision."""

from __future__ import annotations

from typing import Dict, List, Set, Tuple

from yapmesh.edit_mesh import Edge, EditMesh
from yapmesh.geom import add, clamp, lerp, midpoint, midpoint2, normalize, scale3


def _open_edge_vertices(mesh: EditMesh) -> Set[int]:
    verts: Set[int] = set()
    for edge, faces in mesh.build_adjacency().items():
        if len(faces) == 1:
            verts.update(edge)
    return verts


def smooth_mesh(mesh: EditMesh, iterations: int, factor: float) -> EditMesh:
    """Move every vertex toward the mean of its neighbours.

    ``factor`` (clamped to [0, 1]) blends between the old position and
    the neighbour average on each of ``iterations`` passes.  Vertices on
    open edges stay put so the silhouette of an open mesh survives.
    """

    result = mesh.copy()
    factor = clamp(factor, 0.0, 1.0)

    neighbors: List[Set[int]] = [set() for _ in range(result.vertex_count)]
    for a, b, c in result.triangles:
        neighbors[a].update((b, c))
        neighbors[b].update((a, c))
        neighbors[c].update((a, b))
    pinned = _open_edge_vertices(mesh)

    for _ in range(max(iterations, 0)):
        old = list(result.positions)
        for vi, nbrs in enumerate(neighbors):
            if vi in pinned or not nbrs:
                continue
            total = (0.0, 0.0, 0.0)
            for ni in nbrs:
                total = add(total, old[ni])
            result.positions[vi] = lerp(old[vi], scale3(total, 1.0 / len(nbrs)), factor)

    result.recompute_normals()
    return result


def subdivide_mesh(mesh: EditMesh) -> EditMesh:
    """Split each triangle into four at its edge midpoints.

    Midpoints are shared between neighbouring triangles.  Positions are
    not smoothed; see :func:`yapmesh.catmull_clark.catmull_clark` for that.
    """

    result = EditMesh(list(mesh.positions), list(mesh.normals), list(mesh.uvs), [])
    mids: Dict[Edge, int] = {}

    def mid(a: int, b: int) -> int:
        key = Edge.of(a, b)
        if key not in mids:
            mids[key] = result.add_vertex(
                midpoint(mesh.positions[a], mesh.positions[b]),
                normalize(add(mesh.normals[a], mesh.normals[b])),
                midpoint2(mesh.uvs[a], mesh.uvs[b]),
            )
        return mids[key]

    triangles: List[Tuple[int, int, int]] = []
    for a, b, c in mesh.triangles:
        ab, bc, ca = mid(a, b), mid(b, c), mid(c, a)
        triangles.extend([(a, ab, ca), (ab, b, bc), (ca, bc, c), (ab, bc, ca)])
    result.triangles = triangles
    result.recompute_normals()
    return result


__all__ = ["smooth_mesh", "subdivide_mesh"]
