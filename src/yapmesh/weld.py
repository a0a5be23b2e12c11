"""Merging selected vertices that lie within a distance of each other."""

from __future__ import annotations

import logging
from typing import Dict, Iterable

import numpy as np
from scipy.spatial import cKDTree

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import normalize

logger = logging.getLogger(__name__)


def weld_vertices(mesh: EditMesh, selected: Iterable[int], threshold: float) -> EditMesh:
    """Collapse clusters of nearby selected vertices onto one survivor.

    Vertices closer than ``threshold`` are joined transitively; each
    cluster keeps its lowest index, moved to the cluster's mean position
    (normals and UVs are averaged too).  Triangles that collapse are
    dropped.  Fewer than two selected vertices or a non-positive
    threshold return a copy.
    """

    verts = sorted(v for v in set(selected) if 0 <= v < mesh.vertex_count)
    if len(verts) < 2 or threshold <= 0.0:
        return mesh.copy()

    parent: Dict[int, int] = {v: v for v in verts}

    def find(v: int) -> int:
        root = v
        while parent[root] != root:
            root = parent[root]
        while parent[v] != root:
            parent[v], v = root, parent[v]
        return root

    pos = np.asarray([mesh.positions[v] for v in verts], dtype=float)
    for i, j in sorted(cKDTree(pos).query_pairs(threshold)):
        ra, rb = find(verts[i]), find(verts[j])
        if ra != rb:
            # lower index survives
            parent[max(ra, rb)] = min(ra, rb)

    remap = {v: find(v) for v in verts if find(v) != v}
    if not remap:
        return mesh.copy()

    clusters: Dict[int, list] = {}
    for v in verts:
        clusters.setdefault(find(v), []).append(v)

    result = mesh.copy()
    for root, members in clusters.items():
        if len(members) < 2:
            continue
        result.positions[root] = tuple(np.mean([mesh.positions[m] for m in members], axis=0).tolist())
        result.normals[root] = normalize(tuple(np.mean([mesh.normals[m] for m in members], axis=0).tolist()))
        result.uvs[root] = tuple(np.mean([mesh.uvs[m] for m in members], axis=0).tolist())

    triangles = []
    for tri in mesh.triangles:
        a, b, c = (remap.get(v, v) for v in tri)
        if a != b and b != c and a != c:
            triangles.append((a, b, c))
    result.triangles = triangles
    result.recompute_normals()

    logger.debug("welded %d vertices into %d clusters", len(remap),
                 sum(1 for m in clusters.values() if len(m) > 1))
    return result


__all__ = ["weld_vertices"]
