"""Seam-based UV unwrapping.

The surface is cut into islands along seam edges; each island is
flattened onto its area-weighted average plane and the islands are packed
into rows inside the unit square.  The flattening is a projection, so it
is only distortion-free for nearly planar islands.

A vertex shared by two islands (a seam without split vertices) receives
the UV of whichever island is packed last.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from yapmesh.edit_mesh import Edge, EditMesh, FaceIndex
from yapmesh.geom import ZERO3, add, normalize, scale3
from yapmesh.geometry_utils import plane_basis

logger = logging.getLogger(__name__)

ISLAND_MARGIN = 0.02


def find_islands(mesh: EditMesh, seams: Iterable[Edge] = ()) -> List[List[FaceIndex]]:
    """Connected face sets, with seam edges acting as cuts."""

    seams = {Edge.of(*e) for e in seams}
    adj = mesh.build_adjacency()
    visited: Set[FaceIndex] = set()
    islands = []
    for start in range(mesh.face_count):
        if start in visited:
            continue
        island = []
        queue = deque([start])
        visited.add(start)
        while queue:
            face = queue.popleft()
            island.append(face)
            for edge in mesh.face_edges(face):
                if edge in seams:
                    continue
                for n in adj.get(edge, ()):
                    if n not in visited:
                        visited.add(n)
                        queue.append(n)
        islands.append(sorted(island))
    return islands


def flatten_island(mesh: EditMesh, faces: List[FaceIndex]) -> Tuple[List[int], np.ndarray]:
    """Project an island's vertices onto its average plane.

    Returns the vertex ids and an ``(n, 2)`` array of planar coordinates
    centred on the area-weighted centroid.
    """

    verts = sorted({v for fi in faces for v in mesh.triangles[fi]})
    if not verts:
        return [], np.zeros((0, 2))

    normal = ZERO3
    centroid = ZERO3
    total_area = 0.0
    for fi in faces:
        area = mesh.face_area(fi)
        normal = add(normal, scale3(mesh.face_normal(fi), area))
        centroid = add(centroid, scale3(mesh.face_center(fi), area))
        total_area += area
    if total_area < 1e-10:
        return verts, np.zeros((len(verts), 2))

    normal = normalize(normal)
    if normal == ZERO3:
        normal = (0.0, 1.0, 0.0)
    u_axis, v_axis = plane_basis(normal)
    pts = np.asarray([mesh.positions[v] for v in verts], dtype=float) - np.asarray(centroid) / total_area
    return verts, pts @ np.array([u_axis, v_axis]).T


def pack_islands(islands: List[Tuple[List[int], np.ndarray]],
                 margin: float = ISLAND_MARGIN) -> Dict[int, Tuple[float, float]]:
    """Row-pack flattened islands, tallest first, then fit into [0, 1].

    Returns a vertex id to UV mapping.
    """

    boxes = []
    for index, (verts, uv) in enumerate(islands):
        if not verts:
            continue
        lo, hi = uv.min(axis=0), uv.max(axis=0)
        boxes.append((float(hi[1] - lo[1]), index, lo, hi))
    boxes.sort(key=lambda box: -box[0])

    placed: List[Tuple[List[int], np.ndarray]] = []
    cursor_x = cursor_y = row_height = 0.0
    for height, index, lo, hi in boxes:
        width = float(hi[0] - lo[0])
        if cursor_x > 0.0 and cursor_x + width + margin > 1.0:
            cursor_y += row_height + margin
            cursor_x = 0.0
            row_height = 0.0
        verts, uv = islands[index]
        placed.append((verts, uv - lo + np.array([cursor_x, cursor_y])))
        cursor_x += width + margin
        row_height = max(row_height, height)

    if not placed:
        return {}

    extent = max(float(np.max(uv)) for _, uv in placed)
    scale = 1.0 / extent if extent > 1.0 else 1.0

    result: Dict[int, Tuple[float, float]] = {}
    for verts, uv in placed:
        for v, (u, w) in zip(verts, uv * scale):
            result[v] = (float(u), float(w))
    return result


def unwrap_uvs(mesh: EditMesh, seams: Optional[Iterable[Edge]] = None) -> EditMesh:
    """Unwrap ``mesh`` along ``seams`` and return a copy with new UVs."""

    result = mesh.copy()
    islands = find_islands(mesh, seams or ())
    if not islands:
        return result
    packed = pack_islands([flatten_island(mesh, faces) for faces in islands])
    for v, uv in packed.items():
        result.uvs[v] = uv
    logger.debug("unwrapped %d islands", len(islands))
    return result


__all__ = ["find_islands", "flatten_island", "pack_islands", "unwrap_uvs"]
