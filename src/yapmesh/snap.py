"""Grid, vertex and edge-midpoint snapping for vertex transforms."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Set

from yapmesh.edit_mesh import EditMesh, FaceIndex
from yapmesh.geom import Vec3, dist, midpoint


class SnapMode(Enum):
    NONE = "none"
    GRID = "grid"
    VERTEX = "vertex"
    EDGE_MIDPOINT = "edge_midpoint"

    @property
    def display_name(self) -> str:
        return {"edge_midpoint": "Edge Mid"}.get(self.value, self.value.capitalize())


def snap_to_grid(pos: Vec3, grid_size: float) -> Vec3:
    """Round each component of ``pos`` to the nearest grid line."""

    if grid_size <= 0.0:
        return pos
    return tuple(round(c / grid_size) * grid_size for c in pos)


def snap_to_vertex(pos: Vec3, mesh: EditMesh, exclude: Set[int], max_dist: float) -> Optional[Vec3]:
    best = None
    best_dist = max_dist
    for vi, p in enumerate(mesh.positions):
        if vi in exclude:
            continue
        d = dist(pos, p)
        if d <= best_dist and (best is None or d < best_dist):
            best, best_dist = p, d
    return best


def snap_to_edge_midpoint(pos: Vec3, mesh: EditMesh, max_dist: float) -> Optional[Vec3]:
    best = None
    best_dist = max_dist
    for edge in mesh.build_adjacency():
        mid = midpoint(mesh.positions[edge.a], mesh.positions[edge.b])
        d = dist(pos, mid)
        if d <= best_dist and (best is None or d < best_dist):
            best, best_dist = mid, d
    return best


def apply_snap(pos: Vec3, mode: SnapMode, grid_size: float, mesh: EditMesh,
               exclude: Iterable[int] = ()) -> Vec3:
    """Snap a proposed position according to ``mode``.

    Vertex and edge snapping search within twice the grid size and leave
    ``pos`` alone when nothing is in range.
    """

    mode = SnapMode(mode)
    if mode is SnapMode.GRID:
        return snap_to_grid(pos, grid_size)
    if mode is SnapMode.VERTEX:
        found = snap_to_vertex(pos, mesh, set(exclude), grid_size * 2.0)
        return pos if found is None else found
    if mode is SnapMode.EDGE_MIDPOINT:
        found = snap_to_edge_midpoint(pos, mesh, grid_size * 2.0)
        return pos if found is None else found
    return pos


def snap_vertices_to_grid(mesh: EditMesh, selected: Iterable[int], grid_size: float) -> EditMesh:
    result = mesh.copy()
    for vi in selected:
        if 0 <= vi < result.vertex_count:
            result.positions[vi] = snap_to_grid(result.positions[vi], grid_size)
    result.recompute_normals()
    return result


def snap_faces_to_grid(mesh: EditMesh, selected: Iterable[FaceIndex], grid_size: float) -> EditMesh:
    return snap_vertices_to_grid(mesh, mesh.selected_vertices(selected), grid_size)


__all__ = [
    "SnapMode",
    "apply_snap",
    "snap_faces_to_grid",
    "snap_to_edge_midpoint",
    "snap_to_grid",
    "snap_to_vertex",
    "snap_vertices_to_grid",
]
