"""Face, vertex and edge picking plus grid and region selection.

Rays given to :func:`pick_face` are in mesh-local space; use
:func:`world_to_local_ray` to bring a camera ray there.  Screen-space
picking takes a 4x4 view-projection matrix and a ``(width, height)``
viewport, and an optional 4x4 mesh-to-world matrix (identity when
omitted).  Screen coordinates have their origin at the top left.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np

from yapmesh.edit_mesh import EditMesh, FaceIndex
from yapmesh.geom import Vec2, Vec3, add, clamp, cross, cross2, dist2d, dot, normalize, scale3, sub, sub2, vfloor
from yapmesh.geometry_utils import triangle_cross
from yapmesh.half_edge import INVALID, HalfEdgeMesh


RAY_EPSILON = 1e-7
# faces whose normals agree this closely count as the same flat face
COPLANAR_COS = 0.999
VERTEX_PICK_PIXELS = 20.0
EDGE_PICK_PIXELS = 15.0


class FaceHit(NamedTuple):
    face: FaceIndex
    point: Vec3
    distance: float


class VertexHit(NamedTuple):
    vertex: int
    screen_distance: float


class EdgeHit(NamedTuple):
    half_edge: int
    screen_distance: float


## ray picking
## ---------------------

def ray_triangle(origin: Vec3, direction: Vec3, v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[float]:
    """Möller-Trumbore intersection; distance along the ray or ``None``."""

    edge1 = sub(v1, v0)
    edge2 = sub(v2, v0)
    h = cross(direction, edge2)
    a = dot(edge1, h)
    if abs(a) < RAY_EPSILON:
        return None

    f = 1.0 / a
    s = sub(origin, v0)
    u = f * dot(s, h)
    if u < 0.0 or u > 1.0:
        return None

    q = cross(s, edge1)
    v = f * dot(direction, q)
    if v < 0.0 or u + v > 1.0:
        return None

    t = f * dot(edge2, q)
    return t if t > RAY_EPSILON else None


def pick_face(mesh: EditMesh, origin: Vec3, direction: Vec3, xray: bool = False) -> Optional[FaceHit]:
    """Closest face hit by the ray, skipping back faces unless ``xray``."""

    best = None
    for fi in range(mesh.face_count):
        v0, v1, v2 = mesh.face_positions(fi)
        if not xray and dot(triangle_cross(v0, v1, v2), direction) >= 0.0:
            continue
        t = ray_triangle(origin, direction, v0, v1, v2)
        if t is not None and (best is None or t < best.distance):
            best = FaceHit(fi, add(origin, scale3(direction, t)), t)
    return best


def _matrix(transform) -> np.ndarray:
    if transform is None:
        return np.eye(4)
    return np.asarray(transform, dtype=float).reshape(4, 4)


def transform_point(transform, point: Vec3) -> Vec3:
    m = _matrix(transform)
    p = m @ np.array([point[0], point[1], point[2], 1.0])
    return (float(p[0]), float(p[1]), float(p[2]))


def world_to_local_ray(transform, origin: Vec3, direction: Vec3) -> Tuple[Vec3, Vec3]:
    """Map a world-space ray into the local space of ``transform``."""

    inv = np.linalg.inv(_matrix(transform))
    local_origin = transform_point(inv, origin)
    local_target = transform_point(inv, add(origin, direction))
    return local_origin, normalize(sub(local_target, local_origin))


## grid selection
## ---------------------

def _uv_cell(uv, size: float) -> Tuple[int, int]:
    return int(math.floor(uv[0] / size)), int(math.floor(uv[1] / size))


def build_world_grid(mesh: EditMesh, grid_size: float, transform=None) -> Dict[Tuple[int, int, int], List[FaceIndex]]:
    grid: Dict[Tuple[int, int, int], List[FaceIndex]] = {}
    for fi in range(mesh.face_count):
        center = transform_point(transform, mesh.face_center(fi))
        grid.setdefault(vfloor(center, grid_size), []).append(fi)
    return grid


def build_uv_grid(mesh: EditMesh, grid_size: float) -> Dict[Tuple[int, int], List[FaceIndex]]:
    grid: Dict[Tuple[int, int], List[FaceIndex]] = {}
    for fi in range(mesh.face_count):
        grid.setdefault(_uv_cell(mesh.face_uv_center(fi), grid_size), []).append(fi)
    return grid


def _same_facing(mesh: EditMesh, faces: Iterable[FaceIndex], hit_face: FaceIndex) -> Set[FaceIndex]:
    normal = mesh.face_normal(hit_face)
    selected = {fi for fi in faces if dot(mesh.face_normal(fi), normal) >= COPLANAR_COS}
    selected.add(hit_face)
    return selected


def world_grid_select(mesh: EditMesh, hit_face: FaceIndex, point: Vec3, grid_size: float,
                      transform=None) -> Set[FaceIndex]:
    """Faces in the world-grid cell containing ``point`` that face like ``hit_face``.

    ``point`` is in world space.  The hit face is always part of the
    result, even when its centre falls into a neighbouring cell.
    """

    if grid_size <= 0.0:
        return {hit_face}
    grid = build_world_grid(mesh, grid_size, transform)
    return _same_facing(mesh, grid.get(vfloor(point, grid_size), []), hit_face)


def uv_grid_select(mesh: EditMesh, hit_face: FaceIndex, uv_grid_size: float) -> Set[FaceIndex]:
    """Faces sharing the UV-grid cell of ``hit_face`` and facing the same way."""

    if uv_grid_size <= 0.0:
        return {hit_face}
    grid = build_uv_grid(mesh, uv_grid_size)
    cell = _uv_cell(mesh.face_uv_center(hit_face), uv_grid_size)
    return _same_facing(mesh, grid.get(cell, []), hit_face)


## region selection
## ---------------------

def surface_group_select(mesh: EditMesh, start_face: FaceIndex, angle_degrees: float) -> Set[FaceIndex]:
    """Flood fill across shared edges while normals stay near ``start_face``'s."""

    return _flood(mesh, start_face, math.cos(math.radians(angle_degrees)), mesh.build_adjacency())


def _flood(mesh: EditMesh, start_face: FaceIndex, threshold_cos: float, adj) -> Set[FaceIndex]:
    start_normal = mesh.face_normal(start_face)
    selected: Set[FaceIndex] = set()
    frontier = [start_face]
    while frontier:
        fi = frontier.pop()
        if fi in selected:
            continue
        selected.add(fi)
        for edge in mesh.face_edges(fi):
            for neighbor in adj.get(edge, ()):
                if neighbor in selected:
                    continue
                if dot(start_normal, mesh.face_normal(neighbor)) >= threshold_cos:
                    frontier.append(neighbor)
    return selected


def expand_to_face_groups(mesh: EditMesh, faces: Iterable[FaceIndex],
                          angle_degrees: Optional[float] = None) -> Set[FaceIndex]:
    """Grow each picked triangle to the flat face it belongs to.

    Without an angle, neighbours must be coplanar within ``COPLANAR_COS``,
    which turns triangle picks into the quads and n-gons a user sees.
    """

    threshold_cos = COPLANAR_COS if angle_degrees is None else math.cos(math.radians(angle_degrees))
    adj = mesh.build_adjacency()
    result: Set[FaceIndex] = set()
    for fi in faces:
        if fi in result or not 0 <= fi < mesh.face_count:
            continue
        result |= _flood(mesh, fi, threshold_cos, adj)
    return result


## screen space
## ---------------------

def project_to_screen(point: Vec3, view_proj, viewport: Tuple[float, float]) -> Optional[Vec2]:
    """Project a world-space point to viewport pixels; ``None`` behind the camera."""

    clip = np.asarray(view_proj, dtype=float).reshape(4, 4) @ np.array([point[0], point[1], point[2], 1.0])
    if clip[3] <= 1e-8:
        return None
    ndc_x, ndc_y = clip[0] / clip[3], clip[1] / clip[3]
    width, height = viewport
    return (float((ndc_x + 1.0) * 0.5 * width), float((1.0 - ndc_y) * 0.5 * height))


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """Winding-number containment test."""

    winding = 0
    n = len(polygon)
    for i in range(n):
        v0 = polygon[i]
        v1 = polygon[(i + 1) % n]
        side = cross2(sub2(v1, v0), sub2(point, v0))
        if v0[1] <= point[1]:
            if v1[1] > point[1] and side > 0.0:
                winding += 1
        elif v1[1] <= point[1] and side < 0.0:
            winding -= 1
    return winding != 0


def freeform_select(mesh: EditMesh, polygon: Sequence[Vec2], view_proj, viewport,
                    transform=None) -> Set[FaceIndex]:
    """Faces whose projected centroid lies inside a screen-space polygon."""

    if len(polygon) < 3:
        return set()
    selected = set()
    for fi in range(mesh.face_count):
        screen = project_to_screen(transform_point(transform, mesh.face_center(fi)), view_proj, viewport)
        if screen is not None and point_in_polygon(screen, polygon):
            selected.add(fi)
    return selected


def _back_facing(normal: Vec3, center: Vec3, camera: Vec3) -> bool:
    return dot(normal, sub(center, camera)) >= 0.0


def _local_camera(camera_position, transform) -> Optional[Vec3]:
    if camera_position is None:
        return None
    return transform_point(np.linalg.inv(_matrix(transform)), camera_position)


def pick_vertex(mesh: EditMesh, cursor: Vec2, view_proj, viewport, transform=None,
                threshold: float = VERTEX_PICK_PIXELS, camera_position: Optional[Vec3] = None,
                xray: bool = False) -> Optional[VertexHit]:
    """Closest vertex within ``threshold`` pixels of ``cursor``.

    With a ``camera_position`` (world space) and ``xray`` off, vertices
    whose every face points away from the camera are ignored.
    """

    camera = None if xray else _local_camera(camera_position, transform)
    front_verts = None
    if camera is not None:
        front_verts = set()
        for fi in range(mesh.face_count):
            if not _back_facing(mesh.face_normal(fi), mesh.face_center(fi), camera):
                front_verts.update(mesh.triangles[fi])

    best = None
    for vi, pos in enumerate(mesh.positions):
        if front_verts is not None and vi not in front_verts:
            continue
        screen = project_to_screen(transform_point(transform, pos), view_proj, viewport)
        if screen is None:
            continue
        d = dist2d(screen, cursor)
        if d <= threshold and (best is None or d < best.screen_distance):
            best = VertexHit(vi, d)
    return best


def _segment_distance(p: Vec2, a: Vec2, b: Vec2) -> float:
    ab = sub2(b, a)
    length2 = ab[0] * ab[0] + ab[1] * ab[1]
    if length2 < 1e-12:
        return dist2d(p, a)
    t = ((p[0] - a[0]) * ab[0] + (p[1] - a[1]) * ab[1]) / length2
    t = clamp(t, 0.0, 1.0)
    return dist2d(p, (a[0] + ab[0] * t, a[1] + ab[1] * t))


def pick_edge(mesh: HalfEdgeMesh, cursor: Vec2, view_proj, viewport, transform=None,
              threshold: float = EDGE_PICK_PIXELS, camera_position: Optional[Vec3] = None,
              xray: bool = False) -> Optional[EdgeHit]:
    """Closest edge (canonical half-edge id) within ``threshold`` pixels.

    An edge is skipped for back-facing only when all of its faces point
    away from the camera.
    """

    camera = None if xray else _local_camera(camera_position, transform)
    best = None
    for he_id in mesh.unique_edges():
        if camera is not None:
            faces = [mesh.half_edges[h].face for h in (he_id, mesh.half_edges[he_id].twin)
                     if h != INVALID and mesh.half_edges[h].face != INVALID]
            if faces and all(_back_facing(mesh.face_normal(f), mesh.face_center(f), camera) for f in faces):
                continue
        a, b = mesh.edge_vertices(he_id)
        sa = project_to_screen(transform_point(transform, mesh.vertices[a].position), view_proj, viewport)
        sb = project_to_screen(transform_point(transform, mesh.vertices[b].position), view_proj, viewport)
        if sa is None or sb is None:
            continue
        d = _segment_distance(cursor, sa, sb)
        if d <= threshold and (best is None or d < best.screen_distance):
            best = EdgeHit(mesh.canonical_edge(he_id), d)
    return best


__all__ = [
    "COPLANAR_COS",
    "EdgeHit",
    "FaceHit",
    "VertexHit",
    "build_uv_grid",
    "build_world_grid",
    "expand_to_face_groups",
    "freeform_select",
    "pick_edge",
    "pick_face",
    "pick_vertex",
    "point_in_polygon",
    "project_to_screen",
    "ray_triangle",
    "surface_group_select",
    "transform_point",
    "uv_grid_select",
    "world_grid_select",
    "world_to_local_ray",
]
