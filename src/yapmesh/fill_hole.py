"""Closing open boundary loops with ear-clipped caps."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec2, Vec3, cross2, sub, sub2, vsum
from yapmesh.geometry_utils import newell_normal, plane_basis, point_in_triangle_2d, project_to_plane
from yapmesh.triangulator import triangulate_loop

logger = logging.getLogger(__name__)


def find_holes(mesh: EditMesh) -> List[List[int]]:
    """Return each hole as a vertex loop wound the way its cap must be.

    Open edges (one adjacent face) are followed against the direction the
    owning face uses them, so a cap built from the loop order is wound
    consistently with its neighbours.  Loops shorter than three vertices
    are dropped.
    """

    adj = mesh.build_adjacency()
    links: Dict[int, List[int]] = defaultdict(list)
    for edge, faces in adj.items():
        if len(faces) != 1:
            continue
        tri = mesh.triangles[faces[0]]
        i = tri.index(edge.a)
        if tri[(i + 1) % 3] == edge.b:
            links[edge.b].append(edge.a)
        else:
            links[edge.a].append(edge.b)

    used = set()
    loops = []
    for start in sorted(links):
        for first in links[start]:
            if (start, first) in used:
                continue
            ring = [start]
            used.add((start, first))
            current = first
            while current != start:
                ring.append(current)
                nxt = next((n for n in links.get(current, []) if (current, n) not in used), None)
                if nxt is None:
                    break
                used.add((current, nxt))
                current = nxt
            if current == start and len(ring) >= 3:
                loops.append(ring)
    return loops


def triangulate_hole(loop: Sequence[int], positions: Sequence[Vec3]) -> List[Tuple[int, int, int]]:
    """Ear-clip a vertex loop after projecting it onto its average plane.

    The clipping budget is ``n * n`` passes; if it runs out, or no ear can
    be found, whatever polygon remains is handed to mapbox-earcut.
    """

    if len(loop) < 3:
        return []
    if len(loop) == 3:
        return [(loop[0], loop[1], loop[2])]

    points = [positions[v] for v in loop]
    count = float(len(points))
    center = tuple(c / count for c in vsum(points))
    normal = newell_normal(points)
    if normal == (0.0, 0.0, 0.0):
        normal = (0.0, 1.0, 0.0)
    u_axis, v_axis = plane_basis(normal)
    flat = project_to_plane([sub(p, center) for p in points], u_axis, v_axis)

    remaining = list(range(len(loop)))
    triangles: List[Tuple[int, int, int]] = []
    budget = len(remaining) * len(remaining)

    while len(remaining) > 3 and budget > 0:
        budget -= 1
        ear = _find_ear(remaining, flat)
        if ear is None:
            break
        n = len(remaining)
        prev, nxt = remaining[(ear + n - 1) % n], remaining[(ear + 1) % n]
        triangles.append((loop[prev], loop[remaining[ear]], loop[nxt]))
        remaining.pop(ear)

    if len(remaining) == 3:
        triangles.append(tuple(loop[k] for k in remaining))
    elif len(remaining) > 3:
        logger.warning("ear clipping stalled with %d vertices left; using earcut", len(remaining))
        rest = [flat[k] for k in remaining]
        for a, b, c in triangulate_loop(rest):
            triangles.append((loop[remaining[a]], loop[remaining[b]], loop[remaining[c]]))
    return triangles


def _find_ear(remaining: List[int], flat: Sequence[Vec2]):
    n = len(remaining)
    for i in range(n):
        prev = remaining[(i + n - 1) % n]
        cur = remaining[i]
        nxt = remaining[(i + 1) % n]
        a, b, c = flat[prev], flat[cur], flat[nxt]
        if cross2(sub2(b, a), sub2(c, a)) <= 0.0:
            continue  # reflex
        blocked = False
        for k in remaining:
            if k in (prev, cur, nxt):
                continue
            p = flat[k]
            if p == a or p == b or p == c:
                continue
            if point_in_triangle_2d(p, a, b, c):
                blocked = True
                break
        if not blocked:
            return i
    return None


def fill_holes(mesh: EditMesh) -> EditMesh:
    """Cap every hole in ``mesh`` and return the result."""

    result = mesh.copy()
    loops = find_holes(mesh)
    for loop in loops:
        result.triangles.extend(triangulate_hole(loop, result.positions))
    if loops:
        logger.debug("filled %d holes", len(loops))
    result.recompute_normals()
    return result


__all__ = ["find_holes", "fill_holes", "triangulate_hole"]
