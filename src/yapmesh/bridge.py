"""Bridging two boundary loops with a quad strip."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from yapmesh.geom import dist2
from yapmesh.half_edge import INVALID, HalfEdgeMesh

logger = logging.getLogger(__name__)


def find_boundary_loops(mesh: HalfEdgeMesh) -> List[List[int]]:
    """Return the vertex rings of every hole, following boundary ``next`` links.

    Loops shorter than three vertices are dropped.
    """

    visited = set()
    loops = []
    for start, he in enumerate(mesh.half_edges):
        if he.face != INVALID or start in visited:
            continue
        ring = []
        current = start
        while current not in visited:
            visited.add(current)
            ring.append(mesh.half_edges[current].vertex)
            current = mesh.half_edges[current].next
            if current == INVALID or current == start:
                break
        if len(ring) >= 3:
            loops.append(ring)
    return loops


def find_best_alignment(mesh: HalfEdgeMesh, loop_a: Sequence[int], loop_b: Sequence[int]) -> int:
    """Rotation of ``loop_b`` that best lines up with ``loop_a``.

    Every rotation is tried and scored by the summed squared distance of
    the first ``min(len(a), len(b))`` vertex pairs.
    """

    n = len(loop_b)
    if n == 0 or not loop_a:
        return 0
    samples = min(len(loop_a), n)
    count = len(mesh.vertices)

    best_offset = 0
    best_dist = float("inf")
    for offset in range(n):
        total = 0.0
        for i in range(samples):
            a = loop_a[i % len(loop_a)]
            b = loop_b[(i + offset) % n]
            if a < count and b < count:
                total += dist2(mesh.vertices[a].position, mesh.vertices[b].position)
        if total < best_dist:
            best_dist = total
            best_offset = offset
    return best_offset


def bridge_edge_loops(mesh: HalfEdgeMesh, loop_a: Sequence[int], loop_b: Sequence[int]) -> HalfEdgeMesh:
    """Connect two vertex rings with a strip of quads (two triangles each)."""

    if not loop_a or not loop_b:
        return mesh.copy()

    result = mesh.copy()
    offset = find_best_alignment(mesh, loop_a, loop_b)
    n = max(len(loop_a), len(loop_b))
    for i in range(n):
        a0 = loop_a[i % len(loop_a)]
        a1 = loop_a[(i + 1) % len(loop_a)]
        b0 = loop_b[(i + offset) % len(loop_b)]
        b1 = loop_b[(i + 1 + offset) % len(loop_b)]
        result.add_face(a0, a1, b1)
        result.add_face(a0, b1, b0)

    result.rebuild_twins()
    result.recompute_normals()
    logger.debug("bridged loops of %d and %d vertices (offset %d)", len(loop_a), len(loop_b), offset)
    return result


def bridge_selected_edges(mesh: HalfEdgeMesh, selected_edges: Iterable[int]) -> HalfEdgeMesh:
    """Bridge the two boundary loops touched by ``selected_edges``.

    Falls back to the first two loops when fewer than two loops touch the
    selection; a mesh with fewer than two holes comes back as a copy.
    """

    loops = find_boundary_loops(mesh)
    if len(loops) < 2:
        logger.debug("bridge needs two boundary loops, found %d", len(loops))
        return mesh.copy()

    selected_verts = set()
    for he_id in selected_edges:
        if 0 <= he_id < len(mesh.half_edges):
            selected_verts.update(mesh.edge_vertices(he_id))

    matching = [ring for ring in loops if any(v in selected_verts for v in ring)]
    if len(matching) >= 2:
        return bridge_edge_loops(mesh, matching[0], matching[1])
    return bridge_edge_loops(mesh, loops[0], loops[1])


__all__ = ["find_boundary_loops", "find_best_alignment", "bridge_edge_loops", "bridge_selected_edges"]
