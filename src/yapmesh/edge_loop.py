"""Edge-loop selection and insertion on a half-edge mesh.

Triangle meshes carry no quads, so a loop is walked through the quads
implied by pairs of triangles.  From a ring edge, the walk leaves its
triangle across the edge opposite the ring edge's corner (the quad
diagonal, taken to be the longer of the two remaining edges and
``next(next(he))`` on a tie) and enters the partner triangle through the
diagonal's twin.  The next ring edge is the partner's edge that shares
no vertex with the current one, and its twin carries the walk into the
following quad.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from yapmesh.geom import add, dist, midpoint, midpoint2, normalize
from yapmesh.half_edge import INVALID, HalfEdgeMesh

logger = logging.getLogger(__name__)


def _edge_length(mesh: HalfEdgeMesh, he: int) -> float:
    a, b = mesh.edge_vertices(he)
    return dist(mesh.vertices[a].position, mesh.vertices[b].position)


def _cross_diagonal(mesh: HalfEdgeMesh, he: int) -> int:
    """Twin of the quad diagonal in ``he``'s face, or INVALID."""

    if mesh.half_edges[he].face == INVALID:
        return INVALID
    n1 = mesh.half_edges[he].next
    n2 = mesh.half_edges[n1].next
    diagonal = n2
    if _edge_length(mesh, n1) > _edge_length(mesh, n2) + 1e-9:
        diagonal = n1
    twin = mesh.half_edges[diagonal].twin
    if twin == INVALID or mesh.half_edges[twin].face == INVALID:
        return INVALID
    return twin


def next_loop_edge(mesh: HalfEdgeMesh, he: int) -> int:
    """The ring edge after ``he``, oriented into the next quad, or INVALID."""

    partner = _cross_diagonal(mesh, he)
    if partner == INVALID:
        return INVALID
    ends = set(mesh.edge_vertices(he))
    for cand in mesh.face_half_edges(mesh.half_edges[partner].face):
        if cand == partner:
            continue
        if ends.isdisjoint(mesh.edge_vertices(cand)):
            return mesh.half_edges[cand].twin
    return INVALID


def _is_diagonal(mesh: HalfEdgeMesh, he: int) -> bool:
    """True if ``he`` is the longest edge of its triangle, i.e. a quad diagonal."""

    if mesh.half_edges[he].face == INVALID:
        he = mesh.half_edges[he].twin
        if he == INVALID or mesh.half_edges[he].face == INVALID:
            return False
    n1 = mesh.half_edges[he].next
    n2 = mesh.half_edges[n1].next
    return _edge_length(mesh, he) > max(_edge_length(mesh, n1), _edge_length(mesh, n2)) + 1e-9


def select_edge_loop(mesh: HalfEdgeMesh, start_he: int) -> List[int]:
    """Canonical edge ids of the loop through ``start_he``, sorted.

    The walk runs away from the seed on both of its sides and stops at a
    boundary or when it comes back to an edge already visited, so either
    half-edge of a ring edge selects the same loop.  A seed that is the
    longest edge of its triangle is a quad diagonal, not a ring edge, and
    selects nothing.
    """

    if not 0 <= start_he < len(mesh.half_edges):
        return []
    if _is_diagonal(mesh, start_he):
        return []

    visited = {mesh.canonical_edge(start_he)}
    for side in (start_he, mesh.half_edges[start_he].twin):
        if side == INVALID:
            continue
        current = next_loop_edge(mesh, side)
        while current != INVALID:
            edge = mesh.canonical_edge(current)
            if edge in visited:
                break
            visited.add(edge)
            current = next_loop_edge(mesh, current)
    return sorted(visited)


def insert_edge_loop(mesh: HalfEdgeMesh, start_he: int) -> HalfEdgeMesh:
    """Split every edge of the loop through ``start_he`` at its midpoint.

    Faces touching one split edge become two triangles; faces touching
    more (which only happens away from clean quad strips) are subdivided
    against every split edge so no T-junction is left behind.
    """

    loop_edges = select_edge_loop(mesh, start_he)
    if not loop_edges:
        return mesh.copy()

    edit = mesh.to_edit_mesh()
    mids: Dict[Tuple[int, int], int] = {}
    for he_id in loop_edges:
        a, b = mesh.edge_vertices(he_id)
        key = (a, b) if a <= b else (b, a)
        if key in mids:
            continue
        mids[key] = edit.add_vertex(
            midpoint(edit.positions[a], edit.positions[b]),
            normalize(add(edit.normals[a], edit.normals[b])),
            midpoint2(edit.uvs[a], edit.uvs[b]),
        )

    new_triangles = []
    for tri in edit.triangles:
        new_triangles.extend(_split_triangle(tri, mids))
    edit.triangles = new_triangles
    edit.recompute_normals()

    logger.debug("inserted edge loop through %d edges", len(mids))
    result = HalfEdgeMesh.from_edit_mesh(edit)
    result.recompute_normals()
    return result


def _split_triangle(tri, mids):
    splits = []
    for i in range(3):
        a, b = tri[i], tri[(i + 1) % 3]
        mid = mids.get((a, b) if a <= b else (b, a))
        if mid is not None:
            splits.append((i, mid))

    if not splits:
        return [tri]
    if len(splits) == 1:
        i, mid = splits[0]
        va, vb, vc = tri[i], tri[(i + 1) % 3], tri[(i + 2) % 3]
        return [(va, mid, vc), (mid, vb, vc)]
    if len(splits) == 2:
        # the corner shared by both split edges gets its own triangle
        (i, m0), (j, m1) = splits
        if (i + 1) % 3 != j:
            (i, m0), (j, m1) = (j, m1), (i, m0)
        va, vb, vc = tri[i], tri[(i + 1) % 3], tri[(i + 2) % 3]
        return [(m0, vb, m1), (va, m0, m1), (va, m1, vc)]
    m_ab, m_bc, m_ca = (m for _, m in splits)
    a, b, c = tri
    return [(a, m_ab, m_ca), (m_ab, b, m_bc), (m_ca, m_bc, c), (m_ab, m_bc, m_ca)]


__all__ = ["next_loop_edge", "select_edge_loop", "insert_edge_loop"]
