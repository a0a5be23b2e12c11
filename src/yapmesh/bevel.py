"""Edge bevel on a half-edge mesh."""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from yapmesh.geom import add, dist, normalize, scale3, sub
from yapmesh.half_edge import HalfEdgeMesh

logger = logging.getLogger(__name__)

# fraction of an edge's length a bevel may consume from each end
MAX_WIDTH_FRACTION = 0.49


def bevel_edges(mesh: HalfEdgeMesh, selected_edges: Iterable[int], width: float) -> HalfEdgeMesh:
    """Bevel the edges named by half-edge ids and return a new mesh.

    For each edge ``(from, to)`` two vertices are inserted on the edge,
    ``width`` in from each endpoint (clamped to 49% of the edge length).
    Every triangle that uses the full edge is split into the shortened
    triangle plus a corner triangle at each end, and a two-triangle quad
    is inserted along the bevel gap.
    """

    selected_edges = list(selected_edges)
    if not selected_edges or abs(width) < 1e-6:
        return mesh.copy()

    edges: List[Tuple[int, int]] = []
    for he_id in selected_edges:
        if not 0 <= he_id < len(mesh.half_edges):
            continue
        a, b = mesh.edge_vertices(he_id)
        edge = (a, b) if a <= b else (b, a)
        if edge not in edges:
            edges.append(edge)

    if not edges:
        return mesh.copy()

    edit = mesh.to_edit_mesh()
    for v_from, v_to in edges:
        if v_from >= edit.vertex_count or v_to >= edit.vertex_count:
            continue

        p_from = edit.positions[v_from]
        p_to = edit.positions[v_to]
        direction = normalize(sub(p_to, p_from))
        w = min(width, dist(p_from, p_to) * MAX_WIDTH_FRACTION)

        from_new = edit.add_vertex(add(p_from, scale3(direction, w)), edit.normals[v_from], edit.uvs[v_from])
        to_new = edit.add_vertex(sub(p_to, scale3(direction, w)), edit.normals[v_to], edit.uvs[v_to])

        kept = []
        added = []
        forward = None
        for tri in edit.triangles:
            if v_from not in tri or v_to not in tri:
                kept.append(tri)
                continue
            if forward is None:
                i = tri.index(v_from)
                forward = tri[(i + 1) % 3] == v_to
            # each replacement keeps the cyclic order of the original face
            added.append(_substitute(tri, {v_from: from_new, v_to: to_new}))
            added.append(_substitute(tri, {v_to: from_new}))
            added.append(_substitute(tri, {v_from: to_new}))

        if forward is None or forward:
            added.append((v_from, from_new, to_new))
            added.append((v_from, to_new, v_to))
        else:
            added.append((v_from, to_new, from_new))
            added.append((v_from, v_to, to_new))
        edit.triangles = kept + added

    logger.debug("beveled %d edges", len(edges))
    edit.recompute_normals()
    result = HalfEdgeMesh.from_edit_mesh(edit)
    result.recompute_normals()
    return result


def _substitute(tri, mapping) -> Tuple[int, int, int]:
    return tuple(mapping.get(v, v) for v in tri)


__all__ = ["bevel_edges", "MAX_WIDTH_FRACTION"]
