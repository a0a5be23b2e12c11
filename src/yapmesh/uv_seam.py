"""UV seam marking.

Seams are where the surface is cut open for unwrapping.  They are kept
as a plain set of :class:`~yapmesh.edit_mesh.Edge` vertex pairs owned by
the caller; the functions here only update and query that set.
"""

from __future__ import annotations

from typing import Set

from yapmesh.edit_mesh import Edge
from yapmesh.half_edge import HalfEdgeMesh


def seam_key(a: int, b: int) -> Edge:
    return Edge.of(a, b)


def toggle_seam(seams: Set[Edge], a: int, b: int) -> bool:
    """Flip the seam flag of edge ``a``-``b``; True if it is now a seam."""

    key = seam_key(a, b)
    if key in seams:
        seams.discard(key)
        return False
    seams.add(key)
    return True


def toggle_seam_half_edge(seams: Set[Edge], mesh: HalfEdgeMesh, he: int) -> bool:
    return toggle_seam(seams, *mesh.edge_vertices(he))


def is_seam(seams: Set[Edge], a: int, b: int) -> bool:
    return seam_key(a, b) in seams


__all__ = ["is_seam", "seam_key", "toggle_seam", "toggle_seam_half_edge"]
