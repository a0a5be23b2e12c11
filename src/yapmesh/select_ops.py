"""Grow, shrink, linked and by-normal selection operators.

Face operators work on an :class:`EditMesh` and sets of face indices.
Vertex and edge operators need adjacency and take a
:class:`HalfEdgeMesh`; edges are canonical half-edge ids.
"""

from __future__ import annotations

import math
from typing import Iterable, Set

from yapmesh.edit_mesh import EditMesh, FaceIndex, weighted_face_normal
from yapmesh.geom import ZERO3, dot
from yapmesh.half_edge import HalfEdgeMesh


def _valid_faces(mesh: EditMesh, selected: Iterable[FaceIndex]) -> Set[FaceIndex]:
    return {fi for fi in selected if 0 <= fi < mesh.face_count}


def grow_face_selection(mesh: EditMesh, selected: Iterable[FaceIndex]) -> Set[FaceIndex]:
    selected = _valid_faces(mesh, selected)
    adj = mesh.build_adjacency()
    grown = set(selected)
    for fi in selected:
        for edge in mesh.face_edges(fi):
            grown.update(adj.get(edge, ()))
    return grown


def shrink_face_selection(mesh: EditMesh, selected: Iterable[FaceIndex]) -> Set[FaceIndex]:
    """Drop selected faces with an edge on the selection rim or an open edge."""

    selected = _valid_faces(mesh, selected)
    adj = mesh.build_adjacency()
    rim = set()
    for fi in selected:
        for edge in mesh.face_edges(fi):
            faces = adj.get(edge, ())
            if len(faces) < 2 or any(f not in selected for f in faces):
                rim.add(fi)
                break
    return selected - rim


def select_linked_faces(mesh: EditMesh, selected: Iterable[FaceIndex]) -> Set[FaceIndex]:
    selected = _valid_faces(mesh, selected)
    adj = mesh.build_adjacency()
    result = set(selected)
    frontier = list(selected)
    while frontier:
        fi = frontier.pop()
        for edge in mesh.face_edges(fi):
            for neighbor in adj.get(edge, ()):
                if neighbor not in result:
                    result.add(neighbor)
                    frontier.append(neighbor)
    return result


def select_faces_by_normal(mesh: EditMesh, selected: Iterable[FaceIndex], angle_degrees: float) -> Set[FaceIndex]:
    """Every face within ``angle_degrees`` of the selection's mean normal.

    The mean is area weighted.  If it cancels out the selection is
    returned unchanged.
    """

    selected = _valid_faces(mesh, selected)
    if not selected:
        return set()
    reference = weighted_face_normal(mesh, selected)
    if reference == ZERO3:
        return selected
    threshold_cos = math.cos(math.radians(angle_degrees))
    return {fi for fi in range(mesh.face_count) if dot(mesh.face_normal(fi), reference) >= threshold_cos}


def grow_vertex_selection(mesh: HalfEdgeMesh, selected: Iterable[int]) -> Set[int]:
    selected = set(selected)
    grown = set(selected)
    for vi in selected:
        grown.update(mesh.vertex_neighbors(vi))
    return grown


def shrink_vertex_selection(mesh: HalfEdgeMesh, selected: Iterable[int]) -> Set[int]:
    selected = set(selected)
    return {vi for vi in selected if all(n in selected for n in mesh.vertex_neighbors(vi))}


def grow_edge_selection(mesh: HalfEdgeMesh, selected: Iterable[int]) -> Set[int]:
    """Add every edge touching an endpoint of a selected edge."""

    selected = {mesh.canonical_edge(he) for he in selected}
    grown = set(selected)
    for he in selected:
        for vi in mesh.edge_vertices(he):
            grown.update(mesh.vertex_edges(vi))
    return grown


def shrink_edge_selection(mesh: HalfEdgeMesh, selected: Iterable[int]) -> Set[int]:
    selected = {mesh.canonical_edge(he) for he in selected}
    result = set(selected)
    for he in selected:
        for vi in mesh.edge_vertices(he):
            if any(e not in selected for e in mesh.vertex_edges(vi)):
                result.discard(he)
                break
    return result


__all__ = [
    "grow_edge_selection",
    "grow_face_selection",
    "grow_vertex_selection",
    "select_faces_by_normal",
    "select_linked_faces",
    "shrink_edge_selection",
    "shrink_face_selection",
    "shrink_vertex_selection",
]
