"""Half-edge topology built on demand from an :class:`EditMesh`.

All links are integer indices into the three arenas held by
:class:`HalfEdgeMesh` (``half_edges``, ``vertices`` and ``faces``).  The
sentinel :data:`INVALID` marks a missing link.  Every interior half-edge
has a twin: open mesh edges get a synthetic *boundary half-edge* whose
``face`` is :data:`INVALID`, and the boundary half-edges around each hole
are chained through ``next``/``prev`` into a closed loop.

Operations that only append faces (:meth:`HalfEdgeMesh.add_face`) leave
twins unset and call :meth:`HalfEdgeMesh.rebuild_twins` once at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec2, Vec3, ZERO3, midpoint, normalize, vsum
from yapmesh.geometry_utils import triangle_area, triangle_cross

logger = logging.getLogger(__name__)

INVALID = -1

# longest face cycle we are prepared to walk
MAX_FACE_CYCLE = 64


@dataclass
class HalfEdge:
    twin: int = INVALID
    next: int = INVALID
    prev: int = INVALID
    vertex: int = INVALID  # origin
    face: int = INVALID    # INVALID for boundary half-edges


@dataclass
class HVertex:
    position: Vec3
    normal: Vec3
    uv: Vec2
    half_edge: int = INVALID  # one outgoing half-edge


@dataclass
class HFace:
    half_edge: int


class HalfEdgeMesh:
    """Half-edge mesh with index-based arenas."""

    def __init__(self, half_edges=None, vertices=None, faces=None):
        self.half_edges: List[HalfEdge] = half_edges if half_edges is not None else []
        self.vertices: List[HVertex] = vertices if vertices is not None else []
        self.faces: List[HFace] = faces if faces is not None else []

    ## conversion
    ## ---------------------

    @classmethod
    def from_edit_mesh(cls, mesh: EditMesh) -> "HalfEdgeMesh":
        vertices = [HVertex(p, n, uv) for p, n, uv in zip(mesh.positions, mesh.normals, mesh.uvs)]
        he_mesh = cls([], vertices, [])
        he_mesh._build_faces([list(tri) for tri in mesh.triangles])
        return he_mesh

    def to_edit_mesh(self) -> EditMesh:
        """Return an independent :class:`EditMesh` copy of this mesh."""

        positions = [v.position for v in self.vertices]
        normals = [v.normal for v in self.vertices]
        uvs = [v.uv for v in self.vertices]
        triangles = []
        for fi in range(len(self.faces)):
            verts = self.face_vertices(fi)
            if len(verts) < 3:
                continue
            # fan anything larger than a triangle
            for k in range(1, len(verts) - 1):
                triangles.append((verts[0], verts[k], verts[k + 1]))
        return EditMesh(positions, normals, uvs, triangles)

    def copy(self) -> "HalfEdgeMesh":
        return HalfEdgeMesh(
            [HalfEdge(h.twin, h.next, h.prev, h.vertex, h.face) for h in self.half_edges],
            [HVertex(v.position, v.normal, v.uv, v.half_edge) for v in self.vertices],
            [HFace(f.half_edge) for f in self.faces],
        )

    def _build_faces(self, faces_data: List[List[int]]) -> None:
        """Create interior half-edges for ``faces_data`` then link twins."""

        self.half_edges = []
        self.faces = []
        for v in self.vertices:
            v.half_edge = INVALID

        edge_map: Dict[Tuple[int, int], int] = {}
        for fi, verts in enumerate(faces_data):
            base = len(self.half_edges)
            n = len(verts)
            for i in range(n):
                origin = verts[i]
                he_id = base + i
                self.half_edges.append(HalfEdge(
                    next=base + (i + 1) % n,
                    prev=base + (i + n - 1) % n,
                    vertex=origin,
                    face=fi,
                ))
                if self.vertices[origin].half_edge == INVALID:
                    self.vertices[origin].half_edge = he_id
                edge_map[(origin, verts[(i + 1) % n])] = he_id
            self.faces.append(HFace(base))

        self._link_twins(edge_map)

    def _link_twins(self, edge_map: Dict[Tuple[int, int], int]) -> None:
        interior_count = len(self.half_edges)
        boundary: List[HalfEdge] = []

        for he_idx in range(interior_count):
            he = self.half_edges[he_idx]
            if he.twin != INVALID:
                continue
            origin = he.vertex
            dest = self.half_edges[he.next].vertex
            twin_idx = edge_map.get((dest, origin))
            if twin_idx is not None and self.half_edges[twin_idx].twin == INVALID:
                he.twin = twin_idx
                self.half_edges[twin_idx].twin = he_idx
            else:
                he.twin = interior_count + len(boundary)
                # boundary half-edge runs the opposite way
                boundary.append(HalfEdge(twin=he_idx, vertex=dest))

        self.half_edges.extend(boundary)
        self._link_boundary_chains(interior_count)

    def _link_boundary_chains(self, interior_count: int) -> None:
        """Stitch boundary half-edges into closed loops around each hole.

        A boundary half-edge ends where its twin starts; its ``next`` is
        the boundary half-edge leaving that vertex.
        """

        boundary_from: Dict[int, int] = {}
        for i in range(interior_count, len(self.half_edges)):
            boundary_from[self.half_edges[i].vertex] = i

        for i in range(interior_count, len(self.half_edges)):
            he = self.half_edges[i]
            end_vertex = self.half_edges[he.twin].vertex
            next_id = boundary_from.get(end_vertex)
            if next_id is not None:
                he.next = next_id
                self.half_edges[next_id].prev = i

    ## construction
    ## ---------------------

    def add_vertex(self, position: Vec3, normal: Vec3 = ZERO3, uv: Vec2 = (0.0, 0.0)) -> int:
        self.vertices.append(HVertex(position, normal, uv))
        return len(self.vertices) - 1

    def add_face(self, v0: int, v1: int, v2: int) -> int:
        """Append a triangle without linking twins.

        Call :meth:`rebuild_twins` after a batch of insertions.
        """

        face_id = len(self.faces)
        base = len(self.half_edges)
        verts = (v0, v1, v2)
        for i in range(3):
            self.half_edges.append(HalfEdge(
                next=base + (i + 1) % 3,
                prev=base + (i + 2) % 3,
                vertex=verts[i],
                face=face_id,
            ))
            if self.vertices[verts[i]].half_edge == INVALID:
                self.vertices[verts[i]].half_edge = base + i
        self.faces.append(HFace(base))
        return face_id

    def rebuild_twins(self) -> None:
        """Re-derive all half-edges, twins and boundary loops from the faces.

        Half-edge ids are not stable across this call.
        """

        faces_data = [self._face_vertices_from(f.half_edge) for f in self.faces]
        self._build_faces(faces_data)

    def _face_vertices_from(self, start: int) -> List[int]:
        if start == INVALID or start >= len(self.half_edges):
            return []
        result = []
        current = start
        while True:
            result.append(self.half_edges[current].vertex)
            current = self.half_edges[current].next
            if current == start or current == INVALID:
                break
            if len(result) > MAX_FACE_CYCLE:
                logger.warning("face cycle from half-edge %d exceeds %d steps", start, MAX_FACE_CYCLE)
                break
        return result

    ## traversal
    ## ---------------------

    def vertex_half_edges(self, vertex: int) -> List[int]:
        """All half-edges leaving ``vertex``, boundary half-edges included.

        The ``twin -> next`` rotation does not close around a vertex whose
        boundary chain could not be linked, so the fan is completed by
        walking ``prev -> twin`` from the start edge in the other direction.
        """

        start = self.vertices[vertex].half_edge
        if start == INVALID:
            return []

        result = [start]
        seen = {start}
        current = start
        closed = False
        while True:
            twin = self.half_edges[current].twin
            if twin == INVALID:
                break
            current = self.half_edges[twin].next
            if current == INVALID:
                break
            if current == start:
                closed = True
                break
            if current in seen:
                break
            seen.add(current)
            result.append(current)

        if not closed:
            current = start
            while True:
                prev = self.half_edges[current].prev
                if prev == INVALID:
                    break
                twin = self.half_edges[prev].twin
                if twin == INVALID or twin in seen:
                    break
                if self.half_edges[twin].vertex != vertex:
                    break
                seen.add(twin)
                result.append(twin)
                current = twin

        return result

    def vertex_faces(self, vertex: int) -> List[int]:
        faces = []
        for he in self.vertex_half_edges(vertex):
            face = self.half_edges[he].face
            if face != INVALID:
                faces.append(face)
        return faces

    def vertex_neighbors(self, vertex: int) -> List[int]:
        neighbors = []
        for he in self.vertex_half_edges(vertex):
            _, other = self.edge_vertices(he)
            if other != INVALID and other not in neighbors:
                neighbors.append(other)
        return neighbors

    def vertex_edges(self, vertex: int) -> List[int]:
        """Canonical edge ids of every edge incident to ``vertex``."""

        return [self.canonical_edge(he) for he in self.vertex_half_edges(vertex)]

    def face_half_edges(self, face: int) -> List[int]:
        start = self.faces[face].half_edge
        result = []
        current = start
        while True:
            result.append(current)
            current = self.half_edges[current].next
            if current == start or current == INVALID or len(result) > MAX_FACE_CYCLE:
                break
        return result

    def face_vertices(self, face: int) -> List[int]:
        return [self.half_edges[he].vertex for he in self.face_half_edges(face)]

    def edge_vertices(self, he: int) -> Tuple[int, int]:
        """``(origin, destination)`` of half-edge ``he``."""

        edge = self.half_edges[he]
        if edge.next != INVALID:
            return edge.vertex, self.half_edges[edge.next].vertex
        return edge.vertex, self.half_edges[edge.twin].vertex

    def edge_midpoint(self, he: int) -> Vec3:
        a, b = self.edge_vertices(he)
        return midpoint(self.vertices[a].position, self.vertices[b].position)

    def canonical_edge(self, he: int) -> int:
        """The lower of ``he`` and its twin; the id used in edge selections."""

        twin = self.half_edges[he].twin
        if twin != INVALID and twin < he:
            return twin
        return he

    def is_boundary(self, he: int) -> bool:
        return self.half_edges[he].face == INVALID

    def is_boundary_edge(self, he: int) -> bool:
        """True if either side of the edge has no face."""

        twin = self.half_edges[he].twin
        return self.is_boundary(he) or twin == INVALID or self.is_boundary(twin)

    def boundary_half_edges(self) -> List[int]:
        return [i for i, he in enumerate(self.half_edges) if he.face == INVALID]

    def edge_count(self) -> int:
        count = 0
        for i, he in enumerate(self.half_edges):
            if he.twin == INVALID or i < he.twin:
                count += 1
        return count

    def unique_edges(self) -> List[int]:
        """One interior half-edge per undirected edge."""

        edges = []
        for i, he in enumerate(self.half_edges):
            if he.face == INVALID:
                continue
            if he.twin == INVALID or i < he.twin or self.half_edges[he.twin].face == INVALID:
                edges.append(i)
        return edges

    ## geometry
    ## ---------------------

    def face_normal(self, face: int) -> Vec3:
        verts = self.face_vertices(face)
        if len(verts) < 3:
            return ZERO3
        p = [self.vertices[v].position for v in verts[:3]]
        return normalize(triangle_cross(p[0], p[1], p[2]))

    def face_center(self, face: int) -> Vec3:
        verts = self.face_vertices(face)
        if not verts:
            return ZERO3
        total = vsum(self.vertices[v].position for v in verts)
        n = float(len(verts))
        return (total[0] / n, total[1] / n, total[2] / n)

    def face_area(self, face: int) -> float:
        verts = self.face_vertices(face)
        if len(verts) < 3:
            return 0.0
        p = [self.vertices[v].position for v in verts[:3]]
        return triangle_area(p[0], p[1], p[2])

    def recompute_normals(self) -> None:
        accum = [(0.0, 0.0, 0.0)] * len(self.vertices)
        for fi in range(len(self.faces)):
            verts = self.face_vertices(fi)
            if len(verts) < 3:
                continue
            p = [self.vertices[v].position for v in verts[:3]]
            n = triangle_cross(p[0], p[1], p[2])
            for v in verts:
                a = accum[v]
                accum[v] = (a[0] + n[0], a[1] + n[1], a[2] + n[2])
        for v, n in zip(self.vertices, accum):
            v.normal = normalize(n)


__all__ = ["INVALID", "MAX_FACE_CYCLE", "HalfEdge", "HVertex", "HFace", "HalfEdgeMesh"]
