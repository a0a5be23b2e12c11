"""Plain indexed triangle mesh used as the at-rest representation.

:class:`EditMesh` is the exchange format between the kernel and whatever
owns the render buffers: flat, parallel ``positions``/``normals``/``uvs``
lists plus a list of triangle index triples.  Duplicated positions with
distinct normals or UVs are legal and are how hard shading and UV seams
are expressed.

Ingestion (:func:`from_plain_mesh`) never raises on malformed buffers; it
returns ``None`` so the caller can decide how to report the problem.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np

from yapmesh.geom import ZERO2, ZERO3, Vec2, Vec3, normalize, scale3
from yapmesh.geometry_utils import triangle_area, triangle_centroid, triangle_normal
from yapmesh.tangents import TangentGenerationError, generate_tangents

logger = logging.getLogger(__name__)

Tri = Tuple[int, int, int]
FaceIndex = int

TRIANGLE_LIST = "triangle_list"


class Edge(NamedTuple):
    """Undirected edge keyed by vertex indices, lower index first."""

    a: int
    b: int

    @classmethod
    def of(cls, a: int, b: int) -> "Edge":
        return cls(a, b) if a <= b else cls(b, a)


@dataclass
class EditMesh:
    """Indexed triangle mesh suitable for face-level editing."""

    positions: List[Vec3] = field(default_factory=list)
    normals: List[Vec3] = field(default_factory=list)
    uvs: List[Vec2] = field(default_factory=list)
    triangles: List[Tri] = field(default_factory=list)

    def copy(self) -> "EditMesh":
        return EditMesh(list(self.positions), list(self.normals), list(self.uvs), list(self.triangles))

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def face_count(self) -> int:
        return len(self.triangles)

    def is_empty(self) -> bool:
        return not self.triangles

    def add_vertex(self, position: Vec3, normal: Vec3 = ZERO3, uv: Vec2 = ZERO2) -> int:
        self.positions.append(position)
        self.normals.append(normal)
        self.uvs.append(uv)
        return len(self.positions) - 1

    def face_positions(self, face: FaceIndex) -> Tuple[Vec3, Vec3, Vec3]:
        a, b, c = self.triangles[face]
        return self.positions[a], self.positions[b], self.positions[c]

    def face_normal(self, face: FaceIndex) -> Vec3:
        """Unit normal of a face, or the zero vector for a degenerate face."""

        return triangle_normal(*self.face_positions(face)) or ZERO3

    def face_center(self, face: FaceIndex) -> Vec3:
        return triangle_centroid(*self.face_positions(face))

    def face_area(self, face: FaceIndex) -> float:
        return triangle_area(*self.face_positions(face))

    def face_edges(self, face: FaceIndex) -> Tuple[Edge, Edge, Edge]:
        a, b, c = self.triangles[face]
        return Edge.of(a, b), Edge.of(b, c), Edge.of(c, a)

    def face_uv_center(self, face: FaceIndex) -> Vec2:
        a, b, c = self.triangles[face]
        ua, ub, uc = self.uvs[a], self.uvs[b], self.uvs[c]
        return ((ua[0] + ub[0] + uc[0]) / 3.0, (ua[1] + ub[1] + uc[1]) / 3.0)

    def build_adjacency(self) -> Dict[Edge, List[FaceIndex]]:
        """Map each undirected edge to the faces that share it."""

        adj: Dict[Edge, List[FaceIndex]] = defaultdict(list)
        for fi, (a, b, c) in enumerate(self.triangles):
            adj[Edge.of(a, b)].append(fi)
            adj[Edge.of(b, c)].append(fi)
            adj[Edge.of(c, a)].append(fi)
        return dict(adj)

    def boundary_edges(self, selected: Iterable[FaceIndex]) -> List[Edge]:
        """Edges on the rim of a face selection.

        An edge qualifies when at least one selected face uses it and either
        an unselected face also uses it or it is an open mesh edge with a
        single face.
        """

        selected = set(selected)
        boundary = []
        for edge, faces in self.build_adjacency().items():
            sel_count = sum(1 for f in faces if f in selected)
            unsel_count = len(faces) - sel_count
            if sel_count > 0 and (unsel_count > 0 or len(faces) == 1):
                boundary.append(edge)
        return boundary

    def selected_vertices(self, selected: Iterable[FaceIndex]) -> Set[int]:
        verts: Set[int] = set()
        for fi in selected:
            verts.update(self.triangles[fi])
        return verts

    def boundary_vertices(self, selected: Iterable[FaceIndex]) -> Set[int]:
        verts: Set[int] = set()
        for edge in self.boundary_edges(selected):
            verts.add(edge.a)
            verts.add(edge.b)
        return verts

    def recompute_normals(self) -> None:
        """Recompute vertex normals from area-weighted face normals.

        Vertices that belong to no face, or only to degenerate faces, get
        the zero vector.
        """

        count = len(self.positions)
        if count == 0:
            self.normals = []
            return
        accum = np.zeros((count, 3), dtype=float)
        if self.triangles:
            pos = np.asarray(self.positions, dtype=float)
            tri = np.asarray(self.triangles, dtype=np.int64)
            face_n = np.cross(pos[tri[:, 1]] - pos[tri[:, 0]], pos[tri[:, 2]] - pos[tri[:, 0]])
            for k in range(3):
                np.add.at(accum, tri[:, k], face_n)
        lengths = np.linalg.norm(accum, axis=1)
        safe = lengths > 1e-12
        accum[safe] /= lengths[safe][:, None]
        accum[~safe] = 0.0
        self.normals = [tuple(float(c) for c in n) for n in accum]


class PlainMesh(NamedTuple):
    positions: List[Vec3]
    normals: List[Vec3]
    uvs: List[Vec2]
    indices: List[int]


class TangentMesh(NamedTuple):
    positions: List[Vec3]
    normals: List[Vec3]
    uvs: List[Vec2]
    indices: List[int]
    tangents: Optional[List[Tuple[float, float, float, float]]]


def _read_vectors(values: Sequence, width: int) -> Optional[list]:
    out = []
    for value in values:
        if len(value) != width:
            return None
        out.append(tuple(float(c) for c in value))
    return out


def from_plain_mesh(positions: Sequence[Sequence[float]],
                    normals: Sequence[Sequence[float]] | None = None,
                    uvs: Sequence[Sequence[float]] | None = None,
                    triangle_indices: Sequence[int] | None = None,
                    topology: str = TRIANGLE_LIST) -> Optional[EditMesh]:
    """Build an :class:`EditMesh` from flat render buffers.

    Returns ``None`` when ``topology`` is not a triangle list, when
    attribute arrays have the wrong shape or length, or when an index is
    out of range.  Missing normals or UVs default to zeros.  An absent
    index buffer is read as a non-indexed triangle list.
    """

    if topology != TRIANGLE_LIST:
        logger.debug("rejecting mesh with topology %r", topology)
        return None

    pos = _read_vectors(positions, 3)
    if pos is None:
        return None
    count = len(pos)

    if normals is None or len(normals) == 0:
        nor = [ZERO3] * count
    else:
        nor = _read_vectors(normals, 3)
        if nor is None or len(nor) != count:
            return None

    if uvs is None or len(uvs) == 0:
        tex = [ZERO2] * count
    else:
        tex = _read_vectors(uvs, 2)
        if tex is None or len(tex) != count:
            return None

    if triangle_indices is None:
        if count % 3 != 0:
            return None
        indices = list(range(count))
    else:
        indices = [int(i) for i in triangle_indices]

    if len(indices) % 3 != 0:
        logger.debug("index buffer length %d is not a multiple of 3", len(indices))
        return None
    if any(i < 0 or i >= count for i in indices):
        logger.debug("index buffer references a vertex outside 0..%d", count - 1)
        return None

    triangles = [(indices[i], indices[i + 1], indices[i + 2]) for i in range(0, len(indices), 3)]
    return EditMesh(pos, nor, tex, triangles)


def to_plain_mesh(mesh: EditMesh) -> PlainMesh:
    """Flatten ``mesh`` into independent buffers for re-upload."""

    indices = [i for tri in mesh.triangles for i in tri]
    return PlainMesh(list(mesh.positions), list(mesh.normals), list(mesh.uvs), indices)


def to_plain_mesh_with_tangents(mesh: EditMesh) -> TangentMesh:
    """Like :func:`to_plain_mesh` but also emit per-vertex tangents.

    Tangent generation fails on degenerate UV layouts; in that case the
    buffers are returned with ``tangents=None`` so the mesh still renders.
    """

    plain = to_plain_mesh(mesh)
    try:
        tangents = generate_tangents(mesh.positions, mesh.normals, mesh.uvs, mesh.triangles)
    except TangentGenerationError as exc:
        logger.warning("failed to generate tangents for EditMesh: %s", exc)
        return TangentMesh(*plain, None)
    return TangentMesh(*plain, [tuple(float(c) for c in t) for t in tangents])


def weighted_face_normal(mesh: EditMesh, faces: Iterable[FaceIndex]) -> Vec3:
    """Area-weighted average unit normal of ``faces``."""

    total = (0.0, 0.0, 0.0)
    for fi in faces:
        n = scale3(mesh.face_normal(fi), mesh.face_area(fi))
        total = (total[0] + n[0], total[1] + n[1], total[2] + n[2])
    return normalize(total)


__all__ = [
    "Edge",
    "EditMesh",
    "FaceIndex",
    "PlainMesh",
    "TangentMesh",
    "TRIANGLE_LIST",
    "Tri",
    "from_plain_mesh",
    "to_plain_mesh",
    "to_plain_mesh_with_tangents",
    "weighted_face_normal",
]
