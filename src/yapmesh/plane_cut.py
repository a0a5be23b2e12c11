"""Slicing a mesh in two with an arbitrary plane."""

from __future__ import annotations

from typing import Dict, List, Tuple

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec3, dot, lerp, lerp2, normalize, sub

PLANE_EPSILON = 1e-6


def _side(d: float) -> int:
    if d > PLANE_EPSILON:
        return 1
    if d < -PLANE_EPSILON:
        return -1
    return 0


class _HalfBuilder:
    """Collects one side of the cut, reindexing source vertices on demand."""

    def __init__(self, source: EditMesh):
        self.source = source
        self.mesh = EditMesh()
        self.mapped: Dict[int, int] = {}
        self.crossings: Dict[Tuple[int, int], int] = {}

    def vertex(self, vi: int) -> int:
        if vi not in self.mapped:
            s = self.source
            self.mapped[vi] = self.mesh.add_vertex(s.positions[vi], s.normals[vi], s.uvs[vi])
        return self.mapped[vi]

    def crossing(self, vi: int, vj: int, t: float) -> int:
        # shared by both triangles on the edge so each half stays welded
        key = (vi, vj) if vi < vj else (vj, vi)
        if key not in self.crossings:
            s = self.source
            if vi > vj:
                vi, vj, t = vj, vi, 1.0 - t
            self.crossings[key] = self.mesh.add_vertex(
                lerp(s.positions[vi], s.positions[vj], t),
                normalize(lerp(s.normals[vi], s.normals[vj], t)),
                lerp2(s.uvs[vi], s.uvs[vj], t),
            )
        return self.crossings[key]

    def fan(self, polygon: List[int]) -> None:
        for i in range(1, len(polygon) - 1):
            self.mesh.triangles.append((polygon[0], polygon[i], polygon[i + 1]))

    def build(self) -> EditMesh:
        self.mesh.recompute_normals()
        return self.mesh


def plane_cut(mesh: EditMesh, plane_point: Vec3, plane_normal: Vec3) -> Tuple[EditMesh, EditMesh]:
    """Split ``mesh`` into ``(front, back)`` halves.

    Front is the side the normal points to.  Triangles entirely on one
    side (vertices within 1e-6 of the plane count as either side) are
    copied; straddling triangles are clipped and each clipped polygon is
    fanned.  The cut is not capped.
    """

    normal = normalize(plane_normal)
    distances = [dot(sub(p, plane_point), normal) for p in mesh.positions]
    front, back = _HalfBuilder(mesh), _HalfBuilder(mesh)

    for tri in mesh.triangles:
        sides = [_side(distances[v]) for v in tri]
        if all(s >= 0 for s in sides):
            front.fan([front.vertex(v) for v in tri])
            continue
        if all(s <= 0 for s in sides):
            back.fan([back.vertex(v) for v in tri])
            continue

        front_poly: List[int] = []
        back_poly: List[int] = []
        for i in range(3):
            vi, vj = tri[i], tri[(i + 1) % 3]
            di, dj = distances[vi], distances[vj]
            if di >= -PLANE_EPSILON:
                front_poly.append(front.vertex(vi))
            if di <= PLANE_EPSILON:
                back_poly.append(back.vertex(vi))
            if (di > PLANE_EPSILON and dj < -PLANE_EPSILON) or (di < -PLANE_EPSILON and dj > PLANE_EPSILON):
                t = di / (di - dj)
                front_poly.append(front.crossing(vi, vj, t))
                back_poly.append(back.crossing(vi, vj, t))
        front.fan(front_poly)
        back.fan(back_poly)

    return front.build(), back.build()


__all__ = ["plane_cut"]
