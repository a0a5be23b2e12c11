"""Quadric error metric (QEM) mesh simplification.

Each vertex carries the quadric of the planes of its incident faces.
Edge collapses are scored by the summed quadric evaluated at the edge
midpoint (there is no optimal-point solve) and processed cheapest first
from a lazy priority queue.
"""

from __future__ import annotations

import heapq
import logging
import math
from itertools import count
from typing import Dict, List, Set

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec3, add, clamp, dot, midpoint, midpoint2, normalize
from yapmesh.geometry_utils import triangle_cross

logger = logging.getLogger(__name__)

MIN_RATIO = 0.01


class Quadric:
    """Symmetric 4x4 error quadric stored as its 10 upper-triangle terms."""

    __slots__ = ("data",)

    def __init__(self, data=None):
        self.data = list(data) if data is not None else [0.0] * 10

    @classmethod
    def from_plane(cls, a: float, b: float, c: float, d: float) -> "Quadric":
        return cls([
            a * a, a * b, a * c, a * d,
            b * b, b * c, b * d,
            c * c, c * d,
            d * d,
        ])

    def __add__(self, other: "Quadric") -> "Quadric":
        return Quadric([x + y for x, y in zip(self.data, other.data)])

    def evaluate(self, v: Vec3) -> float:
        """Sum of squared distances from ``v`` to the accumulated planes."""

        x, y, z = v
        d = self.data
        return (d[0] * x * x + 2.0 * d[1] * x * y + 2.0 * d[2] * x * z + 2.0 * d[3] * x
                + d[4] * y * y + 2.0 * d[5] * y * z + 2.0 * d[6] * y
                + d[7] * z * z + 2.0 * d[8] * z
                + d[9])


class _SimplifyState:

    def __init__(self, mesh: EditMesh):
        n_verts = mesh.vertex_count
        self.positions = list(mesh.positions)
        self.normals = list(mesh.normals)
        self.uvs = list(mesh.uvs)
        self.triangles: List[List[int]] = [list(t) for t in mesh.triangles]
        self.tri_alive = [True] * len(self.triangles)
        self.vert_alive = [True] * n_verts
        self.version = [0] * n_verts
        self.remap = list(range(n_verts))
        self.live_tri_count = len(self.triangles)
        self.vert_tris: List[Set[int]] = [set() for _ in range(n_verts)]
        self.quadrics = [Quadric() for _ in range(n_verts)]
        self.heap: list = []
        self._tiebreak = count()

        for ti, tri in enumerate(self.triangles):
            p0, p1, p2 = (self.positions[v] for v in tri)
            n = normalize(triangle_cross(p0, p1, p2))
            q = Quadric.from_plane(n[0], n[1], n[2], -dot(n, p0))
            for v in tri:
                self.quadrics[v] = self.quadrics[v] + q
                self.vert_tris[v].add(ti)

        seen = set()
        for tri in self.triangles:
            for i in range(3):
                a, b = tri[i], tri[(i + 1) % 3]
                edge = (a, b) if a <= b else (b, a)
                if edge not in seen:
                    seen.add(edge)
                    self.push_edge(*edge)

    def resolve(self, v: int) -> int:
        root = v
        while self.remap[root] != root:
            root = self.remap[root]
        while self.remap[v] != root:
            self.remap[v], v = root, self.remap[v]
        return root

    def push_edge(self, v0: int, v1: int) -> None:
        target = midpoint(self.positions[v0], self.positions[v1])
        cost = (self.quadrics[v0] + self.quadrics[v1]).evaluate(target)
        heapq.heappush(self.heap, (cost, next(self._tiebreak), v0, v1,
                                   self.version[v0], self.version[v1], target))

    def collapse_cheapest(self) -> bool:
        while self.heap:
            _, _, v0, v1, ver0, ver1, target = heapq.heappop(self.heap)
            if v0 == v1 or not self.vert_alive[v0] or not self.vert_alive[v1]:
                continue
            if ver0 != self.version[v0] or ver1 != self.version[v1]:
                continue  # stale: an endpoint moved since this entry was queued
            self._collapse(v0, v1, target)
            return True
        return False

    def _collapse(self, v0: int, v1: int, target: Vec3) -> None:
        self.positions[v0] = target
        self.normals[v0] = normalize(add(self.normals[v0], self.normals[v1]))
        self.uvs[v0] = midpoint2(self.uvs[v0], self.uvs[v1])
        self.quadrics[v0] = self.quadrics[v0] + self.quadrics[v1]
        self.vert_alive[v1] = False
        self.remap[v1] = v0
        self.version[v0] += 1

        for ti in self.vert_tris[v1]:
            if not self.tri_alive[ti]:
                continue
            tri = self.triangles[ti]
            tri[:] = [v0 if v == v1 else v for v in tri]
            if tri[0] == tri[1] or tri[1] == tri[2] or tri[0] == tri[2]:
                self.tri_alive[ti] = False
                self.live_tri_count -= 1
                for v in set(tri):
                    if v != v0:
                        self.vert_tris[v].discard(ti)
            else:
                self.vert_tris[v0].add(ti)
        self.vert_tris[v1] = set()
        self.vert_tris[v0] = {ti for ti in self.vert_tris[v0] if self.tri_alive[ti]}

        neighbors = set()
        for ti in self.vert_tris[v0]:
            neighbors.update(v for v in self.triangles[ti] if v != v0)
        for nv in sorted(neighbors):
            if self.vert_alive[nv]:
                self.push_edge(v0, nv)

    def build_mesh(self) -> EditMesh:
        result = EditMesh()
        old_to_new: Dict[int, int] = {}
        for i, alive in enumerate(self.vert_alive):
            if alive:
                old_to_new[i] = result.add_vertex(self.positions[i], self.normals[i], self.uvs[i])

        for ti, tri in enumerate(self.triangles):
            if not self.tri_alive[ti]:
                continue
            a, b, c = (self.resolve(v) for v in tri)
            if a == b or b == c or a == c:
                continue
            if a in old_to_new and b in old_to_new and c in old_to_new:
                result.triangles.append((old_to_new[a], old_to_new[b], old_to_new[c]))
        result.recompute_normals()
        return result


def simplify_mesh(mesh: EditMesh, target_ratio: float) -> EditMesh:
    """Collapse edges until about ``target_ratio`` of the triangles remain.

    The ratio is clamped to ``[0.01, 1.0]`` and at least one triangle is
    always targeted.  When the queue runs dry before the target is met the
    partially simplified mesh is returned.  Unused vertices are dropped.
    """

    ratio = clamp(target_ratio, MIN_RATIO, 1.0)
    target_tris = max(int(math.ceil(mesh.face_count * ratio)), 1)
    if mesh.face_count <= target_tris:
        return mesh.copy()

    state = _SimplifyState(mesh)
    collapses = 0
    while state.live_tri_count > target_tris:
        if not state.collapse_cheapest():
            break
        collapses += 1

    logger.debug("simplify: %d collapses, %d -> %d triangles (target %d)",
                 collapses, mesh.face_count, state.live_tri_count, target_tris)
    return state.build_mesh()


__all__ = ["Quadric", "simplify_mesh"]
