"""Isotropic remeshing toward a uniform target edge length.

A fixed number of relaxation passes, each one splitting long edges,
collapsing short ones, flipping edges to pull vertex valence toward 6 and
smoothing vertices within their tangent planes.  This is a heuristic and
does not guarantee any particular final edge length.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Set, Tuple

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import add, dist, dot, midpoint, midpoint2, normalize, scale3, sub

logger = logging.getLogger(__name__)

ITERATIONS = 5
SMOOTH_FACTOR = 0.5
TARGET_VALENCE = 6


def _key(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a <= b else (b, a)


class _RemeshState:

    def __init__(self, mesh: EditMesh):
        self.positions = list(mesh.positions)
        self.normals = list(mesh.normals)
        self.uvs = list(mesh.uvs)
        self.triangles: List[Tuple[int, int, int]] = list(mesh.triangles)
        self.alive = [True] * len(self.triangles)

    def live(self):
        for ti, tri in enumerate(self.triangles):
            if self.alive[ti]:
                yield ti, tri

    def unique_edges(self) -> List[Tuple[int, int]]:
        seen = set()
        edges = []
        for _, tri in self.live():
            for i in range(3):
                key = _key(tri[i], tri[(i + 1) % 3])
                if key not in seen:
                    seen.add(key)
                    edges.append(key)
        return edges

    def edge_faces(self) -> Dict[Tuple[int, int], List[int]]:
        faces: Dict[Tuple[int, int], List[int]] = defaultdict(list)
        for ti, tri in self.live():
            for i in range(3):
                faces[_key(tri[i], tri[(i + 1) % 3])].append(ti)
        return faces

    def _add_triangle(self, tri: Tuple[int, int, int]) -> int:
        self.triangles.append(tri)
        self.alive.append(True)
        return len(self.triangles) - 1

    ## split
    ## ---------------------

    def split_long_edges(self, threshold: float) -> int:
        edges = [(a, b) for a, b in self.unique_edges()
                 if dist(self.positions[a], self.positions[b]) > threshold]
        if not edges:
            return 0
        faces = self.edge_faces()
        for a, b in edges:
            self.split_edge(a, b, faces)
        return len(edges)

    def split_edge(self, a: int, b: int, faces: Dict[Tuple[int, int], List[int]]) -> None:
        mid = len(self.positions)
        self.positions.append(midpoint(self.positions[a], self.positions[b]))
        self.normals.append(normalize(add(self.normals[a], self.normals[b])))
        self.uvs.append(midpoint2(self.uvs[a], self.uvs[b]))

        for ti in faces.pop(_key(a, b), []):
            if not self.alive[ti]:
                continue
            tri = self.triangles[ti]
            self.alive[ti] = False
            # substitution keeps the face's winding
            t1 = self._add_triangle(tuple(mid if v == b else v for v in tri))
            t2 = self._add_triangle(tuple(mid if v == a else v for v in tri))
            for new_ti in (t1, t2):
                new_tri = self.triangles[new_ti]
                for i in range(3):
                    key = _key(new_tri[i], new_tri[(i + 1) % 3])
                    lst = faces.get(key)
                    if lst is not None and ti in lst:
                        lst.remove(ti)
                        lst.append(new_ti)

    ## collapse
    ## ---------------------

    def collapse_short_edges(self, threshold: float) -> int:
        edges = []
        for a, b in self.unique_edges():
            length = dist(self.positions[a], self.positions[b])
            if length < threshold:
                edges.append((length, a, b))
        edges.sort()

        vert_tris: Dict[int, Set[int]] = defaultdict(set)
        for ti, tri in self.live():
            for v in tri:
                vert_tris[v].add(ti)

        removed: Set[int] = set()
        collapsed = 0
        for _, a, b in edges:
            if a in removed or b in removed:
                continue
            self.positions[a] = midpoint(self.positions[a], self.positions[b])
            self.normals[a] = normalize(add(self.normals[a], self.normals[b]))
            self.uvs[a] = midpoint2(self.uvs[a], self.uvs[b])

            for ti in vert_tris.pop(b, set()):
                if not self.alive[ti]:
                    continue
                tri = tuple(a if v == b else v for v in self.triangles[ti])
                self.triangles[ti] = tri
                if tri[0] == tri[1] or tri[1] == tri[2] or tri[0] == tri[2]:
                    self.alive[ti] = False
                else:
                    vert_tris[a].add(ti)
            removed.add(b)
            collapsed += 1
        return collapsed

    ## flip
    ## ---------------------

    def valence(self) -> Dict[int, int]:
        valence: Dict[int, int] = defaultdict(int)
        for a, b in self.unique_edges():
            valence[a] += 1
            valence[b] += 1
        return valence

    def flip_edges(self) -> int:
        valence = self.valence()
        faces = self.edge_faces()
        touched: Set[int] = set()
        flips = 0

        for (a, b), tris in list(faces.items()):
            if len(tris) != 2:
                continue
            t0, t1 = tris
            if t0 in touched or t1 in touched:
                continue
            tri0, tri1 = self.triangles[t0], self.triangles[t1]
            opp0 = next(v for v in tri0 if v != a and v != b)
            opp1 = next(v for v in tri1 if v != a and v != b)
            if opp0 == opp1 or _key(opp0, opp1) in faces:
                continue

            def dev(v, delta=0):
                return (valence.get(v, TARGET_VALENCE) + delta - TARGET_VALENCE) ** 2

            before = dev(a) + dev(b) + dev(opp0) + dev(opp1)
            after = dev(a, -1) + dev(b, -1) + dev(opp0, 1) + dev(opp1, 1)
            if after >= before:
                continue

            i = tri0.index(a)
            if tri0[(i + 1) % 3] != b:
                a, b = b, a
            # quad cycle is a -> opp1 -> b -> opp0
            self.triangles[t0] = (a, opp1, opp0)
            self.triangles[t1] = (b, opp0, opp1)
            valence[a] -= 1
            valence[b] -= 1
            valence[opp0] += 1
            valence[opp1] += 1
            faces[_key(opp0, opp1)] = [t0, t1]
            touched.update((t0, t1))
            flips += 1
        return flips

    ## smooth
    ## ---------------------

    def tangential_smooth(self, factor: float) -> None:
        neighbors: Dict[int, Set[int]] = defaultdict(set)
        for _, tri in self.live():
            for i in range(3):
                a, b = tri[i], tri[(i + 1) % 3]
                neighbors[a].add(b)
                neighbors[b].add(a)

        old = list(self.positions)
        for vi, nbrs in neighbors.items():
            if not nbrs:
                continue
            total = (0.0, 0.0, 0.0)
            for n in nbrs:
                total = add(total, old[n])
            avg = scale3(total, 1.0 / len(nbrs))
            delta = sub(avg, old[vi])
            normal = self.normals[vi]
            tangential = sub(delta, scale3(normal, dot(delta, normal)))
            self.positions[vi] = add(old[vi], scale3(tangential, factor))

    def to_edit_mesh(self) -> EditMesh:
        used = sorted({v for _, tri in self.live() for v in tri})
        old_to_new = {}
        result = EditMesh()
        for v in used:
            old_to_new[v] = result.add_vertex(self.positions[v], self.normals[v], self.uvs[v])
        for _, tri in self.live():
            result.triangles.append(tuple(old_to_new[v] for v in tri))
        result.recompute_normals()
        return result


def remesh(mesh: EditMesh, target_edge_length: float) -> EditMesh:
    """Relax ``mesh`` toward edges of ``target_edge_length``.

    Edges longer than 4/3 of the target are split and edges shorter than
    4/5 of it are collapsed, shortest first.  A non-positive target
    returns a copy.
    """

    if target_edge_length <= 0.0 or mesh.is_empty():
        return mesh.copy()

    state = _RemeshState(mesh)
    high = target_edge_length * 4.0 / 3.0
    low = target_edge_length * 4.0 / 5.0

    for iteration in range(ITERATIONS):
        splits = state.split_long_edges(high)
        collapses = state.collapse_short_edges(low)
        flips = state.flip_edges()
        state.tangential_smooth(SMOOTH_FACTOR)
        logger.debug("remesh pass %d: %d splits, %d collapses, %d flips",
                     iteration, splits, collapses, flips)

    return state.to_edit_mesh()


__all__ = ["remesh"]
