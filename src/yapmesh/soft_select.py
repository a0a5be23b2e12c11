"""Soft selection: distance falloff weights for proportional editing.

Selected vertices get weight 1.  Every other vertex is weighted by its
distance to the nearest selected vertex, normalised by the radius and fed
through a falloff curve; vertices at or beyond the radius get 0.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Iterable, List

import numpy as np
from scipy.spatial import cKDTree

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec3, clamp


class FalloffCurve(Enum):
    LINEAR = "linear"
    SMOOTH = "smooth"
    SHARP = "sharp"
    ROOT = "root"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    def weight(self, t: float) -> float:
        """Falloff for a normalised distance ``t`` (clamped to [0, 1])."""

        t = clamp(t, 0.0, 1.0)
        if self is FalloffCurve.LINEAR:
            return 1.0 - t
        if self is FalloffCurve.SMOOTH:
            return math.cos(math.pi * t) * 0.5 + 0.5
        if self is FalloffCurve.SHARP:
            return (1.0 - t) * (1.0 - t)
        return math.sqrt(1.0 - t)


def compute_soft_weights(mesh: EditMesh, selected: Iterable[int], radius: float,
                         curve: FalloffCurve = FalloffCurve.SMOOTH) -> List[float]:
    """Per-vertex weights in [0, 1], indexed like ``mesh.positions``."""

    curve = FalloffCurve(curve)
    count = mesh.vertex_count
    selected = sorted(v for v in set(selected) if 0 <= v < count)
    weights = [0.0] * count
    for vi in selected:
        weights[vi] = 1.0
    if radius <= 0.0 or not selected or count == 0:
        return weights

    pos = np.asarray(mesh.positions, dtype=float)
    # distance from every vertex to its nearest selected vertex, inf past the radius
    nearest, _ = cKDTree(pos[selected]).query(pos, k=1, distance_upper_bound=radius)

    chosen = set(selected)
    for vi in range(count):
        if vi in chosen:
            continue
        d = float(nearest[vi])
        if d < radius:
            weights[vi] = curve.weight(d / radius)
    return weights


def apply_soft_displacement(mesh: EditMesh, weights, offset: Vec3) -> EditMesh:
    """Move each vertex by ``offset * weight``."""

    result = mesh.copy()
    for vi, w in enumerate(weights):
        if w > 0.0 and vi < result.vertex_count:
            p = result.positions[vi]
            result.positions[vi] = (p[0] + offset[0] * w, p[1] + offset[1] * w, p[2] + offset[2] * w)
    result.recompute_normals()
    return result


__all__ = ["FalloffCurve", "apply_soft_displacement", "compute_soft_weights"]
