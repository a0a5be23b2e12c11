"""Polygon triangulation for hole filling.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL) when a loop is too awkward for the straightforward
clipper in :mod:`yapmesh.fill_hole`.  Unlike a point-based triangulation
the result is expressed as indices into the caller's loop so the
triangles can reference existing mesh vertices directly.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate hole loops"
    ) from exc

from yapmesh.geometry_utils import signed_area_2d

Point2D = Tuple[float, float]


def triangulate_loop(points: Sequence[Point2D]) -> List[Tuple[int, int, int]]:
    """Triangulate a simple 2D loop, returning index triples into ``points``.

    Triangles are wound the same way as the input loop.  Loops with fewer
    than three points produce no triangles.
    """

    if len(points) < 3:
        return []

    vertices = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    ring_array = np.asarray([len(points)], dtype=np.uint32)
    indices = np.asarray(_earcut.triangulate_float64(vertices, ring_array)).reshape(-1)

    loop_ccw = signed_area_2d(points) >= 0.0
    triangles: List[Tuple[int, int, int]] = []
    for i in range(0, len(indices) - 2, 3):
        a, b, c = int(indices[i]), int(indices[i + 1]), int(indices[i + 2])
        tri_ccw = signed_area_2d([points[a], points[b], points[c]]) >= 0.0
        if tri_ccw != loop_ccw:
            b, c = c, b
        triangles.append((a, b, c))
    return triangles


__all__ = ["triangulate_loop"]
