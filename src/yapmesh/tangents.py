"""Per-vertex tangent generation for normal-mapped rendering."""

from __future__ import annotations

from typing import Sequence

import numpy as np


class TangentGenerationError(ValueError):
    """Raised when the UV layout cannot produce a tangent frame."""


def generate_tangents(positions: Sequence, normals: Sequence, uvs: Sequence,
                      triangles: Sequence) -> np.ndarray:
    """Return an ``(N, 4)`` array of tangents with handedness in ``w``.

    Each triangle contributes its UV gradient to its three corners; the
    accumulated direction is then Gram-Schmidt orthogonalised against the
    vertex normal.  Every vertex referenced by a triangle must end up with
    a usable tangent, otherwise :class:`TangentGenerationError` is raised.
    """

    if len(triangles) == 0:
        raise TangentGenerationError("mesh has no triangles")

    pos = np.asarray(positions, dtype=float).reshape(-1, 3)
    nor = np.asarray(normals, dtype=float).reshape(-1, 3)
    tex = np.asarray(uvs, dtype=float).reshape(-1, 2)
    tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    if not (len(pos) == len(nor) == len(tex)):
        raise TangentGenerationError("attribute arrays differ in length")

    i0, i1, i2 = tri[:, 0], tri[:, 1], tri[:, 2]
    e1 = pos[i1] - pos[i0]
    e2 = pos[i2] - pos[i0]
    d1 = tex[i1] - tex[i0]
    d2 = tex[i2] - tex[i0]

    det = d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1]
    valid = np.abs(det) > 1e-12
    r = np.zeros_like(det)
    np.divide(1.0, det, out=r, where=valid)

    sdir = (e1 * d2[:, 1:2] - e2 * d1[:, 1:2]) * r[:, None]
    tdir = (e2 * d1[:, 0:1] - e1 * d2[:, 0:1]) * r[:, None]

    tan = np.zeros_like(pos)
    bitan = np.zeros_like(pos)
    for corner in (i0, i1, i2):
        np.add.at(tan, corner, sdir)
        np.add.at(bitan, corner, tdir)

    # Gram-Schmidt against the normal
    t = tan - nor * np.sum(nor * tan, axis=1)[:, None]
    lengths = np.linalg.norm(t, axis=1)

    used = np.unique(tri)
    if np.any(lengths[used] <= 1e-12) or not np.all(np.isfinite(t[used])):
        bad = int(np.count_nonzero(lengths[used] <= 1e-12))
        raise TangentGenerationError(f"{bad} vertices have degenerate UV gradients")

    safe = lengths > 1e-12
    t[safe] /= lengths[safe][:, None]
    t[~safe] = 0.0

    handed = np.where(np.sum(np.cross(nor, t) * bitan, axis=1) < 0.0, -1.0, 1.0)
    return np.concatenate([t, handed[:, None]], axis=1)


__all__ = ["TangentGenerationError", "generate_tangents"]
