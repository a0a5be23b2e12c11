"""Per-face inset."""

from __future__ import annotations

from typing import Iterable

from yapmesh.edit_mesh import EditMesh, FaceIndex
from yapmesh.geom import add, clamp, lerp, lerp2, normalize, scale3

MIN_FRACTION = 0.001
MAX_FRACTION = 0.999


def inset_faces(mesh: EditMesh, selected: Iterable[FaceIndex], fraction: float) -> EditMesh:
    """Shrink each selected triangle toward its centroid and bridge the gap.

    Every selected face is replaced by an inner copy whose corners sit
    ``fraction`` of the way to the centroid, plus three quads (six
    triangles) joining the original rim to the inner one.  Faces are
    inset individually; neighbouring selected faces do not share inner
    vertices.  The fraction is clamped to [0.001, 0.999]; an empty
    selection or a fraction of zero returns a copy.
    """

    selected = sorted(fi for fi in set(selected) if 0 <= fi < mesh.face_count)
    if not selected or abs(fraction) < 1e-6:
        return mesh.copy()
    frac = clamp(fraction, MIN_FRACTION, MAX_FRACTION)

    chosen = set(selected)
    result = mesh.copy()
    result.triangles = [tri for fi, tri in enumerate(mesh.triangles) if fi not in chosen]

    for fi in selected:
        a, b, c = mesh.triangles[fi]
        center = mesh.face_center(fi)
        n_center = normalize(scale3(add(add(mesh.normals[a], mesh.normals[b]), mesh.normals[c]), 1.0 / 3.0))
        uv_center = mesh.face_uv_center(fi)

        ia, ib, ic = (
            result.add_vertex(
                lerp(mesh.positions[v], center, frac),
                normalize(lerp(mesh.normals[v], n_center, frac)),
                lerp2(mesh.uvs[v], uv_center, frac),
            )
            for v in (a, b, c)
        )

        result.triangles.append((ia, ib, ic))
        result.triangles.extend([
            (a, b, ib), (a, ib, ia),
            (b, c, ic), (b, ic, ib),
            (c, a, ia), (c, ia, ic),
        ])

    result.recompute_normals()
    return result


__all__ = ["inset_faces"]
