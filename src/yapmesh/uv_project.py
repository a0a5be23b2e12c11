"""Box, planar and cylindrical UV projection."""

from __future__ import annotations

import math
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from yapmesh.edit_mesh import EditMesh, FaceIndex


class UvProjection(Enum):
    BOX = "box"
    PLANAR = "planar"
    CYLINDRICAL = "cylindrical"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ProjectionAxis(Enum):
    X = "x"
    Y = "y"
    Z = "z"

    @property
    def index(self) -> int:
        return "xyz".index(self.value)

    @property
    def display_name(self) -> str:
        return self.value.upper()


# (u, v) components used when projecting along each axis
_PLANE_AXES = {0: (1, 2), 1: (0, 2), 2: (0, 1)}


def project_uvs(mesh: EditMesh, method: UvProjection = UvProjection.BOX,
                axis: ProjectionAxis = ProjectionAxis.Y, scale: float = 1.0,
                faces: Optional[Iterable[FaceIndex]] = None) -> EditMesh:
    """Assign UVs to ``faces`` (all faces when ``None``) by projection.

    Box projection picks, per face, the axis its normal is most aligned
    with.  Shared vertices take the UV written by the last face that
    touches them, so box-projected meshes want split vertices per side.
    A scale of (nearly) zero is treated as 1.
    """

    method = UvProjection(method)
    axis = ProjectionAxis(axis)
    if abs(scale) < 1e-6:
        scale = 1.0
    if faces is None:
        faces = range(mesh.face_count)
    faces = [fi for fi in sorted(set(faces)) if 0 <= fi < mesh.face_count]

    result = mesh.copy()
    if not faces:
        return result

    pos = np.asarray(mesh.positions, dtype=float)
    uvs = np.asarray(result.uvs, dtype=float).reshape(-1, 2)
    tris = np.asarray([mesh.triangles[fi] for fi in faces], dtype=np.int64)

    if method is UvProjection.BOX:
        p0, p1, p2 = pos[tris[:, 0]], pos[tris[:, 1]], pos[tris[:, 2]]
        dominant = np.argmax(np.abs(np.cross(p1 - p0, p2 - p0)), axis=1)
        for tri, dom in zip(tris, dominant):
            u_i, v_i = _PLANE_AXES[int(dom)]
            uvs[tri] = pos[tri][:, [u_i, v_i]] * scale
    elif method is UvProjection.PLANAR:
        u_i, v_i = _PLANE_AXES[axis.index]
        verts = tris.reshape(-1)
        uvs[verts] = pos[verts][:, [u_i, v_i]] * scale
    else:
        verts = tris.reshape(-1)
        p = pos[verts]
        if axis is ProjectionAxis.X:
            angle, height = np.arctan2(p[:, 2], p[:, 1]), p[:, 0]
        elif axis is ProjectionAxis.Y:
            angle, height = np.arctan2(p[:, 0], p[:, 2]), p[:, 1]
        else:
            angle, height = np.arctan2(p[:, 1], p[:, 0]), p[:, 2]
        u = angle / (2.0 * math.pi) + 0.5
        uvs[verts] = np.stack([u * scale, height * scale], axis=1)

    result.uvs = [(float(u), float(v)) for u, v in uvs]
    return result


__all__ = ["ProjectionAxis", "UvProjection", "project_uvs"]
