"""Optional boolean engine that hands EditMesh solids to ``trimesh``.

Operands are converted to ``trimesh.Trimesh`` objects, combined by one of
the backends trimesh knows about (manifold3d, Blender, ...) and converted
back.  Only positions and triangles survive the trip; normals are
recomputed and UVs are zeroed.
"""

from __future__ import annotations

import logging

import numpy as np

try:
    import trimesh
except ImportError:  # pragma: no cover - optional dependency
    trimesh = None  # type: ignore[assignment]

from yapmesh.edit_mesh import EditMesh
from .bsp import BooleanOp

logger = logging.getLogger(__name__)

ENGINE_NAME = "trimesh"

_TRIMESH_FUNCTIONS = {
    BooleanOp.UNION: "union",
    BooleanOp.SUBTRACT: "difference",
    BooleanOp.INTERSECT: "intersection",
}


def backends() -> set[str]:
    """Names of the trimesh boolean backends usable right now."""

    if trimesh is None:  # pragma: no cover - optional dependency
        return set()
    return set(trimesh.boolean.engines_available)


def is_available(backend: str | None = None) -> bool:
    found = backends()
    if backend is None:
        return bool(found)
    return backend in found


def to_trimesh(mesh: EditMesh) -> "trimesh.Trimesh":
    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed")
    vertices = np.asarray(mesh.positions, dtype=float).reshape(-1, 3)
    faces = np.asarray(mesh.triangles, dtype=np.int64).reshape(-1, 3)
    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


def from_trimesh(tm: "trimesh.Trimesh") -> EditMesh:
    if tm is None or len(tm.faces) == 0:
        return EditMesh()
    positions = [tuple(float(c) for c in row) for row in np.asarray(tm.vertices)]
    count = len(positions)
    mesh = EditMesh(
        positions,
        [(0.0, 0.0, 0.0)] * count,
        [(0.0, 0.0)] * count,
        [tuple(int(i) for i in row) for row in np.asarray(tm.faces)],
    )
    mesh.recompute_normals()
    return mesh


def mesh_boolean(a: EditMesh, b: EditMesh, operation, backend: str | None = None) -> EditMesh:
    """Combine ``a`` and ``b`` through ``trimesh.boolean``."""

    if trimesh is None:  # pragma: no cover - optional dependency
        raise RuntimeError("trimesh is not installed; install the 'trimesh' extra for this engine")
    op = BooleanOp.parse(operation)
    found = backends()
    if not found:
        raise RuntimeError("trimesh has no boolean backend; install manifold3d")
    if backend is not None and backend not in found:
        raise RuntimeError(f"trimesh backend {backend!r} is not available (have {sorted(found)})")

    func = getattr(trimesh.boolean, _TRIMESH_FUNCTIONS[op])
    try:
        result = func([to_trimesh(a), to_trimesh(b)], engine=backend, check_volume=False)
    except Exception as exc:  # pragma: no cover - depends on external binaries
        raise RuntimeError(f"trimesh {op.value} failed: {exc}") from exc
    logger.debug("trimesh %s produced %d faces", op.value, len(result.faces))
    return from_trimesh(result)


__all__ = ["ENGINE_NAME", "backends", "from_trimesh", "is_available", "mesh_boolean", "to_trimesh"]
