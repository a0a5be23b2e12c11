# -*- coding: utf-8 -*-
"""yapMesh: a half-edge mesh-editing kernel.

Every editing operation takes an :class:`~yapmesh.edit_mesh.EditMesh` (or a
:class:`~yapmesh.half_edge.HalfEdgeMesh` for topology-driven operations)
plus a selection and returns a new mesh.  Inputs are never modified.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("yapMesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from yapmesh.edit_mesh import Edge, EditMesh, from_plain_mesh, to_plain_mesh, to_plain_mesh_with_tangents
from yapmesh.half_edge import INVALID, HalfEdgeMesh

__all__ = [
    "__version__",
    "Edge",
    "EditMesh",
    "HalfEdgeMesh",
    "INVALID",
    "from_plain_mesh",
    "to_plain_mesh",
    "to_plain_mesh_with_tangents",
]
