"""BSP-tree constructive solid geometry for triangle meshes.

Each operand is compiled into a binary space partition whose splitting
planes come from its own triangles.  The triangles of the other operand
are then classified by their centroid: a centroid that walks off a front
branch is outside, one that walks off a back branch (or sits on a plane
without touching that plane's polygons) is inside, and one that lands on
a coplanar polygon is *on* the surface, facing the same way or the
opposite way.  No seam re-triangulation is done; triangles are kept or
discarded whole.

Building and querying the tree are iterative, so deep trees on large
convex meshes do not hit the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from yapmesh.edit_mesh import EditMesh
from yapmesh.geom import Vec3, cross, dot, lerp, neg, normalize, sub
from yapmesh.geometry_utils import triangle_centroid, triangle_cross

logger = logging.getLogger(__name__)

ENGINE_NAME = "native"
BSP_EPSILON = 1e-5
# node budget guarding against runaway splitting on malformed input
MAX_BSP_NODES = 250_000

TriPoints = Tuple[Vec3, Vec3, Vec3]


class BooleanOp(Enum):
    UNION = "union"
    SUBTRACT = "subtract"
    INTERSECT = "intersect"

    @classmethod
    def parse(cls, value) -> "BooleanOp":
        if isinstance(value, cls):
            return value
        key = str(value).lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"unsupported boolean operation {value!r}") from None

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_ALIASES = {"difference": "subtract", "intersection": "intersect"}


class Side(Enum):
    INSIDE = "inside"
    OUTSIDE = "outside"
    ON_SAME = "on_same"
    ON_OPPOSITE = "on_opposite"


@dataclass
class BspNode:
    normal: Vec3
    dist: float
    triangles: List[TriPoints] = field(default_factory=list)
    front: Optional["BspNode"] = None
    back: Optional["BspNode"] = None

    def distance(self, point: Vec3) -> float:
        return dot(self.normal, point) - self.dist


def classify_dist(d: float) -> int:
    if d > BSP_EPSILON:
        return 1
    if d < -BSP_EPSILON:
        return -1
    return 0


def build_bsp(triangles: Iterable[TriPoints]) -> Optional[BspNode]:
    """Build a BSP tree from triangle corner triples.

    The first non-degenerate triangle of each set provides the splitting
    plane; degenerate triangles are skipped.
    """

    root: Optional[BspNode] = None
    stack: List[Tuple[List[TriPoints], Optional[BspNode], bool]] = [(list(triangles), None, True)]
    nodes = 0

    while stack:
        tris, parent, is_front = stack.pop()
        if nodes >= MAX_BSP_NODES:
            logger.warning("BSP construction stopped after %d nodes", nodes)
            break

        node, front_tris, back_tris = _partition(tris)
        if node is None:
            continue
        nodes += 1
        if parent is None:
            root = node
        elif is_front:
            parent.front = node
        else:
            parent.back = node
        if front_tris:
            stack.append((front_tris, node, True))
        if back_tris:
            stack.append((back_tris, node, False))

    return root


def _partition(tris: List[TriPoints]):
    start = 0
    normal = None
    while start < len(tris):
        n = normalize(triangle_cross(*tris[start]))
        if n != (0.0, 0.0, 0.0):
            normal = n
            break
        start += 1
    if normal is None:
        return None, [], []

    plane_tri = tris[start]
    node = BspNode(normal, dot(normal, plane_tri[0]), [plane_tri])
    front: List[TriPoints] = []
    back: List[TriPoints] = []

    for tri in tris[start + 1:]:
        dists = [node.distance(p) for p in tri]
        signs = [classify_dist(d) for d in dists]
        if all(s == 0 for s in signs):
            node.triangles.append(tri)
        elif all(s >= 0 for s in signs):
            front.append(tri)
        elif all(s <= 0 for s in signs):
            back.append(tri)
        else:
            f, b = split_triangle(tri, dists)
            front.extend(f)
            back.extend(b)
    return node, front, back


def split_triangle(tri: TriPoints, dists: Sequence[float]) -> Tuple[List[TriPoints], List[TriPoints]]:
    """Split a straddling triangle at the plane's zero crossings."""

    front_pts: List[Vec3] = []
    back_pts: List[Vec3] = []
    for i in range(3):
        j = (i + 1) % 3
        di, dj = dists[i], dists[j]
        if di >= -BSP_EPSILON:
            front_pts.append(tri[i])
        if di <= BSP_EPSILON:
            back_pts.append(tri[i])
        if (di > BSP_EPSILON and dj < -BSP_EPSILON) or (di < -BSP_EPSILON and dj > BSP_EPSILON):
            crossing = lerp(tri[i], tri[j], di / (di - dj))
            front_pts.append(crossing)
            back_pts.append(crossing)
    return _fan(front_pts), _fan(back_pts)


def _fan(pts: List[Vec3]) -> List[TriPoints]:
    return [(pts[0], pts[i], pts[i + 1]) for i in range(1, len(pts) - 1)]


def _point_in_triangle(p: Vec3, tri: TriPoints, normal: Vec3) -> bool:
    for i in range(3):
        a = tri[i]
        b = tri[(i + 1) % 3]
        if dot(cross(sub(b, a), sub(p, a)), normal) < -BSP_EPSILON:
            return False
    return True


def classify_point(root: Optional[BspNode], point: Vec3, normal: Vec3 | None = None) -> Side:
    """Classify ``point`` against a solid's BSP tree.

    When ``normal`` is given and the point lies on one of the solid's
    polygons, the result reports whether the surfaces face the same way.
    An empty tree classifies everything as outside.
    """

    node = root
    steps = 0
    while node is not None and steps < MAX_BSP_NODES:
        steps += 1
        d = node.distance(point)
        if d > BSP_EPSILON:
            if node.front is None:
                return Side.OUTSIDE
            node = node.front
            continue
        if d >= -BSP_EPSILON and normal is not None:
            for tri in node.triangles:
                if _point_in_triangle(point, tri, node.normal):
                    return Side.ON_SAME if dot(normal, node.normal) > 0.0 else Side.ON_OPPOSITE
        if node.back is None:
            return Side.INSIDE
        node = node.back
    return Side.OUTSIDE


def is_inside(root: Optional[BspNode], point: Vec3) -> bool:
    return classify_point(root, point) is Side.INSIDE


def _mesh_triangles(mesh: EditMesh) -> List[TriPoints]:
    return [mesh.face_positions(fi) for fi in range(mesh.face_count)]


def classify_triangles(mesh: EditMesh, tree: Optional[BspNode]) -> Dict[Side, List[int]]:
    """Bucket each face of ``mesh`` by where its centroid falls in ``tree``."""

    result: Dict[Side, List[int]] = {side: [] for side in Side}
    for fi in range(mesh.face_count):
        p0, p1, p2 = mesh.face_positions(fi)
        normal = normalize(triangle_cross(p0, p1, p2))
        center = triangle_centroid(p0, p1, p2)
        result[classify_point(tree, center, normal)].append(fi)
    return result


class MeshBuilder:
    """Accumulates faces from several source meshes into one EditMesh."""

    def __init__(self):
        self.mesh = EditMesh()

    def add_mesh_triangles(self, source: EditMesh, faces: Iterable[int], flipped: bool = False) -> None:
        vert_map: Dict[int, int] = {}
        for fi in faces:
            tri = source.triangles[fi]
            for v in tri:
                if v not in vert_map:
                    normal = neg(source.normals[v]) if flipped else source.normals[v]
                    vert_map[v] = self.mesh.add_vertex(source.positions[v], normal, source.uvs[v])
            a, b, c = (vert_map[v] for v in tri)
            self.mesh.triangles.append((a, c, b) if flipped else (a, b, c))

    def build(self) -> EditMesh:
        self.mesh.recompute_normals()
        return self.mesh


def mesh_boolean(a: EditMesh, b: EditMesh, operation) -> EditMesh:
    """Combine two closed meshes with ``union``, ``subtract`` or ``intersect``."""

    op = BooleanOp.parse(operation)
    if b.is_empty():
        return a.copy() if op is not BooleanOp.INTERSECT else EditMesh()
    if a.is_empty():
        return b.copy() if op is BooleanOp.UNION else EditMesh()

    tree_a = build_bsp(_mesh_triangles(a))
    tree_b = build_bsp(_mesh_triangles(b))
    a_sides = classify_triangles(a, tree_b)
    b_sides = classify_triangles(b, tree_a)

    builder = MeshBuilder()
    # shared coplanar surface is taken from ``a`` only
    if op is BooleanOp.UNION:
        builder.add_mesh_triangles(a, a_sides[Side.OUTSIDE] + a_sides[Side.ON_SAME])
        builder.add_mesh_triangles(b, b_sides[Side.OUTSIDE])
    elif op is BooleanOp.SUBTRACT:
        builder.add_mesh_triangles(a, a_sides[Side.OUTSIDE] + a_sides[Side.ON_OPPOSITE])
        builder.add_mesh_triangles(b, b_sides[Side.INSIDE], flipped=True)
    else:
        builder.add_mesh_triangles(a, a_sides[Side.INSIDE] + a_sides[Side.ON_SAME])
        builder.add_mesh_triangles(b, b_sides[Side.INSIDE])

    result = builder.build()
    logger.debug("%s: %d + %d faces -> %d faces", op.value, a.face_count, b.face_count, result.face_count)
    return result


def is_available() -> bool:
    return True


__all__ = [
    "BSP_EPSILON",
    "ENGINE_NAME",
    "BooleanOp",
    "BspNode",
    "MeshBuilder",
    "Side",
    "build_bsp",
    "classify_dist",
    "classify_point",
    "classify_triangles",
    "is_available",
    "is_inside",
    "mesh_boolean",
    "split_triangle",
]
