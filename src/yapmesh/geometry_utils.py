"""Common triangle and polygon helpers shared across the editing operations."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from yapmesh.geom import Vec2, Vec3, cross, dot, epsilon, mag, normalize, sub


def triangle_cross(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    """Return the unnormalised ``(v1 - v0) x (v2 - v0)`` vector.

    Its length is twice the triangle area, which makes it the natural
    area-weighted contribution when accumulating vertex normals.
    """

    return cross(sub(v1, v0), sub(v2, v0))


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    n = triangle_cross(v0, v1, v2)
    length = mag(n)
    if length <= epsilon * epsilon:
        return None
    return (n[0] / length, n[1] / length, n[2] / length)


def triangle_area(v0: Vec3, v1: Vec3, v2: Vec3) -> float:
    """Return the area of a triangle."""

    return 0.5 * mag(triangle_cross(v0, v1, v2))


def triangle_centroid(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    """Return the centroid of a triangle."""

    return (
        (v0[0] + v1[0] + v2[0]) / 3.0,
        (v0[1] + v1[1] + v2[1]) / 3.0,
        (v0[2] + v1[2] + v2[2]) / 3.0,
    )


def newell_normal(points: Sequence[Vec3]) -> Vec3:
    """Return the unit normal of a (possibly non-planar) polygon.

    Newell's method sums the cross products of consecutive edges, which is
    equivalent to the area-weighted average plane normal of the polygon.
    """

    nx = ny = nz = 0.0
    count = len(points)
    for i in range(count):
        cur = points[i]
        nxt = points[(i + 1) % count]
        nx += (cur[1] - nxt[1]) * (cur[2] + nxt[2])
        ny += (cur[2] - nxt[2]) * (cur[0] + nxt[0])
        nz += (cur[0] - nxt[0]) * (cur[1] + nxt[1])
    return normalize((nx, ny, nz))


def plane_basis(normal: Vec3) -> Tuple[Vec3, Vec3]:
    """Return two unit tangent axes ``(u, v)`` spanning the plane of ``normal``.

    ``(u, v, normal)`` is right handed, so a loop that winds counter
    clockwise around ``normal`` in 3D also winds counter clockwise in the
    projected 2D coordinates.
    """

    up = (1.0, 0.0, 0.0) if abs(normal[1]) >= 0.99 else (0.0, 1.0, 0.0)
    u = normalize(cross(up, normal))
    v = cross(normal, u)
    return u, v


def project_to_plane(points: Sequence[Vec3], u: Vec3, v: Vec3) -> List[Vec2]:
    """Express 3D ``points`` in the 2D coordinates of the ``(u, v)`` basis."""

    return [(dot(p, u), dot(p, v)) for p in points]


def signed_area_2d(loop: Sequence[Vec2]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def point_in_triangle_2d(p: Vec2, a: Vec2, b: Vec2, c: Vec2) -> bool:
    """Barycentric containment test; points on an edge count as inside."""

    v0 = (c[0] - a[0], c[1] - a[1])
    v1 = (b[0] - a[0], b[1] - a[1])
    v2 = (p[0] - a[0], p[1] - a[1])
    d00 = v0[0] * v0[0] + v0[1] * v0[1]
    d01 = v0[0] * v1[0] + v0[1] * v1[1]
    d02 = v0[0] * v2[0] + v0[1] * v2[1]
    d11 = v1[0] * v1[0] + v1[1] * v1[1]
    d12 = v1[0] * v2[0] + v1[1] * v2[1]
    denom = d00 * d11 - d01 * d01
    if abs(denom) < 1e-12:
        return False
    inv = 1.0 / denom
    s = (d11 * d02 - d01 * d12) * inv
    t = (d00 * d12 - d01 * d02) * inv
    return s >= 0.0 and t >= 0.0 and (s + t) <= 1.0


__all__ = [
    "triangle_cross",
    "triangle_normal",
    "triangle_area",
    "triangle_centroid",
    "newell_normal",
    "plane_basis",
    "project_to_plane",
    "signed_area_2d",
    "point_in_triangle_2d",
]
