## foundational vector arithmetic for yapMesh
## Born on 29 July, 2020
## Copyright (c) 2020 Richard DeVaul

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""foundational vector arithmetic for **yapMesh**

Points, normals and directions are plain ``(x, y, z)`` tuples and texture
coordinates are ``(u, v)`` tuples.  Tuples are immutable, which lets the
mesh containers share vertex data between copies without aliasing bugs.
"""

from __future__ import annotations

from math import floor, sqrt
from typing import Iterable, Tuple

Vec3 = Tuple[float, float, float]
Vec2 = Tuple[float, float]

## constants
epsilon = 0.000005
ZERO3: Vec3 = (0.0, 0.0, 0.0)
ZERO2: Vec2 = (0.0, 0.0)


## operations on scalars
## -----------------------

def close(a, b):
    """ are two scalars the same within epsilon
    """
    return abs(a - b) < epsilon


def clamp(x, lo, hi):
    """ clamp scalar ``x`` into ``[lo, hi]``"""
    return max(lo, min(hi, x))


## R^3 -> R^3 functions
## ------------------------

def add(a, b) -> Vec3:
    """ 3 vector, `a + b`"""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a, b) -> Vec3:
    """ 3 vector, `a - b`"""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale3(a, c) -> Vec3:
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return (a[0] * c, a[1] * c, a[2] * c)


def neg(a) -> Vec3:
    return (-a[0], -a[1], -a[2])


def cross(a, b) -> Vec3:
    """ 3 vector cross product `a x b`"""
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def lerp(a, b, t) -> Vec3:
    """ linear interpolation from ``a`` (t=0) to ``b`` (t=1)"""
    return (a[0] + (b[0] - a[0]) * t,
            a[1] + (b[1] - a[1]) * t,
            a[2] + (b[2] - a[2]) * t)


def midpoint(a, b) -> Vec3:
    return ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5, (a[2] + b[2]) * 0.5)


def vsum(vectors: Iterable[Vec3]) -> Vec3:
    """ component-wise sum of an iterable of 3 vectors"""
    x = y = z = 0.0
    for v in vectors:
        x += v[0]
        y += v[1]
        z += v[2]
    return (x, y, z)


def normalize(a) -> Vec3:
    """Return ``a`` scaled to unit length, or the zero vector if ``a`` is
    too short to have a meaningful direction.
    """
    m = mag(a)
    if m <= 1e-12:
        return ZERO3
    return (a[0] / m, a[1] / m, a[2] / m)


def vfloor(a, size) -> Tuple[int, int, int]:
    """ integer grid cell of point ``a`` for cells of edge ``size``"""
    return (int(floor(a[0] / size)), int(floor(a[1] / size)), int(floor(a[2] / size)))


## R^3 -> R functions
## ----------------------------------------

def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def mag2(a):
    return a[0] * a[0] + a[1] * a[1] + a[2] * a[2]


def dist(a, b):
    """ compute the euclidean distance between two 3 vector points ``a`` and ``b``"""
    return mag(sub(a, b))


def dist2(a, b):
    """ squared euclidean distance between ``a`` and ``b``"""
    return mag2(sub(a, b))


## R^2 functions
## ---------------------

def add2(a, b) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def sub2(a, b) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def scale2(a, c) -> Vec2:
    return (a[0] * c, a[1] * c)


def lerp2(a, b, t) -> Vec2:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def midpoint2(a, b) -> Vec2:
    return ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5)


def cross2(a, b):
    """ z component of the cross product of two 2 vectors"""
    return a[0] * b[1] - a[1] * b[0]


def dist2d(a, b):
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return sqrt(dx * dx + dy * dy)


__all__ = [
    "Vec3",
    "Vec2",
    "epsilon",
    "ZERO3",
    "ZERO2",
    "close",
    "clamp",
    "add",
    "sub",
    "scale3",
    "neg",
    "cross",
    "lerp",
    "midpoint",
    "vsum",
    "normalize",
    "vfloor",
    "dot",
    "mag",
    "mag2",
    "dist",
    "dist2",
    "add2",
    "sub2",
    "scale2",
    "lerp2",
    "midpoint2",
    "cross2",
    "dist2d",
]
