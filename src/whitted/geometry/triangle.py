"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

A triangle is defined by three ordered vertices v1, v2, v3. The winding
order decides which way the shading normal points.

The intersection test solves

    origin + t * direction = (1 - u - v) * v1 + u * v2 + v * v3

for (t, u, v) with the edge vectors e1 = v2 - v1 and e2 = v3 - v1. A ray
hits when u and v lie in the closed barycentric triangle: u in [0, 1],
v >= 0 and u + v <= 1. Rays that touch an edge count as hits.

The test applies no range check on t, so hits behind the
ray origin are reported too, and it does not guard against a ray running
parallel to the triangle's plane. In that case the inverse determinant is
infinite and u, v become infinite or NaN; NaN values pass the rejection
tests and the resulting hit carries NaN data. Callers that need to reject
such hits can check ``is_finite`` on the record or enable culling at the
scene level.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.triangle import Triangle, hit_triangle
    >>> tri = Triangle(
    ...     v1=ti.math.vec3(-1, -1, -3.5),
    ...     v2=ti.math.vec3(1, 1, -3),
    ...     v3=ti.math.vec3(0.75, -1, -2.5),
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import real

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Triangles with an area below this are treated as degenerate in strict mode
DEGENERATE_AREA_EPSILON = 1e-12


class DegenerateGeometryError(RuntimeError):
    """Raised in strict mode when geometry produces non-finite results.

    Covers zero-area triangles found while loading a scene and rendered
    pixels whose color came out NaN or infinite.
    """


@ti.dataclass
class Triangle:
    """A triangle defined by three ordered vertices.

    Attributes:
        v1: First vertex (vec3).
        v2: Second vertex (vec3).
        v3: Third vertex (vec3).
    """

    v1: vec3
    v2: vec3
    v3: vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    A miss is a record with ``hit == 0`` and ``t == inf``; the other fields
    are zero and carry no meaning.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise.
        t: Ray parameter at the intersection, +inf on a miss.
        point: The intersection position.
        normal: Unit face normal at the intersection.
        u: Barycentric weight of v2.
        v: Barycentric weight of v3.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    u: real
    v: real


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        u=0.0,
        v=0.0,
    )


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, tri: Triangle) -> HitRecord:
    """Test for ray-triangle intersection.

    The normal of a hit is ``normalize(cross(v3 - P, v2 - P))`` where P is
    the interpolated hit position. It is recomputed per hit rather than
    taken from the edge vectors. For a counter-clockwise triangle
    seen from the front this normal points away from the viewer.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        tri: The triangle to test.

    Returns:
        A HitRecord; check its hit field.
    """
    e1 = tri.v2 - tri.v1
    e2 = tri.v3 - tri.v1

    pvec = tm.cross(ray_direction, e2)
    inv_det = 1.0 / tm.dot(e1, pvec)

    tvec = ray_origin - tri.v1
    qvec = tm.cross(tvec, e1)

    # Barycentric coordinates of the ray's crossing with the triangle's plane
    u = tm.dot(tvec, pvec) * inv_det
    v = tm.dot(ray_direction, qvec) * inv_det

    result = make_miss_record()

    # Written as negated rejections so NaN coordinates are not rejected
    if not (u < 0.0 or u > 1.0):
        if not (v < 0.0 or u + v > 1.0):
            point = tri.v1 * (1.0 - u - v) + tri.v2 * u + tri.v3 * v
            normal = tm.normalize(tm.cross(tri.v3 - point, tri.v2 - point))
            result = HitRecord(
                hit=1,
                t=tm.dot(e2, qvec) * inv_det,
                point=point,
                normal=normal,
                u=u,
                v=v,
            )

    return result


@ti.func
def make_triangle(v1: vec3, v2: vec3, v3: vec3) -> Triangle:
    """Create a triangle from three vertices."""
    return Triangle(v1=v1, v2=v2, v3=v3)


@ti.func
def triangle_normal(tri: Triangle) -> vec3:
    """Compute the geometric normal normalize(cross(v2 - v1, v3 - v1)).

    This is the conventional right-hand-rule normal. It is opposite to the
    shading normal reported by hit_triangle.
    """
    return tm.normalize(tm.cross(tri.v2 - tri.v1, tri.v3 - tri.v1))


@ti.func
def triangle_area(tri: Triangle) -> real:
    """Compute the area of a triangle."""
    return 0.5 * tm.length(tm.cross(tri.v2 - tri.v1, tri.v3 - tri.v1))


def triangle_area_np(
    v1: Sequence[float],
    v2: Sequence[float],
    v3: Sequence[float],
) -> float:
    """Compute a triangle's area from Python, without a kernel launch.

    Args:
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.

    Returns:
        The triangle's area.
    """
    a = np.asarray(v1, dtype=np.float64)
    b = np.asarray(v2, dtype=np.float64)
    c = np.asarray(v3, dtype=np.float64)
    return float(0.5 * np.linalg.norm(np.cross(b - a, c - a)))


def is_degenerate_triangle(
    v1: Sequence[float],
    v2: Sequence[float],
    v3: Sequence[float],
) -> bool:
    """Check whether a triangle has (near) zero area."""
    return triangle_area_np(v1, v2, v3) <= DEGENERATE_AREA_EPSILON
