"""Ray data structure and vector utilities for the Whitted-style tracer.

This module provides the fundamental Ray dataclass and the vector helpers
the camera, intersection and shading code are written against. All
operations are Taichi functions so they can run inside kernels.

Precision follows the Taichi runtime's default float type. The renderer
is meant to run with ``ti.init(default_fp=ti.f64)`` so that shading
and the NaN checks run in double precision.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Scalar type used for every field the renderer allocates
real = ti.f64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Primary rays
            built by the camera are always unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Negative values lie behind the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input is not guarded: the result is NaN in every
    component, which then propagates into whatever uses it.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect a vector about a normal.

    Uses the convention ``incident - 2 * dot(incident, normal) * normal``.
    The shader passes the direction *toward* the light as ``incident``, so
    the result mirrors that direction through the surface plane.

    Args:
        incident: The vector to reflect.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def is_finite(v: vec3) -> ti.i32:
    """Check that no component of a vector is NaN or infinite.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is finite, 0 otherwise.
    """
    result = 1
    for c in ti.static(range(3)):
        if tm.isnan(v[c]) or tm.isinf(v[c]):
            result = 0
    return result
