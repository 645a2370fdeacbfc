"""Scene-level primitive storage and closest-hit queries.

Primitives live in Taichi fields so kernels can read them directly. The
render loop only ever calls intersect_scene(), which is the single place
that knows which primitive kinds exist; triangles are the only kind today.

The closest hit is the one with the smallest t. Because the triangle test
does not reject negative t, neither does this query unless culling is
enabled with set_cull_behind_camera(True).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.intersection import (
    ...     add_triangle, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> add_triangle((-1, -1, -3.5), (1, 1, -3), (0.75, -1, -2.5))
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import real
from src.whitted.geometry.triangle import (
    HitRecord,
    Triangle,
    hit_triangle,
    make_miss_record,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of primitives supported in the scene
MAX_TRIANGLES = 1024

# Triangle storage: Structure of Arrays layout
triangle_v1 = ti.Vector.field(3, dtype=real, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=real, shape=MAX_TRIANGLES)
triangle_v3 = ti.Vector.field(3, dtype=real, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# 1 to discard hits with t <= 0
_cull_behind = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives and disable culling.

    Field data is not zeroed; it is overwritten as primitives are added.
    """
    num_triangles[None] = 0
    _cull_behind[None] = 0


def add_triangle(
    v1: Sequence[float],
    v2: Sequence[float],
    v3: Sequence[float],
) -> int:
    """Add a triangle to the scene.

    Args:
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v1[idx] = list(v1)
    triangle_v2[idx] = list(v2)
    triangle_v3[idx] = list(v3)
    num_triangles[None] = idx + 1
    logger.debug("Added triangle %d: %s, %s, %s", idx, tuple(v1), tuple(v2), tuple(v3))
    return idx


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


def set_cull_behind_camera(enabled: bool) -> None:
    """Enable or disable rejection of hits with t <= 0."""
    _cull_behind[None] = 1 if enabled else 0


def is_culling_behind_camera() -> bool:
    """Check whether hits behind the ray origin are rejected."""
    return bool(_cull_behind[None])


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Test a ray against every primitive and return the closest hit.

    A hit replaces the current closest one unless its t is greater than or
    equal to the current t. A NaN t therefore still counts as a hit, so a
    scene with one triangle behaves exactly like testing that triangle.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.

    Returns:
        The closest HitRecord, or a miss record (t = inf).
    """
    result = make_miss_record()

    for i in range(num_triangles[None]):
        tri = Triangle(v1=triangle_v1[i], v2=triangle_v2[i], v3=triangle_v3[i])
        rec = hit_triangle(ray_origin, ray_direction, tri)
        if rec.hit == 1 and not (rec.t >= result.t):
            if _cull_behind[None] == 0 or rec.t > 0.0:
                result = rec

    return result
