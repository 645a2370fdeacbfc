"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    integrator: Framebuffer, shading state and the per-pixel render kernel
    renderer: Renderer class tying a SceneConfig to an output sink

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    is_finite,
    length,
    length_squared,
    make_ray,
    normalize,
    ray_at,
    real,
    reflect,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.renderer when needed.
#
# For rendering a scene, use:
#   from src.whitted.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "real",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "is_finite",
]
