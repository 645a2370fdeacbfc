"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera looking down -Z through a rectangular sensor

Ray generation maps a pixel (x, y), with y growing downward, to a point
on the sensor plane and returns the unit ray from the optical center
through it. It runs inside Taichi kernels, one ray per pixel.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_info",
]
