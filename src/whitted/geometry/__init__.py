"""Geometry module for shape primitives.

Components:
    triangle: Triangle primitive with Moller-Trumbore intersection

Intersection routines are Taichi functions (@ti.func) that return a
HitRecord; a miss has hit == 0 and t == inf.
"""

from .triangle import (
    DegenerateGeometryError,
    HitRecord,
    Triangle,
    hit_triangle,
    is_degenerate_triangle,
    make_miss_record,
    make_triangle,
    triangle_area,
    triangle_area_np,
    triangle_normal,
)

__all__ = [
    "Triangle",
    "HitRecord",
    "DegenerateGeometryError",
    "hit_triangle",
    "make_triangle",
    "make_miss_record",
    "triangle_normal",
    "triangle_area",
    "triangle_area_np",
    "is_degenerate_triangle",
]
