"""Scene module for scene configuration and ray-scene queries.

Components:
    config: Immutable SceneConfig, JSON load/save and the reference scene
    intersection: Triangle storage in Taichi fields and closest-hit queries
"""

from .config import (
    BACKGROUND_COLOR,
    PointLight,
    SceneConfig,
    TriangleInfo,
    create_reference_scene,
    load_scene,
    save_scene,
    validate_scene,
)
from .intersection import (
    MAX_TRIANGLES,
    add_triangle,
    clear_scene,
    get_triangle_count,
    intersect_scene,
    is_culling_behind_camera,
    set_cull_behind_camera,
)

__all__ = [
    # Intersection module
    "add_triangle",
    "clear_scene",
    "get_triangle_count",
    "intersect_scene",
    "set_cull_behind_camera",
    "is_culling_behind_camera",
    "MAX_TRIANGLES",
    # Config module
    "SceneConfig",
    "PointLight",
    "TriangleInfo",
    "BACKGROUND_COLOR",
    "create_reference_scene",
    "load_scene",
    "save_scene",
    "validate_scene",
]
