"""Materials module.

Components:
    phong: Phong reflectance (ambient, diffuse, specular) for one point light
"""

from .phong import (
    DEFAULT_SHININESS,
    PhongMaterial,
    clamp_non_negative,
    eval_ambient,
    eval_diffuse,
    eval_specular,
    shade_phong,
)

__all__ = [
    "PhongMaterial",
    "DEFAULT_SHININESS",
    "clamp_non_negative",
    "eval_ambient",
    "eval_diffuse",
    "eval_specular",
    "shade_phong",
]
