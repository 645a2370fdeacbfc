"""Phong local illumination for a single point light.

The observed color at a surface point is the sum of three terms:

    ambient  = I_a * k_a
    diffuse  = (I_p * k_d) * max(0, N . L)
    specular = (I_p * k_s) * max(0, R . V) ** shininess

where products of colors are component-wise and

    L = normalize(light_position - P)     direction toward the light
    R = reflect(L, N)                     L mirrored through the surface
    V = normalize(P - eye)                direction from the eye to P

With the eye at the world origin V is simply normalize(P). The sum is not
clamped; converting to a displayable range is the output sink's job.

There is no shadowing and no N . L test on the specular term, so a light
behind the surface can still produce a highlight. Zero-length L or V
(light or eye exactly on the surface) is not guarded and yields NaN. The
cosine clamps keep a NaN as NaN so such pixels can be detected.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.materials.phong import shade_phong
    >>> # Use shade_phong within a Taichi kernel:
    >>> # color = shade_phong(point, normal, eye, ka, kd, ks, 32.0,
    >>> #                     ambient, light_position, light_color)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import real, reflect

# Type alias for 3D vectors
vec3 = tm.vec3

# Phong exponent of the reference material
DEFAULT_SHININESS = 32.0


@dataclass(frozen=True)
class PhongMaterial:
    """Reflectance coefficients of the surface being shaded.

    Attributes:
        ka: Ambient reflectance (RGB).
        kd: Diffuse reflectance (RGB).
        ks: Specular reflectance (RGB).
        shininess: Phong exponent applied to the specular lobe.
    """

    ka: tuple[float, float, float] = (1.0, 0.0, 0.0)
    kd: tuple[float, float, float] = (1.0, 0.0, 0.0)
    ks: tuple[float, float, float] = (1.0, 1.0, 1.0)
    shininess: float = DEFAULT_SHININESS

    def __post_init__(self) -> None:
        for name in ("ka", "kd", "ks"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {value}")
            if any(c < 0.0 for c in value):
                raise ValueError(f"{name} components must be non-negative, got {value}")
        if self.shininess <= 0.0:
            raise ValueError(f"shininess must be positive, got {self.shininess}")


@ti.func
def clamp_non_negative(x: real) -> real:
    """Clamp negative values to zero, letting NaN through unchanged."""
    return ti.select(x < 0.0, 0.0, x)


@ti.func
def eval_ambient(ambient_intensity: vec3, ka: vec3) -> vec3:
    """Evaluate the ambient term I_a * k_a."""
    return ambient_intensity * ka


@ti.func
def eval_diffuse(light_color: vec3, kd: vec3, normal: vec3, to_light: vec3) -> vec3:
    """Evaluate the Lambertian diffuse term.

    Args:
        light_color: Emitted color of the point light.
        kd: Diffuse reflectance.
        normal: Unit surface normal.
        to_light: Unit direction from the surface point toward the light.

    Returns:
        The diffuse contribution, never negative.
    """
    return (light_color * kd) * clamp_non_negative(tm.dot(normal, to_light))


@ti.func
def eval_specular(
    light_color: vec3,
    ks: vec3,
    reflected: vec3,
    to_eye: vec3,
    shininess: real,
) -> vec3:
    """Evaluate the Phong specular term.

    The cosine is clamped to zero before exponentiation, so a negative base
    never reaches the power.

    Args:
        light_color: Emitted color of the point light.
        ks: Specular reflectance.
        reflected: The light direction reflected about the normal.
        to_eye: Unit view direction.
        shininess: Phong exponent.

    Returns:
        The specular contribution, never negative.
    """
    cos_alpha = clamp_non_negative(tm.dot(reflected, to_eye))
    return (light_color * ks) * (cos_alpha**shininess)


@ti.func
def shade_phong(
    point: vec3,
    normal: vec3,
    eye: vec3,
    ka: vec3,
    kd: vec3,
    ks: vec3,
    shininess: real,
    ambient_intensity: vec3,
    light_position: vec3,
    light_color: vec3,
) -> vec3:
    """Compute ambient + diffuse + specular color at a surface point.

    Args:
        point: The surface point being shaded.
        normal: Unit surface normal at the point.
        eye: Position of the viewer (camera origin).
        ka: Ambient reflectance.
        kd: Diffuse reflectance.
        ks: Specular reflectance.
        shininess: Phong exponent.
        ambient_intensity: Ambient light intensity.
        light_position: Position of the point light.
        light_color: Emitted color of the point light.

    Returns:
        The unclamped RGB color.
    """
    to_light = tm.normalize(light_position - point)
    reflected = reflect(to_light, normal)
    view = tm.normalize(point - eye)

    ambient = eval_ambient(ambient_intensity, ka)
    diffuse = eval_diffuse(light_color, kd, normal, to_light)
    specular = eval_specular(light_color, ks, reflected, view, shininess)

    return diffuse + ambient + specular
