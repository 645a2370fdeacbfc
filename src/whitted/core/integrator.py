"""Whitted-style local illumination render loop.

This module holds the framebuffer and shading state in Taichi fields and
implements the per-pixel loop as one parallel kernel. For every pixel it

1. builds the primary ray through the camera,
2. finds the closest intersection in the scene,
3. shades the hit with the Phong model, or writes the background color.

Each pixel is independent and writes only its own framebuffer cell, so
the kernel's outer loop runs in parallel without synchronization. The
only shared value is the count of non-finite pixels, which is a kernel
reduction.

The framebuffer stores unclamped linear colors indexed as [x, y] with y
growing downward, so pixel (0, 0) is the top-left of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.integrator import (
    ...     render_frame, setup_render_target, setup_shading
    ... )
    >>> from src.whitted.camera.pinhole import PinholeCamera, setup_camera
    >>>
    >>> setup_camera(PinholeCamera(resolution_x=64, resolution_y=64))
    >>> setup_render_target(64, 64)
    >>> setup_shading(
    ...     light_position=(-10, 10, 4), light_color=(0.8, 0.8, 0.8),
    ...     ka=(1, 0, 0), kd=(1, 0, 0), ks=(1, 1, 1), shininess=32.0,
    ...     ambient=(0.2, 0.2, 0.2), background=(0, 0, 0),
    ... )
    >>> render_frame()
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_camera_origin, get_ray
from src.whitted.core.ray import is_finite, real
from src.whitted.materials.phong import shade_phong
from src.whitted.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Configuration
# =============================================================================

_light_position = ti.Vector.field(3, dtype=real, shape=())
_light_color = ti.Vector.field(3, dtype=real, shape=())
_ambient_intensity = ti.Vector.field(3, dtype=real, shape=())
_material_ka = ti.Vector.field(3, dtype=real, shape=())
_material_kd = ti.Vector.field(3, dtype=real, shape=())
_material_ks = ti.Vector.field(3, dtype=real, shape=())
_material_shininess = ti.field(dtype=real, shape=())
_background_color = ti.Vector.field(3, dtype=real, shape=())


def setup_shading(
    light_position: Sequence[float],
    light_color: Sequence[float],
    ka: Sequence[float],
    kd: Sequence[float],
    ks: Sequence[float],
    shininess: float,
    ambient: Sequence[float],
    background: Sequence[float] = (0.0, 0.0, 0.0),
) -> None:
    """Configure the point light, surface material and background.

    Args:
        light_position: Position of the point light.
        light_color: Emitted RGB color of the point light.
        ka: Ambient reflectance.
        kd: Diffuse reflectance.
        ks: Specular reflectance.
        shininess: Phong exponent.
        ambient: Ambient light intensity.
        background: Color for pixels whose ray hits nothing.
    """
    _light_position[None] = list(light_position)
    _light_color[None] = list(light_color)
    _material_ka[None] = list(ka)
    _material_kd[None] = list(kd)
    _material_ks[None] = list(ks)
    _material_shininess[None] = shininess
    _ambient_intensity[None] = list(ambient)
    _background_color[None] = list(background)


# =============================================================================
# Render Target (Framebuffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

_color_buffer = ti.Vector.field(3, dtype=real, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# 1 where the primary ray hit geometry
_hit_mask = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active framebuffer size and clear it.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the framebuffer and hit mask to zero."""
    _color_buffer.fill(0.0)
    _hit_mask.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def reset_render_target() -> None:
    """Forget the render target so it must be set up again."""
    _render_target_initialized[None] = 0
    clear_render_target()


# =============================================================================
# Per-Pixel Shading
# =============================================================================


@ti.func
def shade_pixel(x: ti.i32, y: ti.i32):
    """Compute the color of one pixel.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        A tuple (color, hit) where hit is 1 if the primary ray hit geometry.
        Missed pixels get the background color without any shading work.
    """
    ray = get_ray(x, y)
    rec = intersect_scene(ray.origin, ray.direction)

    color = _background_color[None]
    if rec.hit == 1:
        color = shade_phong(
            rec.point,
            rec.normal,
            get_camera_origin(),
            _material_ka[None],
            _material_kd[None],
            _material_ks[None],
            _material_shininess[None],
            _ambient_intensity[None],
            _light_position[None],
            _light_color[None],
        )

    return color, rec.hit


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32) -> ti.i32:
    """Shade every pixel of the active region.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The number of pixels whose color has a NaN or infinite channel.
    """
    non_finite = 0
    for x, y in ti.ndrange(width, height):
        color, hit = shade_pixel(x, y)
        _color_buffer[x, y] = color
        _hit_mask[x, y] = hit
        if is_finite(color) == 0:
            non_finite += 1
    return non_finite


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32) -> vec3:
    """Shade one pixel without touching the framebuffer."""
    color, _ = shade_pixel(x, y)
    return color


@ti.kernel
def _count_non_finite(width: ti.i32, height: ti.i32) -> ti.i32:
    """Count framebuffer pixels with a NaN or infinite channel."""
    count = 0
    for x, y in ti.ndrange(width, height):
        if is_finite(_color_buffer[x, y]) == 0:
            count += 1
    return count


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame() -> int:
    """Render every pixel of the active render target once.

    Returns:
        The number of pixels whose color came out NaN or infinite.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return int(_render_frame(width, height))


def render_pixel(x: int, y: int) -> tuple[float, float, float]:
    """Render a single pixel and return its color.

    Intended for tests and debugging; use render_frame() for images.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        Tuple of (R, G, B) color values, unclamped.
    """
    color = _render_single_pixel(x, y)
    return (float(color[0]), float(color[1]), float(color[2]))


def count_non_finite_pixels() -> int:
    """Count pixels in the active region whose color is not finite.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return int(_count_non_finite(width, height))


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the rendered image as a NumPy array.

    Values are the unclamped shaded colors. Row 0 is the top of the image.

    Returns:
        NumPy array of shape (height, width, 3).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.float64)


def get_hit_mask_numpy() -> npt.NDArray[np.int32]:
    """Get the hit mask as a (height, width) array of 0/1 values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    mask = _hit_mask.to_numpy()[:width, :height]
    return np.ascontiguousarray(mask.T, dtype=np.int32)
