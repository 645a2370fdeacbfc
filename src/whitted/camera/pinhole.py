"""Pinhole camera model mapping pixels to primary rays.

The camera sits at its optical center and looks down the negative Z axis
through a virtual sensor plane placed at distance ``sensor_distance``.
The sensor spans ``[x_min, x_max] x [y_min, y_max]`` and is described by
three cached vectors:

- top_left: the top-left corner of the sensor in world space
- horizontal: spans the sensor from left to right
- vertical: spans the sensor from top to bottom

Pixel (0, 0) is the top-left pixel; y grows downward. A pixel is sampled
at ``(x + pixel_offset_x, y + pixel_offset_y)``. The defaults are 0.5 and
-0.5, so the vertical sample sits half a pixel above the pixel center.
Set pixel_offset_y to 0.5 to sample pixel centers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(resolution_x=512, resolution_y=512)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(256, 256)  # Ray through the image center
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray, real, vec3

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole camera looking down -Z.

    Attributes:
        resolution_x: Sensor resolution in pixels along X.
        resolution_y: Sensor resolution in pixels along Y.
        sensor_distance: Distance from the optical center to the sensor.
        x_min: Left edge of the sensor.
        x_max: Right edge of the sensor.
        y_min: Bottom edge of the sensor.
        y_max: Top edge of the sensor.
        origin: Optical center in world space.
        pixel_offset_x: Horizontal sample position inside a pixel.
        pixel_offset_y: Vertical sample position inside a pixel.
    """

    resolution_x: int = 512
    resolution_y: int = 512
    sensor_distance: float = 1.0
    x_min: float = -1.0
    x_max: float = 1.0
    y_min: float = -1.0
    y_max: float = 1.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    pixel_offset_x: float = 0.5
    pixel_offset_y: float = -0.5

    def __post_init__(self) -> None:
        for name in ("resolution_x", "resolution_y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Camera {name} must be an integer, got {value!r}")
        if self.resolution_x <= 0 or self.resolution_y <= 0:
            raise ValueError(
                f"Camera resolution must be positive, got "
                f"{self.resolution_x}x{self.resolution_y}"
            )
        if self.sensor_distance == 0.0:
            raise ValueError("Sensor distance must be non-zero")
        if self.x_min == self.x_max or self.y_min == self.y_max:
            raise ValueError("Sensor bounds must span a non-empty area")
        if len(self.origin) != 3:
            raise ValueError(f"Camera origin must have 3 components, got {self.origin}")

    def sensor_vectors(
        self,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Compute the cached sensor geometry.

        Returns:
            Tuple of (top_left, horizontal, vertical) as float64 arrays.
        """
        origin = np.array(self.origin, dtype=np.float64)
        top_left = origin + np.array([self.x_min, self.y_max, -self.sensor_distance])
        horizontal = np.array([self.x_max - self.x_min, 0.0, 0.0])
        vertical = np.array([0.0, self.y_min - self.y_max, 0.0])
        return top_left, horizontal, vertical


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())
_sensor_top_left = ti.Vector.field(3, dtype=real, shape=())
_sensor_horizontal = ti.Vector.field(3, dtype=real, shape=())
_sensor_vertical = ti.Vector.field(3, dtype=real, shape=())

_resolution_x = ti.field(dtype=ti.i32, shape=())
_resolution_y = ti.field(dtype=ti.i32, shape=())
_pixel_offset_x = ti.field(dtype=real, shape=())
_pixel_offset_y = ti.field(dtype=real, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Upload the camera's sensor geometry to Taichi fields.

    Must be called from Python before any kernel calls get_ray().

    Args:
        camera: Camera configuration.
    """
    top_left, horizontal, vertical = camera.sensor_vectors()

    _camera_origin[None] = list(camera.origin)
    _sensor_top_left[None] = top_left.tolist()
    _sensor_horizontal[None] = horizontal.tolist()
    _sensor_vertical[None] = vertical.tolist()

    _resolution_x[None] = camera.resolution_x
    _resolution_y[None] = camera.resolution_y
    _pixel_offset_x[None] = camera.pixel_offset_x
    _pixel_offset_y[None] = camera.pixel_offset_y

    logger.debug(
        "Camera set up: %dx%d, top_left=%s, horizontal=%s, vertical=%s",
        camera.resolution_x,
        camera.resolution_y,
        top_left.tolist(),
        horizontal.tolist(),
        vertical.tolist(),
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(x: ti.i32, y: ti.i32) -> Ray:
    """Generate the primary ray for pixel (x, y).

    Coordinates are expected in ``[0, resolution_x) x [0, resolution_y)``;
    out-of-range pixels are the caller's responsibility.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).

    Returns:
        A Ray from the camera origin with a unit-length direction through
        the sample point on the sensor.
    """
    u = (ti.cast(x, real) + _pixel_offset_x[None]) / ti.cast(_resolution_x[None], real)
    v = (ti.cast(y, real) + _pixel_offset_y[None]) / ti.cast(_resolution_y[None], real)

    point_on_sensor = (
        _sensor_horizontal[None] * u + _sensor_vertical[None] * v + _sensor_top_left[None]
    )

    origin = _camera_origin[None]
    direction = tm.normalize(point_on_sensor - origin)

    return make_ray(origin, direction)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera's optical center in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, top_left, horizontal, vertical, resolution
        and pixel_offset entries.
    """

    def _as_tuple(vec_field: "ti.MatrixField") -> tuple[float, float, float]:
        value = vec_field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "top_left": _as_tuple(_sensor_top_left),
        "horizontal": _as_tuple(_sensor_horizontal),
        "vertical": _as_tuple(_sensor_vertical),
        "resolution": (int(_resolution_x[None]), int(_resolution_y[None])),
        "pixel_offset": (float(_pixel_offset_x[None]), float(_pixel_offset_y[None])),
    }
