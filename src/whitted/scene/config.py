"""Immutable scene configuration passed to the render entry point.

A SceneConfig bundles everything one render pass needs: the camera, the
triangles, the point light, the surface material, the ambient intensity
and the background color. It is a frozen value; nothing in the renderer
reads scene constants from anywhere else.

Configurations round-trip through plain dictionaries so they can be
stored as JSON. Keys missing from a dictionary fall back to the reference
scene's values.

Example:
    >>> from src.whitted.scene.config import SceneConfig, load_scene
    >>> config = load_scene("scene.json")
    >>> config.camera.resolution_x
    512
"""

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any

from src.whitted.camera.pinhole import PinholeCamera
from src.whitted.geometry.triangle import (
    DegenerateGeometryError,
    is_degenerate_triangle,
    triangle_area_np,
)
from src.whitted.materials.phong import PhongMaterial

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]

# Reference scene values, also the fallbacks for missing configuration keys
REFERENCE_TRIANGLE: tuple[Vec3, Vec3, Vec3] = (
    (-1.0, -1.0, -3.5),
    (1.0, 1.0, -3.0),
    (0.75, -1.0, -2.5),
)
REFERENCE_LIGHT_POSITION: Vec3 = (-10.0, 10.0, 4.0)
REFERENCE_LIGHT_COLOR: Vec3 = (0.8, 0.8, 0.8)
REFERENCE_AMBIENT: Vec3 = (0.2, 0.2, 0.2)
BACKGROUND_COLOR: Vec3 = (0.0, 0.0, 0.0)

_CAMERA_FLOAT_KEYS = (
    "sensor_distance",
    "x_min",
    "x_max",
    "y_min",
    "y_max",
    "pixel_offset_x",
    "pixel_offset_y",
)


def _vec3(value: Any, name: str) -> Vec3:
    """Coerce a 3-element sequence to a float tuple."""
    try:
        x, y, z = value
        return (float(x), float(y), float(z))
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e


def _number(value: Any, name: str) -> float:
    """Coerce a JSON number to float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _resolution(value: Any, name: str) -> int:
    """Coerce a JSON number with an integral value to int."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Get an optional nested mapping, empty when absent."""
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _triangle(value: Any, name: str) -> "TriangleInfo":
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping with v1, v2 and v3, got {value!r}")
    return TriangleInfo(
        v1=_vec3(value.get("v1"), f"{name}.v1"),
        v2=_vec3(value.get("v2"), f"{name}.v2"),
        v3=_vec3(value.get("v3"), f"{name}.v3"),
    )


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        position: Light position in world space.
        color: Emitted RGB color, not clamped.
    """

    position: Vec3 = REFERENCE_LIGHT_POSITION
    color: Vec3 = REFERENCE_LIGHT_COLOR


@dataclass(frozen=True)
class TriangleInfo:
    """Vertices of one triangle in the scene."""

    v1: Vec3
    v2: Vec3
    v3: Vec3

    @property
    def area(self) -> float:
        return triangle_area_np(self.v1, self.v2, self.v3)


@dataclass(frozen=True)
class SceneConfig:
    """Complete description of one render pass.

    Attributes:
        camera: The pinhole camera.
        triangles: Scene geometry.
        light: The single point light.
        material: Reflectance coefficients shared by every triangle.
        ambient_intensity: Ambient light intensity (RGB).
        background: Color written to pixels whose ray misses.
        cull_behind_camera: Reject hits with t <= 0. Off by default.
    """

    camera: PinholeCamera = field(default_factory=PinholeCamera)
    triangles: tuple[TriangleInfo, ...] = (TriangleInfo(*REFERENCE_TRIANGLE),)
    light: PointLight = field(default_factory=PointLight)
    material: PhongMaterial = field(default_factory=PhongMaterial)
    ambient_intensity: Vec3 = REFERENCE_AMBIENT
    background: Vec3 = BACKGROUND_COLOR
    cull_behind_camera: bool = False

    @property
    def width(self) -> int:
        return self.camera.resolution_x

    @property
    def height(self) -> int:
        return self.camera.resolution_y

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        return {
            "camera": asdict(self.camera),
            "triangles": [
                {"v1": list(t.v1), "v2": list(t.v2), "v3": list(t.v3)} for t in self.triangles
            ],
            "light": {"position": list(self.light.position), "color": list(self.light.color)},
            "material": {
                "ka": list(self.material.ka),
                "kd": list(self.material.kd),
                "ks": list(self.material.ks),
                "shininess": self.material.shininess,
            },
            "ambient_intensity": list(self.ambient_intensity),
            "background": list(self.background),
            "cull_behind_camera": self.cull_behind_camera,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneConfig":
        """Build a configuration from a dictionary.

        Args:
            data: Dictionary in the layout produced by to_dict().

        Returns:
            The configuration.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene configuration must be a mapping, got {type(data).__name__}")

        camera_data = dict(_section(data, "camera"))
        for key in ("resolution_x", "resolution_y"):
            if key in camera_data:
                camera_data[key] = _resolution(camera_data[key], f"camera.{key}")
        for key in _CAMERA_FLOAT_KEYS:
            if key in camera_data:
                camera_data[key] = _number(camera_data[key], f"camera.{key}")
        if "origin" in camera_data:
            camera_data["origin"] = _vec3(camera_data["origin"], "camera.origin")
        try:
            camera = PinholeCamera(**camera_data)
        except TypeError as e:
            raise ValueError(f"Invalid camera configuration: {e}") from e

        triangles_data = data.get("triangles")
        if triangles_data is None:
            triangles = (TriangleInfo(*REFERENCE_TRIANGLE),)
        elif not isinstance(triangles_data, list):
            raise ValueError(f"triangles must be a list, got {type(triangles_data).__name__}")
        else:
            triangles = tuple(
                _triangle(t, f"triangles[{i}]") for i, t in enumerate(triangles_data)
            )

        light_data = _section(data, "light")
        light = PointLight(
            position=_vec3(light_data.get("position", REFERENCE_LIGHT_POSITION), "light.position"),
            color=_vec3(light_data.get("color", REFERENCE_LIGHT_COLOR), "light.color"),
        )

        material_data = _section(data, "material")
        defaults = PhongMaterial()
        material = PhongMaterial(
            ka=_vec3(material_data.get("ka", defaults.ka), "material.ka"),
            kd=_vec3(material_data.get("kd", defaults.kd), "material.kd"),
            ks=_vec3(material_data.get("ks", defaults.ks), "material.ks"),
            shininess=_number(
                material_data.get("shininess", defaults.shininess), "material.shininess"
            ),
        )

        return cls(
            camera=camera,
            triangles=triangles,
            light=light,
            material=material,
            ambient_intensity=_vec3(
                data.get("ambient_intensity", REFERENCE_AMBIENT), "ambient_intensity"
            ),
            background=_vec3(data.get("background", BACKGROUND_COLOR), "background"),
            cull_behind_camera=bool(data.get("cull_behind_camera", False)),
        )


def validate_scene(config: SceneConfig, *, strict: bool = False) -> None:
    """Check a configuration before it is uploaded.

    Args:
        config: The configuration to check.
        strict: Also reject zero-area triangles.

    Raises:
        ValueError: If the scene has no triangles.
        DegenerateGeometryError: In strict mode, if a triangle has zero area.
    """
    if not config.triangles:
        raise ValueError("Scene must contain at least one triangle")

    for i, tri in enumerate(config.triangles):
        if is_degenerate_triangle(tri.v1, tri.v2, tri.v3):
            if strict:
                raise DegenerateGeometryError(
                    f"Triangle {i} has zero area: {tri.v1}, {tri.v2}, {tri.v3}"
                )
            logger.warning("Triangle %d has zero area and will shade as NaN or miss", i)


def load_scene(path: str | Path) -> SceneConfig:
    """Load a scene configuration from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or holds invalid data.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid scene file {path}: {e}") from e
    logger.debug("Loaded scene from %s", path)
    return SceneConfig.from_dict(data)


def save_scene(config: SceneConfig, path: str | Path) -> None:
    """Write a scene configuration to a JSON file."""
    Path(path).write_text(json.dumps(config.to_dict(), indent=2))


def create_reference_scene(
    resolution_x: int = 512,
    resolution_y: int = 512,
    **overrides: Any,
) -> SceneConfig:
    """Create the reference scene: one red triangle under a white point light.

    The scene is a 512x512 camera at the origin with its sensor at distance
    1 spanning [-1, 1] x [-1, 1], the triangle (-1, -1, -3.5), (1, 1, -3),
    (0.75, -1, -2.5), a light at (-10, 10, 4) with color 0.8, and a red
    Phong material with a white highlight under ambient intensity 0.2.

    Args:
        resolution_x: Image width in pixels. The sensor size stays fixed,
            so a smaller image is a downsampled view of the same scene.
        resolution_y: Image height in pixels.
        **overrides: SceneConfig fields to replace.

    Returns:
        The scene configuration.

    Example:
        >>> config = create_reference_scene()
        >>> config.camera.resolution_x
        512
        >>> small = create_reference_scene(64, 64, cull_behind_camera=True)
    """
    camera = PinholeCamera(resolution_x=resolution_x, resolution_y=resolution_y)
    return replace(SceneConfig(camera=camera), **overrides)
