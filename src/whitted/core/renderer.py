"""Render entry point: scene configuration in, image out.

The Renderer class uploads a SceneConfig to the Taichi fields used by the
integrator, runs the parallel render kernel, and hands the finished
framebuffer to an output sink in a single serialized pass. Rendering is
deterministic: the kernel only fills the framebuffer, and the sink sees
pixels in row-major order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.renderer import Renderer
    >>> from src.whitted.preview.export import RasterSink
    >>> from src.whitted.scene.config import create_reference_scene
    >>>
    >>> renderer = Renderer(create_reference_scene())
    >>> image = renderer.render()
    >>> sink = RasterSink(renderer.width, renderer.height)
    >>> renderer.flush(sink)
    >>> sink.save("triangle.png")
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.whitted.camera.pinhole import setup_camera
from src.whitted.core.integrator import (
    get_hit_mask_numpy,
    get_image_numpy,
    render_frame,
    setup_render_target,
    setup_shading,
)
from src.whitted.geometry.triangle import DegenerateGeometryError
from src.whitted.preview.export import PixelSink, flush_image, save_png_from_array
from src.whitted.scene.config import SceneConfig, validate_scene
from src.whitted.scene.intersection import add_triangle, clear_scene, set_cull_behind_camera

logger = logging.getLogger(__name__)


class Renderer:
    """Renders one SceneConfig.

    Creating a Renderer uploads the configuration to the Taichi fields, so
    only the most recently created Renderer is valid to render with.

    Attributes:
        config: The scene being rendered.
        strict: Whether degenerate geometry raises DegenerateGeometryError.
    """

    def __init__(self, config: SceneConfig, *, strict: bool = False) -> None:
        """Validate and upload a scene.

        Args:
            config: The scene to render.
            strict: Raise DegenerateGeometryError for zero-area triangles
                and for renders that produce non-finite pixels. When False,
                NaN and infinite colors are passed to the sink as they are.

        Raises:
            ValueError: If the configuration is invalid.
            RuntimeError: If the scene exceeds primitive capacity.
            DegenerateGeometryError: In strict mode, for zero-area triangles.
        """
        validate_scene(config, strict=strict)

        self.config = config
        self.strict = strict
        self._image: npt.NDArray[np.float64] | None = None
        self._non_finite = 0

        self._upload()

    def _upload(self) -> None:
        """Copy the configuration into the integrator's fields."""
        config = self.config

        setup_camera(config.camera)

        clear_scene()
        for tri in config.triangles:
            add_triangle(tri.v1, tri.v2, tri.v3)
        set_cull_behind_camera(config.cull_behind_camera)

        setup_shading(
            light_position=config.light.position,
            light_color=config.light.color,
            ka=config.material.ka,
            kd=config.material.kd,
            ks=config.material.ks,
            shininess=config.material.shininess,
            ambient=config.ambient_intensity,
            background=config.background,
        )

        setup_render_target(config.width, config.height)

        logger.debug(
            "Uploaded scene: %dx%d, %d triangle(s), cull_behind_camera=%s",
            config.width,
            config.height,
            len(config.triangles),
            config.cull_behind_camera,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def non_finite_pixels(self) -> int:
        """Number of non-finite pixels in the last render."""
        return self._non_finite

    def render(self) -> npt.NDArray[np.float64]:
        """Render every pixel once.

        Returns:
            The unclamped image as a (height, width, 3) float64 array, row 0
            at the top.

        Raises:
            DegenerateGeometryError: In strict mode, if any pixel's color
                is NaN or infinite.
        """
        start_time = time.perf_counter()
        self._non_finite = render_frame()
        self._image = get_image_numpy()
        elapsed = time.perf_counter() - start_time

        logger.info("Rendered %dx%d in %.3fs", self.width, self.height, elapsed)

        if self._non_finite:
            if self.strict:
                raise DegenerateGeometryError(
                    f"{self._non_finite} pixel(s) have non-finite color"
                )
            logger.warning(
                "%d pixel(s) have non-finite color; the sink will clamp them",
                self._non_finite,
            )

        return self._image

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the last rendered image, rendering first if needed."""
        if self._image is None:
            return self.render()
        return self._image

    def get_hit_mask(self) -> npt.NDArray[np.int32]:
        """Get the (height, width) hit mask of the last render."""
        self.get_image_numpy()
        return get_hit_mask_numpy()

    def flush(self, sink: PixelSink) -> None:
        """Write every pixel of the last render to a sink, row by row."""
        flush_image(self.get_image_numpy(), sink)

    def save_png(self, filepath: str | Path, gamma: float = 1.0) -> None:
        """Save the rendered image as an 8-bit PNG.

        Args:
            filepath: Output file path.
            gamma: Gamma correction value. Default 1.0 (no correction).
        """
        save_png_from_array(self.get_image_numpy(), str(filepath), gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"triangles={len(self.config.triangles)}, strict={self.strict})"
        )


def render_scene(config: SceneConfig, sink: PixelSink, *, strict: bool = False) -> None:
    """Render a scene and write every pixel to a sink exactly once.

    Args:
        config: The scene to render.
        sink: Receives one put_pixel() call per pixel.
        strict: See Renderer.
    """
    renderer = Renderer(config, strict=strict)
    renderer.render()
    renderer.flush(sink)
