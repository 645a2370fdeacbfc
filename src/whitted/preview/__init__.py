"""Preview module for rendered output.

Components:
    export: Pixel sinks, 8-bit conversion and PNG export

Example:
    >>> from src.whitted.preview import RasterSink
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(config)
    >>> renderer.render()
    >>> sink = RasterSink(renderer.width, renderer.height)
    >>> renderer.flush(sink)
    >>> sink.save("output.png")
"""

from src.whitted.preview.export import (
    PixelSink,
    RasterSink,
    apply_gamma,
    color_to_rgb8,
    compute_rmse,
    flush_image,
    image_to_uint8,
    save_png_from_array,
)

__all__ = [
    # Sinks
    "PixelSink",
    "RasterSink",
    "flush_image",
    # Conversion and export
    "color_to_rgb8",
    "image_to_uint8",
    "apply_gamma",
    "save_png_from_array",
    "compute_rmse",
]
