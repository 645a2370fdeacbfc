"""Output sinks and image export for rendered frames.

The renderer produces unclamped linear float colors. Converting them to
8-bit values is the sink's job and uses the rule

    channel = clamp(round(c * 255), 0, 255)

with round-half-up. Non-finite values are clamped as well: NaN becomes 0,
+inf becomes 255 and -inf becomes 0.

A PixelSink is anything with a put_pixel(x, y, color) method. RasterSink
is the in-memory implementation: a pre-allocated uint8 raster that writes
a small block per pixel. The default block is one pixel wide and two
tall. Because pixels are flushed in
row-major order, each row's spill is overwritten by the next row, and the
final raster equals a 1x1 footprint everywhere.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from src.whitted.preview.export import RasterSink, flush_image
    >>> sink = RasterSink(512, 512)
    >>> flush_image(image, sink)
    >>> sink.save("output.png")
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


class PixelSink(Protocol):
    """A 2-D raster surface that accepts per-pixel color writes."""

    def put_pixel(self, x: int, y: int, color: Sequence[float]) -> None:
        """Write one pixel; color channels are nominally in [0, 1]."""
        ...


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image to 8-bit with the sink's rounding rule.

    Args:
        image: Array of any shape with channels nominally in [0, 1].

    Returns:
        Array of the same shape with dtype uint8.
    """
    values = np.nan_to_num(
        np.asarray(image, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0
    )
    # floor(x + 0.5) rounds halves up, unlike np.rint
    scaled = np.floor(values * 255.0 + 0.5)
    return np.clip(scaled, 0, 255).astype(np.uint8)


def color_to_rgb8(color: Sequence[float]) -> tuple[int, int, int]:
    """Convert one float color to an (R, G, B) tuple of 8-bit ints."""
    r, g, b = image_to_uint8(np.asarray(color, dtype=np.float64)).tolist()
    return (r, g, b)


class RasterSink:
    """In-memory 8-bit RGB raster implementing PixelSink.

    Attributes:
        width: Raster width in pixels.
        height: Raster height in pixels.
        footprint: (block width, block height) written per put_pixel().
        pixels: The raster as a (height, width, 3) uint8 array.
    """

    def __init__(self, width: int, height: int, footprint: tuple[int, int] = (1, 2)) -> None:
        """Allocate a black raster.

        Args:
            width: Raster width in pixels.
            height: Raster height in pixels.
            footprint: Block size written per pixel. (1, 2) is one pixel wide
                and two tall; (1, 1) writes exactly one pixel.

        Raises:
            ValueError: If dimensions or footprint are not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {width}x{height}")
        if footprint[0] <= 0 or footprint[1] <= 0:
            raise ValueError(f"Footprint must be positive, got {footprint}")

        self.width = width
        self.height = height
        self.footprint = footprint
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self.writes = 0

    def put_pixel(self, x: int, y: int, color: Sequence[float]) -> None:
        """Write a footprint-sized block with its top-left corner at (x, y).

        Parts of the block outside the raster are dropped.
        """
        block_w, block_h = self.footprint
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = x + block_w, y + block_h
        if x1 > x0 and y1 > y0:
            self.pixels[y0:y1, x0:x1] = color_to_rgb8(color)
        self.writes += 1

    def to_image(self) -> PILImage.Image:
        """Get the raster as a Pillow image."""
        return PILImage.fromarray(self.pixels)

    def save(self, filepath: str) -> None:
        """Save the raster to a file; format follows the extension."""
        self.to_image().save(filepath)


def flush_image(image: npt.NDArray[np.floating], sink: PixelSink) -> None:
    """Write every pixel of an image to a sink in row-major order.

    Args:
        image: Float image of shape (height, width, 3), row 0 at the top.
        sink: Receives exactly one put_pixel() call per pixel.
    """
    height, width = image.shape[:2]
    for y in range(height):
        for x in range(width):
            sink.put_pixel(x, y, image[y, x])


def apply_gamma(
    image: npt.NDArray[np.floating],
    gamma: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 1.0 leaves the image unchanged.

    Returns:
        Gamma corrected image.
    """
    if gamma == 1.0:
        return np.asarray(image, dtype=np.float64)

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    return np.power(image, 1.0 / gamma)


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a float image as an 8-bit PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0, no correction).
    """
    image_uint8 = image_to_uint8(apply_gamma(image, gamma))

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
