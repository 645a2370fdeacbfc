"""Tests for the preview module.

This module tests the preview/export functionality including:
- 8-bit conversion with round-half-up and clamping
- Handling of NaN and infinite channels
- RasterSink footprint writes and clipping
- Row-major flushing of an image into a sink
- PNG export and RMSE computation
"""

import math

import numpy as np
import pytest
from PIL import Image as PILImage


class RecordingSink:
    """PixelSink that records every call."""

    def __init__(self):
        self.calls = []

    def put_pixel(self, x, y, color):
        self.calls.append((x, y, tuple(float(c) for c in color)))


class TestColorConversion:
    """Test float to 8-bit conversion."""

    def test_black_and_white(self):
        """Test the ends of the nominal range."""
        from src.whitted.preview.export import color_to_rgb8

        assert color_to_rgb8((0.0, 0.0, 0.0)) == (0, 0, 0)
        assert color_to_rgb8((1.0, 1.0, 1.0)) == (255, 255, 255)

    def test_rounds_half_up(self):
        """Test that an exact half rounds up."""
        from src.whitted.preview.export import color_to_rgb8

        # 0.5 * 255 = 127.5 exactly
        assert color_to_rgb8((0.5, 0.5, 0.0)) == (128, 128, 0)

    def test_rounds_to_nearest(self):
        """Test ordinary rounding below and above a half."""
        from src.whitted.preview.export import color_to_rgb8

        assert color_to_rgb8((0.2, 0.6, 0.001)) == (51, 153, 0)

    def test_clamps_out_of_range(self):
        """Test that unclamped shader output saturates."""
        from src.whitted.preview.export import color_to_rgb8

        assert color_to_rgb8((2.2, -0.5, 1.0001)) == (255, 0, 255)

    def test_non_finite_channels(self):
        """Test that NaN maps to 0, +inf to 255 and -inf to 0."""
        from src.whitted.preview.export import color_to_rgb8

        assert color_to_rgb8((math.nan, math.inf, -math.inf)) == (0, 255, 0)

    def test_returns_python_ints(self):
        """Test that channels are plain ints."""
        from src.whitted.preview.export import color_to_rgb8

        assert all(type(c) is int for c in color_to_rgb8((0.1, 0.2, 0.3)))

    def test_image_to_uint8_matches_per_pixel(self):
        """Test that the vectorized conversion equals color_to_rgb8."""
        from src.whitted.preview.export import color_to_rgb8, image_to_uint8

        rng = np.random.default_rng(7)
        image = rng.uniform(-0.5, 1.5, size=(6, 5, 3))
        image[0, 0] = [math.nan, math.inf, -math.inf]

        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.shape == (6, 5, 3)
        for y in range(6):
            for x in range(5):
                assert tuple(result[y, x]) == color_to_rgb8(image[y, x])


class TestRasterSink:
    """Test the in-memory raster sink."""

    def test_starts_black(self):
        """Test the initial raster."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(4, 3)

        assert sink.pixels.shape == (3, 4, 3)
        assert sink.pixels.dtype == np.uint8
        assert not sink.pixels.any()

    def test_default_footprint_writes_two_rows(self):
        """Test that one put_pixel covers (x, y) and (x, y + 1)."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(4, 4)
        sink.put_pixel(1, 1, (1.0, 0.0, 0.0))

        assert tuple(sink.pixels[1, 1]) == (255, 0, 0)
        assert tuple(sink.pixels[2, 1]) == (255, 0, 0)
        assert int(sink.pixels.sum()) == 2 * 255
        assert sink.writes == 1

    def test_footprint_clipped_at_last_row(self):
        """Test that the spill below the raster is dropped."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(2, 2)
        sink.put_pixel(0, 1, (0.0, 1.0, 0.0))

        assert tuple(sink.pixels[1, 0]) == (0, 255, 0)
        assert int(sink.pixels.sum()) == 255

    def test_single_pixel_footprint(self):
        """Test footprint=(1, 1) writes exactly one pixel."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(3, 3, footprint=(1, 1))
        sink.put_pixel(2, 0, (0.0, 0.0, 1.0))

        assert tuple(sink.pixels[0, 2]) == (0, 0, 255)
        assert int(sink.pixels.sum()) == 255

    def test_negative_origin_is_clipped(self):
        """Test that a block starting left of or above the raster does not wrap."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(4, 4)
        sink.put_pixel(-2, 0, (1.0, 1.0, 1.0))
        sink.put_pixel(0, -1, (1.0, 0.0, 0.0))

        assert not sink.pixels[:, 1:].any()
        assert tuple(sink.pixels[0, 0]) == (255, 0, 0)
        assert int(sink.pixels.sum()) == 255
        assert sink.writes == 2

    @pytest.mark.parametrize(
        "args",
        [(0, 4), (4, -1), (4, 4, (0, 1)), (4, 4, (1, 0))],
    )
    def test_invalid_sink_raises(self, args):
        """Test that empty rasters and footprints are rejected."""
        from src.whitted.preview.export import RasterSink

        with pytest.raises(ValueError):
            RasterSink(*args)

    def test_save_png(self, tmp_path):
        """Test writing the raster to disk."""
        from src.whitted.preview.export import RasterSink

        sink = RasterSink(5, 4)
        sink.put_pixel(0, 0, (1.0, 0.5, 0.0))
        path = tmp_path / "raster.png"
        sink.save(str(path))

        loaded = np.array(PILImage.open(path))
        assert loaded.shape == (4, 5, 3)
        assert tuple(loaded[0, 0]) == (255, 128, 0)
        np.testing.assert_array_equal(loaded, sink.pixels)


class TestFlushImage:
    """Test writing an image into a sink."""

    def test_one_call_per_pixel_in_row_major_order(self):
        """Test call count and ordering."""
        from src.whitted.preview.export import flush_image

        image = np.zeros((3, 4, 3))
        sink = RecordingSink()
        flush_image(image, sink)

        coords = [(x, y) for x, y, _ in sink.calls]
        assert coords == [(x, y) for y in range(3) for x in range(4)]

    def test_colors_are_passed_unclamped(self):
        """Test that the sink receives the float colors unchanged."""
        from src.whitted.preview.export import flush_image

        image = np.zeros((1, 2, 3))
        image[0, 1] = [2.2, -1.0, 0.5]
        sink = RecordingSink()
        flush_image(image, sink)

        assert sink.calls[1] == (1, 0, (2.2, -1.0, 0.5))

    def test_tall_footprint_matches_single_pixel_after_flush(self):
        """Test that a row-major flush hides the 1x2 spill entirely."""
        from src.whitted.preview.export import RasterSink, flush_image, image_to_uint8

        rng = np.random.default_rng(3)
        image = rng.uniform(0.0, 1.0, size=(7, 9, 3))

        tall = RasterSink(9, 7)
        single = RasterSink(9, 7, footprint=(1, 1))
        flush_image(image, tall)
        flush_image(image, single)

        np.testing.assert_array_equal(tall.pixels, single.pixels)
        np.testing.assert_array_equal(tall.pixels, image_to_uint8(image))


class TestExport:
    """Test PNG export helpers."""

    def test_save_png_from_array(self, tmp_path):
        """Test writing a float image as an 8-bit PNG."""
        from src.whitted.preview.export import save_png_from_array

        image = np.zeros((2, 3, 3))
        image[1, 2] = [0.5, 2.0, math.nan]
        path = tmp_path / "image.png"
        save_png_from_array(image, str(path))

        loaded = np.array(PILImage.open(path))
        assert loaded.shape == (2, 3, 3)
        assert tuple(loaded[1, 2]) == (128, 255, 0)
        assert tuple(loaded[0, 0]) == (0, 0, 0)

    def test_apply_gamma(self):
        """Test that gamma 1.0 is the identity and 2.0 takes square roots."""
        from src.whitted.preview.export import apply_gamma

        image = np.full((2, 2, 3), 0.25)

        np.testing.assert_array_equal(apply_gamma(image, 1.0), image)
        np.testing.assert_allclose(apply_gamma(image, 2.0), 0.5)

    def test_compute_rmse(self):
        """Test RMSE of identical and offset images."""
        from src.whitted.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        b = np.full((4, 4, 3), 0.5)

        assert compute_rmse(a, a) == 0.0
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_compute_rmse_shape_mismatch(self):
        """Test that mismatched shapes raise ValueError."""
        from src.whitted.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
