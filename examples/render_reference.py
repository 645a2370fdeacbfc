#!/usr/bin/env python3
"""Render the reference triangle scene.

This script renders a single red triangle lit by a white point light with
Phong shading. By default it uses the built-in reference scene; a JSON
scene file written by save_scene() can be given instead.

Usage:
    python -m examples.render_reference [options]

Options:
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --output OUTPUT     Output file path (default: triangle.png)
    --scene SCENE       JSON scene file (default: built-in reference scene)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --strict            Fail on zero-area triangles and non-finite pixels
    --quiet             Suppress progress output

Example:
    python -m examples.render_reference --width 256 --height 256
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference triangle scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: 512, or the scene file's value)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: 512, or the scene file's value)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="triangle.png",
        help="Output file path (default: triangle.png)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in reference scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend; the GPU must support 64-bit floats (default: cpu)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on zero-area triangles and non-finite pixels",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_reference(
    width: int | None = None,
    height: int | None = None,
    output_path: str = "triangle.png",
    scene_path: str | None = None,
    strict: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it as a PNG.

    Args:
        width: Image width in pixels. None keeps the scene's resolution.
        height: Image height in pixels. None keeps the scene's resolution.
        output_path: Output file path (PNG).
        scene_path: JSON scene file, or None for the reference scene.
        strict: Raise on degenerate geometry instead of clamping.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.renderer import Renderer
    from src.whitted.preview.export import RasterSink
    from src.whitted.scene.config import create_reference_scene, load_scene

    if scene_path is None:
        config = create_reference_scene()
    else:
        config = load_scene(scene_path)

    if width is not None or height is not None:
        camera = replace(
            config.camera,
            resolution_x=width if width is not None else config.width,
            resolution_y=height if height is not None else config.height,
        )
        config = replace(config, camera=camera)

    if not quiet:
        source = scene_path or "reference scene"
        print(f"Rendering {source} ({config.width}x{config.height})...")

    start_time = time.time()

    renderer = Renderer(config, strict=strict)
    renderer.render()

    sink = RasterSink(renderer.width, renderer.height)
    renderer.flush(sink)

    output_file = Path(output_path)
    sink.save(str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        if renderer.non_finite_pixels:
            print(f"Warning: {renderer.non_finite_pixels} non-finite pixel(s) were clamped")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, fast_math=False)

    try:
        render_reference(
            width=args.width,
            height=args.height,
            output_path=args.output,
            scene_path=args.scene,
            strict=args.strict,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
